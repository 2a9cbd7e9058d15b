from django.urls import path

from . import views

app_name = "turfs"

urlpatterns = [
    # Public
    path("", views.index, name="index"),
    path("turfs/<int:pk>/", views.turf_detail, name="turf_detail"),

    # Owner
    path("owner/", views.OwnerDashboardView.as_view(), name="owner_dashboard"),
    path("owner/turfs/new/", views.TurfCreateView.as_view(), name="turf_new"),
    path("owner/turfs/<int:pk>/edit/", views.TurfUpdateView.as_view(), name="turf_edit"),
    path("owner/turfs/<int:pk>/toggle-active/", views.TurfToggleActiveView.as_view(), name="turf_toggle_active"),
    path("owner/turfs/<int:pk>/photos/<int:image_pk>/delete/", views.TurfImageDeleteView.as_view(), name="turf_image_delete"),

    # Slots
    path("owner/turfs/<int:pk>/slots/", views.TurfSlotsView.as_view(), name="turf_slots"),
    path("owner/turfs/<int:pk>/slots/<int:slot_pk>/toggle/", views.TurfSlotToggleView.as_view(), name="turf_slot_toggle"),
    path("owner/turfs/<int:pk>/slots/<int:slot_pk>/delete/", views.TurfSlotDeleteView.as_view(), name="turf_slot_delete"),
]
