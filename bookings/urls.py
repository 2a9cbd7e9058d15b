from django.urls import path

from . import views

app_name = "bookings"

urlpatterns = [
    path("turf/<int:turf_pk>/book/", views.book_slot_view, name="book"),
    path("mine/", views.player_dashboard, name="player_dashboard"),
    path("<int:pk>/cancel/", views.cancel_booking_view, name="cancel"),
]
