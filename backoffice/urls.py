from django.urls import path
from . import views

app_name = "backoffice"

urlpatterns = [
    path("", views.dashboard, name="dashboard"),
    path("turfs/<int:pk>/<str:action>/", views.decide_turf, name="decide_turf"),
]
