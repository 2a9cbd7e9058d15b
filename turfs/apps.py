from django.apps import AppConfig


class TurfsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "turfs"
