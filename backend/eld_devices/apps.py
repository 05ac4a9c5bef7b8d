from django.apps import AppConfig


class EldDevicesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "eld_devices"
    verbose_name = "ELD Devices"
