from django.apps import AppConfig


class SchedulingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "scheduling"
    verbose_name = "Clinic scheduling"

    def ready(self):
        from . import signals  # noqa: F401
