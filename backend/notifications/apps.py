from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "notifications"
    verbose_name = "Ledger Event Notifications"

    def ready(self):
        # Connect the @receiver handlers
        from . import signals  # noqa: F401
