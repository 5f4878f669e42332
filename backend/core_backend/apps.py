from django.apps import AppConfig


class CoreBackendConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core_backend"
    verbose_name = "Core Backend"

    def ready(self):
        # Register the setting_changed receiver that reloads ledger policy
        import core_backend.config  # noqa
