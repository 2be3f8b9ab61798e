from django.apps import AppConfig


class ModerationConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "app.moderation"
    verbose_name = "Moderação"

    def ready(self):
        from app.moderation import signals  # noqa: F401
