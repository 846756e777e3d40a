"""Core app configuration."""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Configuration for the core application."""

    name = "storefront.core"
    verbose_name = "Storefront Core"
    default_auto_field = "django.db.models.BigAutoField"
