"""OpenCart schema app configuration."""

from django.apps import AppConfig


class OpenCartConfig(AppConfig):
    """Unmanaged models for the OpenCart database and shared domain services."""

    name = "storefront.opencart"
    label = "opencart"
    verbose_name = "OpenCart"
