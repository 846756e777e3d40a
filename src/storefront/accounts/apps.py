"""Accounts app configuration."""

from django.apps import AppConfig


class AccountsConfig(AppConfig):
    """Customer authentication and back-office user management."""

    name = "storefront.accounts"
    label = "accounts"
    verbose_name = "Accounts"
