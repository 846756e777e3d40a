"""Catalog app configuration."""

from django.apps import AppConfig


class CatalogConfig(AppConfig):
    """Products, categories and search."""

    name = "storefront.catalog"
    label = "catalog"
    verbose_name = "Catalog"
