"""Sales app configuration."""

from django.apps import AppConfig


class SalesConfig(AppConfig):
    """Checkout, orders and coupons."""

    name = "storefront.sales"
    label = "sales"
    verbose_name = "Sales"
