"""Reports app configuration."""

from django.apps import AppConfig


class ReportsConfig(AppConfig):
    """Back-office dashboard, analytics and logs."""

    name = "storefront.reports"
    label = "reports"
    verbose_name = "Reports"
