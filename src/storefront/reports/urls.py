"""Reports URL patterns, mounted under ``/api/v1/admin/``."""

from django.urls import path

from . import views

app_name = "reports"

urlpatterns = [
    path("dashboard", views.DashboardView.as_view(), name="dashboard"),

    # Analytics
    path("analytics/sales", views.SalesAnalyticsView.as_view(), name="analytics-sales"),
    path("analytics/products", views.ProductAnalyticsView.as_view(), name="analytics-products"),
    path("analytics/customers", views.CustomerAnalyticsView.as_view(), name="analytics-customers"),
    path("analytics/traffic", views.TrafficAnalyticsView.as_view(), name="analytics-traffic"),
    path("analytics/revenue", views.RevenueAnalyticsView.as_view(), name="analytics-revenue"),

    path("logs", views.LogListView.as_view(), name="logs"),
]
