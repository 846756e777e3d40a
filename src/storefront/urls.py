"""URL configuration for the Storefront API project."""

from django.urls import include, path

from storefront.core.views import health_check

urlpatterns = [
    # Health check
    path("health/", health_check, name="health_check"),

    # Customer accounts and back-office users
    path("api/v1/", include("storefront.accounts.urls", namespace="accounts")),

    # Products, categories and search
    path("api/v1/", include("storefront.catalog.urls", namespace="catalog")),

    # Checkout, orders and coupons
    path("api/v1/", include("storefront.sales.urls", namespace="sales")),

    # Dashboard, analytics and logs
    path("api/v1/admin/", include("storefront.reports.urls", namespace="reports")),
]

handler404 = "storefront.core.views.page_not_found"
handler500 = "storefront.core.views.server_error"
