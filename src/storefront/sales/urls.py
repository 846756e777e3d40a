"""Sales URL patterns."""

from django.urls import path

from . import views

app_name = "sales"

urlpatterns = [
    # Checkout and customer orders
    path("checkout", views.CheckoutView.as_view(), name="checkout"),
    path("orders", views.OrderListView.as_view(), name="order-list"),
    path("orders/<int:order_id>", views.OrderDetailView.as_view(), name="order-detail"),
    path("orders/<int:order_id>/cancel", views.OrderCancelView.as_view(), name="order-cancel"),
    path("orders/<int:order_id>/return", views.OrderReturnView.as_view(), name="order-return"),

    # Coupons
    path("coupons/validate", views.CouponValidateView.as_view(), name="coupon-validate"),

    # Back office
    path("admin/orders", views.AdminOrderListView.as_view(), name="admin-order-list"),
    path("admin/orders/<int:order_id>", views.AdminOrderDetailView.as_view(), name="admin-order-detail"),
    path("admin/orders/<int:order_id>/status", views.AdminOrderStatusView.as_view(), name="admin-order-status"),
    path("admin/coupons", views.AdminCouponListView.as_view(), name="admin-coupon-list"),
    path("admin/coupons/<int:coupon_id>", views.AdminCouponDetailView.as_view(), name="admin-coupon-detail"),
]
