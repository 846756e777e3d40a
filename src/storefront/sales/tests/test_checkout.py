"""Tests for POST /api/v1/checkout"""

from decimal import Decimal

import pytest
from django.db import DatabaseError
from django.urls import reverse
from django.utils import timezone

from storefront.conftest import add_to_cart, create_customer
from storefront.opencart.models import (
    Address,
    CartItem,
    Coupon,
    CouponHistory,
    Order,
    OrderHistory,
    OrderProduct,
    OrderTotal,
    Product,
    ProductSpecial,
)


@pytest.fixture
def cart(customer, red_shirt, blue_jeans):
    """Two shirts and one pair of jeans in the customer's app cart."""
    add_to_cart(customer, red_shirt, 2)
    add_to_cart(customer, blue_jeans, 1)
    return customer


def checkout(client, auth, address, **extra):
    payload = {"shipping_address_id": address.address_id, "payment_method": "cod", **extra}
    return client.post(reverse("sales:checkout"), payload, content_type="application/json", headers=auth)


class TestCheckout:
    def test_creates_order_from_cart(self, client, auth, cart, address, red_shirt, blue_jeans, order_statuses):
        response = checkout(client, auth, address, comment="Leave at the door")

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Order created successfully"
        assert data["order"]["status"] == "pending"
        # 2 x 50 + 120, plus 15 flat shipping
        assert data["order"]["total"] == 235.0

        order = Order.objects.get(order_id=data["order"]["id"])
        assert order.customer_id == cart.customer_id
        assert order.order_status_id == 1
        assert order.shipping_city == "Riyadh"
        assert order.shipping_country == "Saudi Arabia"
        assert order.shipping_zone == "Riyadh"
        assert order.payment_method == "cod"
        assert order.comment == "Leave at the door"
        assert order.order_from == "mobile_app"

        lines = {line.product_id: line for line in OrderProduct.objects.filter(order_id=order.order_id)}
        assert lines[red_shirt.product_id].quantity == 2
        assert lines[red_shirt.product_id].total == Decimal("100.00")
        assert lines[red_shirt.product_id].name == "Red Shirt"

        codes = list(OrderTotal.objects.filter(order_id=order.order_id).order_by("sort_order").values_list("code", flat=True))
        assert codes == ["sub_total", "shipping", "tax", "total"]
        assert OrderHistory.objects.filter(order_id=order.order_id, order_status_id=1).exists()

    def test_decrements_stock_and_clears_cart(self, client, auth, cart, address, red_shirt, blue_jeans):
        checkout(client, auth, address)

        assert Product.objects.get(pk=red_shirt.pk).quantity == 8
        assert Product.objects.get(pk=blue_jeans.pk).quantity == 2
        assert not CartItem.objects.filter(customer_id=cart.customer_id).exists()

    def test_uses_special_price(self, client, auth, customer, address, red_shirt):
        ProductSpecial.objects.create(product_id=red_shirt.product_id, price=Decimal("45.00"))
        add_to_cart(customer, red_shirt, 1)

        response = checkout(client, auth, address)

        assert response.json()["order"]["total"] == 60.0
        assert OrderProduct.objects.get(product_id=red_shirt.product_id).price == Decimal("45.00")

    def test_merges_repeated_cart_lines(self, client, auth, customer, address, red_shirt):
        add_to_cart(customer, red_shirt, 1)
        add_to_cart(customer, red_shirt, 2)

        response = checkout(client, auth, address)

        line = OrderProduct.objects.get(order_id=response.json()["order"]["id"])
        assert line.quantity == 3


# =============================================================================
# Coupons at checkout
# =============================================================================


class TestCheckoutCoupon:
    def test_applies_coupon(self, client, auth, cart, address):
        coupon = Coupon.objects.create(
            name="Ten off", code="SAVE10", type="P", discount=Decimal("10"), status=True, date_added=timezone.now()
        )

        response = checkout(client, auth, address, coupon_code="SAVE10")

        assert response.status_code == 201
        # 220 subtotal - 22 discount + 15 shipping
        assert response.json()["order"]["total"] == 213.0
        order_id = response.json()["order"]["id"]
        coupon_line = OrderTotal.objects.get(order_id=order_id, code="coupon")
        assert coupon_line.value == Decimal("-22.00")
        history = CouponHistory.objects.get(coupon_id=coupon.coupon_id)
        assert history.order_id == order_id
        assert history.customer_id == cart.customer_id

    def test_discount_never_exceeds_subtotal(self, client, auth, customer, address, red_shirt):
        Coupon.objects.create(
            name="Legacy", code="HALFPLUS", type="P", discount=Decimal("150"), status=True, date_added=timezone.now()
        )
        add_to_cart(customer, red_shirt, 2)

        response = checkout(client, auth, address, coupon_code="HALFPLUS")

        assert response.status_code == 201
        # Only shipping is left to pay
        assert response.json()["order"]["total"] == 15.0
        order_id = response.json()["order"]["id"]
        assert OrderTotal.objects.get(order_id=order_id, code="coupon").value == Decimal("-100.00")

    def test_invalid_coupon_leaves_cart_untouched(self, client, auth, cart, address, red_shirt):
        response = checkout(client, auth, address, coupon_code="NOPE")

        assert response.status_code == 400
        assert response.json() == {"message": "Invalid or expired coupon"}
        assert not Order.objects.exists()
        assert Product.objects.get(pk=red_shirt.pk).quantity == 10
        assert CartItem.objects.filter(customer_id=cart.customer_id).count() == 2


# =============================================================================
# Failures
# =============================================================================


class TestCheckoutErrors:
    def test_requires_token(self, client, address):
        response = client.post(
            reverse("sales:checkout"),
            {"shipping_address_id": address.address_id, "payment_method": "cod"},
            content_type="application/json",
        )

        assert response.status_code == 401

    def test_empty_cart(self, client, auth, address):
        response = checkout(client, auth, address)

        assert response.status_code == 400
        assert response.json() == {"message": "Cart is empty"}

    def test_out_of_stock(self, client, auth, customer, address, blue_jeans):
        add_to_cart(customer, blue_jeans, 4)

        response = checkout(client, auth, address)

        assert response.status_code == 400
        assert response.json() == {"message": f"Product out of stock: {blue_jeans.model}"}
        assert Product.objects.get(pk=blue_jeans.pk).quantity == 3

    def test_unknown_address(self, client, auth, cart):
        response = client.post(
            reverse("sales:checkout"),
            {"shipping_address_id": 999, "payment_method": "cod"},
            content_type="application/json",
            headers=auth,
        )

        assert response.status_code == 422
        assert "shipping_address_id" in response.json()["errors"]

    def test_address_of_another_customer(self, client, auth, cart, db):
        other = create_customer("other@example.com")
        address = Address.objects.create(customer_id=other.customer_id, firstname="O", lastname="C", address_1="x", city="y")

        response = checkout(client, auth, address)

        assert response.status_code == 400
        assert response.json() == {"message": "Invalid shipping address"}


class TestCheckoutRollback:
    """A failure partway through checkout leaves no trace."""

    def test_failed_totals_roll_back_order(self, client, auth, cart, address, red_shirt, blue_jeans, monkeypatch):
        def fail(*args, **kwargs):
            raise DatabaseError("disk full")

        monkeypatch.setattr(OrderTotal.objects, "bulk_create", fail)

        response = checkout(client, auth, address)

        assert response.status_code == 500
        assert response.json() == {"message": "Failed to create order", "error": "disk full"}
        assert not Order.objects.exists()
        assert not OrderProduct.objects.exists()
        assert Product.objects.get(pk=red_shirt.pk).quantity == 10
        assert Product.objects.get(pk=blue_jeans.pk).quantity == 3
        assert CartItem.objects.filter(customer_id=cart.customer_id).count() == 2
