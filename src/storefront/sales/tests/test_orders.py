"""Tests for the signed-in customer's order endpoints."""

from datetime import timedelta

import pytest
from django.urls import reverse
from django.utils import timezone

from storefront.conftest import bearer, create_customer, create_order
from storefront.core.models import ApiToken
from storefront.opencart.models import Order, OrderHistory, Return
from storefront.opencart.orders import add_order_history


@pytest.fixture
def order(customer, red_shirt, blue_jeans, order_statuses):
    """A pending order with two products."""
    order = create_order(customer, [(red_shirt, 2), (blue_jeans, 1)])
    add_order_history(order.order_id, 1, "Order created")
    return order


class TestOrderList:
    """Tests for GET /api/v1/orders"""

    def test_lists_own_orders_newest_first(self, client, auth, customer, red_shirt, order_statuses):
        older = create_order(customer, [(red_shirt, 1)], date_added=timezone.now() - timedelta(days=2))
        newer = create_order(customer, [(red_shirt, 1)], status_id=5)
        create_order(create_customer("other@example.com"), [(red_shirt, 1)])

        response = client.get(reverse("sales:order-list"), headers=auth)

        assert response.status_code == 200
        data = response.json()
        assert [row["id"] for row in data["data"]] == [newer.order_id, older.order_id]
        assert data["data"][0]["status"] == "Complete"
        assert data["data"][0]["total"] == 50.0
        assert data["meta"]["total"] == 2

    def test_unknown_status_name(self, client, auth, customer, red_shirt, order_statuses):
        create_order(customer, [(red_shirt, 1)], status_id=42)

        response = client.get(reverse("sales:order-list"), headers=auth)

        assert response.json()["data"][0]["status"] == "Unknown"


class TestOrderDetail:
    """Tests for GET /api/v1/orders/<id>"""

    def test_detail(self, client, auth, order):
        response = client.get(reverse("sales:order-detail", args=[order.order_id]), headers=auth)

        assert response.status_code == 200
        data = response.json()
        assert data["order"]["id"] == order.order_id
        assert data["order"]["status"] == "Pending"
        assert [line["quantity"] for line in data["products"]] == [2, 1]
        assert data["history"][0]["status"] == "Pending"
        assert data["history"][0]["comment"] == "Order created"

    def test_other_customers_order_is_not_found(self, client, order):
        other = create_customer("other@example.com")
        _, token = ApiToken.objects.issue(other.customer_id, [ApiToken.SCOPE_USER])

        response = client.get(reverse("sales:order-detail", args=[order.order_id]), headers=bearer(token))

        assert response.status_code == 404
        assert response.json() == {"message": "Order not found"}


class TestOrderCancel:
    """Tests for POST /api/v1/orders/<id>/cancel"""

    def test_cancel_pending_order(self, client, auth, order):
        response = client.post(reverse("sales:order-cancel", args=[order.order_id]), headers=auth)

        assert response.status_code == 200
        assert response.json()["order"] == {"id": order.order_id, "status": "Canceled"}
        assert Order.objects.get(pk=order.pk).order_status_id == 7
        history = OrderHistory.objects.filter(order_id=order.order_id).latest("order_history_id")
        assert history.order_status_id == 7
        assert history.notify is True

    def test_completed_order_cannot_be_cancelled(self, client, auth, order):
        Order.objects.filter(pk=order.pk).update(order_status_id=5)

        response = client.post(reverse("sales:order-cancel", args=[order.order_id]), headers=auth)

        assert response.status_code == 404
        assert response.json() == {"message": "Order not found or cannot be cancelled"}


class TestOrderReturn:
    """Tests for POST /api/v1/orders/<id>/return"""

    def test_one_return_per_product(self, client, auth, order, red_shirt, blue_jeans):
        response = client.post(
            reverse("sales:order-return", args=[order.order_id]),
            {"reason": "Wrong size", "product_ids": [red_shirt.product_id, blue_jeans.product_id]},
            content_type="application/json",
            headers=auth,
        )

        assert response.status_code == 200
        data = response.json()["return"]
        assert data["order_id"] == order.order_id
        assert data["status"] == "pending"
        assert len(data["ids"]) == 2

        returned = Return.objects.get(order_id=order.order_id, product_id=red_shirt.product_id)
        assert returned.quantity == 2
        assert returned.product == "Red Shirt"
        assert returned.comment == "Wrong size"
        assert returned.return_status_id == 1

    def test_product_not_on_order(self, client, auth, order, red_shirt):
        response = client.post(
            reverse("sales:order-return", args=[order.order_id]),
            {"reason": "Wrong size", "product_ids": [red_shirt.product_id, 999]},
            content_type="application/json",
            headers=auth,
        )

        assert response.status_code == 422
        assert response.json()["errors"] == {
            "product_ids": {"1": ["The selected product is not part of this order."]}
        }
        assert not Return.objects.exists()

    def test_requires_reason_and_products(self, client, auth, order):
        response = client.post(
            reverse("sales:order-return", args=[order.order_id]),
            {"product_ids": []},
            content_type="application/json",
            headers=auth,
        )

        assert response.status_code == 422
        assert {"reason", "product_ids"} <= set(response.json()["errors"])
