"""Tests for the back-office analytics endpoints."""

from datetime import datetime, timedelta
from decimal import Decimal

from django.urls import reverse
from django.utils import timezone

from storefront.conftest import create_customer, create_order
from storefront.opencart.models import Country, CustomerActivity, CustomerOnline, CustomerSearch


# =============================================================================
# Sales
# =============================================================================


class TestSalesAnalytics:
    """Tests for GET /api/v1/admin/analytics/sales"""

    def test_weekly_buckets(self, client, admin_auth, customer, red_shirt):
        create_order(customer, [(red_shirt, 1)], date_added=datetime(2024, 1, 10, 9))
        create_order(customer, [(red_shirt, 1)], date_added=datetime(2024, 1, 12, 18))
        create_order(customer, [(red_shirt, 1)], date_added=datetime(2024, 1, 20, 11))
        create_order(customer, [(red_shirt, 1)], date_added=datetime(2024, 2, 5, 11))
        create_order(customer, [(red_shirt, 1)], date_added=datetime(2024, 1, 15, 11), status_id=0)

        response = client.get(
            reverse("reports:analytics-sales"),
            {"range": "custom", "start_date": "2024-01-01", "end_date": "2024-01-31", "group_by": "week"},
            headers=admin_auth,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["data"] == [
            {"date": "2024-01-08", "orders_count": 2, "total_revenue": 100.0, "average_order_value": 50.0},
            {"date": "2024-01-15", "orders_count": 1, "total_revenue": 50.0, "average_order_value": 50.0},
        ]
        assert data["summary"] == {"total_orders": 3, "total_revenue": 150.0, "average_order_value": 50.0}
        assert data["date_range"] == {"start": "2024-01-01 00:00:00", "end": "2024-01-31 23:59:59", "group_by": "week"}

    def test_end_of_range_day_is_included(self, client, admin_auth, customer, red_shirt):
        create_order(customer, [(red_shirt, 1)], date_added=datetime(2024, 1, 31, 23, 30))

        response = client.get(
            reverse("reports:analytics-sales"),
            {"range": "custom", "start_date": "2024-01-01", "end_date": "2024-01-31", "group_by": "month"},
            headers=admin_auth,
        )

        assert response.json()["data"] == [
            {"date": "2024-01", "orders_count": 1, "total_revenue": 50.0, "average_order_value": 50.0}
        ]

    def test_custom_range_requires_dates(self, client, admin_auth):
        response = client.get(reverse("reports:analytics-sales"), {"range": "custom"}, headers=admin_auth)

        assert response.status_code == 422
        assert {"start_date", "end_date"} <= set(response.json()["errors"])

    def test_end_before_start(self, client, admin_auth):
        response = client.get(
            reverse("reports:analytics-sales"),
            {"range": "custom", "start_date": "2024-02-01", "end_date": "2024-01-01"},
            headers=admin_auth,
        )

        assert response.status_code == 422


# =============================================================================
# Products and customers
# =============================================================================


class TestProductAnalytics:
    """Tests for GET /api/v1/admin/analytics/products"""

    def test_best_sellers(self, client, admin_auth, customer, red_shirt, blue_jeans):
        create_order(customer, [(red_shirt, 3), (blue_jeans, 1)])

        data = client.get(reverse("reports:analytics-products"), {"range": "all"}, headers=admin_auth).json()

        assert [(row["product_id"], row["total_sold"]) for row in data["data"]] == [
            (red_shirt.product_id, 3),
            (blue_jeans.product_id, 1),
        ]
        assert data["data"][0]["total_revenue"] == 150.0
        assert data["data"][0]["average_price"] == 50.0
        assert data["summary"] == {"total_products": 2, "total_items_sold": 4, "total_revenue": 270.0}

    def test_category_filter(self, client, admin_auth, customer, clothing, red_shirt, blue_jeans):
        create_order(customer, [(red_shirt, 3), (blue_jeans, 1)])

        data = client.get(
            reverse("reports:analytics-products"),
            {"range": "all", "category_id": clothing.category_id},
            headers=admin_auth,
        ).json()

        assert [row["product_id"] for row in data["data"]] == [blue_jeans.product_id]
        assert data["filters"]["category_name"] == "Clothing"

    def test_unknown_category(self, client, admin_auth):
        response = client.get(reverse("reports:analytics-products"), {"category_id": 999}, headers=admin_auth)

        assert response.status_code == 422


class TestCustomerAnalytics:
    """Tests for GET /api/v1/admin/analytics/customers"""

    def test_ranked_by_orders(self, client, admin_auth, customer, admin_customer, red_shirt, blue_jeans):
        create_order(customer, [(red_shirt, 1)])
        create_order(customer, [(blue_jeans, 1)])

        data = client.get(reverse("reports:analytics-customers"), {"range": "all"}, headers=admin_auth).json()

        top = data["data"][0]
        assert top["customer_id"] == customer.customer_id
        assert top["total_orders"] == 2
        assert top["total_spent"] == 170.0
        assert top["average_order_value"] == 85.0
        assert data["data"][1]["total_orders"] == 0
        assert data["data"][1]["total_spent"] == 0.0
        assert data["summary"] == {"total_customers": 2, "active_customers": 1, "inactive_customers": 1}

    def test_sort_by_revenue(self, client, admin_auth, customer, red_shirt, blue_jeans):
        big_spender = create_customer("omar@example.com", firstname="Omar")
        create_order(customer, [(red_shirt, 1)])
        create_order(customer, [(red_shirt, 1)])
        create_order(big_spender, [(blue_jeans, 1)])

        data = client.get(
            reverse("reports:analytics-customers"), {"range": "all", "sort": "revenue"}, headers=admin_auth
        ).json()

        assert data["data"][0]["customer_id"] == big_spender.customer_id


# =============================================================================
# Traffic and revenue
# =============================================================================


class TestTrafficAnalytics:
    """Tests for GET /api/v1/admin/analytics/traffic"""

    def test_searches(self, client, admin_auth):
        now = timezone.now()
        for keyword in ("shirt", "shirt", "jeans"):
            CustomerSearch.objects.create(keyword=keyword, date_added=now)
        CustomerSearch.objects.create(keyword="old", date_added=now - timedelta(days=400))

        data = client.get(reverse("reports:analytics-traffic"), {"range": "month"}, headers=admin_auth).json()

        assert data["type"] == "searches"
        assert data["data"] == [{"keyword": "shirt", "search_count": 2}, {"keyword": "jeans", "search_count": 1}]
        assert data["summary"] == {"total_searches": 3, "unique_keywords": 2, "average_searches_per_keyword": 1.5}

    def test_traffic(self, client, admin_auth):
        now = timezone.now()
        CustomerOnline.objects.create(ip="10.0.0.1", date_added=now)
        CustomerOnline.objects.create(ip="10.0.0.2", date_added=now)
        for key in ("login", "login", "order_account"):
            CustomerActivity.objects.create(customer_id=1, key=key, date_added=now)

        data = client.get(
            reverse("reports:analytics-traffic"), {"range": "today", "type": "traffic"}, headers=admin_auth
        ).json()

        assert data["data"][0] == {"page": "login", "visit_count": 2}
        assert data["summary"] == {"total_visitors": 2, "total_page_views": 3, "pages_per_visitor": 1.5}

    def test_conversions(self, client, admin_auth, customer, red_shirt):
        now = timezone.now()
        CustomerOnline.objects.create(ip="10.0.0.1", date_added=now)
        CustomerOnline.objects.create(ip="10.0.0.2", date_added=now)
        create_order(customer, [(red_shirt, 1)], order_from="mobile_app")

        data = client.get(
            reverse("reports:analytics-traffic"), {"range": "today", "type": "conversions"}, headers=admin_auth
        ).json()

        assert data["data"] == [
            {"source": "mobile_app", "order_count": 1, "revenue": 50.0, "average_order_value": 50.0}
        ]
        assert data["summary"]["conversion_rate"] == 50.0


class TestRevenueAnalytics:
    """Tests for GET /api/v1/admin/analytics/revenue"""

    def test_by_category(self, client, admin_auth, customer, shirts, clothing, red_shirt, blue_jeans):
        create_order(customer, [(red_shirt, 1), (blue_jeans, 1)])

        data = client.get(reverse("reports:analytics-revenue"), {"range": "today"}, headers=admin_auth).json()

        assert [row["category_name"] for row in data["data"]] == ["Clothing", "Shirts"]
        assert data["summary"] == {"total_revenue": 170.0, "categories_count": 2}

    def test_by_country(self, client, admin_auth, customer, red_shirt):
        country = Country.objects.create(name="Saudi Arabia", iso_code_2="SA", iso_code_3="SAU")
        create_order(customer, [(red_shirt, 1)], payment_country_id=country.country_id)
        create_order(customer, [(red_shirt, 1)], payment_country_id=0)

        data = client.get(
            reverse("reports:analytics-revenue"), {"range": "today", "group_by": "country"}, headers=admin_auth
        ).json()

        assert data["data"] == [
            {
                "country_id": country.country_id,
                "country_name": "Saudi Arabia",
                "revenue": 50.0,
                "orders_count": 1,
                "average_order_value": 50.0,
            }
        ]
        assert data["summary"]["total_revenue"] == 100.0

    def test_by_payment_method(self, client, admin_auth, customer, red_shirt, blue_jeans):
        create_order(customer, [(red_shirt, 1)], payment_method="Cash On Delivery")
        create_order(customer, [(blue_jeans, 1)], payment_method="Bank Transfer", total=Decimal("120"))

        data = client.get(
            reverse("reports:analytics-revenue"), {"range": "today", "group_by": "payment_method"}, headers=admin_auth
        ).json()

        assert [row["payment_method"] for row in data["data"]] == ["Bank Transfer", "Cash On Delivery"]
        assert data["summary"]["payment_methods_count"] == 2
