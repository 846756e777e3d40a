"""Tests for the unified log feed."""

import json
from datetime import datetime

import pytest
from django.urls import reverse

from storefront.conftest import create_order
from storefront.opencart.models import AdminUser, CustomerActivity, OrderHistory
from storefront.reports.logs import read_log_file


@pytest.fixture
def api_log(settings, tmp_path):
    """A JSON-lines API log with one error, one info line and noise."""
    path = tmp_path / "api.log"
    records = [
        {
            "asctime": "2024-03-01 10:00:00,123",
            "levelname": "ERROR",
            "name": "storefront.sales.checkout",
            "message": "Payment gateway timeout",
            "order_id": 5,
        },
        {
            "asctime": "2024-03-01 09:00:00,000",
            "levelname": "INFO",
            "name": "storefront.accounts.services",
            "message": "Registered customer 3",
        },
    ]
    lines = [json.dumps(record) for record in records] + ["not json", json.dumps({"message": "no timestamp"})]
    path.write_text("\n".join(lines) + "\n")
    settings.API_LOG_FILE = str(path)
    return path


@pytest.fixture
def store_activity(customer, red_shirt, order_statuses):
    """A customer login at 11:00 and a failed order at 08:00."""
    CustomerActivity.objects.create(
        customer_id=customer.customer_id,
        key="login",
        data=json.dumps({"customer_id": customer.customer_id}),
        date_added=datetime(2024, 3, 1, 11),
    )
    order = create_order(customer, [(red_shirt, 1)], date_added=datetime(2024, 3, 1, 8))
    OrderHistory.objects.create(
        order_id=order.order_id,
        order_status_id=10,
        comment="Card declined",
        date_added=datetime(2024, 3, 1, 8),
    )
    return order


class TestReadLogFile:
    def test_parses_json_records(self, api_log):
        entries = read_log_file(api_log)

        assert len(entries) == 2
        error = entries[0]
        assert error["level"] == "error"
        assert error["message"] == "Payment gateway timeout"
        assert error["created_at"] == datetime(2024, 3, 1, 10)
        assert error["context"] == {"order_id": 5, "logger": "storefront.sales.checkout"}
        assert error["source"] == "api_log"
        assert len(error["id"]) == 32

    def test_missing_file(self, tmp_path):
        assert read_log_file(tmp_path / "missing.log") == []

    def test_search_and_window(self, api_log):
        assert [entry["message"] for entry in read_log_file(api_log, search="GATEWAY")] == ["Payment gateway timeout"]
        assert read_log_file(api_log, start=datetime(2024, 3, 1, 9, 30), end=datetime(2024, 3, 1, 9, 45)) == []


class TestLogList:
    """Tests for GET /api/v1/admin/logs"""

    def test_merges_sources_newest_first(self, client, admin_auth, api_log, store_activity):
        response = client.get(reverse("reports:logs"), headers=admin_auth)

        assert response.status_code == 200
        data = response.json()
        assert [entry["source"] for entry in data["data"]] == [
            "customer_activity",
            "api_log",
            "api_log",
            "order_history",
        ]
        assert data["data"][0]["message"] == "login - Customer Activity"
        assert data["data"][0]["created_at"] == "2024-03-01 11:00:00"
        assert data["data"][3]["message"] == f"Order #{store_activity.order_id} - Failed"
        assert data["meta"]["total"] == 4

    def test_undated_rows_sort_last(self, client, admin_auth, api_log, store_activity):
        """Rows with a zero date still list, after every dated entry."""
        AdminUser.objects.create(username="ops", firstname="Ops", lastname="Team", date_added=None)

        response = client.get(reverse("reports:logs"), headers=admin_auth)

        assert response.status_code == 200
        last = response.json()["data"][-1]
        assert last["source"] == "admin_user"
        assert last["created_at"] is None

    def test_level_filter(self, client, admin_auth, api_log, store_activity):
        """Failed order statuses are reported as errors."""
        response = client.get(reverse("reports:logs"), {"level": "error"}, headers=admin_auth)

        assert [entry["message"] for entry in response.json()["data"]] == [
            "Payment gateway timeout",
            f"Order #{store_activity.order_id} - Failed",
        ]

    def test_search_matches_order_id(self, client, admin_auth, api_log, store_activity):
        response = client.get(reverse("reports:logs"), {"search": str(store_activity.order_id)}, headers=admin_auth)

        sources = {entry["source"] for entry in response.json()["data"]}
        assert "order_history" in sources

    def test_date_window(self, client, admin_auth, api_log, store_activity):
        response = client.get(
            reverse("reports:logs"),
            {"start_date": "2024-03-01 09:30:00", "end_date": "2024-03-01 12:00:00"},
            headers=admin_auth,
        )

        assert [entry["created_at"] for entry in response.json()["data"]] == [
            "2024-03-01 11:00:00",
            "2024-03-01 10:00:00",
        ]

    def test_pagination(self, client, admin_auth, api_log, store_activity):
        response = client.get(reverse("reports:logs"), {"limit": 3, "page": 2}, headers=admin_auth)

        data = response.json()
        assert len(data["data"]) == 1
        assert data["meta"] == {"current_page": 2, "last_page": 2, "per_page": 3, "total": 4}

    def test_rejects_bad_datetime(self, client, admin_auth):
        response = client.get(reverse("reports:logs"), {"start_date": "yesterday"}, headers=admin_auth)

        assert response.status_code == 422
        assert "start_date" in response.json()["errors"]
