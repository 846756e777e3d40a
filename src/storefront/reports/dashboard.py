"""Back-office dashboard summary."""

import logging
import platform
import shutil
from datetime import timedelta

import django
from django.conf import settings
from django.core.cache import cache
from django.db import DatabaseError, connection
from django.db.models import Count, Sum
from django.utils import timezone

from storefront.core.api import format_datetime, image_url
from storefront.opencart.models import Customer, Order, Product
from storefront.opencart.orders import status_names, UNKNOWN_STATUS
from storefront.opencart.pricing import money

from .periods import day_bounds
from .queries import placed_orders, revenue_by_category

logger = logging.getLogger(__name__)

DASHBOARD_CACHE_KEY = "admin_dashboard_summary"
LOW_STOCK_THRESHOLD = 5
RECENT_LIMIT = 5


def get_dashboard() -> dict:
    """Cached dashboard summary."""
    return cache.get_or_set(DASHBOARD_CACHE_KEY, build_dashboard, settings.REPORT_CACHE_SECONDS)


def period_stats(period) -> dict:
    orders = placed_orders(period).aggregate(sales=Sum("total"), orders=Count("order_id"))
    return {
        "sales": money(orders["sales"]),
        "orders": orders["orders"],
        "customers": Customer.objects.filter(**period.lookup()).count(),
    }


def sales_last_7_days() -> list[dict]:
    today = timezone.now().date()
    days = []
    for offset in range(6, -1, -1):
        day = today - timedelta(days=offset)
        sales = placed_orders(day_bounds(day, day)).aggregate(sales=Sum("total"))["sales"]
        days.append({"date": day.strftime("%Y-%m-%d"), "sales": money(sales)})
    return days


def orders_by_status() -> list[dict]:
    names = status_names()
    rows = Order.objects.values("order_status_id").annotate(count=Count("order_id")).order_by("order_status_id")
    return [
        {
            "status_id": row["order_status_id"],
            "status": names.get(row["order_status_id"], UNKNOWN_STATUS),
            "count": row["count"],
        }
        for row in rows
    ]


def database_size() -> str:
    if connection.vendor != "mysql":
        return "Unknown"
    try:
        with connection.cursor() as cursor:
            cursor.execute(
                "SELECT ROUND(SUM(data_length + index_length) / 1024 / 1024, 2) "
                "FROM information_schema.TABLES WHERE table_schema = %s",
                [connection.settings_dict["NAME"]],
            )
            row = cursor.fetchone()
    except DatabaseError:
        logger.warning("Could not read database size", exc_info=True)
        return "Unknown"
    return f"{row[0]} MB" if row and row[0] is not None else "Unknown"


def storage_usage() -> str:
    try:
        usage = shutil.disk_usage(settings.BASE_DIR)
    except OSError:
        return "Unknown"
    gib = 1024 ** 3
    return (
        f"{usage.used / gib:.2f} GB of {usage.total / gib:.2f} GB "
        f"({usage.used / usage.total * 100:.2f}%)"
    )


def build_dashboard() -> dict:
    today = timezone.now().date()
    totals = placed_orders().aggregate(sales=Sum("total"), orders=Count("order_id"))
    names = status_names()

    recent_orders = [
        {
            "id": order.order_id,
            "customer": order.customer_name,
            "total": money(order.total),
            "status": names.get(order.order_status_id, UNKNOWN_STATUS),
            "status_id": order.order_status_id,
            "date_added": format_datetime(order.date_added),
        }
        for order in Order.objects.order_by("-date_added", "-order_id")[:RECENT_LIMIT]
    ]

    low_stock = (
        Product.objects.filter(
            status=True,
            quantity__lte=LOW_STOCK_THRESHOLD,
            descriptions__language_id=settings.OPENCART_LANGUAGE_ID,
        )
        .values("product_id", "descriptions__name", "model", "quantity", "image")
        .order_by("quantity", "product_id")[:RECENT_LIMIT]
    )

    recent_customers = Customer.objects.order_by("-date_added", "-customer_id")[:RECENT_LIMIT]

    logger.info("Rebuilt dashboard summary")
    return {
        "summary": {
            "total_sales": money(totals["sales"]),
            "total_orders": totals["orders"],
            "total_customers": Customer.objects.count(),
            "total_products": Product.objects.filter(status=True).count(),
        },
        "today": period_stats(day_bounds(today, today)),
        "this_month": period_stats(day_bounds(today.replace(day=1), today)),
        "charts": {
            "sales_last_7_days": sales_last_7_days(),
            "orders_by_status": orders_by_status(),
            "top_categories": [
                {key: row[key] for key in ("category_id", "category_name", "revenue", "items_sold")}
                for row in revenue_by_category(limit=RECENT_LIMIT)
            ],
        },
        "recent_orders": recent_orders,
        "low_stock_products": [
            {
                "id": product["product_id"],
                "name": product["descriptions__name"],
                "model": product["model"],
                "quantity": product["quantity"],
                "image": image_url(product["image"]),
            }
            for product in low_stock
        ],
        "recent_customers": [
            {
                "id": customer.customer_id,
                "name": customer.full_name,
                "email": customer.email,
                "phone": customer.telephone,
                "date_registered": format_datetime(customer.date_added),
            }
            for customer in recent_customers
        ],
        "system_info": {
            "python_version": platform.python_version(),
            "django_version": django.get_version(),
            "database_size": database_size(),
            "storage_usage": storage_usage(),
        },
        "updated_at": format_datetime(timezone.now()),
    }
