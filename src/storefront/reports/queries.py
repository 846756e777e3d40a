"""Aggregate queries over placed orders.

An order with status 0 was abandoned before confirmation, so it never
counts toward sales figures.
"""

from django.conf import settings
from django.db.models import Count, Sum

from storefront.opencart.models import CategoryDescription, Order, OrderProduct
from storefront.opencart.pricing import money

CATEGORY_FIELD = "product__category_links__category_id"


def placed_orders(period=None):
    orders = Order.objects.filter(order_status_id__gt=0)
    if period is not None:
        orders = orders.filter(**period.lookup())
    return orders


def placed_order_lines(period=None):
    lines = OrderProduct.objects.filter(order__order_status_id__gt=0)
    if period is not None:
        lines = lines.filter(**period.lookup("order__date_added"))
    return lines


def category_names() -> dict[int, str]:
    return dict(
        CategoryDescription.objects.filter(language_id=settings.OPENCART_LANGUAGE_ID).values_list(
            "category_id", "name"
        )
    )


def average(amount, count) -> float:
    return money(amount / count) if count else 0


def revenue_by_category(period=None, limit: int = 5) -> list[dict]:
    """Categories ranked by revenue of the order lines filed under them."""
    names = category_names()
    rows = (
        placed_order_lines(period)
        .filter(**{f"{CATEGORY_FIELD}__in": list(names)})
        .values(CATEGORY_FIELD)
        .annotate(
            revenue=Sum("total"),
            items_sold=Count("order_product_id"),
            orders_count=Count("order", distinct=True),
        )
        .order_by("-revenue", CATEGORY_FIELD)[:limit]
    )
    return [
        {
            "category_id": row[CATEGORY_FIELD],
            "category_name": names[row[CATEGORY_FIELD]],
            "revenue": money(row["revenue"]),
            "items_sold": row["items_sold"],
            "orders_count": row["orders_count"],
            "average_order_value": average(row["revenue"], row["orders_count"]),
        }
        for row in rows
    ]
