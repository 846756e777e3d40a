"""Sales, product, customer, traffic and revenue analytics.

Every report is cached for ``REPORT_CACHE_SECONDS`` under a key built from
its parameters.
"""

import logging

from django.conf import settings
from django.core.cache import cache
from django.db.models import Avg, Count, IntegerField, OuterRef, Subquery, Sum, Value
from django.db.models.functions import Coalesce, TruncDate, TruncMonth, TruncWeek

from storefront.core.api import format_datetime, image_url
from storefront.opencart.models import (
    CategoryDescription,
    Country,
    Customer,
    CustomerActivity,
    CustomerOnline,
    CustomerSearch,
    Product,
    ProductDescription,
    ProductToCategory,
)
from storefront.opencart.pricing import money

from .queries import average, placed_order_lines, placed_orders, revenue_by_category

logger = logging.getLogger(__name__)

GROUPINGS = {
    "day": (TruncDate, "%Y-%m-%d"),
    "week": (TruncWeek, "%Y-%m-%d"),
    "month": (TruncMonth, "%Y-%m"),
}


def cached_report(key: str, build):
    """Return the cached report for ``key``, building it on a miss."""

    def _build():
        logger.debug("Building report %s", key)
        return build()

    return cache.get_or_set(key, _build, settings.REPORT_CACHE_SECONDS)


def _period_key(period) -> str:
    return f"{period.start:%Y%m%d%H%M%S}_{period.end:%Y%m%d%H%M%S}"


# =============================================================================
# Sales
# =============================================================================


def sales_report(range_name: str, period, group_by: str = "day") -> dict:
    """Orders and revenue per day, week or month.

    Weekly buckets are labelled with the Monday that starts the week.
    """
    trunc, label_format = GROUPINGS[group_by]

    def build():
        orders = placed_orders(period)
        rows = (
            orders.annotate(bucket=trunc("date_added"))
            .values("bucket")
            .annotate(orders_count=Count("order_id"), total_revenue=Sum("total"))
            .order_by("bucket")
        )
        summary = orders.aggregate(
            total_orders=Count("order_id"),
            total_revenue=Sum("total"),
            average_order_value=Avg("total"),
        )
        return {
            "data": [
                {
                    "date": row["bucket"].strftime(label_format),
                    "orders_count": row["orders_count"],
                    "total_revenue": money(row["total_revenue"]),
                    "average_order_value": average(row["total_revenue"], row["orders_count"]),
                }
                for row in rows
            ],
            "summary": {
                "total_orders": summary["total_orders"],
                "total_revenue": money(summary["total_revenue"]),
                "average_order_value": money(summary["average_order_value"]),
            },
            "date_range": {**period.as_dict(), "group_by": group_by},
        }

    return cached_report(f"analytics_sales_{range_name}_{group_by}_{_period_key(period)}", build)


# =============================================================================
# Products
# =============================================================================


def products_report(range_name: str, period, limit: int = 10, category_id: int | None = None) -> dict:
    """Best selling products by units sold."""

    def build():
        lines = placed_order_lines(period).filter(
            product_id__in=ProductDescription.objects.filter(
                language_id=settings.OPENCART_LANGUAGE_ID
            ).values("product_id")
        )
        if category_id:
            lines = lines.filter(
                product_id__in=ProductToCategory.objects.filter(category_id=category_id).values("product_id")
            )

        rows = list(
            lines.values("product_id")
            .annotate(total_sold=Sum("quantity"), total_revenue=Sum("total"))
            .order_by("-total_sold", "product_id")[:limit]
        )
        product_ids = [row["product_id"] for row in rows]
        products = Product.objects.in_bulk(product_ids)
        names = dict(
            ProductDescription.objects.filter(
                product_id__in=product_ids,
                language_id=settings.OPENCART_LANGUAGE_ID,
            ).values_list("product_id", "name")
        )

        data = []
        for row in rows:
            product = products.get(row["product_id"])
            if product is None:
                continue
            data.append({
                "product_id": product.product_id,
                "name": names.get(product.product_id),
                "model": product.model,
                "image": image_url(product.image),
                "total_sold": row["total_sold"],
                "total_revenue": money(row["total_revenue"]),
                "average_price": average(row["total_revenue"], row["total_sold"]),
            })

        category_name = None
        if category_id:
            category_name = (
                CategoryDescription.objects.filter(
                    category_id=category_id,
                    language_id=settings.OPENCART_LANGUAGE_ID,
                )
                .values_list("name", flat=True)
                .first()
            )

        return {
            "data": data,
            "summary": {
                "total_products": len(data),
                "total_items_sold": sum(item["total_sold"] for item in data),
                "total_revenue": money(sum(item["total_revenue"] for item in data)),
            },
            "filters": {
                "range": range_name,
                "category_id": category_id,
                "category_name": category_name,
                "limit": limit,
            },
        }

    return cached_report(f"analytics_products_{range_name}_{category_id or ''}_{limit}", build)


# =============================================================================
# Customers
# =============================================================================


CUSTOMER_ORDERINGS = {
    "orders": ("-total_orders", "customer_id"),
    "revenue": ("-total_spent", "customer_id"),
    "registration": ("-date_added", "-customer_id"),
}


def customers_report(range_name: str, period, limit: int = 10, sort: str = "orders") -> dict:
    """Customers ranked by orders placed, money spent or registration date."""

    def build():
        orders = placed_orders(period).filter(customer_id=OuterRef("customer_id")).values("customer_id")
        customers = (
            Customer.objects.annotate(
                total_orders=Coalesce(
                    Subquery(orders.annotate(c=Count("order_id")).values("c")[:1]),
                    Value(0),
                    output_field=IntegerField(),
                ),
                total_spent=Subquery(orders.annotate(s=Sum("total")).values("s")[:1]),
            )
            .order_by(*CUSTOMER_ORDERINGS[sort])[:limit]
        )

        total_customers = Customer.objects.count()
        active_customers = (
            placed_orders(period)
            .filter(customer_id__in=Customer.objects.values("customer_id"))
            .values("customer_id")
            .distinct()
            .count()
        )

        return {
            "data": [
                {
                    "customer_id": customer.customer_id,
                    "name": customer.full_name,
                    "email": customer.email,
                    "registration_date": format_datetime(customer.date_added),
                    "total_orders": customer.total_orders,
                    "total_spent": money(customer.total_spent),
                    "average_order_value": average(customer.total_spent or 0, customer.total_orders),
                }
                for customer in customers
            ],
            "summary": {
                "total_customers": total_customers,
                "active_customers": active_customers,
                "inactive_customers": total_customers - active_customers,
            },
            "filters": {"range": range_name, "sort": sort, "limit": limit},
        }

    return cached_report(f"analytics_customers_{range_name}_{sort}_{limit}", build)


# =============================================================================
# Traffic
# =============================================================================


def _search_analytics(period, limit: int) -> dict:
    searches = CustomerSearch.objects.filter(**period.lookup())
    rows = (
        searches.values("keyword")
        .annotate(search_count=Count("customer_search_id"))
        .order_by("-search_count", "keyword")[:limit]
    )
    total_searches = searches.count()
    unique_keywords = searches.values("keyword").distinct().count()
    return {
        "data": [{"keyword": row["keyword"], "search_count": row["search_count"]} for row in rows],
        "summary": {
            "total_searches": total_searches,
            "unique_keywords": unique_keywords,
            "average_searches_per_keyword": round(total_searches / unique_keywords, 2) if unique_keywords else 0,
        },
        "type": "searches",
    }


def _traffic_analytics(period, limit: int) -> dict:
    visitors = CustomerOnline.objects.filter(**period.lookup()).count()
    activity = CustomerActivity.objects.filter(**period.lookup())
    page_views = activity.count()
    rows = (
        activity.values("key")
        .annotate(visit_count=Count("customer_activity_id"))
        .order_by("-visit_count", "key")[:limit]
    )
    return {
        "data": [{"page": row["key"], "visit_count": row["visit_count"]} for row in rows],
        "summary": {
            "total_visitors": visitors,
            "total_page_views": page_views,
            "pages_per_visitor": round(page_views / visitors, 2) if visitors else 0,
        },
        "type": "traffic",
    }


def _conversion_analytics(period, limit: int) -> dict:
    visitors = CustomerOnline.objects.filter(**period.lookup()).count()
    orders = placed_orders(period)
    summary = orders.aggregate(total_orders=Count("order_id"), average_order_value=Avg("total"))
    total_orders = summary["total_orders"]
    rows = (
        orders.values("order_from")
        .annotate(order_count=Count("order_id"), revenue=Sum("total"))
        .order_by("-order_count", "order_from")[:limit]
    )
    return {
        "data": [
            {
                "source": row["order_from"],
                "order_count": row["order_count"],
                "revenue": money(row["revenue"]),
                "average_order_value": average(row["revenue"], row["order_count"]),
            }
            for row in rows
        ],
        "summary": {
            "total_visitors": visitors,
            "total_orders": total_orders,
            "conversion_rate": round(total_orders / visitors * 100, 2) if visitors else 0,
            "average_order_value": money(summary["average_order_value"]) if total_orders else 0,
        },
        "type": "conversions",
    }


TRAFFIC_REPORTS = {
    "searches": _search_analytics,
    "traffic": _traffic_analytics,
    "conversions": _conversion_analytics,
}


def traffic_report(range_name: str, period, limit: int = 10, report_type: str = "searches") -> dict:
    return cached_report(
        f"analytics_traffic_{range_name}_{report_type}_{limit}",
        lambda: TRAFFIC_REPORTS[report_type](period, limit),
    )


# =============================================================================
# Revenue
# =============================================================================


def _total_revenue(period) -> float:
    return money(placed_orders(period).aggregate(total=Sum("total"))["total"])


def _revenue_by_category(period, limit: int) -> dict:
    data = revenue_by_category(period, limit)
    return {
        "data": data,
        "summary": {"total_revenue": _total_revenue(period), "categories_count": len(data)},
        "group_by": "category",
    }


def _revenue_by_country(period, limit: int) -> dict:
    countries = dict(Country.objects.values_list("country_id", "name"))
    rows = (
        placed_orders(period)
        .filter(payment_country_id__in=list(countries))
        .values("payment_country_id")
        .annotate(revenue=Sum("total"), orders_count=Count("order_id"))
        .order_by("-revenue", "payment_country_id")[:limit]
    )
    data = [
        {
            "country_id": row["payment_country_id"],
            "country_name": countries[row["payment_country_id"]],
            "revenue": money(row["revenue"]),
            "orders_count": row["orders_count"],
            "average_order_value": average(row["revenue"], row["orders_count"]),
        }
        for row in rows
    ]
    return {
        "data": data,
        "summary": {"total_revenue": _total_revenue(period), "countries_count": len(data)},
        "group_by": "country",
    }


def _revenue_by_payment_method(period, limit: int) -> dict:
    rows = (
        placed_orders(period)
        .values("payment_method")
        .annotate(revenue=Sum("total"), orders_count=Count("order_id"))
        .order_by("-revenue", "payment_method")[:limit]
    )
    data = [
        {
            "payment_method": row["payment_method"],
            "revenue": money(row["revenue"]),
            "orders_count": row["orders_count"],
            "average_order_value": average(row["revenue"], row["orders_count"]),
        }
        for row in rows
    ]
    return {
        "data": data,
        "summary": {"total_revenue": _total_revenue(period), "payment_methods_count": len(data)},
        "group_by": "payment_method",
    }


REVENUE_REPORTS = {
    "category": _revenue_by_category,
    "country": _revenue_by_country,
    "payment_method": _revenue_by_payment_method,
}


def revenue_report(range_name: str, period, limit: int = 10, group_by: str = "category") -> dict:
    return cached_report(
        f"analytics_revenue_{range_name}_{group_by}_{limit}",
        lambda: REVENUE_REPORTS[group_by](period, limit),
    )
