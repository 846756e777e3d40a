"""Order status lookups and history shared by customer and admin order endpoints."""

from django.conf import settings
from django.db.models import OuterRef, Subquery
from django.utils import timezone

from storefront.core.api import format_datetime

from .models import OrderHistory, OrderStatus

UNKNOWN_STATUS = "Unknown"


def status_names() -> dict[int, str]:
    """Map of order status id to its name in the store language."""
    return dict(
        OrderStatus.objects.filter(language_id=settings.OPENCART_LANGUAGE_ID).values_list(
            "order_status_id", "name"
        )
    )


def status_name(status_id: int) -> str:
    name = (
        OrderStatus.objects.filter(order_status_id=status_id, language_id=settings.OPENCART_LANGUAGE_ID)
        .values_list("name", flat=True)
        .first()
    )
    return name or UNKNOWN_STATUS


def status_name_subquery(outer_ref: str = "order_status_id") -> Subquery:
    return Subquery(
        OrderStatus.objects.filter(
            order_status_id=OuterRef(outer_ref),
            language_id=settings.OPENCART_LANGUAGE_ID,
        ).values("name")[:1]
    )


def add_order_history(order_id: int, status_id: int, comment: str, notify: bool = False) -> OrderHistory:
    """Append a status change to an order's history."""
    return OrderHistory.objects.create(
        order_id=order_id,
        order_status_id=status_id,
        notify=notify,
        comment=comment,
        date_added=timezone.now(),
    )


def get_order_history(order_id: int) -> list[dict]:
    """History entries for an order, newest first.

    Entries whose status has no name in the store language are skipped.
    """
    rows = (
        OrderHistory.objects.filter(order_id=order_id)
        .annotate(status_name=status_name_subquery())
        .filter(status_name__isnull=False)
        .order_by("-date_added", "-order_history_id")
    )
    return [
        {
            "status": row.status_name,
            "comment": row.comment,
            "date_added": format_datetime(row.date_added),
            "notify": bool(row.notify),
        }
        for row in rows
    ]

