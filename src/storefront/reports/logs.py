"""Unified log feed for the back office.

Entries come from the API's JSON log file and from OpenCart tables that
record activity: customer activity, order history and, where the
installation has them, admin users and API sessions.
"""

import hashlib
import json
import logging
from datetime import datetime
from pathlib import Path

from django.conf import settings
from django.db import connection
from django.db.models import Q

from storefront.core.api import format_datetime
from storefront.opencart.models import AdminUser, ApiSession, CustomerActivity, Order, OrderHistory
from storefront.opencart.orders import status_names

logger = logging.getLogger(__name__)

ACTIVITY_LIMIT = 1000
BACK_OFFICE_LIMIT = 500

# Keys python-json-logger writes for every record; anything else is context.
RECORD_KEYS = {"asctime", "levelname", "name", "message"}
LEVELS = {"DEBUG": "info", "INFO": "info", "WARNING": "warning", "ERROR": "error", "CRITICAL": "error"}


def _entry(entry_id, level, message, context, created_at, source) -> dict:
    return {
        "id": entry_id,
        "level": level,
        "message": message,
        "context": context,
        "created_at": created_at,
        "source": source,
    }


def _in_window(created_at: datetime, start, end) -> bool:
    if start and created_at < start:
        return False
    if end and created_at > end:
        return False
    return True


def read_log_file(path, search: str = "", start=None, end=None) -> list[dict]:
    """Entries from a JSON-lines log file.

    Lines that are not JSON records with a timestamp are skipped.
    """
    path = Path(path)
    if not path.exists():
        return []

    entries = []
    with path.open(encoding="utf-8", errors="replace") as handle:
        for line in handle:
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
                created_at = datetime.strptime(record["asctime"][:19], "%Y-%m-%d %H:%M:%S")
            except (ValueError, KeyError, TypeError):
                continue

            message = str(record.get("message", ""))
            if search and search.lower() not in message.lower():
                continue
            if not _in_window(created_at, start, end):
                continue

            context = {key: value for key, value in record.items() if key not in RECORD_KEYS}
            context["logger"] = record.get("name")
            entries.append(
                _entry(
                    hashlib.md5(line.encode()).hexdigest(),
                    LEVELS.get(str(record.get("levelname", "")).upper(), "info"),
                    message,
                    context,
                    created_at,
                    "api_log",
                )
            )
    return entries


def _window(queryset, start, end, field: str = "date_added"):
    if start:
        queryset = queryset.filter(**{f"{field}__gte": start})
    if end:
        queryset = queryset.filter(**{f"{field}__lte": end})
    return queryset.order_by(f"-{field}")


def _decode_context(data: str):
    try:
        decoded = json.loads(data) if data else None
    except ValueError:
        return []
    return decoded or []


def customer_activity_entries(search: str = "", start=None, end=None) -> list[dict]:
    rows = CustomerActivity.objects.all()
    if search:
        rows = rows.filter(Q(key__icontains=search) | Q(data__icontains=search))
    return [
        _entry(
            row.customer_activity_id,
            "info",
            f"{row.key} - Customer Activity",
            _decode_context(row.data),
            row.date_added,
            "customer_activity",
        )
        for row in _window(rows, start, end)[:ACTIVITY_LIMIT]
    ]


def order_history_entries(search: str = "", start=None, end=None) -> list[dict]:
    names = status_names()
    rows = OrderHistory.objects.filter(
        order_status_id__in=list(names),
        order_id__in=Order.objects.values("order_id"),
    )
    if search:
        condition = Q(comment__icontains=search)
        if search.isdigit():
            condition |= Q(order_id=int(search))
        rows = rows.filter(condition)
    return [
        _entry(
            row.order_history_id,
            "error" if row.order_status_id in settings.ORDER_STATUS_FAILURES else "info",
            f"Order #{row.order_id} - {names[row.order_status_id]}",
            row.comment,
            row.date_added,
            "order_history",
        )
        for row in _window(rows, start, end)[:ACTIVITY_LIMIT]
    ]


def admin_user_entries(search: str = "", start=None, end=None) -> list[dict]:
    rows = AdminUser.objects.all()
    if search:
        rows = rows.filter(
            Q(firstname__icontains=search) | Q(lastname__icontains=search) | Q(email__icontains=search)
        )
    return [
        _entry(
            row.user_id,
            "info",
            f"{row.firstname} {row.lastname} - User Activity",
            row.ip,
            row.date_added,
            "admin_user",
        )
        for row in _window(rows, start, end)[:BACK_OFFICE_LIMIT]
    ]


def api_session_entries(search: str = "", start=None, end=None) -> list[dict]:
    rows = ApiSession.objects.all()
    if search:
        rows = rows.filter(Q(session_id__icontains=search) | Q(ip__icontains=search))
    return [
        _entry(
            row.api_session_id,
            "info",
            f"API Session - {row.session_id}",
            row.ip,
            row.date_added,
            "api_session",
        )
        for row in _window(rows, start, end)[:BACK_OFFICE_LIMIT]
    ]


OPTIONAL_SOURCES = [
    (AdminUser._meta.db_table, admin_user_entries),
    (ApiSession._meta.db_table, api_session_entries),
]


def collect_logs(level: str = "all", search: str = "", start=None, end=None) -> list[dict]:
    """All log entries matching the filters, newest first.

    Args:
        level: ``error``, ``warning``, ``info`` or ``all``
        search: Case-insensitive text to look for
        start: Earliest timestamp to include
        end: Latest timestamp to include

    Returns:
        Entries with ``created_at`` formatted as ``Y-m-d H:i:s``
    """
    entries = read_log_file(settings.API_LOG_FILE, search, start, end)
    entries += customer_activity_entries(search, start, end)
    entries += order_history_entries(search, start, end)

    tables = set(connection.introspection.table_names())
    for table, source in OPTIONAL_SOURCES:
        if table in tables:
            entries += source(search, start, end)
        else:
            logger.debug("Skipping %s logs; table is missing", table)

    if level != "all":
        entries = [entry for entry in entries if entry["level"] == level]

    entries.sort(key=lambda entry: entry["created_at"] or datetime.min, reverse=True)
    for entry in entries:
        entry["created_at"] = format_datetime(entry["created_at"])
    return entries
