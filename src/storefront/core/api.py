"""Helpers shared by the JSON API views."""

import json
import math
from typing import NamedTuple

from django.conf import settings
from django.http import JsonResponse


class InvalidJsonError(ValueError):
    """Request body is not a JSON object."""


class PageResult(NamedTuple):
    """One page of results with the numbers needed for pagination metadata."""

    items: list
    total: int
    per_page: int
    current_page: int

    @property
    def last_page(self) -> int:
        return max(1, math.ceil(self.total / self.per_page)) if self.per_page else 1

    def meta(self) -> dict:
        return {
            "current_page": self.current_page,
            "last_page": self.last_page,
            "per_page": self.per_page,
            "total": self.total,
        }


def read_json(request) -> dict:
    """Decode the request body as a JSON object; an empty body is ``{}``."""
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidJsonError("Invalid JSON") from exc
    if not isinstance(data, dict):
        raise InvalidJsonError("Invalid JSON")
    return data


def validation_error(errors) -> JsonResponse:
    return JsonResponse({"message": "Validation failed", "errors": errors}, status=422)


def message(text: str, status: int = 200, **extra) -> JsonResponse:
    return JsonResponse({"message": text, **extra}, status=status)


def not_found(entity: str) -> JsonResponse:
    return message(f"{entity} not found", status=404)


def paginate(queryset, page: int, per_page: int) -> PageResult:
    """Slice a queryset or list into a page.

    Pages past the end are empty rather than an error.
    """
    total = len(queryset) if isinstance(queryset, list) else queryset.count()
    offset = (page - 1) * per_page
    items = list(queryset[offset:offset + per_page])
    return PageResult(items=items, total=total, per_page=per_page, current_page=page)


def format_datetime(value) -> str | None:
    """Format a date or datetime the way OpenCart stores it."""
    if value is None:
        return None
    if hasattr(value, "hour"):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    return value.strftime("%Y-%m-%d")


def image_url(path: str | None) -> str | None:
    """Public URL of an image stored under the OpenCart image directory."""
    if not path:
        return None
    return f"{settings.IMAGE_BASE_URL}{path}"


def client_ip(request) -> str:
    return request.META.get("REMOTE_ADDR", "") or ""
