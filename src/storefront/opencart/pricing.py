"""Pricing rules shared by the catalog and checkout.

Specials, final prices and coupon evaluation follow how the OpenCart
storefront computes them, so prices shown through the API match the web shop.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import NamedTuple

from django.conf import settings
from django.db.models import Case, F, OuterRef, Q, Subquery, When
from django.utils import timezone

from .exceptions import CouponError
from .models import Coupon, CouponHistory, ProductSpecial

logger = logging.getLogger(__name__)


class CouponResult(NamedTuple):
    """Result of applying a coupon to an order subtotal."""

    coupon: Coupon
    discount: Decimal


def round_money(amount: Decimal, places: int = 2) -> Decimal:
    """Round to specified decimal places, halves away from zero."""
    quantize_str = "0." + "0" * places
    return Decimal(str(amount)).quantize(Decimal(quantize_str), rounding=ROUND_HALF_UP)


def money(amount) -> float:
    """Render a money amount for a JSON response."""
    if amount is None:
        return 0.0
    return float(round_money(amount))


def today():
    return timezone.now().date()


def in_date_window(start_field: str, end_field: str, on=None) -> Q:
    """Filter for rows whose date window contains ``on``; a zero date is open-ended."""
    on = on or today()
    return (Q(**{f"{start_field}__isnull": True}) | Q(**{f"{start_field}__lte": on})) & (
        Q(**{f"{end_field}__isnull": True}) | Q(**{f"{end_field}__gte": on})
    )


def active_specials(on=None):
    """Specials for the default customer group that are running today."""
    return ProductSpecial.objects.filter(
        in_date_window("date_start", "date_end", on),
        customer_group_id=settings.OPENCART_CUSTOMER_GROUP_ID,
    )


def special_price_subquery(on=None, outer_ref: str = "product_id") -> Subquery:
    """Price of the highest-priority active special, for use in ``annotate``."""
    return Subquery(
        active_specials(on)
        .filter(product_id=OuterRef(outer_ref))
        .order_by("priority", "price")
        .values("price")[:1]
    )


def with_prices(queryset):
    """Annotate a Product queryset with ``special_price`` and ``final_price``.

    A special only sets the final price when it is above zero and below the
    base price.
    """
    return queryset.annotate(special_price=special_price_subquery()).annotate(
        final_price=Case(
            When(special_price__gt=0, special_price__lt=F("price"), then=F("special_price")),
            default=F("price"),
        )
    )


def get_final_price(product) -> Decimal:
    """Final unit price for a product: its active special when it undercuts the base price."""
    special = (
        active_specials()
        .filter(product_id=product.product_id)
        .order_by("priority", "price")
        .values_list("price", flat=True)
        .first()
    )
    price = Decimal(str(product.price))
    if special is not None and 0 < special < price:
        return Decimal(str(special))
    return price


def sale_details(price, final_price) -> tuple[bool, int]:
    """Return ``(is_on_sale, discount_percentage)`` for a price pair."""
    price = Decimal(str(price or 0))
    final_price = Decimal(str(final_price)) if final_price is not None else price
    if price <= 0 or not (0 < final_price < price):
        return False, 0
    percentage = (price - final_price) / price * 100
    return True, int(percentage.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def calculate_discount(coupon: Coupon, subtotal: Decimal) -> Decimal:
    """Discount a coupon gives on a subtotal.

    Percentage coupons take a share of the subtotal. No coupon discounts
    more than the subtotal.
    """
    subtotal = Decimal(str(subtotal))
    discount = Decimal(str(coupon.discount))
    if coupon.type == Coupon.TYPE_PERCENTAGE:
        discount = discount / Decimal(100) * subtotal
    return round_money(min(discount, subtotal))


def evaluate_coupon(code: str, subtotal: Decimal, customer_id: int | None = None) -> CouponResult:
    """Validate a coupon code against an order subtotal.

    Args:
        code: Coupon code as entered by the customer
        subtotal: Order subtotal the coupon applies to
        customer_id: Customer using the coupon, for the per-customer limit

    Returns:
        CouponResult with the coupon and the discount amount

    Raises:
        CouponError: If the coupon is unknown, inactive, expired or used up
    """
    coupon = Coupon.objects.filter(in_date_window("date_start", "date_end"), code=code, status=True).first()
    if coupon is None:
        raise CouponError("Invalid or expired coupon")

    subtotal = Decimal(str(subtotal))
    if coupon.total and subtotal < coupon.total:
        raise CouponError(f"Order total must be at least {money(coupon.total):.2f} to use this coupon")

    history = CouponHistory.objects.filter(coupon_id=coupon.coupon_id)
    if coupon.uses_total > 0 and history.count() >= coupon.uses_total:
        raise CouponError("Coupon usage limit reached")

    uses_customer = int(coupon.uses_customer or 0)
    if customer_id and uses_customer > 0 and history.filter(customer_id=customer_id).count() >= uses_customer:
        raise CouponError("Coupon usage limit reached for this customer")

    discount = calculate_discount(coupon, subtotal)
    logger.debug("Coupon %s gives %s on %s", coupon.code, discount, subtotal)
    return CouponResult(coupon=coupon, discount=discount)
