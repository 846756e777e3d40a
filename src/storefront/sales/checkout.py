"""Checkout: turn a customer's mobile cart into an OpenCart order.

The whole conversion runs in one transaction. Stock rows are locked while
the order is written so two checkouts cannot sell the same unit twice.
"""

import logging
from decimal import Decimal
from typing import NamedTuple

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from storefront.opencart.exceptions import CheckoutError
from storefront.opencart.models import (
    Address,
    CartItem,
    Country,
    Customer,
    CouponHistory,
    Order,
    OrderProduct,
    OrderTotal,
    Product,
    ProductDescription,
    Zone,
)
from storefront.opencart.orders import add_order_history
from storefront.opencart.pricing import evaluate_coupon, get_final_price, round_money

logger = logging.getLogger(__name__)

MOBILE_SESSION_ID = "0"


class CartLine(NamedTuple):
    """A cart item priced for checkout."""

    product: Product
    name: str
    quantity: int
    unit_price: Decimal
    total: Decimal


class OrderTotals(NamedTuple):
    """Monetary breakdown of an order."""

    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    discount: Decimal
    total: Decimal


def cart_items(customer_id: int):
    return CartItem.objects.filter(customer_id=customer_id, session_id=MOBILE_SESSION_ID).order_by("cart_id")


def price_cart(items) -> list[CartLine]:
    """Lock and price the products in a cart.

    Raises:
        CheckoutError: If a product is missing or short of stock
    """
    quantities = {}
    for item in items:
        quantities[item.product_id] = quantities.get(item.product_id, 0) + item.quantity

    products = Product.objects.select_for_update().in_bulk(list(quantities))
    names = dict(
        ProductDescription.objects.filter(
            product_id__in=list(quantities),
            language_id=settings.OPENCART_LANGUAGE_ID,
        ).values_list("product_id", "name")
    )

    lines = []
    for product_id, quantity in quantities.items():
        product = products.get(product_id)
        if product is None or product.quantity < quantity:
            model = product.model if product is not None else "Unknown"
            raise CheckoutError(f"Product out of stock: {model}")

        unit_price = round_money(get_final_price(product))
        lines.append(
            CartLine(
                product=product,
                name=names.get(product_id) or product.model,
                quantity=quantity,
                unit_price=unit_price,
                total=round_money(unit_price * quantity),
            )
        )
    return lines


def calculate_totals(lines: list[CartLine], discount: Decimal = Decimal("0")) -> OrderTotals:
    """Subtotal plus flat shipping and tax, minus any coupon discount."""
    subtotal = round_money(sum((line.total for line in lines), Decimal("0")))
    shipping = round_money(Decimal(settings.CHECKOUT_FLAT_SHIPPING))
    tax = round_money(Decimal(settings.CHECKOUT_TAX))
    total = round_money(subtotal + shipping + tax - discount)
    return OrderTotals(subtotal=subtotal, shipping=shipping, tax=tax, discount=discount, total=total)


def _request_meta(request) -> dict:
    if request is None:
        return {}
    return {
        "ip": request.META.get("REMOTE_ADDR", "") or "",
        "forwarded_ip": request.headers.get("X-Forwarded-For", "")[:40],
        "user_agent": request.headers.get("User-Agent", "")[:255],
        "accept_language": request.headers.get("Accept-Language", "")[:255],
    }


@transaction.atomic
def place_order(
    customer: Customer,
    shipping_address_id: int,
    payment_method: str,
    comment: str = "",
    coupon_code: str | None = None,
    request=None,
) -> Order:
    """Create an order from the customer's cart.

    Args:
        customer: Customer placing the order
        shipping_address_id: One of the customer's addresses
        payment_method: Payment method code chosen in the app
        comment: Optional order comment
        coupon_code: Optional coupon to apply to the subtotal
        request: Incoming request, for client address and agent details

    Returns:
        The created Order

    Raises:
        CheckoutError: If the cart is empty, out of stock or the address is invalid
        CouponError: If the coupon cannot be applied
    """
    items = list(cart_items(customer.customer_id))
    if not items:
        raise CheckoutError("Cart is empty")

    address = Address.objects.filter(address_id=shipping_address_id, customer_id=customer.customer_id).first()
    if address is None:
        raise CheckoutError("Invalid shipping address")

    lines = price_cart(items)

    coupon_result = None
    discount = Decimal("0")
    if coupon_code:
        subtotal = sum((line.total for line in lines), Decimal("0"))
        coupon_result = evaluate_coupon(coupon_code, subtotal, customer_id=customer.customer_id)
        discount = coupon_result.discount
    totals = calculate_totals(lines, discount)

    country = Country.objects.filter(country_id=address.country_id).values_list("name", flat=True).first() or ""
    zone = Zone.objects.filter(zone_id=address.zone_id).values_list("name", flat=True).first() or ""
    address_fields = {
        "address_1": address.address_1,
        "address_2": address.address_2,
        "city": address.city,
        "postcode": address.postcode,
        "country": country,
        "country_id": address.country_id,
        "zone": zone,
        "zone_id": address.zone_id,
    }

    now = timezone.now()
    order = Order.objects.create(
        invoice_prefix="INV-",
        store_id=0,
        store_name=settings.STORE_NAME,
        store_url=settings.STORE_URL,
        customer_id=customer.customer_id,
        customer_group_id=customer.customer_group_id,
        firstname=customer.firstname,
        lastname=customer.lastname,
        email=customer.email,
        telephone=customer.telephone,
        payment_firstname=customer.firstname,
        payment_lastname=customer.lastname,
        **{f"payment_{key}": value for key, value in address_fields.items()},
        payment_method=payment_method,
        payment_code=payment_method,
        shipping_firstname=customer.firstname,
        shipping_lastname=customer.lastname,
        **{f"shipping_{key}": value for key, value in address_fields.items()},
        shipping_method="Standard Shipping",
        shipping_code="standard",
        comment=comment or "",
        total=totals.total,
        order_status_id=settings.ORDER_STATUS_PENDING,
        language_id=settings.OPENCART_LANGUAGE_ID,
        currency_id=settings.CURRENCY_ID,
        currency_code=settings.CURRENCY_CODE,
        currency_value=Decimal("1"),
        order_from=settings.ORDER_FROM,
        date_added=now,
        date_modified=now,
        **_request_meta(request),
    )

    for line in lines:
        OrderProduct.objects.create(
            order_id=order.order_id,
            product_id=line.product.product_id,
            name=line.name,
            model=line.product.model,
            quantity=line.quantity,
            price=line.unit_price,
            total=line.total,
            tax=Decimal("0"),
            reward=0,
        )
        Product.objects.filter(product_id=line.product.product_id).update(quantity=F("quantity") - line.quantity)

    total_lines = [
        ("sub_total", "Sub-Total", totals.subtotal),
        ("shipping", "Shipping", totals.shipping),
        ("tax", "Tax", totals.tax),
    ]
    if coupon_result is not None:
        total_lines.append(("coupon", f"Coupon ({coupon_result.coupon.code})", -totals.discount))
        CouponHistory.objects.create(
            coupon_id=coupon_result.coupon.coupon_id,
            order_id=order.order_id,
            customer_id=customer.customer_id,
            amount=-totals.discount,
            date_added=now,
        )
    total_lines.append(("total", "Total", totals.total))
    OrderTotal.objects.bulk_create(
        OrderTotal(order_id=order.order_id, code=code, title=title, value=value, sort_order=position)
        for position, (code, title, value) in enumerate(total_lines, start=1)
    )

    add_order_history(order.order_id, settings.ORDER_STATUS_PENDING, "Order created", notify=False)
    cart_items(customer.customer_id).delete()

    logger.info("Order %s created for customer %s (total %s)", order.order_id, customer.customer_id, totals.total)
    return order
