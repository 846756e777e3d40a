"""Order and coupon service layer.

Views should call these functions instead of manipulating models directly.
"""

import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from storefront.opencart.exceptions import StorefrontError
from storefront.opencart.models import Coupon, CouponHistory, Customer, Order, OrderProduct, Return
from storefront.opencart.orders import add_order_history

logger = logging.getLogger(__name__)

RETURN_STATUS_PENDING = 1
RETURN_REASON_OTHER = 1


@transaction.atomic
def cancel_order(order: Order) -> Order:
    """Cancel a pending or processing order on the customer's request.

    Raises:
        StorefrontError: If the order is past the point where it can be cancelled
    """
    if order.order_status_id not in settings.ORDER_STATUS_CANCELLABLE:
        raise StorefrontError("Order not found or cannot be cancelled")

    order.order_status_id = settings.ORDER_STATUS_CANCELED
    order.date_modified = timezone.now()
    order.save(update_fields=["order_status_id", "date_modified"])
    add_order_history(order.order_id, settings.ORDER_STATUS_CANCELED, "Customer requested cancellation", notify=True)

    logger.info("Order %s cancelled by customer %s", order.order_id, order.customer_id)
    return order


@transaction.atomic
def request_return(order: Order, customer: Customer, product_ids: list[int], reason: str) -> list[Return]:
    """Open one return per ordered product.

    Args:
        order: The customer's order
        customer: Customer asking for the return
        product_ids: Products on the order to return
        reason: Customer's explanation, stored as the return comment

    Returns:
        The created Return rows
    """
    lines = {line.product_id: line for line in OrderProduct.objects.filter(order_id=order.order_id)}
    now = timezone.now()
    returns = []
    for product_id in dict.fromkeys(product_ids):
        line = lines[product_id]
        returns.append(
            Return.objects.create(
                order_id=order.order_id,
                product_id=product_id,
                customer_id=customer.customer_id,
                firstname=customer.firstname,
                lastname=customer.lastname,
                email=customer.email,
                telephone=customer.telephone,
                product=line.name,
                model=line.model,
                quantity=line.quantity,
                opened=False,
                return_reason_id=RETURN_REASON_OTHER,
                return_action_id=0,
                return_status_id=RETURN_STATUS_PENDING,
                comment=reason,
                date_ordered=order.date_added.date(),
                date_added=now,
                date_modified=now,
            )
        )

    logger.info("Return requested for order %s (%d products)", order.order_id, len(returns))
    return returns


@transaction.atomic
def update_order_status(order: Order, status_id: int, comment: str = "", notify: bool = False) -> Order:
    order.order_status_id = status_id
    order.date_modified = timezone.now()
    order.save(update_fields=["order_status_id", "date_modified"])
    add_order_history(order.order_id, status_id, comment, notify=notify)
    logger.info("Order %s moved to status %s", order.order_id, status_id)
    return order


# =============================================================================
# Coupons
# =============================================================================


def create_coupon(data: dict) -> Coupon:
    coupon = Coupon.objects.create(
        name=data["name"],
        code=data["code"],
        type=data["type"],
        discount=data["discount"],
        logged=False,
        shipping=False,
        total=data["total"],
        date_start=data["date_start"],
        date_end=data["date_end"],
        uses_total=data["uses_total"],
        uses_customer=str(data["uses_customer"]),
        status=data["status"],
        customer_id=0,
        date_added=timezone.now(),
    )
    logger.info("Created coupon %s (%s)", coupon.coupon_id, coupon.code)
    return coupon


def update_coupon(coupon: Coupon, data: dict) -> Coupon:
    for field, value in data.items():
        setattr(coupon, field, str(value) if field == "uses_customer" else value)
    if data:
        coupon.save(update_fields=list(data))
    return coupon


@transaction.atomic
def delete_coupon(coupon: Coupon) -> None:
    CouponHistory.objects.filter(coupon_id=coupon.coupon_id).delete()
    Coupon.objects.filter(coupon_id=coupon.coupon_id).delete()
    logger.info("Deleted coupon %s", coupon.coupon_id)
