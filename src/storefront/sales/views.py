"""Sales API views.

These endpoints power the storefront app with:
- Checkout from the mobile cart
- Order history, cancellation and returns for the signed-in customer
- Coupon validation
- Back-office order and coupon management (admin scope)
"""

import logging

from django.conf import settings
from django.db.models import Count, Q
from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from storefront.core.api import format_datetime, message, not_found, paginate, read_json, validation_error
from storefront.core.auth import AdminRequiredMixin, TokenRequiredMixin
from storefront.opencart.exceptions import StorefrontError
from storefront.opencart.models import Coupon, Order, OrderProduct
from storefront.opencart.orders import get_order_history, status_name, status_names, UNKNOWN_STATUS
from storefront.opencart.pricing import evaluate_coupon, money

from . import services
from .checkout import place_order
from .serializers import (
    AdminOrderListParamsSerializer,
    CheckoutSerializer,
    CouponListParamsSerializer,
    CouponSerializer,
    CouponValidateParamsSerializer,
    OrderListParamsSerializer,
    OrderStatusUpdateSerializer,
    ReturnRequestSerializer,
)

logger = logging.getLogger(__name__)


def order_summary(order, names) -> dict:
    return {
        "id": order.order_id,
        "invoice_no": order.invoice_no,
        "total": money(order.total),
        "status": names.get(order.order_status_id, UNKNOWN_STATUS),
        "status_id": order.order_status_id,
        "date_added": format_datetime(order.date_added),
        "shipping_method": order.shipping_method,
        "payment_method": order.payment_method,
    }


def _address(order, prefix) -> dict:
    return {
        field: getattr(order, f"{prefix}_{field}")
        for field in ("firstname", "lastname", "address_1", "address_2", "city", "postcode", "country", "zone")
    }


def order_detail(order) -> dict:
    """Full order payload: header, products, totals and history."""
    return {
        "order": {
            "id": order.order_id,
            "invoice_no": order.invoice_no,
            "status": status_name(order.order_status_id),
            "status_id": order.order_status_id,
            "date_added": format_datetime(order.date_added),
            "date_modified": format_datetime(order.date_modified),
            "shipping_address": _address(order, "shipping"),
            "payment_address": _address(order, "payment"),
            "payment_method": order.payment_method,
            "shipping_method": order.shipping_method,
            "comment": order.comment,
            "total": money(order.total),
        },
        "products": [
            {
                "product_id": line.product_id,
                "name": line.name,
                "model": line.model,
                "quantity": line.quantity,
                "price": money(line.price),
                "total": money(line.total),
            }
            for line in OrderProduct.objects.filter(order_id=order.order_id).order_by("order_product_id")
        ],
        "totals": [
            {"code": line.code, "title": line.title, "value": money(line.value)}
            for line in order.totals.order_by("sort_order", "order_total_id")
        ],
        "history": get_order_history(order.order_id),
    }


@method_decorator(csrf_exempt, name="dispatch")
class CheckoutView(TokenRequiredMixin, View):
    """Create an order from the cart.

    POST /api/v1/checkout
    Headers: Authorization: Bearer <token>
    {
        "shipping_address_id": 12,
        "payment_method": "cod",
        "comment": "Leave at the door",
        "coupon_code": "SAVE10"
    }
    """

    def post(self, request):
        serializer = CheckoutSerializer(data=read_json(request))
        if not serializer.is_valid():
            return validation_error(serializer.errors)
        data = serializer.validated_data

        try:
            order = place_order(
                request.customer,
                shipping_address_id=data["shipping_address_id"],
                payment_method=data["payment_method"],
                comment=data.get("comment") or "",
                coupon_code=data.get("coupon_code") or None,
                request=request,
            )
        except StorefrontError:
            raise
        except Exception as e:
            logger.exception("Order creation failed")
            return message("Failed to create order", status=500, error=str(e))

        return message(
            "Order created successfully",
            status=201,
            order={
                "id": order.order_id,
                "invoice_no": order.invoice_no,
                "total": money(order.total),
                "status": "pending",
                "date_added": format_datetime(order.date_added),
            },
        )


@method_decorator(csrf_exempt, name="dispatch")
class OrderListView(TokenRequiredMixin, View):
    def get(self, request):
        params = OrderListParamsSerializer(data=request.GET)
        if not params.is_valid():
            return validation_error(params.errors)

        orders = Order.objects.filter(customer_id=request.customer.customer_id).order_by("-date_added", "-order_id")
        page = paginate(orders, params.validated_data["page"], params.validated_data["limit"])
        names = status_names()
        return JsonResponse({
            "data": [order_summary(order, names) for order in page.items],
            "meta": page.meta(),
        })


@method_decorator(csrf_exempt, name="dispatch")
class OrderDetailView(TokenRequiredMixin, View):
    def get(self, request, order_id):
        order = Order.objects.filter(order_id=order_id, customer_id=request.customer.customer_id).first()
        if order is None:
            return not_found("Order")
        return JsonResponse(order_detail(order))


@method_decorator(csrf_exempt, name="dispatch")
class OrderCancelView(TokenRequiredMixin, View):
    def post(self, request, order_id):
        order = Order.objects.filter(
            order_id=order_id,
            customer_id=request.customer.customer_id,
            order_status_id__in=settings.ORDER_STATUS_CANCELLABLE,
        ).first()
        if order is None:
            return message("Order not found or cannot be cancelled", status=404)

        services.cancel_order(order)
        return message(
            "Order cancellation requested successfully",
            order={"id": order.order_id, "status": status_name(order.order_status_id)},
        )


@method_decorator(csrf_exempt, name="dispatch")
class OrderReturnView(TokenRequiredMixin, View):
    """Request a return.

    POST /api/v1/orders/<id>/return
    {
        "reason": "Wrong size",
        "product_ids": [42]
    }
    """

    def post(self, request, order_id):
        serializer = ReturnRequestSerializer(data=read_json(request))
        if not serializer.is_valid():
            return validation_error(serializer.errors)

        order = Order.objects.filter(order_id=order_id, customer_id=request.customer.customer_id).first()
        if order is None:
            return not_found("Order")

        product_ids = serializer.validated_data["product_ids"]
        ordered = set(OrderProduct.objects.filter(order_id=order.order_id).values_list("product_id", flat=True))
        errors = {
            str(index): ["The selected product is not part of this order."]
            for index, product_id in enumerate(product_ids)
            if product_id not in ordered
        }
        if errors:
            return validation_error({"product_ids": errors})

        returns = services.request_return(order, request.customer, product_ids, serializer.validated_data["reason"])
        return message(
            "Return request submitted successfully",
            **{
                "return": {
                    "id": returns[0].return_id,
                    "ids": [item.return_id for item in returns],
                    "order_id": order.order_id,
                    "status": "pending",
                },
            },
        )


# =============================================================================
# Coupons
# =============================================================================


def format_coupon(coupon, uses=None) -> dict:
    uses = uses if uses is not None else coupon.histories.count()
    return {
        "id": coupon.coupon_id,
        "name": coupon.name,
        "code": coupon.code,
        "type": "percentage" if coupon.type == Coupon.TYPE_PERCENTAGE else "fixed",
        "discount": money(coupon.discount),
        "minimum_order": money(coupon.total),
        "status": "active" if coupon.status else "inactive",
        "valid_from": format_datetime(coupon.date_start),
        "valid_until": format_datetime(coupon.date_end),
        "uses_total": coupon.uses_total,
        "uses_remaining": max(0, coupon.uses_total - uses) if coupon.uses_total > 0 else "Unlimited",
        "uses_customer": int(coupon.uses_customer or 0),
        "date_added": format_datetime(coupon.date_added),
    }


@method_decorator(csrf_exempt, name="dispatch")
class CouponValidateView(View):
    """Check a coupon against a cart total.

    GET /api/v1/coupons/validate?code=SAVE10&total=250
    """

    def get(self, request):
        params = CouponValidateParamsSerializer(data=request.GET)
        if not params.is_valid():
            return validation_error(params.errors)

        try:
            result = evaluate_coupon(params.validated_data["code"], params.validated_data["total"])
        except StorefrontError as e:
            return JsonResponse({"valid": False, "message": e.message}, status=400)

        return JsonResponse({
            "valid": True,
            "message": "Coupon is valid",
            "coupon": {
                "code": result.coupon.code,
                "name": result.coupon.name,
                "type": "percentage" if result.coupon.type == Coupon.TYPE_PERCENTAGE else "fixed",
                "discount": money(result.coupon.discount),
                "minimum_order": money(result.coupon.total),
            },
            "discount_amount": money(result.discount),
        })


@method_decorator(csrf_exempt, name="dispatch")
class AdminCouponListView(AdminRequiredMixin, View):
    def get(self, request):
        params = CouponListParamsSerializer(data=request.GET)
        if not params.is_valid():
            return validation_error(params.errors)
        filters = params.validated_data

        coupons = Coupon.objects.annotate(uses=Count("histories"))
        if filters["status"] == "active":
            coupons = coupons.filter(status=True)
        elif filters["status"] == "inactive":
            coupons = coupons.filter(status=False)

        page = paginate(coupons.order_by("-date_added", "-coupon_id"), filters["page"], filters["limit"])
        return JsonResponse({
            "data": [format_coupon(coupon, coupon.uses) for coupon in page.items],
            "meta": page.meta(),
        })

    def post(self, request):
        serializer = CouponSerializer(data=read_json(request))
        if not serializer.is_valid():
            return validation_error(serializer.errors)

        coupon = services.create_coupon(serializer.validated_data)
        return message("Coupon created successfully", status=201, coupon=format_coupon(coupon, 0))


@method_decorator(csrf_exempt, name="dispatch")
class AdminCouponDetailView(AdminRequiredMixin, View):
    def put(self, request, coupon_id):
        coupon = Coupon.objects.filter(coupon_id=coupon_id).first()
        if coupon is None:
            return not_found("Coupon")

        serializer = CouponSerializer(coupon, data=read_json(request), partial=True)
        if not serializer.is_valid():
            return validation_error(serializer.errors)

        coupon = services.update_coupon(coupon, serializer.validated_data)
        return message("Coupon updated successfully", coupon=format_coupon(coupon))

    def delete(self, request, coupon_id):
        coupon = Coupon.objects.filter(coupon_id=coupon_id).first()
        if coupon is None:
            return not_found("Coupon")

        services.delete_coupon(coupon)
        return message("Coupon deleted successfully")


# =============================================================================
# Back-office orders
# =============================================================================


@method_decorator(csrf_exempt, name="dispatch")
class AdminOrderListView(AdminRequiredMixin, View):
    """List all orders.

    GET /api/v1/admin/orders?status_id=1&search=sara&date_from=2024-01-01&page=1
    """

    def get(self, request):
        params = AdminOrderListParamsSerializer(data=request.GET)
        if not params.is_valid():
            return validation_error(params.errors)
        filters = params.validated_data

        orders = Order.objects.filter(order_status_id__gt=0)
        if "status_id" in filters:
            orders = orders.filter(order_status_id=filters["status_id"])
        if "customer_id" in filters:
            orders = orders.filter(customer_id=filters["customer_id"])
        if filters["search"]:
            term = filters["search"]
            condition = Q(firstname__icontains=term) | Q(lastname__icontains=term) | Q(email__icontains=term)
            if term.isdigit():
                condition |= Q(order_id=int(term))
            orders = orders.filter(condition)
        if "date_from" in filters:
            orders = orders.filter(date_added__date__gte=filters["date_from"])
        if "date_to" in filters:
            orders = orders.filter(date_added__date__lte=filters["date_to"])

        page = paginate(orders.order_by("-date_added", "-order_id"), filters["page"], filters["limit"])
        names = status_names()
        data = []
        for order in page.items:
            row = order_summary(order, names)
            row["customer"] = {"id": order.customer_id, "name": order.customer_name, "email": order.email}
            data.append(row)
        return JsonResponse({"data": data, "meta": page.meta()})


@method_decorator(csrf_exempt, name="dispatch")
class AdminOrderDetailView(AdminRequiredMixin, View):
    def get(self, request, order_id):
        order = Order.objects.filter(order_id=order_id).first()
        if order is None:
            return not_found("Order")

        data = order_detail(order)
        data["customer"] = {
            "id": order.customer_id,
            "name": order.customer_name,
            "email": order.email,
            "telephone": order.telephone,
        }
        return JsonResponse(data)


@method_decorator(csrf_exempt, name="dispatch")
class AdminOrderStatusView(AdminRequiredMixin, View):
    """Move an order to another status.

    PUT /api/v1/admin/orders/<id>/status
    {
        "order_status_id": 2,
        "comment": "Packed",
        "notify": true
    }
    """

    def put(self, request, order_id):
        serializer = OrderStatusUpdateSerializer(data=read_json(request))
        if not serializer.is_valid():
            return validation_error(serializer.errors)

        order = Order.objects.filter(order_id=order_id).first()
        if order is None:
            return not_found("Order")

        data = serializer.validated_data
        services.update_order_status(order, data["order_status_id"], data["comment"], data["notify"])
        return message(
            "Order status updated successfully",
            order={
                "id": order.order_id,
                "status_id": order.order_status_id,
                "status": status_name(order.order_status_id),
            },
        )
