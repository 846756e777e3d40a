"""Request validation for checkout, order and coupon endpoints."""

from rest_framework import serializers

from storefront.opencart.models import Address, Coupon, OrderStatus


class CheckoutSerializer(serializers.Serializer):
    shipping_address_id = serializers.IntegerField()
    payment_method = serializers.CharField(max_length=128)
    comment = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    coupon_code = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)

    def validate_shipping_address_id(self, value):
        if not Address.objects.filter(address_id=value).exists():
            raise serializers.ValidationError("The selected shipping address id is invalid.")
        return value


class OrderListParamsSerializer(serializers.Serializer):
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False, default=10)


class ReturnRequestSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=500)
    product_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)


class AdminOrderListParamsSerializer(serializers.Serializer):
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False, default=20)
    status_id = serializers.IntegerField(required=False)
    customer_id = serializers.IntegerField(required=False)
    search = serializers.CharField(required=False, allow_blank=True, default="")
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)

    def validate(self, attrs):
        if "date_from" in attrs and "date_to" in attrs and attrs["date_to"] < attrs["date_from"]:
            raise serializers.ValidationError(
                {"date_to": ["The date to must be a date after or equal to date from."]}
            )
        return attrs


class OrderStatusUpdateSerializer(serializers.Serializer):
    order_status_id = serializers.IntegerField()
    comment = serializers.CharField(required=False, allow_blank=True, default="")
    notify = serializers.BooleanField(required=False, default=False)

    def validate_order_status_id(self, value):
        if not OrderStatus.objects.filter(order_status_id=value).exists():
            raise serializers.ValidationError("The selected order status id is invalid.")
        return value


class CouponListParamsSerializer(serializers.Serializer):
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=50, required=False, default=20)
    status = serializers.ChoiceField(choices=["active", "inactive", "all"], required=False, default="all")


class CouponSerializer(serializers.Serializer):
    """Coupon fields; updates use ``partial=True``."""

    name = serializers.CharField(max_length=128)
    code = serializers.CharField(max_length=20)
    type = serializers.ChoiceField(choices=[Coupon.TYPE_PERCENTAGE, Coupon.TYPE_FIXED])
    discount = serializers.DecimalField(max_digits=15, decimal_places=4, min_value=0)
    total = serializers.DecimalField(max_digits=15, decimal_places=4, min_value=0)
    date_start = serializers.DateField()
    date_end = serializers.DateField()
    uses_total = serializers.IntegerField(min_value=0)
    uses_customer = serializers.IntegerField(min_value=0)
    status = serializers.BooleanField()

    def validate_code(self, value):
        coupons = Coupon.objects.filter(code=value)
        if self.instance is not None:
            coupons = coupons.exclude(coupon_id=self.instance.coupon_id)
        if coupons.exists():
            raise serializers.ValidationError("The code has already been taken.")
        return value

    def validate(self, attrs):
        start = attrs.get("date_start", getattr(self.instance, "date_start", None))
        end = attrs.get("date_end", getattr(self.instance, "date_end", None))
        if ("date_start" in attrs or "date_end" in attrs) and start and end and end < start:
            raise serializers.ValidationError(
                {"date_end": ["The date end must be a date after or equal to date start."]}
            )

        coupon_type = attrs.get("type", getattr(self.instance, "type", None))
        discount = attrs.get("discount", getattr(self.instance, "discount", None))
        if coupon_type == Coupon.TYPE_PERCENTAGE and discount is not None and discount > 100:
            raise serializers.ValidationError(
                {"discount": ["A percentage discount may not be greater than 100."]}
            )
        return attrs


class CouponValidateParamsSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=20)
    total = serializers.DecimalField(max_digits=15, decimal_places=4, min_value=0, required=False, default=0)
