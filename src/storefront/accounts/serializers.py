"""Request validation for account endpoints."""

from django.conf import settings
from rest_framework import serializers

from storefront.opencart.models import Customer, CustomerGroup

PASSWORD_MIN_LENGTH = 8


def email_taken(email, exclude_customer_id=None):
    customers = Customer.objects.filter(email__iexact=email)
    if exclude_customer_id is not None:
        customers = customers.exclude(customer_id=exclude_customer_id)
    return customers.exists()


class ConfirmedPasswordMixin:
    """Require ``password_confirmation`` to match ``password``."""

    def validate(self, attrs):
        attrs = super().validate(attrs)
        if attrs.get("password") != attrs.get("password_confirmation"):
            raise serializers.ValidationError(
                {"password": ["The password field confirmation does not match."]}
            )
        return attrs


class RegisterSerializer(ConfirmedPasswordMixin, serializers.Serializer):
    firstname = serializers.CharField(max_length=32)
    lastname = serializers.CharField(max_length=32)
    email = serializers.EmailField(max_length=96)
    telephone = serializers.CharField(max_length=32)
    password = serializers.CharField(min_length=PASSWORD_MIN_LENGTH, trim_whitespace=False)
    password_confirmation = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)

    def validate_email(self, value):
        if email_taken(value):
            raise serializers.ValidationError("The email has already been taken.")
        return value


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(trim_whitespace=False)


class ProfileSerializer(serializers.Serializer):
    firstname = serializers.CharField(max_length=32, required=False)
    lastname = serializers.CharField(max_length=32, required=False)
    telephone = serializers.CharField(max_length=32, required=False)
    email = serializers.EmailField(max_length=96, required=False)

    def validate_email(self, value):
        if email_taken(value, exclude_customer_id=self.context["customer"].customer_id):
            raise serializers.ValidationError("The email has already been taken.")
        return value


class ChangePasswordSerializer(ConfirmedPasswordMixin, serializers.Serializer):
    current_password = serializers.CharField(trim_whitespace=False)
    password = serializers.CharField(min_length=PASSWORD_MIN_LENGTH, trim_whitespace=False)
    password_confirmation = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)


class ForgotPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField()

    def validate_email(self, value):
        if not Customer.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("The selected email is invalid.")
        return value


class ResetPasswordSerializer(ConfirmedPasswordMixin, serializers.Serializer):
    token = serializers.CharField()
    email = serializers.EmailField()
    password = serializers.CharField(min_length=PASSWORD_MIN_LENGTH, trim_whitespace=False)
    password_confirmation = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)


def customer_group_exists(group_id):
    return group_id == settings.ADMIN_CUSTOMER_GROUP_ID or CustomerGroup.objects.filter(
        customer_group_id=group_id
    ).exists()


class UserListParamsSerializer(serializers.Serializer):
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False, default=20)
    status = serializers.ChoiceField(choices=["active", "inactive", "all"], required=False, default="all")
    search = serializers.CharField(required=False, allow_blank=True, default="")
    group_id = serializers.IntegerField(required=False)

    def validate_group_id(self, value):
        if not customer_group_exists(value):
            raise serializers.ValidationError("The selected group id is invalid.")
        return value


class UpdateRoleSerializer(serializers.Serializer):
    customer_group_id = serializers.IntegerField()

    def validate_customer_group_id(self, value):
        if not customer_group_exists(value):
            raise serializers.ValidationError("The selected customer group id is invalid.")
        return value
