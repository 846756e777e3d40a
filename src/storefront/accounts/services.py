"""Account service layer.

Customer registration, token issuing, password changes and back-office user
management. Views call these functions instead of touching models directly.
"""

import logging
import secrets
from datetime import timedelta

from django.conf import settings
from django.core.mail import send_mail
from django.db import transaction
from django.utils import timezone

from storefront.core.models import ApiToken, PasswordResetToken, hash_secret
from storefront.opencart.exceptions import StorefrontError
from storefront.opencart.models import (
    Address,
    Customer,
    CustomerActivity,
    CustomerIp,
    CustomerLogin,
    CustomerWishlist,
    Order,
)

from .passwords import check_password, make_salt, set_password

logger = logging.getLogger(__name__)


def is_admin(customer: Customer) -> bool:
    """Back-office access is granted by the admin customer group."""
    return customer.customer_group_id == settings.ADMIN_CUSTOMER_GROUP_ID


def scopes_for(customer: Customer) -> list[str]:
    scopes = [ApiToken.SCOPE_USER]
    if is_admin(customer):
        scopes.append(ApiToken.SCOPE_ADMIN)
    return scopes


def user_summary(customer: Customer) -> dict:
    return {
        "id": customer.customer_id,
        "name": customer.full_name,
        "email": customer.email,
        "is_admin": is_admin(customer),
    }


@transaction.atomic
def register_customer(data: dict, ip: str = "") -> tuple[Customer, str]:
    """Create an active customer and a user-scoped token.

    Args:
        data: Validated registration fields
        ip: Client address recorded on the customer

    Returns:
        Tuple of (customer, plaintext access token)
    """
    customer = Customer(
        customer_group_id=settings.OPENCART_CUSTOMER_GROUP_ID,
        store_id=0,
        language_id=settings.OPENCART_LANGUAGE_ID,
        firstname=data["firstname"],
        lastname=data["lastname"],
        email=data["email"],
        telephone=data["telephone"],
        salt=make_salt(),
        ip=ip,
        status=True,
        from_come="api",
        date_added=timezone.now(),
    )
    set_password(customer, data["password"])
    customer.save()

    _, plaintext = ApiToken.objects.issue(customer.customer_id, [ApiToken.SCOPE_USER], name="auth_token")
    logger.info("Registered customer %s", customer.customer_id)
    return customer, plaintext


def login(email: str, password: str) -> tuple[Customer, str] | None:
    """Authenticate an active customer and issue a token.

    Returns:
        Tuple of (customer, plaintext access token), or None for bad credentials
    """
    customer = Customer.objects.filter(email__iexact=email, status=True).first()
    if customer is None or not check_password(password, customer.password, customer.salt):
        logger.info("Failed login for %s", email)
        return None

    _, plaintext = ApiToken.objects.issue(customer.customer_id, scopes_for(customer), name="auth_token")
    return customer, plaintext


def update_profile(customer: Customer, data: dict) -> Customer:
    for field in ("firstname", "lastname", "telephone", "email"):
        if field in data:
            setattr(customer, field, data[field])
    customer.save(update_fields=[field for field in ("firstname", "lastname", "telephone", "email") if field in data])
    return customer


@transaction.atomic
def change_password(customer: Customer, current_password: str, new_password: str, keep_token: ApiToken) -> None:
    """Change a password and revoke every other token of the customer.

    Raises:
        StorefrontError: If the current password does not match
    """
    if not check_password(current_password, customer.password, customer.salt):
        raise StorefrontError("Current password is incorrect")

    set_password(customer, new_password)
    customer.save(update_fields=["password", "salt"])
    ApiToken.objects.filter(customer_id=customer.customer_id).exclude(pk=keep_token.pk).delete()


def send_password_reset(email: str) -> None:
    """Store a reset token for ``email`` and mail the plaintext token."""
    token = secrets.token_urlsafe(32)
    PasswordResetToken.objects.update_or_create(
        email=email.lower(),
        defaults={"token_hash": hash_secret(token), "created_at": timezone.now()},
    )
    send_mail(
        subject=f"{settings.STORE_NAME} password reset",
        message=(
            "Use this token to reset your password:\n\n"
            f"{token}\n\n"
            f"It expires in {settings.PASSWORD_RESET_TIMEOUT_MINUTES} minutes."
        ),
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[email],
    )


@transaction.atomic
def reset_password(email: str, token: str, new_password: str) -> bool:
    """Consume a reset token and set a new password.

    Returns:
        True when the token was valid and the password changed
    """
    reset = PasswordResetToken.objects.filter(email=email.lower()).first()
    if reset is None or not reset.matches(token):
        return False

    expires_at = reset.created_at + timedelta(minutes=settings.PASSWORD_RESET_TIMEOUT_MINUTES)
    if expires_at < timezone.now():
        reset.delete()
        return False

    customer = Customer.objects.filter(email__iexact=email).first()
    if customer is None:
        return False

    customer.salt = make_salt()
    set_password(customer, new_password)
    customer.save(update_fields=["password", "salt"])
    reset.delete()
    ApiToken.objects.filter(customer_id=customer.customer_id).delete()
    logger.info("Password reset for customer %s", customer.customer_id)
    return True


@transaction.atomic
def delete_customer(customer: Customer) -> None:
    """Delete a customer and the rows that only make sense with it.

    Raises:
        StorefrontError: If the customer has orders
    """
    if Order.objects.filter(customer_id=customer.customer_id).exists():
        raise StorefrontError("Cannot delete user with orders. Archive instead.")

    CustomerWishlist.objects.filter(customer_id=customer.customer_id).delete()
    Address.objects.filter(customer_id=customer.customer_id).delete()
    CustomerActivity.objects.filter(customer_id=customer.customer_id).delete()
    CustomerIp.objects.filter(customer_id=customer.customer_id).delete()
    CustomerLogin.objects.filter(email=customer.email).delete()
    ApiToken.objects.filter(customer_id=customer.customer_id).delete()
    Customer.objects.filter(customer_id=customer.customer_id).delete()
    logger.info("Deleted customer %s", customer.customer_id)
