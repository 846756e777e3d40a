"""Bearer token authentication for the JSON API."""

import logging

from django.http import JsonResponse

from storefront.accounts.services import is_admin
from storefront.opencart.models import Customer

from .models import ApiToken

logger = logging.getLogger(__name__)


def authenticate_request(request, scope=ApiToken.SCOPE_USER):
    """Attach ``request.customer`` and ``request.api_token`` from the bearer token.

    Tokens of disabled customers are refused. The admin scope also needs the
    customer to still be in the admin group.

    Returns:
        None when the request may proceed, otherwise the error JsonResponse
    """
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return JsonResponse({"message": "Unauthenticated."}, status=401)

    token = ApiToken.objects.resolve(auth_header[7:].strip())
    if token is None:
        return JsonResponse({"message": "Unauthenticated."}, status=401)

    customer = Customer.objects.filter(customer_id=token.customer_id, status=True).first()
    if customer is None:
        logger.warning("Token %s refers to a missing or disabled customer %s", token.pk, token.customer_id)
        return JsonResponse({"message": "Unauthenticated."}, status=401)

    if scope and not token.can(scope):
        return JsonResponse({"message": "Invalid ability provided."}, status=403)

    if scope == ApiToken.SCOPE_ADMIN and not is_admin(customer):
        logger.warning("Customer %s used an admin token after leaving the admin group", customer.customer_id)
        return JsonResponse({"message": "Invalid ability provided."}, status=403)

    token.touch()
    request.api_token = token
    request.customer = customer
    return None


class TokenRequiredMixin:
    """Mixin for API views that need an authenticated customer."""

    required_scope = ApiToken.SCOPE_USER

    def dispatch(self, request, *args, **kwargs):
        error = authenticate_request(request, self.required_scope)
        if error is not None:
            return error
        return super().dispatch(request, *args, **kwargs)


class AdminRequiredMixin(TokenRequiredMixin):
    """Mixin for back-office API views."""

    required_scope = ApiToken.SCOPE_ADMIN
