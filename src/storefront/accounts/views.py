"""Account API views.

These endpoints power the storefront app with:
- Registration, login and logout via bearer tokens
- Profile and password management
- Password reset by email
- Back-office customer management (admin scope)
"""

import logging

from django.conf import settings
from django.db.models import OuterRef, Q, Subquery
from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from storefront.core.api import (
    client_ip,
    format_datetime,
    message,
    not_found,
    paginate,
    read_json,
    validation_error,
)
from storefront.core.auth import AdminRequiredMixin, TokenRequiredMixin
from storefront.opencart.models import Customer, CustomerGroupDescription, CustomerLogin

from . import services
from .serializers import (
    ChangePasswordSerializer,
    ForgotPasswordSerializer,
    LoginSerializer,
    ProfileSerializer,
    RegisterSerializer,
    ResetPasswordSerializer,
    UpdateRoleSerializer,
    UserListParamsSerializer,
)

logger = logging.getLogger(__name__)


def profile_payload(customer):
    return {
        "id": customer.customer_id,
        "firstname": customer.firstname,
        "lastname": customer.lastname,
        "email": customer.email,
        "telephone": customer.telephone,
        "full_name": customer.full_name,
        "is_admin": services.is_admin(customer),
        "date_added": format_datetime(customer.date_added),
    }


@method_decorator(csrf_exempt, name="dispatch")
class RegisterView(View):
    """Register a customer.

    POST /api/v1/auth/register
    {
        "firstname": "Sara",
        "lastname": "Ali",
        "email": "sara@example.com",
        "telephone": "0500000000",
        "password": "secret123",
        "password_confirmation": "secret123"
    }
    """

    def post(self, request):
        serializer = RegisterSerializer(data=read_json(request))
        if not serializer.is_valid():
            return validation_error(serializer.errors)

        customer, token = services.register_customer(serializer.validated_data, ip=client_ip(request))

        return JsonResponse(
            {
                "message": "User registered successfully",
                "access_token": token,
                "token_type": "Bearer",
                "user": services.user_summary(customer),
            },
            status=201,
        )


@method_decorator(csrf_exempt, name="dispatch")
class LoginView(View):
    """Login endpoint.

    POST /api/v1/auth/login
    {
        "email": "user@example.com",
        "password": "secret"
    }

    Returns a token for subsequent requests.
    """

    def post(self, request):
        serializer = LoginSerializer(data=read_json(request))
        if not serializer.is_valid():
            return validation_error(serializer.errors)

        result = services.login(serializer.validated_data["email"], serializer.validated_data["password"])
        if result is None:
            return message("Invalid credentials", status=401)

        customer, token = result
        return JsonResponse({
            "message": "Logged in successfully",
            "access_token": token,
            "token_type": "Bearer",
            "user": services.user_summary(customer),
        })


@method_decorator(csrf_exempt, name="dispatch")
class LogoutView(TokenRequiredMixin, View):
    def post(self, request):
        request.api_token.delete()
        return message("Logged out successfully")


@method_decorator(csrf_exempt, name="dispatch")
class ProfileView(TokenRequiredMixin, View):
    """Current customer's profile.

    GET /api/v1/auth/me
    PUT /api/v1/auth/me  (any of firstname, lastname, telephone, email)
    """

    def get(self, request):
        return JsonResponse(profile_payload(request.customer))

    def put(self, request):
        serializer = ProfileSerializer(data=read_json(request), context={"customer": request.customer})
        if not serializer.is_valid():
            return validation_error(serializer.errors)

        customer = services.update_profile(request.customer, serializer.validated_data)
        user = profile_payload(customer)
        del user["is_admin"], user["date_added"]
        return JsonResponse({"message": "Profile updated successfully", "user": user})


@method_decorator(csrf_exempt, name="dispatch")
class ChangePasswordView(TokenRequiredMixin, View):
    def put(self, request):
        serializer = ChangePasswordSerializer(data=read_json(request))
        if not serializer.is_valid():
            return validation_error(serializer.errors)

        services.change_password(
            request.customer,
            serializer.validated_data["current_password"],
            serializer.validated_data["password"],
            keep_token=request.api_token,
        )
        return message("Password changed successfully. Other sessions have been logged out.")


@method_decorator(csrf_exempt, name="dispatch")
class ForgotPasswordView(View):
    def post(self, request):
        serializer = ForgotPasswordSerializer(data=read_json(request))
        if not serializer.is_valid():
            return validation_error(serializer.errors)

        try:
            services.send_password_reset(serializer.validated_data["email"])
        except OSError:
            logger.exception("Could not send password reset email")
            return message("Unable to send reset link.", status=500)

        return message("Password reset link sent to your email.")


@method_decorator(csrf_exempt, name="dispatch")
class ResetPasswordView(View):
    def post(self, request):
        serializer = ResetPasswordSerializer(data=read_json(request))
        if not serializer.is_valid():
            return validation_error(serializer.errors)

        data = serializer.validated_data
        if not services.reset_password(data["email"], data["token"], data["password"]):
            return message("Invalid token or email.", status=400)
        return message("Password reset successfully.")


# =============================================================================
# Back office
# =============================================================================


@method_decorator(csrf_exempt, name="dispatch")
class UserListView(AdminRequiredMixin, View):
    """List customers.

    GET /api/v1/admin/users?status=active&search=ali&group_id=1&page=1&limit=20
    """

    def get(self, request):
        params = UserListParamsSerializer(data=request.GET)
        if not params.is_valid():
            return validation_error(params.errors)
        filters = params.validated_data

        customers = Customer.objects.annotate(
            group_name=Subquery(
                CustomerGroupDescription.objects.filter(
                    customer_group_id=OuterRef("customer_group_id"),
                    language_id=settings.OPENCART_LANGUAGE_ID,
                ).values("name")[:1]
            ),
            last_login=Subquery(
                CustomerLogin.objects.filter(email=OuterRef("email"))
                .order_by("-date_modified")
                .values("date_modified")[:1]
            ),
        )

        if filters["status"] == "active":
            customers = customers.filter(status=True)
        elif filters["status"] == "inactive":
            customers = customers.filter(status=False)

        if filters["search"]:
            term = filters["search"]
            customers = customers.filter(
                Q(firstname__icontains=term) | Q(lastname__icontains=term) | Q(email__icontains=term)
            )

        if "group_id" in filters:
            customers = customers.filter(customer_group_id=filters["group_id"])

        page = paginate(customers.order_by("-customer_id"), filters["page"], filters["limit"])

        return JsonResponse({
            "data": [
                {
                    "id": customer.customer_id,
                    "name": customer.full_name,
                    "firstname": customer.firstname,
                    "lastname": customer.lastname,
                    "email": customer.email,
                    "phone": customer.telephone,
                    "status": "active" if customer.status else "inactive",
                    "customer_group": {
                        "id": customer.customer_group_id,
                        "name": customer.group_name or "Unknown",
                    },
                    "date_registered": format_datetime(customer.date_added),
                    "last_login": format_datetime(customer.last_login),
                }
                for customer in page.items
            ],
            "meta": page.meta(),
        })


@method_decorator(csrf_exempt, name="dispatch")
class UserRoleView(AdminRequiredMixin, View):
    def put(self, request, user_id):
        serializer = UpdateRoleSerializer(data=read_json(request))
        if not serializer.is_valid():
            return validation_error(serializer.errors)

        customer = Customer.objects.filter(customer_id=user_id).first()
        if customer is None:
            return not_found("User")

        customer.customer_group_id = serializer.validated_data["customer_group_id"]
        customer.save(update_fields=["customer_group_id"])
        logger.info("Customer %s moved to group %s", customer.customer_id, customer.customer_group_id)

        return JsonResponse({
            "message": "User role updated successfully",
            "user": {
                "id": customer.customer_id,
                "customer_group_id": customer.customer_group_id,
            },
        })


@method_decorator(csrf_exempt, name="dispatch")
class UserDetailView(AdminRequiredMixin, View):
    def delete(self, request, user_id):
        customer = Customer.objects.filter(customer_id=user_id).first()
        if customer is None:
            return not_found("User")

        services.delete_customer(customer)
        return message("User deleted successfully")
