"""Back-office reporting views (admin scope).

GET /api/v1/admin/dashboard
GET /api/v1/admin/analytics/{sales,products,customers,traffic,revenue}
GET /api/v1/admin/logs
"""

from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from storefront.core.api import paginate, validation_error
from storefront.core.auth import AdminRequiredMixin

from . import analytics
from .dashboard import get_dashboard
from .logs import collect_logs
from .periods import resolve_period
from .serializers import (
    CustomerReportParamsSerializer,
    LogParamsSerializer,
    ProductReportParamsSerializer,
    RevenueReportParamsSerializer,
    SalesParamsSerializer,
    TrafficReportParamsSerializer,
)


@method_decorator(csrf_exempt, name="dispatch")
class DashboardView(AdminRequiredMixin, View):
    def get(self, request):
        return JsonResponse(get_dashboard())


@method_decorator(csrf_exempt, name="dispatch")
class SalesAnalyticsView(AdminRequiredMixin, View):
    """Sales over time.

    GET /api/v1/admin/analytics/sales?range=custom&start_date=2024-01-01&end_date=2024-01-31&group_by=week
    """

    def get(self, request):
        params = SalesParamsSerializer(data=request.GET)
        if not params.is_valid():
            return validation_error(params.errors)
        data = params.validated_data

        period = resolve_period(data["range"], data.get("start_date"), data.get("end_date"))
        return JsonResponse(analytics.sales_report(data["range"], period, data["group_by"]))


@method_decorator(csrf_exempt, name="dispatch")
class ProductAnalyticsView(AdminRequiredMixin, View):
    def get(self, request):
        params = ProductReportParamsSerializer(data=request.GET)
        if not params.is_valid():
            return validation_error(params.errors)
        data = params.validated_data

        period = resolve_period(data["range"])
        return JsonResponse(
            analytics.products_report(data["range"], period, data["limit"], data.get("category_id"))
        )


@method_decorator(csrf_exempt, name="dispatch")
class CustomerAnalyticsView(AdminRequiredMixin, View):
    def get(self, request):
        params = CustomerReportParamsSerializer(data=request.GET)
        if not params.is_valid():
            return validation_error(params.errors)
        data = params.validated_data

        period = resolve_period(data["range"])
        return JsonResponse(analytics.customers_report(data["range"], period, data["limit"], data["sort"]))


@method_decorator(csrf_exempt, name="dispatch")
class TrafficAnalyticsView(AdminRequiredMixin, View):
    def get(self, request):
        params = TrafficReportParamsSerializer(data=request.GET)
        if not params.is_valid():
            return validation_error(params.errors)
        data = params.validated_data

        period = resolve_period(data["range"])
        return JsonResponse(analytics.traffic_report(data["range"], period, data["limit"], data["type"]))


@method_decorator(csrf_exempt, name="dispatch")
class RevenueAnalyticsView(AdminRequiredMixin, View):
    def get(self, request):
        params = RevenueReportParamsSerializer(data=request.GET)
        if not params.is_valid():
            return validation_error(params.errors)
        data = params.validated_data

        period = resolve_period(data["range"])
        return JsonResponse(analytics.revenue_report(data["range"], period, data["limit"], data["group_by"]))


@method_decorator(csrf_exempt, name="dispatch")
class LogListView(AdminRequiredMixin, View):
    """Merged API and store activity logs, newest first.

    GET /api/v1/admin/logs?level=error&search=payment&start_date=2024-01-01 00:00:00&page=1&limit=20
    """

    def get(self, request):
        params = LogParamsSerializer(data=request.GET)
        if not params.is_valid():
            return validation_error(params.errors)
        data = params.validated_data

        entries = collect_logs(
            level=data["level"],
            search=data["search"].strip(),
            start=data.get("start_date"),
            end=data.get("end_date"),
        )
        page = paginate(entries, data["page"], data["limit"])
        return JsonResponse({"data": page.items, "meta": page.meta()})
