"""Request validation for dashboard, analytics and log endpoints."""

from rest_framework import serializers

from storefront.opencart.models import Category

RANGES = ["today", "week", "month", "year"]
LOG_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class SalesParamsSerializer(serializers.Serializer):
    range = serializers.ChoiceField(choices=RANGES + ["custom"], required=False, default="month")
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    group_by = serializers.ChoiceField(choices=["day", "week", "month"], required=False, default="day")

    def validate(self, attrs):
        if attrs["range"] == "custom":
            errors = {
                field: [f"The {field.replace('_', ' ')} field is required when range is custom."]
                for field in ("start_date", "end_date")
                if field not in attrs
            }
            if errors:
                raise serializers.ValidationError(errors)
        if "start_date" in attrs and "end_date" in attrs and attrs["end_date"] < attrs["start_date"]:
            raise serializers.ValidationError(
                {"end_date": ["The end date must be a date after or equal to start date."]}
            )
        return attrs


class ReportParamsSerializer(serializers.Serializer):
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False, default=10)
    range = serializers.ChoiceField(choices=RANGES + ["all"], required=False, default="month")


class ProductReportParamsSerializer(ReportParamsSerializer):
    category_id = serializers.IntegerField(required=False)

    def validate_category_id(self, value):
        if not Category.objects.filter(category_id=value).exists():
            raise serializers.ValidationError("The selected category id is invalid.")
        return value


class CustomerReportParamsSerializer(ReportParamsSerializer):
    sort = serializers.ChoiceField(choices=["orders", "revenue", "registration"], required=False, default="orders")


class TrafficReportParamsSerializer(ReportParamsSerializer):
    type = serializers.ChoiceField(choices=["searches", "traffic", "conversions"], required=False, default="searches")


class RevenueReportParamsSerializer(ReportParamsSerializer):
    group_by = serializers.ChoiceField(
        choices=["category", "country", "payment_method"], required=False, default="category"
    )


class LogParamsSerializer(serializers.Serializer):
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False, default=20)
    level = serializers.ChoiceField(choices=["error", "warning", "info", "all"], required=False, default="all")
    search = serializers.CharField(required=False, allow_blank=True, default="")
    start_date = serializers.DateTimeField(input_formats=[LOG_DATETIME_FORMAT], required=False)
    end_date = serializers.DateTimeField(input_formats=[LOG_DATETIME_FORMAT], required=False)

    def validate(self, attrs):
        if "start_date" in attrs and "end_date" in attrs and attrs["end_date"] < attrs["start_date"]:
            raise serializers.ValidationError(
                {"end_date": ["The end date must be a date after or equal to start date."]}
            )
        return attrs
