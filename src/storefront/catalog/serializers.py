"""Request validation for catalog endpoints."""

from rest_framework import serializers

from storefront.opencart.models import Category


class ExistingCategoryField(serializers.IntegerField):
    default_error_messages = {"does_not_exist": "The selected category is invalid."}

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        if not Category.objects.filter(category_id=value).exists():
            self.fail("does_not_exist")
        return value


class SearchParamsSerializer(serializers.Serializer):
    q = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    category = ExistingCategoryField(required=False)
    min_price = serializers.DecimalField(max_digits=15, decimal_places=4, min_value=0, required=False)
    max_price = serializers.DecimalField(max_digits=15, decimal_places=4, min_value=0, required=False)
    sort = serializers.ChoiceField(choices=["newest", "price_asc", "price_desc", "rating"], required=False)
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=50, required=False, default=20)


class SuggestParamsSerializer(serializers.Serializer):
    q = serializers.CharField(min_length=2, max_length=50)


class FilterParamsSerializer(serializers.Serializer):
    category = serializers.IntegerField()


class ProductListParamsSerializer(serializers.Serializer):
    category = ExistingCategoryField(required=False)
    sort = serializers.ChoiceField(
        choices=["newest", "price_asc", "price_desc", "rating", "popularity"], required=False
    )
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=50, required=False, default=20)


class ProductWriteSerializer(serializers.Serializer):
    """Fields accepted when creating a product; updates use ``partial=True``."""

    model = serializers.CharField(max_length=64)
    sku = serializers.CharField(max_length=64, required=False, allow_blank=True)
    price = serializers.DecimalField(max_digits=15, decimal_places=4, min_value=0)
    quantity = serializers.IntegerField(min_value=0)
    status = serializers.BooleanField()
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    categories = serializers.ListField(child=ExistingCategoryField(), required=False)
    image = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)
    gallery = serializers.ListField(child=serializers.CharField(max_length=255), required=False)
    special_price = serializers.DecimalField(
        max_digits=15, decimal_places=4, min_value=0, required=False, allow_null=True
    )
    special_start = serializers.DateField(required=False, allow_null=True)
    special_end = serializers.DateField(required=False, allow_null=True)

    def validate(self, attrs):
        start, end = attrs.get("special_start"), attrs.get("special_end")
        if start and end and end < start:
            raise serializers.ValidationError(
                {"special_end": ["The special end must be a date after or equal to special start."]}
            )
        return attrs


class CategoryWriteSerializer(serializers.Serializer):
    """Fields accepted when creating a category; updates use ``partial=True``."""

    parent_id = serializers.IntegerField(min_value=0, required=False, default=0)
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    meta_title = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)
    meta_description = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)
    meta_keyword = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)
    image = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)
    top = serializers.BooleanField(required=False, default=False)
    column = serializers.IntegerField(min_value=1, max_value=12, required=False, default=1)
    sort_order = serializers.IntegerField(required=False, default=0)
    status = serializers.BooleanField()

    def validate_parent_id(self, value):
        if value and not Category.objects.filter(category_id=value).exists():
            raise serializers.ValidationError("The selected parent id is invalid.")
        return value
