"""Catalog API views.

Public endpoints for search, products and categories, plus back-office
product and category management (admin scope).
"""

import logging

from django.conf import settings
from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from storefront.core.api import image_url, message, not_found, paginate, read_json, validation_error
from storefront.core.auth import AdminRequiredMixin
from storefront.opencart.categories import get_ancestor_ids, is_valid_parent
from storefront.opencart.exceptions import StorefrontError
from storefront.opencart.models import (
    AttributeDescription,
    AttributeGroupDescription,
    Category,
    CategoryDescription,
    Product,
    ProductAttribute,
    ProductDescription,
    ProductRelated,
    ProductToCategory,
)

from . import queries, services
from .serializers import (
    CategoryWriteSerializer,
    FilterParamsSerializer,
    ProductListParamsSerializer,
    ProductWriteSerializer,
    SearchParamsSerializer,
    SuggestParamsSerializer,
)

logger = logging.getLogger(__name__)

SHOWCASE_LIMIT = 10
SUGGESTION_LIMIT = 10


def product_page_response(products, page, limit):
    result = paginate(products, page, limit)
    return JsonResponse({
        "data": [queries.format_product(product) for product in result.items],
        "meta": result.meta(),
    })


@method_decorator(csrf_exempt, name="dispatch")
class SearchView(View):
    """Product search.

    GET /api/v1/search?q=red+shirt&category=20&min_price=10&sort=price_asc&page=1&limit=20
    """

    def get(self, request):
        params = SearchParamsSerializer(data=request.GET)
        if not params.is_valid():
            return validation_error(params.errors)
        filters = params.validated_data

        products = queries.product_queryset()
        q = filters["q"].strip()
        if q:
            products = queries.search_terms(products, q)
        if "category" in filters:
            products = queries.in_category(products, filters["category"])
        if "min_price" in filters:
            products = products.filter(final_price__gte=filters["min_price"])
        if "max_price" in filters:
            products = products.filter(final_price__lte=filters["max_price"])

        products = queries.order_search_results(products, filters.get("sort"), q)
        result = paginate(products, filters["page"], filters["limit"])

        return JsonResponse({
            "data": [queries.format_product(product) for product in result.items],
            "pagination": {
                "total": result.total,
                "per_page": result.per_page,
                "current_page": result.current_page,
                "total_pages": result.last_page,
            },
        })


@method_decorator(csrf_exempt, name="dispatch")
class SuggestView(View):
    """Autocomplete product names.

    GET /api/v1/search/suggest?q=sh
    """

    def get(self, request):
        params = SuggestParamsSerializer(data=request.GET)
        if not params.is_valid():
            return validation_error(params.errors)

        names = (
            ProductDescription.objects.filter(
                language_id=settings.OPENCART_LANGUAGE_ID,
                name__istartswith=params.validated_data["q"],
                product__status=True,
            )
            .order_by("name")
            .values_list("name", flat=True)
            .distinct()[:SUGGESTION_LIMIT]
        )
        return JsonResponse({"suggestions": list(names)})


@method_decorator(csrf_exempt, name="dispatch")
class FiltersView(View):
    """Attribute filters available for in-stock products of a category.

    GET /api/v1/filters?category=20
    """

    def get(self, request):
        params = FilterParamsSerializer(data=request.GET)
        if not params.is_valid():
            return validation_error(params.errors)

        language_id = settings.OPENCART_LANGUAGE_ID
        rows = (
            ProductAttribute.objects.filter(
                product__status=True,
                product__quantity__gt=0,
                product_id__in=ProductToCategory.objects.filter(
                    category_id=params.validated_data["category"]
                ).values("product_id"),
            )
            .order_by(
                "attribute__attribute_group__sort_order",
                "attribute__attribute_group_id",
                "attribute__sort_order",
                "attribute_id",
            )
            .values_list("attribute__attribute_group_id", "attribute_id")
            .distinct()
        )

        group_names = dict(
            AttributeGroupDescription.objects.filter(language_id=language_id).values_list(
                "attribute_group_id", "name"
            )
        )
        attribute_names = dict(
            AttributeDescription.objects.filter(language_id=language_id).values_list("attribute_id", "name")
        )

        groups = {}
        for group_id, attribute_id in rows:
            if group_id not in group_names or attribute_id not in attribute_names:
                continue
            group = groups.setdefault(group_id, {"group_name": group_names[group_id], "attributes": []})
            if not any(attribute["id"] == attribute_id for attribute in group["attributes"]):
                group["attributes"].append({"id": attribute_id, "name": attribute_names[attribute_id]})

        return JsonResponse(list(groups.values()), safe=False)


# =============================================================================
# Products
# =============================================================================


@method_decorator(csrf_exempt, name="dispatch")
class ProductListView(View):
    """Paginated catalog listing.

    GET /api/v1/products?category=20&sort=popularity&page=1&limit=20
    """

    def get(self, request):
        params = ProductListParamsSerializer(data=request.GET)
        if not params.is_valid():
            return validation_error(params.errors)
        filters = params.validated_data

        products = queries.product_queryset()
        if "category" in filters:
            products = queries.in_category(products, filters["category"])
        products = queries.order_listing(products, filters.get("sort"))
        return product_page_response(products, filters["page"], filters["limit"])


@method_decorator(csrf_exempt, name="dispatch")
class ProductDetailView(View):
    def get(self, request, product_id):
        product = queries.product_queryset().filter(product_id=product_id).first()
        if product is None:
            return not_found("Product")
        return JsonResponse({"data": queries.format_product_detail(product)})


@method_decorator(csrf_exempt, name="dispatch")
class DealsView(View):
    """Products with a running special below their regular price."""

    def get(self, request):
        products = (
            queries.product_queryset()
            .filter(special_price__isnull=False, special_price__gt=0)
            .order_by("special_price", "product_id")
        )
        deals = [queries.format_product(product) for product in products if product.special_price < product.price]
        return JsonResponse({"data": deals[:SHOWCASE_LIMIT]})


@method_decorator(csrf_exempt, name="dispatch")
class NewArrivalsView(View):
    def get(self, request):
        products = queries.product_queryset().order_by("-date_added", "-product_id")[:SHOWCASE_LIMIT]
        return JsonResponse({"data": [queries.format_product(product) for product in products]})


@method_decorator(csrf_exempt, name="dispatch")
class TopSellersView(View):
    def get(self, request):
        products = queries.best_sellers(queries.product_queryset())[:SHOWCASE_LIMIT]
        return JsonResponse({"data": [queries.format_product(product) for product in products]})


@method_decorator(csrf_exempt, name="dispatch")
class RelatedProductsView(View):
    """Products linked in ``oc_product_related``."""

    def get(self, request, product_id):
        if not Product.objects.filter(product_id=product_id).exists():
            return not_found("Product")

        related_ids = ProductRelated.objects.filter(product_id=product_id).values("related_id")
        products = queries.product_queryset().filter(product_id__in=related_ids).order_by("sort_order", "product_id")
        return JsonResponse({"data": [queries.format_product(product) for product in products[:SHOWCASE_LIMIT]]})


@method_decorator(csrf_exempt, name="dispatch")
class SimilarProductsView(View):
    """Products sharing a category with the given product."""

    def get(self, request, product_id):
        if not Product.objects.filter(product_id=product_id).exists():
            return not_found("Product")

        category_ids = ProductToCategory.objects.filter(product_id=product_id).values("category_id")
        products = (
            queries.product_queryset()
            .filter(product_id__in=ProductToCategory.objects.filter(category_id__in=category_ids).values("product_id"))
            .exclude(product_id=product_id)
            .order_by("-date_added", "product_id")
        )
        return JsonResponse({"data": [queries.format_product(product) for product in products[:SHOWCASE_LIMIT]]})


# =============================================================================
# Categories
# =============================================================================


@method_decorator(csrf_exempt, name="dispatch")
class CategoryTreeView(View):
    def get(self, request):
        return JsonResponse({"data": queries.category_tree()})


@method_decorator(csrf_exempt, name="dispatch")
class CategoryDetailView(View):
    def get(self, request, category_id):
        category = queries.active_categories().filter(category_id=category_id).first()
        if category is None:
            return not_found("Category")

        counts = queries.product_counts()
        names = dict(
            CategoryDescription.objects.filter(
                category_id__in=get_ancestor_ids(category_id),
                language_id=settings.OPENCART_LANGUAGE_ID,
            ).values_list("category_id", "name")
        )
        data = queries.format_category(category, counts)
        data["path"] = [
            {"id": ancestor_id, "name": names.get(ancestor_id)} for ancestor_id in get_ancestor_ids(category_id)
        ]
        data["children"] = [
            queries.format_category(child, counts)
            for child in queries.active_categories().filter(parent_id=category_id)
        ]
        return JsonResponse({"data": data})


# =============================================================================
# Back office
# =============================================================================


@method_decorator(csrf_exempt, name="dispatch")
class AdminProductCreateView(AdminRequiredMixin, View):
    """Create a product.

    POST /api/v1/admin/products
    {
        "model": "TSHIRT-RED",
        "price": 49.99,
        "quantity": 100,
        "status": true,
        "name": "Red T-Shirt",
        "categories": [20, 27],
        "gallery": ["catalog/tshirt-red-2.jpg"],
        "special_price": 39.99
    }
    """

    def post(self, request):
        serializer = ProductWriteSerializer(data=read_json(request))
        if not serializer.is_valid():
            return validation_error(serializer.errors)

        try:
            product = services.create_product(serializer.validated_data)
        except Exception as e:
            logger.exception("Product creation failed")
            return message("Failed to create product", status=500, error=str(e))

        return message(
            "Product created successfully",
            status=201,
            product={"id": product.product_id, "name": serializer.validated_data["name"]},
        )


@method_decorator(csrf_exempt, name="dispatch")
class AdminProductDetailView(AdminRequiredMixin, View):
    def put(self, request, product_id):
        product = Product.objects.filter(product_id=product_id).first()
        if product is None:
            return not_found("Product")

        serializer = ProductWriteSerializer(data=read_json(request), partial=True)
        if not serializer.is_valid():
            return validation_error(serializer.errors)

        try:
            services.update_product(product, serializer.validated_data)
        except Exception as e:
            logger.exception("Product update failed")
            return message("Failed to update product", status=500, error=str(e))

        return message("Product updated successfully", product={"id": product.product_id})

    def delete(self, request, product_id):
        product = Product.objects.filter(product_id=product_id).first()
        if product is None:
            return not_found("Product")

        try:
            services.delete_product(product)
        except Exception as e:
            logger.exception("Product deletion failed")
            return message("Failed to delete product", status=500, error=str(e))

        return message("Product deleted successfully")


@method_decorator(csrf_exempt, name="dispatch")
class AdminCategoryCreateView(AdminRequiredMixin, View):
    def post(self, request):
        serializer = CategoryWriteSerializer(data=read_json(request))
        if not serializer.is_valid():
            return validation_error(serializer.errors)

        try:
            category = services.create_category(serializer.validated_data)
        except Exception as e:
            logger.exception("Category creation failed")
            return message("Failed to create category", status=500, error=str(e))

        return message(
            "Category created successfully",
            status=201,
            category={
                "id": category.category_id,
                "name": serializer.validated_data["name"],
                "image": image_url(category.image),
            },
        )


@method_decorator(csrf_exempt, name="dispatch")
class AdminCategoryDetailView(AdminRequiredMixin, View):
    def put(self, request, category_id):
        category = Category.objects.filter(category_id=category_id).first()
        if category is None:
            return not_found("Category")

        serializer = CategoryWriteSerializer(data=read_json(request), partial=True)
        if not serializer.is_valid():
            return validation_error(serializer.errors)

        data = serializer.validated_data
        if "parent_id" in data and not is_valid_parent(category_id, data["parent_id"]):
            return validation_error(
                {"parent_id": ["A category cannot be moved under itself or one of its subcategories."]}
            )

        try:
            services.update_category(category, data)
        except Exception as e:
            logger.exception("Category update failed")
            return message("Failed to update category", status=500, error=str(e))

        return message("Category updated successfully", category={"id": category.category_id})

    def delete(self, request, category_id):
        category = Category.objects.filter(category_id=category_id).first()
        if category is None:
            return not_found("Category")

        try:
            services.delete_category(category)
        except StorefrontError:
            raise
        except Exception as e:
            logger.exception("Category deletion failed")
            return message("Failed to delete category", status=500, error=str(e))

        return message("Category deleted successfully")
