"""Read-side product and category queries for the public catalog."""

from django.conf import settings
from django.db.models import Avg, Case, Count, F, IntegerField, OuterRef, Q, Subquery, Sum, Value, When
from django.db.models.functions import Coalesce

from storefront.core.api import format_datetime, image_url
from storefront.opencart.models import (
    Category,
    CategoryDescription,
    OrderProduct,
    Product,
    ProductDescription,
    ProductToCategory,
    Review,
)
from storefront.opencart.pricing import money, sale_details, with_prices

SEARCH_FIELDS = ("name", "description", "model", "sku", "upc", "ean")


def _description(field):
    return Subquery(
        ProductDescription.objects.filter(
            product_id=OuterRef("product_id"),
            language_id=settings.OPENCART_LANGUAGE_ID,
        ).values(field)[:1]
    )


def _reviews():
    return Review.objects.filter(product_id=OuterRef("product_id"), status=True).order_by().values("product_id")


def product_queryset(include_disabled=False):
    """Products with their store-language name and description, prices and ratings.

    Products without a description in the store language are left out.
    """
    products = Product.objects.annotate(
        name=_description("name"),
        description=_description("description"),
        manufacturer_name=F("manufacturer__name"),
        average_rating=Subquery(_reviews().annotate(value=Avg("rating")).values("value")[:1]),
        review_count=Coalesce(
            Subquery(_reviews().annotate(value=Count("review_id")).values("value")[:1], output_field=IntegerField()),
            Value(0),
        ),
    ).filter(name__isnull=False)
    if not include_disabled:
        products = products.filter(status=True)
    return with_prices(products)


def in_category(products, category_id):
    return products.filter(
        product_id__in=ProductToCategory.objects.filter(category_id=category_id).values("product_id")
    )


def search_terms(products, q):
    """Every space-separated term must match one of the searchable fields."""
    for term in q.split():
        condition = Q()
        for field in SEARCH_FIELDS:
            condition |= Q(**{f"{field}__icontains": term})
        products = products.filter(condition)
    return products


def order_search_results(products, sort, q=None):
    if sort == "newest":
        return products.order_by("-date_added", "-product_id")
    if sort == "price_asc":
        return products.order_by("final_price", "product_id")
    if sort == "price_desc":
        return products.order_by("-final_price", "product_id")
    if sort == "rating":
        return products.order_by(F("average_rating").desc(nulls_last=True), "-date_added")
    if q:
        relevance = Case(
            When(name__icontains=q, then=Value(1)),
            When(description__icontains=q, then=Value(2)),
            default=Value(3),
            output_field=IntegerField(),
        )
        return products.annotate(relevance=relevance).order_by("relevance", "-date_added")
    return products.order_by("-date_added", "-product_id")


def order_listing(products, sort):
    """Sorting for catalog listings; the default follows the shop's sort order."""
    if sort in ("newest", "price_asc", "price_desc", "rating"):
        return order_search_results(products, sort)
    if sort == "popularity":
        return products.annotate(
            sales_count=Coalesce(
                Subquery(
                    OrderProduct.objects.filter(product_id=OuterRef("product_id"))
                    .order_by()
                    .values("product_id")
                    .annotate(value=Count("order_product_id"))
                    .values("value")[:1],
                    output_field=IntegerField(),
                ),
                Value(0),
            )
        ).order_by("-sales_count", "-date_added")
    return products.order_by("sort_order", "-date_added")


def best_sellers(products):
    """Products ordered by units sold."""
    return products.annotate(
        units_sold=Coalesce(
            Subquery(
                OrderProduct.objects.filter(product_id=OuterRef("product_id"), order__order_status_id__gt=0)
                .order_by()
                .values("product_id")
                .annotate(value=Sum("quantity"))
                .values("value")[:1],
                output_field=IntegerField(),
            ),
            Value(0),
        )
    ).filter(units_sold__gt=0).order_by("-units_sold", "product_id")


def format_product(product) -> dict:
    """Map an annotated product row to its list representation."""
    is_on_sale, discount_percentage = sale_details(product.price, product.final_price)
    average_rating = product.average_rating
    return {
        "id": product.product_id,
        "name": product.name,
        "description": product.description,
        "model": product.model,
        "price": money(product.price),
        "final_price": money(product.final_price),
        "is_on_sale": is_on_sale,
        "discount_percentage": discount_percentage,
        "quantity": product.quantity,
        "image": image_url(product.image),
        "manufacturer": product.manufacturer_name,
        "in_stock": product.quantity > 0,
        "average_rating": round(float(average_rating), 1) if average_rating else 0,
        "review_count": int(product.review_count or 0),
    }


def format_product_detail(product) -> dict:
    data = format_product(product)
    data.update({
        "sku": product.sku,
        "upc": product.upc,
        "ean": product.ean,
        "special_price": money(product.special_price) if product.special_price is not None else None,
        "minimum": product.minimum,
        "weight": float(product.weight),
        "date_added": format_datetime(product.date_added),
        "date_modified": format_datetime(product.date_modified),
        "gallery": [
            image_url(image)
            for image in product.images.order_by("sort_order", "product_image_id").values_list("image", flat=True)
            if image
        ],
        "categories": [
            {"id": category_id, "name": name}
            for category_id, name in CategoryDescription.objects.filter(
                category_id__in=ProductToCategory.objects.filter(product_id=product.product_id).values("category_id"),
                language_id=settings.OPENCART_LANGUAGE_ID,
            ).values_list("category_id", "name")
        ],
        "reviews": [
            {
                "author": review.author,
                "rating": review.rating,
                "text": review.text,
                "date_added": format_datetime(review.date_added),
            }
            for review in product.reviews.filter(status=True).order_by("-date_added")[:10]
        ],
    })
    return data


# =============================================================================
# Categories
# =============================================================================


def active_categories():
    """Enabled categories with their store-language name, in display order."""
    return (
        Category.objects.filter(status=True)
        .annotate(
            name=Subquery(
                CategoryDescription.objects.filter(
                    category_id=OuterRef("category_id"),
                    language_id=settings.OPENCART_LANGUAGE_ID,
                ).values("name")[:1]
            ),
            description=Subquery(
                CategoryDescription.objects.filter(
                    category_id=OuterRef("category_id"),
                    language_id=settings.OPENCART_LANGUAGE_ID,
                ).values("description")[:1]
            ),
        )
        .order_by("sort_order", "category_id")
    )


def product_counts() -> dict[int, int]:
    """Number of enabled products linked to each category."""
    return dict(
        ProductToCategory.objects.filter(product__status=True)
        .order_by()
        .values("category_id")
        .annotate(total=Count("product_id"))
        .values_list("category_id", "total")
    )


def category_tree() -> list[dict]:
    """Nested tree of enabled categories starting from the top level."""
    categories = list(active_categories())
    counts = product_counts()
    children_of = {}
    for category in categories:
        children_of.setdefault(category.parent_id, []).append(category)

    def build(parent_id, seen):
        nodes = []
        for category in children_of.get(parent_id, []):
            if category.category_id in seen:
                continue
            children = build(category.category_id, seen | {category.category_id})
            nodes.append({
                "id": category.category_id,
                "name": category.name,
                "description": category.description,
                "image": image_url(category.image),
                "has_children": bool(children),
                "children": children,
                "product_count": counts.get(category.category_id, 0),
            })
        return nodes

    return build(0, frozenset())


def format_category(category, counts=None) -> dict:
    counts = counts if counts is not None else product_counts()
    return {
        "id": category.category_id,
        "name": category.name,
        "description": category.description,
        "image": image_url(category.image),
        "parent_id": category.parent_id,
        "sort_order": category.sort_order,
        "product_count": counts.get(category.category_id, 0),
    }

