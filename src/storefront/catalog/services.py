"""Catalog service layer for back-office product and category changes.

Every function runs in a single transaction: a failure part way leaves the
OpenCart tables untouched.
"""

import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from django.utils.html import strip_tags
from django.utils.text import slugify

from storefront.opencart.categories import rebuild_all_category_paths, rebuild_category_paths
from storefront.opencart.exceptions import CategoryError
from storefront.opencart.models import (
    Category,
    CategoryDescription,
    CategoryPath,
    Product,
    ProductDescription,
    ProductImage,
    ProductRelated,
    ProductSpecial,
    ProductToCategory,
)

logger = logging.getLogger(__name__)

META_DESCRIPTION_LIMIT = 160

# OpenCart defaults for products created through the API
DEFAULT_STOCK_STATUS_ID = 7
DEFAULT_TAX_CLASS_ID = 9


def meta_description(text: str | None) -> str:
    """Plain-text summary of an HTML description, cut to the meta description limit."""
    plain = strip_tags(text or "").strip()
    if len(plain) <= META_DESCRIPTION_LIMIT:
        return plain
    return plain[:META_DESCRIPTION_LIMIT].rstrip() + "..."


def _replace_categories(product_id: int, category_ids) -> None:
    ProductToCategory.objects.filter(product_id=product_id).delete()
    ProductToCategory.objects.bulk_create(
        ProductToCategory(product_id=product_id, category_id=category_id)
        for category_id in dict.fromkeys(category_ids)
    )


def _replace_gallery(product_id: int, images) -> None:
    ProductImage.objects.filter(product_id=product_id).delete()
    ProductImage.objects.bulk_create(
        ProductImage(product_id=product_id, image=image, sort_order=0) for image in images
    )


def _save_special(product_id: int, price, date_start=None, date_end=None) -> ProductSpecial:
    special = ProductSpecial.objects.filter(
        product_id=product_id,
        customer_group_id=settings.OPENCART_CUSTOMER_GROUP_ID,
    ).first() or ProductSpecial(product_id=product_id, customer_group_id=settings.OPENCART_CUSTOMER_GROUP_ID)
    special.priority = 1
    special.price = price
    special.date_start = date_start
    special.date_end = date_end
    special.save()
    return special


@transaction.atomic
def create_product(data: dict) -> Product:
    """Create a product with its description, categories, gallery and special.

    Args:
        data: Validated product fields

    Returns:
        The created Product
    """
    now = timezone.now()
    product = Product.objects.create(
        model=data["model"],
        sku=data.get("sku") or "",
        price=data["price"],
        quantity=data["quantity"],
        status=data["status"],
        image=data.get("image") or None,
        manufacturer_id=0,
        stock_status_id=DEFAULT_STOCK_STATUS_ID,
        tax_class_id=DEFAULT_TAX_CLASS_ID,
        weight_class_id=1,
        length_class_id=1,
        subtract=True,
        minimum=1,
        date_available=now.date(),
        date_added=now,
        date_modified=now,
    )

    ProductDescription.objects.create(
        product_id=product.product_id,
        language_id=settings.OPENCART_LANGUAGE_ID,
        name=data["name"],
        description=data.get("description") or "",
        meta_title=data["name"],
        meta_description=meta_description(data.get("description")),
        meta_keyword=slugify(data["name"]),
    )

    if data.get("categories"):
        _replace_categories(product.product_id, data["categories"])

    if data.get("gallery"):
        _replace_gallery(product.product_id, data["gallery"])

    if data.get("special_price") is not None:
        _save_special(product.product_id, data["special_price"], data.get("special_start"), data.get("special_end"))

    logger.info("Created product %s (%s)", product.product_id, product.model)
    return product


@transaction.atomic
def update_product(product: Product, data: dict) -> Product:
    """Apply a partial update to a product.

    Categories and gallery are replaced when present. A ``special_price`` of
    ``None`` removes the product's specials.
    """
    fields = [field for field in ("model", "sku", "price", "quantity", "status", "image") if field in data]
    for field in fields:
        value = data[field]
        if field == "sku":
            value = value or ""
        setattr(product, field, value)
    product.date_modified = timezone.now()
    product.save(update_fields=fields + ["date_modified"])

    if "name" in data or "description" in data:
        description = ProductDescription.objects.filter(
            product_id=product.product_id,
            language_id=settings.OPENCART_LANGUAGE_ID,
        ).first() or ProductDescription(
            product_id=product.product_id,
            language_id=settings.OPENCART_LANGUAGE_ID,
            name=data.get("name", product.model),
        )
        if "name" in data:
            description.name = data["name"]
            description.meta_title = data["name"]
            description.meta_keyword = slugify(data["name"])
        if data.get("description") is not None:
            description.description = data["description"]
            description.meta_description = meta_description(data["description"])
        description.save()

    if "categories" in data:
        _replace_categories(product.product_id, data["categories"])

    if "gallery" in data:
        _replace_gallery(product.product_id, data["gallery"])

    if "special_price" in data:
        if data["special_price"] is None:
            ProductSpecial.objects.filter(product_id=product.product_id).delete()
        else:
            _save_special(
                product.product_id,
                data["special_price"],
                data.get("special_start"),
                data.get("special_end"),
            )

    logger.info("Updated product %s", product.product_id)
    return product


@transaction.atomic
def delete_product(product: Product) -> None:
    product_id = product.product_id
    ProductDescription.objects.filter(product_id=product_id).delete()
    ProductImage.objects.filter(product_id=product_id).delete()
    ProductSpecial.objects.filter(product_id=product_id).delete()
    ProductToCategory.objects.filter(product_id=product_id).delete()
    ProductRelated.objects.filter(product_id=product_id).delete()
    ProductRelated.objects.filter(related_id=product_id).delete()
    Product.objects.filter(product_id=product_id).delete()
    logger.info("Deleted product %s", product_id)


# =============================================================================
# Categories
# =============================================================================


@transaction.atomic
def create_category(data: dict) -> Category:
    """Create a category with its description and path rows."""
    now = timezone.now()
    category = Category.objects.create(
        parent_id=data.get("parent_id") or 0,
        image=data.get("image") or None,
        top=data.get("top", False),
        column=data.get("column", 1),
        sort_order=data.get("sort_order", 0),
        status=data["status"],
        date_added=now,
        date_modified=now,
    )
    CategoryDescription.objects.create(
        category_id=category.category_id,
        language_id=settings.OPENCART_LANGUAGE_ID,
        name=data["name"],
        description=data.get("description") or "",
        meta_title=data.get("meta_title") or data["name"],
        meta_description=data.get("meta_description") or "",
        meta_keyword=data.get("meta_keyword") or "",
    )
    rebuild_category_paths(category.category_id)

    logger.info("Created category %s", category.category_id)
    return category


@transaction.atomic
def update_category(category: Category, data: dict) -> Category:
    """Apply a partial update to a category.

    Callers check a new ``parent_id`` with ``is_valid_parent`` first.
    """
    fields = [field for field in ("parent_id", "image", "top", "column", "sort_order", "status") if field in data]
    for field in fields:
        setattr(category, field, data[field])
    category.date_modified = timezone.now()
    category.save(update_fields=fields + ["date_modified"])

    description_fields = ("name", "description", "meta_title", "meta_description", "meta_keyword")
    if any(field in data for field in description_fields):
        description = CategoryDescription.objects.filter(
            category_id=category.category_id,
            language_id=settings.OPENCART_LANGUAGE_ID,
        ).first() or CategoryDescription(
            category_id=category.category_id,
            language_id=settings.OPENCART_LANGUAGE_ID,
            name=data.get("name", ""),
        )
        for field in description_fields:
            if field in data:
                setattr(description, field, data[field] or "")
        description.save()

    if "parent_id" in data:
        rebuild_all_category_paths()

    logger.info("Updated category %s", category.category_id)
    return category


@transaction.atomic
def delete_category(category: Category) -> None:
    """Delete an empty leaf category.

    Raises:
        CategoryError: If the category has children or products
    """
    category_id = category.category_id
    if Category.objects.filter(parent_id=category_id).exists():
        raise CategoryError("Cannot delete category with children. Delete children first.")
    if ProductToCategory.objects.filter(category_id=category_id).exists():
        raise CategoryError("Cannot delete category with products. Reassign products first.")

    CategoryDescription.objects.filter(category_id=category_id).delete()
    CategoryPath.objects.filter(category_id=category_id).delete()
    Category.objects.filter(category_id=category_id).delete()
    rebuild_all_category_paths()
    logger.info("Deleted category %s", category_id)
