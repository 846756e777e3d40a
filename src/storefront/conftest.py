"""Shared pytest fixtures for storefront tests.

The OpenCart tables are unmanaged, so the test database gets them created
straight from the models once per session.
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.apps import apps
from django.db import connection
from django.test import Client
from django.utils import timezone

from storefront.accounts.passwords import hash_password
from storefront.core.models import ApiToken
from storefront.opencart.models import (
    Address,
    CartItem,
    Category,
    CategoryDescription,
    CategoryPath,
    Country,
    Customer,
    Order,
    OrderProduct,
    OrderStatus,
    Product,
    ProductDescription,
    ProductToCategory,
    Zone,
)

PASSWORD = "secret123"
SALT = "abc123xyz"


@pytest.fixture(scope="session")
def django_db_setup(django_db_setup, django_db_blocker):
    """Create the OpenCart tables alongside the migrated ones."""
    with django_db_blocker.unblock():
        with connection.schema_editor() as schema_editor:
            for model in apps.get_app_config("opencart").get_models():
                schema_editor.create_model(model)


@pytest.fixture
def client():
    """Return a Django test client."""
    return Client()


@pytest.fixture(autouse=True)
def clear_cache():
    """Reports are cached; start every test with an empty cache."""
    from django.core.cache import cache

    cache.clear()
    yield
    cache.clear()


# =============================================================================
# Customers and tokens
# =============================================================================


def create_customer(email, customer_group_id=1, firstname="Sara", lastname="Ali", **kwargs):
    return Customer.objects.create(
        customer_group_id=customer_group_id,
        firstname=firstname,
        lastname=lastname,
        email=email,
        telephone=kwargs.pop("telephone", "0500000000"),
        salt=SALT,
        password=hash_password(PASSWORD, SALT),
        status=kwargs.pop("status", True),
        date_added=kwargs.pop("date_added", timezone.now()),
        **kwargs,
    )


def bearer(plaintext):
    return {"Authorization": f"Bearer {plaintext}"}


@pytest.fixture
def customer(db):
    """Create an active storefront customer."""
    return create_customer("sara@example.com")


@pytest.fixture
def admin_customer(db):
    """Create a customer in the admin group."""
    return create_customer("admin@example.com", customer_group_id=0, firstname="Admin", lastname="User")


@pytest.fixture
def user_token(customer):
    """Issue a user-scoped token and return its plaintext."""
    _, plaintext = ApiToken.objects.issue(customer.customer_id, [ApiToken.SCOPE_USER])
    return plaintext


@pytest.fixture
def auth(user_token):
    """Authorization header for the customer."""
    return bearer(user_token)


@pytest.fixture
def admin_auth(admin_customer):
    """Authorization header carrying the admin scope."""
    _, plaintext = ApiToken.objects.issue(
        admin_customer.customer_id, [ApiToken.SCOPE_USER, ApiToken.SCOPE_ADMIN]
    )
    return bearer(plaintext)


# =============================================================================
# Catalog
# =============================================================================


def create_category(name, parent_id=0, sort_order=0, status=True):
    now = timezone.now()
    category = Category.objects.create(
        parent_id=parent_id,
        sort_order=sort_order,
        status=status,
        date_added=now,
        date_modified=now,
    )
    CategoryDescription.objects.create(category_id=category.category_id, language_id=1, name=name)
    return category


def create_product(name, price="100.00", quantity=10, categories=(), status=True, **kwargs):
    now = timezone.now()
    description = kwargs.pop("description", f"{name} description")
    product = Product.objects.create(
        model=kwargs.pop("model", name.upper().replace(" ", "-")),
        price=Decimal(price),
        quantity=quantity,
        status=status,
        manufacturer_id=0,
        date_added=kwargs.pop("date_added", now),
        date_modified=now,
        **kwargs,
    )
    ProductDescription.objects.create(
        product_id=product.product_id,
        language_id=1,
        name=name,
        description=description,
    )
    for category in categories:
        ProductToCategory.objects.create(product_id=product.product_id, category_id=category.category_id)
    return product


@pytest.fixture
def clothing(db):
    """Top-level category with one subcategory and path rows."""
    clothing = create_category("Clothing", sort_order=1)
    shirts = create_category("Shirts", parent_id=clothing.category_id)
    CategoryPath.objects.create(category_id=clothing.category_id, path_id=clothing.category_id, level=0)
    CategoryPath.objects.create(category_id=shirts.category_id, path_id=clothing.category_id, level=0)
    CategoryPath.objects.create(category_id=shirts.category_id, path_id=shirts.category_id, level=1)
    return clothing


@pytest.fixture
def shirts(clothing):
    return Category.objects.get(parent_id=clothing.category_id)


@pytest.fixture
def red_shirt(shirts):
    """Enabled product in the Shirts category."""
    return create_product("Red Shirt", price="50.00", quantity=10, categories=[shirts], sku="RS-1")


@pytest.fixture
def blue_jeans(clothing):
    return create_product(
        "Blue Jeans",
        price="120.00",
        quantity=3,
        categories=[clothing],
        date_added=timezone.now() - timedelta(days=3),
    )


# =============================================================================
# Orders
# =============================================================================


@pytest.fixture
def order_statuses(db):
    """The OpenCart order statuses referenced by the API."""
    names = {1: "Pending", 2: "Processing", 5: "Complete", 7: "Canceled", 10: "Failed"}
    for status_id, name in names.items():
        OrderStatus.objects.create(order_status_id=status_id, language_id=1, name=name)
    return names


@pytest.fixture
def address(customer):
    """Shipping address owned by the customer."""
    country = Country.objects.create(name="Saudi Arabia", iso_code_2="SA", iso_code_3="SAU")
    zone = Zone.objects.create(country_id=country.country_id, name="Riyadh", code="RD")
    return Address.objects.create(
        customer_id=customer.customer_id,
        firstname=customer.firstname,
        lastname=customer.lastname,
        address_1="King Fahd Road 1",
        city="Riyadh",
        postcode="12211",
        country_id=country.country_id,
        zone_id=zone.zone_id,
    )


def add_to_cart(customer, product, quantity=1):
    return CartItem.objects.create(
        customer_id=customer.customer_id,
        session_id="0",
        product_id=product.product_id,
        quantity=quantity,
        date_added=timezone.now(),
    )


def create_order(customer, products=(), status_id=1, date_added=None, **kwargs):
    """Order with one line per ``(product, quantity)`` pair."""
    date_added = date_added or timezone.now()
    lines = [(product, quantity, product.price * quantity) for product, quantity in products]
    total = kwargs.pop("total", sum((line[2] for line in lines), Decimal("0")))
    order = Order.objects.create(
        customer_id=customer.customer_id,
        customer_group_id=customer.customer_group_id,
        firstname=customer.firstname,
        lastname=customer.lastname,
        email=customer.email,
        telephone=customer.telephone,
        payment_method=kwargs.pop("payment_method", "Cash On Delivery"),
        shipping_method="Standard Shipping",
        total=total,
        order_status_id=status_id,
        date_added=date_added,
        date_modified=date_added,
        **kwargs,
    )
    for product, quantity, line_total in lines:
        OrderProduct.objects.create(
            order_id=order.order_id,
            product_id=product.product_id,
            name=ProductDescription.objects.get(product_id=product.product_id, language_id=1).name,
            model=product.model,
            quantity=quantity,
            price=product.price,
            total=line_total,
        )
    return order
