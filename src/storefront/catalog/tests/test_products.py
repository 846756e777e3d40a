"""Tests for the public product endpoints."""

from decimal import Decimal

from django.urls import reverse
from django.utils import timezone

from storefront.conftest import create_order, create_product
from storefront.opencart.models import ProductImage, ProductRelated, ProductSpecial, Review


def ids(response):
    return [item["id"] for item in response.json()["data"]]


class TestProductList:
    """Tests for GET /api/v1/products"""

    def test_lists_enabled_products(self, client, red_shirt, blue_jeans):
        create_product("Hidden", status=False)

        response = client.get(reverse("catalog:product-list"))

        assert response.status_code == 200
        assert ids(response) == [red_shirt.product_id, blue_jeans.product_id]
        assert response.json()["meta"] == {"current_page": 1, "last_page": 1, "per_page": 20, "total": 2}

    def test_product_fields(self, client, red_shirt):
        response = client.get(reverse("catalog:product-list"))

        item = response.json()["data"][0]
        assert item["name"] == "Red Shirt"
        assert item["price"] == 50.0
        assert item["final_price"] == 50.0
        assert item["is_on_sale"] is False
        assert item["in_stock"] is True
        assert item["average_rating"] == 0
        assert item["review_count"] == 0

    def test_pagination(self, client, red_shirt, blue_jeans):
        response = client.get(reverse("catalog:product-list"), {"limit": 1, "page": 2})

        assert ids(response) == [blue_jeans.product_id]
        assert response.json()["meta"]["last_page"] == 2

    def test_popularity_sort(self, client, customer, red_shirt, blue_jeans):
        create_order(customer, [(blue_jeans, 1)])

        response = client.get(reverse("catalog:product-list"), {"sort": "popularity"})

        assert ids(response) == [blue_jeans.product_id, red_shirt.product_id]

    def test_rating_sort(self, client, red_shirt, blue_jeans):
        now = timezone.now()
        Review.objects.create(
            product_id=blue_jeans.product_id, author="Omar", text="Great", rating=5, status=True,
            date_added=now, date_modified=now,
        )

        response = client.get(reverse("catalog:product-list"), {"sort": "rating"})

        assert ids(response) == [blue_jeans.product_id, red_shirt.product_id]


class TestProductDetail:
    """Tests for GET /api/v1/products/<id>"""

    def test_detail_includes_special_gallery_and_reviews(self, client, shirts, red_shirt):
        now = timezone.now()
        ProductSpecial.objects.create(product_id=red_shirt.product_id, price=Decimal("40.00"))
        ProductImage.objects.create(product_id=red_shirt.product_id, image="catalog/red-2.jpg")
        Review.objects.create(
            product_id=red_shirt.product_id, author="Omar", text="Fits well", rating=4, status=True,
            date_added=now, date_modified=now,
        )
        Review.objects.create(
            product_id=red_shirt.product_id, author="Spam", text="Pending", rating=1, status=False,
            date_added=now, date_modified=now,
        )

        response = client.get(reverse("catalog:product-detail", args=[red_shirt.product_id]))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["special_price"] == 40.0
        assert data["final_price"] == 40.0
        assert data["is_on_sale"] is True
        assert data["discount_percentage"] == 20
        assert data["gallery"] == ["/image/catalog/red-2.jpg"]
        assert data["categories"] == [{"id": shirts.category_id, "name": "Shirts"}]
        assert [review["author"] for review in data["reviews"]] == ["Omar"]
        assert data["average_rating"] == 4.0
        assert data["review_count"] == 1

    def test_disabled_product_is_not_found(self, client, db):
        product = create_product("Hidden", status=False)

        response = client.get(reverse("catalog:product-detail", args=[product.product_id]))

        assert response.status_code == 404
        assert response.json() == {"message": "Product not found"}


# =============================================================================
# Showcases
# =============================================================================


class TestShowcases:
    """Tests for deals, new arrivals and top sellers."""

    def test_deals_only_include_real_discounts(self, client, red_shirt, blue_jeans):
        ProductSpecial.objects.create(product_id=red_shirt.product_id, price=Decimal("40.00"))
        ProductSpecial.objects.create(product_id=blue_jeans.product_id, price=Decimal("150.00"))

        response = client.get(reverse("catalog:product-deals"))

        assert ids(response) == [red_shirt.product_id]

    def test_new_arrivals_newest_first(self, client, red_shirt, blue_jeans):
        response = client.get(reverse("catalog:product-new"))

        assert ids(response) == [red_shirt.product_id, blue_jeans.product_id]

    def test_top_sellers_count_placed_orders(self, client, customer, red_shirt, blue_jeans):
        """Missing orders (status 0) do not count as sales."""
        create_order(customer, [(blue_jeans, 2)])
        create_order(customer, [(red_shirt, 5)], status_id=0)

        response = client.get(reverse("catalog:product-top"))

        assert ids(response) == [blue_jeans.product_id]


class TestRelatedAndSimilar:
    def test_related_products(self, client, red_shirt, blue_jeans):
        ProductRelated.objects.create(product_id=red_shirt.product_id, related_id=blue_jeans.product_id)

        response = client.get(reverse("catalog:product-related", args=[red_shirt.product_id]))

        assert ids(response) == [blue_jeans.product_id]

    def test_related_unknown_product(self, client, db):
        response = client.get(reverse("catalog:product-related", args=[999]))

        assert response.status_code == 404

    def test_similar_products_share_a_category(self, client, shirts, red_shirt, blue_jeans):
        polo = create_product("Polo Shirt", categories=[shirts])

        response = client.get(reverse("catalog:product-similar", args=[red_shirt.product_id]))

        assert ids(response) == [polo.product_id]
