"""Catalog URL patterns."""

from django.urls import path

from . import views

app_name = "catalog"

urlpatterns = [
    # Search
    path("search", views.SearchView.as_view(), name="search"),
    path("search/suggest", views.SuggestView.as_view(), name="search-suggest"),
    path("filters", views.FiltersView.as_view(), name="filters"),

    # Products
    path("products", views.ProductListView.as_view(), name="product-list"),
    path("products/deals", views.DealsView.as_view(), name="product-deals"),
    path("products/new", views.NewArrivalsView.as_view(), name="product-new"),
    path("products/top", views.TopSellersView.as_view(), name="product-top"),
    path("products/related/<int:product_id>", views.RelatedProductsView.as_view(), name="product-related"),
    path("products/similar/<int:product_id>", views.SimilarProductsView.as_view(), name="product-similar"),
    path("products/<int:product_id>", views.ProductDetailView.as_view(), name="product-detail"),

    # Categories
    path("categories", views.CategoryTreeView.as_view(), name="category-tree"),
    path("categories/<int:category_id>", views.CategoryDetailView.as_view(), name="category-detail"),

    # Back office
    path("admin/products", views.AdminProductCreateView.as_view(), name="admin-product-create"),
    path("admin/products/<int:product_id>", views.AdminProductDetailView.as_view(), name="admin-product-detail"),
    path("admin/categories", views.AdminCategoryCreateView.as_view(), name="admin-category-create"),
    path("admin/categories/<int:category_id>", views.AdminCategoryDetailView.as_view(), name="admin-category-detail"),
]
