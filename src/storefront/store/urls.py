"""Store API URL patterns."""

from django.urls import path

from . import api_views

app_name = "store"

urlpatterns = [
    # Catalog
    path("categories/", api_views.CategoryListView.as_view(), name="categories"),
    path("products/", api_views.ProductListView.as_view(), name="products"),
    path("products/<uuid:product_id>/", api_views.ProductDetailView.as_view(), name="product-detail"),
    path(
        "products/<uuid:product_id>/stock/",
        api_views.ProductStockView.as_view(),
        name="product-stock",
    ),
    path(
        "products/<uuid:product_id>/reviews/",
        api_views.ProductReviewsView.as_view(),
        name="product-reviews",
    ),

    # Cart
    path("cart/", api_views.CartView.as_view(), name="cart"),
    path("cart/<uuid:cart_item_id>/", api_views.CartItemView.as_view(), name="cart-item"),

    # Orders
    path("orders/", api_views.OrderListView.as_view(), name="orders"),
    path("orders/<uuid:order_id>/", api_views.OrderDetailView.as_view(), name="order-detail"),
    path("orders/<uuid:order_id>/status/", api_views.OrderStatusView.as_view(), name="order-status"),

    # Uploads
    path("uploads/", api_views.UploadURLView.as_view(), name="upload-url"),
    path("uploads/<str:token>/", api_views.UploadContentView.as_view(), name="upload-content"),
    path("files/<uuid:storage_id>/", api_views.FileURLView.as_view(), name="file-url"),

    # Sample data
    path("seed/", api_views.SeedView.as_view(), name="seed"),
]
