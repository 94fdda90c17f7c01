"""Tests for the store JSON API.

Tests for:
- Error kinds map to status codes and {"error", "code"} bodies
- Session and bearer token authentication
- Catalog, cart, checkout, order, review, upload and seed endpoints
"""

import uuid

import pytest
from django.conf import settings
from django.test import Client
from django.urls import reverse

from storefront.store.models import CartItem, Order


def post_json(client, url, data, **extra):
    return client.post(url, data, content_type="application/json", **extra)


def patch_json(client, url, data):
    return client.patch(url, data, content_type="application/json")


@pytest.fixture
def checkout_payload(shipping_address):
    return {"shippingAddress": shipping_address, "paymentMethod": "card"}


@pytest.mark.django_db
class TestAuthentication:
    """Session and bearer token identities."""

    def test_bearer_token_identifies_user(self, token_client, product):
        response = post_json(token_client, reverse("store:cart"), {"productId": str(product.pk)})

        assert response.status_code == 200
        assert response.json()["item"]["quantity"] == 1

    def test_invalid_bearer_token_rejected(self, client):
        response = client.get(reverse("store:cart"), headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid token", "code": "unauthenticated"}

    def test_anonymous_write_is_unauthenticated(self, client, product):
        response = post_json(client, reverse("store:cart"), {"productId": str(product.pk), "quantity": 1})

        assert response.status_code == 401
        assert response.json() == {
            "error": "Must be logged in to add items to cart",
            "code": "unauthenticated",
        }


@pytest.fixture
def csrf_client(user):
    """Session client that enforces CSRF checks like a browser would."""
    client = Client(enforce_csrf_checks=True)
    client.force_login(user)
    return client


@pytest.mark.django_db
class TestCsrfProtection:
    """Session writes need a CSRF token, bearer writes do not."""

    def test_session_write_without_csrf_token_rejected(self, csrf_client, user, product):
        response = post_json(csrf_client, reverse("store:cart"), {"productId": str(product.pk)})

        assert response.status_code == 403
        assert response.json()["code"] == "unauthorized"
        assert response.json()["error"].startswith("CSRF Failed")
        assert not CartItem.objects.filter(user=user).exists()

    def test_session_write_with_csrf_token_allowed(self, csrf_client, user, product):
        secret = "a" * 32
        csrf_client.cookies[settings.CSRF_COOKIE_NAME] = secret

        response = post_json(
            csrf_client,
            reverse("store:cart"),
            {"productId": str(product.pk)},
            headers={"X-CSRFToken": secret},
        )

        assert response.status_code == 200
        assert CartItem.objects.filter(user=user).count() == 1

    def test_session_read_needs_no_csrf_token(self, csrf_client):
        response = csrf_client.get(reverse("store:cart"))

        assert response.status_code == 200

    def test_bearer_write_skips_csrf(self, api_token, user, product):
        client = Client(enforce_csrf_checks=True, headers={"Authorization": f"Bearer {api_token}"})

        response = post_json(client, reverse("store:cart"), {"productId": str(product.pk)})

        assert response.status_code == 200
        assert CartItem.objects.filter(user=user).count() == 1


@pytest.mark.django_db
class TestCatalogEndpoints:
    def test_list_categories(self, client, category):
        response = client.get(reverse("store:categories"))

        assert response.status_code == 200
        assert [c["name"] for c in response.json()["categories"]] == ["Electronics"]

    def test_create_category(self, user_client):
        response = post_json(user_client, reverse("store:categories"), {"name": "Toys"})

        assert response.status_code == 201
        assert response.json()["category"]["name"] == "Toys"

    def test_create_category_requires_name(self, user_client):
        response = post_json(user_client, reverse("store:categories"), {"description": "x"})

        assert response.status_code == 400
        assert response.json()["code"] == "validation_failed"
        assert response.json()["error"].startswith("name:")

    def test_invalid_json(self, user_client):
        response = user_client.post(reverse("store:categories"), "{not json", content_type="application/json")

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid JSON", "code": "validation_failed"}

    def test_create_product(self, user_client, category):
        response = post_json(user_client, reverse("store:products"), {
            "name": "Laptop",
            "price": "999.99",
            "categoryId": str(category.pk),
            "stock": 4,
            "tags": ["computers"],
        })

        assert response.status_code == 201
        product = response.json()["product"]
        assert product["price"] == "999.99"
        assert product["isActive"] is True
        assert product["category"]["id"] == str(category.pk)

    def test_list_products_page_shape(self, client, product, cheap_product):
        response = client.get(reverse("store:products"), {"numItems": 1})

        data = response.json()
        assert response.status_code == 200
        assert len(data["page"]) == 1
        assert data["isDone"] is False
        assert data["continueCursor"]

        response = client.get(reverse("store:products"), {"numItems": 1, "cursor": data["continueCursor"]})
        assert response.json()["isDone"] is True

    def test_list_products_search(self, client, product, cheap_product):
        response = client.get(reverse("store:products"), {"search": "cab"})

        assert [p["name"] for p in response.json()["page"]] == ["Cable"]

    def test_list_products_unknown_category(self, client, product):
        response = client.get(reverse("store:products"), {"categoryId": str(uuid.uuid4())})

        assert response.status_code == 200
        assert response.json()["page"] == []
        assert response.json()["isDone"] is True

    def test_list_products_bad_page_size(self, client, product):
        response = client.get(reverse("store:products"), {"numItems": 0})

        assert response.status_code == 400

    def test_product_detail(self, client, product):
        response = client.get(reverse("store:product-detail", args=[product.pk]))

        data = response.json()["product"]
        assert data["name"] == "Wireless Headphones"
        assert data["averageRating"] == 0
        assert data["reviewCount"] == 0

    def test_unknown_product_is_not_found(self, client, db):
        response = client.get(reverse("store:product-detail", args=[uuid.uuid4()]))

        assert response.status_code == 404
        assert response.json() == {"error": "Product not found", "code": "not_found"}

    def test_adjust_stock(self, user_client, product):
        response = post_json(user_client, reverse("store:product-stock", args=[product.pk]), {"quantity": -6})

        assert response.status_code == 400
        assert response.json()["error"] == "Insufficient stock"

        response = post_json(user_client, reverse("store:product-stock", args=[product.pk]), {"quantity": 3})
        assert response.json()["product"]["stock"] == 8


@pytest.mark.django_db
class TestCartEndpoints:
    def test_cart_round_trip(self, user_client, product, cheap_product):
        post_json(user_client, reverse("store:cart"), {"productId": str(product.pk), "quantity": 2})
        post_json(user_client, reverse("store:cart"), {"productId": str(cheap_product.pk), "quantity": 1})

        data = user_client.get(reverse("store:cart")).json()

        assert data["total"] == "25.50"
        assert data["itemCount"] == 3
        assert [i["subtotal"] for i in data["items"]] == ["20.00", "5.50"]

    def test_anonymous_cart_is_empty(self, client):
        response = client.get(reverse("store:cart"))

        assert response.status_code == 200
        assert response.json() == {"items": [], "total": "0.00", "itemCount": 0}

    def test_insufficient_stock(self, user_client, product):
        response = post_json(user_client, reverse("store:cart"), {"productId": str(product.pk), "quantity": 99})

        assert response.status_code == 400
        assert response.json()["error"] == "Insufficient stock"

    def test_update_and_remove_line(self, user_client, user, product):
        post_json(user_client, reverse("store:cart"), {"productId": str(product.pk), "quantity": 1})
        item = CartItem.objects.get(user=user)
        url = reverse("store:cart-item", args=[item.pk])

        assert patch_json(user_client, url, {"quantity": 3}).json()["item"]["quantity"] == 3
        assert patch_json(user_client, url, {"quantity": 0}).json() == {"item": None}
        assert user_client.delete(url).status_code == 404

    def test_clear_cart(self, user_client, product):
        post_json(user_client, reverse("store:cart"), {"productId": str(product.pk), "quantity": 1})

        response = user_client.delete(reverse("store:cart"))

        assert response.json() == {"removed": 1}


@pytest.mark.django_db
class TestOrderEndpoints:
    def test_checkout(self, user_client, product, cheap_product, checkout_payload):
        post_json(user_client, reverse("store:cart"), {"productId": str(product.pk), "quantity": 2})
        post_json(user_client, reverse("store:cart"), {"productId": str(cheap_product.pk), "quantity": 1})

        response = post_json(user_client, reverse("store:orders"), checkout_payload)

        assert response.status_code == 201
        data = response.json()
        assert data["order"]["totalAmount"] == "25.50"
        assert data["order"]["shippingAddress"]["zipCode"] == "62701"
        assert response["Location"] == f"/api/orders/{data['orderId']}/"

    def test_checkout_empty_cart(self, user_client, checkout_payload):
        response = post_json(user_client, reverse("store:orders"), checkout_payload)

        assert response.status_code == 400
        assert response.json()["error"] == "Cart is empty"

    def test_checkout_without_address(self, user_client, product):
        post_json(user_client, reverse("store:cart"), {"productId": str(product.pk)})

        response = post_json(user_client, reverse("store:orders"), {"paymentMethod": "card"})

        assert response.status_code == 400
        assert response.json()["error"].startswith("shippingAddress:")
        assert not Order.objects.exists()

    def test_list_orders(self, user_client, client, product, checkout_payload):
        post_json(user_client, reverse("store:cart"), {"productId": str(product.pk)})
        post_json(user_client, reverse("store:orders"), checkout_payload)

        assert len(user_client.get(reverse("store:orders")).json()["page"]) == 1
        assert client.get(reverse("store:orders")).json() == {
            "page": [],
            "isDone": True,
            "continueCursor": None,
        }

    def test_order_detail_hidden_from_other_users(self, user_client, other_user, product, checkout_payload):
        post_json(user_client, reverse("store:cart"), {"productId": str(product.pk)})
        order_id = post_json(user_client, reverse("store:orders"), checkout_payload).json()["orderId"]

        other = Client()
        other.force_login(other_user)

        assert user_client.get(reverse("store:order-detail", args=[order_id])).status_code == 200
        assert other.get(reverse("store:order-detail", args=[order_id])).status_code == 404

        response = post_json(other, reverse("store:order-status", args=[order_id]), {"status": "cancelled"})
        assert response.status_code == 403
        assert response.json()["code"] == "unauthorized"

    def test_update_status(self, user_client, product, checkout_payload):
        post_json(user_client, reverse("store:cart"), {"productId": str(product.pk)})
        order_id = post_json(user_client, reverse("store:orders"), checkout_payload).json()["orderId"]
        url = reverse("store:order-status", args=[order_id])

        assert post_json(user_client, url, {"status": "shipped"}).json()["status"] == "shipped"

        response = post_json(user_client, url, {"status": "lost"})
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid order status: lost"


@pytest.mark.django_db
class TestReviewEndpoints:
    def test_create_and_list(self, user_client, client, product):
        url = reverse("store:product-reviews", args=[product.pk])

        response = post_json(user_client, url, {"rating": 5, "comment": "Great"})
        assert response.status_code == 201
        assert response.json()["review"]["userName"] == "Sam Shopper"

        reviews = client.get(url).json()["reviews"]
        assert [r["comment"] for r in reviews] == ["Great"]

    def test_duplicate_review_conflicts(self, user_client, product):
        url = reverse("store:product-reviews", args=[product.pk])
        post_json(user_client, url, {"rating": 5})

        response = post_json(user_client, url, {"rating": 4})

        assert response.status_code == 409
        assert response.json() == {"error": "You have already reviewed this product", "code": "conflict"}


@pytest.mark.django_db
class TestUploadEndpoints:
    def test_upload_flow(self, user_client, client):
        upload_url = user_client.post(reverse("store:upload-url")).json()["uploadUrl"]
        assert upload_url.startswith("http://testserver/api/uploads/")

        response = client.put(upload_url, b"GIF89a" + b"\x00" * 16, content_type="image/gif")
        assert response.status_code == 201
        storage_id = response.json()["storageId"]

        url = client.get(reverse("store:file-url", args=[storage_id])).json()["url"]
        assert url.startswith("http://testserver/media/uploads/")

    def test_upload_url_requires_login(self, client):
        assert client.post(reverse("store:upload-url")).status_code == 401

    def test_unknown_file(self, client, db):
        response = client.get(reverse("store:file-url", args=[uuid.uuid4()]))

        assert response.status_code == 404


@pytest.mark.django_db
class TestSeedEndpoint:
    def test_staff_can_seed(self, staff_client):
        response = staff_client.post(reverse("store:seed"))

        assert response.json() == {"message": "Database seeded successfully"}
        assert staff_client.post(reverse("store:seed")).json() == {"message": "Database already seeded"}

    def test_shopper_cannot_seed(self, user_client):
        response = user_client.post(reverse("store:seed"))

        assert response.status_code == 403

    def test_anonymous_cannot_seed(self, client):
        assert client.post(reverse("store:seed")).status_code == 401
