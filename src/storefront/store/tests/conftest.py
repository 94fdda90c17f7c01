"""Shared pytest fixtures for storefront.store tests."""

from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.test import Client


User = get_user_model()


@pytest.fixture
def user(db):
    """Create a shopper."""
    return User.objects.create_user(
        email="shopper@example.com",
        password="testpass123",
        first_name="Sam",
        last_name="Shopper",
    )


@pytest.fixture
def other_user(db):
    """Create a second shopper."""
    return User.objects.create_user(
        email="other@example.com",
        password="testpass123",
    )


@pytest.fixture
def staff_user(db):
    """Create a staff user."""
    return User.objects.create_user(
        email="staff@example.com",
        password="testpass123",
        first_name="Staff",
        last_name="User",
        is_staff=True,
    )


@pytest.fixture
def anonymous():
    from django.contrib.auth.models import AnonymousUser

    return AnonymousUser()


@pytest.fixture
def category(db):
    """Create a category."""
    from storefront.store.models import Category

    return Category.objects.create(name="Electronics", description="Gadgets")


@pytest.fixture
def other_category(db):
    from storefront.store.models import Category

    return Category.objects.create(name="Books", description="Books and magazines")


@pytest.fixture
def make_product(db, category):
    """Factory for active products in the default category."""
    from storefront.store.models import Product

    def _make(name="Widget", price="10.00", stock=10, **kwargs):
        kwargs.setdefault("category", category)
        return Product.objects.create(
            name=name,
            price=Decimal(price),
            stock=stock,
            **kwargs,
        )

    return _make


@pytest.fixture
def product(make_product):
    return make_product(name="Wireless Headphones", price="10.00", stock=5)


@pytest.fixture
def cheap_product(make_product):
    return make_product(name="Cable", price="5.50", stock=10)


@pytest.fixture
def shipping_address():
    return {
        "street": "1 Main St",
        "city": "Springfield",
        "state": "IL",
        "zipCode": "62701",
        "country": "US",
    }


@pytest.fixture
def client():
    """Return a Django test client."""
    return Client()


@pytest.fixture
def user_client(user):
    """Client logged in as the shopper through the session."""
    client = Client()
    client.force_login(user)
    return client


@pytest.fixture
def staff_client(staff_user):
    client = Client()
    client.force_login(staff_user)
    return client


@pytest.fixture
def api_token(user):
    """API token for the shopper."""
    from rest_framework.authtoken.models import Token

    token, _ = Token.objects.get_or_create(user=user)
    return token.key


@pytest.fixture
def token_client(api_token):
    """Client sending `Authorization: Bearer <token>` on every request."""
    return Client(headers={"Authorization": f"Bearer {api_token}"})
