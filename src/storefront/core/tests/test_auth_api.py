"""Tests for the authentication API and email login backend."""

import pytest
from django.contrib.auth import authenticate, get_user_model
from django.test import Client
from django.urls import reverse

User = get_user_model()

PASSWORD = "correct-horse-42"


@pytest.fixture
def client():
    """Return a Django test client."""
    return Client()


@pytest.fixture
def user(db):
    return User.objects.create_user(
        email="ada@example.com",
        password=PASSWORD,
        first_name="Ada",
        last_name="Lovelace",
    )


def post_json(client, url, data, **extra):
    return client.post(url, data, content_type="application/json", **extra)


@pytest.mark.django_db
class TestRegister:
    def test_creates_user_and_token(self, client):
        response = post_json(client, reverse("auth:register"), {
            "email": "New@Example.com",
            "password": PASSWORD,
            "firstName": "New",
        })

        assert response.status_code == 201
        data = response.json()
        assert data["token"]
        assert data["user"]["email"] == "new@example.com"
        assert data["user"]["name"] == "New"
        assert User.objects.get(email="new@example.com").check_password(PASSWORD)

    def test_duplicate_email_conflicts(self, client, user):
        response = post_json(client, reverse("auth:register"), {
            "email": "ADA@example.com",
            "password": PASSWORD,
        })

        assert response.status_code == 409
        assert response.json()["code"] == "conflict"

    def test_weak_password_rejected(self, client):
        response = post_json(client, reverse("auth:register"), {
            "email": "weak@example.com",
            "password": "123",
        })

        assert response.status_code == 400
        assert response.json()["error"].startswith("password:")
        assert not User.objects.filter(email="weak@example.com").exists()


@pytest.mark.django_db
class TestLoginLogout:
    def test_login_returns_token(self, client, user):
        response = post_json(client, reverse("auth:login"), {"email": "ada@example.com", "password": PASSWORD})

        assert response.status_code == 200
        assert response.json()["user"]["id"] == str(user.pk)

    def test_login_is_case_insensitive_on_email(self, client, user):
        response = post_json(client, reverse("auth:login"), {"email": "Ada@Example.com", "password": PASSWORD})

        assert response.status_code == 200

    def test_wrong_password(self, client, user):
        response = post_json(client, reverse("auth:login"), {"email": "ada@example.com", "password": "nope"})

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid credentials", "code": "unauthenticated"}

    def test_me_with_token_then_logout(self, client, user):
        token = post_json(
            client, reverse("auth:login"), {"email": "ada@example.com", "password": PASSWORD}
        ).json()["token"]
        headers = {"Authorization": f"Bearer {token}"}

        me = client.get(reverse("auth:me"), headers=headers).json()
        assert me["user"]["email"] == "ada@example.com"

        response = post_json(client, reverse("auth:logout"), {}, headers=headers)
        assert response.json() == {"status": "logged_out"}

        # The deleted token no longer authenticates
        assert client.get(reverse("auth:me"), headers=headers).status_code == 401

    def test_me_anonymous(self, client):
        assert client.get(reverse("auth:me")).json() == {"user": None}

    def test_session_logout_requires_csrf_token(self, user):
        from rest_framework.authtoken.models import Token

        Token.objects.create(user=user)
        client = Client(enforce_csrf_checks=True)
        client.force_login(user)

        response = post_json(client, reverse("auth:logout"), {})

        assert response.status_code == 403
        assert response.json()["error"].startswith("CSRF Failed")
        assert Token.objects.filter(user=user).exists()


@pytest.mark.django_db
class TestEmailBackend:
    def test_authenticates_by_email(self, user):
        assert authenticate(username="ada@example.com", password=PASSWORD) == user

    def test_unknown_email(self, db):
        assert authenticate(username="ghost@example.com", password=PASSWORD) is None

    def test_inactive_user(self, user):
        user.is_active = False
        user.save()

        assert authenticate(username="ada@example.com", password=PASSWORD) is None


@pytest.mark.django_db
def test_health_check(client):
    response = client.get(reverse("health_check"))

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
