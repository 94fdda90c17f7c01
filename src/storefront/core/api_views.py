"""Authentication API views.

These endpoints let API clients obtain and discard bearer tokens:
- Register a new account
- Login with email and password
- Logout (delete the token)
- Inspect the current identity
"""

import json
import logging

from django.contrib.auth import authenticate, get_user_model
from django.db import IntegrityError, transaction
from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from .authentication import token_auth
from .forms import LoginForm, RegisterForm, first_error

logger = logging.getLogger(__name__)

User = get_user_model()


def serialize_user(user):
    return {
        "id": str(user.pk),
        "email": user.email,
        "name": user.get_display_name(),
        "isStaff": user.is_staff,
    }


def _load_json(request):
    try:
        data = json.loads(request.body or b"{}")
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


@method_decorator(csrf_exempt, name="dispatch")
class RegisterView(View):
    """Create an account.

    POST /api/auth/register/
    {
        "email": "user@example.com",
        "password": "secret",
        "firstName": "Ada",
        "lastName": "Lovelace"
    }
    """

    def post(self, request):
        data = _load_json(request)
        if data is None:
            return JsonResponse({"error": "Invalid JSON", "code": "validation_failed"}, status=400)

        form = RegisterForm(data)
        if not form.is_valid():
            return JsonResponse({"error": first_error(form), "code": "validation_failed"}, status=400)

        email = form.cleaned_data["email"]
        if User.objects.filter(email__iexact=email).exists():
            return JsonResponse({"error": "Email already registered", "code": "conflict"}, status=409)

        from rest_framework.authtoken.models import Token

        try:
            with transaction.atomic():
                user = User.objects.create_user(
                    email=email,
                    password=form.cleaned_data["password"],
                    first_name=form.cleaned_data["firstName"],
                    last_name=form.cleaned_data["lastName"],
                )
                token = Token.objects.create(user=user)
        except IntegrityError:
            return JsonResponse({"error": "Email already registered", "code": "conflict"}, status=409)

        logger.info(f"Registered user {user.pk}")
        return JsonResponse({"token": token.key, "user": serialize_user(user)}, status=201)


@method_decorator(csrf_exempt, name="dispatch")
class LoginView(View):
    """Login endpoint for API clients.

    POST /api/auth/login/
    {
        "email": "user@example.com",
        "password": "secret"
    }

    Returns auth token for subsequent requests.
    """

    def post(self, request):
        data = _load_json(request)
        if data is None:
            return JsonResponse({"error": "Invalid JSON", "code": "validation_failed"}, status=400)

        form = LoginForm(data)
        if not form.is_valid():
            return JsonResponse({"error": "Email and password required", "code": "validation_failed"}, status=400)

        user = authenticate(
            request,
            username=form.cleaned_data["email"].strip().lower(),
            password=form.cleaned_data["password"],
        )
        if not user:
            return JsonResponse({"error": "Invalid credentials", "code": "unauthenticated"}, status=401)

        # Get or create auth token
        from rest_framework.authtoken.models import Token
        token, created = Token.objects.get_or_create(user=user)

        return JsonResponse({"token": token.key, "user": serialize_user(user)})


@method_decorator(csrf_exempt, name="dispatch")
@method_decorator(token_auth, name="dispatch")
class LogoutView(View):
    """Delete the caller's API token.

    POST /api/auth/logout/
    Headers: Authorization: Bearer <token>
    """

    def post(self, request):
        if not request.user.is_authenticated:
            return JsonResponse({"error": "Must be logged in", "code": "unauthenticated"}, status=401)

        from rest_framework.authtoken.models import Token
        deleted, _ = Token.objects.filter(user=request.user).delete()

        return JsonResponse({"status": "logged_out" if deleted else "no_token"})


@method_decorator(token_auth, name="dispatch")
class MeView(View):
    """Return the current user, or null when anonymous."""

    def get(self, request):
        if not request.user.is_authenticated:
            return JsonResponse({"user": None})
        return JsonResponse({"user": serialize_user(request.user)})
