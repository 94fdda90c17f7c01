"""Authentication API URL patterns."""

from django.urls import path

from . import api_views

app_name = "auth"

urlpatterns = [
    path("register/", api_views.RegisterView.as_view(), name="register"),
    path("login/", api_views.LoginView.as_view(), name="login"),
    path("logout/", api_views.LogoutView.as_view(), name="logout"),
    path("me/", api_views.MeView.as_view(), name="me"),
]
