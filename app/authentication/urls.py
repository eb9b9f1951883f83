"""
URL configuration for authentication app.

URL structure:
    /api/v1/auth/login/   - Log in, or register an unused name (POST)
    /api/v1/auth/search/  - Exact-name user lookup (POST)
"""

from django.urls import path

from authentication.views import LoginView, UserSearchView

app_name = "authentication"

urlpatterns = [
    path("login/", LoginView.as_view(), name="login"),
    path("search/", UserSearchView.as_view(), name="search"),
]
