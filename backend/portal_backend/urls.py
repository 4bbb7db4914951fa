"""
URL configuration for portal_backend project.

Every API route accepts the path with or without a trailing slash.
"""

from django.contrib import admin
from django.urls import include, path, re_path
from rest_framework_simplejwt.views import (
    TokenObtainPairView,
    TokenRefreshView,
)
from .auth_views import CookieLoginAPIView, CookieLogoutAPIView, CookieRefreshAPIView, CsrfCookieAPIView

urlpatterns = [
    path("admin/", admin.site.urls),
    re_path(r"^api/token/?$", TokenObtainPairView.as_view(), name="token_obtain_pair"),
    re_path(r"^api/token/refresh/?$", TokenRefreshView.as_view(), name="token_refresh"),
    re_path(r"^api/auth/csrf/?$", CsrfCookieAPIView.as_view(), name="auth_csrf"),
    re_path(r"^api/auth/login/?$", CookieLoginAPIView.as_view(), name="auth_cookie_login"),
    re_path(r"^api/auth/refresh/?$", CookieRefreshAPIView.as_view(), name="auth_cookie_refresh"),
    re_path(r"^api/auth/logout/?$", CookieLogoutAPIView.as_view(), name="auth_cookie_logout"),
    path("api/", include("users.urls")),
    path("api/", include("students.urls")),
    path("api/", include("elections.urls")),
    path("api/", include("content.urls")),
    path("api/", include("audit.urls")),
]
