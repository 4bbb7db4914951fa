from __future__ import annotations

from django.conf import settings
from rest_framework import exceptions
from rest_framework.authentication import CSRFCheck
from rest_framework.permissions import SAFE_METHODS
from rest_framework_simplejwt.authentication import JWTAuthentication


class PortalJWTAuthentication(JWTAuthentication):
    """Bearer header first; falls back to the httpOnly access cookie (CSRF enforced)."""

    def authenticate(self, request):
        header_auth = super().authenticate(request)
        if header_auth is not None:
            return header_auth

        raw_token = request.COOKIES.get(getattr(settings, "AUTH_COOKIE_ACCESS_NAME", "portal_access"))
        if not raw_token:
            return None

        validated_token = self.get_validated_token(raw_token)
        self._enforce_csrf(request)
        return self.get_user(validated_token), validated_token

    def _enforce_csrf(self, request) -> None:
        check = CSRFCheck(lambda req: None)
        check.process_request(request)
        reason = check.process_view(request, None, (), {})
        if reason:
            raise exceptions.PermissionDenied(f"CSRF Failed: {reason}")


class PublicReadJWTAuthentication(PortalJWTAuthentication):
    """For endpoints that anyone may read: on safe methods an unusable token means anonymous.

    Writes still fail with 401 so the admin panel can refresh its session.
    """

    def authenticate(self, request):
        try:
            return super().authenticate(request)
        except exceptions.AuthenticationFailed:
            if request.method in SAFE_METHODS:
                return None
            raise
