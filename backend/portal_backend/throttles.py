from __future__ import annotations

from django.conf import settings
from rest_framework.throttling import SimpleRateThrottle


class _SettingsRateThrottle(SimpleRateThrottle):
    rate_setting = ""

    def get_rate(self):
        explicit = str(getattr(settings, self.rate_setting, "") or "").strip() if self.rate_setting else ""
        if explicit:
            return explicit
        return super().get_rate()


class AuthLoginIPRateThrottle(_SettingsRateThrottle):
    scope = "auth_login_ip"
    rate_setting = "AUTH_LOGIN_IP_THROTTLE_RATE"

    def get_cache_key(self, request, view):
        ident = self.get_ident(request)
        if not ident:
            return None
        return self.cache_format % {"scope": self.scope, "ident": ident}


class AuthLoginUserRateThrottle(_SettingsRateThrottle):
    scope = "auth_login_user"
    rate_setting = "AUTH_LOGIN_USER_THROTTLE_RATE"

    def get_cache_key(self, request, view):
        username = str(request.data.get("username", "") or "").strip().lower()
        if not username:
            return None
        return self.cache_format % {"scope": self.scope, "ident": username}


class AuthRefreshIPRateThrottle(_SettingsRateThrottle):
    scope = "auth_refresh_ip"
    rate_setting = "AUTH_REFRESH_IP_THROTTLE_RATE"

    def get_cache_key(self, request, view):
        ident = self.get_ident(request)
        if not ident:
            return None
        return self.cache_format % {"scope": self.scope, "ident": ident}


class PublicVotingRateThrottle(_SettingsRateThrottle):
    scope = "public_voting"
    rate_setting = "PUBLIC_VOTING_THROTTLE_RATE"

    def get_cache_key(self, request, view):
        ident = self.get_ident(request)
        if not ident:
            return None
        return self.cache_format % {"scope": self.scope, "ident": ident}
