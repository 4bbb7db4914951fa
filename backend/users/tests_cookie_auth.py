from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import override_settings
from rest_framework.test import APITestCase


class CookieAuthFlowTests(APITestCase):
    def setUp(self):
        cache.clear()
        user_model = get_user_model()
        self.user = user_model.objects.create_user(
            username="cookie_auth_user",
            password="pass1234",
            role=user_model.ROLE_ADMIN,
        )

    def _login(self):
        csrf_response = self.client.get("/api/auth/csrf/")
        self.assertEqual(csrf_response.status_code, 200)
        csrf_cookie = csrf_response.cookies.get("csrftoken")
        return self.client.post(
            "/api/auth/login/",
            {"username": "cookie_auth_user", "password": "pass1234"},
            format="json",
            HTTP_X_CSRFTOKEN=csrf_cookie.value if csrf_cookie else "",
        )

    def test_cookie_login_sets_auth_cookies_and_allows_me(self):
        login_response = self._login()
        self.assertEqual(login_response.status_code, 200)
        self.assertIn("portal_access", login_response.cookies)
        self.assertIn("portal_refresh", login_response.cookies)

        me_response = self.client.get("/api/users/me/")
        self.assertEqual(me_response.status_code, 200)
        self.assertEqual(me_response.data["username"], "cookie_auth_user")

    def test_cookie_login_rejects_bad_credentials(self):
        response = self.client.post(
            "/api/auth/login/",
            {"username": "cookie_auth_user", "password": "incorrecta"},
            format="json",
        )
        self.assertEqual(response.status_code, 401)
        self.assertNotIn("portal_access", response.cookies)

    def test_cookie_refresh_uses_refresh_cookie(self):
        self.assertEqual(self._login().status_code, 200)

        refresh_response = self.client.post("/api/auth/refresh/", {}, format="json")
        self.assertEqual(refresh_response.status_code, 200)
        self.assertIn("portal_access", refresh_response.cookies)

    def test_cookie_refresh_without_token_is_unauthorized(self):
        response = self.client.post("/api/auth/refresh/", {}, format="json")
        self.assertEqual(response.status_code, 401)

    def test_logout_clears_cookies(self):
        self.assertEqual(self._login().status_code, 200)

        logout_response = self.client.post("/api/auth/logout/", {}, format="json")
        self.assertEqual(logout_response.status_code, 200)
        self.assertEqual(logout_response.cookies["portal_access"].value, "")
        self.assertEqual(logout_response.cookies["portal_refresh"].value, "")

    @override_settings(
        AUTH_LOGIN_IP_THROTTLE_RATE="2/min",
        AUTH_LOGIN_USER_THROTTLE_RATE="2/min",
    )
    def test_cookie_login_is_throttled_after_limit(self):
        for _ in range(2):
            self.assertEqual(self._login().status_code, 200)

        throttled_response = self._login()
        self.assertEqual(throttled_response.status_code, 429)

    @override_settings(AUTH_REFRESH_IP_THROTTLE_RATE="1/min")
    def test_cookie_refresh_is_throttled_after_limit(self):
        self.assertEqual(self._login().status_code, 200)

        first_refresh_response = self.client.post("/api/auth/refresh/", {}, format="json")
        self.assertEqual(first_refresh_response.status_code, 200)

        throttled_response = self.client.post("/api/auth/refresh/", {}, format="json")
        self.assertEqual(throttled_response.status_code, 429)

    def test_cookie_refresh_with_invalid_token_is_unauthorized(self):
        self.client.cookies["portal_refresh"] = "no-es-un-token"
        response = self.client.post("/api/auth/refresh/", {}, format="json")
        self.assertEqual(response.status_code, 401)
        self.assertNotIn("portal_access", response.cookies)
