from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from .models import User


class UserPermissionTests(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()

        self.admin = User.objects.create_user(
            username="admin", password="password", role=User.ROLE_ADMIN
        )
        self.teacher = User.objects.create_user(
            username="teacher", password="password", role=User.ROLE_TEACHER
        )
        self.other_teacher = User.objects.create_user(
            username="teacher2", password="password", role=User.ROLE_TEACHER
        )

    def get_token(self, user):
        response = self.client.post(
            "/api/token/", {"username": user.username, "password": "password"}
        )
        return response.data["access"]

    def test_admin_can_list_users(self):
        token = self.get_token(self.admin)
        self.client.credentials(HTTP_AUTHORIZATION="Bearer " + token)
        response = self.client.get("/api/users/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_routes_accept_missing_trailing_slash(self):
        token = self.get_token(self.admin)
        self.client.credentials(HTTP_AUTHORIZATION="Bearer " + token)
        response = self.client.get("/api/users")
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_teacher_cannot_list_users(self):
        token = self.get_token(self.teacher)
        self.client.credentials(HTTP_AUTHORIZATION="Bearer " + token)
        response = self.client.get("/api/users/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_anonymous_cannot_list_users(self):
        response = self.client.get("/api/users/")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_any_user_can_view_own_profile(self):
        token = self.get_token(self.other_teacher)
        self.client.credentials(HTTP_AUTHORIZATION="Bearer " + token)
        response = self.client.get("/api/users/me/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["username"], "teacher2")
        self.assertEqual(response.data["role"], User.ROLE_TEACHER)

    def test_admin_can_create_user(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(
            "/api/users/",
            {
                "username": "nuevo",
                "email": "nuevo@example.com",
                "role": User.ROLE_TEACHER,
                "password": "Clave-Segura-2024",
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertNotIn("password", response.data)
        self.assertTrue(User.objects.get(username="nuevo").check_password("Clave-Segura-2024"))

    def test_create_user_rejects_unknown_fields(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(
            "/api/users/",
            {
                "username": "nuevo",
                "role": User.ROLE_TEACHER,
                "password": "Clave-Segura-2024",
                "is_superuser": True,
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("is_superuser", response.data)
        self.assertFalse(User.objects.filter(username="nuevo").exists())

    def test_superuser_counts_as_portal_admin(self):
        root = User.objects.create_superuser(
            username="root", email="root@example.com", password="password", role=User.ROLE_TEACHER
        )
        self.assertTrue(root.is_portal_admin)
        self.assertFalse(self.teacher.is_portal_admin)


class UserEmailTests(TestCase):
    def test_users_without_email_do_not_collide(self):
        first = User.objects.create_user(username="sin_correo_1", password="password", role=User.ROLE_TEACHER)
        second = User.objects.create_user(username="sin_correo_2", password="password", role=User.ROLE_TEACHER)

        self.assertIsNone(first.email)
        self.assertIsNone(second.email)
        self.assertEqual(User.objects.filter(email__isnull=True).count(), 2)

    def test_admin_can_create_users_with_blank_email(self):
        admin = User.objects.create_user(username="admin_correo", password="password", role=User.ROLE_ADMIN)
        client = APIClient()
        client.force_authenticate(user=admin)

        for username in ("docente_a", "docente_b"):
            response = client.post(
                "/api/users/",
                {"username": username, "email": "", "role": User.ROLE_TEACHER, "password": "Clave-Segura-2024"},
                format="json",
            )
            self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)

        self.assertIsNone(User.objects.get(username="docente_b").email)

    def test_duplicate_email_still_rejected(self):
        User.objects.create_user(
            username="uno", email="docente@example.com", password="password", role=User.ROLE_TEACHER
        )
        admin = User.objects.create_user(username="admin_dup", password="password", role=User.ROLE_ADMIN)
        client = APIClient()
        client.force_authenticate(user=admin)

        response = client.post(
            "/api/users/",
            {
                "username": "dos",
                "email": "docente@example.com",
                "role": User.ROLE_TEACHER,
                "password": "Clave-Segura-2024",
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("email", response.data)
