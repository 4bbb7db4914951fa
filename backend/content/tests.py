from datetime import datetime
from zoneinfo import ZoneInfo

from rest_framework.test import APITestCase

from users.models import User

from .models import Article, Book, CalendarEvent, GalleryImage


CARACAS = ZoneInfo("America/Caracas")


class ContentPermissionTests(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_user(username="admin_content", password="pass1234", role=User.ROLE_ADMIN)
        self.teacher = User.objects.create_user(username="teacher_content", password="pass1234", role=User.ROLE_TEACHER)

    def test_public_can_list_without_auth(self):
        Book.objects.create(nombre_libro="Doña Bárbara", autor="Rómulo Gallegos", materia="Castellano")

        for url in ("/api/biblioteca/", "/api/biblioteca", "/api/calendario/", "/api/galeria/", "/api/articulos/"):
            res = self.client.get(url)
            self.assertEqual(res.status_code, 200, url)

        res = self.client.get("/api/biblioteca/")
        self.assertEqual(res.data[0]["nombreLibro"], "Doña Bárbara")
        self.assertIn("fechaCreacion", res.data[0])

    def test_anonymous_write_rejected(self):
        res = self.client.post("/api/articulos/", {"titulo": "x"}, format="json")
        self.assertEqual(res.status_code, 401)

    def test_non_admin_write_forbidden(self):
        self.client.force_authenticate(user=self.teacher)
        res = self.client.post(
            "/api/galeria/",
            {"imagen": "https://cdn.example.com/a.jpg", "categoria": "deportes", "nombre": "Final"},
            format="json",
        )
        self.assertEqual(res.status_code, 403)
        self.assertFalse(GalleryImage.objects.exists())


class ContentCrudTests(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_user(username="admin_crud", password="pass1234", role=User.ROLE_ADMIN)
        self.client.force_authenticate(user=self.admin)

    def test_book_crud(self):
        res = self.client.post(
            "/api/biblioteca/",
            {
                "nombreLibro": "Canaima",
                "autor": "Rómulo Gallegos",
                "materia": "Castellano",
                "pdf": "https://cdn.example.com/canaima.pdf",
            },
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)
        book_id = res.data["id"]
        self.assertEqual(res.data["portada"], "")

        res = self.client.patch(f"/api/biblioteca/{book_id}", {"materia": "Literatura"}, format="json")
        self.assertEqual(res.status_code, 200, res.data)
        self.assertEqual(Book.objects.get(id=book_id).materia, "Literatura")

        res = self.client.delete(f"/api/biblioteca/{book_id}/")
        self.assertEqual(res.status_code, 204)
        self.assertFalse(Book.objects.exists())

    def test_unknown_field_rejected(self):
        res = self.client.post(
            "/api/articulos/",
            {"titulo": "Bienvenida", "contenido": "Texto", "autor": "Dirección", "categoria": "noticias", "extra": 1},
            format="json",
        )
        self.assertEqual(res.status_code, 400)
        self.assertIn("extra", res.data)
        self.assertFalse(Article.objects.exists())

    def test_missing_required_fields(self):
        res = self.client.post("/api/calendario/", {"evento": "Acto"}, format="json")
        self.assertEqual(res.status_code, 400)
        self.assertIn("fecha", res.data)
        self.assertIn("categoria", res.data)

    def test_invalid_image_url(self):
        res = self.client.post(
            "/api/galeria/",
            {"imagen": "no-es-url", "categoria": "deportes", "nombre": "Final"},
            format="json",
        )
        self.assertEqual(res.status_code, 400)
        self.assertIn("imagen", res.data)


class ContentFilterTests(APITestCase):
    def setUp(self):
        CalendarEvent.objects.create(
            evento="Carnaval", fecha=datetime(2026, 2, 5, 10, 0, tzinfo=CARACAS), categoria="cultural"
        )
        CalendarEvent.objects.create(
            evento="Día del estudiante", fecha=datetime(2026, 11, 21, 9, 0, tzinfo=CARACAS), categoria="escolar"
        )
        CalendarEvent.objects.create(
            evento="Carnaval anterior", fecha=datetime(2025, 2, 20, 10, 0, tzinfo=CARACAS), categoria="cultural"
        )
        GalleryImage.objects.create(imagen="https://cdn.example.com/1.jpg", categoria="Deportes", nombre="Final")
        GalleryImage.objects.create(imagen="https://cdn.example.com/2.jpg", categoria="Graduación", nombre="Acto")

    def test_calendar_month_and_year(self):
        res = self.client.get("/api/calendario/?month=2&year=2026")
        self.assertEqual(res.status_code, 200)
        self.assertEqual([row["evento"] for row in res.data], ["Carnaval"])

        res = self.client.get("/api/calendario/?month=2")
        self.assertEqual([row["evento"] for row in res.data], ["Carnaval anterior", "Carnaval"])

    def test_calendar_without_filters_is_chronological(self):
        res = self.client.get("/api/calendario/")
        self.assertEqual(
            [row["evento"] for row in res.data],
            ["Carnaval anterior", "Carnaval", "Día del estudiante"],
        )

    def test_gallery_category(self):
        res = self.client.get("/api/galeria/?categoria=deportes")
        self.assertEqual([row["nombre"] for row in res.data], ["Final"])

        res = self.client.get("/api/galeria/?categoria=all")
        self.assertEqual(len(res.data), 2)

    def test_public_reads_ignore_stale_cookie(self):
        GalleryImage.objects.create(imagen="https://cdn.example.com/1.jpg", categoria="deportes", nombre="Final")
        self.client.cookies["portal_access"] = "expirado-o-basura"

        for url in ("/api/biblioteca/", "/api/calendario/?month=2", "/api/galeria/?categoria=deportes", "/api/articulos"):
            response = self.client.get(url)
            self.assertEqual(response.status_code, 200, url)

        response = self.client.post("/api/articulos/", {"titulo": "x"}, format="json")
        self.assertEqual(response.status_code, 401)
