from __future__ import annotations

import json
import tempfile
from io import StringIO
from pathlib import Path
from unittest import mock

import requests
from django.core.cache import cache
from django.core.management import call_command
from django.core.management.base import CommandError
from rest_framework.test import APITestCase

from users.models import User

from .models import Student


class StudentPublicEndpointTests(APITestCase):
    def setUp(self):
        cache.clear()
        Student.objects.create(cedula="30111222", nombre="Ana", apellido="Pérez", anio_seccion="5A", direccion="Calle 1")
        Student.objects.create(cedula="30111333", nombre="Luis", apellido="Rojas", anio_seccion="3b", direccion="Calle 2")
        Student.objects.create(cedula="30111444", nombre="Eva", apellido="Mora", anio_seccion="5A", direccion="Calle 3")

    def test_lookup_by_cedula_returns_student(self):
        response = self.client.get("/api/estudiantes/cedula/30111222/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["nombre"], "Ana")
        self.assertEqual(response.data["anioSeccion"], "5A")

    def test_lookup_without_trailing_slash(self):
        response = self.client.get("/api/estudiantes/cedula/30111222")
        self.assertEqual(response.status_code, 200)

    def test_unknown_cedula_is_404(self):
        response = self.client.get("/api/estudiantes/cedula/99999999/")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["detail"], "Estudiante no encontrado")

    def test_distinct_anio_seccion_sorted(self):
        response = self.client.get("/api/estudiantes/anioSeccion-unicos")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data, ["3B", "5A"])

    def test_listing_requires_admin(self):
        response = self.client.get("/api/estudiantes/")
        self.assertEqual(response.status_code, 401)


class StudentAdminCrudTests(APITestCase):
    def setUp(self):
        cache.clear()
        self.admin = User.objects.create_user(username="admin_students", password="pass1234", role=User.ROLE_ADMIN)
        self.teacher = User.objects.create_user(username="teacher_students", password="pass1234", role=User.ROLE_TEACHER)

    def test_admin_can_create_student(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(
            "/api/estudiantes/",
            {"cedula": " 31000111 ", "nombre": "Rosa", "apellido": "Díaz", "anioSeccion": "4c", "direccion": "Av. 2"},
            format="json",
        )
        self.assertEqual(response.status_code, 201, response.data)
        student = Student.objects.get()
        self.assertEqual(student.cedula, "31000111")
        self.assertEqual(student.anio_seccion, "4C")

    def test_duplicate_cedula_is_rejected(self):
        Student.objects.create(cedula="31000111", nombre="Rosa", apellido="Díaz", anio_seccion="4C", direccion="Av. 2")
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(
            "/api/estudiantes/",
            {"cedula": "31000111", "nombre": "Otra", "apellido": "Persona", "anioSeccion": "4C", "direccion": "Av. 3"},
            format="json",
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("cedula", response.data)

    def test_unknown_fields_are_rejected(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(
            "/api/estudiantes/",
            {
                "cedula": "31000111",
                "nombre": "Rosa",
                "apellido": "Díaz",
                "anioSeccion": "4C",
                "direccion": "Av. 2",
                "promedio": 19,
            },
            format="json",
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("promedio", response.data)

    def test_teacher_cannot_create_student(self):
        self.client.force_authenticate(user=self.teacher)
        response = self.client.post("/api/estudiantes/", {"cedula": "1"}, format="json")
        self.assertEqual(response.status_code, 403)


class ImportStudentsCommandTests(APITestCase):
    def _write(self, suffix: str, content: str) -> Path:
        tmp = tempfile.NamedTemporaryFile("w", suffix=suffix, delete=False, encoding="utf-8")
        tmp.write(content)
        tmp.close()
        self.addCleanup(Path(tmp.name).unlink)
        return Path(tmp.name)

    def test_dry_run_does_not_write(self):
        source = self._write(
            ".json",
            json.dumps([{"cedula": "1", "nombre": "Ana", "apellido": "Pérez", "anioSeccion": "5a", "direccion": "X"}]),
        )
        out = StringIO()
        call_command("import_students", "--source-file", str(source), stdout=out, stderr=StringIO())

        self.assertEqual(Student.objects.count(), 0)
        self.assertIn("created=1", out.getvalue())
        self.assertIn("modo=dry-run", out.getvalue())

    def test_apply_creates_and_updates_from_csv(self):
        Student.objects.create(cedula="2", nombre="Luis", apellido="Rojas", anio_seccion="3B", direccion="Vieja")
        source = self._write(
            ".csv",
            "Cédula,Nombres,Apellidos,Año Sección,Dirección\n"
            "1,Ana,Pérez,5a,Calle 1\n"
            "2,Luis,Rojas,3B,Nueva\n"
            "3,,Sin Nombre,2A,Calle 9\n",
        )
        out = StringIO()
        err = StringIO()
        call_command("import_students", "--source-file", str(source), "--apply", stdout=out, stderr=err)

        self.assertEqual(Student.objects.get(cedula="1").anio_seccion, "5A")
        self.assertEqual(Student.objects.get(cedula="2").direccion, "Nueva")
        self.assertFalse(Student.objects.filter(cedula="3").exists())
        self.assertIn("created=1 updated=1 unchanged=0 errors=1", out.getvalue())
        self.assertIn("nombre", err.getvalue())

    def test_requires_exactly_one_source(self):
        with self.assertRaises(CommandError):
            call_command("import_students")

    @mock.patch("students.management.commands.import_students.requests.get")
    def test_source_url_network_error(self, get_mock):
        get_mock.side_effect = requests.ConnectionError("boom")
        with self.assertRaises(CommandError):
            call_command("import_students", "--source-url", "https://sge.example.com/estudiantes")

    @mock.patch("students.management.commands.import_students.requests.get")
    def test_source_url_payload_is_imported(self, get_mock):
        get_mock.return_value.raise_for_status.return_value = None
        get_mock.return_value.json.return_value = [
            {"ci": "7", "nombre": "Eva", "apellido": "Mora", "anio_seccion": "1A", "direccion": "Calle 7"}
        ]
        call_command(
            "import_students",
            "--source-url",
            "https://sge.example.com/estudiantes",
            "--apply",
            stdout=StringIO(),
        )
        self.assertTrue(Student.objects.filter(cedula="7", anio_seccion="1A").exists())
