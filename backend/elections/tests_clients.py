import json
from unittest import mock

import requests
from django.test import SimpleTestCase

from elections.clients import (
    NETWORK_ERROR_MESSAGE,
    HttpVotingGateway,
    StudentNotFoundError,
    VotingGatewayError,
    extract_error_message,
)


def _response(status_code, body=None, raw=None):
    response = mock.Mock()
    response.status_code = status_code
    response.content = raw if raw is not None else (json.dumps(body).encode("utf-8") if body is not None else b"")
    if body is not None:
        response.json.return_value = body
    else:
        response.json.side_effect = ValueError("no json")
    return response


class HttpVotingGatewayTests(SimpleTestCase):
    def setUp(self):
        self.session = mock.Mock()
        self.session.headers = {}
        self.gateway = HttpVotingGateway("https://portal.example.com/", session=self.session, timeout=5)

    def test_lookup_student_builds_url(self):
        self.session.request.return_value = _response(200, {"cedula": "V 1", "nombre": "Ana"})
        student = self.gateway.lookup_student("V 1")

        self.assertEqual(student["nombre"], "Ana")
        self.session.request.assert_called_once_with(
            "GET", "https://portal.example.com/api/estudiantes/cedula/V%201/", timeout=5
        )

    def test_lookup_student_not_found(self):
        self.session.request.return_value = _response(404, {"detail": "Estudiante no encontrado"})
        with self.assertRaises(StudentNotFoundError) as ctx:
            self.gateway.lookup_student("123")
        self.assertEqual(ctx.exception.message, "Estudiante no encontrado")
        self.assertEqual(ctx.exception.status_code, 404)

    def test_list_candidates_sends_section(self):
        self.session.request.return_value = _response(200, [{"id": 1}])
        self.assertEqual(self.gateway.list_candidates("vocero", "5A"), [{"id": 1}])
        self.session.request.assert_called_once_with(
            "GET",
            "https://portal.example.com/api/candidatos/tipo/vocero/",
            timeout=5,
            params={"anioSeccion": "5A"},
        )

    def test_duplicate_vote_keeps_code(self):
        self.session.request.return_value = _response(
            400, {"detail": "Este estudiante ya ha votado en esta elección.", "code": "duplicate_vote"}
        )
        with self.assertRaises(VotingGatewayError) as ctx:
            self.gateway.submit_vote({"cedula": "1"})
        self.assertEqual(ctx.exception.code, "duplicate_vote")
        self.assertEqual(ctx.exception.message, "Este estudiante ya ha votado en esta elección.")

    def test_field_errors_surface_first_message(self):
        self.session.request.return_value = _response(400, {"candidatoId": ["El candidato seleccionado no existe."]})
        with self.assertRaises(VotingGatewayError) as ctx:
            self.gateway.submit_vote({"cedula": "1"})
        self.assertEqual(ctx.exception.message, "El candidato seleccionado no existe.")

    def test_non_json_error_has_empty_message(self):
        self.session.request.return_value = _response(502, raw=b"<html>Bad gateway</html>")
        with self.assertRaises(VotingGatewayError) as ctx:
            self.gateway.get_availability("carnaval")
        self.assertEqual(ctx.exception.message, "")
        self.assertEqual(ctx.exception.status_code, 502)

    def test_network_error_is_wrapped(self):
        self.session.request.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(VotingGatewayError) as ctx:
            self.gateway.get_availability("carnaval")
        self.assertEqual(ctx.exception.message, NETWORK_ERROR_MESSAGE)
        self.assertIsNone(ctx.exception.status_code)


class ExtractErrorMessageTests(SimpleTestCase):
    def test_shapes(self):
        self.assertEqual(extract_error_message({"detail": "x"}), "x")
        self.assertEqual(extract_error_message({"code": "c", "nombre": ["falta"]}), "falta")
        self.assertEqual(extract_error_message([{"a": "b"}]), "b")
        self.assertIsNone(extract_error_message(None))
        self.assertIsNone(extract_error_message({}))
