import csv
from datetime import date
from io import BytesIO, StringIO
from unittest.mock import patch

from django.core.cache import cache
from django.db import DatabaseError
from django.test import SimpleTestCase, override_settings
from openpyxl import load_workbook
from rest_framework.test import APIClient, APITestCase
from rest_framework_simplejwt.tokens import AccessToken

from audit.models import AuditLog
from portal_backend.exceptions import STORE_ERROR_DETAIL
from students.models import Student
from users.models import User

from elections.availability import is_election_available
from elections.models import Candidate, Election, ElectionType, Vote
from elections.services import filter_eligible_candidates, normalize_tally_filters, split_anio_seccion


class VotingFixtureMixin:
    def _create_fixture(self):
        cache.clear()
        self.ana = Candidate.objects.create(nombre="Ana", apellido="Soto", grado="5", seccion="A", tipo_eleccion="estudiantiles")
        self.beto = Candidate.objects.create(nombre="Beto", apellido="Lara", grado="5", seccion="a", tipo_eleccion="estudiantiles")
        self.caro = Candidate.objects.create(nombre="Caro", apellido="Paz", grado="3", seccion="B", tipo_eleccion="estudiantiles")
        self.dani = Candidate.objects.create(nombre="Dani", apellido="Ruiz", grado="5", seccion="A", tipo_eleccion="vocero")
        self.emma = Candidate.objects.create(nombre="Emma", apellido="Gil", grado="5", seccion="A", tipo_eleccion="carnaval")
        self.inactive = Candidate.objects.create(
            nombre="Fabi", apellido="Mar", grado="5", seccion="A", tipo_eleccion="estudiantiles", activo=False
        )
        self.typed_election = Election.objects.create(nombre="Estudiantiles 2026", tipo_eleccion="estudiantiles")
        self.open_election = Election.objects.create(nombre="Jornada general")

    def _payload(self, **overrides):
        payload = {
            "cedula": "30111222",
            "nombre": "Luisa",
            "apellido": "Pérez",
            "rol": "Estudiante",
            "anioSeccion": "5A",
            "direccion": "Calle 1",
            "candidatoId": self.ana.id,
            "tipoEleccion": "estudiantiles",
        }
        payload.update(overrides)
        return payload

    def _vote(self, cedula, candidate, eleccion=None, anio_seccion=None):
        return Vote.objects.create(
            cedula=cedula,
            nombre="Votante",
            apellido=cedula,
            rol="Estudiante",
            anio_seccion=anio_seccion or f"{candidate.grado}{candidate.seccion}",
            direccion="Calle",
            candidato=candidate,
            eleccion=eleccion,
            tipo_eleccion=candidate.tipo_eleccion,
        )


class VoteSubmissionTests(VotingFixtureMixin, APITestCase):
    def setUp(self):
        self._create_fixture()

    def test_vote_is_recorded_and_audited(self):
        response = self.client.post("/api/votaciones/", self._payload(eleccionId=self.typed_election.id), format="json")

        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["candidatoId"], self.ana.id)
        self.assertEqual(response.data["eleccionId"], self.typed_election.id)
        self.assertEqual(response.data["anioSeccion"], "5A")
        self.assertIn("fechaVoto", response.data)
        self.assertEqual(Vote.objects.count(), 1)

        entry = AuditLog.objects.get(event_type="VOTE_SUBMIT")
        self.assertIsNone(entry.actor)
        self.assertEqual(entry.actor_label, "30111222")

    def test_path_without_trailing_slash(self):
        response = self.client.post("/api/votaciones", self._payload(), format="json")
        self.assertEqual(response.status_code, 201, response.data)

    def test_second_vote_same_type_is_duplicate(self):
        first = self.client.post("/api/votaciones/", self._payload(), format="json")
        self.assertEqual(first.status_code, 201)

        second = self.client.post("/api/votaciones/", self._payload(candidatoId=self.beto.id), format="json")
        self.assertEqual(second.status_code, 400)
        self.assertEqual(second.data["detail"], "Este estudiante ya ha votado en esta elección.")
        self.assertEqual(second.data["code"], "duplicate_vote")
        self.assertEqual(Vote.objects.count(), 1)
        self.assertTrue(AuditLog.objects.filter(event_type="VOTE_SUBMIT_DUPLICATE", actor_label="30111222").exists())

    def test_duplicate_check_ignores_surrounding_whitespace(self):
        self._vote("30111222", self.ana)
        response = self.client.post("/api/votaciones/", self._payload(cedula=" 30111222 "), format="json")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["code"], "duplicate_vote")

    def test_same_voter_can_vote_in_another_type(self):
        self._vote("30111222", self.ana)
        response = self.client.post(
            "/api/votaciones/",
            self._payload(candidatoId=self.dani.id, tipoEleccion="vocero"),
            format="json",
        )
        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(Vote.objects.filter(cedula="30111222").count(), 2)

    def test_concurrent_insert_conflict_is_reported_as_duplicate(self):
        self._vote("30111222", self.ana)
        with patch("elections.services.has_voted", return_value=False):
            response = self.client.post("/api/votaciones/", self._payload(), format="json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["code"], "duplicate_vote")
        self.assertEqual(Vote.objects.filter(cedula="30111222").count(), 1)

    def test_unknown_candidate_is_rejected(self):
        response = self.client.post("/api/votaciones/", self._payload(candidatoId=999999), format="json")
        self.assertEqual(response.status_code, 400)
        self.assertIn("candidatoId", response.data)
        self.assertEqual(Vote.objects.count(), 0)

    def test_inactive_candidate_is_rejected(self):
        response = self.client.post("/api/votaciones/", self._payload(candidatoId=self.inactive.id), format="json")
        self.assertEqual(response.status_code, 400)
        self.assertIn("candidatoId", response.data)

    def test_candidate_of_other_type_is_rejected(self):
        response = self.client.post("/api/votaciones/", self._payload(candidatoId=self.dani.id), format="json")
        self.assertEqual(response.status_code, 400)
        self.assertIn("candidatoId", response.data)

    def test_candidate_of_other_section_is_rejected(self):
        response = self.client.post("/api/votaciones/", self._payload(candidatoId=self.caro.id), format="json")
        self.assertEqual(response.status_code, 400)
        self.assertIn("candidatoId", response.data)

    def test_lowercase_section_matches_candidate(self):
        response = self.client.post(
            "/api/votaciones/",
            self._payload(anioSeccion="5a", candidatoId=self.beto.id),
            format="json",
        )
        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(Vote.objects.get().anio_seccion, "5A")

    def test_election_of_other_type_is_rejected(self):
        response = self.client.post(
            "/api/votaciones/",
            self._payload(candidatoId=self.dani.id, tipoEleccion="vocero", eleccionId=self.typed_election.id),
            format="json",
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("eleccionId", response.data)

    def test_untyped_election_accepts_any_type(self):
        response = self.client.post(
            "/api/votaciones/",
            self._payload(candidatoId=self.dani.id, tipoEleccion="vocero", eleccionId=self.open_election.id),
            format="json",
        )
        self.assertEqual(response.status_code, 201, response.data)

    def test_missing_election_is_rejected(self):
        response = self.client.post("/api/votaciones/", self._payload(eleccionId=999999), format="json")
        self.assertEqual(response.status_code, 400)
        self.assertIn("eleccionId", response.data)

    def test_unknown_fields_are_rejected(self):
        response = self.client.post("/api/votaciones/", self._payload(fechaVoto="2020-01-01"), format="json")
        self.assertEqual(response.status_code, 400)
        self.assertIn("fechaVoto", response.data)
        self.assertEqual(Vote.objects.count(), 0)

    def test_missing_fields_are_reported_per_field(self):
        response = self.client.post("/api/votaciones/", {"cedula": "1"}, format="json")
        self.assertEqual(response.status_code, 400)
        for field in ("nombre", "apellido", "rol", "anioSeccion", "direccion", "candidatoId", "tipoEleccion"):
            self.assertIn(field, response.data)

    def test_unknown_election_type_is_rejected(self):
        response = self.client.post("/api/votaciones/", self._payload(tipoEleccion="reina"), format="json")
        self.assertEqual(response.status_code, 400)
        self.assertIn("tipoEleccion", response.data)

    @override_settings(ELECTIONS_ENFORCE_AVAILABILITY=True)
    def test_closed_category_is_rejected_when_enforced(self):
        with patch("elections.availability.timezone.localdate", return_value=date(2026, 3, 1)):
            response = self.client.post(
                "/api/votaciones/",
                self._payload(candidatoId=self.emma.id, tipoEleccion="carnaval"),
                format="json",
            )
        self.assertEqual(response.status_code, 400)
        self.assertIn("tipoEleccion", response.data)
        self.assertEqual(Vote.objects.count(), 0)

    def test_closed_category_is_accepted_when_not_enforced(self):
        with patch("elections.availability.timezone.localdate", return_value=date(2026, 3, 1)):
            response = self.client.post(
                "/api/votaciones/",
                self._payload(candidatoId=self.emma.id, tipoEleccion="carnaval"),
                format="json",
            )
        self.assertEqual(response.status_code, 201, response.data)

    @override_settings(PUBLIC_VOTING_THROTTLE_RATE="2/min")
    def test_public_voting_is_throttled(self):
        for _ in range(2):
            self.assertEqual(self.client.get("/api/estadisticas/").status_code, 200)
        self.assertEqual(self.client.get("/api/estadisticas/").status_code, 429)


class TallyTests(VotingFixtureMixin, APITestCase):
    def setUp(self):
        self._create_fixture()
        self._vote("1", self.ana, eleccion=self.typed_election)
        self._vote("2", self.ana, eleccion=self.typed_election)
        self._vote("3", self.ana)
        self._vote("4", self.beto)
        self._vote("5", self.caro)
        self._vote("6", self.dani)

    def _rows(self, response):
        return {(row["candidatoId"], row["eleccionId"]): row["count"] for row in response.data["votosPorCandidato"]}

    def test_unfiltered_tally_groups_by_candidate_and_election(self):
        response = self.client.get("/api/estadisticas/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["totalVotos"], 6)
        self.assertEqual(
            self._rows(response),
            {
                (self.ana.id, self.typed_election.id): 2,
                (self.ana.id, None): 1,
                (self.beto.id, None): 1,
                (self.caro.id, None): 1,
                (self.dani.id, None): 1,
            },
        )
        first = response.data["votosPorCandidato"][0]
        self.assertEqual(first["candidatoId"], self.ana.id)
        self.assertEqual(first["eleccionNombre"], "Estudiantiles 2026")
        self.assertEqual(first["grado"], "5")
        self.assertEqual(first["seccion"], "A")

    def test_tally_counts_sum_to_total(self):
        response = self.client.get("/api/estadisticas", {"tipoEleccion": "estudiantiles"})
        self.assertEqual(sum(row["count"] for row in response.data["votosPorCandidato"]), response.data["totalVotos"])
        self.assertEqual(response.data["totalVotos"], 5)
        self.assertEqual(response.data["votosPorTipo"], [{"tipoEleccion": "estudiantiles", "count": 5}])

    def test_anio_seccion_filter_matches_separate_filters(self):
        combined = self.client.get("/api/estadisticas/", {"anioSeccion": "5a"})
        separate = self.client.get("/api/estadisticas/", {"anio": "5", "seccion": "a"})

        self.assertEqual(combined.data["votosPorCandidato"], separate.data["votosPorCandidato"])
        self.assertEqual(combined.data["totalVotos"], 5)
        self.assertEqual(combined.data["filtros"], {"anio": "5", "seccion": "A", "tipoEleccion": None})

    def test_anio_seccion_takes_precedence(self):
        response = self.client.get("/api/estadisticas/", {"anioSeccion": "3B", "anio": "5", "seccion": "A"})
        self.assertEqual(self._rows(response), {(self.caro.id, None): 1})

    def test_all_sentinel_means_no_filter(self):
        response = self.client.get("/api/estadisticas/", {"anioSeccion": "all", "tipoEleccion": "all"})
        self.assertEqual(response.data["totalVotos"], 6)
        self.assertEqual(response.data["filtros"], {"anio": None, "seccion": None, "tipoEleccion": None})

    def test_type_filter(self):
        response = self.client.get("/api/estadisticas/", {"tipoEleccion": "vocero"})
        self.assertEqual(self._rows(response), {(self.dani.id, None): 1})
        self.assertEqual(response.data["votosPorTipo"], [{"tipoEleccion": "vocero", "count": 1}])

    def test_filter_without_matches_returns_empty(self):
        response = self.client.get("/api/estadisticas/", {"anioSeccion": "9Z"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["votosPorCandidato"], [])
        self.assertEqual(response.data["totalVotos"], 0)

    def test_store_error_returns_generic_500(self):
        with patch("elections.views_public.build_statistics", side_effect=DatabaseError("connection lost")):
            response = self.client.get("/api/estadisticas/")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data["detail"], STORE_ERROR_DETAIL)


class TallyExportTests(VotingFixtureMixin, APITestCase):
    def setUp(self):
        self._create_fixture()
        self.admin = User.objects.create_user(username="admin_tally", password="pass1234", role=User.ROLE_ADMIN)
        self._vote("1", self.ana, eleccion=self.typed_election)
        self._vote("2", self.dani)

    def test_csv_export(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get("/api/estadisticas/export/csv/", {"tipoEleccion": "estudiantiles"})

        self.assertEqual(response.status_code, 200)
        self.assertIn("attachment;", response["Content-Disposition"])
        rows = list(csv.reader(StringIO(response.content.decode("utf-8"))))
        self.assertEqual(rows[1], ["total_votos", "1"])
        self.assertEqual(rows[3][0], "candidato_id")
        self.assertEqual(rows[4][:3], [str(self.ana.id), "Ana", "Soto"])
        self.assertTrue(AuditLog.objects.filter(event_type="TALLY_EXPORT_CSV", actor=self.admin).exists())

    def test_xlsx_export(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get("/api/estadisticas/export/xlsx")

        self.assertEqual(response.status_code, 200)
        workbook = load_workbook(BytesIO(response.content))
        sheet = workbook["Resultados"]
        self.assertEqual(sheet["B2"].value, 2)
        self.assertEqual(sheet.max_row, 6)
        self.assertEqual(workbook["Por tipo"].max_row, 3)

    def test_export_requires_admin(self):
        response = self.client.get("/api/estadisticas/export/csv/")
        self.assertEqual(response.status_code, 401)


class CandidateEndpointTests(VotingFixtureMixin, APITestCase):
    def setUp(self):
        self._create_fixture()
        self.admin = User.objects.create_user(username="admin_candidates", password="pass1234", role=User.ROLE_ADMIN)

    def test_candidates_by_type_and_section(self):
        response = self.client.get("/api/candidatos/tipo/estudiantiles/", {"anioSeccion": "5a"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual({row["id"] for row in response.data}, {self.ana.id, self.beto.id})

    def test_candidates_by_type_without_section(self):
        response = self.client.get("/api/candidatos/tipo/estudiantiles")
        self.assertEqual({row["id"] for row in response.data}, {self.ana.id, self.beto.id, self.caro.id})
        self.assertEqual(response.data[0]["tipoEleccion"], "estudiantiles")

    def test_candidates_by_unknown_type_is_404(self):
        response = self.client.get("/api/candidatos/tipo/reina/")
        self.assertEqual(response.status_code, 404)

    def test_public_listing_hides_inactive_candidates(self):
        response = self.client.get("/api/candidatos/")
        self.assertEqual(response.status_code, 200)
        self.assertNotIn(self.inactive.id, {row["id"] for row in response.data})

        self.client.force_authenticate(user=self.admin)
        response = self.client.get("/api/candidatos/")
        self.assertIn(self.inactive.id, {row["id"] for row in response.data})

    def test_anonymous_cannot_create_candidate(self):
        response = self.client.post("/api/candidatos/", {"nombre": "X"}, format="json")
        self.assertEqual(response.status_code, 401)

    def test_admin_creates_candidate_with_uppercase_section(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(
            "/api/candidatos/",
            {"nombre": "Gabo", "apellido": "León", "grado": "4", "seccion": "c", "tipoEleccion": "vocero"},
            format="json",
        )
        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["seccion"], "C")
        self.assertTrue(response.data["activo"])
        self.assertTrue(AuditLog.objects.filter(event_type="CANDIDATE_CREATE", object_id=str(response.data["id"])).exists())

    def test_invalid_grade_is_rejected(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(
            "/api/candidatos/",
            {"nombre": "Gabo", "apellido": "León", "grado": "12", "seccion": "C", "tipoEleccion": "vocero"},
            format="json",
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("grado", response.data)

    def test_candidate_with_votes_cannot_be_deleted(self):
        self._vote("1", self.ana)
        self.client.force_authenticate(user=self.admin)
        response = self.client.delete(f"/api/candidatos/{self.ana.id}/")
        self.assertEqual(response.status_code, 409)
        self.assertTrue(Candidate.objects.filter(id=self.ana.id).exists())

    def test_candidate_without_votes_is_deleted(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.delete(f"/api/candidatos/{self.caro.id}")
        self.assertEqual(response.status_code, 204)
        self.assertFalse(Candidate.objects.filter(id=self.caro.id).exists())

    def test_admin_can_deactivate_candidate(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.patch(f"/api/candidatos/{self.ana.id}/", {"activo": False}, format="json")
        self.assertEqual(response.status_code, 200)
        self.ana.refresh_from_db()
        self.assertFalse(self.ana.activo)


class ElectionEndpointTests(VotingFixtureMixin, APITestCase):
    def setUp(self):
        self._create_fixture()
        self.admin = User.objects.create_user(username="admin_elecciones", password="pass1234", role=User.ROLE_ADMIN)

    def test_public_listing_includes_vote_counts(self):
        self._vote("1", self.ana, eleccion=self.typed_election)
        response = self.client.get("/api/elecciones/")
        self.assertEqual(response.status_code, 200)
        counts = {row["id"]: row["votosRegistrados"] for row in response.data}
        self.assertEqual(counts[self.typed_election.id], 1)
        self.assertEqual(counts[self.open_election.id], 0)

    def test_admin_creates_election(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(
            "/api/elecciones/",
            {"nombre": "Vocería 2026", "descripcion": "Octubre", "tipoEleccion": "vocero"},
            format="json",
        )
        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["votosRegistrados"], 0)
        self.assertIsNotNone(response.data["fecha"])

    def test_type_change_conflicting_with_votes_is_rejected(self):
        self._vote("1", self.ana, eleccion=self.open_election)
        self.client.force_authenticate(user=self.admin)
        response = self.client.patch(
            f"/api/elecciones/{self.open_election.id}/",
            {"tipoEleccion": "vocero"},
            format="json",
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("tipoEleccion", response.data)

    def test_election_with_votes_cannot_be_deleted(self):
        self._vote("1", self.ana, eleccion=self.typed_election)
        self.client.force_authenticate(user=self.admin)
        response = self.client.delete(f"/api/elecciones/{self.typed_election.id}/")
        self.assertEqual(response.status_code, 409)

    def test_availability_listing(self):
        response = self.client.get("/api/elecciones/disponibilidad/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual({row["tipoEleccion"] for row in response.data}, set(ElectionType.values))

    def test_availability_for_type(self):
        response = self.client.get("/api/elecciones/disponibilidad/estudiantiles")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data, {"tipoEleccion": "estudiantiles", "disponible": True, "mensaje": ""})

    def test_availability_for_unknown_type_is_404(self):
        response = self.client.get("/api/elecciones/disponibilidad/reina/")
        self.assertEqual(response.status_code, 404)


class VoteListingTests(VotingFixtureMixin, APITestCase):
    def setUp(self):
        self._create_fixture()
        self.admin = User.objects.create_user(username="admin_votos", password="pass1234", role=User.ROLE_ADMIN)
        self._vote("1", self.ana, eleccion=self.typed_election)
        self._vote("2", self.dani)

    def test_admin_lists_votes(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get("/api/votaciones/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data), 2)
        names = {row["candidatoNombre"] for row in response.data}
        self.assertEqual(names, {"Ana Soto", "Dani Ruiz"})

    def test_admin_lists_votes_by_type(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get("/api/votaciones/tipo/vocero")
        self.assertEqual(response.status_code, 200)
        self.assertEqual([row["cedula"] for row in response.data], ["2"])

    def test_anonymous_cannot_list_votes(self):
        response = self.client.get("/api/votaciones/")
        self.assertEqual(response.status_code, 401)


class AvailabilityWindowTests(SimpleTestCase):
    def test_estudiantiles_is_always_open(self):
        for day in (date(2026, 1, 1), date(2026, 2, 5), date(2026, 12, 31)):
            self.assertTrue(is_election_available("estudiantiles", today=day).disponible)

    def test_carnaval_window(self):
        self.assertFalse(is_election_available("carnaval", today=date(2026, 2, 2)).disponible)
        self.assertTrue(is_election_available("carnaval", today=date(2026, 2, 3)).disponible)
        self.assertTrue(is_election_available("carnaval", today=date(2026, 2, 7)).disponible)
        closed = is_election_available("carnaval", today=date(2026, 2, 8))
        self.assertFalse(closed.disponible)
        self.assertTrue(closed.mensaje)
        self.assertFalse(is_election_available("carnaval", today=date(2026, 3, 5)).disponible)

    def test_vocero_window(self):
        self.assertTrue(is_election_available("vocero", today=date(2026, 10, 20)).disponible)
        self.assertTrue(is_election_available("vocero", today=date(2026, 10, 24)).disponible)
        self.assertFalse(is_election_available("vocero", today=date(2026, 10, 25)).disponible)
        self.assertFalse(is_election_available("vocero", today=date(2026, 2, 22)).disponible)

    def test_open_window_has_empty_message(self):
        self.assertEqual(is_election_available("carnaval", today=date(2026, 2, 4)).mensaje, "")

    def test_unknown_type_raises(self):
        with self.assertRaises(ValueError):
            is_election_available("reina", today=date(2026, 2, 4))

    @override_settings(ELECTION_AVAILABILITY_WINDOWS={"carnaval": {"month": 3, "start_day": 1, "end_day": 2}})
    def test_window_can_be_overridden(self):
        self.assertTrue(is_election_available("carnaval", today=date(2026, 3, 1)).disponible)
        self.assertFalse(is_election_available("carnaval", today=date(2026, 2, 4)).disponible)


class TallyFilterNormalizationTests(SimpleTestCase):
    def test_anio_seccion_decomposes(self):
        filters = normalize_tally_filters({"anioSeccion": " 5b "})
        self.assertEqual((filters.anio, filters.seccion), ("5", "B"))

    def test_short_anio_seccion_falls_back_to_parts(self):
        filters = normalize_tally_filters({"anioSeccion": "5", "anio": "4", "seccion": "c"})
        self.assertEqual((filters.anio, filters.seccion), ("4", "C"))

    def test_blank_and_all_are_ignored(self):
        filters = normalize_tally_filters({"anio": " ", "seccion": "ALL", "tipoEleccion": ""})
        self.assertEqual((filters.anio, filters.seccion, filters.tipo_eleccion), ("", "", ""))

    def test_split_anio_seccion(self):
        self.assertEqual(split_anio_seccion("3a"), ("3", "A"))
        self.assertEqual(split_anio_seccion("3"), ("", ""))


class EligibilityTests(VotingFixtureMixin, APITestCase):
    def setUp(self):
        self._create_fixture()

    def test_only_matching_year_section_and_type(self):
        candidates = Candidate.objects.all()
        eligible = filter_eligible_candidates(candidates, anio_seccion="5a", tipo_eleccion="estudiantiles")
        self.assertEqual({candidate.id for candidate in eligible}, {self.ana.id, self.beto.id, self.inactive.id})

    def test_no_candidates_for_section(self):
        eligible = filter_eligible_candidates(Candidate.objects.all(), anio_seccion="1Z", tipo_eleccion="estudiantiles")
        self.assertEqual(eligible, [])


class SeedVotingDemoCommandTests(APITestCase):
    def test_seed_creates_elections_candidates_and_students(self):
        from django.core.management import call_command

        out = StringIO()
        call_command("seed_voting_demo", "--years", "1,2", "--sections", "a", "--students-per-section", "2", stdout=out)

        self.assertEqual(Election.objects.count(), 3)
        self.assertEqual(Candidate.objects.filter(seccion="A").count(), 10)
        self.assertEqual(Student.objects.count(), 4)
        self.assertIn("estudiantes_nuevos=4", out.getvalue())

        call_command("seed_voting_demo", "--years", "1,2", "--sections", "a", "--students-per-section", "0", stdout=StringIO())
        self.assertEqual(Election.objects.count(), 3)
        self.assertEqual(Candidate.objects.count(), 10)


class PublicEndpointsWithAuthCookieTests(VotingFixtureMixin, APITestCase):
    """Voters share kiosks with the admin panel, so auth cookies may be present."""

    def setUp(self):
        self._create_fixture()
        Student.objects.create(cedula="30111222", nombre="Luisa", apellido="Pérez", anio_seccion="5A", direccion="Calle 1")
        self.admin = User.objects.create_user(username="admin_kiosk", password="pass1234", role=User.ROLE_ADMIN)
        self.client.cookies["portal_access"] = "expirado-o-basura"

    def _admin_client(self):
        client = APIClient(enforce_csrf_checks=True)
        client.cookies["portal_access"] = str(AccessToken.for_user(self.admin))
        return client

    def test_public_reads_ignore_stale_cookie(self):
        for url in (
            "/api/estudiantes/cedula/30111222/",
            "/api/estudiantes/anioSeccion-unicos/",
            "/api/candidatos/tipo/estudiantiles/?anioSeccion=5A",
            "/api/elecciones/disponibilidad/",
            "/api/elecciones/disponibilidad/carnaval/",
            "/api/estadisticas/",
            "/api/candidatos/",
            f"/api/candidatos/{self.ana.id}/",
            "/api/elecciones",
            f"/api/elecciones/{self.typed_election.id}/",
        ):
            response = self.client.get(url)
            self.assertEqual(response.status_code, 200, url)

    def test_vote_with_stale_cookie_is_recorded(self):
        response = self.client.post("/api/votaciones/", self._payload(), format="json")

        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(Vote.objects.count(), 1)
        self.assertIsNone(AuditLog.objects.get(event_type="VOTE_SUBMIT").actor)

    def test_vote_with_admin_cookie_skips_csrf_and_stays_anonymous(self):
        response = self._admin_client().post("/api/votaciones/", self._payload(), format="json")

        self.assertEqual(response.status_code, 201, response.data)
        entry = AuditLog.objects.get(event_type="VOTE_SUBMIT")
        self.assertIsNone(entry.actor)
        self.assertEqual(entry.actor_label, "30111222")

    def test_duplicate_with_stale_cookie_keeps_code(self):
        self._vote("30111222", self.ana)
        response = self.client.post("/api/votaciones/", self._payload(), format="json")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["code"], "duplicate_vote")

    def test_admin_cookie_still_identifies_admin_on_reads(self):
        response = self._admin_client().get("/api/candidatos/")
        self.assertEqual(response.status_code, 200)
        self.assertIn(self.inactive.id, [row["id"] for row in response.data])

        response = self.client.get("/api/candidatos/")
        self.assertNotIn(self.inactive.id, [row["id"] for row in response.data])

    def test_admin_writes_with_stale_cookie_are_unauthorized(self):
        response = self.client.post(
            "/api/candidatos/",
            {"nombre": "Gabi", "apellido": "Rey", "grado": "4", "seccion": "C", "tipoEleccion": "vocero"},
            format="json",
        )
        self.assertEqual(response.status_code, 401)

        response = self.client.get("/api/votaciones/")
        self.assertEqual(response.status_code, 401)

    def test_admin_cookie_writes_require_csrf(self):
        response = self._admin_client().post(
            "/api/candidatos/",
            {"nombre": "Gabi", "apellido": "Rey", "grado": "4", "seccion": "C", "tipoEleccion": "vocero"},
            format="json",
        )
        self.assertEqual(response.status_code, 403)
        self.assertFalse(Candidate.objects.filter(nombre="Gabi").exists())
