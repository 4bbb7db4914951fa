import dataclasses
import json
from datetime import date
from unittest.mock import patch
from urllib.parse import urlparse

from django.core.cache import cache
from django.test import SimpleTestCase
from rest_framework.test import APIClient, APITestCase

from students.models import Student

from elections.clients import HttpVotingGateway, StudentNotFoundError, VotingGatewayError
from elections.models import Candidate, Vote
from elections.workflow import (
    MSG_CEDULA_REQUIRED,
    MSG_MISSING_FIELDS,
    MSG_NO_CANDIDATES,
    MSG_SELECT_CANDIDATE,
    MSG_STUDENT_NOT_FOUND,
    MSG_SUBMIT_FALLBACK,
    InvalidTransition,
    Step,
    VotingWorkflow,
    WorkflowState,
)


class _ApiClientResponse:
    def __init__(self, response):
        self.status_code = response.status_code
        self.content = response.content

    def json(self):
        return json.loads(self.content)


class _ApiClientSession:
    """Routes HttpVotingGateway requests into the Django test client."""

    def __init__(self, client: APIClient):
        self.client = client
        self.headers = {}

    def request(self, method, url, timeout=None, params=None, json=None):
        path = urlparse(url).path
        if method == "GET":
            return _ApiClientResponse(self.client.get(path, params or {}))
        return _ApiClientResponse(self.client.post(path, json, format="json"))


class FakeGateway:
    def __init__(self, students=None, candidates=None, availability=None, submit_error=None):
        self.students = students or {}
        self.candidates = candidates or []
        self.availability = availability or {}
        self.submit_error = submit_error
        self.submitted = []

    def lookup_student(self, cedula):
        if cedula not in self.students:
            raise StudentNotFoundError("Estudiante no encontrado", status_code=404)
        return self.students[cedula]

    def list_candidates(self, tipo_eleccion, anio_seccion=None):
        return [row for row in self.candidates if row["tipoEleccion"] == tipo_eleccion]

    def get_availability(self, tipo_eleccion):
        return self.availability.get(tipo_eleccion, {"tipoEleccion": tipo_eleccion, "disponible": True, "mensaje": ""})

    def submit_vote(self, payload):
        if self.submit_error is not None:
            raise self.submit_error
        self.submitted.append(payload)
        return {"id": len(self.submitted), **payload}


STUDENT = {"id": 1, "cedula": "30111222", "nombre": "Luisa", "apellido": "Pérez", "anioSeccion": "5A", "direccion": "Calle 1"}
CANDIDATES = [
    {"id": 10, "nombre": "Ana", "apellido": "Soto", "grado": "5", "seccion": "A", "tipoEleccion": "estudiantiles", "activo": True},
    {"id": 11, "nombre": "Caro", "apellido": "Paz", "grado": "3", "seccion": "B", "tipoEleccion": "estudiantiles", "activo": True},
    {"id": 12, "nombre": "Dani", "apellido": "Ruiz", "grado": "5", "seccion": "A", "tipoEleccion": "vocero", "activo": True},
]


class VotingWorkflowTransitionTests(SimpleTestCase):
    def setUp(self):
        self.gateway = FakeGateway(students={"30111222": STUDENT}, candidates=CANDIDATES)
        self.workflow = VotingWorkflow(self.gateway)

    def _at_confirm(self):
        state = self.workflow.select_election(self.workflow.start(), "estudiantiles")
        return self.workflow.identify(state, "30111222")

    def _at_choose(self):
        return self.workflow.confirm(self._at_confirm())

    def test_transition_from_wrong_step_raises(self):
        with self.assertRaises(InvalidTransition):
            self.workflow.identify(self.workflow.start(), "30111222")
        with self.assertRaises(InvalidTransition):
            self.workflow.submit(self._at_confirm())

    def test_unknown_election_type_stays_on_selection(self):
        state = self.workflow.select_election(self.workflow.start(), "reina")
        self.assertEqual(state.step, Step.SELECT_ELECTION)
        self.assertTrue(state.error)

    def test_closed_election_stays_on_selection_with_message(self):
        self.gateway.availability["carnaval"] = {"tipoEleccion": "carnaval", "disponible": False, "mensaje": "Cerrada"}
        state = self.workflow.select_election(self.workflow.start(), "carnaval")
        self.assertEqual(state.step, Step.SELECT_ELECTION)
        self.assertEqual(state.error, "Cerrada")

    def test_blank_cedula_is_rejected(self):
        state = self.workflow.select_election(self.workflow.start(), "estudiantiles")
        state = self.workflow.identify(state, "   ")
        self.assertEqual(state.step, Step.IDENTIFY_BY_CEDULA)
        self.assertEqual(state.error, MSG_CEDULA_REQUIRED)

    def test_unknown_cedula_does_not_populate_voter(self):
        state = self.workflow.select_election(self.workflow.start(), "estudiantiles")
        state = self.workflow.identify(state, "99999999")
        self.assertEqual(state.step, Step.IDENTIFY_BY_CEDULA)
        self.assertEqual(state.error, MSG_STUDENT_NOT_FOUND)
        self.assertIsNone(state.voter)

    def test_identify_prefills_voter_with_student_role(self):
        state = self._at_confirm()
        self.assertEqual(state.step, Step.CONFIRM_DATA)
        self.assertEqual(state.voter.nombre, "Luisa")
        self.assertEqual(state.voter.anio_seccion, "5A")
        self.assertEqual(state.voter.rol, "Estudiante")

    def test_confirm_keeps_only_eligible_candidates(self):
        state = self._at_choose()
        self.assertEqual(state.step, Step.CHOOSE_CANDIDATE)
        self.assertEqual([candidate.id for candidate in state.candidates], [10])

    def test_confirm_applies_edits(self):
        state = self.workflow.confirm(self._at_confirm(), anio_seccion="3b", direccion="Calle 9")
        self.assertEqual(state.voter.anio_seccion, "3b")
        self.assertEqual(state.voter.direccion, "Calle 9")
        self.assertEqual([candidate.id for candidate in state.candidates], [11])

    def test_confirm_cannot_edit_cedula(self):
        with self.assertRaises(ValueError):
            self.workflow.confirm(self._at_confirm(), cedula="1")

    def test_confirm_with_blank_field_stays(self):
        state = self.workflow.confirm(self._at_confirm(), nombre=" ")
        self.assertEqual(state.step, Step.CONFIRM_DATA)
        self.assertEqual(state.error, MSG_MISSING_FIELDS)

    def test_choose_rejects_candidate_outside_list(self):
        state = self.workflow.choose(self._at_choose(), 11)
        self.assertIsNone(state.candidato_id)
        self.assertEqual(state.error, MSG_SELECT_CANDIDATE)

    def test_submit_without_selection(self):
        state = self.workflow.submit(self._at_choose())
        self.assertEqual(state.step, Step.CHOOSE_CANDIDATE)
        self.assertEqual(state.error, MSG_SELECT_CANDIDATE)
        self.assertEqual(self.gateway.submitted, [])

    def test_submit_blocked_without_eligible_candidates(self):
        state = self.workflow.confirm(self._at_confirm(), anio_seccion="1Z")
        self.assertEqual(state.candidates, ())
        state = self.workflow.submit(state)
        self.assertEqual(state.error, MSG_NO_CANDIDATES)
        self.assertEqual(self.gateway.submitted, [])

    def test_submit_success(self):
        state = self.workflow.choose(self._at_choose(), 10)
        state = self.workflow.submit(state, eleccion_id=3)
        self.assertEqual(state.step, Step.SUBMITTED)
        self.assertEqual(state.vote["candidatoId"], 10)
        self.assertEqual(self.gateway.submitted[0]["eleccionId"], 3)
        self.assertEqual(self.gateway.submitted[0]["anioSeccion"], "5A")

    def test_submit_failure_surfaces_server_message(self):
        self.gateway.submit_error = VotingGatewayError("Ya votó", status_code=400, code="duplicate_vote")
        state = self.workflow.submit(self.workflow.choose(self._at_choose(), 10))
        self.assertEqual(state.step, Step.CHOOSE_CANDIDATE)
        self.assertEqual(state.error, "Ya votó")

    def test_submit_failure_without_message_uses_fallback(self):
        self.gateway.submit_error = VotingGatewayError("", status_code=502)
        state = self.workflow.submit(self.workflow.choose(self._at_choose(), 10))
        self.assertEqual(state.error, MSG_SUBMIT_FALLBACK)

    def test_back_and_reset(self):
        choose = self._at_choose()
        confirm = self.workflow.back(choose)
        self.assertEqual(confirm.step, Step.CONFIRM_DATA)
        self.assertEqual(confirm.candidates, ())
        identify = self.workflow.back(confirm)
        self.assertEqual(identify.step, Step.IDENTIFY_BY_CEDULA)
        self.assertIsNone(identify.voter)
        self.assertEqual(self.workflow.back(identify), WorkflowState())
        with self.assertRaises(InvalidTransition):
            self.workflow.back(WorkflowState())
        self.assertEqual(self.workflow.reset(), WorkflowState())

    def test_states_are_immutable_values(self):
        start = self.workflow.start()
        self.workflow.select_election(start, "estudiantiles")
        self.assertEqual(start.step, Step.SELECT_ELECTION)
        with self.assertRaises(dataclasses.FrozenInstanceError):
            start.step = Step.SUBMITTED


class VotingWorkflowApiTests(APITestCase):
    def setUp(self):
        cache.clear()
        Student.objects.create(cedula="30111222", nombre="Luisa", apellido="Pérez", anio_seccion="5A", direccion="Calle 1")
        Student.objects.create(cedula="30111333", nombre="Tomás", apellido="Rey", anio_seccion="1Z", direccion="Calle 2")
        self.ana = Candidate.objects.create(nombre="Ana", apellido="Soto", grado="5", seccion="A", tipo_eleccion="estudiantiles")
        Candidate.objects.create(nombre="Caro", apellido="Paz", grado="3", seccion="B", tipo_eleccion="estudiantiles")
        Candidate.objects.create(nombre="Emma", apellido="Gil", grado="5", seccion="A", tipo_eleccion="carnaval")
        self.gateway = HttpVotingGateway("http://testserver", session=_ApiClientSession(APIClient()))
        self.workflow = VotingWorkflow(self.gateway)

    def _vote(self, cedula):
        state = self.workflow.select_election(self.workflow.start(), "estudiantiles")
        state = self.workflow.identify(state, cedula)
        state = self.workflow.confirm(state)
        state = self.workflow.choose(state, self.ana.id)
        return self.workflow.submit(state)

    def test_full_flow_records_vote(self):
        state = self._vote("30111222")
        self.assertEqual(state.step, Step.SUBMITTED, state.error)
        self.assertEqual(state.vote["candidatoId"], self.ana.id)
        vote = Vote.objects.get()
        self.assertEqual(vote.rol, "Estudiante")
        self.assertEqual(vote.anio_seccion, "5A")

    def test_second_flow_reports_duplicate(self):
        self.assertEqual(self._vote("30111222").step, Step.SUBMITTED)
        state = self._vote("30111222")
        self.assertEqual(state.step, Step.CHOOSE_CANDIDATE)
        self.assertEqual(state.error, "Este estudiante ya ha votado en esta elección.")
        self.assertEqual(Vote.objects.count(), 1)

    def test_unknown_cedula(self):
        state = self.workflow.select_election(self.workflow.start(), "estudiantiles")
        state = self.workflow.identify(state, "00000000")
        self.assertEqual(state.error, MSG_STUDENT_NOT_FOUND)
        self.assertIsNone(state.voter)

    def test_student_without_candidates_never_reaches_ledger(self):
        state = self.workflow.select_election(self.workflow.start(), "estudiantiles")
        state = self.workflow.confirm(self.workflow.identify(state, "30111333"))
        with patch.object(self.gateway, "submit_vote") as submit_mock:
            state = self.workflow.submit(state)
        submit_mock.assert_not_called()
        self.assertEqual(state.error, MSG_NO_CANDIDATES)
        self.assertEqual(Vote.objects.count(), 0)

    def test_closed_category_cannot_be_selected(self):
        with patch("elections.availability.timezone.localdate", return_value=date(2026, 3, 1)):
            state = self.workflow.select_election(self.workflow.start(), "carnaval")
        self.assertEqual(state.step, Step.SELECT_ELECTION)
        self.assertTrue(state.error)

    def test_full_flow_with_stale_admin_cookie(self):
        client = APIClient()
        client.cookies["portal_access"] = "expirado-o-basura"
        self.workflow = VotingWorkflow(HttpVotingGateway("http://testserver", session=_ApiClientSession(client)))

        state = self._vote("30111222")
        self.assertEqual(state.step, Step.SUBMITTED, state.error)
        self.assertEqual(Vote.objects.count(), 1)
