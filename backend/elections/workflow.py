"""Voting workflow as an explicit finite-state machine.

Every transition takes a ``WorkflowState`` and returns a new one; states are
immutable, so a caller (kiosk, CLI, test) can keep, replay or discard them
freely. Failures leave the state on its last stable step with ``error`` set.
Calling a transition from the wrong step raises ``InvalidTransition``.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .clients import StudentNotFoundError, VotingGateway, VotingGatewayError
from .models import ElectionType
from .services import filter_eligible_candidates


logger = logging.getLogger(__name__)

VOTER_ROLE = "Estudiante"

MSG_CEDULA_REQUIRED = "Por favor ingresa tu cédula"
MSG_STUDENT_NOT_FOUND = "La cédula ingresada no corresponde a ningún estudiante registrado."
MSG_UNKNOWN_ELECTION = "Selecciona un tipo de elección válido."
MSG_ELECTION_CLOSED = "Esta votación no está disponible en este momento."
MSG_MISSING_FIELDS = "Por favor completa todos los campos"
MSG_NO_CANDIDATES = "No hay candidatos disponibles para tu año y sección."
MSG_SELECT_CANDIDATE = "Por favor selecciona un candidato"
MSG_SUBMIT_FALLBACK = "Error al registrar el voto"
MSG_REQUEST_FALLBACK = "Ocurrió un error, intenta nuevamente."

EDITABLE_FIELDS = ("nombre", "apellido", "rol", "anio_seccion", "direccion")


class Step(str, Enum):
    SELECT_ELECTION = "select_election"
    IDENTIFY_BY_CEDULA = "identify_by_cedula"
    CONFIRM_DATA = "confirm_data"
    CHOOSE_CANDIDATE = "choose_candidate"
    SUBMITTED = "submitted"


class InvalidTransition(Exception):
    def __init__(self, transition: str, step: Step):
        super().__init__(f"'{transition}' no es válido en el paso '{step.value}'")
        self.transition = transition
        self.step = step


@dataclass(frozen=True)
class VoterData:
    cedula: str
    nombre: str = ""
    apellido: str = ""
    rol: str = VOTER_ROLE
    anio_seccion: str = ""
    direccion: str = ""

    @classmethod
    def from_student(cls, payload: dict[str, Any]) -> "VoterData":
        return cls(
            cedula=str(payload.get("cedula") or ""),
            nombre=str(payload.get("nombre") or ""),
            apellido=str(payload.get("apellido") or ""),
            anio_seccion=str(payload.get("anioSeccion") or ""),
            direccion=str(payload.get("direccion") or ""),
        )


@dataclass(frozen=True)
class CandidateOption:
    id: int
    nombre: str
    apellido: str
    grado: str
    seccion: str
    tipo_eleccion: str

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "CandidateOption":
        return cls(
            id=int(payload["id"]),
            nombre=str(payload.get("nombre") or ""),
            apellido=str(payload.get("apellido") or ""),
            grado=str(payload.get("grado") or ""),
            seccion=str(payload.get("seccion") or ""),
            tipo_eleccion=str(payload.get("tipoEleccion") or ""),
        )


@dataclass(frozen=True)
class WorkflowState:
    step: Step = Step.SELECT_ELECTION
    tipo_eleccion: str = ""
    voter: Optional[VoterData] = None
    candidates: tuple[CandidateOption, ...] = ()
    candidato_id: Optional[int] = None
    error: str = ""
    vote: Optional[dict[str, Any]] = field(default=None, compare=False)

    def with_error(self, message: str) -> "WorkflowState":
        return dataclasses.replace(self, error=message)


class VotingWorkflow:
    def __init__(self, gateway: VotingGateway):
        self.gateway = gateway

    @staticmethod
    def _require(state: WorkflowState, step: Step, transition: str) -> None:
        if state.step != step:
            raise InvalidTransition(transition, state.step)

    def start(self) -> WorkflowState:
        return WorkflowState()

    def reset(self) -> WorkflowState:
        return self.start()

    def select_election(self, state: WorkflowState, tipo_eleccion: str) -> WorkflowState:
        self._require(state, Step.SELECT_ELECTION, "select_election")
        if tipo_eleccion not in ElectionType.values:
            return state.with_error(MSG_UNKNOWN_ELECTION)

        try:
            availability = self.gateway.get_availability(tipo_eleccion)
        except VotingGatewayError as exc:
            return state.with_error(exc.message or MSG_REQUEST_FALLBACK)

        if not availability.get("disponible"):
            return state.with_error(availability.get("mensaje") or MSG_ELECTION_CLOSED)

        return WorkflowState(step=Step.IDENTIFY_BY_CEDULA, tipo_eleccion=tipo_eleccion)

    def identify(self, state: WorkflowState, cedula: str) -> WorkflowState:
        self._require(state, Step.IDENTIFY_BY_CEDULA, "identify")
        cedula = (cedula or "").strip()
        if not cedula:
            return state.with_error(MSG_CEDULA_REQUIRED)

        try:
            student = self.gateway.lookup_student(cedula)
        except StudentNotFoundError:
            return dataclasses.replace(state, voter=None, error=MSG_STUDENT_NOT_FOUND)
        except VotingGatewayError as exc:
            return dataclasses.replace(state, voter=None, error=exc.message or MSG_REQUEST_FALLBACK)

        voter = dataclasses.replace(VoterData.from_student(student), cedula=cedula, rol=VOTER_ROLE)
        return dataclasses.replace(state, step=Step.CONFIRM_DATA, voter=voter, error="")

    def confirm(self, state: WorkflowState, **edits: str) -> WorkflowState:
        """Apply the voter's corrections, then load the candidates they may vote for."""
        self._require(state, Step.CONFIRM_DATA, "confirm")
        not_editable = sorted(set(edits) - set(EDITABLE_FIELDS))
        if not_editable:
            raise ValueError(f"Campos no editables: {', '.join(not_editable)}")

        voter = dataclasses.replace(state.voter, **{key: str(value).strip() for key, value in edits.items()})
        if not all(getattr(voter, name) for name in ("cedula",) + EDITABLE_FIELDS):
            return dataclasses.replace(state, voter=voter, error=MSG_MISSING_FIELDS)

        try:
            payload = self.gateway.list_candidates(state.tipo_eleccion, voter.anio_seccion)
        except VotingGatewayError as exc:
            return dataclasses.replace(state, voter=voter, error=exc.message or MSG_REQUEST_FALLBACK)

        options = [CandidateOption.from_payload(item) for item in payload]
        eligible = filter_eligible_candidates(
            options,
            anio_seccion=voter.anio_seccion,
            tipo_eleccion=state.tipo_eleccion,
        )
        return dataclasses.replace(
            state,
            step=Step.CHOOSE_CANDIDATE,
            voter=voter,
            candidates=tuple(eligible),
            candidato_id=None,
            error="",
        )

    def choose(self, state: WorkflowState, candidato_id: Optional[int]) -> WorkflowState:
        self._require(state, Step.CHOOSE_CANDIDATE, "choose")
        if candidato_id is None or candidato_id not in {candidate.id for candidate in state.candidates}:
            return dataclasses.replace(state, candidato_id=None, error=MSG_SELECT_CANDIDATE)
        return dataclasses.replace(state, candidato_id=candidato_id, error="")

    def submit(self, state: WorkflowState, eleccion_id: Optional[int] = None) -> WorkflowState:
        self._require(state, Step.CHOOSE_CANDIDATE, "submit")
        if not state.candidates:
            return state.with_error(MSG_NO_CANDIDATES)
        if state.candidato_id is None:
            return state.with_error(MSG_SELECT_CANDIDATE)

        voter = state.voter
        payload: dict[str, Any] = {
            "cedula": voter.cedula,
            "nombre": voter.nombre,
            "apellido": voter.apellido,
            "rol": voter.rol,
            "anioSeccion": voter.anio_seccion,
            "direccion": voter.direccion,
            "candidatoId": state.candidato_id,
            "tipoEleccion": state.tipo_eleccion,
        }
        if eleccion_id is not None:
            payload["eleccionId"] = eleccion_id

        try:
            vote = self.gateway.submit_vote(payload)
        except VotingGatewayError as exc:
            logger.info("workflow.submit_failed", extra={"code": exc.code, "status_code": exc.status_code})
            return state.with_error(exc.message or MSG_SUBMIT_FALLBACK)

        return dataclasses.replace(state, step=Step.SUBMITTED, vote=vote, error="")

    def back(self, state: WorkflowState) -> WorkflowState:
        if state.step == Step.IDENTIFY_BY_CEDULA:
            return self.start()
        if state.step == Step.CONFIRM_DATA:
            return WorkflowState(step=Step.IDENTIFY_BY_CEDULA, tipo_eleccion=state.tipo_eleccion)
        if state.step == Step.CHOOSE_CANDIDATE:
            return dataclasses.replace(state, step=Step.CONFIRM_DATA, candidates=(), candidato_id=None, error="")
        raise InvalidTransition("back", state.step)
