from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Count, Q
from rest_framework import serializers

from .availability import is_election_available
from .exceptions import DuplicateVoteError
from .models import Candidate, Election, Vote


logger = logging.getLogger(__name__)

ALL_SENTINEL = "all"


def split_anio_seccion(anio_seccion: str) -> tuple[str, str]:
    """'5a' -> ('5', 'A'). Values shorter than two characters give ('', '')."""
    value = (anio_seccion or "").strip()
    if len(value) < 2:
        return "", ""
    return value[0], value[1].upper()


def is_candidate_eligible(candidate: Candidate, *, anio: str, seccion: str, tipo_eleccion: str) -> bool:
    return (
        candidate.grado == anio
        and (candidate.seccion or "").upper() == (seccion or "").upper()
        and candidate.tipo_eleccion == tipo_eleccion
    )


def filter_eligible_candidates(candidates: Iterable, *, anio_seccion: str, tipo_eleccion: str) -> list:
    anio, seccion = split_anio_seccion(anio_seccion)
    if not anio:
        return []
    return [
        candidate
        for candidate in candidates
        if is_candidate_eligible(candidate, anio=anio, seccion=seccion, tipo_eleccion=tipo_eleccion)
    ]


def _clean_filter(value: Any) -> str:
    text = str(value or "").strip()
    if not text or text.lower() == ALL_SENTINEL:
        return ""
    return text


@dataclass(frozen=True)
class TallyFilters:
    anio: str = ""
    seccion: str = ""
    tipo_eleccion: str = ""

    def as_dict(self) -> dict:
        return {
            "anio": self.anio or None,
            "seccion": self.seccion or None,
            "tipoEleccion": self.tipo_eleccion or None,
        }


def normalize_tally_filters(params: Mapping[str, Any]) -> TallyFilters:
    """Build filters from query params; a usable ``anioSeccion`` wins over ``anio``/``seccion``."""
    anio_seccion = _clean_filter(params.get("anioSeccion"))
    if len(anio_seccion) >= 2:
        anio, seccion = split_anio_seccion(anio_seccion)
    else:
        anio = _clean_filter(params.get("anio"))
        seccion = _clean_filter(params.get("seccion")).upper()
    return TallyFilters(anio=anio, seccion=seccion, tipo_eleccion=_clean_filter(params.get("tipoEleccion")))


def _filtered_votes(filters: TallyFilters):
    q = Q()
    if filters.anio:
        q &= Q(candidato__grado=filters.anio)
    if filters.seccion:
        q &= Q(candidato__seccion=filters.seccion)
    if filters.tipo_eleccion:
        q &= Q(tipo_eleccion=filters.tipo_eleccion)
    return Vote.objects.filter(q)


def build_tally(filters: TallyFilters) -> list[dict]:
    rows = (
        _filtered_votes(filters)
        .values(
            "candidato_id",
            "candidato__nombre",
            "candidato__apellido",
            "candidato__grado",
            "candidato__seccion",
            "tipo_eleccion",
            "eleccion_id",
            "eleccion__nombre",
        )
        .annotate(count=Count("id"))
        .order_by("-count", "candidato_id", "eleccion_id")
    )
    return [
        {
            "candidatoId": row["candidato_id"],
            "nombre": row["candidato__nombre"],
            "apellido": row["candidato__apellido"],
            "grado": row["candidato__grado"],
            "seccion": row["candidato__seccion"],
            "tipoEleccion": row["tipo_eleccion"],
            "eleccionId": row["eleccion_id"],
            "eleccionNombre": row["eleccion__nombre"],
            "count": row["count"],
        }
        for row in rows
    ]


def build_statistics(filters: TallyFilters) -> dict:
    votes = _filtered_votes(filters)
    by_type = votes.values("tipo_eleccion").annotate(count=Count("id")).order_by("tipo_eleccion")
    return {
        "votosPorCandidato": build_tally(filters),
        "totalVotos": votes.count(),
        "votosPorTipo": [{"tipoEleccion": row["tipo_eleccion"], "count": row["count"]} for row in by_type],
        "filtros": filters.as_dict(),
    }


def has_voted(cedula: str, tipo_eleccion: str) -> bool:
    return Vote.objects.filter(cedula=cedula, tipo_eleccion=tipo_eleccion).exists()


def submit_vote(
    *,
    cedula: str,
    nombre: str,
    apellido: str,
    rol: str,
    anio_seccion: str,
    direccion: str,
    candidato_id: int,
    tipo_eleccion: str,
    eleccion_id: Optional[int] = None,
) -> Vote:
    """Record one vote, enforcing one vote per (cedula, tipo_eleccion).

    Raises ``DuplicateVoteError`` when the voter already voted in the category
    and ``serializers.ValidationError`` for invalid references.
    """
    cedula = (cedula or "").strip()
    anio, seccion = split_anio_seccion(anio_seccion)

    with transaction.atomic():
        if has_voted(cedula, tipo_eleccion):
            logger.warning("vote.duplicate", extra={"tipo_eleccion": tipo_eleccion})
            raise DuplicateVoteError()

        candidate = Candidate.objects.filter(id=candidato_id).first()
        if candidate is None:
            raise serializers.ValidationError({"candidatoId": "El candidato seleccionado no existe."})
        if not candidate.activo:
            raise serializers.ValidationError({"candidatoId": "El candidato seleccionado no está activo."})
        if candidate.tipo_eleccion != tipo_eleccion:
            raise serializers.ValidationError(
                {"candidatoId": "El candidato no pertenece a este tipo de elección."}
            )
        if not is_candidate_eligible(candidate, anio=anio, seccion=seccion, tipo_eleccion=tipo_eleccion):
            raise serializers.ValidationError(
                {"candidatoId": "El candidato no corresponde a tu año y sección."}
            )

        election = None
        if eleccion_id is not None:
            election = Election.objects.filter(id=eleccion_id).first()
            if election is None:
                raise serializers.ValidationError({"eleccionId": "La elección indicada no existe."})
            if election.tipo_eleccion and election.tipo_eleccion != tipo_eleccion:
                raise serializers.ValidationError(
                    {"eleccionId": "La elección indicada no corresponde a este tipo de elección."}
                )

        if getattr(settings, "ELECTIONS_ENFORCE_AVAILABILITY", False):
            availability = is_election_available(tipo_eleccion)
            if not availability.disponible:
                raise serializers.ValidationError({"tipoEleccion": availability.mensaje})

        try:
            with transaction.atomic():
                vote = Vote.objects.create(
                    cedula=cedula,
                    nombre=nombre.strip(),
                    apellido=apellido.strip(),
                    rol=rol.strip(),
                    anio_seccion=(anio_seccion or "").strip().upper(),
                    direccion=direccion.strip(),
                    candidato=candidate,
                    eleccion=election,
                    tipo_eleccion=tipo_eleccion,
                )
        except IntegrityError:
            logger.warning("vote.duplicate_race", extra={"tipo_eleccion": tipo_eleccion})
            raise DuplicateVoteError()

    logger.info(
        "vote.submitted",
        extra={"vote_id": vote.id, "candidato_id": candidate.id, "tipo_eleccion": tipo_eleccion},
    )
    return vote
