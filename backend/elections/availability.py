"""Calendar windows for each election category.

Availability is a pure function of the date; nothing is persisted. Windows can
be overridden per category through ``settings.ELECTION_AVAILABILITY_WINDOWS``::

    {"carnaval": {"month": 2, "start_day": 3, "end_day": 7}}

A category with no window (``estudiantiles``) is always open.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from django.conf import settings
from django.utils import timezone

from .models import ElectionType


MONTH_NAMES = {
    1: "enero",
    2: "febrero",
    3: "marzo",
    4: "abril",
    5: "mayo",
    6: "junio",
    7: "julio",
    8: "agosto",
    9: "septiembre",
    10: "octubre",
    11: "noviembre",
    12: "diciembre",
}


@dataclass(frozen=True)
class AvailabilityWindow:
    month: int
    start_day: int
    end_day: int

    def contains(self, day: date) -> bool:
        return day.month == self.month and self.start_day <= day.day <= self.end_day

    def describe(self) -> str:
        return f"del {self.start_day} al {self.end_day} de {MONTH_NAMES[self.month]}"


@dataclass(frozen=True)
class Availability:
    tipo_eleccion: str
    disponible: bool
    mensaje: str = ""

    def as_dict(self) -> dict:
        return {"tipoEleccion": self.tipo_eleccion, "disponible": self.disponible, "mensaje": self.mensaje}


DEFAULT_WINDOWS: dict[str, Optional[AvailabilityWindow]] = {
    ElectionType.ESTUDIANTILES: None,
    ElectionType.CARNAVAL: AvailabilityWindow(month=2, start_day=3, end_day=7),
    ElectionType.VOCERO: AvailabilityWindow(month=10, start_day=20, end_day=24),
}


def get_windows() -> dict[str, Optional[AvailabilityWindow]]:
    windows = {str(tipo): window for tipo, window in DEFAULT_WINDOWS.items()}
    overrides = getattr(settings, "ELECTION_AVAILABILITY_WINDOWS", None) or {}
    for tipo, raw in overrides.items():
        if tipo not in windows:
            continue
        windows[tipo] = (
            AvailabilityWindow(month=int(raw["month"]), start_day=int(raw["start_day"]), end_day=int(raw["end_day"]))
            if raw
            else None
        )
    return windows


def is_election_available(tipo_eleccion: str, today: Optional[date] = None) -> Availability:
    windows = get_windows()
    if tipo_eleccion not in windows:
        raise ValueError(f"Tipo de elección desconocido: {tipo_eleccion}")

    window = windows[tipo_eleccion]
    if window is None:
        return Availability(tipo_eleccion=tipo_eleccion, disponible=True)

    today = today or timezone.localdate()
    if window.contains(today):
        return Availability(tipo_eleccion=tipo_eleccion, disponible=True)

    label = ElectionType(tipo_eleccion).label
    return Availability(
        tipo_eleccion=tipo_eleccion,
        disponible=False,
        mensaje=f"La votación de {label} solo está disponible {window.describe()}.",
    )


def list_availability(today: Optional[date] = None) -> list[Availability]:
    return [is_election_available(str(tipo), today=today) for tipo in ElectionType.values]
