"""HTTP client for the public voting API, used by the voting workflow."""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol
from urllib.parse import quote

import requests


logger = logging.getLogger(__name__)

NETWORK_ERROR_MESSAGE = "No fue posible conectar con el servidor de votación."


class VotingGatewayError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


class StudentNotFoundError(VotingGatewayError):
    pass


class VotingGateway(Protocol):
    def lookup_student(self, cedula: str) -> dict[str, Any]: ...

    def list_candidates(self, tipo_eleccion: str, anio_seccion: Optional[str] = None) -> list[dict[str, Any]]: ...

    def get_availability(self, tipo_eleccion: str) -> dict[str, Any]: ...

    def submit_vote(self, payload: dict[str, Any]) -> dict[str, Any]: ...


def extract_error_message(body: Any) -> Optional[str]:
    """First human readable message of a DRF error body ({"detail": ...} or a field map)."""
    if isinstance(body, str):
        return body or None
    if isinstance(body, list):
        for item in body:
            message = extract_error_message(item)
            if message:
                return message
        return None
    if isinstance(body, dict):
        if "detail" in body:
            return extract_error_message(body["detail"])
        for key, value in body.items():
            if key == "code":
                continue
            message = extract_error_message(value)
            if message:
                return message
    return None


class HttpVotingGateway:
    def __init__(self, base_url: str, *, session: Optional[requests.Session] = None, timeout: float = 10):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.setdefault("Accept", "application/json")
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.warning("voting_gateway.network_error", extra={"url": url, "error": str(exc)})
            raise VotingGatewayError(NETWORK_ERROR_MESSAGE) from exc

        try:
            body = response.json() if response.content else None
        except ValueError:
            body = None

        if response.status_code >= 400:
            code = body.get("code") if isinstance(body, dict) else None
            message = extract_error_message(body) or ""
            raise VotingGatewayError(message, status_code=response.status_code, code=code)
        return body

    def lookup_student(self, cedula: str) -> dict[str, Any]:
        try:
            return self._request("GET", f"/api/estudiantes/cedula/{quote(cedula.strip(), safe='')}/")
        except VotingGatewayError as exc:
            if exc.status_code == 404:
                raise StudentNotFoundError(exc.message, status_code=404) from exc
            raise

    def list_candidates(self, tipo_eleccion: str, anio_seccion: Optional[str] = None) -> list[dict[str, Any]]:
        params = {"anioSeccion": anio_seccion} if anio_seccion else None
        return self._request("GET", f"/api/candidatos/tipo/{tipo_eleccion}/", params=params) or []

    def get_availability(self, tipo_eleccion: str) -> dict[str, Any]:
        return self._request("GET", f"/api/elecciones/disponibilidad/{tipo_eleccion}/")

    def submit_vote(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", "/api/votaciones/", json=payload)
