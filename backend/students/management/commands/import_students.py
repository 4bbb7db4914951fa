from __future__ import annotations

import csv
import io
import json
import re
import unicodedata
from pathlib import Path
from typing import Any
from urllib import parse as urllib_parse

import requests

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from students.models import Student


FIELD_ALIASES = {
    "cedula": ("cedula", "ci", "documento", "document_number"),
    "nombre": ("nombre", "nombres", "first_name"),
    "apellido": ("apellido", "apellidos", "last_name"),
    "anio_seccion": ("anio_seccion", "anioseccion", "ano_seccion", "grado_seccion"),
    "direccion": ("direccion", "address"),
}


def normalize_header(value: Any) -> str:
    if value is None:
        return ""
    text = unicodedata.normalize("NFKD", str(value).strip()).encode("ASCII", "ignore").decode("utf-8")
    text = re.sub(r"[^a-z0-9]+", "_", text.lower())
    return text.strip("_")


def normalize_record(record: dict[str, Any]) -> dict[str, str]:
    row = {normalize_header(k): v for k, v in record.items() if k is not None}
    out: dict[str, str] = {}
    for field, aliases in FIELD_ALIASES.items():
        value = next((row[key] for key in aliases if row.get(key) not in (None, "")), "")
        out[field] = str(value).strip()
    out["anio_seccion"] = out["anio_seccion"].upper()
    return out


class Command(BaseCommand):
    help = "Importa el padrón de estudiantes desde un archivo JSON/CSV o una URL HTTP (dry-run por defecto)."

    def add_arguments(self, parser):
        parser.add_argument("--source-file", type=str, default="", help="Archivo .json (lista de objetos) o .csv con encabezados.")
        parser.add_argument("--source-url", type=str, default="", help="URL HTTP que retorna una lista JSON de estudiantes.")
        parser.add_argument("--auth-token", type=str, default="", help="Token Bearer para consumir source-url.")
        parser.add_argument("--timeout-seconds", type=int, default=30, help="Timeout HTTP para source-url en segundos.")
        parser.add_argument(
            "--apply",
            action="store_true",
            help="Aplica cambios en base de datos. Si no se indica, se ejecuta en dry-run.",
        )

    def handle(self, *args, **options):
        source_file_value = str(options["source_file"]).strip()
        source_url = str(options["source_url"]).strip()
        apply_changes = bool(options.get("apply"))

        if bool(source_file_value) == bool(source_url):
            raise CommandError("Debes indicar exactamente una fuente: --source-file o --source-url.")

        if source_url:
            payload = self._load_from_url(
                source_url=source_url,
                auth_token=str(options["auth_token"]).strip(),
                timeout_seconds=max(1, int(options.get("timeout_seconds") or 30)),
            )
        else:
            source_file = Path(source_file_value)
            if not source_file.exists() or not source_file.is_file():
                raise CommandError(f"No se encontró el archivo fuente: {source_file}")
            payload = self._load_from_file(source_file)

        created_count = 0
        updated_count = 0
        unchanged_count = 0
        errors: list[str] = []

        with transaction.atomic():
            existing = {student.cedula: student for student in Student.objects.all()}
            seen: set[str] = set()

            for index, record in enumerate(payload, start=1):
                if not isinstance(record, dict):
                    errors.append(f"registro {index}: no es un objeto")
                    continue

                normalized = normalize_record(record)
                missing = [field for field, value in normalized.items() if not value]
                if missing:
                    errors.append(f"registro {index}: faltan campos {', '.join(missing)}")
                    continue

                cedula = normalized["cedula"]
                if cedula in seen:
                    errors.append(f"registro {index}: cédula {cedula} repetida en la fuente")
                    continue
                seen.add(cedula)

                current = existing.get(cedula)
                if current is None:
                    created_count += 1
                    if apply_changes:
                        Student.objects.create(**normalized)
                    continue

                before = {field: getattr(current, field) for field in normalized}
                if before == normalized:
                    unchanged_count += 1
                    continue

                updated_count += 1
                if apply_changes:
                    for field, value in normalized.items():
                        setattr(current, field, value)
                    current.save()

        mode = "apply" if apply_changes else "dry-run"
        self.stdout.write(self.style.SUCCESS(f"Importación finalizada | modo={mode}"))
        self.stdout.write(
            "Resumen: "
            f"received={len(payload)} created={created_count} updated={updated_count} "
            f"unchanged={unchanged_count} errors={len(errors)}"
        )
        for message in errors:
            self.stderr.write(message)

    @staticmethod
    def _load_from_file(source_file: Path) -> list[Any]:
        raw = source_file.read_bytes()
        try:
            text = raw.decode("utf-8-sig")
        except UnicodeDecodeError:
            text = raw.decode("latin-1")

        if source_file.suffix.lower() == ".csv":
            return list(csv.DictReader(io.StringIO(text)))

        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise CommandError(f"JSON inválido en archivo fuente: {exc}") from exc
        if not isinstance(payload, list):
            raise CommandError("El archivo de estudiantes debe contener una lista JSON de registros.")
        return payload

    @staticmethod
    def _load_from_url(*, source_url: str, auth_token: str, timeout_seconds: int) -> list[Any]:
        parsed_url = urllib_parse.urlparse(source_url)
        if parsed_url.scheme not in {"http", "https"} or not parsed_url.netloc:
            raise CommandError("source-url inválida. Solo se permiten URLs HTTP/HTTPS absolutas.")

        headers = {"Accept": "application/json"}
        if auth_token:
            headers["Authorization"] = f"Bearer {auth_token}"

        try:
            response = requests.get(source_url, headers=headers, timeout=timeout_seconds)
            response.raise_for_status()
            payload = response.json()
        except requests.HTTPError as exc:
            status_code = exc.response.status_code if exc.response is not None else "desconocido"
            raise CommandError(f"Error HTTP consultando source-url ({status_code})") from exc
        except ValueError as exc:
            raise CommandError(f"JSON inválido recibido desde source-url: {exc}") from exc
        except requests.RequestException as exc:
            raise CommandError(f"No fue posible conectar con source-url: {exc}") from exc

        if not isinstance(payload, list):
            raise CommandError("La source-url debe retornar una lista JSON de registros.")
        return payload
