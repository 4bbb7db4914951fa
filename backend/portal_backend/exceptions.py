from __future__ import annotations

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError
from django.db.models import ProtectedError
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.serializers import as_serializer_error
from rest_framework.views import exception_handler


logger = logging.getLogger(__name__)

STORE_ERROR_DETAIL = "Ocurrió un error al acceder a los datos. Intenta nuevamente más tarde."


def portal_exception_handler(exc, context):
    """DRF handler plus model validation (400), protected deletes (409) and store failures (500)."""

    if isinstance(exc, DjangoValidationError):
        exc = ValidationError(detail=as_serializer_error(exc))

    response = exception_handler(exc, context)
    if response is not None:
        if getattr(exc, "expose_code", False) and isinstance(response.data, dict):
            response.data["code"] = exc.get_codes()
        return response

    view = context.get("view") if isinstance(context, dict) else None
    view_name = view.__class__.__name__ if view is not None else ""

    if isinstance(exc, ProtectedError):
        return Response(
            {"detail": "No se puede eliminar el registro porque tiene votos asociados."},
            status=status.HTTP_409_CONFLICT,
        )

    if isinstance(exc, DatabaseError):
        logger.exception("Store error handling request", extra={"view": view_name})
        return Response({"detail": STORE_ERROR_DETAIL}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return None
