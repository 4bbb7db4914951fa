from __future__ import annotations

import csv
from io import BytesIO

from django.db.models import Count
from django.http import HttpResponse
from django.utils import timezone
from openpyxl import Workbook
from rest_framework import status, viewsets
from rest_framework.response import Response
from rest_framework.views import APIView

from audit.services import log_event
from portal_backend.authentication import PublicReadJWTAuthentication
from users.permissions import IsAdmin, IsAdminOrReadOnly

from .models import Candidate, Election, ElectionType, Vote
from .serializers import CandidateSerializer, ElectionSerializer, VoteAdminSerializer
from .services import build_statistics, normalize_tally_filters


TALLY_HEADERS = [
    "candidato_id",
    "nombre",
    "apellido",
    "grado",
    "seccion",
    "tipo_eleccion",
    "eleccion_id",
    "eleccion",
    "votos",
]


class _AuditedModelViewSet(viewsets.ModelViewSet):
    """Admin writes are audited; deleting a row that votes reference is refused with 409."""

    authentication_classes = [PublicReadJWTAuthentication]
    permission_classes = [IsAdminOrReadOnly]
    audit_object_type = ""
    protected_detail = ""

    def perform_create(self, serializer):
        instance = serializer.save()
        log_event(
            self.request,
            event_type=f"{self.audit_object_type.upper()}_CREATE",
            object_type=self.audit_object_type,
            object_id=instance.id,
            status_code=status.HTTP_201_CREATED,
        )

    def perform_update(self, serializer):
        instance = serializer.save()
        log_event(
            self.request,
            event_type=f"{self.audit_object_type.upper()}_UPDATE",
            object_type=self.audit_object_type,
            object_id=instance.id,
            status_code=status.HTTP_200_OK,
            metadata={"fields": sorted(serializer.validated_data.keys())},
        )

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        if instance.votes.exists():
            return Response({"detail": self.protected_detail}, status=status.HTTP_409_CONFLICT)

        object_id = instance.id
        instance.delete()
        log_event(
            request,
            event_type=f"{self.audit_object_type.upper()}_DELETE",
            object_type=self.audit_object_type,
            object_id=object_id,
            status_code=status.HTTP_204_NO_CONTENT,
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


class CandidateViewSet(_AuditedModelViewSet):
    queryset = Candidate.objects.all()
    serializer_class = CandidateSerializer
    filterset_fields = ["tipo_eleccion", "grado", "seccion", "activo"]
    audit_object_type = "Candidate"
    protected_detail = "No se puede eliminar el candidato porque ya tiene votos registrados. Puedes desactivarlo."

    def get_queryset(self):
        qs = super().get_queryset()
        if not getattr(self.request.user, "is_portal_admin", False):
            qs = qs.filter(activo=True)
        return qs


class ElectionViewSet(_AuditedModelViewSet):
    queryset = Election.objects.annotate(votes_count=Count("votes")).order_by("-fecha", "-id")
    serializer_class = ElectionSerializer
    filterset_fields = ["tipo_eleccion"]
    audit_object_type = "Election"
    protected_detail = "No se puede eliminar la elección porque ya tiene votos registrados."


class VotesByTypeAPIView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request, tipo: str, *args, **kwargs):
        if tipo not in ElectionType.values:
            return Response({"detail": "Tipo de elección no encontrado."}, status=status.HTTP_404_NOT_FOUND)
        votes = Vote.objects.select_related("candidato", "eleccion").filter(tipo_eleccion=tipo)
        return Response(VoteAdminSerializer(votes, many=True).data)


def _tally_rows(statistics: dict) -> list[list]:
    return [
        [
            row["candidatoId"],
            row["nombre"],
            row["apellido"],
            row["grado"],
            row["seccion"],
            row["tipoEleccion"],
            row["eleccionId"] if row["eleccionId"] is not None else "",
            row["eleccionNombre"] or "",
            row["count"],
        ]
        for row in statistics["votosPorCandidato"]
    ]


def _filters_label(statistics: dict) -> str:
    parts = [f"{key}={value}" for key, value in statistics["filtros"].items() if value]
    return ", ".join(parts) or "sin filtros"


def _export_filename(extension: str) -> str:
    return f"estadisticas_votacion_{timezone.localtime():%Y%m%d_%H%M}.{extension}"


class TallyExportCsvAPIView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request, *args, **kwargs):
        statistics = build_statistics(normalize_tally_filters(request.query_params))

        response = HttpResponse(content_type="text/csv; charset=utf-8")
        response["Content-Disposition"] = f'attachment; filename="{_export_filename("csv")}"'

        writer = csv.writer(response)
        writer.writerow(["filtros", _filters_label(statistics)])
        writer.writerow(["total_votos", statistics["totalVotos"]])
        writer.writerow([])
        writer.writerow(TALLY_HEADERS)
        for row in _tally_rows(statistics):
            writer.writerow(row)

        log_event(
            request,
            event_type="TALLY_EXPORT_CSV",
            object_type="Vote",
            status_code=status.HTTP_200_OK,
            metadata={"filtros": statistics["filtros"], "total_votos": statistics["totalVotos"]},
        )
        return response


class TallyExportXlsxAPIView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request, *args, **kwargs):
        statistics = build_statistics(normalize_tally_filters(request.query_params))

        workbook = Workbook()
        sheet = workbook.active
        sheet.title = "Resultados"
        sheet.append(["Filtros", _filters_label(statistics)])
        sheet.append(["Total votos", statistics["totalVotos"]])
        sheet.append([])
        sheet.append(["Candidato ID", "Nombre", "Apellido", "Grado", "Sección", "Tipo", "Elección ID", "Elección", "Votos"])
        for row in _tally_rows(statistics):
            sheet.append(row)

        by_type = workbook.create_sheet("Por tipo")
        by_type.append(["Tipo de elección", "Votos"])
        for row in statistics["votosPorTipo"]:
            by_type.append([row["tipoEleccion"], row["count"]])

        output = BytesIO()
        workbook.save(output)
        output.seek(0)

        response = HttpResponse(
            output.getvalue(),
            content_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
        response["Content-Disposition"] = f'attachment; filename="{_export_filename("xlsx")}"'

        log_event(
            request,
            event_type="TALLY_EXPORT_XLSX",
            object_type="Vote",
            status_code=status.HTTP_200_OK,
            metadata={"filtros": statistics["filtros"], "total_votos": statistics["totalVotos"]},
        )
        return response
