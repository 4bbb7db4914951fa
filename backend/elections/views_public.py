from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from audit.services import log_public_event
from portal_backend.throttles import PublicVotingRateThrottle
from users.permissions import IsAdmin

from .availability import is_election_available, list_availability
from .exceptions import DuplicateVoteError
from .models import Candidate, ElectionType, Vote
from .serializers import CandidateSerializer, VoteAdminSerializer, VoteInputSerializer, VoteSerializer
from .services import build_statistics, filter_eligible_candidates, normalize_tally_filters


def _unknown_type_response() -> Response:
    return Response({"detail": "Tipo de elección no encontrado."}, status=status.HTTP_404_NOT_FOUND)


class CandidatesByTypeAPIView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]
    throttle_classes = [PublicVotingRateThrottle]

    def get(self, request, tipo: str, *args, **kwargs):
        if tipo not in ElectionType.values:
            return _unknown_type_response()

        candidates = Candidate.objects.filter(tipo_eleccion=tipo, activo=True)
        anio_seccion = (request.query_params.get("anioSeccion") or "").strip()
        if anio_seccion:
            candidates = filter_eligible_candidates(candidates, anio_seccion=anio_seccion, tipo_eleccion=tipo)
        return Response(CandidateSerializer(candidates, many=True).data)


class AvailabilityAPIView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]
    throttle_classes = [PublicVotingRateThrottle]

    def get(self, request, tipo: str | None = None, *args, **kwargs):
        if tipo is None:
            return Response([item.as_dict() for item in list_availability()])
        try:
            availability = is_election_available(tipo)
        except ValueError:
            return _unknown_type_response()
        return Response(availability.as_dict())


class VoteListCreateAPIView(APIView):
    """POST is the public ballot box; GET lists every vote for administrators."""

    def get_authenticators(self):
        # Runs before the DRF request exists; self.request is the Django request set by setup().
        if self.request.method == "POST":
            return []
        return super().get_authenticators()

    def get_permissions(self):
        if self.request.method == "POST":
            return [AllowAny()]
        return [IsAdmin()]

    def get_throttles(self):
        if self.request.method == "POST":
            return [PublicVotingRateThrottle()]
        return []

    def get(self, request, *args, **kwargs):
        votes = Vote.objects.select_related("candidato", "eleccion").all()
        return Response(VoteAdminSerializer(votes, many=True).data)

    def post(self, request, *args, **kwargs):
        serializer = VoteInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            vote = serializer.save()
        except DuplicateVoteError:
            log_public_event(
                request,
                event_type="VOTE_SUBMIT_DUPLICATE",
                actor_label=serializer.validated_data["cedula"],
                object_type="Vote",
                status_code=status.HTTP_400_BAD_REQUEST,
                metadata={"tipo_eleccion": serializer.validated_data["tipoEleccion"]},
            )
            raise
        log_public_event(
            request,
            event_type="VOTE_SUBMIT",
            actor_label=vote.cedula,
            object_type="Vote",
            object_id=vote.id,
            status_code=status.HTTP_201_CREATED,
            metadata={
                "tipo_eleccion": vote.tipo_eleccion,
                "candidato_id": vote.candidato_id,
                "eleccion_id": vote.eleccion_id,
            },
        )
        return Response(VoteSerializer(vote).data, status=status.HTTP_201_CREATED)


class StatisticsAPIView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]
    throttle_classes = [PublicVotingRateThrottle]

    def get(self, request, *args, **kwargs):
        filters = normalize_tally_filters(request.query_params)
        return Response(build_statistics(filters))
