from rest_framework import filters, status, viewsets
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from portal_backend.throttles import PublicVotingRateThrottle
from users.permissions import IsAdmin

from .models import Student
from .serializers import StudentSerializer


class StudentViewSet(viewsets.ModelViewSet):
    queryset = Student.objects.all()
    serializer_class = StudentSerializer
    permission_classes = [IsAdmin]
    filter_backends = [filters.SearchFilter]
    search_fields = ["cedula", "nombre", "apellido", "anio_seccion"]


class StudentByCedulaAPIView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [PublicVotingRateThrottle]

    def get(self, request, cedula: str):
        student = Student.objects.filter(cedula=(cedula or "").strip()).first()
        if student is None:
            return Response({"detail": "Estudiante no encontrado"}, status=status.HTTP_404_NOT_FOUND)
        return Response(StudentSerializer(student).data, status=status.HTTP_200_OK)


class DistinctAnioSeccionAPIView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [PublicVotingRateThrottle]

    def get(self, request):
        values = (
            Student.objects.order_by("anio_seccion")
            .values_list("anio_seccion", flat=True)
            .distinct()
        )
        return Response(list(values), status=status.HTTP_200_OK)
