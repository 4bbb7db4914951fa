from django.urls import include, path, re_path
from rest_framework.routers import DefaultRouter

from .views_management import (
    CandidateViewSet,
    ElectionViewSet,
    TallyExportCsvAPIView,
    TallyExportXlsxAPIView,
    VotesByTypeAPIView,
)
from .views_public import AvailabilityAPIView, CandidatesByTypeAPIView, StatisticsAPIView, VoteListCreateAPIView

router = DefaultRouter()
router.trailing_slash = "/?"
router.register(r"candidatos", CandidateViewSet, basename="candidato")
router.register(r"elecciones", ElectionViewSet, basename="eleccion")

urlpatterns = [
    re_path(r"^candidatos/tipo/(?P<tipo>[^/]+)/?$", CandidatesByTypeAPIView.as_view(), name="candidatos-por-tipo"),
    re_path(r"^elecciones/disponibilidad/?$", AvailabilityAPIView.as_view(), name="elecciones-disponibilidad"),
    re_path(
        r"^elecciones/disponibilidad/(?P<tipo>[^/]+)/?$",
        AvailabilityAPIView.as_view(),
        name="elecciones-disponibilidad-tipo",
    ),
    re_path(r"^votaciones/?$", VoteListCreateAPIView.as_view(), name="votaciones"),
    re_path(r"^votaciones/tipo/(?P<tipo>[^/]+)/?$", VotesByTypeAPIView.as_view(), name="votaciones-por-tipo"),
    re_path(r"^estadisticas/?$", StatisticsAPIView.as_view(), name="estadisticas"),
    re_path(r"^estadisticas/export/csv/?$", TallyExportCsvAPIView.as_view(), name="estadisticas-export-csv"),
    re_path(r"^estadisticas/export/xlsx/?$", TallyExportXlsxAPIView.as_view(), name="estadisticas-export-xlsx"),
    path("", include(router.urls)),
]
