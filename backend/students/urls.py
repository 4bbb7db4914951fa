from django.urls import include, path, re_path
from rest_framework.routers import DefaultRouter

from .views import DistinctAnioSeccionAPIView, StudentByCedulaAPIView, StudentViewSet

router = DefaultRouter()
router.trailing_slash = "/?"
router.register(r"estudiantes", StudentViewSet, basename="estudiante")

urlpatterns = [
    # Before the router: its detail route would swallow these paths.
    re_path(r"^estudiantes/cedula/(?P<cedula>[^/]+)/?$", StudentByCedulaAPIView.as_view(), name="estudiante-por-cedula"),
    re_path(r"^estudiantes/anioSeccion-unicos/?$", DistinctAnioSeccionAPIView.as_view(), name="estudiantes-anio-seccion"),
    path("", include(router.urls)),
]
