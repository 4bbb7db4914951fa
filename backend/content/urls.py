from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import ArticleViewSet, BookViewSet, CalendarEventViewSet, GalleryImageViewSet

router = DefaultRouter()
router.trailing_slash = "/?"
router.register(r"biblioteca", BookViewSet, basename="biblioteca")
router.register(r"calendario", CalendarEventViewSet, basename="calendario")
router.register(r"galeria", GalleryImageViewSet, basename="galeria")
router.register(r"articulos", ArticleViewSet, basename="articulo")

urlpatterns = [
    path("", include(router.urls)),
]
