from rest_framework import filters, viewsets

from portal_backend.authentication import PublicReadJWTAuthentication
from users.permissions import IsAdminOrReadOnly

from .filters import CalendarEventFilter, GalleryImageFilter
from .models import Article, Book, CalendarEvent, GalleryImage
from .serializers import ArticleSerializer, BookSerializer, CalendarEventSerializer, GalleryImageSerializer


class ContentViewSet(viewsets.ModelViewSet):
    """Public reads, admin writes."""

    authentication_classes = [PublicReadJWTAuthentication]
    permission_classes = [IsAdminOrReadOnly]


class BookViewSet(ContentViewSet):
    queryset = Book.objects.all()
    serializer_class = BookSerializer
    filter_backends = [filters.SearchFilter]
    search_fields = ["nombre_libro", "autor", "materia"]


class CalendarEventViewSet(ContentViewSet):
    queryset = CalendarEvent.objects.all()
    serializer_class = CalendarEventSerializer
    filterset_class = CalendarEventFilter


class GalleryImageViewSet(ContentViewSet):
    queryset = GalleryImage.objects.all()
    serializer_class = GalleryImageSerializer
    filterset_class = GalleryImageFilter


class ArticleViewSet(ContentViewSet):
    queryset = Article.objects.all()
    serializer_class = ArticleSerializer
    filter_backends = [filters.SearchFilter]
    search_fields = ["titulo", "autor", "categoria"]
