from rest_framework import serializers

from core.serializers import StrictFieldsMixin

from .models import Article, Book, CalendarEvent, GalleryImage


class BookSerializer(StrictFieldsMixin, serializers.ModelSerializer):
    nombreLibro = serializers.CharField(source="nombre_libro", max_length=200)
    fechaCreacion = serializers.DateTimeField(source="fecha_creacion", read_only=True)

    class Meta:
        model = Book
        fields = ["id", "nombreLibro", "autor", "portada", "pdf", "materia", "fechaCreacion"]
        read_only_fields = ["id"]


class CalendarEventSerializer(StrictFieldsMixin, serializers.ModelSerializer):
    class Meta:
        model = CalendarEvent
        fields = ["id", "evento", "fecha", "categoria", "imagen", "descripcion"]
        read_only_fields = ["id"]
        extra_kwargs = {"fecha": {"required": True}}


class GalleryImageSerializer(StrictFieldsMixin, serializers.ModelSerializer):
    fechaCreacion = serializers.DateTimeField(source="fecha_creacion", read_only=True)

    class Meta:
        model = GalleryImage
        fields = ["id", "imagen", "categoria", "nombre", "fechaCreacion"]
        read_only_fields = ["id"]


class ArticleSerializer(StrictFieldsMixin, serializers.ModelSerializer):
    fechaCreacion = serializers.DateTimeField(source="fecha_creacion", read_only=True)

    class Meta:
        model = Article
        fields = ["id", "titulo", "contenido", "autor", "categoria", "imagen", "fechaCreacion"]
        read_only_fields = ["id"]
