from rest_framework import serializers

from core.serializers import StrictFieldsMixin

from .models import Student


class StudentSerializer(StrictFieldsMixin, serializers.ModelSerializer):
    anioSeccion = serializers.CharField(source="anio_seccion", max_length=10)

    class Meta:
        model = Student
        fields = ["id", "cedula", "nombre", "apellido", "anioSeccion", "direccion"]
        read_only_fields = ["id"]

    def validate_cedula(self, value):
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("La cédula es requerida.")
        return value

    def validate_anioSeccion(self, value):
        value = (value or "").strip().upper()
        if len(value) < 2:
            raise serializers.ValidationError("Indica año y sección, por ejemplo 5A.")
        return value
