from django.test import SimpleTestCase
from rest_framework import serializers

from .serializers import StrictFieldsMixin


class _SampleSerializer(StrictFieldsMixin, serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    nombre = serializers.CharField(max_length=20)
    autor = serializers.CharField(source="author", max_length=20, required=False)


class StrictFieldsMixinTests(SimpleTestCase):
    def test_accepts_known_fields(self):
        serializer = _SampleSerializer(data={"nombre": "Ana", "autor": "Luis"})
        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertEqual(serializer.validated_data["author"], "Luis")

    def test_rejects_unknown_fields(self):
        serializer = _SampleSerializer(data={"nombre": "Ana", "rol": "admin", "activo": True})
        self.assertFalse(serializer.is_valid())
        self.assertEqual(serializer.errors["rol"], ["Campo no permitido."])
        self.assertIn("activo", serializer.errors)

    def test_read_only_fields_are_ignored(self):
        serializer = _SampleSerializer(data={"nombre": "Ana", "id": 99})
        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertNotIn("id", serializer.validated_data)
