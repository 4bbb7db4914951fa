from __future__ import annotations

from rest_framework import serializers

from core.serializers import StrictFieldsMixin

from .models import Candidate, Election, ElectionType, Vote
from .services import submit_vote


class CandidateSerializer(StrictFieldsMixin, serializers.ModelSerializer):
    tipoEleccion = serializers.ChoiceField(source="tipo_eleccion", choices=ElectionType.choices)

    class Meta:
        model = Candidate
        fields = ["id", "nombre", "apellido", "grado", "seccion", "tipoEleccion", "activo"]
        read_only_fields = ["id"]

    def validate_grado(self, value):
        value = (value or "").strip()
        if not (len(value) == 1 and value.isdigit()):
            raise serializers.ValidationError("El grado debe ser un solo dígito.")
        return value

    def validate_seccion(self, value):
        value = (value or "").strip().upper()
        if not (len(value) == 1 and value.isalpha()):
            raise serializers.ValidationError("La sección debe ser una sola letra.")
        return value


class ElectionSerializer(StrictFieldsMixin, serializers.ModelSerializer):
    tipoEleccion = serializers.ChoiceField(
        source="tipo_eleccion",
        choices=ElectionType.choices,
        required=False,
        allow_blank=True,
    )
    votosRegistrados = serializers.SerializerMethodField()

    class Meta:
        model = Election
        fields = ["id", "nombre", "descripcion", "fecha", "tipoEleccion", "votosRegistrados"]
        read_only_fields = ["id"]

    def validate(self, attrs):
        new_type = attrs.get("tipo_eleccion")
        if self.instance is not None and new_type and new_type != self.instance.tipo_eleccion:
            mismatched = self.instance.votes.exclude(tipo_eleccion=new_type).exists()
            if mismatched:
                raise serializers.ValidationError(
                    {"tipoEleccion": "La elección ya tiene votos de otro tipo de elección."}
                )
        return attrs

    def get_votosRegistrados(self, obj) -> int:
        count = getattr(obj, "votes_count", None)
        return obj.votes.count() if count is None else count


class VoteSerializer(serializers.ModelSerializer):
    anioSeccion = serializers.CharField(source="anio_seccion", read_only=True)
    candidatoId = serializers.IntegerField(source="candidato_id", read_only=True)
    eleccionId = serializers.IntegerField(source="eleccion_id", read_only=True, allow_null=True)
    tipoEleccion = serializers.CharField(source="tipo_eleccion", read_only=True)
    fechaVoto = serializers.DateTimeField(source="fecha_voto", read_only=True)

    class Meta:
        model = Vote
        fields = [
            "id",
            "cedula",
            "nombre",
            "apellido",
            "rol",
            "anioSeccion",
            "direccion",
            "candidatoId",
            "eleccionId",
            "tipoEleccion",
            "fechaVoto",
        ]
        read_only_fields = fields


class VoteAdminSerializer(VoteSerializer):
    candidatoNombre = serializers.SerializerMethodField()
    eleccionNombre = serializers.CharField(source="eleccion.nombre", read_only=True, default=None)

    class Meta(VoteSerializer.Meta):
        fields = VoteSerializer.Meta.fields + ["candidatoNombre", "eleccionNombre"]
        read_only_fields = fields

    def get_candidatoNombre(self, obj) -> str:
        return f"{obj.candidato.nombre} {obj.candidato.apellido}"


class VoteInputSerializer(StrictFieldsMixin, serializers.Serializer):
    cedula = serializers.CharField(max_length=20)
    nombre = serializers.CharField(max_length=100)
    apellido = serializers.CharField(max_length=100)
    rol = serializers.CharField(max_length=40)
    anioSeccion = serializers.CharField(max_length=10)
    direccion = serializers.CharField(max_length=255)
    candidatoId = serializers.IntegerField(min_value=1)
    tipoEleccion = serializers.ChoiceField(choices=ElectionType.choices)
    eleccionId = serializers.IntegerField(min_value=1, required=False, allow_null=True)

    def validate_anioSeccion(self, value):
        value = value.strip().upper()
        if len(value) < 2:
            raise serializers.ValidationError("Indica año y sección, por ejemplo 5A.")
        return value

    def save(self, **kwargs):
        data = self.validated_data
        self.instance = submit_vote(
            cedula=data["cedula"],
            nombre=data["nombre"],
            apellido=data["apellido"],
            rol=data["rol"],
            anio_seccion=data["anioSeccion"],
            direccion=data["direccion"],
            candidato_id=data["candidatoId"],
            tipo_eleccion=data["tipoEleccion"],
            eleccion_id=data.get("eleccionId"),
        )
        return self.instance
