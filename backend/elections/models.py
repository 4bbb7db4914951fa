from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone


class ElectionType(models.TextChoices):
    ESTUDIANTILES = "estudiantiles", "Elecciones estudiantiles"
    CARNAVAL = "carnaval", "Reina de carnaval"
    VOCERO = "vocero", "Vocero estudiantil"


class Election(models.Model):
    nombre = models.CharField(max_length=160)
    descripcion = models.TextField(blank=True, default="")
    fecha = models.DateTimeField(default=timezone.now)
    tipo_eleccion = models.CharField(max_length=20, choices=ElectionType.choices, blank=True, default="")

    class Meta:
        ordering = ["-fecha", "-id"]
        verbose_name = "Elección"
        verbose_name_plural = "Elecciones"

    def __str__(self) -> str:
        return self.nombre


class Candidate(models.Model):
    nombre = models.CharField(max_length=100)
    apellido = models.CharField(max_length=100)
    grado = models.CharField(max_length=2)
    seccion = models.CharField(max_length=2)
    tipo_eleccion = models.CharField(max_length=20, choices=ElectionType.choices)
    activo = models.BooleanField(default=True)

    class Meta:
        ordering = ["tipo_eleccion", "grado", "seccion", "apellido", "nombre", "id"]
        verbose_name = "Candidato"
        verbose_name_plural = "Candidatos"

    def __str__(self) -> str:
        return f"{self.nombre} {self.apellido} ({self.grado}{self.seccion} - {self.tipo_eleccion})"

    def clean(self):
        super().clean()
        self.grado = (self.grado or "").strip()
        self.seccion = (self.seccion or "").strip().upper()
        errors = {}
        if not (len(self.grado) == 1 and self.grado.isdigit()):
            errors["grado"] = "El grado debe ser un solo dígito."
        if not (len(self.seccion) == 1 and self.seccion.isalpha()):
            errors["seccion"] = "La sección debe ser una sola letra."
        if errors:
            raise ValidationError(errors)

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)


class Vote(models.Model):
    """A single cast ballot. Rows are only ever inserted."""

    cedula = models.CharField(max_length=20)
    nombre = models.CharField(max_length=100)
    apellido = models.CharField(max_length=100)
    rol = models.CharField(max_length=40)
    anio_seccion = models.CharField(max_length=10)
    direccion = models.CharField(max_length=255)
    candidato = models.ForeignKey(Candidate, on_delete=models.PROTECT, related_name="votes")
    eleccion = models.ForeignKey(Election, on_delete=models.PROTECT, related_name="votes", null=True, blank=True)
    tipo_eleccion = models.CharField(max_length=20, choices=ElectionType.choices)
    fecha_voto = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-fecha_voto", "-id"]
        verbose_name = "Voto"
        verbose_name_plural = "Votos"
        constraints = [
            models.UniqueConstraint(fields=["cedula", "tipo_eleccion"], name="uniq_vote_per_cedula_and_type"),
        ]
        indexes = [
            models.Index(fields=["tipo_eleccion", "candidato"], name="vote_type_candidate_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.cedula} -> {self.candidato_id} ({self.tipo_eleccion})"
