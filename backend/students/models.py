from django.db import models


class Student(models.Model):
    """Student enrolled at the school; the voting flow reads it by cédula."""

    cedula = models.CharField(max_length=20, unique=True, verbose_name="Cédula")
    nombre = models.CharField(max_length=100)
    apellido = models.CharField(max_length=100)
    anio_seccion = models.CharField(max_length=10, verbose_name="Año y sección")
    direccion = models.CharField(max_length=255)

    class Meta:
        ordering = ["apellido", "nombre", "id"]
        verbose_name = "Estudiante"
        verbose_name_plural = "Estudiantes"

    def __str__(self):
        return f"{self.cedula} - {self.nombre} {self.apellido} ({self.anio_seccion})"

    def save(self, *args, **kwargs):
        self.cedula = (self.cedula or "").strip()
        self.anio_seccion = (self.anio_seccion or "").strip().upper()
        super().save(*args, **kwargs)
