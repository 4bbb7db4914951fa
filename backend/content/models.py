from django.db import models
from django.utils import timezone


class Book(models.Model):
    nombre_libro = models.CharField(max_length=200)
    autor = models.CharField(max_length=160)
    portada = models.URLField(max_length=500, blank=True, default="")
    pdf = models.URLField(max_length=500, blank=True, default="")
    materia = models.CharField(max_length=120)
    fecha_creacion = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-fecha_creacion", "-id"]
        verbose_name = "Libro"
        verbose_name_plural = "Biblioteca"

    def __str__(self):
        return f"{self.nombre_libro} ({self.autor})"


class CalendarEvent(models.Model):
    evento = models.CharField(max_length=200)
    fecha = models.DateTimeField(default=timezone.now)
    categoria = models.CharField(max_length=80)
    imagen = models.URLField(max_length=500, blank=True, default="")
    descripcion = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["fecha", "id"]
        verbose_name = "Evento"
        verbose_name_plural = "Calendario"

    def __str__(self):
        return f"{self.fecha:%Y-%m-%d} {self.evento}"


class GalleryImage(models.Model):
    imagen = models.URLField(max_length=500)
    categoria = models.CharField(max_length=80)
    nombre = models.CharField(max_length=160)
    fecha_creacion = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-fecha_creacion", "-id"]
        verbose_name = "Imagen"
        verbose_name_plural = "Galería"

    def __str__(self):
        return self.nombre


class Article(models.Model):
    titulo = models.CharField(max_length=200)
    contenido = models.TextField()
    autor = models.CharField(max_length=160)
    categoria = models.CharField(max_length=80)
    imagen = models.URLField(max_length=500, blank=True, default="")
    fecha_creacion = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-fecha_creacion", "-id"]
        verbose_name = "Artículo"
        verbose_name_plural = "Artículos"

    def __str__(self):
        return self.titulo
