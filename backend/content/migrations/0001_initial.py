import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Article",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("titulo", models.CharField(max_length=200)),
                ("contenido", models.TextField()),
                ("autor", models.CharField(max_length=160)),
                ("categoria", models.CharField(max_length=80)),
                ("imagen", models.URLField(blank=True, default="", max_length=500)),
                ("fecha_creacion", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "Artículo",
                "verbose_name_plural": "Artículos",
                "ordering": ["-fecha_creacion", "-id"],
            },
        ),
        migrations.CreateModel(
            name="Book",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("nombre_libro", models.CharField(max_length=200)),
                ("autor", models.CharField(max_length=160)),
                ("portada", models.URLField(blank=True, default="", max_length=500)),
                ("pdf", models.URLField(blank=True, default="", max_length=500)),
                ("materia", models.CharField(max_length=120)),
                ("fecha_creacion", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "Libro",
                "verbose_name_plural": "Biblioteca",
                "ordering": ["-fecha_creacion", "-id"],
            },
        ),
        migrations.CreateModel(
            name="CalendarEvent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("evento", models.CharField(max_length=200)),
                ("fecha", models.DateTimeField(default=django.utils.timezone.now)),
                ("categoria", models.CharField(max_length=80)),
                ("imagen", models.URLField(blank=True, default="", max_length=500)),
                ("descripcion", models.TextField(blank=True, default="")),
            ],
            options={
                "verbose_name": "Evento",
                "verbose_name_plural": "Calendario",
                "ordering": ["fecha", "id"],
            },
        ),
        migrations.CreateModel(
            name="GalleryImage",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("imagen", models.URLField(max_length=500)),
                ("categoria", models.CharField(max_length=80)),
                ("nombre", models.CharField(max_length=160)),
                ("fecha_creacion", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "Imagen",
                "verbose_name_plural": "Galería",
                "ordering": ["-fecha_creacion", "-id"],
            },
        ),
    ]
