import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


ELECTION_TYPE_CHOICES = [
    ("estudiantiles", "Elecciones estudiantiles"),
    ("carnaval", "Reina de carnaval"),
    ("vocero", "Vocero estudiantil"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Candidate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("nombre", models.CharField(max_length=100)),
                ("apellido", models.CharField(max_length=100)),
                ("grado", models.CharField(max_length=2)),
                ("seccion", models.CharField(max_length=2)),
                ("tipo_eleccion", models.CharField(choices=ELECTION_TYPE_CHOICES, max_length=20)),
                ("activo", models.BooleanField(default=True)),
            ],
            options={
                "verbose_name": "Candidato",
                "verbose_name_plural": "Candidatos",
                "ordering": ["tipo_eleccion", "grado", "seccion", "apellido", "nombre", "id"],
            },
        ),
        migrations.CreateModel(
            name="Election",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("nombre", models.CharField(max_length=160)),
                ("descripcion", models.TextField(blank=True, default="")),
                ("fecha", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "tipo_eleccion",
                    models.CharField(blank=True, choices=ELECTION_TYPE_CHOICES, default="", max_length=20),
                ),
            ],
            options={
                "verbose_name": "Elección",
                "verbose_name_plural": "Elecciones",
                "ordering": ["-fecha", "-id"],
            },
        ),
        migrations.CreateModel(
            name="Vote",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("cedula", models.CharField(max_length=20)),
                ("nombre", models.CharField(max_length=100)),
                ("apellido", models.CharField(max_length=100)),
                ("rol", models.CharField(max_length=40)),
                ("anio_seccion", models.CharField(max_length=10)),
                ("direccion", models.CharField(max_length=255)),
                ("tipo_eleccion", models.CharField(choices=ELECTION_TYPE_CHOICES, max_length=20)),
                ("fecha_voto", models.DateTimeField(auto_now_add=True)),
                (
                    "candidato",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="votes",
                        to="elections.candidate",
                    ),
                ),
                (
                    "eleccion",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="votes",
                        to="elections.election",
                    ),
                ),
            ],
            options={
                "verbose_name": "Voto",
                "verbose_name_plural": "Votos",
                "ordering": ["-fecha_voto", "-id"],
                "indexes": [
                    models.Index(fields=["tipo_eleccion", "candidato"], name="vote_type_candidate_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("cedula", "tipo_eleccion"), name="uniq_vote_per_cedula_and_type"),
                ],
            },
        ),
    ]
