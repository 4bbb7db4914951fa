from __future__ import annotations

import csv
from pathlib import Path

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils import timezone

from elections.models import Candidate, Election, ElectionType
from students.models import Student


DEMO_CANDIDATES = {
    ElectionType.ESTUDIANTILES: [("Valentina", "Rojas"), ("Julián", "Herrera")],
    ElectionType.CARNAVAL: [("María Camila", "Pérez")],
    ElectionType.VOCERO: [("Daniel", "Quintero"), ("Sofía", "Márquez")],
}

DEMO_FIRST_NAMES = ["Ana", "Luis", "Carla", "Pedro", "Elena", "Jorge", "Paola", "Diego"]
DEMO_LAST_NAMES = ["Gómez", "Rivas", "Salas", "Torres", "Mendoza", "Castillo", "Núñez", "Vargas"]


class Command(BaseCommand):
    help = "Crea elecciones, candidatos y estudiantes de demostración para probar el flujo de votación."

    def add_arguments(self, parser):
        parser.add_argument("--years", type=str, default="1,2,3,4,5", help="Años a poblar, separados por coma.")
        parser.add_argument("--sections", type=str, default="A,B", help="Secciones a poblar, separadas por coma.")
        parser.add_argument(
            "--students-per-section",
            type=int,
            default=5,
            help="Cantidad de estudiantes por año y sección.",
        )
        parser.add_argument(
            "--cedula-start",
            type=int,
            default=30000000,
            help="Primera cédula a asignar a los estudiantes de demostración.",
        )
        parser.add_argument(
            "--output-csv",
            type=str,
            default="",
            help="Ruta CSV para exportar las cédulas creadas.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        years = [value.strip() for value in str(options["years"]).split(",") if value.strip()]
        sections = [value.strip().upper() for value in str(options["sections"]).split(",") if value.strip()]
        per_section = max(0, int(options["students_per_section"]))
        next_cedula = int(options["cedula_start"])
        output_csv = str(options["output_csv"] or "").strip()

        if not years or not sections:
            raise CommandError("Debes indicar al menos un año y una sección.")

        school_year = timezone.localdate().year
        for tipo in ElectionType:
            Election.objects.get_or_create(
                nombre=f"{tipo.label} {school_year}",
                defaults={"tipo_eleccion": tipo.value, "descripcion": "Elección de demostración."},
            )

        candidates_created = 0
        created_students: list[Student] = []
        for year in years:
            for section in sections:
                for tipo, people in DEMO_CANDIDATES.items():
                    for nombre, apellido in people:
                        _, created = Candidate.objects.get_or_create(
                            nombre=nombre,
                            apellido=apellido,
                            grado=year,
                            seccion=section,
                            tipo_eleccion=tipo.value,
                        )
                        candidates_created += int(created)

                for index in range(per_section):
                    while Student.objects.filter(cedula=str(next_cedula)).exists():
                        next_cedula += 1
                    student = Student.objects.create(
                        cedula=str(next_cedula),
                        nombre=DEMO_FIRST_NAMES[index % len(DEMO_FIRST_NAMES)],
                        apellido=DEMO_LAST_NAMES[(index + len(created_students)) % len(DEMO_LAST_NAMES)],
                        anio_seccion=f"{year}{section}",
                        direccion="Dirección de demostración",
                    )
                    created_students.append(student)
                    next_cedula += 1

        if output_csv:
            output_path = Path(output_csv)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with output_path.open("w", newline="", encoding="utf-8") as handle:
                writer = csv.writer(handle)
                writer.writerow(["cedula", "nombre", "apellido", "anio_seccion"])
                for student in created_students:
                    writer.writerow([student.cedula, student.nombre, student.apellido, student.anio_seccion])

        self.stdout.write(self.style.SUCCESS("Datos de demostración creados."))
        self.stdout.write(
            f"candidatos_nuevos={candidates_created} estudiantes_nuevos={len(created_students)}"
        )
        if created_students:
            sample = created_students[0]
            self.stdout.write(f"Prueba con la cédula {sample.cedula} ({sample.anio_seccion}).")
        if output_csv:
            self.stdout.write(f"CSV generado en: {output_csv}")
