from django.contrib import admin

from .models import Student


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ("cedula", "nombre", "apellido", "anio_seccion")
    list_filter = ("anio_seccion",)
    search_fields = ("cedula", "nombre", "apellido")
