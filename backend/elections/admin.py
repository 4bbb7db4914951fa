from django.contrib import admin

from .models import Candidate, Election, Vote


@admin.register(Election)
class ElectionAdmin(admin.ModelAdmin):
    list_display = ("id", "nombre", "tipo_eleccion", "fecha")
    list_filter = ("tipo_eleccion",)
    search_fields = ("nombre",)


@admin.register(Candidate)
class CandidateAdmin(admin.ModelAdmin):
    list_display = ("id", "nombre", "apellido", "grado", "seccion", "tipo_eleccion", "activo")
    list_filter = ("tipo_eleccion", "activo", "grado", "seccion")
    search_fields = ("nombre", "apellido")


@admin.register(Vote)
class VoteAdmin(admin.ModelAdmin):
    list_display = ("id", "cedula", "anio_seccion", "candidato", "tipo_eleccion", "eleccion", "fecha_voto")
    list_filter = ("tipo_eleccion",)
    search_fields = ("cedula", "nombre", "apellido")
    readonly_fields = [field.name for field in Vote._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
