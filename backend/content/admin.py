from django.contrib import admin

from .models import Article, Book, CalendarEvent, GalleryImage


@admin.register(Book)
class BookAdmin(admin.ModelAdmin):
    list_display = ("nombre_libro", "autor", "materia", "fecha_creacion")
    list_filter = ("materia",)
    search_fields = ("nombre_libro", "autor")


@admin.register(CalendarEvent)
class CalendarEventAdmin(admin.ModelAdmin):
    list_display = ("evento", "fecha", "categoria")
    list_filter = ("categoria",)
    date_hierarchy = "fecha"


@admin.register(GalleryImage)
class GalleryImageAdmin(admin.ModelAdmin):
    list_display = ("nombre", "categoria", "fecha_creacion")
    list_filter = ("categoria",)


@admin.register(Article)
class ArticleAdmin(admin.ModelAdmin):
    list_display = ("titulo", "autor", "categoria", "fecha_creacion")
    list_filter = ("categoria",)
    search_fields = ("titulo", "contenido")
