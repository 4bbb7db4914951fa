import django_filters

from .models import CalendarEvent, GalleryImage


class CalendarEventFilter(django_filters.FilterSet):
    month = django_filters.NumberFilter(field_name="fecha", lookup_expr="month")
    year = django_filters.NumberFilter(field_name="fecha", lookup_expr="year")

    class Meta:
        model = CalendarEvent
        fields = ["categoria", "month", "year"]


class GalleryImageFilter(django_filters.FilterSet):
    categoria = django_filters.CharFilter(method="filter_categoria")

    class Meta:
        model = GalleryImage
        fields: list[str] = []

    def filter_categoria(self, queryset, name, value):
        value = (value or "").strip()
        if not value or value.lower() == "all":
            return queryset
        return queryset.filter(categoria__iexact=value)
