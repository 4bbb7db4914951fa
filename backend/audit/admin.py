from django.contrib import admin

from .models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
	list_display = ("created_at", "event_type", "actor", "actor_label", "object_type", "object_id")
	list_filter = ("event_type", "object_type")
	search_fields = ("actor__username", "actor_label", "object_id", "path")
	readonly_fields = [field.name for field in AuditLog._meta.fields]

	def has_add_permission(self, request):
		return False

	def has_change_permission(self, request, obj=None):
		return False
