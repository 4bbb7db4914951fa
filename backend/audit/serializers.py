from __future__ import annotations

from rest_framework import serializers

from .models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
	actor_username = serializers.CharField(source="actor.username", read_only=True, default=None)

	class Meta:
		model = AuditLog
		fields = [
			"id",
			"created_at",
			"actor",
			"actor_username",
			"actor_label",
			"event_type",
			"object_type",
			"object_id",
			"path",
			"method",
			"status_code",
			"ip_address",
			"metadata",
		]
		read_only_fields = fields
