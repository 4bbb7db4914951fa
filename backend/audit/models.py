from __future__ import annotations

from django.conf import settings
from django.db import models


class AuditLog(models.Model):
	"""Trail of portal events: administrative changes, exports and public votes.

	Public events have no `actor`; `actor_label` carries the identifier the
	citizen supplied (for votes, the voter's cédula).
	"""

	actor = models.ForeignKey(
		settings.AUTH_USER_MODEL,
		on_delete=models.SET_NULL,
		null=True,
		blank=True,
		related_name="audit_logs",
	)
	actor_label = models.CharField(max_length=80, blank=True, default="")

	event_type = models.CharField(max_length=80)
	object_type = models.CharField(max_length=80, blank=True, default="")
	object_id = models.CharField(max_length=80, blank=True, default="")

	path = models.CharField(max_length=300, blank=True, default="")
	method = models.CharField(max_length=10, blank=True, default="")
	status_code = models.PositiveSmallIntegerField(null=True, blank=True)

	ip_address = models.CharField(max_length=64, blank=True, default="")
	user_agent = models.TextField(blank=True, default="")

	metadata = models.JSONField(default=dict, blank=True)

	created_at = models.DateTimeField(auto_now_add=True)

	class Meta:
		ordering = ["-created_at", "-id"]
		indexes = [
			models.Index(fields=["event_type", "created_at"], name="audit_event_created_idx"),
			models.Index(fields=["object_type", "object_id"], name="audit_object_idx"),
		]

	def __str__(self) -> str:
		who = self.actor.username if self.actor_id else (self.actor_label or "anónimo")
		return f"{self.created_at:%Y-%m-%d %H:%M} {self.event_type} ({who})"
