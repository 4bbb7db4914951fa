from __future__ import annotations

import logging
from typing import Any, Optional

from django.http import HttpRequest

from .models import AuditLog


logger = logging.getLogger(__name__)


def _get_ip(request: HttpRequest) -> str:
	xff = (request.META.get("HTTP_X_FORWARDED_FOR") or "").strip()
	if xff:
		# client, proxy1, proxy2...
		return xff.split(",")[0].strip()
	return (request.META.get("REMOTE_ADDR") or "").strip()


def _record(
	request: HttpRequest,
	*,
	actor,
	actor_label: str,
	event_type: str,
	object_type: str,
	object_id: str | int,
	status_code: Optional[int],
	metadata: Optional[dict[str, Any]],
) -> AuditLog:
	entry = AuditLog.objects.create(
		actor=actor,
		actor_label=(actor_label or "")[:80],
		event_type=event_type,
		object_type=object_type or "",
		object_id=str(object_id) if object_id is not None else "",
		path=(getattr(request, "path", "") or "")[:300],
		method=(getattr(request, "method", "") or ""),
		status_code=status_code,
		ip_address=_get_ip(request),
		user_agent=(request.META.get("HTTP_USER_AGENT") or "")[:4000],
		metadata=metadata or {},
	)
	logger.debug("audit.%s", event_type, extra={"audit_id": entry.id, "object_id": entry.object_id})
	return entry


def log_event(
	request: HttpRequest,
	*,
	event_type: str,
	object_type: str = "",
	object_id: str | int = "",
	status_code: Optional[int] = None,
	metadata: Optional[dict[str, Any]] = None,
) -> Optional[AuditLog]:
	"""Record an action by the authenticated user; anonymous requests are ignored."""
	user = getattr(request, "user", None)
	if not getattr(user, "is_authenticated", False):
		return None

	return _record(
		request,
		actor=user,
		actor_label=user.get_username(),
		event_type=event_type,
		object_type=object_type,
		object_id=object_id,
		status_code=status_code,
		metadata=metadata,
	)


def log_public_event(
	request: HttpRequest,
	*,
	event_type: str,
	actor_label: str,
	object_type: str = "",
	object_id: str | int = "",
	status_code: Optional[int] = None,
	metadata: Optional[dict[str, Any]] = None,
) -> AuditLog:
	"""Record an action performed through a public (unauthenticated) endpoint."""
	return _record(
		request,
		actor=None,
		actor_label=actor_label,
		event_type=event_type,
		object_type=object_type,
		object_id=object_id,
		status_code=status_code,
		metadata=metadata,
	)
