from __future__ import annotations

from django.test import RequestFactory
from rest_framework.test import APITestCase

from users.models import User

from .models import AuditLog
from .services import log_event, log_public_event


class AuditServiceTests(APITestCase):
	def setUp(self):
		self.factory = RequestFactory()
		self.admin = User.objects.create_user(username="admin_audit", password="pass1234", role=User.ROLE_ADMIN)

	def test_log_event_ignores_anonymous_requests(self):
		request = self.factory.get("/api/candidatos/")
		request.user = None
		self.assertIsNone(log_event(request, event_type="CANDIDATE_UPDATE"))
		self.assertEqual(AuditLog.objects.count(), 0)

	def test_log_event_records_actor_and_first_forwarded_ip(self):
		request = self.factory.post("/api/candidatos/", HTTP_X_FORWARDED_FOR="10.0.0.5, 172.16.0.1")
		request.user = self.admin
		entry = log_event(request, event_type="CANDIDATE_CREATE", object_type="candidate", object_id=7)

		self.assertIsNotNone(entry)
		self.assertEqual(entry.actor, self.admin)
		self.assertEqual(entry.actor_label, "admin_audit")
		self.assertEqual(entry.object_id, "7")
		self.assertEqual(entry.ip_address, "10.0.0.5")

	def test_log_public_event_has_no_actor(self):
		request = self.factory.post("/api/votaciones", REMOTE_ADDR="192.168.1.20")
		entry = log_public_event(
			request,
			event_type="VOTE_SUBMIT",
			actor_label="V-12345678",
			object_type="vote",
			object_id=3,
			metadata={"tipoEleccion": "estudiantiles"},
		)

		self.assertIsNone(entry.actor)
		self.assertEqual(entry.actor_label, "V-12345678")
		self.assertEqual(entry.ip_address, "192.168.1.20")
		self.assertEqual(entry.metadata["tipoEleccion"], "estudiantiles")


class AuditLogEndpointTests(APITestCase):
	def setUp(self):
		self.admin = User.objects.create_user(username="admin_audit", password="pass1234", role=User.ROLE_ADMIN)
		self.teacher = User.objects.create_user(username="teacher_audit", password="pass1234", role=User.ROLE_TEACHER)
		AuditLog.objects.create(event_type="VOTE_SUBMIT", actor_label="V-1", object_type="vote", object_id="1")
		AuditLog.objects.create(event_type="TALLY_EXPORT_CSV", actor=self.admin, actor_label="admin_audit")

	def test_admin_can_filter_by_event_type(self):
		self.client.force_authenticate(user=self.admin)
		response = self.client.get("/api/audit-logs/", {"event_type": "VOTE_SUBMIT"})
		self.assertEqual(response.status_code, 200)
		self.assertEqual(len(response.data), 1)
		self.assertEqual(response.data[0]["actor_label"], "V-1")
		self.assertIsNone(response.data[0]["actor_username"])

	def test_non_admin_is_forbidden(self):
		self.client.force_authenticate(user=self.teacher)
		response = self.client.get("/api/audit-logs/")
		self.assertEqual(response.status_code, 403)
