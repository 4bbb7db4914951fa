from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import AuditLogViewSet

router = DefaultRouter()
router.trailing_slash = "/?"
router.register(r"audit-logs", AuditLogViewSet, basename="audit-log")

urlpatterns = [
	path("", include(router.urls)),
]
