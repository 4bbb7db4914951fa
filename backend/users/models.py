from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    ROLE_SUPERADMIN = "SUPERADMIN"
    ROLE_ADMIN = "ADMIN"
    ROLE_TEACHER = "TEACHER"

    ROLES = (
        (ROLE_SUPERADMIN, "Superadministrador"),
        (ROLE_ADMIN, "Administrador"),
        (ROLE_TEACHER, "Docente"),
    )

    ADMIN_ROLES = {ROLE_SUPERADMIN, ROLE_ADMIN}

    role = models.CharField(max_length=20, choices=ROLES)
    email = models.EmailField(unique=True, blank=True, null=True, verbose_name="Correo electrónico")

    REQUIRED_FIELDS = ["email", "role"]

    def __str__(self) -> str:
        return f"{self.username} ({self.get_role_display()})"

    def save(self, *args, **kwargs):
        # UserManager stores a missing email as "", which would collide on the unique index.
        self.email = (self.email or "").strip() or None
        return super().save(*args, **kwargs)

    @property
    def is_portal_admin(self) -> bool:
        return self.is_superuser or self.role in self.ADMIN_ROLES
