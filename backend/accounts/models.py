"""
Accounts app models.

Defines the municipality offices (``MunicipalityRole``) and a custom User
model that extends Django's ``AbstractUser``.  Every account holds exactly
one ``role_type``:

- ``CITIZEN``              — submits reports.
- ``MUNICIPALITY``         — municipal officer, belongs to one office.
- ``EXTERNAL_MAINTAINER``  — contractor scoped to one report category.
- ``ADMIN``                — provisions staff accounts.
"""

from django.contrib.auth.models import AbstractUser
from django.db import models


class RoleType(models.TextChoices):
    CITIZEN = "CITIZEN", "Citizen"
    MUNICIPALITY = "MUNICIPALITY", "Municipality"
    EXTERNAL_MAINTAINER = "EXTERNAL_MAINTAINER", "External Maintainer"
    ADMIN = "ADMIN", "Administrator"


class MunicipalityRole(models.Model):
    """
    Municipal office / role an officer belongs to.

    The name is the routing key used when a report is approved: the
    category of the report resolves to an office name, and the officers
    of that office form the assignment candidate pool.

    Default offices are seeded via ``manage.py setup_municipality_roles``.
    """

    name = models.CharField(
        max_length=100,
        unique=True,
        verbose_name="Office Name",
    )
    description = models.TextField(
        blank=True,
        default="",
        verbose_name="Description",
    )

    class Meta:
        verbose_name = "Municipality Role"
        verbose_name_plural = "Municipality Roles"
        ordering = ["name"]

    def __str__(self):
        return self.name


class User(AbstractUser):
    """
    Custom user model for the civic reporting system.

    Citizens self-register; municipality officers and external
    maintainers are created by an administrator.  Login is supported via
    either ``username`` or ``email`` together with the password.
    """

    email = models.EmailField(
        unique=True,
        verbose_name="Email Address",
    )
    role_type = models.CharField(
        max_length=30,
        choices=RoleType.choices,
        default=RoleType.CITIZEN,
        verbose_name="Role Type",
        db_index=True,
    )

    # ── Municipality officer ─────────────────────────────────────────
    municipality_role = models.ForeignKey(
        MunicipalityRole,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="officers",
        verbose_name="Office",
    )

    # ── External maintainer ──────────────────────────────────────────
    company_name = models.CharField(
        max_length=255,
        blank=True,
        default="",
        verbose_name="Company Name",
    )
    maintainer_category = models.CharField(
        max_length=50,
        blank=True,
        default="",
        verbose_name="Service Category",
        db_index=True,
        help_text="Report category this contractor handles.",
    )

    REQUIRED_FIELDS = ["email", "first_name", "last_name"]

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"

    def __str__(self):
        return f"{self.username} ({self.get_role_type_display()})"

    # ── Helper predicates for role checks ────────────────────────────

    @property
    def is_citizen(self) -> bool:
        return self.role_type == RoleType.CITIZEN

    @property
    def is_municipality(self) -> bool:
        return self.role_type == RoleType.MUNICIPALITY

    @property
    def is_external_maintainer(self) -> bool:
        return self.role_type == RoleType.EXTERNAL_MAINTAINER

    @property
    def office_name(self) -> str | None:
        """Name of the officer's office, or ``None`` when unassigned."""
        return self.municipality_role.name if self.municipality_role else None
