"""
Accounts Service Layer.

This module is the **single source of truth** for all business logic
within the ``accounts`` app.  Views must remain *thin*: they validate
input through serializers, call a service method, and return the result
wrapped in a DRF ``Response``.

Architecture
------------
- ``UserRegistrationService``   — citizen self-registration.
- ``StaffProvisioningService``  — admin creation of municipality officers
                                  and external maintainers.
- ``MunicipalityRoleService``   — office listing.
- ``CurrentUserService``        — "Me" endpoint helpers.
- ``UserManagementService``     — admin listing, lookup and deletion.
"""

from __future__ import annotations

import logging
from typing import Any

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import ProtectedError, Q, QuerySet

from core.domain.exceptions import Conflict, NotFound

from .models import MunicipalityRole, RoleType

User = get_user_model()

logger = logging.getLogger(__name__)


def _check_unique_credentials(username: str | None, email: str | None) -> None:
    """
    Pre-check uniqueness for deterministic, field-specific errors.

    Raises
    ------
    core.domain.exceptions.Conflict
        If the username or email is already taken.
    """
    conflicts = []
    if User.objects.filter(username=username).exists():
        conflicts.append("username")
    if User.objects.filter(email__iexact=email).exists():
        conflicts.append("email")
    if conflicts:
        raise Conflict(
            f"The following field(s) already exist: {', '.join(conflicts)}."
        )


def _create_account(password: str, **fields: Any) -> User:
    try:
        with transaction.atomic():
            return User.objects.create_user(password=password, **fields)
    except IntegrityError:
        raise Conflict(
            "A user with one of the provided unique fields already exists."
        )


# ═══════════════════════════════════════════════════════════════════
#  Registration Service
# ═══════════════════════════════════════════════════════════════════


class UserRegistrationService:
    """Encapsulates the citizen self-registration flow."""

    @staticmethod
    def register_user(validated_data: dict[str, Any]) -> User:
        """
        Create a new ``CITIZEN`` account.

        Parameters
        ----------
        validated_data : dict
            Cleaned data from ``RegisterRequestSerializer`` containing
            ``username``, ``password``, ``email``, ``first_name``,
            ``last_name``.

        Returns
        -------
        User
            The newly created (and saved) user.

        Raises
        ------
        core.domain.exceptions.Conflict
            If the username or email is already taken.
        """
        data = dict(validated_data)
        data.pop("password_confirm", None)
        password = data.pop("password")

        _check_unique_credentials(data.get("username"), data.get("email"))

        user = _create_account(password, role_type=RoleType.CITIZEN, **data)
        logger.info("Citizen %s registered (pk=%d)", user.username, user.pk)
        return user


# ═══════════════════════════════════════════════════════════════════
#  Staff Provisioning Service
# ═══════════════════════════════════════════════════════════════════


class StaffProvisioningService:
    """
    Administrative creation of the accounts the assignment engine
    selects from: municipality officers (grouped by office) and external
    maintainers (grouped by category).

    Access is restricted to ``ADMIN`` accounts by the views.
    """

    @staticmethod
    def create_municipality_user(validated_data: dict[str, Any]) -> User:
        """
        Create an officer bound to ``validated_data["municipality_role"]``.

        Raises
        ------
        core.domain.exceptions.Conflict
            If the username or email is already taken.
        """
        data = dict(validated_data)
        password = data.pop("password")
        _check_unique_credentials(data.get("username"), data.get("email"))

        user = _create_account(
            password,
            role_type=RoleType.MUNICIPALITY,
            **data,
        )
        logger.info(
            "Municipality user %s created for office '%s'",
            user.username, user.office_name,
        )
        return user

    @staticmethod
    def create_external_maintainer(validated_data: dict[str, Any]) -> User:
        """
        Create an external maintainer serving ``validated_data["category"]``.

        Raises
        ------
        core.domain.exceptions.Conflict
            If the username or email is already taken.
        """
        data = dict(validated_data)
        password = data.pop("password")
        category = data.pop("category")
        _check_unique_credentials(data.get("username"), data.get("email"))

        user = _create_account(
            password,
            role_type=RoleType.EXTERNAL_MAINTAINER,
            maintainer_category=category,
            **data,
        )
        logger.info(
            "External maintainer %s (%s) created for category %s",
            user.username, user.company_name, category,
        )
        return user


# ═══════════════════════════════════════════════════════════════════
#  Municipality Role Service
# ═══════════════════════════════════════════════════════════════════


class MunicipalityRoleService:

    @staticmethod
    def list_roles() -> QuerySet[MunicipalityRole]:
        return MunicipalityRole.objects.order_by("name")


# ═══════════════════════════════════════════════════════════════════
#  Current User Service
# ═══════════════════════════════════════════════════════════════════


class CurrentUserService:
    """Helpers for the ``/me/`` endpoint."""

    @staticmethod
    def get_profile(user: User) -> User:
        return User.objects.select_related("municipality_role").get(pk=user.pk)

    @staticmethod
    def update_profile(user: User, validated_data: dict[str, Any]) -> User:
        """
        Apply the validated fields from ``MeUpdateSerializer`` to ``user``.
        """
        for field, value in validated_data.items():
            setattr(user, field, value)
        user.save(update_fields=list(validated_data.keys()))
        return user


# ═══════════════════════════════════════════════════════════════════
#  User Management Service
# ═══════════════════════════════════════════════════════════════════


class UserManagementService:
    """
    Administrative listing, lookup and deletion of accounts.

    Access is restricted to ``ADMIN`` accounts by the views.  Users still
    referenced by reports or comments are protected at the database level
    and cannot be deleted.
    """

    @staticmethod
    def list_users(
        *,
        role_type: str | None = None,
        is_active: bool | None = None,
        search: str | None = None,
    ) -> QuerySet[User]:
        """
        Return a filtered queryset of users, ordered by username.

        Parameters
        ----------
        role_type : str, optional
            One of ``RoleType``.
        is_active : bool, optional
            Filter by ``is_active`` status.
        search : str, optional
            Case-insensitive match on username, email, first or last name.
        """
        qs = User.objects.select_related("municipality_role").all()

        if role_type:
            qs = qs.filter(role_type=role_type)
        if is_active is not None:
            qs = qs.filter(is_active=is_active)
        if search:
            qs = qs.filter(
                Q(username__icontains=search)
                | Q(email__icontains=search)
                | Q(first_name__icontains=search)
                | Q(last_name__icontains=search)
            )

        return qs.order_by("username")

    @staticmethod
    def list_municipality_users() -> QuerySet[User]:
        """Officers with their office, grouped by office name."""
        return (
            User.objects.select_related("municipality_role")
            .filter(role_type=RoleType.MUNICIPALITY)
            .order_by("municipality_role__name", "username")
        )

    @staticmethod
    def get_user(user_id: int) -> User:
        """
        Raises
        ------
        core.domain.exceptions.NotFound
            If no user has this PK.
        """
        try:
            return User.objects.select_related("municipality_role").get(pk=user_id)
        except User.DoesNotExist:
            raise NotFound(f"User with id {user_id} not found.")

    @staticmethod
    @transaction.atomic
    def delete_user(user_id: int, performed_by: User) -> None:
        """
        Hard-delete an account.

        Raises
        ------
        core.domain.exceptions.NotFound
            If no user has this PK.
        core.domain.exceptions.Conflict
            If ``performed_by`` targets itself, or the user is still
            referenced by reports or comments.
        """
        user = UserManagementService.get_user(user_id)
        if user.pk == performed_by.pk:
            raise Conflict("You cannot delete your own account.")

        try:
            user.delete()
        except ProtectedError:
            raise Conflict(
                f"User {user_id} is referenced by reports or comments "
                f"and cannot be deleted."
            )
        logger.info("User %s (pk=%d) deleted by %s", user.username, user_id, performed_by)
