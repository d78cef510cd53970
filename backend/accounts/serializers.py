"""
Accounts app serializers.

Contains all Request and Response serializers for the accounts API.
Serializers handle field definitions, read/write constraints, and
basic validation.  **No business logic** lives here; all domain rules
are delegated to ``services.py``.
"""

from __future__ import annotations

from typing import Any

from django.contrib.auth import authenticate, get_user_model
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import MunicipalityRole, RoleType

User = get_user_model()


# ═══════════════════════════════════════════════════════════════════
#  Authentication Serializers
# ═══════════════════════════════════════════════════════════════════


class RegisterRequestSerializer(serializers.ModelSerializer):
    """
    Validates citizen self-registration data.

    Required fields: username, password, password_confirm, email,
    first_name, last_name.  The response after a successful
    registration is handled by ``UserDetailSerializer``.
    """

    password = serializers.CharField(
        write_only=True,
        min_length=8,
        style={"input_type": "password"},
        help_text="Minimum 8 characters.",
    )
    password_confirm = serializers.CharField(
        write_only=True,
        style={"input_type": "password"},
        help_text="Must match 'password'.",
    )

    class Meta:
        model = User
        fields = [
            "username",
            "password",
            "password_confirm",
            "email",
            "first_name",
            "last_name",
        ]
        extra_kwargs = {
            "email": {"required": True},
            "first_name": {"required": True},
            "last_name": {"required": True},
        }

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        if attrs["password"] != attrs["password_confirm"]:
            raise serializers.ValidationError(
                {"password_confirm": "Passwords do not match."}
            )
        attrs.pop("password_confirm")
        return attrs


class LoginRequestSerializer(serializers.Serializer):
    """
    Accepts multi-field login credentials.

    The client sends ``identifier`` (a username or an email) together
    with ``password``.  Used for the OpenAPI request schema.
    """

    identifier = serializers.CharField(
        help_text="Username or Email.",
    )
    password = serializers.CharField(
        write_only=True,
        style={"input_type": "password"},
    )


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    Custom SimpleJWT serializer that:

    1. Accepts ``identifier`` + ``password`` instead of
       ``username`` + ``password``.
    2. Resolves the user via the ``MultiFieldAuthBackend``.
    3. Injects role claims (``role_type``, ``office``,
       ``maintainer_category``) into the token payload.
    """

    username_field = "identifier"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # Replace SimpleJWT's default username field with 'identifier'
        self.fields.pop(self.username_field, None)
        self.fields["identifier"] = serializers.CharField(
            help_text="Username or Email.",
        )

    @classmethod
    def get_token(cls, user) -> Any:
        token = super().get_token(user)
        token["role_type"] = user.role_type
        token["office"] = user.office_name
        token["maintainer_category"] = user.maintainer_category or None
        return token

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        """
        Authenticate using the custom ``MultiFieldAuthBackend``.

        Returns a dict containing ``access`` and ``refresh``; the
        authenticated user is exposed as ``self.user``.
        """
        user = authenticate(
            request=self.context.get("request"),
            identifier=attrs.get("identifier"),
            password=attrs.get("password"),
        )

        if user is None:
            raise serializers.ValidationError(
                {"detail": "Invalid credentials."},
                code="authentication",
            )

        refresh = self.get_token(user)
        self.user = user
        return {
            "access": str(refresh.access_token),
            "refresh": str(refresh),
        }


# ═══════════════════════════════════════════════════════════════════
#  Municipality Role Serializers
# ═══════════════════════════════════════════════════════════════════


class MunicipalityRoleSerializer(serializers.ModelSerializer):
    class Meta:
        model = MunicipalityRole
        fields = ["id", "name", "description"]
        read_only_fields = fields


# ═══════════════════════════════════════════════════════════════════
#  User Serializers
# ═══════════════════════════════════════════════════════════════════


class UserDetailSerializer(serializers.ModelSerializer):
    """
    Full user representation (used in me, login and registration
    responses).  Includes the office for municipality officers and the
    company/category pair for external maintainers.
    """

    municipality_role_detail = MunicipalityRoleSerializer(
        source="municipality_role",
        read_only=True,
    )

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "first_name",
            "last_name",
            "is_active",
            "date_joined",
            "role_type",
            "municipality_role",
            "municipality_role_detail",
            "company_name",
            "maintainer_category",
        ]
        read_only_fields = fields


class UserListSerializer(serializers.ModelSerializer):
    """Compact user row for the admin listings."""

    office = serializers.CharField(source="office_name", read_only=True, default=None)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "first_name",
            "last_name",
            "is_active",
            "role_type",
            "office",
            "company_name",
            "maintainer_category",
        ]
        read_only_fields = fields


class UserFilterSerializer(serializers.Serializer):
    """Query parameters accepted by ``GET /api/accounts/users/``."""

    role_type = serializers.ChoiceField(choices=RoleType.choices, required=False)
    is_active = serializers.BooleanField(required=False, allow_null=True, default=None)
    search = serializers.CharField(required=False, allow_blank=True)


class MeUpdateSerializer(serializers.ModelSerializer):
    """
    Allows the authenticated user to update limited profile fields.
    Role and assignment fields cannot be self-modified.
    """

    class Meta:
        model = User
        fields = ["email", "first_name", "last_name"]

    def validate_email(self, value: str) -> str:
        if (
            self.instance
            and User.objects.exclude(pk=self.instance.pk)
            .filter(email__iexact=value)
            .exists()
        ):
            raise serializers.ValidationError(
                "This email is already in use by another account."
            )
        return value


class _StaffAccountSerializer(serializers.Serializer):
    """Shared credential fields for admin-provisioned accounts."""

    username = serializers.CharField(max_length=150)
    password = serializers.CharField(
        write_only=True,
        min_length=8,
        style={"input_type": "password"},
    )
    email = serializers.EmailField()
    first_name = serializers.CharField(max_length=150)
    last_name = serializers.CharField(max_length=150)


class MunicipalityUserCreateSerializer(_StaffAccountSerializer):
    """
    Payload for ``POST /api/accounts/municipality-users/``.

    ``municipality_role`` is the PK of an existing office.
    """

    municipality_role = serializers.PrimaryKeyRelatedField(
        queryset=MunicipalityRole.objects.all(),
        help_text="PK of the office the officer belongs to.",
    )


class ExternalMaintainerCreateSerializer(_StaffAccountSerializer):
    """
    Payload for ``POST /api/accounts/external-maintainers/``.

    ``category`` must be one of the report categories; it decides which
    reports the contractor can be delegated.
    """

    company_name = serializers.CharField(max_length=255)
    category = serializers.CharField(max_length=50)

    def validate_category(self, value: str) -> str:
        from reports.models import Category

        if value not in Category.values:
            raise serializers.ValidationError(
                f"Invalid category. Valid categories: {', '.join(Category.values)}."
            )
        return value
