"""
Accounts app views.

All views follow the **Thin View** pattern: validate input via
serializers, delegate to the service layer, and return the result
wrapped in a DRF ``Response``.

View Map
--------
- ``RegisterView``                — POST /auth/register/
- ``LoginView``                   — POST /auth/login/
- ``MeView``                      — GET / PATCH /me/
- ``MunicipalityRoleListView``    — GET /municipality-roles/
- ``MunicipalityUserCreateView``  — POST /municipality-users/
- ``ExternalMaintainerCreateView`` — POST /external-maintainers/
- ``UserViewSet``                 — GET /users/, GET / DELETE /users/{id}/,
                                    GET /users/municipality-users/
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import generics, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from core.domain.access import require_role

from .models import RoleType
from .serializers import (
    CustomTokenObtainPairSerializer,
    ExternalMaintainerCreateSerializer,
    LoginRequestSerializer,
    MeUpdateSerializer,
    MunicipalityRoleSerializer,
    MunicipalityUserCreateSerializer,
    RegisterRequestSerializer,
    UserDetailSerializer,
    UserFilterSerializer,
    UserListSerializer,
)
from .services import (
    CurrentUserService,
    MunicipalityRoleService,
    StaffProvisioningService,
    UserManagementService,
    UserRegistrationService,
)


# ═══════════════════════════════════════════════════════════════════
#  Authentication Views
# ═══════════════════════════════════════════════════════════════════


class RegisterView(generics.CreateAPIView):
    """
    POST /api/accounts/auth/register/

    Public endpoint.  Creates a new ``CITIZEN`` account.

    Request body  → ``RegisterRequestSerializer``
    Response body → ``UserDetailSerializer`` (201 Created)
    """

    permission_classes = [AllowAny]
    serializer_class = RegisterRequestSerializer

    def create(self, request: Request, *args, **kwargs) -> Response:
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = UserRegistrationService.register_user(serializer.validated_data)
        return Response(UserDetailSerializer(user).data, status=status.HTTP_201_CREATED)


class LoginView(APIView):
    """
    POST /api/accounts/auth/login/

    Public endpoint.  Authenticates a user via username or email plus
    password and returns ``{"access", "refresh", "user"}``.
    Invalid credentials produce HTTP 400.
    """

    permission_classes = [AllowAny]

    @extend_schema(request=LoginRequestSerializer, tags=["Auth"])
    def post(self, request: Request) -> Response:
        serializer = CustomTokenObtainPairSerializer(
            data=request.data,
            context={"request": request},
        )
        serializer.is_valid(raise_exception=True)

        payload = dict(serializer.validated_data)
        payload["user"] = UserDetailSerializer(serializer.user).data
        return Response(payload, status=status.HTTP_200_OK)


# ═══════════════════════════════════════════════════════════════════
#  Current User ("Me") View
# ═══════════════════════════════════════════════════════════════════


class MeView(APIView):
    """
    GET   /api/accounts/me/  → Retrieve current user profile.
    PATCH /api/accounts/me/  → Update own name / email.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(responses=UserDetailSerializer, tags=["Auth"])
    def get(self, request: Request) -> Response:
        user = CurrentUserService.get_profile(request.user)
        return Response(UserDetailSerializer(user).data, status=status.HTTP_200_OK)

    @extend_schema(request=MeUpdateSerializer, responses=UserDetailSerializer, tags=["Auth"])
    def patch(self, request: Request) -> Response:
        serializer = MeUpdateSerializer(
            instance=request.user, data=request.data, partial=True,
        )
        serializer.is_valid(raise_exception=True)
        user = CurrentUserService.update_profile(
            request.user, serializer.validated_data,
        )
        return Response(UserDetailSerializer(user).data, status=status.HTTP_200_OK)


# ═══════════════════════════════════════════════════════════════════
#  Municipality offices & staff provisioning
# ═══════════════════════════════════════════════════════════════════


class MunicipalityRoleListView(generics.ListAPIView):
    """GET /api/accounts/municipality-roles/"""

    permission_classes = [IsAuthenticated]
    serializer_class = MunicipalityRoleSerializer
    pagination_class = None

    def get_queryset(self):
        return MunicipalityRoleService.list_roles()


class MunicipalityUserCreateView(APIView):
    """
    POST /api/accounts/municipality-users/

    ``ADMIN`` only.  Creates a municipality officer bound to an office.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(request=MunicipalityUserCreateSerializer, responses=UserDetailSerializer, tags=["Staff"])
    def post(self, request: Request) -> Response:
        require_role(request.user, RoleType.ADMIN)
        serializer = MunicipalityUserCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = StaffProvisioningService.create_municipality_user(
            serializer.validated_data,
        )
        return Response(UserDetailSerializer(user).data, status=status.HTTP_201_CREATED)


class ExternalMaintainerCreateView(APIView):
    """
    POST /api/accounts/external-maintainers/

    ``ADMIN`` only.  Creates an external maintainer for one category.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(request=ExternalMaintainerCreateSerializer, responses=UserDetailSerializer, tags=["Staff"])
    def post(self, request: Request) -> Response:
        require_role(request.user, RoleType.ADMIN)
        serializer = ExternalMaintainerCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = StaffProvisioningService.create_external_maintainer(
            serializer.validated_data,
        )
        return Response(UserDetailSerializer(user).data, status=status.HTTP_201_CREATED)


# ═══════════════════════════════════════════════════════════════════
#  User administration
# ═══════════════════════════════════════════════════════════════════


class UserViewSet(viewsets.ViewSet):
    """
    /api/accounts/users/

    ``ADMIN`` only.  List, retrieve and delete accounts, plus the
    officer listing grouped by office.

    All heavy lifting is delegated to ``UserManagementService``.
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    @extend_schema(parameters=[UserFilterSerializer], responses=UserListSerializer(many=True), tags=["Staff"])
    def list(self, request: Request) -> Response:
        """
        GET /api/accounts/users/

        Optional query-param filters: ``role_type``, ``is_active``,
        ``search``.
        """
        require_role(request.user, RoleType.ADMIN)
        filters = UserFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        users = UserManagementService.list_users(**filters.validated_data)
        return Response(UserListSerializer(users, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(responses=UserDetailSerializer, tags=["Staff"])
    def retrieve(self, request: Request, pk: str = None) -> Response:
        """GET /api/accounts/users/{id}/"""
        require_role(request.user, RoleType.ADMIN)
        user = UserManagementService.get_user(int(pk))
        return Response(UserDetailSerializer(user).data, status=status.HTTP_200_OK)

    @extend_schema(responses={204: None}, tags=["Staff"])
    def destroy(self, request: Request, pk: str = None) -> Response:
        """
        DELETE /api/accounts/users/{id}/

        Returns 409 ``Conflict`` for the caller's own account and for users
        still referenced by reports or comments.
        """
        require_role(request.user, RoleType.ADMIN)
        UserManagementService.delete_user(int(pk), performed_by=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(responses=UserListSerializer(many=True), tags=["Staff"])
    @action(detail=False, methods=["get"], url_path="municipality-users")
    def municipality_users(self, request: Request) -> Response:
        """GET /api/accounts/users/municipality-users/"""
        require_role(request.user, RoleType.ADMIN)
        users = UserManagementService.list_municipality_users()
        return Response(UserListSerializer(users, many=True).data, status=status.HTTP_200_OK)
