"""
Accounts app URL configuration.

All routes are namespaced under ``accounts`` and included in the
project-level ``urls.py`` as::

    path('api/accounts/', include('accounts.urls')),

Endpoint Map
------------
Authentication
    POST   /auth/register/              → RegisterView
    POST   /auth/login/                 → LoginView
    POST   /auth/token/refresh/         → TokenRefreshView (SimpleJWT)

Current User Profile ("Me")
    GET    /me/                         → MeView  (retrieve)
    PATCH  /me/                         → MeView  (partial update)

Offices and staff (ADMIN)
    GET    /municipality-roles/         → MunicipalityRoleListView
    POST   /municipality-users/         → MunicipalityUserCreateView
    POST   /external-maintainers/       → ExternalMaintainerCreateView

User administration (ADMIN)
    GET    /users/                      → UserViewSet.list
    GET    /users/{id}/                 → UserViewSet.retrieve
    DELETE /users/{id}/                 → UserViewSet.destroy
    GET    /users/municipality-users/   → UserViewSet.municipality_users
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView

from .views import (
    ExternalMaintainerCreateView,
    LoginView,
    MeView,
    MunicipalityRoleListView,
    MunicipalityUserCreateView,
    RegisterView,
    UserViewSet,
)

app_name = "accounts"

router = DefaultRouter()
router.register(r"users", UserViewSet, basename="user")

urlpatterns = [
    # ── Authentication ───────────────────────────────────────────────
    path("auth/register/", RegisterView.as_view(), name="register"),
    path("auth/login/", LoginView.as_view(), name="login"),
    path(
        "auth/token/refresh/",
        TokenRefreshView.as_view(),
        name="token-refresh",
    ),

    # ── Current User (Me) ───────────────────────────────────────────
    path("me/", MeView.as_view(), name="me"),

    # ── Offices and staff provisioning ──────────────────────────────
    path(
        "municipality-roles/",
        MunicipalityRoleListView.as_view(),
        name="municipality-role-list",
    ),
    path(
        "municipality-users/",
        MunicipalityUserCreateView.as_view(),
        name="municipality-user-create",
    ),
    path(
        "external-maintainers/",
        ExternalMaintainerCreateView.as_view(),
        name="external-maintainer-create",
    ),

    # ── Router-registered viewsets (users/) ─────────────────────────
    path("", include(router.urls)),
]
