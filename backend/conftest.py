"""
Root conftest.py — shared fixtures for the entire test suite.

Provides:
  - ``api_client`` fixture returning a DRF ``APIClient``.
  - ``create_user`` factory fixture for creating test users of any role.
  - ``office`` factory fixture for municipality offices.
  - ``auth_header`` fixture for authenticated requests (JWT).
  - ``make_image`` factory for small uploadable GIF files.
  - An autouse fixture switching file storage to memory.
"""

from __future__ import annotations

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from rest_framework.test import APIClient

# Smallest valid GIF (1x1 transparent pixel).
TINY_GIF = (
    b"GIF89a\x01\x00\x01\x00\x80\x00\x00\x00\x00\x00\xff\xff\xff!"
    b"\xf9\x04\x01\x00\x00\x00\x00,\x00\x00\x00\x00\x01\x00\x01\x00"
    b"\x00\x02\x02D\x01\x00;"
)


@pytest.fixture(autouse=True)
def _in_memory_storage(settings):
    settings.STORAGES = {
        "default": {"BACKEND": "django.core.files.storage.InMemoryStorage"},
        "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
    }


@pytest.fixture()
def api_client() -> APIClient:
    """Unauthenticated DRF test client."""
    return APIClient()


@pytest.fixture()
def office(db):
    """
    Factory fixture returning the ``MunicipalityRole`` with the given name,
    creating it on first use.
    """
    from accounts.models import MunicipalityRole

    def _factory(name: str = "public works project manager"):
        role, _ = MunicipalityRole.objects.get_or_create(name=name)
        return role

    return _factory


@pytest.fixture()
def create_user(db):
    """
    Factory fixture that creates a user with sensible defaults.

    Usage::

        def test_something(create_user, office):
            citizen = create_user(username="alice")
            officer = create_user(
                role_type=RoleType.MUNICIPALITY,
                municipality_role=office("urban planning specialist"),
            )
            contractor = create_user(
                role_type=RoleType.EXTERNAL_MAINTAINER,
                maintainer_category="WASTE",
                company_name="CleanCo",
            )
    """
    from accounts.models import RoleType, User

    _counter = 0

    def _factory(
        *,
        username: str | None = None,
        password: str = "TestPass123!",
        email: str | None = None,
        role_type: str = RoleType.CITIZEN,
        municipality_role=None,
        maintainer_category: str = "",
        company_name: str = "",
        is_active: bool = True,
        **kwargs,
    ) -> User:
        nonlocal _counter
        _counter += 1
        if username is None:
            username = f"testuser{_counter}"
        if email is None:
            email = f"{username}@test.local"

        return User.objects.create_user(
            username=username,
            password=password,
            email=email,
            role_type=role_type,
            municipality_role=municipality_role,
            maintainer_category=maintainer_category,
            company_name=company_name,
            is_active=is_active,
            **kwargs,
        )

    return _factory


@pytest.fixture()
def auth_header(api_client):
    """
    Return a helper that logs a user in via the JWT endpoint and
    attaches the access token to ``api_client``.
    """
    from django.urls import reverse

    def _login(username: str, password: str = "TestPass123!") -> APIClient:
        response = api_client.post(
            reverse("accounts:login"),
            {"identifier": username, "password": password},
            format="json",
        )
        assert response.status_code == 200, response.content
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
        return api_client

    return _login


@pytest.fixture()
def make_image():
    """Factory returning a fresh uploadable 1x1 GIF."""

    def _factory(name: str = "photo.gif") -> SimpleUploadedFile:
        return SimpleUploadedFile(name, TINY_GIF, content_type="image/gif")

    return _factory
