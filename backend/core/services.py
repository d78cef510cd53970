"""
Core app Service Layer.

Cross-app, read-only helpers used by the ``core`` endpoints.

- ``SystemConstantsService`` — choice enumerations and engine
  configuration the frontend needs to build forms and filters.
"""

from __future__ import annotations

from typing import Any

from django.apps import apps


class SystemConstantsService:
    """
    Gathers all system-wide choice enumerations, the category → office
    routing table and the municipality offices into a single dict.

    This service is **stateless**: it does not depend on the requesting
    user.
    """

    @staticmethod
    def get_constants() -> dict[str, Any]:
        """Return all system constants as a dict."""
        from accounts.models import RoleType
        from reports.models import Category, ReportStatus
        from reports.routing import get_office_router

        MunicipalityRole = apps.get_model("accounts", "MunicipalityRole")

        to_list = SystemConstantsService._choices_to_list
        router = get_office_router()

        offices = list(
            MunicipalityRole.objects
            .order_by("name")
            .values("id", "name")
        )

        return {
            "report_categories": to_list(Category),
            "report_statuses": to_list(ReportStatus),
            "role_types": to_list(RoleType),
            "category_offices": [
                {"category": category, "office": router.resolve(category)}
                for category in Category.values
            ],
            "default_office": router.default_office,
            "municipality_roles": offices,
        }

    @staticmethod
    def _choices_to_list(
        choices_class: type,
    ) -> list[dict[str, str]]:
        """
        Convert a Django ``TextChoices`` class to a list of
        ``{"value": ..., "label": ...}`` dicts.
        """
        return [
            {"value": str(value), "label": str(label)}
            for value, label in choices_class.choices
        ]
