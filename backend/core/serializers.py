"""
Core app serializers.

**Response-only** serializers for the system constants endpoint.  They work
exclusively with plain Python dicts produced by the service layer.
"""

from __future__ import annotations

from rest_framework import serializers


class ChoiceItemSerializer(serializers.Serializer):
    """
    A single key-label pair representing one choice/enum option.

    Example::

        {"value": "WASTE", "label": "Waste"}
    """

    value = serializers.CharField(
        help_text="Machine-readable value to send in API requests.",
    )
    label = serializers.CharField(
        help_text="Human-readable display label for the UI.",
    )


class CategoryOfficeSerializer(serializers.Serializer):
    """One row of the category → office routing table."""

    category = serializers.CharField()
    office = serializers.CharField()


class MunicipalityRoleItemSerializer(serializers.Serializer):
    id = serializers.IntegerField(help_text="MunicipalityRole PK.")
    name = serializers.CharField(help_text="Office / role name.")


class SystemConstantsSerializer(serializers.Serializer):
    """
    Top-level response serializer for ``GET /api/core/constants/``.

    Response shape::

        {
            "report_categories": [{"value": "WASTE", "label": "Waste"}, ...],
            "report_statuses": [...],
            "role_types": [...],
            "category_offices": [
                {"category": "WASTE",
                 "office": "sanitation and waste management officer"},
                ...
            ],
            "default_office": "municipal administrator",
            "municipality_roles": [{"id": 1, "name": "..."}, ...]
        }
    """

    report_categories = ChoiceItemSerializer(many=True)
    report_statuses = ChoiceItemSerializer(many=True)
    role_types = ChoiceItemSerializer(many=True)
    category_offices = CategoryOfficeSerializer(
        many=True,
        help_text="Office each report category is routed to on approval.",
    )
    default_office = serializers.CharField(
        help_text="Office used for categories missing from the routing table.",
    )
    municipality_roles = MunicipalityRoleItemSerializer(many=True)
