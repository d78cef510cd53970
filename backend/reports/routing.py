"""
Category → office routing.

Each report category is handled by one municipal office.  The mapping is
configured in ``settings.REPORTS["CATEGORY_OFFICE_MAP"]`` and frozen into
an ``OfficeRouter`` at construction; categories missing from the mapping
fall back to ``settings.REPORTS["DEFAULT_OFFICE"]``.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from django.conf import settings

DEFAULT_OFFICE: str = "municipal administrator"

DEFAULT_CATEGORY_OFFICE_MAP: Mapping[str, str] = MappingProxyType({
    "WATER_SUPPLY_DRINKING_WATER": "public works project manager",
    "ARCHITECTURAL_BARRIERS": "urban planning specialist",
    "SEWER_SYSTEM": "public works project manager",
    "PUBLIC_LIGHTING": "technical office staff member",
    "WASTE": "sanitation and waste management officer",
    "ROAD_SIGNS_TRAFFIC_LIGHTS": "traffic and mobility coordinator",
    "ROADS_URBAN_FURNISHINGS": "public works project manager",
    "PUBLIC_GREEN_AREAS_PLAYGROUNDS": "parks and green spaces officer",
    "OTHER": "municipal administrator",
})


class OfficeRouter:
    """Immutable category → office lookup with a default office."""

    def __init__(
        self,
        mapping: Mapping[str, str],
        default_office: str = DEFAULT_OFFICE,
    ) -> None:
        self._mapping = MappingProxyType(dict(mapping))
        self.default_office = default_office

    @property
    def mapping(self) -> Mapping[str, str]:
        return self._mapping

    def resolve(self, category: str) -> str:
        """Return the office responsible for ``category``."""
        return self._mapping.get(category, self.default_office)


def get_office_router() -> OfficeRouter:
    """Build an ``OfficeRouter`` from the ``REPORTS`` settings dict."""
    config = getattr(settings, "REPORTS", {})
    return OfficeRouter(
        config.get("CATEGORY_OFFICE_MAP", DEFAULT_CATEGORY_OFFICE_MAP),
        config.get("DEFAULT_OFFICE", DEFAULT_OFFICE),
    )
