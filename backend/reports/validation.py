"""
New-report validation.

``ReportValidator.validate`` checks a candidate payload in a fixed order
and raises the first failure found (failures are not accumulated):

    1. title missing or blank           → TitleRequired
    2. description missing or blank     → DescriptionRequired
    3. category missing                 → CategoryRequired
    4. category not a known value       → InvalidCategory (carries the list)
    5. latitude or longitude missing    → CoordinatesRequired
    6. fewer than ``min_photos`` photos → PhotosRequired
    7. more than ``max_photos`` photos  → TooManyPhotos

The validator is pure: no storage access, no side effects.  Any
``status`` key on the payload is ignored; new reports always start in
``PENDING_APPROVAL``.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from django.conf import settings

from .exceptions import (
    CategoryRequired,
    CoordinatesRequired,
    DescriptionRequired,
    InvalidCategory,
    PhotosRequired,
    TitleRequired,
    TooManyPhotos,
)
from .models import Category

MIN_PHOTOS: int = 1
MAX_PHOTOS: int = 3


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


class ReportValidator:
    """Fixed-order validator for new-report payloads."""

    def __init__(
        self,
        valid_categories: Iterable[str] | None = None,
        min_photos: int = MIN_PHOTOS,
        max_photos: int = MAX_PHOTOS,
    ) -> None:
        self.valid_categories = tuple(
            Category.values if valid_categories is None else valid_categories
        )
        self.min_photos = min_photos
        self.max_photos = max_photos

    def validate(self, payload: Mapping[str, Any]) -> None:
        """
        Raise the first validation failure for ``payload``; return
        ``None`` when it is valid.

        ``payload["photos"]`` is any sized collection of photo references
        (uploaded files in the HTTP layer); only its length is inspected.
        """
        if _is_blank(payload.get("title")):
            raise TitleRequired()
        if _is_blank(payload.get("description")):
            raise DescriptionRequired()

        category = payload.get("category")
        if _is_blank(category):
            raise CategoryRequired()
        if category not in self.valid_categories:
            raise InvalidCategory(self.valid_categories)

        if _is_blank(payload.get("latitude")) or _is_blank(payload.get("longitude")):
            raise CoordinatesRequired()

        photo_count = len(payload.get("photos") or ())
        if photo_count < self.min_photos:
            raise PhotosRequired()
        if photo_count > self.max_photos:
            raise TooManyPhotos()


def get_report_validator() -> ReportValidator:
    """Build a ``ReportValidator`` from the ``REPORTS`` settings dict."""
    config = getattr(settings, "REPORTS", {})
    return ReportValidator(
        min_photos=config.get("MIN_PHOTOS", MIN_PHOTOS),
        max_photos=config.get("MAX_PHOTOS", MAX_PHOTOS),
    )


def validate_new_report(payload: Mapping[str, Any]) -> None:
    """Validate ``payload`` against the configured photo limits."""
    get_report_validator().validate(payload)
