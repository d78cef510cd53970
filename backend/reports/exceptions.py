"""
Reports engine error taxonomy.

Every failure the engine can report is its own exception class, derived
from the ``core.domain.exceptions`` bases so the global exception handler
maps it to an HTTP status.  The class name is the error ``code``.

Kind                       Base                    HTTP
-------------------------  ----------------------  ----
TitleRequired, ...         ReportValidationError   400
InvalidStatus              DomainError             400
RejectionReasonRequired    DomainError             400
InvalidAuthorType          DomainError             400
CommentContentRequired     DomainError             400
NotAuthorized              PermissionDenied        403
RoleNotPermitted           PermissionDenied        403
NotAssigned                PermissionDenied        403
NotFound                   (core)                  404
InvalidTransition          (core)                  409
NoOfficerAvailable         Conflict                409
NoMaintainersAvailable     Conflict                409
ReportResolved             Conflict                409
"""

from __future__ import annotations

from typing import Any, Sequence

from core.domain.exceptions import (
    Conflict,
    DomainError,
    InvalidTransition,
    NotFound,
    PermissionDenied,
)

__all__ = [
    "CategoryRequired",
    "CommentContentRequired",
    "CoordinatesRequired",
    "DescriptionRequired",
    "InvalidAuthorType",
    "InvalidCategory",
    "InvalidStatus",
    "InvalidTransition",
    "NoMaintainersAvailable",
    "NoOfficerAvailable",
    "NotAssigned",
    "NotAuthorized",
    "NotFound",
    "PhotosRequired",
    "RejectionReasonRequired",
    "ReportResolved",
    "ReportValidationError",
    "RoleNotPermitted",
    "TitleRequired",
    "TooManyPhotos",
]


# ── Validation ───────────────────────────────────────────────────────

class ReportValidationError(DomainError):
    """A new-report payload failed validation."""


class TitleRequired(ReportValidationError):
    default_message = "Title is required."


class DescriptionRequired(ReportValidationError):
    default_message = "Description is required."


class CategoryRequired(ReportValidationError):
    default_message = "Category is required."


class InvalidCategory(ReportValidationError):

    def __init__(self, valid_categories: Sequence[str], message: str | None = None) -> None:
        self.valid_categories = list(valid_categories)
        super().__init__(
            message
            or f"Invalid category. Valid categories: {', '.join(self.valid_categories)}."
        )

    def extra(self) -> dict[str, Any]:
        return {"valid_categories": self.valid_categories}


class CoordinatesRequired(ReportValidationError):
    default_message = "Latitude and longitude are required."


class PhotosRequired(ReportValidationError):
    default_message = "At least one photo is required."


class TooManyPhotos(ReportValidationError):
    default_message = "A report can have at most 3 photos."


# ── Transitions ──────────────────────────────────────────────────────

class InvalidStatus(DomainError):

    def __init__(self, status: Any, message: str | None = None) -> None:
        self.status = status
        super().__init__(message or f"Unknown status '{status}'.")

    def extra(self) -> dict[str, Any]:
        return {"status": str(self.status)}


class RejectionReasonRequired(DomainError):
    default_message = "A rejection reason is required."


class NoOfficerAvailable(Conflict):

    def __init__(self, office: str, message: str | None = None) -> None:
        self.office = office
        super().__init__(message or f"No officer available for office '{office}'.")

    def extra(self) -> dict[str, Any]:
        return {"office": self.office}


class NoMaintainersAvailable(Conflict):

    def __init__(self, category: str, message: str | None = None) -> None:
        self.category = category
        super().__init__(
            message or f"No external maintainers available for category '{category}'."
        )

    def extra(self) -> dict[str, Any]:
        return {"category": self.category}


class NotAuthorized(PermissionDenied):
    default_message = "This report is not delegated to you."


# ── Comments ─────────────────────────────────────────────────────────

class CommentContentRequired(DomainError):
    default_message = "Comment content is required."


class ReportResolved(Conflict):
    default_message = "Comments cannot be added to a resolved report."


class RoleNotPermitted(PermissionDenied):
    default_message = "This role cannot access internal comments."


class NotAssigned(PermissionDenied):
    default_message = "You are not the maintainer assigned to this report."


class InvalidAuthorType(DomainError):

    def __init__(self, author_type: Any = None, message: str | None = None) -> None:
        self.author_type = author_type
        super().__init__(message or f"Invalid author type '{author_type}'.")
