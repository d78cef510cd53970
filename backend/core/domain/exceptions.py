"""
core.domain.exceptions — Domain-specific exception hierarchy.

These exceptions represent business-rule violations inside service layers.
They are deliberately **not** DRF exceptions so that the domain layer stays
framework-agnostic.  ``core.domain.exception_handler`` maps them to HTTP
responses.

Mapping cheatsheet
------------------
┌─────────────────────┬──────┐
│ Domain Exception    │ HTTP │
├─────────────────────┼──────┤
│ DomainError         │ 400  │
│ PermissionDenied    │ 403  │
│ NotFound            │ 404  │
│ Conflict            │ 409  │
│ InvalidTransition   │ 409  │
└─────────────────────┴──────┘

Every class carries a machine-readable ``code`` (the class name by default)
and may expose structured values through ``extra()``.  Callers switch on the
class or the code, never on the message text.

Usage inside a service::

    from core.domain.exceptions import InvalidTransition

    if report.status != ReportStatus.PENDING_APPROVAL:
        raise InvalidTransition(current=report.status, target="ASSIGNED")
"""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """
    Base class for all domain / business-rule errors.

    Catch this at the view boundary and convert to a 400 Bad Request.
    """

    code: str = "DomainError"
    default_message: str = "A business rule was violated."

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "code" not in cls.__dict__:
            cls.code = cls.__name__

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def extra(self) -> dict[str, Any]:
        """Structured values carried by the error (empty by default)."""
        return {}


class PermissionDenied(DomainError):
    """
    The authenticated user does not have the required role for this
    operation.

    Maps to HTTP 403.
    """

    default_message = "You do not have permission to perform this action."


class NotFound(DomainError):
    """
    The requested resource does not exist (or is not visible to the
    requesting user given their role scope).

    Maps to HTTP 404.
    """

    default_message = "The requested resource was not found."


class Conflict(DomainError):
    """
    The operation conflicts with the current state of the resource.

    Maps to HTTP 409.
    """

    default_message = "The operation conflicts with the current state."


class InvalidTransition(Conflict):
    """
    A state-machine transition that is not allowed from the current status.

    Inherits from ``Conflict`` because an invalid transition IS a conflict
    with the resource's current state.  Maps to HTTP 409.

    Example::

        raise InvalidTransition(
            current="ASSIGNED",
            target="RESOLVED",
            reason="Work must be started first.",
        )
    """

    def __init__(
        self,
        message: str | None = None,
        *,
        current: str | None = None,
        target: str | None = None,
        reason: str | None = None,
    ) -> None:
        if message is None:
            parts = ["Invalid state transition"]
            if current and target:
                parts.append(f"from '{current}' to '{target}'")
            elif current:
                parts.append(f"from '{current}'")
            if reason:
                parts.append(f"({reason})")
            message = " ".join(parts) + "."
        super().__init__(message)
        self.current = current
        self.target = target
        self.reason = reason

    def extra(self) -> dict[str, Any]:
        return {"current": self.current}
