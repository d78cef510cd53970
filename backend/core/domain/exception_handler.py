"""
core.domain.exception_handler — DRF ``EXCEPTION_HANDLER``.

Renders ``core.domain.exceptions`` (and the per-app subclasses built on
them) as::

    {"detail": "<message>", "code": "<ErrorKind>", ...extra}

Anything DRF already understands (validation, authentication, throttling)
keeps DRF's own rendering.  A ``ProtectedError`` escaping a delete is
reported as a ``Conflict``.
"""

from __future__ import annotations

import logging

from django.db.models import ProtectedError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_default_handler

from core.domain.exceptions import (
    Conflict,
    DomainError,
    NotFound,
    PermissionDenied,
)

logger = logging.getLogger(__name__)

# Base class → HTTP status; subclasses resolve through their MRO.
HTTP_STATUS_BY_BASE: dict[type[DomainError], int] = {
    PermissionDenied: 403,
    NotFound: 404,
    Conflict: 409,
    DomainError: 400,
}


def status_for(exc: DomainError) -> int:
    for klass in type(exc).__mro__:
        if klass in HTTP_STATUS_BY_BASE:
            return HTTP_STATUS_BY_BASE[klass]
    return 400


def render_domain_error(exc: DomainError) -> Response:
    body = {"detail": str(exc), "code": exc.code, **exc.extra()}
    return Response(body, status=status_for(exc))


def domain_exception_handler(exc: Exception, context: dict) -> Response | None:
    response = drf_default_handler(exc, context)
    if response is not None:
        return response

    if isinstance(exc, ProtectedError):
        exc = Conflict("The resource is still referenced and cannot be deleted.")

    if not isinstance(exc, DomainError):
        return None

    logger.warning(
        "Rejected request [%s] in %s: %s",
        exc.code,
        type(context.get("view")).__name__ if context.get("view") else "unknown",
        exc,
    )
    return render_domain_error(exc)
