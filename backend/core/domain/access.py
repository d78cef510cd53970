"""
core.domain.access — Role guards and role-scoped queryset selectors.

Every account carries exactly one ``role_type``
(``CITIZEN | MUNICIPALITY | EXTERNAL_MAINTAINER | ADMIN``).  Views call
``require_role`` before delegating to a service; services call
``apply_role_scope`` to narrow querysets by the caller's role.

Per-app scoping logic does NOT live here.  Each app's ``services.py`` owns
its own scope-rules mapping.

Usage in an app's service layer::

    from core.domain.access import apply_role_scope

    REPORT_SCOPE_RULES = {
        "MUNICIPALITY":        lambda qs, u: qs,
        "EXTERNAL_MAINTAINER": lambda qs, u: qs.filter(external_maintainer=u),
    }

    qs = apply_role_scope(Report.objects.all(), user, scope_rules=REPORT_SCOPE_RULES)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from django.db.models import QuerySet

from core.domain.exceptions import PermissionDenied

if TYPE_CHECKING:
    from accounts.models import User

# Takes (queryset, user) and returns a filtered queryset.
ScopeFilter = Callable[[QuerySet, "User"], QuerySet]


def get_user_role_type(user: User) -> str | None:
    """
    Return the role type for a user, or ``None`` for anonymous users.

    Superusers are always treated as ``ADMIN``.
    """
    if not getattr(user, "is_authenticated", False):
        return None
    if user.is_superuser:
        return "ADMIN"
    return getattr(user, "role_type", None)


def require_role(user: User, *allowed_roles: str, message: str = "") -> None:
    """
    Guard that raises ``PermissionDenied`` if the user's role type is not
    among ``allowed_roles``.

    Example::

        require_role(request.user, "MUNICIPALITY")
    """
    role_type = get_user_role_type(user)
    if role_type not in allowed_roles:
        raise PermissionDenied(
            message
            or (
                f"Role '{role_type}' is not permitted for this operation. "
                f"Required: {', '.join(allowed_roles)}."
            )
        )


def apply_role_scope(
    queryset: QuerySet,
    user: User,
    *,
    scope_rules: dict[str, ScopeFilter],
) -> QuerySet:
    """
    Apply the scope rule registered for the user's role type.

    Roles without a rule see nothing.
    """
    role_type = get_user_role_type(user)
    filter_fn = scope_rules.get(role_type)
    if filter_fn is None:
        return queryset.none()
    return filter_fn(queryset, user)
