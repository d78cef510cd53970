"""
core.domain.transactions — Helpers for safe state transitions.

Provides utilities that wrap ``transaction.atomic``, ``select_for_update``
and conditional ``UPDATE ... WHERE status IN (...)`` statements into
reusable patterns so that every service layer follows the same
concurrency-safe approach.

Design goals
------------
* State-transition reads always lock the row first (``select_for_update``).
* The write itself is conditional on the status the caller validated, so
  two concurrent requests can never both succeed against the same row.
  The loser observes ``InvalidTransition`` (or ``NotFound``), never a
  silent overwrite.
* Keep the helpers **generic**: they accept any Django ``Model`` class.

Usage::

    from core.domain.transactions import conditional_update, lock_for_update

    with transaction.atomic():
        report = lock_for_update(Report, report_id)
        ...
        report = conditional_update(
            Report,
            report.pk,
            allowed_sources={"PENDING_APPROVAL"},
            changes={"status": "REJECTED", "rejection_reason": reason},
        )
"""

from __future__ import annotations

from typing import Any, Iterable, TypeVar

from django.db import models, transaction
from django.utils import timezone

from core.domain.exceptions import InvalidTransition, NotFound

M = TypeVar("M", bound=models.Model)


def lock_for_update(model_class: type[M], pk: Any) -> M:
    """
    Acquire a row-level lock on the given model instance.

    Convenience wrapper around ``select_for_update().get(pk=pk)``
    that must be called inside an ``atomic()`` block.

    Raises:
        NotFound: If no row with that PK exists.
    """
    try:
        return model_class.objects.select_for_update().get(pk=pk)
    except model_class.DoesNotExist:
        raise NotFound(f"{model_class.__name__} with pk={pk} does not exist.")


def conditional_update(
    model_class: type[M],
    pk: Any,
    *,
    allowed_sources: Iterable[str],
    changes: dict[str, Any],
    status_field: str = "status",
    guard: dict[str, Any] | None = None,
) -> M:
    """
    Apply ``changes`` to one row only if its status is still allowed.

    Steps performed inside ``transaction.atomic()``:
        1. Issue ``UPDATE ... WHERE pk = ? AND <status_field> IN (...)``
           (plus any ``guard`` lookups) with ``changes``.
        2. If exactly one row changed, return the freshly read instance.
        3. Otherwise re-read the row: gone → ``NotFound``; present →
           ``InvalidTransition`` naming the status it holds now.

    Args:
        model_class:     The Django model class.
        pk:              Primary key of the row to update.
        allowed_sources: Status values from which the update is permitted.
        changes:         Field → value mapping to write.
        status_field:    Name of the status column.  Defaults to ``"status"``.
        guard:           Extra lookups the row must still satisfy.

    Returns:
        The updated instance, read back from the database.

    Raises:
        NotFound:          If the row no longer exists.
        InvalidTransition: If the row's status (or guard) no longer matches.
    """
    allowed = [str(s) for s in allowed_sources]
    values = dict(changes)
    field_names = {f.name for f in model_class._meta.concrete_fields}
    if "updated_at" in field_names and "updated_at" not in values:
        values["updated_at"] = timezone.now()

    with transaction.atomic():
        rows = (
            model_class.objects
            .filter(pk=pk, **{f"{status_field}__in": allowed}, **(guard or {}))
            .update(**values)
        )
        try:
            instance = model_class.objects.get(pk=pk)
        except model_class.DoesNotExist:
            raise NotFound(f"{model_class.__name__} with pk={pk} does not exist.")

    if rows == 0:
        current = getattr(instance, status_field)
        raise InvalidTransition(
            current=str(current),
            target=str(changes.get(status_field, "")) or None,
            reason=f"allowed source states: {', '.join(allowed)}",
        )
    return instance
