"""
Least-loaded assignment.

``select_least_loaded`` is a pure function over a candidate snapshot: it
returns the id of the candidate with the smallest workload, breaking ties
by the lowest id.  The two pool builders read a fresh snapshot from the
database each time they are called:

- ``officer_candidates(office)`` — active ``MUNICIPALITY`` users of that
  office; workload = reports assigned to them in ASSIGNED, IN_PROGRESS or
  SUSPENDED.
- ``maintainer_candidates(category)`` — active ``EXTERNAL_MAINTAINER``
  users serving that category; workload = reports delegated to them that
  are not RESOLVED.

The snapshot is not isolated from concurrent assignments drawing on the
same pool, so the balance is best-effort.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from django.contrib.auth import get_user_model
from django.db.models import Count, Q

from accounts.models import RoleType

from .models import OFFICER_ACTIVE_STATUSES, ReportStatus


_MAINTAINER_ACTIVE_STATUSES = [
    s for s in ReportStatus.values if s != ReportStatus.RESOLVED
]


@dataclass(frozen=True)
class Candidate:
    id: int
    workload: int


def select_least_loaded(candidates: Iterable[Candidate]) -> int | None:
    """
    Return the id of the least-loaded candidate, or ``None`` for an
    empty pool.  Ties on workload go to the lowest id.
    """
    best = min(candidates, key=lambda c: (c.workload, c.id), default=None)
    return None if best is None else best.id


def officer_candidates(office: str) -> list[Candidate]:
    User = get_user_model()
    rows = (
        User.objects
        .filter(
            role_type=RoleType.MUNICIPALITY,
            municipality_role__name=office,
            is_active=True,
        )
        .annotate(
            workload=Count(
                "assigned_reports",
                filter=Q(assigned_reports__status__in=OFFICER_ACTIVE_STATUSES),
            )
        )
        .values_list("id", "workload")
    )
    return [Candidate(id=pk, workload=load) for pk, load in rows]


def maintainer_candidates(category: str) -> list[Candidate]:
    User = get_user_model()
    rows = (
        User.objects
        .filter(
            role_type=RoleType.EXTERNAL_MAINTAINER,
            maintainer_category=category,
            is_active=True,
        )
        .annotate(
            workload=Count(
                "delegated_reports",
                filter=Q(delegated_reports__status__in=_MAINTAINER_ACTIVE_STATUSES),
            )
        )
        .values_list("id", "workload")
    )
    return [Candidate(id=pk, workload=load) for pk, load in rows]
