"""
Reports app Service Layer.

This module is the **single source of truth** for all business logic
in the ``reports`` app.  Views must remain thin: validate input via
serializers, call a service method, and return the result wrapped in
a DRF ``Response``.

Architecture
------------
- ``ReportQueryService``       — Role-scoped querysets, detail lookup, audit log.
- ``ReportSubmissionService``  — Citizen report creation and report deletion.
- ``ReportWorkflowService``    — Status state machine (approve, reject,
                                 maintainer progress).
- ``ReportDelegationService``  — Linking a report to an external maintainer.
- ``ReportCommentService``     — Internal comment channel behind the gate.

Workflow State-Machine Overview
--------------------------------
  PENDING_APPROVAL → ASSIGNED    (municipality approves; office routed,
                                  least-loaded officer assigned)
  PENDING_APPROVAL → REJECTED    (municipality rejects with a reason)
  ASSIGNED         → IN_PROGRESS (delegated maintainer)
  IN_PROGRESS      → SUSPENDED   (delegated maintainer)
  SUSPENDED        → IN_PROGRESS (delegated maintainer)
  IN_PROGRESS      → RESOLVED    (delegated maintainer)

Every status write is a conditional update (``core.domain.transactions``):
the row is locked and re-read, and the ``UPDATE`` only applies while the
status still matches, so a concurrent loser gets ``InvalidTransition``.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from django.db import transaction
from django.db.models import QuerySet

from accounts.models import RoleType
from core.domain.access import apply_role_scope, get_user_role_type
from core.domain.exceptions import Conflict, NotFound
from core.domain.transactions import conditional_update, lock_for_update

from .assignment import maintainer_candidates, officer_candidates, select_least_loaded
from .comment_access import CommentAccessGate
from .exceptions import (
    CommentContentRequired,
    InvalidStatus,
    InvalidTransition,
    NoMaintainersAvailable,
    NoOfficerAvailable,
    NotAuthorized,
    RejectionReasonRequired,
)
from .models import (
    Comment,
    Report,
    ReportPhoto,
    ReportStatus,
    ReportStatusLog,
)
from .routing import get_office_router
from .validation import validate_new_report

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  Transition tables
# ═══════════════════════════════════════════════════════════════════

#: (from_status, to_status) pairs an assigned external maintainer may apply.
MAINTAINER_TRANSITIONS: frozenset[tuple[str, str]] = frozenset({
    (ReportStatus.ASSIGNED, ReportStatus.IN_PROGRESS),
    (ReportStatus.IN_PROGRESS, ReportStatus.SUSPENDED),
    (ReportStatus.SUSPENDED, ReportStatus.IN_PROGRESS),
    (ReportStatus.IN_PROGRESS, ReportStatus.RESOLVED),
})

#: Statuses from which a report can be delegated (or re-delegated).
DELEGABLE_STATUSES: tuple[str, ...] = (
    ReportStatus.ASSIGNED,
    ReportStatus.IN_PROGRESS,
    ReportStatus.SUSPENDED,
)

#: Statuses citizens can see on reports they did not submit.
PUBLIC_STATUSES: tuple[str, ...] = (
    ReportStatus.ASSIGNED,
    ReportStatus.IN_PROGRESS,
    ReportStatus.SUSPENDED,
    ReportStatus.RESOLVED,
)

REPORT_SCOPE_RULES = {
    RoleType.ADMIN: lambda qs, u: qs,
    RoleType.MUNICIPALITY: lambda qs, u: qs,
    RoleType.EXTERNAL_MAINTAINER: lambda qs, u: qs.filter(external_maintainer=u),
    RoleType.CITIZEN: lambda qs, u: (
        qs.filter(submitted_by=u) | qs.filter(status__in=PUBLIC_STATUSES)
    ),
}


def _log_transition(
    report: Report,
    from_status: str,
    to_status: str,
    changed_by: Any = None,
    message: str = "",
) -> None:
    ReportStatusLog.objects.create(
        report=report,
        from_status=from_status,
        to_status=to_status,
        changed_by=changed_by,
        message=message,
    )


def _get_report(report_id: int) -> Report:
    try:
        return Report.objects.get(pk=report_id)
    except Report.DoesNotExist:
        raise NotFound(f"Report with id {report_id} not found.")


def _delete_files(files: Sequence[tuple[Any, str]]) -> None:
    for storage, name in files:
        storage.delete(name)


# ═══════════════════════════════════════════════════════════════════
#  Report Query Service
# ═══════════════════════════════════════════════════════════════════


class ReportQueryService:
    """
    Constructs role-scoped querysets for listing and reading reports.

    Role Scoping Rules
    ------------------
    - **ADMIN / MUNICIPALITY**: every report.
    - **EXTERNAL_MAINTAINER**: reports delegated to them.
    - **CITIZEN**: their own reports plus approved ones.
    """

    @staticmethod
    def get_filtered_queryset(
        requesting_user: Any,
        filters: dict[str, Any] | None = None,
    ) -> QuerySet[Report]:
        """
        Parameters
        ----------
        requesting_user : User
            From ``request.user``.
        filters : dict
            Cleaned query-parameter dict from ``ReportFilterSerializer``.
            Supported keys: ``status``, ``category``, ``assigned_to_me``.
        """
        filters = filters or {}
        qs = apply_role_scope(
            Report.objects.all(),
            requesting_user,
            scope_rules=REPORT_SCOPE_RULES,
        )
        if filters.get("status"):
            qs = qs.filter(status=filters["status"])
        if filters.get("category"):
            qs = qs.filter(category=filters["category"])
        if filters.get("assigned_to_me"):
            qs = qs.filter(assigned_officer=requesting_user)
        return (
            qs.select_related(
                "submitted_by", "assigned_officer", "external_maintainer",
            )
            .prefetch_related("photos")
            .distinct()
            .order_by("-created_at", "-id")
        )

    @staticmethod
    def get_report_detail(report_id: int, requesting_user: Any) -> Report:
        """
        Return one report visible to ``requesting_user``.

        Raises
        ------
        NotFound
            If the report does not exist or is outside the user's scope.
        """
        report = (
            ReportQueryService.get_filtered_queryset(requesting_user)
            .filter(pk=report_id)
            .first()
        )
        if report is None:
            raise NotFound(f"Report with id {report_id} not found.")
        return report

    @staticmethod
    def get_status_log(report_id: int, requesting_user: Any) -> QuerySet[ReportStatusLog]:
        report = ReportQueryService.get_report_detail(report_id, requesting_user)
        return report.status_logs.select_related("changed_by").order_by("created_at", "id")


# ═══════════════════════════════════════════════════════════════════
#  Report Submission Service
# ═══════════════════════════════════════════════════════════════════


class ReportSubmissionService:
    """Creation of new reports by citizens and their deletion by staff."""

    @staticmethod
    @transaction.atomic
    def submit_report(
        validated_data: dict[str, Any],
        photos: Sequence[Any],
        requesting_user: Any,
    ) -> Report:
        """
        Validate and persist a new report with its photos.

        Parameters
        ----------
        validated_data : dict
            ``title``, ``description``, ``category``, ``latitude``,
            ``longitude`` and optionally ``anonymous``.  Any ``status``
            key is ignored.
        photos : sequence of uploaded files
            Between 1 and 3 images.
        requesting_user : User
            The submitting citizen.

        Returns
        -------
        Report
            The new report, always in ``PENDING_APPROVAL``.

        Raises
        ------
        ReportValidationError
            The first failing rule of ``validate_new_report``.
        """
        validate_new_report({**validated_data, "photos": photos})

        report = Report.objects.create(
            title=validated_data["title"].strip(),
            description=validated_data["description"].strip(),
            category=validated_data["category"],
            latitude=float(validated_data["latitude"]),
            longitude=float(validated_data["longitude"]),
            anonymous=bool(validated_data.get("anonymous", False)),
            submitted_by=requesting_user,
            status=ReportStatus.PENDING_APPROVAL,
        )
        for position, image in enumerate(photos, start=1):
            ReportPhoto.objects.create(report=report, image=image, position=position)

        _log_transition(
            report, "", ReportStatus.PENDING_APPROVAL, requesting_user,
            "Report submitted.",
        )
        logger.info(
            "Report %d submitted by %s (category=%s, photos=%d)",
            report.pk, requesting_user, report.category, len(photos),
        )
        return report

    @staticmethod
    @transaction.atomic
    def delete_report(report_id: int, requesting_user: Any) -> None:
        """
        Delete a report together with its stored photo files.  The files
        are removed only after the transaction commits.

        Raises
        ------
        NotFound
            If the report does not exist.
        Conflict
            If internal comments still reference the report.
        """
        report = lock_for_update(Report, report_id)
        if report.comments.exists():
            raise Conflict(
                f"Report {report_id} has comments and cannot be deleted."
            )

        files = [(photo.image.storage, photo.image.name) for photo in report.photos.all()]
        report.delete()
        transaction.on_commit(lambda: _delete_files(files))
        logger.info("Report %d deleted by %s", report_id, requesting_user)


# ═══════════════════════════════════════════════════════════════════
#  Report Workflow Service
# ═══════════════════════════════════════════════════════════════════


class ReportWorkflowService:
    """
    Applies status transitions.

    Callers verify the actor's role before invoking these methods; the
    maintainer path additionally checks that the report is delegated to
    the calling maintainer.
    """

    @staticmethod
    @transaction.atomic
    def approve_report(report_id: int, requesting_user: Any = None) -> Report:
        """
        ``PENDING_APPROVAL → ASSIGNED``.

        Resolves the office for the report's category, picks the
        least-loaded active officer of that office and records both on
        the report in one conditional update.

        Raises
        ------
        NotFound
            Unknown report id.
        InvalidTransition
            The report is not pending approval (carries its status).
        NoOfficerAvailable
            The resolved office has no active officer (carries the office).
        """
        report = lock_for_update(Report, report_id)
        if report.status != ReportStatus.PENDING_APPROVAL:
            raise InvalidTransition(
                current=report.status,
                target=ReportStatus.ASSIGNED,
            )

        office = get_office_router().resolve(report.category)
        officer_id = select_least_loaded(officer_candidates(office))
        if officer_id is None:
            raise NoOfficerAvailable(office)

        report = conditional_update(
            Report,
            report.pk,
            allowed_sources={ReportStatus.PENDING_APPROVAL},
            changes={
                "status": ReportStatus.ASSIGNED,
                "assigned_office": office,
                "assigned_officer_id": officer_id,
            },
        )
        _log_transition(
            report, ReportStatus.PENDING_APPROVAL, ReportStatus.ASSIGNED,
            requesting_user, f"Assigned to office '{office}'.",
        )
        logger.info(
            "Report %d approved by %s: office '%s', officer %d",
            report.pk, requesting_user, office, officer_id,
        )
        return report

    @staticmethod
    @transaction.atomic
    def reject_report(
        report_id: int,
        reason: str | None,
        requesting_user: Any = None,
    ) -> Report:
        """
        ``PENDING_APPROVAL → REJECTED``.

        Raises
        ------
        NotFound
            Unknown report id.
        InvalidTransition
            The report is not pending approval.
        RejectionReasonRequired
            ``reason`` is missing or blank.
        """
        report = lock_for_update(Report, report_id)
        if report.status != ReportStatus.PENDING_APPROVAL:
            raise InvalidTransition(
                current=report.status,
                target=ReportStatus.REJECTED,
            )
        reason = (reason or "").strip()
        if not reason:
            raise RejectionReasonRequired()

        report = conditional_update(
            Report,
            report.pk,
            allowed_sources={ReportStatus.PENDING_APPROVAL},
            changes={
                "status": ReportStatus.REJECTED,
                "rejection_reason": reason,
            },
        )
        _log_transition(
            report, ReportStatus.PENDING_APPROVAL, ReportStatus.REJECTED,
            requesting_user, reason,
        )
        logger.info("Report %d rejected by %s", report.pk, requesting_user)
        return report

    @staticmethod
    @transaction.atomic
    def advance_maintainer_status(
        report_id: int,
        maintainer_id: int,
        target_status: str,
        requesting_user: Any = None,
    ) -> Report:
        """
        Move a delegated report along ``MAINTAINER_TRANSITIONS``.

        Checks run in this order: report exists, report is delegated to
        ``maintainer_id``, ``target_status`` is a known status, the
        ``(current, target)`` pair is an allowed edge.

        Raises
        ------
        NotFound
            Unknown report id.
        NotAuthorized
            The report is not delegated to ``maintainer_id``.
        InvalidStatus
            ``target_status`` is not a ``ReportStatus`` value.
        InvalidTransition
            The edge is not allowed from the current status.
        """
        report = lock_for_update(Report, report_id)
        if report.external_maintainer_id is None or report.external_maintainer_id != maintainer_id:
            raise NotAuthorized()
        if target_status not in ReportStatus.values:
            raise InvalidStatus(target_status)

        current = report.status
        if (current, target_status) not in MAINTAINER_TRANSITIONS:
            raise InvalidTransition(current=current, target=target_status)

        report = conditional_update(
            Report,
            report.pk,
            allowed_sources={current},
            changes={"status": target_status},
            guard={"external_maintainer_id": maintainer_id},
        )
        _log_transition(report, current, target_status, requesting_user)
        logger.info(
            "Report %d moved %s -> %s by maintainer %d",
            report.pk, current, target_status, maintainer_id,
        )
        return report


# ═══════════════════════════════════════════════════════════════════
#  Report Delegation Service
# ═══════════════════════════════════════════════════════════════════


class ReportDelegationService:

    @staticmethod
    @transaction.atomic
    def delegate_to_maintainer(report_id: int, requesting_user: Any = None) -> Report:
        """
        Link the report to the least-loaded external maintainer serving
        its category.

        Delegation is not a status change.  Calling it again on a report
        that is already delegated overwrites the maintainer.

        Raises
        ------
        NotFound
            Unknown report id.
        InvalidTransition
            The report is not ASSIGNED, IN_PROGRESS or SUSPENDED.
        NoMaintainersAvailable
            No active maintainer serves the category (carries it).
        """
        report = lock_for_update(Report, report_id)
        if report.status not in DELEGABLE_STATUSES:
            raise InvalidTransition(
                current=report.status,
                reason="only approved, unresolved reports can be delegated",
            )

        maintainer_id = select_least_loaded(maintainer_candidates(report.category))
        if maintainer_id is None:
            raise NoMaintainersAvailable(report.category)

        previous = report.external_maintainer_id
        report = conditional_update(
            Report,
            report.pk,
            allowed_sources=DELEGABLE_STATUSES,
            changes={"external_maintainer_id": maintainer_id},
        )
        if previous is not None and previous != maintainer_id:
            logger.info(
                "Report %d re-delegated from maintainer %d to %d by %s",
                report.pk, previous, maintainer_id, requesting_user,
            )
        else:
            logger.info(
                "Report %d delegated to maintainer %d by %s",
                report.pk, maintainer_id, requesting_user,
            )
        return report


# ═══════════════════════════════════════════════════════════════════
#  Report Comment Service
# ═══════════════════════════════════════════════════════════════════


class ReportCommentService:
    """Internal comments, always checked by ``CommentAccessGate`` first."""

    @staticmethod
    @transaction.atomic
    def post_comment(
        report_id: int,
        actor_type: str,
        actor_id: int,
        content: str,
    ) -> Comment:
        """
        Create a comment authored by ``(actor_type, actor_id)``.

        The report row is locked while the gate runs so a concurrent
        resolution cannot slip in between the check and the insert.

        Raises
        ------
        NotFound, ReportResolved, RoleNotPermitted, NotAssigned,
        InvalidAuthorType
            See ``CommentAccessGate``.
        CommentContentRequired
            ``content`` is blank.
        """
        report = lock_for_update(Report, report_id)
        author = CommentAccessGate.check_write(report, actor_type, actor_id)

        content = (content or "").strip()
        if not content:
            raise CommentContentRequired()

        comment = Comment.objects.create(
            report=report,
            content=content,
            **author.as_comment_fields(),
        )
        logger.info(
            "Comment %d posted on report %d by %s %d",
            comment.pk, report.pk, author.author_type, author.author_id,
        )
        return comment

    @staticmethod
    def list_comments(
        report_id: int,
        actor_type: str,
        actor_id: int,
    ) -> QuerySet[Comment]:
        """
        Return the report's comments, oldest first.  Reading is allowed on
        resolved reports.

        Raises
        ------
        NotFound, RoleNotPermitted, NotAssigned, InvalidAuthorType
        """
        report = _get_report(report_id)
        CommentAccessGate.check_read(report, actor_type, actor_id)
        return (
            Comment.objects
            .filter(report=report)
            .select_related("municipality_user", "external_maintainer")
            .order_by("created_at", "id")
        )

    @staticmethod
    def actor_for(user: Any) -> tuple[str | None, int]:
        """Resolve ``(actor_type, actor_id)`` from an authenticated user."""
        return get_user_role_type(user), user.pk
