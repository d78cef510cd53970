"""
Service-level tests for the report state machine: approval with office
routing and officer assignment, rejection, and maintainer progress.
"""

from __future__ import annotations

import pytest

from core.domain.exceptions import NotFound
from core.domain.transactions import conditional_update
from reports.exceptions import (
    InvalidStatus,
    InvalidTransition,
    NoOfficerAvailable,
    NotAuthorized,
    RejectionReasonRequired,
)
from reports.models import Report, ReportStatus, ReportStatusLog
from reports.services import ReportWorkflowService

PUBLIC_WORKS = "public works project manager"


# ════════════════════════════════════════════════════════════════════
#  Approval
# ════════════════════════════════════════════════════════════════════

@pytest.mark.django_db
class TestApproveReport:

    def test_routes_to_office_and_assigns_officer(self, make_report, make_officer):
        officer = make_officer(PUBLIC_WORKS)
        report = make_report(category="SEWER_SYSTEM")

        result = ReportWorkflowService.approve_report(report.pk)

        assert result.status == ReportStatus.ASSIGNED
        assert result.assigned_office == PUBLIC_WORKS
        assert result.assigned_officer_id == officer.pk
        assert result.external_maintainer_id is None

    def test_least_loaded_officer_with_tie_on_lowest_id(self, make_report, make_officer):
        officer_a = make_officer(PUBLIC_WORKS)
        officer_b = make_officer(PUBLIC_WORKS)
        officer_c = make_officer(PUBLIC_WORKS)
        for _ in range(5):
            make_report(status=ReportStatus.IN_PROGRESS, assigned_officer=officer_a)
        for officer in (officer_b, officer_c):
            make_report(status=ReportStatus.ASSIGNED, assigned_officer=officer)
            make_report(status=ReportStatus.SUSPENDED, assigned_officer=officer)
        assert officer_b.pk < officer_c.pk

        result = ReportWorkflowService.approve_report(make_report().pk)

        assert result.assigned_officer_id == officer_b.pk

    def test_closed_reports_do_not_count_as_workload(self, make_report, make_officer):
        busy_on_paper = make_officer(PUBLIC_WORKS)
        loaded = make_officer(PUBLIC_WORKS)
        for _ in range(3):
            make_report(status=ReportStatus.RESOLVED, assigned_officer=busy_on_paper)
        make_report(status=ReportStatus.ASSIGNED, assigned_officer=loaded)

        result = ReportWorkflowService.approve_report(make_report().pk)

        assert result.assigned_officer_id == busy_on_paper.pk

    def test_only_active_officers_of_the_office_are_candidates(self, make_report, make_officer):
        make_officer("urban planning specialist")
        make_officer(PUBLIC_WORKS, is_active=False)
        eligible = make_officer(PUBLIC_WORKS)

        result = ReportWorkflowService.approve_report(make_report().pk)

        assert result.assigned_officer_id == eligible.pk

    def test_other_category_uses_default_office(self, make_report, make_officer):
        admin_officer = make_officer("municipal administrator")

        result = ReportWorkflowService.approve_report(make_report(category="OTHER").pk)

        assert result.assigned_office == "municipal administrator"
        assert result.assigned_officer_id == admin_officer.pk

    def test_no_officer_available(self, make_report, make_officer):
        make_officer("urban planning specialist")
        report = make_report(category="WASTE")

        with pytest.raises(NoOfficerAvailable) as exc_info:
            ReportWorkflowService.approve_report(report.pk)

        assert exc_info.value.office == "sanitation and waste management officer"
        report.refresh_from_db()
        assert report.status == ReportStatus.PENDING_APPROVAL
        assert report.assigned_officer_id is None

    def test_second_approval_is_invalid_transition(self, make_report, make_officer):
        make_officer(PUBLIC_WORKS)
        report = make_report()
        ReportWorkflowService.approve_report(report.pk)

        with pytest.raises(InvalidTransition) as exc_info:
            ReportWorkflowService.approve_report(report.pk)

        assert exc_info.value.current == ReportStatus.ASSIGNED
        assert exc_info.value.extra() == {"current": ReportStatus.ASSIGNED}

    def test_rejected_report_cannot_be_approved(self, make_report, make_officer):
        make_officer(PUBLIC_WORKS)
        report = make_report(status=ReportStatus.REJECTED)
        with pytest.raises(InvalidTransition):
            ReportWorkflowService.approve_report(report.pk)

    def test_unknown_report(self):
        with pytest.raises(NotFound):
            ReportWorkflowService.approve_report(999_999)

    def test_transition_is_logged(self, make_report, make_officer, create_user):
        make_officer(PUBLIC_WORKS)
        staff = create_user(username="approver")
        report = make_report()

        ReportWorkflowService.approve_report(report.pk, requesting_user=staff)

        log = ReportStatusLog.objects.get(report=report)
        assert (log.from_status, log.to_status) == (
            ReportStatus.PENDING_APPROVAL, ReportStatus.ASSIGNED,
        )
        assert log.changed_by == staff


# ════════════════════════════════════════════════════════════════════
#  Rejection
# ════════════════════════════════════════════════════════════════════

@pytest.mark.django_db
class TestRejectReport:

    def test_reject_with_reason(self, make_report):
        report = make_report()

        result = ReportWorkflowService.reject_report(report.pk, "  Duplicate of #12  ")

        assert result.status == ReportStatus.REJECTED
        assert result.rejection_reason == "Duplicate of #12"

    @pytest.mark.parametrize("reason", [None, "", "   "])
    def test_reason_required(self, make_report, reason):
        report = make_report()

        with pytest.raises(RejectionReasonRequired):
            ReportWorkflowService.reject_report(report.pk, reason)

        report.refresh_from_db()
        assert report.status == ReportStatus.PENDING_APPROVAL

    def test_status_checked_before_reason(self, make_report):
        report = make_report(status=ReportStatus.ASSIGNED)
        with pytest.raises(InvalidTransition) as exc_info:
            ReportWorkflowService.reject_report(report.pk, "")
        assert exc_info.value.current == ReportStatus.ASSIGNED

    def test_rejected_is_terminal(self, make_report):
        report = make_report()
        ReportWorkflowService.reject_report(report.pk, "Not municipal property")
        with pytest.raises(InvalidTransition):
            ReportWorkflowService.reject_report(report.pk, "Again")


# ════════════════════════════════════════════════════════════════════
#  Maintainer progress
# ════════════════════════════════════════════════════════════════════

@pytest.mark.django_db
class TestAdvanceMaintainerStatus:

    @pytest.fixture()
    def maintainer(self, make_maintainer):
        return make_maintainer()

    @pytest.fixture()
    def delegated(self, make_report, maintainer):
        return make_report(status=ReportStatus.ASSIGNED, external_maintainer=maintainer)

    def _advance(self, report, maintainer, target):
        return ReportWorkflowService.advance_maintainer_status(
            report.pk, maintainer_id=maintainer.pk, target_status=target,
        )

    def test_full_path_to_resolution(self, delegated, maintainer):
        path = [
            ReportStatus.IN_PROGRESS,
            ReportStatus.SUSPENDED,
            ReportStatus.IN_PROGRESS,
            ReportStatus.RESOLVED,
        ]
        for target in path:
            assert self._advance(delegated, maintainer, target).status == target

        logged = list(
            ReportStatusLog.objects.filter(report=delegated).values_list("to_status", flat=True)
        )
        assert logged == path

    def test_cannot_skip_to_resolved(self, delegated, maintainer):
        with pytest.raises(InvalidTransition) as exc_info:
            self._advance(delegated, maintainer, ReportStatus.RESOLVED)
        assert exc_info.value.current == ReportStatus.ASSIGNED

    def test_suspended_cannot_resolve_directly(self, make_report, maintainer):
        report = make_report(status=ReportStatus.SUSPENDED, external_maintainer=maintainer)
        with pytest.raises(InvalidTransition):
            self._advance(report, maintainer, ReportStatus.RESOLVED)

    @pytest.mark.parametrize(
        "target",
        [ReportStatus.IN_PROGRESS, ReportStatus.SUSPENDED, ReportStatus.ASSIGNED],
    )
    def test_resolved_is_terminal(self, make_report, maintainer, target):
        report = make_report(status=ReportStatus.RESOLVED, external_maintainer=maintainer)
        with pytest.raises(InvalidTransition):
            self._advance(report, maintainer, target)

    @pytest.mark.parametrize(
        "target", [ReportStatus.PENDING_APPROVAL, ReportStatus.REJECTED],
    )
    def test_municipal_statuses_are_not_maintainer_targets(self, make_report, maintainer, target):
        report = make_report(status=ReportStatus.IN_PROGRESS, external_maintainer=maintainer)
        with pytest.raises(InvalidTransition):
            self._advance(report, maintainer, target)

    def test_unknown_status(self, delegated, maintainer):
        with pytest.raises(InvalidStatus) as exc_info:
            self._advance(delegated, maintainer, "DONE")
        assert exc_info.value.status == "DONE"

    def test_other_maintainer_not_authorized(self, delegated, make_maintainer):
        stranger = make_maintainer()
        with pytest.raises(NotAuthorized):
            self._advance(delegated, stranger, ReportStatus.IN_PROGRESS)
        delegated.refresh_from_db()
        assert delegated.status == ReportStatus.ASSIGNED

    def test_undelegated_report_not_authorized(self, make_report, maintainer):
        report = make_report(status=ReportStatus.ASSIGNED)
        with pytest.raises(NotAuthorized):
            self._advance(report, maintainer, ReportStatus.IN_PROGRESS)

    def test_authorization_checked_before_status(self, delegated, make_maintainer):
        stranger = make_maintainer()
        with pytest.raises(NotAuthorized):
            self._advance(delegated, stranger, "DONE")

    def test_unknown_report(self, maintainer):
        with pytest.raises(NotFound):
            ReportWorkflowService.advance_maintainer_status(
                424242, maintainer_id=maintainer.pk, target_status=ReportStatus.IN_PROGRESS,
            )


# ════════════════════════════════════════════════════════════════════
#  Conditional update
# ════════════════════════════════════════════════════════════════════

@pytest.mark.django_db
class TestConditionalUpdate:

    def test_stale_source_status_loses(self, make_report):
        """A writer that validated against an old status does not overwrite."""
        report = make_report()
        Report.objects.filter(pk=report.pk).update(status=ReportStatus.REJECTED)

        with pytest.raises(InvalidTransition) as exc_info:
            conditional_update(
                Report,
                report.pk,
                allowed_sources={ReportStatus.PENDING_APPROVAL},
                changes={"status": ReportStatus.ASSIGNED},
            )

        assert exc_info.value.current == ReportStatus.REJECTED
        report.refresh_from_db()
        assert report.status == ReportStatus.REJECTED

    def test_guard_mismatch_loses(self, make_report, make_maintainer):
        owner = make_maintainer()
        report = make_report(status=ReportStatus.ASSIGNED, external_maintainer=owner)

        with pytest.raises(InvalidTransition):
            conditional_update(
                Report,
                report.pk,
                allowed_sources={ReportStatus.ASSIGNED},
                changes={"status": ReportStatus.IN_PROGRESS},
                guard={"external_maintainer_id": owner.pk + 1000},
            )

    def test_missing_row(self):
        with pytest.raises(NotFound):
            conditional_update(
                Report,
                123456,
                allowed_sources={ReportStatus.PENDING_APPROVAL},
                changes={"status": ReportStatus.ASSIGNED},
            )

    def test_success_returns_fresh_instance(self, make_report):
        report = make_report()
        updated = conditional_update(
            Report,
            report.pk,
            allowed_sources={ReportStatus.PENDING_APPROVAL},
            changes={"status": ReportStatus.REJECTED, "rejection_reason": "spam"},
        )
        assert updated.status == ReportStatus.REJECTED
        assert updated.rejection_reason == "spam"
        assert updated.updated_at >= report.updated_at
