"""
Integration tests for the reports HTTP API.

Endpoints under test (named URLs):
    report-list, report-detail, report-approve, report-reject,
    report-delegate, report-maintainer-status, report-status-log,
    report-comment-list

Error bodies are ``{"detail": ..., "code": <ErrorKind>, ...}`` as produced
by ``core.domain.exception_handler``.
"""

from __future__ import annotations

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from accounts.models import MunicipalityRole, RoleType, User
from reports.models import Comment, Report, ReportStatus

_PASSWORD = "Reports!Pass42"

TINY_GIF = (
    b"GIF89a\x01\x00\x01\x00\x80\x00\x00\x00\x00\x00\xff\xff\xff!"
    b"\xf9\x04\x01\x00\x00\x00\x00,\x00\x00\x00\x00\x01\x00\x01\x00"
    b"\x00\x02\x02D\x01\x00;"
)

_MEMORY_STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.InMemoryStorage"},
    "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
}


def _gif(name: str = "photo.gif") -> SimpleUploadedFile:
    return SimpleUploadedFile(name, TINY_GIF, content_type="image/gif")


@override_settings(STORAGES=_MEMORY_STORAGES)
class TestReportsApi(TestCase):

    @classmethod
    def setUpTestData(cls):
        public_works = MunicipalityRole.objects.create(name="public works project manager")

        def make(username, **fields):
            return User.objects.create_user(
                username=username,
                password=_PASSWORD,
                email=f"{username}@example.com",
                **fields,
            )

        cls.citizen = make("api_citizen")
        cls.other_citizen = make("api_other_citizen")
        cls.officer = make(
            "api_officer",
            role_type=RoleType.MUNICIPALITY,
            municipality_role=public_works,
        )
        cls.maintainer = make(
            "api_maintainer",
            role_type=RoleType.EXTERNAL_MAINTAINER,
            maintainer_category="SEWER_SYSTEM",
            company_name="Pipes & Co",
        )
        cls.other_maintainer = make(
            "api_other_maintainer",
            role_type=RoleType.EXTERNAL_MAINTAINER,
            maintainer_category="WASTE",
            company_name="Bins Ltd",
        )
        cls.admin = make("api_admin", role_type=RoleType.ADMIN)

    def setUp(self):
        self.client = APIClient()

    # ── helpers ──────────────────────────────────────────────────────

    def login(self, user: User) -> None:
        self.client.credentials()
        response = self.client.post(
            reverse("accounts:login"),
            {"identifier": user.username, "password": _PASSWORD},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")

    def report_in(self, report_status: str, **fields) -> Report:
        fields.setdefault("submitted_by", self.citizen)
        fields.setdefault("category", "SEWER_SYSTEM")
        return Report.objects.create(
            title="Blocked drain",
            description="Storm drain clogged with leaves.",
            latitude=45.1,
            longitude=7.7,
            status=report_status,
            **fields,
        )

    def post_action(self, report: Report, name: str, data=None):
        return self.client.post(
            reverse(f"report-{name}", kwargs={"pk": report.pk}),
            data or {},
            format="json",
        )

    def submission(self, **overrides) -> dict:
        data = {
            "title": "Blocked drain",
            "description": "Storm drain clogged with leaves.",
            "category": "SEWER_SYSTEM",
            "latitude": "45.1",
            "longitude": "7.7",
            "photos": [_gif()],
        }
        data.update(overrides)
        return data

    # ── submission ───────────────────────────────────────────────────

    def test_citizen_submits_report_with_photos(self):
        self.login(self.citizen)
        response = self.client.post(
            reverse("report-list"),
            self.submission(photos=[_gif("a.gif"), _gif("b.gif")], status="RESOLVED"),
            format="multipart",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["status"], ReportStatus.PENDING_APPROVAL)
        self.assertEqual(len(response.data["photos"]), 2)
        self.assertEqual(response.data["submitted_by"], self.citizen.pk)
        self.assertIsNone(response.data["assigned_officer"])

    def test_submission_errors_carry_codes(self):
        self.login(self.citizen)
        cases = [
            ({"title": ""}, "TitleRequired"),
            ({"description": "  "}, "DescriptionRequired"),
            ({"category": ""}, "CategoryRequired"),
            ({"category": "POTHOLES"}, "InvalidCategory"),
            ({"latitude": ""}, "CoordinatesRequired"),
            ({"photos": []}, "PhotosRequired"),
            ({"photos": [_gif(f"{i}.gif") for i in range(4)]}, "TooManyPhotos"),
        ]
        for overrides, code in cases:
            with self.subTest(code=code):
                response = self.client.post(
                    reverse("report-list"),
                    self.submission(**overrides),
                    format="multipart",
                )
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
                self.assertEqual(response.data["code"], code)
        self.assertFalse(Report.objects.exists())

    def test_invalid_category_lists_valid_values(self):
        self.login(self.citizen)
        response = self.client.post(
            reverse("report-list"),
            self.submission(category="POTHOLES"),
            format="multipart",
        )
        self.assertIn("SEWER_SYSTEM", response.data["valid_categories"])
        self.assertEqual(len(response.data["valid_categories"]), 9)

    def test_only_citizens_submit(self):
        self.login(self.officer)
        response = self.client.post(reverse("report-list"), self.submission(), format="multipart")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_authentication_required(self):
        response = self.client.get(reverse("report-list"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    # ── approval / rejection ─────────────────────────────────────────

    def test_approve_assigns_officer_and_double_approve_conflicts(self):
        report = self.report_in(ReportStatus.PENDING_APPROVAL)
        self.login(self.officer)

        response = self.post_action(report, "approve")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["status"], ReportStatus.ASSIGNED)
        self.assertEqual(response.data["assigned_office"], "public works project manager")
        self.assertEqual(response.data["assigned_officer"], self.officer.pk)

        response = self.post_action(report, "approve")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "InvalidTransition")
        self.assertEqual(response.data["current"], ReportStatus.ASSIGNED)

    def test_approve_without_officer_for_office(self):
        report = self.report_in(ReportStatus.PENDING_APPROVAL, category="WASTE")
        self.login(self.officer)
        response = self.post_action(report, "approve")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "NoOfficerAvailable")
        self.assertEqual(response.data["office"], "sanitation and waste management officer")

    def test_reject_requires_reason(self):
        report = self.report_in(ReportStatus.PENDING_APPROVAL)
        self.login(self.officer)

        response = self.post_action(report, "reject")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "RejectionReasonRequired")

        response = self.post_action(report, "reject", {"reason": "Private property."})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], ReportStatus.REJECTED)
        self.assertEqual(response.data["rejection_reason"], "Private property.")

    def test_citizen_cannot_approve(self):
        report = self.report_in(ReportStatus.PENDING_APPROVAL)
        self.login(self.citizen)
        response = self.post_action(report, "approve")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_unknown_report_is_404(self):
        self.login(self.officer)
        response = self.client.post(
            reverse("report-approve", kwargs={"pk": 987654}), {}, format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["code"], "NotFound")

    # ── delegation and maintainer progress ──────────────────────────

    def test_delegate_then_maintainer_resolves(self):
        report = self.report_in(ReportStatus.ASSIGNED, assigned_officer=self.officer)
        self.login(self.officer)
        response = self.post_action(report, "delegate")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["external_maintainer"], self.maintainer.pk)
        self.assertEqual(response.data["status"], ReportStatus.ASSIGNED)

        self.login(self.maintainer)
        for target in ("IN_PROGRESS", "SUSPENDED", "IN_PROGRESS", "RESOLVED"):
            response = self.post_action(report, "maintainer-status", {"status": target})
            self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
            self.assertEqual(response.data["status"], target)

        response = self.client.get(reverse("report-status-log", kwargs={"pk": report.pk}))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            [row["to_status"] for row in response.data],
            ["IN_PROGRESS", "SUSPENDED", "IN_PROGRESS", "RESOLVED"],
        )

    def test_delegate_without_maintainer(self):
        report = self.report_in(ReportStatus.ASSIGNED, category="PUBLIC_LIGHTING")
        self.login(self.officer)
        response = self.post_action(report, "delegate")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "NoMaintainersAvailable")
        self.assertEqual(response.data["category"], "PUBLIC_LIGHTING")

    def test_foreign_maintainer_not_authorized(self):
        report = self.report_in(ReportStatus.ASSIGNED, external_maintainer=self.maintainer)
        self.login(self.other_maintainer)
        response = self.post_action(report, "maintainer-status", {"status": "IN_PROGRESS"})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["code"], "NotAuthorized")

    def test_maintainer_errors(self):
        report = self.report_in(ReportStatus.ASSIGNED, external_maintainer=self.maintainer)
        self.login(self.maintainer)

        response = self.post_action(report, "maintainer-status", {"status": "FINISHED"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "InvalidStatus")

        response = self.post_action(report, "maintainer-status", {"status": "RESOLVED"})
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "InvalidTransition")
        self.assertEqual(response.data["current"], ReportStatus.ASSIGNED)

    # ── comments ─────────────────────────────────────────────────────

    def test_comment_access(self):
        report = self.report_in(
            ReportStatus.IN_PROGRESS,
            assigned_officer=self.officer,
            external_maintainer=self.maintainer,
        )
        url = reverse("report-comment-list", kwargs={"report_pk": report.pk})

        self.login(self.officer)
        response = self.client.post(url, {"content": "Any update?"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["author_type"], RoleType.MUNICIPALITY)

        self.login(self.maintainer)
        response = self.client.post(url, {"content": "Tomorrow."}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["author_type"], RoleType.EXTERNAL_MAINTAINER)

        self.login(self.other_maintainer)
        response = self.client.post(url, {"content": "Me too"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["code"], "NotAssigned")

        self.login(self.citizen)
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["code"], "RoleNotPermitted")

    def test_resolved_report_comments_read_only(self):
        report = self.report_in(ReportStatus.RESOLVED, external_maintainer=self.maintainer)
        Comment.objects.create(report=report, content="Done.", external_maintainer=self.maintainer)
        url = reverse("report-comment-list", kwargs={"report_pk": report.pk})
        self.login(self.officer)

        response = self.client.post(url, {"content": "Thanks"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "ReportResolved")

        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c["content"] for c in response.data], ["Done."])

    def test_blank_comment_reports_access_error_first(self):
        report = self.report_in(ReportStatus.IN_PROGRESS, external_maintainer=self.maintainer)
        url = reverse("report-comment-list", kwargs={"report_pk": report.pk})

        self.login(self.citizen)
        for body in ({"content": ""}, {"content": "   "}, {}):
            response = self.client.post(url, body, format="json")
            self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, body)
            self.assertEqual(response.data["code"], "RoleNotPermitted")

        self.login(self.officer)
        response = self.client.post(url, {"content": "  "}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "CommentContentRequired")
        self.assertFalse(Comment.objects.filter(report=report).exists())

    def test_blank_comment_on_resolved_report_conflicts(self):
        report = self.report_in(ReportStatus.RESOLVED, external_maintainer=self.maintainer)
        url = reverse("report-comment-list", kwargs={"report_pk": report.pk})
        self.login(self.officer)

        response = self.client.post(url, {"content": ""}, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "ReportResolved")

    # ── reading and deletion ─────────────────────────────────────────

    def test_anonymous_submitter_hidden_from_other_citizens(self):
        report = self.report_in(ReportStatus.ASSIGNED, anonymous=True)
        detail = reverse("report-detail", kwargs={"pk": report.pk})

        self.login(self.other_citizen)
        self.assertIsNone(self.client.get(detail).data["submitted_by"])

        self.login(self.officer)
        self.assertEqual(self.client.get(detail).data["submitted_by"], self.citizen.pk)

    def test_citizen_cannot_see_foreign_pending_report(self):
        report = self.report_in(ReportStatus.PENDING_APPROVAL)
        self.login(self.other_citizen)
        response = self.client.get(reverse("report-detail", kwargs={"pk": report.pk}))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_list_filters_by_status(self):
        self.report_in(ReportStatus.PENDING_APPROVAL)
        assigned = self.report_in(ReportStatus.ASSIGNED)
        self.login(self.officer)
        response = self.client.get(reverse("report-list"), {"status": "ASSIGNED"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row["id"] for row in response.data], [assigned.pk])

    def test_list_assigned_to_me(self):
        colleague = User.objects.create_user(
            username="api_colleague",
            password=_PASSWORD,
            email="api_colleague@example.com",
            role_type=RoleType.MUNICIPALITY,
            municipality_role=self.officer.municipality_role,
        )
        mine = self.report_in(ReportStatus.ASSIGNED, assigned_officer=self.officer)
        self.report_in(ReportStatus.IN_PROGRESS, assigned_officer=colleague)
        self.report_in(ReportStatus.PENDING_APPROVAL)
        self.login(self.officer)

        response = self.client.get(reverse("report-list"), {"assigned_to_me": "true"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row["id"] for row in response.data], [mine.pk])

        response = self.client.get(reverse("report-list"))
        self.assertEqual(len(response.data), 3)

    def test_delete_blocked_by_comments(self):
        report = self.report_in(ReportStatus.ASSIGNED)
        Comment.objects.create(report=report, content="Seen.", municipality_user=self.officer)
        self.login(self.admin)

        response = self.client.delete(reverse("report-detail", kwargs={"pk": report.pk}))
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

        clean = self.report_in(ReportStatus.PENDING_APPROVAL)
        response = self.client.delete(reverse("report-detail", kwargs={"pk": clean.pk}))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Report.objects.filter(pk=clean.pk).exists())
