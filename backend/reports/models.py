"""
Reports app models.

Covers the citizen report lifecycle: submission with photos, municipal
approval (office routing and officer assignment) or rejection, delegation
to an external maintainer, maintainer work progress up to resolution, and
the internal staff comment channel.
"""

from django.conf import settings
from django.db import models
from django.db.models import Q

from core.models import TimeStampedModel


# ────────────────────────────────────────────────────────────────────
# Choice enumerations
# ────────────────────────────────────────────────────────────────────

class Category(models.TextChoices):
    """Fixed enumeration of report categories."""

    WATER_SUPPLY_DRINKING_WATER = "WATER_SUPPLY_DRINKING_WATER", "Water Supply - Drinking Water"
    ARCHITECTURAL_BARRIERS = "ARCHITECTURAL_BARRIERS", "Architectural Barriers"
    SEWER_SYSTEM = "SEWER_SYSTEM", "Sewer System"
    PUBLIC_LIGHTING = "PUBLIC_LIGHTING", "Public Lighting"
    WASTE = "WASTE", "Waste"
    ROAD_SIGNS_TRAFFIC_LIGHTS = "ROAD_SIGNS_TRAFFIC_LIGHTS", "Road Signs and Traffic Lights"
    ROADS_URBAN_FURNISHINGS = "ROADS_URBAN_FURNISHINGS", "Roads and Urban Furnishings"
    PUBLIC_GREEN_AREAS_PLAYGROUNDS = "PUBLIC_GREEN_AREAS_PLAYGROUNDS", "Public Green Areas and Playgrounds"
    OTHER = "OTHER", "Other"


class ReportStatus(models.TextChoices):
    """
    PENDING_APPROVAL → ASSIGNED → IN_PROGRESS ⇄ SUSPENDED → RESOLVED
    PENDING_APPROVAL → REJECTED
    """

    PENDING_APPROVAL = "PENDING_APPROVAL", "Pending Approval"
    ASSIGNED = "ASSIGNED", "Assigned"
    IN_PROGRESS = "IN_PROGRESS", "In Progress"
    SUSPENDED = "SUSPENDED", "Suspended"
    REJECTED = "REJECTED", "Rejected"
    RESOLVED = "RESOLVED", "Resolved"


#: Statuses that count towards an officer's workload.
OFFICER_ACTIVE_STATUSES: tuple[str, ...] = (
    ReportStatus.ASSIGNED,
    ReportStatus.IN_PROGRESS,
    ReportStatus.SUSPENDED,
)


# ────────────────────────────────────────────────────────────────────
# Models
# ────────────────────────────────────────────────────────────────────

class Report(TimeStampedModel):
    """
    A citizen-submitted infrastructure issue.

    Content fields are fixed at creation.  Lifecycle fields (status,
    rejection reason, office, officer, maintainer) are written only by
    the services in ``reports.services`` through conditional updates.
    """

    title = models.CharField(max_length=255, verbose_name="Title")
    description = models.TextField(verbose_name="Description")
    category = models.CharField(
        max_length=50,
        choices=Category.choices,
        verbose_name="Category",
        db_index=True,
    )
    latitude = models.FloatField(verbose_name="Latitude")
    longitude = models.FloatField(verbose_name="Longitude")
    anonymous = models.BooleanField(default=False, verbose_name="Anonymous")
    submitted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="submitted_reports",
        verbose_name="Submitted By",
    )

    # ── Lifecycle ────────────────────────────────────────────────────
    status = models.CharField(
        max_length=30,
        choices=ReportStatus.choices,
        default=ReportStatus.PENDING_APPROVAL,
        verbose_name="Status",
        db_index=True,
    )
    rejection_reason = models.TextField(
        blank=True,
        default="",
        verbose_name="Rejection Reason",
    )
    assigned_office = models.CharField(
        max_length=100,
        blank=True,
        default="",
        verbose_name="Assigned Office",
    )
    assigned_officer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="assigned_reports",
        verbose_name="Assigned Officer",
    )
    external_maintainer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="delegated_reports",
        verbose_name="External Maintainer",
    )

    class Meta:
        verbose_name = "Report"
        verbose_name_plural = "Reports"
        ordering = ["-created_at"]

    def __str__(self):
        return f"Report #{self.pk}: {self.title} [{self.get_status_display()}]"


class ReportPhoto(TimeStampedModel):
    """Photo attached to a report at submission (1 to 3 per report)."""

    report = models.ForeignKey(
        Report,
        on_delete=models.CASCADE,
        related_name="photos",
        verbose_name="Report",
    )
    image = models.ImageField(
        upload_to="report_photos/%Y/%m/",
        verbose_name="Image",
    )
    position = models.PositiveSmallIntegerField(
        default=1,
        verbose_name="Position",
    )

    class Meta:
        verbose_name = "Report Photo"
        verbose_name_plural = "Report Photos"
        ordering = ["position"]

    def __str__(self):
        return f"Photo {self.position} for Report #{self.report_id}"


class Comment(TimeStampedModel):
    """
    Internal staff note on a report.

    Exactly one author column is set: ``municipality_user`` or
    ``external_maintainer`` (enforced by a check constraint).  ``PROTECT``
    keeps a commented report, and any commenting user, from being
    hard-deleted.
    """

    report = models.ForeignKey(
        Report,
        on_delete=models.PROTECT,
        related_name="comments",
        verbose_name="Report",
    )
    content = models.TextField(verbose_name="Content")
    municipality_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="municipality_comments",
        verbose_name="Municipality Author",
    )
    external_maintainer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="maintainer_comments",
        verbose_name="Maintainer Author",
    )

    class Meta:
        verbose_name = "Comment"
        verbose_name_plural = "Comments"
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(municipality_user__isnull=False, external_maintainer__isnull=True)
                | Q(municipality_user__isnull=True, external_maintainer__isnull=False),
                name="comment_exactly_one_author",
            ),
        ]

    def __str__(self):
        return f"Comment #{self.pk} on Report #{self.report_id}"

    @property
    def author_id(self):
        return self.municipality_user_id or self.external_maintainer_id


class ReportStatusLog(models.Model):
    """
    Immutable audit trail of every status transition on a report.
    """

    report = models.ForeignKey(
        Report,
        on_delete=models.CASCADE,
        related_name="status_logs",
        verbose_name="Report",
    )
    from_status = models.CharField(
        max_length=30,
        blank=True,
        default="",
        verbose_name="From Status",
    )
    to_status = models.CharField(
        max_length=30,
        choices=ReportStatus.choices,
        verbose_name="To Status",
    )
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="report_status_changes",
        verbose_name="Changed By",
    )
    message = models.TextField(
        blank=True,
        default="",
        verbose_name="Message",
    )
    created_at = models.DateTimeField(auto_now_add=True, verbose_name="Created At")

    class Meta:
        verbose_name = "Report Status Log"
        verbose_name_plural = "Report Status Logs"
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"Report #{self.report_id}: {self.from_status or '-'} → {self.to_status}"
