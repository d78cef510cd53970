"""
Reports app serializers.

Request serializers validate shapes and types only.  Business rules
(validation order, transitions, comment access) live in the service
layer and its helpers.
"""

from __future__ import annotations

from typing import Any

from rest_framework import serializers

from accounts.models import RoleType

from .models import Category, Comment, Report, ReportPhoto, ReportStatus, ReportStatusLog


# ═══════════════════════════════════════════════════════════════════
#  Request Serializers
# ═══════════════════════════════════════════════════════════════════


class ReportCreateSerializer(serializers.Serializer):
    """
    Multipart payload for ``POST /api/reports/``.

    ``photos`` is sent as repeated ``photos`` file parts.  Presence and
    count rules are enforced by ``ReportValidator`` before this
    serializer runs; here only types are checked.
    """

    title = serializers.CharField(max_length=255)
    description = serializers.CharField()
    category = serializers.ChoiceField(choices=Category.choices)
    latitude = serializers.FloatField(min_value=-90, max_value=90)
    longitude = serializers.FloatField(min_value=-180, max_value=180)
    anonymous = serializers.BooleanField(default=False)
    photos = serializers.ListField(
        child=serializers.ImageField(),
        allow_empty=False,
    )


class ReportFilterSerializer(serializers.Serializer):
    """Query parameters accepted by ``GET /api/reports/``."""

    status = serializers.ChoiceField(choices=ReportStatus.choices, required=False)
    category = serializers.ChoiceField(choices=Category.choices, required=False)
    assigned_to_me = serializers.BooleanField(
        required=False,
        default=False,
        help_text="Only reports assigned to the requesting officer.",
    )


class ReportRejectSerializer(serializers.Serializer):
    """
    Body for ``POST /api/reports/{id}/reject/``.

    ``reason`` may be omitted here so that a missing reason surfaces as
    ``RejectionReasonRequired`` from the workflow service.
    """

    reason = serializers.CharField(required=False, allow_blank=True, default="")


class MaintainerStatusSerializer(serializers.Serializer):
    """
    Body for ``POST /api/reports/{id}/maintainer-status/``.

    ``status`` is a free string: unknown values are reported as
    ``InvalidStatus`` by the workflow service.
    """

    status = serializers.CharField()


class CommentCreateSerializer(serializers.Serializer):
    """Blank content is left to ``ReportCommentService.post_comment``."""

    content = serializers.CharField(required=False, allow_blank=True, default="")


# ═══════════════════════════════════════════════════════════════════
#  Response Serializers
# ═══════════════════════════════════════════════════════════════════


class ReportPhotoSerializer(serializers.ModelSerializer):
    class Meta:
        model = ReportPhoto
        fields = ["id", "image", "position"]
        read_only_fields = fields


class ReportListSerializer(serializers.ModelSerializer):
    """Compact representation for the list endpoint."""

    status_display = serializers.CharField(source="get_status_display", read_only=True)
    category_display = serializers.CharField(source="get_category_display", read_only=True)

    class Meta:
        model = Report
        fields = [
            "id",
            "title",
            "category",
            "category_display",
            "status",
            "status_display",
            "latitude",
            "longitude",
            "anonymous",
            "assigned_office",
            "created_at",
        ]
        read_only_fields = fields


class ReportDetailSerializer(serializers.ModelSerializer):
    """
    Full report representation.

    ``submitted_by`` is hidden on anonymous reports from everyone except
    the submitter, municipality staff and admins.
    """

    status_display = serializers.CharField(source="get_status_display", read_only=True)
    category_display = serializers.CharField(source="get_category_display", read_only=True)
    photos = ReportPhotoSerializer(many=True, read_only=True)
    submitted_by = serializers.SerializerMethodField()

    class Meta:
        model = Report
        fields = [
            "id",
            "title",
            "description",
            "category",
            "category_display",
            "latitude",
            "longitude",
            "anonymous",
            "submitted_by",
            "photos",
            "status",
            "status_display",
            "rejection_reason",
            "assigned_office",
            "assigned_officer",
            "external_maintainer",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_submitted_by(self, obj: Report) -> int | None:
        if not obj.anonymous:
            return obj.submitted_by_id
        request = self.context.get("request")
        viewer = getattr(request, "user", None)
        if viewer is None or not viewer.is_authenticated:
            return None
        if viewer.pk == obj.submitted_by_id or viewer.is_superuser:
            return obj.submitted_by_id
        if viewer.role_type in (RoleType.MUNICIPALITY, RoleType.ADMIN):
            return obj.submitted_by_id
        return None


class ReportStatusLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = ReportStatusLog
        fields = ["id", "from_status", "to_status", "changed_by", "message", "created_at"]
        read_only_fields = fields


class CommentSerializer(serializers.ModelSerializer):
    """
    Read representation of a comment.  ``author_type`` is derived from
    whichever author column is set.
    """

    author_type = serializers.SerializerMethodField()

    class Meta:
        model = Comment
        fields = [
            "id",
            "report",
            "content",
            "author_type",
            "municipality_user",
            "external_maintainer",
            "created_at",
        ]
        read_only_fields = fields

    def get_author_type(self, obj: Comment) -> Any:
        if obj.municipality_user_id is not None:
            return RoleType.MUNICIPALITY.value
        if obj.external_maintainer_id is not None:
            return RoleType.EXTERNAL_MAINTAINER.value
        return None
