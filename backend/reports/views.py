"""
Reports app ViewSets.

Architecture: Views are intentionally thin.
Every view follows the strict three-step pattern:

    1. Parse / validate input via a serializer.
    2. Delegate all business logic to the appropriate service class.
    3. Serialize the result and return a DRF ``Response``.

Role gates (``require_role``) run here; everything else, including the
comment access rules, lives in the service layer.  Domain exceptions are
rendered by ``core.domain.exception_handler``.

ViewSets
--------
- ``ReportViewSet``   — list/create/retrieve/destroy + workflow actions
                        (approve, reject, delegate, maintainer-status,
                        status-log).
- ``CommentViewSet``  — Nested under reports for internal comments.
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from accounts.models import RoleType
from core.domain.access import require_role

from .serializers import (
    CommentCreateSerializer,
    CommentSerializer,
    MaintainerStatusSerializer,
    ReportCreateSerializer,
    ReportDetailSerializer,
    ReportFilterSerializer,
    ReportListSerializer,
    ReportRejectSerializer,
    ReportStatusLogSerializer,
)
from .services import (
    ReportCommentService,
    ReportDelegationService,
    ReportQueryService,
    ReportSubmissionService,
    ReportWorkflowService,
)
from .validation import validate_new_report

_REPORT_FIELDS = ("title", "description", "category", "latitude", "longitude")


# ═══════════════════════════════════════════════════════════════════
#  Report ViewSet
# ═══════════════════════════════════════════════════════════════════


class ReportViewSet(viewsets.ViewSet):
    """
    Central ViewSet for citizen reports.

    Endpoints
    ---------
    Standard:
        GET    /api/reports/                       → list (role-scoped)
        POST   /api/reports/                       → create (CITIZEN, multipart)
        GET    /api/reports/{id}/                  → retrieve
        DELETE /api/reports/{id}/                  → destroy (MUNICIPALITY / ADMIN)

    Workflow Actions:
        POST   /api/reports/{id}/approve/            → MUNICIPALITY
        POST   /api/reports/{id}/reject/             → MUNICIPALITY
        POST   /api/reports/{id}/delegate/           → MUNICIPALITY
        POST   /api/reports/{id}/maintainer-status/  → EXTERNAL_MAINTAINER
        GET    /api/reports/{id}/status-log/         → any viewer of the report
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    # ── Standard actions ─────────────────────────────────────────────

    @extend_schema(parameters=[ReportFilterSerializer], responses=ReportListSerializer(many=True))
    def list(self, request: Request) -> Response:
        filter_serializer = ReportFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        queryset = ReportQueryService.get_filtered_queryset(
            request.user, filter_serializer.validated_data,
        )
        serializer = ReportListSerializer(queryset, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)

    @extend_schema(request=ReportCreateSerializer, responses=ReportDetailSerializer)
    def create(self, request: Request) -> Response:
        """
        POST /api/reports/

        1. Only citizens may submit.
        2. Run ``validate_new_report`` on the raw payload so the first failing
           rule is reported with its own error code.
        3. Type-check with ``ReportCreateSerializer``.
        4. Delegate to ``ReportSubmissionService.submit_report``.
        """
        require_role(request.user, RoleType.CITIZEN)

        photos = request.FILES.getlist("photos")
        raw = {field: request.data.get(field) for field in _REPORT_FIELDS}
        validate_new_report({**raw, "photos": photos})

        serializer = ReportCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        report = ReportSubmissionService.submit_report(
            validated_data=data,
            photos=data.pop("photos"),
            requesting_user=request.user,
        )
        output = ReportDetailSerializer(report, context={"request": request})
        return Response(output.data, status=status.HTTP_201_CREATED)

    @extend_schema(responses=ReportDetailSerializer)
    def retrieve(self, request: Request, pk: int = None) -> Response:
        report = ReportQueryService.get_report_detail(int(pk), request.user)
        output = ReportDetailSerializer(report, context={"request": request})
        return Response(output.data, status=status.HTTP_200_OK)

    def destroy(self, request: Request, pk: int = None) -> Response:
        require_role(request.user, RoleType.MUNICIPALITY, RoleType.ADMIN)
        ReportSubmissionService.delete_report(int(pk), request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ── Workflow @actions ─────────────────────────────────────────────

    @extend_schema(request=None, responses=ReportDetailSerializer)
    @action(detail=True, methods=["post"], url_path="approve")
    def approve(self, request: Request, pk: int = None) -> Response:
        require_role(request.user, RoleType.MUNICIPALITY)
        report = ReportWorkflowService.approve_report(int(pk), requesting_user=request.user)
        output = ReportDetailSerializer(report, context={"request": request})
        return Response(output.data, status=status.HTTP_200_OK)

    @extend_schema(request=ReportRejectSerializer, responses=ReportDetailSerializer)
    @action(detail=True, methods=["post"], url_path="reject")
    def reject(self, request: Request, pk: int = None) -> Response:
        require_role(request.user, RoleType.MUNICIPALITY)
        serializer = ReportRejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        report = ReportWorkflowService.reject_report(
            int(pk),
            serializer.validated_data["reason"],
            requesting_user=request.user,
        )
        output = ReportDetailSerializer(report, context={"request": request})
        return Response(output.data, status=status.HTTP_200_OK)

    @extend_schema(request=None, responses=ReportDetailSerializer)
    @action(detail=True, methods=["post"], url_path="delegate")
    def delegate(self, request: Request, pk: int = None) -> Response:
        require_role(request.user, RoleType.MUNICIPALITY)
        report = ReportDelegationService.delegate_to_maintainer(
            int(pk), requesting_user=request.user,
        )
        output = ReportDetailSerializer(report, context={"request": request})
        return Response(output.data, status=status.HTTP_200_OK)

    @extend_schema(request=MaintainerStatusSerializer, responses=ReportDetailSerializer)
    @action(detail=True, methods=["post"], url_path="maintainer-status")
    def maintainer_status(self, request: Request, pk: int = None) -> Response:
        require_role(request.user, RoleType.EXTERNAL_MAINTAINER)
        serializer = MaintainerStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        report = ReportWorkflowService.advance_maintainer_status(
            int(pk),
            maintainer_id=request.user.pk,
            target_status=serializer.validated_data["status"],
            requesting_user=request.user,
        )
        output = ReportDetailSerializer(report, context={"request": request})
        return Response(output.data, status=status.HTTP_200_OK)

    @extend_schema(responses=ReportStatusLogSerializer(many=True))
    @action(detail=True, methods=["get"], url_path="status-log")
    def status_log(self, request: Request, pk: int = None) -> Response:
        logs = ReportQueryService.get_status_log(int(pk), request.user)
        serializer = ReportStatusLogSerializer(logs, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)


# ═══════════════════════════════════════════════════════════════════
#  Comment ViewSet (Nested under Reports)
# ═══════════════════════════════════════════════════════════════════


class CommentViewSet(viewsets.ViewSet):
    """
    Internal comments for a specific report.

    Nested under ``/api/reports/{report_pk}/comments/``.  The caller's
    ``(role_type, id)`` is passed to ``ReportCommentService``, whose gate
    decides access.

    Endpoints
    ---------
        GET    /api/reports/{report_pk}/comments/   → list
        POST   /api/reports/{report_pk}/comments/   → create
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(responses=CommentSerializer(many=True))
    def list(self, request: Request, report_pk: int = None) -> Response:
        actor_type, actor_id = ReportCommentService.actor_for(request.user)
        comments = ReportCommentService.list_comments(int(report_pk), actor_type, actor_id)
        serializer = CommentSerializer(comments, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)

    @extend_schema(request=CommentCreateSerializer, responses=CommentSerializer)
    def create(self, request: Request, report_pk: int = None) -> Response:
        serializer = CommentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        actor_type, actor_id = ReportCommentService.actor_for(request.user)
        comment = ReportCommentService.post_comment(
            int(report_pk),
            actor_type,
            actor_id,
            serializer.validated_data["content"],
        )
        return Response(CommentSerializer(comment).data, status=status.HTTP_201_CREATED)
