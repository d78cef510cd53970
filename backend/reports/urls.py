"""
Reports app URL configuration.

All routes are registered under the ``/api/`` prefix (included from
``backend.urls``).

Route Hierarchy
---------------
  ── Report CRUD + Workflow Actions ──────────────────────────────
  GET    /api/reports/                              → list reports
  POST   /api/reports/                              → submit report
  GET    /api/reports/{id}/                         → retrieve report
  DELETE /api/reports/{id}/                         → delete report
  POST   /api/reports/{id}/approve/                 → approve + assign officer
  POST   /api/reports/{id}/reject/                  → reject with reason
  POST   /api/reports/{id}/delegate/                → delegate to maintainer
  POST   /api/reports/{id}/maintainer-status/       → maintainer progress
  GET    /api/reports/{id}/status-log/              → audit trail

  ── Nested: Comments ────────────────────────────────────────────
  GET    /api/reports/{report_pk}/comments/         → list comments
  POST   /api/reports/{report_pk}/comments/         → post comment
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_nested.routers import NestedDefaultRouter

from .views import CommentViewSet, ReportViewSet

# ── Primary Router ──────────────────────────────────────────────────
router = DefaultRouter()
router.register(
    prefix=r"reports",
    viewset=ReportViewSet,
    basename="report",
)

# ── Nested Router (under /reports/{report_pk}/) ─────────────────────
reports_router = NestedDefaultRouter(
    parent_router=router,
    parent_prefix=r"reports",
    lookup="report",
)
reports_router.register(
    prefix=r"comments",
    viewset=CommentViewSet,
    basename="report-comment",
)

urlpatterns = [
    path("", include(router.urls)),
    path("", include(reports_router.urls)),
]
