"""
Core app views — **Thin Views**.

Each view delegates all business logic to the corresponding service in
``core.services``.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from drf_spectacular.utils import OpenApiResponse, extend_schema

from .serializers import SystemConstantsSerializer
from .services import SystemConstantsService


class SystemConstantsView(APIView):
    """
    **GET /api/core/constants/**

    Return report categories, statuses, role types and the category →
    office routing table so the frontend can build dropdowns and filters
    without hardcoding values.

    **Authentication**: Not required (``AllowAny``).
    """

    permission_classes = [AllowAny]

    @extend_schema(
        summary="System constants",
        description=(
            "Return report categories, statuses, role types and the "
            "category to office routing table."
        ),
        responses={200: OpenApiResponse(response=SystemConstantsSerializer, description="System constants.")},
        tags=["System"],
    )
    def get(self, request: Request) -> Response:
        data = SystemConstantsService.get_constants()
        serializer = SystemConstantsSerializer(data)
        return Response(serializer.data, status=status.HTTP_200_OK)
