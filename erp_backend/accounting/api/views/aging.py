"""
PATH: accounting/api/views/aging.py

AGING API VIEW (READ-ONLY)

GET /api/accounting/aging/?as_of=YYYY-MM-DD&scope=receivable|payable[&party_id=<id>]

as_of defaults to today. Requires accounting.view_journalentry.
"""

from __future__ import annotations

from django.utils import timezone
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.api.serializers.aging import AgingQuerySerializer, AgingSerializer
from accounting.services.aging_service import AgingServiceError, get_aging


@extend_schema(
    tags=["accounting"],
    parameters=[
        OpenApiParameter(name="as_of", type=str, required=False, description="YYYY-MM-DD (default: today)"),
        OpenApiParameter(name="scope", type=str, required=False, enum=["receivable", "payable"]),
        OpenApiParameter(name="party_id", type=int, required=False, description="Customer or supplier id"),
    ],
    responses={200: AgingSerializer},
)
class AgingView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        if not request.user.has_perm("accounting.view_journalentry"):
            return Response(
                {"detail": "You do not have permission to view aging reports."},
                status=status.HTTP_403_FORBIDDEN,
            )

        q = AgingQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        params = q.validated_data

        try:
            data = get_aging(
                params.get("as_of") or timezone.localdate(),
                params["scope"],
                party_id=params.get("party_id"),
            )
        except AgingServiceError as exc:
            return Response(
                {"detail": str(exc), "code": "invalid_query"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        return Response(AgingSerializer(data).data, status=status.HTTP_200_OK)
