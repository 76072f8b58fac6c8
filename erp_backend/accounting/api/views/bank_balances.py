"""
PATH: accounting/api/views/bank_balances.py

BANK BALANCES API VIEW (READ-ONLY)

GET /api/accounting/bank-balances/[?include_inactive=true]

Stored vs ledger-calculated balance per bank; divergence is reported, never fixed.
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.api.serializers.bank_balances import BankBalanceSerializer
from accounting.services.bank_balance_service import get_bank_balances


@extend_schema(
    tags=["accounting"],
    parameters=[OpenApiParameter(name="include_inactive", type=bool, required=False)],
    responses={200: BankBalanceSerializer(many=True)},
)
class BankBalancesView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        if not request.user.has_perm("accounting.view_bank"):
            return Response(
                {"detail": "You do not have permission to view bank balances."},
                status=status.HTTP_403_FORBIDDEN,
            )

        include_inactive = str(request.query_params.get("include_inactive", "")).lower() in (
            "1",
            "true",
            "yes",
        )
        rows = get_bank_balances(include_inactive=include_inactive)
        return Response(BankBalanceSerializer(rows, many=True).data, status=status.HTTP_200_OK)
