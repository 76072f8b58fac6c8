"""
PATH: accounting/api/views/ledger.py

GENERAL LEDGER API VIEW (READ-ONLY)

GET /api/accounting/ledger/?date_from=YYYY-MM-DD&date_to=YYYY-MM-DD
    [&account_id=<id>[&include_children=true]]
    [&bank_id=<id>]

- account_id omitted -> per-account summary for the period
- bank_id            -> ledger of the bank's asset account
- Permission-gated: requires accounting.view_journalentry
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.api.serializers.ledger import LedgerQuerySerializer, LedgerSerializer
from accounting.models.account import Account
from accounting.models.bank import Bank
from accounting.services.ledger_service import (
    LedgerServiceError,
    get_bank_ledger,
    get_ledger,
)


@extend_schema(
    tags=["accounting"],
    parameters=[
        OpenApiParameter(name="date_from", type=str, required=True, description="YYYY-MM-DD"),
        OpenApiParameter(name="date_to", type=str, required=True, description="YYYY-MM-DD"),
        OpenApiParameter(
            name="account_id",
            type=int,
            required=False,
            description="Account ledger. Omit for an all-account summary.",
        ),
        OpenApiParameter(
            name="include_children",
            type=bool,
            required=False,
            description="Roll up lines of every descendant account.",
        ),
        OpenApiParameter(name="bank_id", type=int, required=False),
    ],
    responses={200: LedgerSerializer},
)
class LedgerView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        if not request.user.has_perm("accounting.view_journalentry"):
            return Response(
                {"detail": "You do not have permission to view the ledger."},
                status=status.HTTP_403_FORBIDDEN,
            )

        q = LedgerQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        params = q.validated_data

        try:
            if params.get("bank_id"):
                bank = Bank.objects.select_related("account").filter(pk=params["bank_id"]).first()
                if bank is None:
                    return Response(
                        {"detail": "Bank not found", "code": "not_found"},
                        status=status.HTTP_404_NOT_FOUND,
                    )
                data = get_bank_ledger(bank, params["date_from"], params["date_to"])
            else:
                account = None
                if params.get("account_id"):
                    account = Account.objects.filter(pk=params["account_id"]).first()
                    if account is None:
                        return Response(
                            {"detail": "Account not found", "code": "not_found"},
                            status=status.HTTP_404_NOT_FOUND,
                        )
                data = get_ledger(
                    account,
                    params["date_from"],
                    params["date_to"],
                    include_descendants=params.get("include_children", False),
                )
        except LedgerServiceError as exc:
            return Response(
                {"detail": str(exc), "code": "invalid_query"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        return Response(LedgerSerializer(data).data, status=status.HTTP_200_OK)
