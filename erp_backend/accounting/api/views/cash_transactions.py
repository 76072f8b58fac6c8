# PATH: accounting/api/views/cash_transactions.py

"""
PATH: accounting/api/views/cash_transactions.py

CASH TRANSACTIONS API

GET  /api/accounting/cash-transactions/              list (accounting.view_cashtransaction)
POST /api/accounting/cash-transactions/              create DRAFT (accounting.add_cashtransaction)
POST /api/accounting/cash-transactions/<id>/post/    draft -> posted (accounting.change_cashtransaction)
POST /api/accounting/cash-transactions/<id>/reverse/ posted -> draft (accounting.change_cashtransaction)

Service errors come back as {"detail", "code"} (see accounting.api.errors).
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import service_error_response
from accounting.api.serializers.cash_transactions import (
    CashTransactionCreateSerializer,
    CashTransactionSerializer,
    ReversalRequestSerializer,
)
from accounting.models.cash_transaction import CashTransaction
from accounting.services.cash_posting_service import (
    create_cash_transaction,
    post_cash_transaction,
    reverse_cash_transaction,
)
from accounting.services.exceptions import AccountingServiceError

VIEW_PERMISSION = "accounting.view_cashtransaction"
ADD_PERMISSION = "accounting.add_cashtransaction"
POST_PERMISSION = "accounting.change_cashtransaction"


def _forbidden(action: str) -> Response:
    return Response(
        {"detail": f"You do not have permission to {action} cash transactions."},
        status=status.HTTP_403_FORBIDDEN,
    )


def _not_found() -> Response:
    return Response(
        {"detail": "Cash transaction not found.", "code": "not_found"},
        status=status.HTTP_404_NOT_FOUND,
    )


class CashTransactionListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = CashTransactionCreateSerializer

    @extend_schema(tags=["accounting"], responses=CashTransactionSerializer(many=True))
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm(VIEW_PERMISSION):
            return _forbidden("view")

        qs = CashTransaction.objects.select_related("bank", "account", "journal_entry")

        kind = request.query_params.get("kind")
        if kind in CashTransaction.Kind.values:
            qs = qs.filter(kind=kind)

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(CashTransactionSerializer(page, many=True).data)
        return Response(CashTransactionSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["accounting"],
        request=CashTransactionCreateSerializer,
        responses={201: CashTransactionSerializer, 400: dict, 403: dict},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm(ADD_PERMISSION):
            return _forbidden("create")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            tx = create_cash_transaction(
                kind=data["kind"],
                bank_id=data["bank_id"],
                account_id=data["account_id"],
                amount=data["amount"],
                transaction_date=data.get("transaction_date"),
                description=data.get("description", ""),
                user=request.user,
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(CashTransactionSerializer(tx).data, status=status.HTTP_201_CREATED)


class CashTransactionPostView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = CashTransactionSerializer

    @extend_schema(
        tags=["accounting"],
        request=None,
        responses={200: CashTransactionSerializer, 403: dict, 404: dict, 409: dict},
    )
    def post(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(POST_PERMISSION):
            return _forbidden("post")

        try:
            tx = post_cash_transaction(transaction_id=pk, user=request.user)
        except CashTransaction.DoesNotExist:
            return _not_found()
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(CashTransactionSerializer(tx).data, status=status.HTTP_200_OK)


class CashTransactionReverseView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ReversalRequestSerializer

    @extend_schema(
        tags=["accounting"],
        request=ReversalRequestSerializer,
        responses={200: CashTransactionSerializer, 403: dict, 404: dict, 409: dict},
    )
    def post(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(POST_PERMISSION):
            return _forbidden("reverse")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            tx = reverse_cash_transaction(
                transaction_id=pk,
                user=request.user,
                reversal_date=s.validated_data.get("reversal_date"),
            )
        except CashTransaction.DoesNotExist:
            return _not_found()
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(CashTransactionSerializer(tx).data, status=status.HTTP_200_OK)
