# PATH: accounting/api/views/bank_transfers.py

"""
BANK TRANSFERS API

GET  /api/accounting/bank-transfers/              list (accounting.view_banktransfer)
POST /api/accounting/bank-transfers/              create DRAFT (accounting.add_banktransfer)
POST /api/accounting/bank-transfers/<id>/post/    draft -> posted (accounting.change_banktransfer)
POST /api/accounting/bank-transfers/<id>/reverse/ posted -> draft (accounting.change_banktransfer)
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import service_error_response
from accounting.api.serializers.bank_transfers import (
    BankTransferCreateSerializer,
    BankTransferSerializer,
)
from accounting.api.serializers.cash_transactions import ReversalRequestSerializer
from accounting.models.bank_transfer import BankTransfer
from accounting.services.bank_transfer_service import (
    create_bank_transfer,
    post_bank_transfer,
    reverse_bank_transfer,
)
from accounting.services.exceptions import AccountingServiceError

VIEW_PERMISSION = "accounting.view_banktransfer"
ADD_PERMISSION = "accounting.add_banktransfer"
POST_PERMISSION = "accounting.change_banktransfer"


def _forbidden(action: str) -> Response:
    return Response(
        {"detail": f"You do not have permission to {action} bank transfers."},
        status=status.HTTP_403_FORBIDDEN,
    )


def _not_found() -> Response:
    return Response(
        {"detail": "Bank transfer not found.", "code": "not_found"},
        status=status.HTTP_404_NOT_FOUND,
    )


class BankTransferListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = BankTransferCreateSerializer

    @extend_schema(tags=["accounting"], responses=BankTransferSerializer(many=True))
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm(VIEW_PERMISSION):
            return _forbidden("view")

        qs = BankTransfer.objects.select_related("from_bank", "to_bank", "journal_entry")

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(BankTransferSerializer(page, many=True).data)
        return Response(BankTransferSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["accounting"],
        request=BankTransferCreateSerializer,
        responses={201: BankTransferSerializer, 400: dict, 403: dict},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm(ADD_PERMISSION):
            return _forbidden("create")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            transfer = create_bank_transfer(
                from_bank_id=data["from_bank_id"],
                to_bank_id=data["to_bank_id"],
                amount=data["amount"],
                transfer_date=data.get("transfer_date"),
                description=data.get("description", ""),
                user=request.user,
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(BankTransferSerializer(transfer).data, status=status.HTTP_201_CREATED)


class BankTransferPostView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = BankTransferSerializer

    @extend_schema(
        tags=["accounting"],
        request=None,
        responses={200: BankTransferSerializer, 403: dict, 404: dict, 409: dict},
    )
    def post(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(POST_PERMISSION):
            return _forbidden("post")

        try:
            transfer = post_bank_transfer(transfer_id=pk, user=request.user)
        except BankTransfer.DoesNotExist:
            return _not_found()
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(BankTransferSerializer(transfer).data, status=status.HTTP_200_OK)


class BankTransferReverseView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ReversalRequestSerializer

    @extend_schema(
        tags=["accounting"],
        request=ReversalRequestSerializer,
        responses={200: BankTransferSerializer, 403: dict, 404: dict, 409: dict},
    )
    def post(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(POST_PERMISSION):
            return _forbidden("reverse")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            transfer = reverse_bank_transfer(
                transfer_id=pk,
                user=request.user,
                reversal_date=s.validated_data.get("reversal_date"),
            )
        except BankTransfer.DoesNotExist:
            return _not_found()
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(BankTransferSerializer(transfer).data, status=status.HTTP_200_OK)
