# PATH: payments/api/views.py

"""
PATH: payments/api/views.py

SALE / PURCHASE PAYMENTS API

GET  /api/payments/                                 list (payments.view_payment)
POST /api/payments/                                 create DRAFT (payments.add_payment)
GET  /api/payments/<id>/                            detail (payments.view_payment)
POST /api/payments/<id>/post/                       draft -> posted
POST /api/payments/<id>/reverse/                    posted -> draft
POST /api/payments/<id>/overpayment/refund/         pending -> refunded
POST /api/payments/<id>/overpayment/write-off/      pending -> converted_to_income (sale)
                                                    pending -> written_off (purchase)

State-changing actions require payments.change_payment.
Service errors come back as {"detail", "code"} (see accounting.api.errors).
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import service_error_response
from accounting.services.exceptions import AccountingServiceError
from payments.api.serializers import (
    OverpaymentRefundSerializer,
    OverpaymentTransactionSerializer,
    OverpaymentWriteOffSerializer,
    PaymentCreateSerializer,
    PaymentReverseSerializer,
    PaymentSerializer,
)
from payments.models import Payment
from payments.services.overpayment_service import (
    resolve_overpayment_refund,
    resolve_overpayment_write_off,
)
from payments.services.payment_service import (
    create_payment,
    post_payment,
    reverse_payment,
)

VIEW_PERMISSION = "payments.view_payment"
ADD_PERMISSION = "payments.add_payment"
CHANGE_PERMISSION = "payments.change_payment"


def _forbidden(action: str) -> Response:
    return Response(
        {"detail": f"You do not have permission to {action} payments."},
        status=status.HTTP_403_FORBIDDEN,
    )


def _not_found() -> Response:
    return Response(
        {"detail": "Payment not found.", "code": "not_found"},
        status=status.HTTP_404_NOT_FOUND,
    )


def _payment_queryset():
    return Payment.objects.select_related("bank", "sale", "purchase").prefetch_related(
        "overpayment_transactions__journal_entry"
    )


def _payment_response(payment: Payment, http_status=status.HTTP_200_OK) -> Response:
    payment = _payment_queryset().get(pk=payment.pk)
    return Response(PaymentSerializer(payment).data, status=http_status)


class PaymentListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = PaymentCreateSerializer

    @extend_schema(tags=["payments"], responses=PaymentSerializer(many=True))
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm(VIEW_PERMISSION):
            return _forbidden("view")

        qs = _payment_queryset()
        qp = request.query_params

        reference_type = qp.get("reference_type")
        if reference_type in Payment.ReferenceType.values:
            qs = qs.filter(reference_type=reference_type)

        overpayment_status = qp.get("overpayment_status")
        if overpayment_status in Payment.OverpaymentStatus.values:
            qs = qs.filter(overpayment_status=overpayment_status)

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(PaymentSerializer(page, many=True).data)
        return Response(PaymentSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["payments"],
        request=PaymentCreateSerializer,
        responses={201: PaymentSerializer, 400: dict, 403: dict},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm(ADD_PERMISSION):
            return _forbidden("create")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            payment = create_payment(
                reference_type=data["reference_type"],
                document_id=data["document_id"],
                amount_paid=data["amount_paid"],
                bank_id=data["bank_id"],
                payment_date=data.get("payment_date"),
                payment_method=data.get("payment_method", Payment.Method.TRANSFER),
                notes=data.get("notes", ""),
                user=request.user,
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return _payment_response(payment, status.HTTP_201_CREATED)


class PaymentDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = PaymentSerializer

    @extend_schema(tags=["payments"], responses={200: PaymentSerializer, 404: dict})
    def get(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(VIEW_PERMISSION):
            return _forbidden("view")

        payment = _payment_queryset().filter(pk=pk).first()
        if payment is None:
            return _not_found()
        return Response(PaymentSerializer(payment).data, status=status.HTTP_200_OK)


class PaymentPostView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = PaymentSerializer

    @extend_schema(
        tags=["payments"],
        request=None,
        responses={200: PaymentSerializer, 400: dict, 403: dict, 404: dict, 409: dict},
    )
    def post(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(CHANGE_PERMISSION):
            return _forbidden("post")

        try:
            payment = post_payment(payment_id=pk, user=request.user)
        except Payment.DoesNotExist:
            return _not_found()
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return _payment_response(payment)


class PaymentReverseView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = PaymentReverseSerializer

    @extend_schema(
        tags=["payments"],
        request=PaymentReverseSerializer,
        responses={200: PaymentSerializer, 403: dict, 404: dict, 409: dict},
    )
    def post(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(CHANGE_PERMISSION):
            return _forbidden("reverse")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            payment = reverse_payment(
                payment_id=pk,
                user=request.user,
                reversal_date=s.validated_data.get("reversal_date"),
            )
        except Payment.DoesNotExist:
            return _not_found()
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return _payment_response(payment)


class OverpaymentRefundView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = OverpaymentRefundSerializer

    @extend_schema(
        tags=["payments"],
        request=OverpaymentRefundSerializer,
        responses={201: OverpaymentTransactionSerializer, 400: dict, 403: dict, 404: dict, 409: dict},
    )
    def post(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(CHANGE_PERMISSION):
            return _forbidden("resolve overpayments on")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            ovp = resolve_overpayment_refund(
                payment_id=pk,
                transaction_date=data.get("transaction_date"),
                bank_id=data["bank_id"],
                notes=data.get("notes", ""),
                user=request.user,
            )
        except Payment.DoesNotExist:
            return _not_found()
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(
            OverpaymentTransactionSerializer(ovp).data, status=status.HTTP_201_CREATED
        )


class OverpaymentWriteOffView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = OverpaymentWriteOffSerializer

    @extend_schema(
        tags=["payments"],
        request=OverpaymentWriteOffSerializer,
        responses={201: OverpaymentTransactionSerializer, 403: dict, 404: dict, 409: dict},
    )
    def post(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(CHANGE_PERMISSION):
            return _forbidden("resolve overpayments on")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            ovp = resolve_overpayment_write_off(
                payment_id=pk,
                transaction_date=data.get("transaction_date"),
                notes=data.get("notes", ""),
                user=request.user,
            )
        except Payment.DoesNotExist:
            return _not_found()
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(
            OverpaymentTransactionSerializer(ovp).data, status=status.HTTP_201_CREATED
        )
