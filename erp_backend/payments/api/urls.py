# payments/api/urls.py

from django.urls import path

from payments.api.views import (
    OverpaymentRefundView,
    OverpaymentWriteOffView,
    PaymentDetailView,
    PaymentListCreateView,
    PaymentPostView,
    PaymentReverseView,
)

urlpatterns = [
    path("", PaymentListCreateView.as_view(), name="payments"),
    path("<int:pk>/", PaymentDetailView.as_view(), name="payment-detail"),
    path("<int:pk>/post/", PaymentPostView.as_view(), name="payment-post"),
    path("<int:pk>/reverse/", PaymentReverseView.as_view(), name="payment-reverse"),
    path(
        "<int:pk>/overpayment/refund/",
        OverpaymentRefundView.as_view(),
        name="payment-overpayment-refund",
    ),
    path(
        "<int:pk>/overpayment/write-off/",
        OverpaymentWriteOffView.as_view(),
        name="payment-overpayment-write-off",
    ),
]
