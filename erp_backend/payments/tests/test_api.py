# payments/tests/test_api.py

from __future__ import annotations

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from accounting.tests.factories import make_bank, make_sale, make_user, seed_accounts
from payments.models import Payment


class PaymentApiTests(TestCase):
    def setUp(self):
        self.accounts = seed_accounts()
        self.bank = make_bank(self.accounts["1102"])
        self.sale = make_sale("1000.00")
        self.client = APIClient()
        self.client.force_authenticate(user=make_user())

    def _create(self, amount="1200.00"):
        return self.client.post(
            reverse("payments"),
            {
                "reference_type": "sale",
                "document_id": self.sale.id,
                "amount_paid": amount,
                "bank_id": self.bank.id,
                "payment_date": "2025-03-10",
            },
            format="json",
        )

    def _create_and_post(self, amount="1200.00"):
        payment_id = self._create(amount).data["id"]
        res = self.client.post(reverse("payment-post", args=[payment_id]), format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        return res

    def test_create_and_post(self):
        res = self._create()
        self.assertEqual(res.status_code, status.HTTP_201_CREATED, res.data)
        self.assertEqual(res.data["status"], "draft")
        self.assertEqual(res.data["reference_number"], self.sale.sale_number)

        res = self.client.post(reverse("payment-post", args=[res.data["id"]]), format="json")

        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(res.data["status"], "posted")
        self.assertEqual(res.data["applied_amount"], "1000.00")
        self.assertEqual(res.data["overpayment_amount"], "200.00")
        self.assertEqual(res.data["overpayment_status"], "pending")

    def test_refund_then_second_resolution_conflicts(self):
        payment_id = self._create_and_post().data["id"]

        res = self.client.post(
            reverse("payment-overpayment-refund", args=[payment_id]),
            {"bank_id": self.bank.id, "transaction_date": "2025-03-11"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED, res.data)
        self.assertEqual(res.data["transaction_type"], "refund")
        self.assertEqual(res.data["amount"], "200.00")

        res = self.client.post(
            reverse("payment-overpayment-write-off", args=[payment_id]), {}, format="json"
        )
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["code"], "overpayment_already_resolved")
        self.assertEqual(res.data["current_status"], "refunded")

        res = self.client.get(reverse("payment-detail", args=[payment_id]))
        self.assertEqual(res.data["overpayment_status"], "refunded")
        self.assertEqual(len(res.data["overpayment_transactions"]), 1)

    def test_write_off_converts_sale_overpayment(self):
        payment_id = self._create_and_post().data["id"]

        res = self.client.post(
            reverse("payment-overpayment-write-off", args=[payment_id]), {}, format="json"
        )

        self.assertEqual(res.status_code, status.HTTP_201_CREATED, res.data)
        self.assertEqual(res.data["transaction_type"], "convert_to_income")

    def test_refund_requires_valid_bank(self):
        payment_id = self._create_and_post().data["id"]

        res = self.client.post(
            reverse("payment-overpayment-refund", args=[payment_id]),
            {"bank_id": 987654},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["code"], "invalid_bank")
        self.assertEqual(
            Payment.objects.get(pk=payment_id).overpayment_status,
            Payment.OverpaymentStatus.PENDING,
        )

    def test_reverse_and_not_posted_conflict(self):
        payment_id = self._create_and_post("300.00").data["id"]

        res = self.client.post(reverse("payment-reverse", args=[payment_id]), {}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(res.data["status"], "draft")

        res = self.client.post(reverse("payment-reverse", args=[payment_id]), {}, format="json")
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["code"], "not_posted")

    def test_list_filters_by_overpayment_status(self):
        self._create_and_post()
        self._create("50.00")

        res = self.client.get(reverse("payments"), {"overpayment_status": "pending"})

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(len(res.data["results"]), 1)

    def test_missing_payment_is_404(self):
        for name in ("payment-detail", "payment-post"):
            with self.subTest(name=name):
                url = reverse(name, args=[999999])
                res = self.client.get(url) if name == "payment-detail" else self.client.post(url)
                self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_user_without_permission_is_403(self):
        self.client.force_authenticate(user=make_user("cashier", superuser=False))

        self.assertEqual(self.client.get(reverse("payments")).status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self._create().status_code, status.HTTP_403_FORBIDDEN)
