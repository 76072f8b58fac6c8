# accounting/tests/test_api.py

from __future__ import annotations

from django.contrib.auth.models import Permission
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from accounting.models.cash_transaction import CashTransaction
from accounting.models.journal import JournalEntry
from accounting.tests.factories import make_bank, make_user, seed_accounts


class CashTransactionApiTests(TestCase):
    def setUp(self):
        self.accounts = seed_accounts()
        self.bank = make_bank(self.accounts["1102"], initial_balance="1000.00")
        self.client = APIClient()
        self.client.force_authenticate(user=make_user())

    def _create(self, **overrides):
        payload = {
            "kind": "cash_in",
            "bank_id": self.bank.id,
            "account_id": self.accounts["4101"].id,
            "amount": "500.00",
            "transaction_date": "2025-01-14",
        }
        payload.update(overrides)
        return self.client.post(reverse("cash-transactions"), payload, format="json")

    def test_create_post_reverse_flow(self):
        res = self._create()
        self.assertEqual(res.status_code, status.HTTP_201_CREATED, res.data)
        self.assertEqual(res.data["status"], "draft")
        self.assertEqual(res.data["number"], "CI2025011400001")
        tx_id = res.data["id"]

        res = self.client.post(reverse("cash-transaction-post", args=[tx_id]), format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(res.data["status"], "posted")
        self.assertIsNotNone(res.data["journal_number"])

        res = self.client.post(reverse("cash-transaction-post", args=[tx_id]), format="json")
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["code"], "already_posted")
        self.assertEqual(res.data["current_status"], "posted")

        res = self.client.post(
            reverse("cash-transaction-reverse", args=[tx_id]),
            {"reversal_date": "2025-01-15"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(res.data["status"], "draft")

        res = self.client.post(reverse("cash-transaction-reverse", args=[tx_id]), format="json")
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["code"], "not_posted")

        self.assertEqual(
            JournalEntry.objects.filter(source_type=JournalEntry.SourceType.CASH_IN).count(), 2
        )

    def test_invalid_input_is_400(self):
        res = self._create(amount="0")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

        res = self._create(account_id=self.accounts["6101"].id)
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["code"], "invalid_input")

        res = self._create(bank_id=987654)
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["code"], "invalid_bank")

        self.assertEqual(CashTransaction.objects.count(), 0)

    def test_missing_transaction_is_404(self):
        res = self.client.post(reverse("cash-transaction-post", args=[999999]), format="json")

        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(res.data["code"], "not_found")

    def test_list_filters_by_kind(self):
        self._create()
        self._create(kind="cash_out", account_id=self.accounts["6101"].id, amount="20.00")

        res = self.client.get(reverse("cash-transactions"), {"kind": "cash_out"})

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([r["kind"] for r in res.data["results"]], ["cash_out"])


class ReportApiTests(TestCase):
    def setUp(self):
        self.accounts = seed_accounts()
        self.bank = make_bank(self.accounts["1102"])
        self.client = APIClient()
        self.client.force_authenticate(user=make_user())

        res = self.client.post(
            reverse("cash-transactions"),
            {
                "kind": "cash_in",
                "bank_id": self.bank.id,
                "account_id": self.accounts["4101"].id,
                "amount": "300.00",
                "transaction_date": "2025-01-14",
            },
            format="json",
        )
        self.client.post(reverse("cash-transaction-post", args=[res.data["id"]]), format="json")

    def test_account_ledger(self):
        res = self.client.get(
            reverse("ledger"),
            {"account_id": self.accounts["1102"].id, "date_from": "2025-01-01", "date_to": "2025-01-31"},
        )

        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(res.data["closing_balance"], "300.00")
        self.assertEqual(len(res.data["lines"]), 1)

    def test_bank_ledger(self):
        res = self.client.get(
            reverse("ledger"),
            {"bank_id": self.bank.id, "date_from": "2025-01-01", "date_to": "2025-01-31"},
        )

        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(res.data["bank_name"], "Main Bank")

    def test_ledger_summary(self):
        res = self.client.get(reverse("ledger"), {"date_from": "2025-01-01", "date_to": "2025-01-31"})

        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(
            sorted(a["account_code"] for a in res.data["accounts"]), ["1102", "4101"]
        )

    def test_ledger_rejects_reversed_range(self):
        res = self.client.get(reverse("ledger"), {"date_from": "2025-02-01", "date_to": "2025-01-01"})

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_ledger_unknown_account_is_404(self):
        res = self.client.get(
            reverse("ledger"),
            {"account_id": 999999, "date_from": "2025-01-01", "date_to": "2025-01-31"},
        )

        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_aging(self):
        res = self.client.get(reverse("aging"), {"as_of": "2025-01-31", "scope": "payable"})

        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(res.data["scope"], "payable")
        self.assertEqual(res.data["grand_total"], "0.00")

    def test_bank_balances(self):
        res = self.client.get(reverse("bank-balances"))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data[0]["stored_balance"], "300.00")
        self.assertFalse(res.data[0]["is_divergent"])

    def test_journal_entries(self):
        res = self.client.get(reverse("journal-entry-list"), {"source_type": "cash_in"})

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        [entry] = res.data["results"]
        self.assertEqual(len(entry["lines"]), 2)
        self.assertFalse(entry["is_reversed"])

        res = self.client.get(reverse("journal-entry-detail", args=[entry["id"]]))
        self.assertEqual(res.status_code, status.HTTP_200_OK)


class ApiPermissionTests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_unauthenticated_is_401(self):
        res = self.client.get(reverse("bank-balances"))

        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_missing_model_permission_is_403(self):
        user = make_user("clerk", superuser=False)
        self.client.force_authenticate(user=user)

        for url in (reverse("bank-balances"), reverse("cash-transactions"), reverse("aging")):
            with self.subTest(url=url):
                self.assertEqual(self.client.get(url).status_code, status.HTTP_403_FORBIDDEN)

        res = self.client.post(reverse("cash-transaction-post", args=[1]), format="json")
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_granted_permission_opens_endpoint(self):
        user = make_user("viewer", superuser=False)
        user.user_permissions.add(
            Permission.objects.get(codename="view_bank", content_type__app_label="accounting")
        )
        self.client.force_authenticate(user=user)

        self.assertEqual(self.client.get(reverse("bank-balances")).status_code, status.HTTP_200_OK)


class RoutingTests(TestCase):
    def test_project_routes(self):
        self.assertEqual(reverse("schema"), "/api/schema/")
        self.assertEqual(reverse("jwt-create"), "/api/auth/jwt/create/")
        self.assertEqual(reverse("bank-transfers"), "/api/accounting/bank-transfers/")
        self.assertEqual(reverse("admin:index"), "/admin/")
