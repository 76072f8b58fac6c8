# accounting/tests/test_bank_transfers.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from accounting.models.bank import Bank
from accounting.models.bank_transfer import BankTransfer
from accounting.models.journal import JournalEntry
from accounting.services.bank_balance_service import get_bank_balances
from accounting.services.bank_transfer_service import (
    create_bank_transfer,
    post_bank_transfer,
    reverse_bank_transfer,
)
from accounting.services.exceptions import (
    AlreadyPostedError,
    InputValidationError,
    InvalidAmountError,
    InvalidBankError,
    NotPostedError,
)
from accounting.tests.factories import make_bank, make_user, seed_accounts

DAY = date(2025, 1, 14)


class BankTransferServiceTests(TestCase):
    def setUp(self):
        self.accounts = seed_accounts()
        self.bank = make_bank(self.accounts["1102"], initial_balance="1000.00")
        self.cash = make_bank(
            self.accounts["1101"], name="Cash Register", bank_type=Bank.BankType.CASH
        )

    def _transfer(self, amount="300.00"):
        return create_bank_transfer(
            from_bank_id=self.bank.id,
            to_bank_id=self.cash.id,
            amount=amount,
            transfer_date=DAY,
        )

    def test_create_numbers_draft(self):
        transfer = self._transfer()

        self.assertEqual(transfer.number, "TRF202501140001")
        self.assertEqual(transfer.status, BankTransfer.Status.DRAFT)
        self.assertFalse(
            JournalEntry.objects.filter(source_type=JournalEntry.SourceType.BANK_TRANSFER).exists()
        )

    def test_post_moves_money_between_banks(self):
        transfer = post_bank_transfer(transfer_id=self._transfer().id)

        self.assertEqual(transfer.status, BankTransfer.Status.POSTED)
        je = transfer.journal_entry
        self.assertEqual(je.source_type, JournalEntry.SourceType.BANK_TRANSFER)
        lines = {l.account.code: (l.debit, l.credit) for l in je.lines.select_related("account")}
        self.assertEqual(
            lines,
            {
                "1101": (Decimal("300.00"), Decimal("0.00")),
                "1102": (Decimal("0.00"), Decimal("300.00")),
            },
        )

        balances = {r["bank_id"]: r for r in get_bank_balances()}
        self.assertEqual(balances[self.bank.id]["stored_balance"], Decimal("700.00"))
        self.assertEqual(balances[self.cash.id]["stored_balance"], Decimal("300.00"))
        self.assertFalse(any(r["is_divergent"] for r in balances.values()))

    def test_post_twice_is_rejected(self):
        transfer = self._transfer()
        post_bank_transfer(transfer_id=transfer.id)

        with self.assertRaises(AlreadyPostedError) as ctx:
            post_bank_transfer(transfer_id=transfer.id)

        self.assertEqual(ctx.exception.current_status, BankTransfer.Status.POSTED)

    def test_reverse_restores_both_banks(self):
        transfer = self._transfer()
        post_bank_transfer(transfer_id=transfer.id)

        transfer = reverse_bank_transfer(transfer_id=transfer.id, reversal_date=DAY)

        self.assertEqual(transfer.status, BankTransfer.Status.DRAFT)
        self.assertIsNone(transfer.journal_entry)
        self.bank.refresh_from_db()
        self.cash.refresh_from_db()
        self.assertEqual(self.bank.stored_balance, Decimal("1000.00"))
        self.assertEqual(self.cash.stored_balance, Decimal("0.00"))

        with self.assertRaises(NotPostedError):
            reverse_bank_transfer(transfer_id=transfer.id)

    def test_create_validates_input(self):
        with self.assertRaises(InvalidAmountError):
            self._transfer(amount="0")
        with self.assertRaises(InputValidationError):
            create_bank_transfer(from_bank_id=self.bank.id, to_bank_id=self.bank.id, amount="10")
        with self.assertRaises(InvalidBankError):
            create_bank_transfer(from_bank_id=self.bank.id, to_bank_id=987654, amount="10")

        self.assertEqual(BankTransfer.objects.count(), 0)

    def test_inactive_bank_cannot_post(self):
        transfer = self._transfer()
        self.cash.is_active = False
        self.cash.save()

        with self.assertRaises(InvalidBankError):
            post_bank_transfer(transfer_id=transfer.id)


class BankTransferApiTests(TestCase):
    def setUp(self):
        self.accounts = seed_accounts()
        self.bank = make_bank(self.accounts["1102"], initial_balance="1000.00")
        self.cash = make_bank(self.accounts["1101"], name="Cash Register")
        self.client = APIClient()
        self.client.force_authenticate(user=make_user())

    def test_create_post_reverse_flow(self):
        res = self.client.post(
            reverse("bank-transfers"),
            {
                "from_bank_id": self.bank.id,
                "to_bank_id": self.cash.id,
                "amount": "250.00",
                "transfer_date": "2025-01-14",
            },
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED, res.data)
        transfer_id = res.data["id"]

        res = self.client.post(reverse("bank-transfer-post", args=[transfer_id]), format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(res.data["status"], "posted")
        self.assertIsNotNone(res.data["journal_number"])

        res = self.client.post(reverse("bank-transfer-post", args=[transfer_id]), format="json")
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)

        res = self.client.post(reverse("bank-transfer-reverse", args=[transfer_id]), format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(res.data["status"], "draft")

    def test_same_bank_is_400(self):
        res = self.client.post(
            reverse("bank-transfers"),
            {"from_bank_id": self.bank.id, "to_bank_id": self.bank.id, "amount": "10.00"},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["code"], "invalid_input")

    def test_missing_transfer_is_404(self):
        res = self.client.post(reverse("bank-transfer-post", args=[999999]), format="json")

        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_permission_required(self):
        self.client.force_authenticate(user=make_user("clerk", superuser=False))

        res = self.client.get(reverse("bank-transfers"))

        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
