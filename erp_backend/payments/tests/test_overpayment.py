# payments/tests/test_overpayment.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import TestCase

from accounting.services.exceptions import (
    InvalidBankError,
    OverpaymentAlreadyResolvedError,
)
from accounting.tests.factories import make_bank, make_purchase, make_sale, seed_accounts
from payments.models import OverpaymentTransaction, Payment
from payments.services.overpayment_service import (
    resolve_overpayment_refund,
    resolve_overpayment_write_off,
)
from payments.services.payment_service import create_payment, post_payment, reverse_payment

DAY = date(2025, 3, 10)


def _lines(ovp):
    return {l.account.code: (l.debit, l.credit) for l in ovp.journal_entry.lines.select_related("account")}


class OverpaymentResolutionTests(TestCase):
    def setUp(self):
        self.accounts = seed_accounts()
        self.bank = make_bank(self.accounts["1102"], initial_balance="1000.00")

    def _overpaid_sale_payment(self):
        sale = make_sale("1000.00")
        payment = create_payment(
            reference_type=Payment.ReferenceType.SALE,
            document_id=sale.id,
            amount_paid="1200.00",
            bank_id=self.bank.id,
        )
        return post_payment(payment_id=payment.id)

    def _overpaid_purchase_payment(self):
        purchase = make_purchase("500.00")
        payment = create_payment(
            reference_type=Payment.ReferenceType.PURCHASE,
            document_id=purchase.id,
            amount_paid="700.00",
            bank_id=self.bank.id,
        )
        return post_payment(payment_id=payment.id)

    def test_sale_refund(self):
        payment = self._overpaid_sale_payment()

        ovp = resolve_overpayment_refund(
            payment_id=payment.id, transaction_date=DAY, bank_id=self.bank.id, notes="Returned"
        )

        payment.refresh_from_db()
        self.assertEqual(payment.overpayment_status, Payment.OverpaymentStatus.REFUNDED)
        self.assertEqual(ovp.transaction_type, OverpaymentTransaction.Type.REFUND)
        self.assertEqual(ovp.amount, Decimal("200.00"))
        self.assertEqual(ovp.transaction_number, "OVP202503100001")
        self.assertEqual(
            _lines(ovp),
            {
                "2105": (Decimal("200.00"), Decimal("0.00")),
                "1102": (Decimal("0.00"), Decimal("200.00")),
            },
        )

        self.bank.refresh_from_db()
        self.assertEqual(self.bank.stored_balance, Decimal("2000.00"))

    def test_sale_convert_to_income(self):
        payment = self._overpaid_sale_payment()

        ovp = resolve_overpayment_write_off(payment_id=payment.id, transaction_date=DAY)

        payment.refresh_from_db()
        self.assertEqual(payment.overpayment_status, Payment.OverpaymentStatus.CONVERTED_TO_INCOME)
        self.assertEqual(ovp.transaction_type, OverpaymentTransaction.Type.CONVERT_TO_INCOME)
        self.assertIsNone(ovp.bank)
        self.assertEqual(
            _lines(ovp),
            {
                "2105": (Decimal("200.00"), Decimal("0.00")),
                "4103": (Decimal("0.00"), Decimal("200.00")),
            },
        )

        self.bank.refresh_from_db()
        self.assertEqual(self.bank.stored_balance, Decimal("2200.00"))

    def test_purchase_refund(self):
        payment = self._overpaid_purchase_payment()

        ovp = resolve_overpayment_refund(payment_id=payment.id, bank_id=self.bank.id)

        payment.refresh_from_db()
        self.assertEqual(payment.overpayment_status, Payment.OverpaymentStatus.REFUNDED)
        self.assertEqual(
            _lines(ovp),
            {
                "1102": (Decimal("200.00"), Decimal("0.00")),
                "1401": (Decimal("0.00"), Decimal("200.00")),
            },
        )

        self.bank.refresh_from_db()
        self.assertEqual(self.bank.stored_balance, Decimal("500.00"))

    def test_purchase_write_off(self):
        payment = self._overpaid_purchase_payment()

        ovp = resolve_overpayment_write_off(payment_id=payment.id)

        payment.refresh_from_db()
        self.assertEqual(payment.overpayment_status, Payment.OverpaymentStatus.WRITTEN_OFF)
        self.assertEqual(ovp.transaction_type, OverpaymentTransaction.Type.WRITE_OFF)
        self.assertEqual(
            _lines(ovp),
            {
                "7103": (Decimal("200.00"), Decimal("0.00")),
                "1401": (Decimal("0.00"), Decimal("200.00")),
            },
        )

    def test_second_resolution_is_rejected(self):
        payment = self._overpaid_sale_payment()
        resolve_overpayment_refund(payment_id=payment.id, bank_id=self.bank.id)

        with self.assertRaises(OverpaymentAlreadyResolvedError) as ctx:
            resolve_overpayment_write_off(payment_id=payment.id)

        self.assertEqual(ctx.exception.current_status, Payment.OverpaymentStatus.REFUNDED)
        self.assertEqual(payment.overpayment_transactions.count(), 1)

    def test_payment_without_overpayment_cannot_be_resolved(self):
        sale = make_sale("100.00")
        payment = create_payment(
            reference_type=Payment.ReferenceType.SALE,
            document_id=sale.id,
            amount_paid="100.00",
            bank_id=self.bank.id,
        )
        post_payment(payment_id=payment.id)

        with self.assertRaises(OverpaymentAlreadyResolvedError) as ctx:
            resolve_overpayment_refund(payment_id=payment.id, bank_id=self.bank.id)

        self.assertEqual(ctx.exception.current_status, Payment.OverpaymentStatus.NONE)
        self.assertEqual(OverpaymentTransaction.objects.count(), 0)

    def test_refund_with_invalid_bank_leaves_overpayment_pending(self):
        payment = self._overpaid_sale_payment()
        self.bank.is_active = False
        self.bank.save()

        with self.assertRaises(InvalidBankError):
            resolve_overpayment_refund(payment_id=payment.id, bank_id=self.bank.id)
        with self.assertRaises(InvalidBankError):
            resolve_overpayment_refund(payment_id=payment.id, bank_id=None)

        payment.refresh_from_db()
        self.assertEqual(payment.overpayment_status, Payment.OverpaymentStatus.PENDING)
        self.assertEqual(OverpaymentTransaction.objects.count(), 0)

    def test_resolved_payment_cannot_be_reversed(self):
        payment = self._overpaid_sale_payment()
        resolve_overpayment_write_off(payment_id=payment.id)

        with self.assertRaises(OverpaymentAlreadyResolvedError):
            reverse_payment(payment_id=payment.id)

        payment.refresh_from_db()
        self.assertEqual(payment.status, Payment.Status.POSTED)
