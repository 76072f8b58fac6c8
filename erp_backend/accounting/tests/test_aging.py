# accounting/tests/test_aging.py

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from django.test import SimpleTestCase, TestCase

from accounting.services.aging_service import (
    CURRENT,
    DAYS_0_30,
    DAYS_31_60,
    DAYS_61_90,
    DAYS_OVER_90,
    PAYABLE,
    AgingRecord,
    AgingServiceError,
    bucket_records,
    get_aging,
)
from accounting.tests.factories import (
    make_bank,
    make_customer,
    make_purchase,
    make_sale,
    seed_accounts,
)
from payments.models import Payment
from payments.services.payment_service import create_payment, post_payment

AS_OF = date(2025, 6, 30)


def _record(doc_id, *, due_in_days, remaining="100.00", party_id=1, party_name="Acme", due=True):
    due_date = AS_OF + timedelta(days=due_in_days)
    return AgingRecord(
        document_id=doc_id,
        document_number=f"SI{doc_id:04d}",
        party_id=party_id,
        party_name=party_name,
        document_date=due_date if not due else AS_OF - timedelta(days=120),
        due_date=due_date if due else None,
        total_amount=Decimal("100.00"),
        remaining_amount=Decimal(remaining),
    )


class BucketRecordsTests(SimpleTestCase):
    def test_each_record_lands_in_exactly_one_bucket(self):
        cases = [
            (0, DAYS_0_30),
            (-30, DAYS_0_30),
            (-31, DAYS_31_60),
            (-60, DAYS_31_60),
            (-61, DAYS_61_90),
            (-90, DAYS_61_90),
            (-91, DAYS_OVER_90),
            (5, CURRENT),
        ]
        for offset, expected in cases:
            with self.subTest(offset=offset):
                result = bucket_records([_record(1, due_in_days=offset)], AS_OF)
                row = result["records"][0]

                self.assertEqual(row["bucket"], expected)
                self.assertEqual(row[expected], Decimal("100.00"))
                self.assertEqual(
                    sum(row[b] for b in (CURRENT, DAYS_0_30, DAYS_31_60, DAYS_61_90, DAYS_OVER_90)),
                    Decimal("100.00"),
                )

    def test_days_overdue_and_until_due(self):
        result = bucket_records(
            [_record(1, due_in_days=-45), _record(2, due_in_days=10)], AS_OF
        )
        rows = {r["document_id"]: r for r in result["records"]}

        self.assertEqual((rows[1]["days_overdue"], rows[1]["days_until_due"]), (45, 0))
        self.assertEqual((rows[2]["days_overdue"], rows[2]["days_until_due"]), (0, 10))

    def test_missing_due_date_falls_back_to_document_date(self):
        result = bucket_records([_record(1, due_in_days=-70, due=False)], AS_OF)
        row = result["records"][0]

        self.assertEqual(row["due_date"], AS_OF - timedelta(days=70))
        self.assertEqual(row["bucket"], DAYS_61_90)

    def test_settled_records_are_skipped(self):
        result = bucket_records(
            [_record(1, due_in_days=-10, remaining="0.00"), _record(2, due_in_days=-10, remaining="-5")],
            AS_OF,
        )

        self.assertEqual(result["records"], [])
        self.assertEqual(result["grand_total"], Decimal("0.00"))

    def test_party_summaries_and_totals(self):
        records = [
            _record(1, due_in_days=-10, remaining="100.00", party_id=1, party_name="Acme"),
            _record(2, due_in_days=-100, remaining="50.00", party_id=1, party_name="Acme"),
            _record(3, due_in_days=3, remaining="400.00", party_id=2, party_name="Beta"),
        ]

        result = bucket_records(records, AS_OF)

        self.assertEqual([p["party_id"] for p in result["per_party"]], [2, 1])
        acme = result["per_party"][1]
        self.assertEqual(acme["document_count"], 2)
        self.assertEqual(acme[DAYS_0_30], Decimal("100.00"))
        self.assertEqual(acme[DAYS_OVER_90], Decimal("50.00"))
        self.assertEqual(acme["total"], Decimal("150.00"))

        totals = result["totals"]
        self.assertEqual(totals[CURRENT], Decimal("400.00"))
        self.assertEqual(totals["overdue_total"], Decimal("150.00"))
        self.assertEqual(result["grand_total"], Decimal("550.00"))

        # most overdue first
        self.assertEqual([r["document_id"] for r in result["records"]], [2, 1, 3])

    def test_as_of_is_required(self):
        with self.assertRaises(AgingServiceError):
            bucket_records([], None)


class GetAgingTests(TestCase):
    def setUp(self):
        self.accounts = seed_accounts()
        self.bank = make_bank(self.accounts["1102"])
        self.customer = make_customer("Acme Retail")

    def test_receivable_aging_uses_posted_payments(self):
        sale = make_sale(
            "1000.00",
            customer=self.customer,
            sale_date=AS_OF - timedelta(days=40),
        )
        payment = create_payment(
            reference_type=Payment.ReferenceType.SALE,
            document_id=sale.id,
            amount_paid="400.00",
            bank_id=self.bank.id,
            payment_date=AS_OF - timedelta(days=20),
        )
        # a draft payment does not reduce the balance
        create_payment(
            reference_type=Payment.ReferenceType.SALE,
            document_id=sale.id,
            amount_paid="100.00",
            bank_id=self.bank.id,
            payment_date=AS_OF,
        )
        post_payment(payment_id=payment.id)

        result = get_aging(AS_OF)

        self.assertEqual(result["scope"], "receivable")
        self.assertEqual(len(result["records"]), 1)
        row = result["records"][0]
        self.assertEqual(row["document_id"], sale.id)
        self.assertEqual(row["remaining_amount"], Decimal("600.00"))
        self.assertEqual(row["bucket"], DAYS_31_60)
        self.assertEqual(result["per_party"][0]["party_name"], "Acme Retail")

    def test_draft_and_settled_documents_are_excluded(self):
        make_sale("250.00", customer=self.customer, sale_date=AS_OF, confirm=False)
        settled = make_sale("80.00", customer=self.customer, sale_date=AS_OF)
        payment = create_payment(
            reference_type=Payment.ReferenceType.SALE,
            document_id=settled.id,
            amount_paid="80.00",
            bank_id=self.bank.id,
            payment_date=AS_OF,
        )
        post_payment(payment_id=payment.id)

        self.assertEqual(get_aging(AS_OF)["records"], [])

    def test_documents_after_as_of_are_excluded(self):
        make_sale("90.00", customer=self.customer, sale_date=AS_OF + timedelta(days=1))

        self.assertEqual(get_aging(AS_OF)["grand_total"], Decimal("0.00"))

    def test_party_filter(self):
        other = make_customer("Other Shop")
        make_sale("10.00", customer=self.customer, sale_date=AS_OF)
        make_sale("20.00", customer=other, sale_date=AS_OF)

        result = get_aging(AS_OF, party_id=other.id)

        self.assertEqual([r["party_id"] for r in result["records"]], [other.id])

    def test_payable_scope(self):
        purchase = make_purchase(
            "700.00",
            purchase_date=AS_OF - timedelta(days=10),
            due_date=AS_OF + timedelta(days=20),
        )

        result = get_aging(AS_OF, PAYABLE)

        row = result["records"][0]
        self.assertEqual(row["document_id"], purchase.id)
        self.assertEqual(row["bucket"], CURRENT)
        self.assertEqual(row["days_until_due"], 20)
        self.assertEqual(result["totals"][CURRENT], Decimal("700.00"))

    def test_unknown_scope_is_rejected(self):
        with self.assertRaises(AgingServiceError):
            get_aging(AS_OF, "inventory")
