"""
Tests for daily receipt summaries and reconciliation close-out.
"""

from datetime import date, datetime
from decimal import Decimal

from django.conf import settings
from django.test import TestCase, override_settings
from django.utils import timezone

from apps.core.exceptions import MissingAccountError, SettlementValidationError
from apps.ledger.models import ActivityType, LedgerAccount, Transaction
from apps.loans.models import Receipt
from apps.loans.services import PaymentAllocationService
from apps.reconciliation.models import Reconciliation
from apps.reconciliation.services import ReconciliationService
from tests.helpers import ledger_account, make_active_loan, make_client, make_user

DAY = date(2024, 3, 1)


def at(day, hour=10):
    return timezone.make_aware(datetime(day.year, day.month, day.day, hour))


class ReconciliationTestMixin:

    def setUp(self):
        self.officer = make_user('officer')
        self.clerk = make_user('clerk')
        self.other_clerk = make_user('other')
        self.loan = make_active_loan(make_client(), self.officer)

    def collect(self, amount, clerk=None, day=DAY, hour=10):
        return PaymentAllocationService.allocate_payment(
            self.loan.pk,
            Decimal(amount),
            received_by=clerk or self.clerk,
            receipt_date=at(day, hour),
        ).receipt


class CloseReconciliationTests(ReconciliationTestMixin, TestCase):

    def test_posts_surrendered_not_expected(self):
        """Receipts of 500, 480 handed in: 480 moves to Cash on Hand."""
        self.collect('300')
        self.collect('200', hour=15)

        reconciliation = ReconciliationService.close(
            DAY, self.clerk.pk, Decimal('480'), notes='short 20', reconciled_by=self.officer,
        )

        self.assertEqual(reconciliation.amount_expected, Decimal('500'))
        self.assertEqual(reconciliation.amount_surrendered, Decimal('480'))
        self.assertEqual(reconciliation.variance, Decimal('-20'))
        self.assertEqual(reconciliation.receipts.count(), 2)

        entry = Transaction.objects.get(activity_type=ActivityType.RECONCILIATION)
        self.assertEqual(entry.amount, Decimal('480'))
        self.assertEqual(entry.debit_account, ledger_account(LedgerAccount.CASH_ON_HAND))
        self.assertEqual(entry.credit_account, ledger_account(LedgerAccount.UNRECONCILED_RECEIPTS))
        # The shortfall stays in Unreconciled Receipts
        self.assertEqual(
            ledger_account(LedgerAccount.UNRECONCILED_RECEIPTS).balance(), Decimal('20'),
        )

    def test_only_that_clerk_and_day(self):
        self.collect('100')
        self.collect('40', clerk=self.other_clerk)
        self.collect('60', day=date(2024, 3, 2))

        reconciliation = ReconciliationService.close(DAY, self.clerk.pk, Decimal('100'))

        self.assertEqual(reconciliation.amount_expected, Decimal('100'))
        self.assertEqual(reconciliation.receipts.count(), 1)

    def test_zero_surrendered_posts_nothing(self):
        self.collect('100')
        reconciliation = ReconciliationService.close(DAY, self.clerk.pk, Decimal('0'))
        self.assertEqual(reconciliation.variance, Decimal('-100'))
        self.assertFalse(
            Transaction.objects.filter(activity_type=ActivityType.RECONCILIATION).exists()
        )

    def test_receipts_unchanged_by_close(self):
        receipt = self.collect('100')
        ReconciliationService.close(DAY, self.clerk.pk, Decimal('100'))
        stored = Receipt.objects.get(pk=receipt.pk)
        self.assertEqual(stored.amount, receipt.amount)
        self.assertEqual(stored.receipt_date, receipt.receipt_date)

    def test_negative_amount_rejected(self):
        with self.assertRaises(SettlementValidationError):
            ReconciliationService.close(DAY, self.clerk.pk, Decimal('-1'))
        self.assertFalse(Reconciliation.objects.exists())

    def test_unknown_clerk_rejected(self):
        with self.assertRaises(SettlementValidationError):
            ReconciliationService.close(DAY, 999999, Decimal('10'))

    def test_second_close_is_not_blocked(self):
        self.collect('100')
        ReconciliationService.close(DAY, self.clerk.pk, Decimal('100'))
        ReconciliationService.close(DAY, self.clerk.pk, Decimal('100'))
        self.assertEqual(Reconciliation.objects.count(), 2)
        self.assertEqual(
            Transaction.objects.filter(activity_type=ActivityType.RECONCILIATION).count(), 2,
        )

    def test_missing_cash_on_hand_account(self):
        self.collect('100')
        transaction_count = Transaction.objects.count()
        accounts = dict(settings.LEDGER_ACCOUNTS, CASH_ON_HAND='Renamed Cash')
        with override_settings(LEDGER_ACCOUNTS=accounts):
            with self.assertRaises(MissingAccountError):
                ReconciliationService.close(DAY, self.clerk.pk, Decimal('100'))
        self.assertFalse(Reconciliation.objects.exists())
        self.assertEqual(Transaction.objects.count(), transaction_count)


class ReceiptSummaryTests(ReconciliationTestMixin, TestCase):

    def test_open_groups_per_clerk_and_day(self):
        self.collect('300')
        self.collect('200', hour=15)
        self.collect('40', clerk=self.other_clerk)
        self.collect('60', day=date(2024, 3, 2))

        summaries = ReconciliationService.receipt_summaries()

        keys = [(s['date'], s['clerk_id']) for s in summaries]
        self.assertEqual(keys, sorted(keys))
        by_key = {(s['date'], s['clerk_id']): s for s in summaries}

        first = by_key[(DAY, self.clerk.pk)]
        self.assertEqual(first['total'], Decimal('500'))
        self.assertEqual(first['count'], 2)
        self.assertEqual(first['status'], 'open')
        self.assertIsNone(first['reconciled'])

        self.assertEqual(by_key[(DAY, self.other_clerk.pk)]['total'], Decimal('40'))
        self.assertEqual(by_key[(date(2024, 3, 2), self.clerk.pk)]['total'], Decimal('60'))

    def test_closed_group(self):
        self.collect('300')
        self.collect('200')
        ReconciliationService.close(DAY, self.clerk.pk, Decimal('480'), notes='short')

        summary, = ReconciliationService.receipt_summaries(clerk_id=self.clerk.pk)

        self.assertEqual(summary['status'], 'closed')
        self.assertEqual(summary['reconciled'], Decimal('480'))
        self.assertEqual(summary['variance'], Decimal('-20'))
        self.assertEqual(summary['notes'], 'short')

    def test_date_filters(self):
        self.collect('10', day=date(2024, 2, 28))
        self.collect('20')
        self.collect('30', day=date(2024, 3, 5))

        summaries = ReconciliationService.receipt_summaries(
            start_date=DAY, end_date=date(2024, 3, 4),
        )

        self.assertEqual([s['total'] for s in summaries], [Decimal('20')])

    def test_summarize_empty(self):
        self.assertEqual(ReconciliationService.summarize([]), [])
