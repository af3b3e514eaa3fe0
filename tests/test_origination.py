"""
Tests for loan origination, disbursement and cancellation.
"""

from datetime import date
from decimal import Decimal

from django.test import TestCase

from apps.core.exceptions import (
    AccountNotFoundError,
    ClientNotFoundError,
    LoanStateError,
    SettlementValidationError,
)
from apps.ledger.models import AccountType, ActivityType, LedgerAccount, Transaction
from apps.ledger.services import LedgerService
from apps.loans.models import Loan, LoanStatus
from apps.loans.services import LoanService
from tests.helpers import ledger_account, make_client, make_loan, make_user


class OriginateLoanTests(TestCase):

    def setUp(self):
        self.user = make_user('officer')
        self.client_record = make_client()

    def test_terms_and_schedule(self):
        loan, schedule = LoanService.originate_loan(
            client_id=self.client_record.pk,
            amount=Decimal('1000'),
            interest_rate=Decimal('2'),
            num_payments=10,
            loan_start_date=date(2024, 1, 31),
            approved_by=self.user,
        )
        self.assertEqual(loan.loan_num, 10000)
        self.assertEqual(loan.status, LoanStatus.UNDISBURSED)
        self.assertEqual(loan.due_monthly, Decimal('120'))
        self.assertEqual(loan.initial_unearned_interest, Decimal('200'))
        self.assertEqual(loan.principal_per_period, Decimal('100'))
        self.assertEqual(len(schedule), 10)
        self.assertEqual(loan.scheduled_payments.count(), 10)
        first = loan.scheduled_payments.get(payment_number=1)
        self.assertEqual(first.due_date, date(2024, 2, 29))
        self.assertEqual(first.amount, Decimal('120'))

    def test_no_ledger_postings_before_disbursement(self):
        make_loan(self.client_record, self.user)
        self.assertFalse(Transaction.objects.exists())

    def test_loan_numbers_are_sequential(self):
        first = make_loan(self.client_record, self.user)
        second = make_loan(self.client_record, self.user)
        self.assertEqual(second.loan_num, first.loan_num + 1)

    def test_unknown_client(self):
        with self.assertRaises(ClientNotFoundError):
            LoanService.originate_loan(
                client_id=999999,
                amount=Decimal('1000'),
                interest_rate=Decimal('2'),
                num_payments=10,
                loan_start_date=date(2024, 1, 1),
            )
        self.assertFalse(Loan.objects.exists())

    def test_invalid_terms(self):
        with self.assertRaises(SettlementValidationError):
            make_loan(self.client_record, self.user, num_payments=0)
        with self.assertRaises(SettlementValidationError):
            make_loan(self.client_record, self.user, amount='0')
        with self.assertRaises(SettlementValidationError):
            make_loan(self.client_record, self.user, interest_rate='-1')
        self.assertFalse(Loan.objects.exists())


class DisburseLoanTests(TestCase):

    def setUp(self):
        self.user = make_user('officer')
        self.loan = make_loan(make_client(), self.user)
        self.cash = ledger_account(LedgerAccount.CASH_ON_HAND)
        self.bank = LedgerService.create_account('Bank', AccountType.CASH)

    def test_split_payout(self):
        loan = LoanService.disburse_loan(
            self.loan.pk,
            payouts=[(self.cash.pk, Decimal('600')), (self.bank.pk, Decimal('400'))],
            disbursed_by=self.user,
        )
        self.assertEqual(loan.status, LoanStatus.ACTIVE)
        self.assertEqual(loan.disbursed_by, self.user)
        self.assertIsNotNone(loan.actual_disbursement_date)

        entries = Transaction.objects.filter(activity_type=ActivityType.DISBURSEMENT)
        self.assertEqual(entries.count(), 3)
        self.assertEqual(self.cash.balance(), Decimal('-600'))
        self.assertEqual(self.bank.balance(), Decimal('-400'))
        self.assertEqual(ledger_account(LedgerAccount.LOAN_CONTROL).balance(), Decimal('1200'))
        self.assertEqual(ledger_account(LedgerAccount.UNEARNED_INTEREST).balance(), Decimal('200'))

    def test_payouts_must_match_amount(self):
        with self.assertRaises(SettlementValidationError):
            LoanService.disburse_loan(
                self.loan.pk,
                payouts=[(self.cash.pk, Decimal('999.99'))],
                disbursed_by=self.user,
            )
        self.loan.refresh_from_db()
        self.assertEqual(self.loan.status, LoanStatus.UNDISBURSED)
        self.assertFalse(Transaction.objects.exists())

    def test_at_most_three_payout_accounts(self):
        with self.assertRaises(SettlementValidationError):
            LoanService.disburse_loan(
                self.loan.pk,
                payouts=[(self.cash.pk, Decimal('250'))] * 4,
                disbursed_by=self.user,
            )

    def test_payout_from_non_cash_account(self):
        control = ledger_account(LedgerAccount.LOAN_CONTROL)
        with self.assertRaises(SettlementValidationError):
            LoanService.disburse_loan(
                self.loan.pk,
                payouts=[(control.pk, Decimal('1000'))],
                disbursed_by=self.user,
            )

    def test_unknown_payout_account(self):
        with self.assertRaises(AccountNotFoundError):
            LoanService.disburse_loan(
                self.loan.pk,
                payouts=[(999999, Decimal('1000'))],
                disbursed_by=self.user,
            )

    def test_disburse_twice(self):
        LoanService.disburse_loan(self.loan.pk, [(self.cash.pk, Decimal('1000'))], self.user)
        with self.assertRaises(LoanStateError):
            LoanService.disburse_loan(self.loan.pk, [(self.cash.pk, Decimal('1000'))], self.user)
        self.assertEqual(
            Transaction.objects.filter(activity_type=ActivityType.DISBURSEMENT).count(), 2,
        )


class CancelLoanTests(TestCase):

    def setUp(self):
        self.user = make_user('officer')
        self.loan = make_loan(make_client(), self.user)

    def test_cancel_undisbursed(self):
        loan = LoanService.cancel_loan(self.loan.pk)
        self.assertEqual(loan.status, LoanStatus.CANCELLED)

    def test_cannot_cancel_active_loan(self):
        cash = ledger_account(LedgerAccount.CASH_ON_HAND)
        LoanService.disburse_loan(self.loan.pk, [(cash.pk, Decimal('1000'))], self.user)
        with self.assertRaises(LoanStateError):
            LoanService.cancel_loan(self.loan.pk)
