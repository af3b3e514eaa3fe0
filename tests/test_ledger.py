"""
Tests for double-entry posting, transfers and the chart of accounts.
"""

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.test import TestCase, override_settings

from apps.core.exceptions import (
    AccountNotFoundError,
    LedgerError,
    MissingAccountError,
    SettlementValidationError,
)
from apps.ledger.models import Account, AccountType, ActivityType, LedgerAccount, Transaction
from apps.ledger.services import LedgerService
from tests.helpers import ledger_account


class ChartOfAccountsTests(TestCase):
    """The default chart is seeded by migration."""

    def test_every_role_resolves(self):
        for role in LedgerAccount:
            account = LedgerService.resolve(role)
            self.assertEqual(account.name, settings.LEDGER_ACCOUNTS[role.value])

    def test_seeded_account_types(self):
        self.assertEqual(ledger_account(LedgerAccount.CASH_ON_HAND).account_type, AccountType.CASH)
        self.assertEqual(ledger_account(LedgerAccount.LOAN_CONTROL).account_type, AccountType.OTHER_ASSET)
        self.assertEqual(ledger_account(LedgerAccount.UNEARNED_INTEREST).account_type, AccountType.LIABILITY)

    def test_missing_account_raises(self):
        accounts = dict(settings.LEDGER_ACCOUNTS, LOAN_CONTROL='No Such Account')
        with override_settings(LEDGER_ACCOUNTS=accounts):
            with self.assertRaises(MissingAccountError) as ctx:
                LedgerService.resolve(LedgerAccount.LOAN_CONTROL)
        self.assertEqual(ctx.exception.name, 'No Such Account')
        self.assertIsInstance(ctx.exception, LedgerError)

    def test_create_account_numbers_within_type(self):
        first = LedgerService.create_account('Customer Deposits', AccountType.LIABILITY)
        second = LedgerService.create_account('Accrued Fees', AccountType.LIABILITY)
        revenue = LedgerService.create_account('Fee Income', AccountType.REVENUE)
        self.assertEqual(first.account_num, '3001')
        self.assertEqual(second.account_num, '3002')
        self.assertEqual(revenue.account_num, '4001')

    def test_create_account_duplicate_name(self):
        with self.assertRaises(SettlementValidationError):
            LedgerService.create_account('Cash on Hand', AccountType.CASH)


class PostTransactionTests(TestCase):

    def test_post_by_role(self):
        entry = LedgerService.post_transaction(
            debit=LedgerAccount.LOAN_CONTROL,
            credit=LedgerAccount.CASH_ON_HAND,
            amount=Decimal('100.00'),
            activity_type=ActivityType.DISBURSEMENT,
            activity_id=1,
        )
        self.assertEqual(entry.activity_id, '1')
        self.assertEqual(ledger_account(LedgerAccount.LOAN_CONTROL).balance(), Decimal('100.00'))
        # Cash is debit-normal, so a credit lowers it
        self.assertEqual(ledger_account(LedgerAccount.CASH_ON_HAND).balance(), Decimal('-100.00'))

    def test_credit_normal_balance(self):
        LedgerService.post_transaction(
            debit=LedgerAccount.UNEARNED_INTEREST,
            credit=LedgerAccount.INTEREST_INCOME,
            amount=Decimal('20'),
            activity_type=ActivityType.RECEIPT,
            activity_id=1,
        )
        self.assertEqual(ledger_account(LedgerAccount.INTEREST_INCOME).balance(), Decimal('20'))
        self.assertEqual(ledger_account(LedgerAccount.UNEARNED_INTEREST).balance(), Decimal('-20'))

    def test_same_account_both_sides(self):
        with self.assertRaises(LedgerError):
            LedgerService.post_transaction(
                debit=LedgerAccount.CASH_ON_HAND,
                credit=LedgerAccount.CASH_ON_HAND,
                amount=Decimal('1'),
                activity_type=ActivityType.TRANSFER,
                activity_id='x',
            )
        self.assertEqual(Transaction.objects.count(), 0)

    def test_rejects_non_positive_and_sub_unit_amounts(self):
        for amount in (Decimal('0'), Decimal('-5'), Decimal('0.001')):
            with self.assertRaises(SettlementValidationError):
                LedgerService.post_transaction(
                    debit=LedgerAccount.LOAN_CONTROL,
                    credit=LedgerAccount.CASH_ON_HAND,
                    amount=amount,
                    activity_type=ActivityType.DISBURSEMENT,
                    activity_id=1,
                )
        self.assertEqual(Transaction.objects.count(), 0)

    @override_settings(SETTLEMENT_CURRENCY_QUANTUM=Decimal('0.001'))
    def test_sub_cent_quantum_is_a_configuration_error(self):
        with self.assertRaises(ImproperlyConfigured):
            LedgerService.post_transaction(
                debit=LedgerAccount.LOAN_CONTROL,
                credit=LedgerAccount.CASH_ON_HAND,
                amount=Decimal('10.005'),
                activity_type=ActivityType.DISBURSEMENT,
                activity_id=1,
            )
        self.assertEqual(Transaction.objects.count(), 0)

    def test_transactions_are_immutable(self):
        entry = LedgerService.post_transaction(
            debit=LedgerAccount.LOAN_CONTROL,
            credit=LedgerAccount.CASH_ON_HAND,
            amount=Decimal('10'),
            activity_type=ActivityType.DISBURSEMENT,
            activity_id=1,
        )
        entry.amount = Decimal('11')
        with self.assertRaises(ValueError):
            entry.save()
        with self.assertRaises(ValueError):
            entry.delete()
        entry.refresh_from_db()
        self.assertEqual(entry.amount, Decimal('10'))

    def test_debits_equal_credits(self):
        LedgerService.post_transaction(
            LedgerAccount.LOAN_CONTROL, LedgerAccount.CASH_ON_HAND,
            Decimal('300'), ActivityType.DISBURSEMENT, 1,
        )
        LedgerService.post_transaction(
            LedgerAccount.UNRECONCILED_RECEIPTS, LedgerAccount.LOAN_CONTROL,
            Decimal('45.50'), ActivityType.RECEIPT, 2,
        )
        totals = LedgerService.totals()
        self.assertEqual(totals['debits'], Decimal('345.50'))
        self.assertEqual(totals['debits'], totals['credits'])


class TransferTests(TestCase):

    def setUp(self):
        self.cash = ledger_account(LedgerAccount.CASH_ON_HAND)
        self.bank = LedgerService.create_account('Bank', AccountType.CASH)

    def test_new_cash_account_number(self):
        self.assertEqual(self.bank.account_num, '1002')

    def test_transfer_between_cash_accounts(self):
        entry = LedgerService.transfer(self.cash.pk, self.bank.pk, Decimal('50'))
        self.assertEqual(entry.activity_type, ActivityType.TRANSFER)
        self.assertEqual(len(entry.activity_id), 32)
        self.assertEqual(self.bank.balance(), Decimal('50'))
        self.assertEqual(self.cash.balance(), Decimal('-50'))

    def test_unreconciled_receipts_excluded(self):
        unreconciled = ledger_account(LedgerAccount.UNRECONCILED_RECEIPTS)
        with self.assertRaises(SettlementValidationError):
            LedgerService.transfer(unreconciled.pk, self.bank.pk, Decimal('50'))

    def test_non_cash_account_rejected(self):
        control = ledger_account(LedgerAccount.LOAN_CONTROL)
        with self.assertRaises(SettlementValidationError):
            LedgerService.transfer(self.cash.pk, control.pk, Decimal('50'))

    def test_same_account_rejected(self):
        with self.assertRaises(SettlementValidationError):
            LedgerService.transfer(self.cash.pk, self.cash.pk, Decimal('50'))

    def test_unknown_account(self):
        with self.assertRaises(AccountNotFoundError):
            LedgerService.transfer(self.cash.pk, 999999, Decimal('50'))
        self.assertFalse(Account.objects.filter(pk=999999).exists())
