"""
Double-entry ledger models.

Every money movement is one Transaction with exactly one debit account and
one credit account for the same amount. Account.debits and Account.credits
are the reverse sides of those two foreign keys, so posting is a single
insert and the debit total always equals the credit total.
"""

from decimal import Decimal
from enum import Enum

from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Sum
from django.utils import timezone


class LedgerAccount(str, Enum):
    """
    Account roles the settlement engines post against.

    Each role maps to an Account.name through settings.LEDGER_ACCOUNTS.
    """

    LOAN_CONTROL = 'LOAN_CONTROL'
    UNEARNED_INTEREST = 'UNEARNED_INTEREST'
    INTEREST_INCOME = 'INTEREST_INCOME'
    UNRECONCILED_RECEIPTS = 'UNRECONCILED_RECEIPTS'
    CASH_ON_HAND = 'CASH_ON_HAND'
    LOAN_ADJUSTMENTS = 'LOAN_ADJUSTMENTS'


class AccountType(models.TextChoices):
    CASH = 'CASH', 'Cash'
    OTHER_ASSET = 'OTHER_ASSET', 'Other asset'
    LIABILITY = 'LIABILITY', 'Liability'
    REVENUE = 'REVENUE', 'Revenue'
    EXPENSE = 'EXPENSE', 'Expense'


DEBIT_NORMAL_TYPES = frozenset({
    AccountType.CASH,
    AccountType.OTHER_ASSET,
    AccountType.EXPENSE,
})

# First account number handed out for each account type.
STARTING_ACCOUNT_NUMBERS = {
    AccountType.CASH: 1000,
    AccountType.OTHER_ASSET: 2000,
    AccountType.LIABILITY: 3000,
    AccountType.REVENUE: 4000,
    AccountType.EXPENSE: 5000,
}


class ActivityType(models.TextChoices):
    DISBURSEMENT = 'DISBURSEMENT', 'Disbursement'
    RECEIPT = 'RECEIPT', 'Receipt'
    ADJUSTMENT = 'ADJUSTMENT', 'Adjustment'
    RECONCILIATION = 'RECONCILIATION', 'Reconciliation'
    TRANSFER = 'TRANSFER', 'Transfer'


class Account(models.Model):
    """A chart-of-accounts node, looked up by its unique name."""

    name = models.CharField(
        max_length=100,
        unique=True,
        help_text="Account name; engines resolve their accounts by name."
    )
    account_num = models.CharField(
        max_length=10,
        unique=True,
        help_text="Account number, sequential within the account type."
    )
    account_type = models.CharField(
        max_length=20,
        choices=AccountType.choices,
        db_index=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'ledger_accounts'
        ordering = ['account_num']

    def __str__(self):
        return f"{self.account_num} {self.name}"

    @property
    def is_debit_normal(self):
        return self.account_type in DEBIT_NORMAL_TYPES

    def debit_total(self) -> Decimal:
        return self.debits.aggregate(total=Sum('amount'))['total'] or Decimal('0')

    def credit_total(self) -> Decimal:
        return self.credits.aggregate(total=Sum('amount'))['total'] or Decimal('0')

    def balance(self) -> Decimal:
        """Balance on the account's normal side."""
        debits = self.debit_total()
        credits = self.credit_total()
        if self.is_debit_normal:
            return debits - credits
        return credits - debits


class Transaction(models.Model):
    """
    Immutable ledger entry. Rows are only ever inserted.
    """

    amount = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
    )
    activity_type = models.CharField(
        max_length=20,
        choices=ActivityType.choices,
        db_index=True,
    )
    activity_id = models.CharField(
        max_length=64,
        db_index=True,
        help_text="Primary key of the business record that caused the entry."
    )
    date = models.DateTimeField(default=timezone.now)
    debit_account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name='debits',
    )
    credit_account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name='credits',
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'ledger_transactions'
        ordering = ['date', 'id']
        indexes = [
            models.Index(
                fields=['activity_type', 'activity_id'],
                name='idx_txn_activity'
            ),
        ]

    def __str__(self):
        return (
            f"{self.activity_type} {self.amount}: "
            f"Dr {self.debit_account_id} / Cr {self.credit_account_id}"
        )

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Ledger transactions are immutable.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Ledger transactions are immutable.")
