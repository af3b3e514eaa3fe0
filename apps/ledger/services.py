"""
Ledger service layer.

The only code allowed to create Transactions. Callers name accounts by
LedgerAccount role; the role -> account name map is configuration
(settings.LEDGER_ACCOUNTS), so new accounts never need changes here.
"""

import logging
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Dict, Optional, Union

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.core.exceptions import (
    AccountNotFoundError,
    LedgerError,
    MissingAccountError,
    SettlementValidationError,
)
from apps.core.models import SequenceCounter
from apps.core.utils import is_whole_money, to_decimal
from apps.ledger.models import (
    STARTING_ACCOUNT_NUMBERS,
    Account,
    AccountType,
    ActivityType,
    LedgerAccount,
    Transaction,
)

logger = logging.getLogger(__name__)

AccountRef = Union[Account, LedgerAccount]


def validate_amount(amount, field: str = 'amount', allow_zero: bool = False) -> Decimal:
    """
    Coerce and check a money amount.

    Raises:
        SettlementValidationError: on a non-numeric, negative (or zero,
            unless allowed) amount, or one finer than the currency unit.
    """
    try:
        value = to_decimal(amount)
    except ArithmeticError:
        raise SettlementValidationError.for_field(field, 'Please enter a valid amount.')

    if not value.is_finite():
        raise SettlementValidationError.for_field(field, 'Please enter a valid amount.')
    if value < 0 or (value == 0 and not allow_zero):
        raise SettlementValidationError.for_field(field, 'Amount must be greater than zero.')
    if not is_whole_money(value):
        raise SettlementValidationError.for_field(
            field, 'Amount cannot be smaller than the currency unit.'
        )
    return value


class LedgerService:
    """Account resolution and double-entry posting."""

    @staticmethod
    def account_name(role: LedgerAccount) -> str:
        return settings.LEDGER_ACCOUNTS[LedgerAccount(role).value]

    @classmethod
    def resolve(cls, role: LedgerAccount) -> Account:
        """
        Look up the account configured for ``role``.

        Raises:
            MissingAccountError: If no account carries the configured name.
        """
        role = LedgerAccount(role)
        name = cls.account_name(role)
        try:
            return Account.objects.get(name=name)
        except Account.DoesNotExist:
            logger.error("Ledger misconfigured: no account named '%s' (%s)", name, role.value)
            raise MissingAccountError(role.value, name)

    @classmethod
    def resolve_many(cls, *roles: LedgerAccount) -> Dict[LedgerAccount, Account]:
        """Resolve several roles at once, before any write is made."""
        return {LedgerAccount(role): cls.resolve(role) for role in roles}

    @classmethod
    def post_transaction(
        cls,
        debit: AccountRef,
        credit: AccountRef,
        amount,
        activity_type: str,
        activity_id,
        date: Optional[datetime] = None,
    ) -> Transaction:
        """
        Record one balanced movement of ``amount`` from ``credit`` to ``debit``.

        Must run inside the caller's transaction.atomic() block so the
        posting commits or rolls back together with the business records
        that caused it.

        Raises:
            SettlementValidationError: If amount is not a positive money value.
            MissingAccountError: If a role does not resolve to an account.
            LedgerError: If both sides are the same account.
        """
        amount = validate_amount(amount)
        debit_account = debit if isinstance(debit, Account) else cls.resolve(debit)
        credit_account = credit if isinstance(credit, Account) else cls.resolve(credit)

        if debit_account.pk == credit_account.pk:
            raise LedgerError(
                f"Cannot post {amount} with '{debit_account.name}' on both sides."
            )

        entry = Transaction.objects.create(
            amount=amount,
            activity_type=ActivityType(activity_type),
            activity_id=str(activity_id),
            date=date or timezone.now(),
            debit_account=debit_account,
            credit_account=credit_account,
        )

        logger.debug(
            "Posted %s %s: Dr %s / Cr %s (activity %s)",
            entry.activity_type,
            amount,
            debit_account.name,
            credit_account.name,
            entry.activity_id,
        )

        return entry

    @classmethod
    @transaction.atomic
    def transfer(cls, from_account_id: int, to_account_id: int, amount) -> Transaction:
        """
        Move cash between two cash accounts (e.g. Cash on Hand to a bank).

        Unreconciled Receipts is excluded: it is only emptied by closing a
        reconciliation.
        """
        amount = validate_amount(amount)

        if from_account_id == to_account_id:
            raise SettlementValidationError.for_field(
                'to_account', 'Choose two different accounts.'
            )

        accounts = {
            account.pk: account
            for account in Account.objects.filter(pk__in=[from_account_id, to_account_id])
        }
        unreconciled_name = cls.account_name(LedgerAccount.UNRECONCILED_RECEIPTS)

        for field, account_id in (('from_account', from_account_id), ('to_account', to_account_id)):
            account = accounts.get(account_id)
            if account is None:
                raise AccountNotFoundError(detail=f"Account with ID {account_id} not found.")
            if account.account_type != AccountType.CASH or account.name == unreconciled_name:
                raise SettlementValidationError.for_field(
                    field, 'Transfers are only allowed between cash accounts.'
                )

        entry = cls.post_transaction(
            debit=accounts[to_account_id],
            credit=accounts[from_account_id],
            amount=amount,
            activity_type=ActivityType.TRANSFER,
            activity_id=uuid.uuid4().hex,
        )

        logger.info(
            "Transferred %s from %s to %s",
            amount,
            accounts[from_account_id].name,
            accounts[to_account_id].name,
        )
        return entry

    @staticmethod
    @transaction.atomic
    def create_account(name: str, account_type: str) -> Account:
        """
        Add an account to the chart, numbered next within its type.
        """
        account_type = AccountType(account_type)
        if Account.objects.filter(name=name).exists():
            raise SettlementValidationError.for_field('name', 'That name has already been used.')

        number = SequenceCounter.objects.next_value(
            f'account:{account_type.value}',
            start=STARTING_ACCOUNT_NUMBERS[account_type],
        )
        account = Account.objects.create(
            name=name,
            account_num=str(number),
            account_type=account_type,
        )

        logger.info("Created %s account %s", account_type.value, account)
        return account

    @staticmethod
    def totals() -> Dict[str, Decimal]:
        """
        Debit and credit totals summed account by account.

        Each Transaction lands once on each side, so the two totals agree.
        """
        debits = Decimal('0')
        credits = Decimal('0')
        for account in Account.objects.all():
            debits += account.debit_total()
            credits += account.credit_total()
        return {'debits': debits, 'credits': credits}
