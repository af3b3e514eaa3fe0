"""
Shared fixtures for the settlement tests.
"""

from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model

from apps.clients.models import Client
from apps.ledger.models import Account, LedgerAccount
from apps.ledger.services import LedgerService
from apps.loans.services import LoanService


def make_user(username='clerk'):
    return get_user_model().objects.create_user(username=username, password='secret')


def make_client(first_name='Test', last_name='Borrower'):
    return Client.objects.create(first_name=first_name, last_name=last_name)


def ledger_account(role) -> Account:
    return LedgerService.resolve(role)


def make_loan(client, user, amount='1000', interest_rate='2', num_payments=10,
              loan_start_date=date(2024, 1, 1)):
    """Originate an undisbursed 1000 @ 2% x 10 loan (120 per period)."""
    loan, _ = LoanService.originate_loan(
        client_id=client.pk,
        amount=Decimal(amount),
        interest_rate=Decimal(interest_rate),
        num_payments=num_payments,
        loan_start_date=loan_start_date,
        approved_by=user,
    )
    return loan


def make_active_loan(client, user, **kwargs):
    """Originate and disburse a loan from Cash on Hand."""
    loan = make_loan(client, user, **kwargs)
    cash = ledger_account(LedgerAccount.CASH_ON_HAND)
    return LoanService.disburse_loan(
        loan.pk,
        payouts=[(cash.pk, loan.amount)],
        disbursed_by=user,
    )


def schedule_amounts(loan):
    return [sp.amount for sp in loan.scheduled_payments.order_by('payment_number')]


def schedule_balances(loan):
    return [sp.balance for sp in loan.schedule_with_balances()]
