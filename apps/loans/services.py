"""
Loan service layer.

Origination, disbursement, and the two settlement engines: payment
allocation (collect cash) and adjustment allocation (forgive balance).
Every engine call is a single atomic read-compute-write sequence with the
loan row locked via select_for_update(), so concurrent requests against
one loan queue behind each other instead of allocating the same balance
twice.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Tuple

from django.db.models import F
from django.utils import timezone

from apps.clients.services import ClientService
from apps.core.db import settlement_transaction
from apps.core.exceptions import (
    AccountNotFoundError,
    AmountExceedsBalanceError,
    ConcurrencyError,
    LoanNotFoundError,
    LoanStateError,
    SettlementValidationError,
)
from apps.core.models import SequenceCounter
from apps.core.utils import (
    build_payment_schedule,
    calculate_flat_rate_payment,
    calculate_principal_per_period,
    sum_money,
    to_decimal,
)
from apps.ledger.models import Account, AccountType, ActivityType, LedgerAccount
from apps.ledger.services import LedgerService, validate_amount
from apps.loans.models import (
    CLOSED_TO_SETTLEMENT,
    Loan,
    LoanAdjustment,
    LoanStatus,
    PaymentReceipt,
    Receipt,
    ScheduledPayment,
)
from apps.loans.waterfall import (
    OpenPeriod,
    PeriodAllocation,
    plan_adjustment,
    plan_payment,
)

logger = logging.getLogger(__name__)

FIRST_LOAN_NUM = 10000
FIRST_RECEIPT_NUM = 100
FIRST_ADJUSTMENT_NUM = 100
MAX_PAYOUT_ACCOUNTS = 3


@dataclass
class PaymentAllocation:
    receipt: Receipt
    interest_paid: Decimal
    principal_paid: Decimal
    paid_off: bool
    allocations: List[PeriodAllocation]


@dataclass
class AdjustmentAllocation:
    adjustment: LoanAdjustment
    interest_adjusted: Decimal
    principal_adjusted: Decimal
    paid_off: bool
    allocations: List[PeriodAllocation]


def lock_loan(loan_id: int) -> Loan:
    """
    Fetch and row-lock a loan. Must be called inside an atomic block.

    Raises:
        LoanNotFoundError: If the loan does not exist.
    """
    try:
        return Loan.objects.select_for_update().get(pk=loan_id)
    except Loan.DoesNotExist:
        raise LoanNotFoundError(detail=f"Loan with ID {loan_id} not found.")


def load_open_periods(loan: Loan) -> Tuple[List[OpenPeriod], dict]:
    """
    Current balances of the loan's schedule.

    Returns the waterfall input and the schedule rows keyed by id.
    """
    schedule = list(loan.schedule_with_balances())
    periods = [
        OpenPeriod(sp.pk, sp.payment_number, sp.balance)
        for sp in schedule
    ]
    return periods, {sp.pk: sp for sp in schedule}


def ensure_open_to_settlement(loan: Loan) -> None:
    if loan.status in CLOSED_TO_SETTLEMENT:
        raise LoanStateError(
            detail=f"Loan #{loan.loan_num} is {loan.get_status_display().lower()}."
        )


class LoanService:
    """Loan origination, disbursement and retrieval."""

    @staticmethod
    def originate_loan(
        client_id: int,
        amount,
        interest_rate,
        num_payments: int,
        loan_start_date: date,
        approved_by=None,
    ) -> Tuple[Loan, List[ScheduledPayment]]:
        """
        Create an approved loan and its full payment schedule.

        Args:
            client_id: Borrower's primary key.
            amount: Principal.
            interest_rate: Flat rate per period (%).
            num_payments: Number of monthly payments.
            loan_start_date: First payment falls due one month later.
            approved_by: User approving the application.

        Returns:
            (loan, scheduled_payments) with status UNDISBURSED.
        """
        amount = validate_amount(amount)
        try:
            interest_rate = to_decimal(interest_rate)
            terms = calculate_flat_rate_payment(amount, interest_rate, num_payments)
        except (ArithmeticError, ValueError, TypeError) as exc:
            raise SettlementValidationError(detail=str(exc))

        with settlement_transaction('Loan origination'):
            client = ClientService.get_client(client_id)

            loan = Loan.objects.create(
                client=client,
                loan_num=SequenceCounter.objects.next_value(
                    SequenceCounter.LOAN, start=FIRST_LOAN_NUM,
                ),
                amount=amount,
                interest_rate=interest_rate,
                num_payments=num_payments,
                due_monthly=terms.period_payment,
                initial_unearned_interest=terms.total_interest,
                principal_per_period=calculate_principal_per_period(amount, num_payments),
                status=LoanStatus.UNDISBURSED,
                loan_start_date=loan_start_date,
                approved_by=approved_by,
            )

            schedule = ScheduledPayment.objects.bulk_create([
                ScheduledPayment(
                    loan=loan,
                    payment_number=line.payment_number,
                    due_date=line.due_date,
                    amount=line.amount,
                )
                for line in build_payment_schedule(
                    loan_start_date, terms.period_payment, num_payments,
                )
            ])

        logger.info(
            "Loan #%d originated for client %d: amount=%s, rate=%s%%, "
            "payments=%d x %s, unearned_interest=%s",
            loan.loan_num,
            client.pk,
            amount,
            interest_rate,
            num_payments,
            terms.period_payment,
            terms.total_interest,
        )

        return loan, schedule

    @staticmethod
    def disburse_loan(
        loan_id: int,
        payouts: Iterable[Tuple[int, object]],
        disbursed_by,
    ) -> Loan:
        """
        Pay out an approved loan and activate it.

        Args:
            loan_id: Loan to disburse.
            payouts: (cash account id, amount) pairs, at most three,
                summing to the loan amount.
            disbursed_by: User releasing the funds.

        Posts Dr Loan Control / Cr payout account per payout, and
        Dr Loan Control / Cr Unearned Interest for the scheduled interest.
        """
        payouts = [
            (account_id, validate_amount(amount, field='payouts'))
            for account_id, amount in payouts
        ]
        if not 1 <= len(payouts) <= MAX_PAYOUT_ACCOUNTS:
            raise SettlementValidationError.for_field(
                'payouts', f'Provide between 1 and {MAX_PAYOUT_ACCOUNTS} payout accounts.'
            )

        with settlement_transaction('Loan disbursement'):
            loan = lock_loan(loan_id)
            if loan.status != LoanStatus.UNDISBURSED:
                raise LoanStateError(
                    detail=f"Loan #{loan.loan_num} has already been disbursed or closed."
                )

            total = sum_money(amount for _, amount in payouts)
            if total != loan.amount:
                raise SettlementValidationError.for_field(
                    'payouts', f'The amounts must add up to {loan.amount}.'
                )

            accounts = Account.objects.in_bulk([account_id for account_id, _ in payouts])
            for account_id, _ in payouts:
                account = accounts.get(account_id)
                if account is None:
                    raise AccountNotFoundError(detail=f"Account with ID {account_id} not found.")
                if account.account_type != AccountType.CASH:
                    raise SettlementValidationError.for_field(
                        'payouts', f"'{account.name}' is not a cash account."
                    )

            ledger = LedgerService.resolve_many(
                LedgerAccount.LOAN_CONTROL,
                LedgerAccount.UNEARNED_INTEREST,
            )
            now = timezone.now()

            for account_id, amount in payouts:
                LedgerService.post_transaction(
                    debit=ledger[LedgerAccount.LOAN_CONTROL],
                    credit=accounts[account_id],
                    amount=amount,
                    activity_type=ActivityType.DISBURSEMENT,
                    activity_id=loan.pk,
                    date=now,
                )

            if loan.initial_unearned_interest > 0:
                LedgerService.post_transaction(
                    debit=ledger[LedgerAccount.LOAN_CONTROL],
                    credit=ledger[LedgerAccount.UNEARNED_INTEREST],
                    amount=loan.initial_unearned_interest,
                    activity_type=ActivityType.DISBURSEMENT,
                    activity_id=loan.pk,
                    date=now,
                )

            loan.status = LoanStatus.ACTIVE
            loan.disbursed_by = disbursed_by
            loan.actual_disbursement_date = now
            loan.save(update_fields=[
                'status', 'disbursed_by', 'actual_disbursement_date', 'updated_at',
            ])

        logger.info(
            "Loan #%d disbursed: %s across %d account(s), unearned_interest=%s",
            loan.loan_num,
            loan.amount,
            len(payouts),
            loan.initial_unearned_interest,
        )
        return loan

    @staticmethod
    def cancel_loan(loan_id: int) -> Loan:
        """Cancel an approved loan that has not been disbursed."""
        with settlement_transaction('Loan cancellation'):
            loan = lock_loan(loan_id)
            if loan.status != LoanStatus.UNDISBURSED:
                raise LoanStateError(
                    detail=f"Only undisbursed loans can be cancelled; loan #{loan.loan_num} is {loan.status}."
                )
            loan.status = LoanStatus.CANCELLED
            loan.save(update_fields=['status', 'updated_at'])

        logger.info("Loan #%d cancelled", loan.loan_num)
        return loan

    @staticmethod
    def get_loan(loan_id: int) -> Loan:
        """
        Retrieve a single loan by ID.

        Raises:
            LoanNotFoundError: If the loan does not exist.
        """
        try:
            return Loan.objects.select_related('client').get(pk=loan_id)
        except Loan.DoesNotExist:
            raise LoanNotFoundError(detail=f"Loan with ID {loan_id} not found.")


class PaymentAllocationService:
    """Applies collected cash to a loan's schedule."""

    @staticmethod
    def allocate_payment(
        loan_id: int,
        amount,
        received_by,
        receipt_date=None,
    ) -> PaymentAllocation:
        """
        Collect ``amount`` against the loan, oldest period first.

        Creates the Receipt and one PaymentReceipt per period touched,
        posts Dr Unreconciled Receipts / Cr Loan Control for the cash and
        Dr Unearned Interest / Cr Interest Income for its interest part,
        and marks the loan PAID when the receipt clears the schedule.

        Raises:
            SettlementValidationError: If amount is not a positive money value.
            LoanNotFoundError: If the loan does not exist.
            LoanStateError: If the loan is undisbursed or cancelled.
            AmountExceedsBalanceError: If amount exceeds the total balance.
            MissingAccountError: If a configured ledger account is absent.
        """
        amount = validate_amount(amount)

        with settlement_transaction('Payment allocation'):
            loan = lock_loan(loan_id)
            ensure_open_to_settlement(loan)
            periods, _ = load_open_periods(loan)

            try:
                plan = plan_payment(periods, amount, loan.principal_per_period)
            except AmountExceedsBalanceError:
                logger.warning(
                    "Payment of %s rejected for loan #%d: exceeds total balance",
                    amount,
                    loan.loan_num,
                )
                raise

            ledger = LedgerService.resolve_many(
                LedgerAccount.UNRECONCILED_RECEIPTS,
                LedgerAccount.LOAN_CONTROL,
                LedgerAccount.UNEARNED_INTEREST,
                LedgerAccount.INTEREST_INCOME,
            )

            receipt = Receipt.objects.create(
                receipt_num=SequenceCounter.objects.next_value(
                    SequenceCounter.RECEIPT, start=FIRST_RECEIPT_NUM,
                ),
                amount=amount,
                receipt_date=receipt_date or timezone.now(),
                client_id=loan.client_id,
                loan=loan,
                received_by=received_by,
            )
            PaymentReceipt.objects.bulk_create([
                PaymentReceipt(
                    receipt=receipt,
                    scheduled_payment_id=allocation.scheduled_payment_id,
                    amount=allocation.amount,
                )
                for allocation in plan.allocations
            ])

            collected = plan.interest_paid + plan.principal_paid
            if collected > 0:
                LedgerService.post_transaction(
                    debit=ledger[LedgerAccount.UNRECONCILED_RECEIPTS],
                    credit=ledger[LedgerAccount.LOAN_CONTROL],
                    amount=collected,
                    activity_type=ActivityType.RECEIPT,
                    activity_id=receipt.pk,
                )
            if plan.interest_paid > 0:
                LedgerService.post_transaction(
                    debit=ledger[LedgerAccount.UNEARNED_INTEREST],
                    credit=ledger[LedgerAccount.INTEREST_INCOME],
                    amount=plan.interest_paid,
                    activity_type=ActivityType.RECEIPT,
                    activity_id=receipt.pk,
                )

            if plan.paid_off:
                loan.status = LoanStatus.PAID
                loan.save(update_fields=['status', 'updated_at'])

        logger.info(
            "Receipt #%d: %s collected on loan #%d over %d period(s) "
            "(interest=%s, principal=%s, paid_off=%s)",
            receipt.receipt_num,
            amount,
            loan.loan_num,
            len(plan.allocations),
            plan.interest_paid,
            plan.principal_paid,
            plan.paid_off,
        )

        return PaymentAllocation(
            receipt=receipt,
            interest_paid=plan.interest_paid,
            principal_paid=plan.principal_paid,
            paid_off=plan.paid_off,
            allocations=plan.allocations,
        )


class AdjustmentAllocationService:
    """Writes off loan balance without cash."""

    @staticmethod
    def allocate_adjustment(
        loan_id: int,
        amount,
        created_by,
    ) -> AdjustmentAllocation:
        """
        Forgive ``amount`` of the loan's balance, interest first.

        Writes each touched ScheduledPayment.amount down by its share,
        creates the LoanAdjustment, posts Dr Unearned Interest / Cr Loan
        Control for forgiven interest and Dr Bad Debt / Cr Loan Control
        for forgiven principal, and marks the loan PAID when the
        adjustment clears the schedule.

        Raises:
            SettlementValidationError: If amount is not a positive money value.
            LoanNotFoundError: If the loan does not exist.
            LoanStateError: If the loan is undisbursed or cancelled.
            AmountExceedsBalanceError: If amount exceeds the total balance.
            ConcurrencyError: If a schedule row changed under the lock.
            MissingAccountError: If a configured ledger account is absent.
        """
        amount = validate_amount(amount)

        with settlement_transaction('Adjustment allocation'):
            loan = lock_loan(loan_id)
            ensure_open_to_settlement(loan)
            periods, schedule = load_open_periods(loan)

            try:
                plan = plan_adjustment(periods, amount, loan.principal_per_period)
            except AmountExceedsBalanceError:
                logger.warning(
                    "Adjustment of %s rejected for loan #%d: exceeds total balance",
                    amount,
                    loan.loan_num,
                )
                raise

            ledger = LedgerService.resolve_many(
                LedgerAccount.LOAN_CONTROL,
                LedgerAccount.UNEARNED_INTEREST,
                LedgerAccount.LOAN_ADJUSTMENTS,
            )

            for allocation in plan.allocations:
                scheduled = schedule[allocation.scheduled_payment_id]
                updated = ScheduledPayment.objects.filter(
                    pk=scheduled.pk,
                    amount=scheduled.amount,
                ).update(amount=F('amount') - allocation.amount)
                if updated != 1:
                    raise ConcurrencyError()

            adjustment = LoanAdjustment.objects.create(
                loan=loan,
                adjustment_num=SequenceCounter.objects.next_value(
                    SequenceCounter.ADJUSTMENT, start=FIRST_ADJUSTMENT_NUM,
                ),
                amount=amount,
                created_by=created_by,
            )

            if plan.interest_adjusted > 0:
                LedgerService.post_transaction(
                    debit=ledger[LedgerAccount.UNEARNED_INTEREST],
                    credit=ledger[LedgerAccount.LOAN_CONTROL],
                    amount=plan.interest_adjusted,
                    activity_type=ActivityType.ADJUSTMENT,
                    activity_id=adjustment.pk,
                )
            if plan.principal_adjusted > 0:
                LedgerService.post_transaction(
                    debit=ledger[LedgerAccount.LOAN_ADJUSTMENTS],
                    credit=ledger[LedgerAccount.LOAN_CONTROL],
                    amount=plan.principal_adjusted,
                    activity_type=ActivityType.ADJUSTMENT,
                    activity_id=adjustment.pk,
                )

            if plan.paid_off:
                loan.status = LoanStatus.PAID
                loan.save(update_fields=['status', 'updated_at'])

        logger.info(
            "Adjustment #%d: %s forgiven on loan #%d over %d period(s) "
            "(interest=%s, principal=%s, paid_off=%s)",
            adjustment.adjustment_num,
            amount,
            loan.loan_num,
            len(plan.allocations),
            plan.interest_adjusted,
            plan.principal_adjusted,
            plan.paid_off,
        )

        return AdjustmentAllocation(
            adjustment=adjustment,
            interest_adjusted=plan.interest_adjusted,
            principal_adjusted=plan.principal_adjusted,
            paid_off=plan.paid_off,
            allocations=plan.allocations,
        )

