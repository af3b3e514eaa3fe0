"""
Loan, schedule and collection models for the Loan Settlement service.
"""

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import DecimalField, F, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

MONEY = {'max_digits': 15, 'decimal_places': 2}


class LoanStatus(models.TextChoices):
    UNDISBURSED = 'UNDISBURSED', 'Undisbursed'
    ACTIVE = 'ACTIVE', 'Active'
    PAID = 'PAID', 'Paid'
    CANCELLED = 'CANCELLED', 'Cancelled'
    DEFAULTED = 'DEFAULTED', 'Defaulted'


# Statuses in which no cash can be collected or balance forgiven.
CLOSED_TO_SETTLEMENT = frozenset({LoanStatus.UNDISBURSED, LoanStatus.CANCELLED})


class Loan(models.Model):
    """
    An approved flat-rate loan.

    due_monthly × num_payments == amount + initial_unearned_interest.
    principal_per_period is fixed at origination and is the split point
    between interest and principal for every period of the schedule.
    """

    client = models.ForeignKey(
        'clients.Client',
        on_delete=models.PROTECT,
        related_name='loans',
        help_text="The borrower."
    )
    loan_num = models.PositiveBigIntegerField(
        unique=True,
        help_text="Sequential loan number."
    )
    amount = models.DecimalField(
        **MONEY,
        validators=[MinValueValidator(Decimal('0.01'))],
        help_text="Principal lent.",
    )
    interest_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))],
        help_text="Flat interest rate per period (percentage).",
    )
    num_payments = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        help_text="Number of monthly payments."
    )
    due_monthly = models.DecimalField(
        **MONEY,
        help_text="Level payment due each period.",
    )
    initial_unearned_interest = models.DecimalField(
        **MONEY,
        help_text="Total scheduled payments less principal.",
    )
    principal_per_period = models.DecimalField(
        **MONEY,
        help_text="Pure-principal share of one full period payment.",
    )
    status = models.CharField(
        max_length=20,
        choices=LoanStatus.choices,
        default=LoanStatus.UNDISBURSED,
        db_index=True,
    )
    loan_start_date = models.DateField()
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='approved_loans',
    )
    disbursed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='disbursed_loans',
    )
    actual_disbursement_date = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'loans'
        ordering = ['-created_at']
        indexes = [
            models.Index(
                fields=['client', 'status'],
                name='idx_loan_client_status'
            ),
        ]

    def __str__(self):
        return f"Loan #{self.loan_num} - Client: {self.client_id} - Amount: {self.amount}"

    def schedule_with_balances(self):
        return ScheduledPayment.objects.with_balances().filter(loan=self)


class ScheduledPaymentQuerySet(models.QuerySet):

    def with_balances(self):
        """Annotate amount_paid and balance (amount − Σ payment receipts)."""
        money = DecimalField(**MONEY)
        return self.annotate(
            amount_paid=Coalesce(
                Sum('payment_receipts__amount'),
                Value(Decimal('0')),
                output_field=money,
            ),
        ).annotate(
            balance=models.ExpressionWrapper(
                F('amount') - F('amount_paid'),
                output_field=money,
            ),
        ).order_by('payment_number')


class ScheduledPayment(models.Model):
    """
    One period of a loan's schedule.

    ``amount`` is the obligation still owed for the period. Payments never
    change it; adjustments write it down in place.
    """

    loan = models.ForeignKey(
        Loan,
        on_delete=models.CASCADE,
        related_name='scheduled_payments',
    )
    payment_number = models.PositiveIntegerField(
        help_text="1-based position in the schedule; allocation order."
    )
    due_date = models.DateField()
    amount = models.DecimalField(
        **MONEY,
        validators=[MinValueValidator(Decimal('0'))],
    )

    objects = ScheduledPaymentQuerySet.as_manager()

    class Meta:
        db_table = 'scheduled_payments'
        ordering = ['loan', 'payment_number']
        constraints = [
            models.UniqueConstraint(
                fields=['loan', 'payment_number'],
                name='uniq_schedule_payment_number'
            ),
        ]

    def __str__(self):
        return f"Loan {self.loan_id} payment #{self.payment_number}: {self.amount}"


class Receipt(models.Model):
    """One cash collection. Append-only."""

    receipt_num = models.PositiveBigIntegerField(unique=True)
    amount = models.DecimalField(
        **MONEY,
        validators=[MinValueValidator(Decimal('0.01'))],
    )
    receipt_date = models.DateTimeField(default=timezone.now, db_index=True)
    client = models.ForeignKey(
        'clients.Client',
        on_delete=models.PROTECT,
        related_name='receipts',
    )
    loan = models.ForeignKey(
        Loan,
        on_delete=models.PROTECT,
        related_name='receipts',
    )
    received_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='receipts_collected',
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'receipts'
        ordering = ['-receipt_date']
        indexes = [
            models.Index(
                fields=['received_by', 'receipt_date'],
                name='idx_receipt_clerk_date'
            ),
        ]

    def __str__(self):
        return f"Receipt #{self.receipt_num} - {self.amount}"


class PaymentReceipt(models.Model):
    """The share of one Receipt applied to one ScheduledPayment."""

    receipt = models.ForeignKey(
        Receipt,
        on_delete=models.PROTECT,
        related_name='payment_receipts',
    )
    scheduled_payment = models.ForeignKey(
        ScheduledPayment,
        on_delete=models.PROTECT,
        related_name='payment_receipts',
    )
    amount = models.DecimalField(
        **MONEY,
        validators=[MinValueValidator(Decimal('0.01'))],
    )

    class Meta:
        db_table = 'payment_receipts'

    def __str__(self):
        return f"{self.amount} of receipt {self.receipt_id} to schedule {self.scheduled_payment_id}"


class LoanAdjustment(models.Model):
    """One forgiveness (write-off) event. Append-only."""

    loan = models.ForeignKey(
        Loan,
        on_delete=models.PROTECT,
        related_name='adjustments',
    )
    adjustment_num = models.PositiveBigIntegerField(unique=True)
    amount = models.DecimalField(
        **MONEY,
        validators=[MinValueValidator(Decimal('0.01'))],
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='loan_adjustments',
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'loan_adjustments'
        ordering = ['-created_at']

    def __str__(self):
        return f"Adjustment #{self.adjustment_num} - Loan {self.loan_id} - {self.amount}"
