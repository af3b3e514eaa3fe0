"""
Loan serializers for the Loan Settlement service.
"""

from decimal import Decimal

from rest_framework import serializers


def money_field(**kwargs):
    return serializers.DecimalField(max_digits=15, decimal_places=2, **kwargs)


class OriginateLoanSerializer(serializers.Serializer):
    """Serializer for loan origination (application approval) request."""

    client_id = serializers.IntegerField(
        min_value=1,
        help_text="Borrower's ID.",
    )
    amount = money_field(
        min_value=Decimal('0.01'),
        help_text="Principal to lend.",
    )
    interest_rate = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        min_value=Decimal('0'),
        max_value=Decimal('100'),
        help_text="Flat interest rate per period (%).",
    )
    num_payments = serializers.IntegerField(
        min_value=1,
        max_value=360,
        help_text="Number of monthly payments.",
    )
    loan_start_date = serializers.DateField(
        help_text="The first payment falls due one month after this date.",
    )


class PayoutSerializer(serializers.Serializer):
    account_id = serializers.IntegerField(min_value=1)
    amount = money_field(min_value=Decimal('0.01'))


class DisburseLoanSerializer(serializers.Serializer):
    """Serializer for loan disbursement request."""

    payouts = PayoutSerializer(many=True, allow_empty=False)


class AmountSerializer(serializers.Serializer):
    """Serializer for payment and adjustment requests."""

    amount = money_field(
        min_value=Decimal('0.01'),
        help_text="Amount to collect or forgive.",
    )


class ScheduledPaymentSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    payment_number = serializers.IntegerField()
    due_date = serializers.DateField()
    amount = money_field()
    amount_paid = money_field()
    balance = money_field()


class LoanDetailSerializer(serializers.Serializer):
    """Serializer for loan detail response."""

    loan_id = serializers.IntegerField(source='pk')
    loan_num = serializers.IntegerField()
    client_id = serializers.IntegerField()
    status = serializers.CharField()
    amount = money_field()
    interest_rate = serializers.DecimalField(max_digits=5, decimal_places=2)
    num_payments = serializers.IntegerField()
    due_monthly = money_field()
    initial_unearned_interest = money_field()
    principal_per_period = money_field()
    loan_start_date = serializers.DateField()
    outstanding_balance = money_field()
    next_due_date = serializers.DateField(allow_null=True)
    scheduled_payments = ScheduledPaymentSerializer(many=True)


class AllocationSerializer(serializers.Serializer):
    scheduled_payment_id = serializers.IntegerField()
    amount = money_field()


class PaymentResponseSerializer(serializers.Serializer):
    """Serializer for payment allocation response."""

    receipt_id = serializers.IntegerField()
    receipt_num = serializers.IntegerField()
    amount = money_field()
    interest_paid = money_field()
    principal_paid = money_field()
    paid_off = serializers.BooleanField()
    loan_status = serializers.CharField()
    allocations = AllocationSerializer(many=True)


class AdjustmentResponseSerializer(serializers.Serializer):
    """Serializer for adjustment allocation response."""

    adjustment_id = serializers.IntegerField()
    adjustment_num = serializers.IntegerField()
    amount = money_field()
    interest_adjusted = money_field()
    principal_adjusted = money_field()
    paid_off = serializers.BooleanField()
    loan_status = serializers.CharField()
    allocations = AllocationSerializer(many=True)
