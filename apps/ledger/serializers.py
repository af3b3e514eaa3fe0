"""
Ledger serializers for the Loan Settlement service.
"""

from decimal import Decimal

from rest_framework import serializers

from apps.ledger.models import AccountType


class AccountSerializer(serializers.Serializer):
    account_id = serializers.IntegerField(source='pk')
    account_num = serializers.CharField()
    name = serializers.CharField()
    account_type = serializers.CharField()
    balance = serializers.DecimalField(max_digits=15, decimal_places=2)


class CreateAccountSerializer(serializers.Serializer):
    """Serializer for adding an account to the chart."""

    name = serializers.CharField(max_length=100)
    account_type = serializers.ChoiceField(choices=AccountType.choices)


class TransferSerializer(serializers.Serializer):
    """Serializer for moving cash between two cash accounts."""

    from_account = serializers.IntegerField(min_value=1)
    to_account = serializers.IntegerField(min_value=1)
    amount = serializers.DecimalField(
        max_digits=15,
        decimal_places=2,
        min_value=Decimal('0.01'),
    )


class TransactionSerializer(serializers.Serializer):
    transaction_id = serializers.IntegerField(source='pk')
    amount = serializers.DecimalField(max_digits=15, decimal_places=2)
    activity_type = serializers.CharField()
    activity_id = serializers.CharField()
    date = serializers.DateTimeField()
    debit_account = serializers.CharField(source='debit_account.name')
    credit_account = serializers.CharField(source='credit_account.name')
