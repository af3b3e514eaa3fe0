"""
Reconciliation serializers for the Loan Settlement service.
"""

from decimal import Decimal

from rest_framework import serializers

from apps.loans.serializers import money_field


class SummaryQuerySerializer(serializers.Serializer):
    """Query parameters for the receipt summary listing."""

    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    clerk_id = serializers.IntegerField(required=False, min_value=1)

    def validate(self, data):
        start, end = data.get('start_date'), data.get('end_date')
        if start and end and start > end:
            raise serializers.ValidationError(
                {'end_date': 'End date must not be before start date.'}
            )
        return data


class ReceiptSummarySerializer(serializers.Serializer):
    date = serializers.DateField()
    clerk_id = serializers.IntegerField()
    total = money_field()
    count = serializers.IntegerField()
    status = serializers.CharField()
    reconciled = money_field(allow_null=True)
    variance = money_field(allow_null=True)
    notes = serializers.CharField(allow_blank=True)


class CloseReconciliationSerializer(serializers.Serializer):
    """Serializer for closing one clerk's day."""

    date = serializers.DateField()
    clerk_id = serializers.IntegerField(min_value=1)
    amount_surrendered = money_field(
        min_value=Decimal('0'),
        help_text="Cash physically handed in by the clerk.",
    )
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class ReconciliationResponseSerializer(serializers.Serializer):
    reconciliation_id = serializers.IntegerField(source='pk')
    date = serializers.DateField()
    clerk_id = serializers.IntegerField()
    amount_expected = money_field()
    amount_surrendered = money_field()
    variance = money_field()
    receipt_count = serializers.IntegerField()
    notes = serializers.CharField(allow_blank=True)
