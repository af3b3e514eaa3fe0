"""
Reconciliation views for the Loan Settlement service.
"""

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.reconciliation.serializers import (
    CloseReconciliationSerializer,
    ReceiptSummarySerializer,
    ReconciliationResponseSerializer,
    SummaryQuerySerializer,
)
from apps.reconciliation.services import ReconciliationService


class ReceiptSummaryView(APIView):
    """
    GET /api/reconciliation

    Receipt totals per day and clerk, open or closed.
    Optional query parameters: start_date, end_date, clerk_id.
    """

    def get(self, request):
        query = SummaryQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        summaries = ReconciliationService.receipt_summaries(**query.validated_data)

        serializer = ReceiptSummarySerializer(summaries, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)


class CloseReconciliationView(APIView):
    """
    POST /api/reconciliation/close

    Close a clerk's day against the cash they surrendered.
    """

    def post(self, request):
        serializer = CloseReconciliationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        reconciliation = ReconciliationService.close(
            reconciled_by=request.user,
            **serializer.validated_data,
        )

        response_serializer = ReconciliationResponseSerializer({
            'pk': reconciliation.pk,
            'date': reconciliation.date,
            'clerk_id': reconciliation.clerk_id,
            'amount_expected': reconciliation.amount_expected,
            'amount_surrendered': reconciliation.amount_surrendered,
            'variance': reconciliation.variance,
            'receipt_count': reconciliation.receipts.count(),
            'notes': reconciliation.notes,
        })

        return Response(response_serializer.data, status=status.HTTP_201_CREATED)
