"""
Core views for the Loan Settlement service.
"""

import logging

from django.http import JsonResponse
from rest_framework import serializers, status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.tasks import close_reconciliations_from_sheet

logger = logging.getLogger(__name__)


def health_check(request):
    """
    GET /health/

    Simple health check endpoint for Docker and load balancer probes.
    Exempt from API key authentication.
    """
    return JsonResponse({'status': 'healthy'}, status=200)


class CashCountImportSerializer(serializers.Serializer):
    filename = serializers.RegexField(
        r'^[\w\-. ]+\.xlsx$',
        required=False,
        default='cash_count.xlsx',
        help_text="Sheet name inside DATA_DIR.",
    )


class TriggerCashCountImportView(APIView):
    """
    POST /api/reconciliation/import

    Queue a background close-out of every row in a cash-count sheet.
    """

    def post(self, request):
        serializer = CashCountImportSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        task = close_reconciliations_from_sheet.delay(
            filename=serializer.validated_data['filename'],
            reconciled_by_id=request.user.pk,
        )

        logger.info("Cash count import triggered: task=%s", task.id)

        return Response(
            {
                'message': 'Cash count import has been queued.',
                'task_id': task.id,
            },
            status=status.HTTP_202_ACCEPTED,
        )
