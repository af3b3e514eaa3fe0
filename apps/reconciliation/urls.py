"""
Reconciliation URL configuration.
"""

from django.urls import path

from apps.reconciliation.views import CloseReconciliationView, ReceiptSummaryView

urlpatterns = [
    path('reconciliation', ReceiptSummaryView.as_view(), name='receipt-summaries'),
    path('reconciliation/close', CloseReconciliationView.as_view(), name='close-reconciliation'),
]
