"""
Core app URL configuration for the cash-count import trigger.
"""

from django.urls import path

from apps.core.views import TriggerCashCountImportView

urlpatterns = [
    path(
        'reconciliation/import',
        TriggerCashCountImportView.as_view(),
        name='cash-count-import',
    ),
]
