"""
Ledger URL configuration.
"""

from django.urls import path

from apps.ledger.views import AccountListView, TransferView

urlpatterns = [
    path('accounts', AccountListView.as_view(), name='accounts'),
    path('accounts/transfer', TransferView.as_view(), name='account-transfer'),
]
