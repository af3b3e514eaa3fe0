"""
Loan URL configuration.
"""

from django.urls import path

from apps.loans.views import (
    AdjustmentView,
    CancelLoanView,
    DisburseLoanView,
    LoanDetailView,
    OriginateLoanView,
    PaymentView,
)

urlpatterns = [
    path('loans', OriginateLoanView.as_view(), name='originate-loan'),
    path('loans/<int:loan_id>', LoanDetailView.as_view(), name='loan-detail'),
    path('loans/<int:loan_id>/disburse', DisburseLoanView.as_view(), name='disburse-loan'),
    path('loans/<int:loan_id>/cancel', CancelLoanView.as_view(), name='cancel-loan'),
    path('loans/<int:loan_id>/payments', PaymentView.as_view(), name='loan-payments'),
    path('loans/<int:loan_id>/adjustments', AdjustmentView.as_view(), name='loan-adjustments'),
]
