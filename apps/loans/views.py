"""
Loan views for the Loan Settlement service.

Views are thin; all business logic is in the service layer. The acting
staff member is the authenticated request.user.
"""

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.utils import sum_money
from apps.loans.serializers import (
    AdjustmentResponseSerializer,
    AmountSerializer,
    DisburseLoanSerializer,
    LoanDetailSerializer,
    OriginateLoanSerializer,
    PaymentResponseSerializer,
)
from apps.loans.services import (
    AdjustmentAllocationService,
    LoanService,
    PaymentAllocationService,
)


def loan_detail(loan):
    schedule = list(loan.schedule_with_balances())
    next_due = next((sp for sp in schedule if sp.balance > 0), None)
    return LoanDetailSerializer({
        'pk': loan.pk,
        'loan_num': loan.loan_num,
        'client_id': loan.client_id,
        'status': loan.status,
        'amount': loan.amount,
        'interest_rate': loan.interest_rate,
        'num_payments': loan.num_payments,
        'due_monthly': loan.due_monthly,
        'initial_unearned_interest': loan.initial_unearned_interest,
        'principal_per_period': loan.principal_per_period,
        'loan_start_date': loan.loan_start_date,
        'outstanding_balance': sum_money(sp.balance for sp in schedule),
        'next_due_date': next_due.due_date if next_due else None,
        'scheduled_payments': schedule,
    }).data


class OriginateLoanView(APIView):
    """
    POST /api/loans

    Approve an application: create the loan and its payment schedule.
    """

    def post(self, request):
        serializer = OriginateLoanSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        loan, _ = LoanService.originate_loan(
            approved_by=request.user,
            **serializer.validated_data,
        )

        return Response(loan_detail(loan), status=status.HTTP_201_CREATED)


class LoanDetailView(APIView):
    """
    GET /api/loans/<loan_id>

    Loan terms with the schedule and per-period balances.
    """

    def get(self, request, loan_id):
        loan = LoanService.get_loan(loan_id)
        return Response(loan_detail(loan), status=status.HTTP_200_OK)


class DisburseLoanView(APIView):
    """
    POST /api/loans/<loan_id>/disburse

    Pay out the principal from up to three cash accounts.
    """

    def post(self, request, loan_id):
        serializer = DisburseLoanSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        loan = LoanService.disburse_loan(
            loan_id,
            payouts=[
                (payout['account_id'], payout['amount'])
                for payout in serializer.validated_data['payouts']
            ],
            disbursed_by=request.user,
        )

        return Response(loan_detail(loan), status=status.HTTP_200_OK)


class CancelLoanView(APIView):
    """
    POST /api/loans/<loan_id>/cancel
    """

    def post(self, request, loan_id):
        loan = LoanService.cancel_loan(loan_id)
        return Response(loan_detail(loan), status=status.HTTP_200_OK)


class PaymentView(APIView):
    """
    POST /api/loans/<loan_id>/payments

    Collect a cash payment against the loan's schedule.
    """

    def post(self, request, loan_id):
        serializer = AmountSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = PaymentAllocationService.allocate_payment(
            loan_id,
            amount=serializer.validated_data['amount'],
            received_by=request.user,
        )
        receipt = result.receipt

        response_serializer = PaymentResponseSerializer({
            'receipt_id': receipt.pk,
            'receipt_num': receipt.receipt_num,
            'amount': receipt.amount,
            'interest_paid': result.interest_paid,
            'principal_paid': result.principal_paid,
            'paid_off': result.paid_off,
            'loan_status': receipt.loan.status,
            'allocations': [a._asdict() for a in result.allocations],
        })

        return Response(response_serializer.data, status=status.HTTP_201_CREATED)


class AdjustmentView(APIView):
    """
    POST /api/loans/<loan_id>/adjustments

    Forgive part or all of the loan's outstanding balance.
    """

    def post(self, request, loan_id):
        serializer = AmountSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = AdjustmentAllocationService.allocate_adjustment(
            loan_id,
            amount=serializer.validated_data['amount'],
            created_by=request.user,
        )
        adjustment = result.adjustment

        response_serializer = AdjustmentResponseSerializer({
            'adjustment_id': adjustment.pk,
            'adjustment_num': adjustment.adjustment_num,
            'amount': adjustment.amount,
            'interest_adjusted': result.interest_adjusted,
            'principal_adjusted': result.principal_adjusted,
            'paid_off': result.paid_off,
            'loan_status': adjustment.loan.status,
            'allocations': [a._asdict() for a in result.allocations],
        })

        return Response(response_serializer.data, status=status.HTTP_201_CREATED)
