"""
Ledger views for the Loan Settlement service.
"""

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.ledger.models import Account
from apps.ledger.serializers import (
    AccountSerializer,
    CreateAccountSerializer,
    TransactionSerializer,
    TransferSerializer,
)
from apps.ledger.services import LedgerService


def account_data(account):
    return AccountSerializer({
        'pk': account.pk,
        'account_num': account.account_num,
        'name': account.name,
        'account_type': account.account_type,
        'balance': account.balance(),
    }).data


class AccountListView(APIView):
    """
    GET /api/accounts   chart of accounts with balances
    POST /api/accounts  add an account
    """

    def get(self, request):
        accounts = [account_data(account) for account in Account.objects.all()]
        return Response(accounts, status=status.HTTP_200_OK)

    def post(self, request):
        serializer = CreateAccountSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        account = LedgerService.create_account(**serializer.validated_data)

        return Response(account_data(account), status=status.HTTP_201_CREATED)


class TransferView(APIView):
    """
    POST /api/accounts/transfer

    Move cash from one cash account to another.
    """

    def post(self, request):
        serializer = TransferSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        entry = LedgerService.transfer(
            serializer.validated_data['from_account'],
            serializer.validated_data['to_account'],
            serializer.validated_data['amount'],
        )

        return Response(TransactionSerializer(entry).data, status=status.HTTP_201_CREATED)
