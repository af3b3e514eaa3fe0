"""
Custom exceptions and DRF exception handler for the Loan Settlement service.

User-actionable failures are APIException subclasses and surface as
field-level or status errors. Ledger misconfiguration is a plain exception:
it aborts the enclosing database transaction and reaches the operator
through the unhandled-exception branch of the handler.
"""

import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ClientNotFoundError(APIException):
    """Raised when a client does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Client not found.'
    default_code = 'client_not_found'


class LoanNotFoundError(APIException):
    """Raised when a loan does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Loan not found.'
    default_code = 'loan_not_found'


class AccountNotFoundError(APIException):
    """Raised when a ledger account id does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Account not found.'
    default_code = 'account_not_found'


class SettlementValidationError(APIException):
    """
    Malformed or non-positive input, rejected before any state change.

    Use ``for_field`` to report the problem against a single request field.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid input.'
    default_code = 'invalid'

    @classmethod
    def for_field(cls, field, message):
        return cls(detail={field: [message]})


class LoanStateError(APIException):
    """Raised when the loan status does not allow the requested operation."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Loan is not in a state that allows this operation.'
    default_code = 'invalid_loan_state'


class AllocationError(APIException):
    """Base class for waterfall allocation failures."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Amount could not be allocated.'
    default_code = 'allocation_error'


class AmountExceedsBalanceError(AllocationError):
    """Requested amount is larger than the loan's total outstanding balance."""

    default_detail = {'amount': ['Amount is greater than the total balance.']}
    default_code = 'amount_exceeds_balance'


class ConcurrencyError(APIException):
    """
    A concurrent writer held or changed the rows this operation needed.

    The caller should retry the whole operation from a fresh read.
    """

    status_code = status.HTTP_409_CONFLICT
    default_detail = 'The loan was modified concurrently. Please retry.'
    default_code = 'concurrent_update'


class LedgerError(Exception):
    """Raised when a ledger posting cannot be made."""

    pass


class MissingAccountError(LedgerError):
    """Raised when a configured chart-of-accounts entry is absent."""

    def __init__(self, role, name):
        self.role = role
        self.name = name
        super().__init__(
            f"Ledger account '{name}' for role {role} does not exist."
        )


class ReconciliationImportError(Exception):
    """Raised when a cash-count sheet cannot be read."""

    pass


def custom_exception_handler(exc, context):
    """
    Custom DRF exception handler that returns consistent error responses.

    Handles all DRF exceptions and adds logging for server errors.
    """
    response = exception_handler(exc, context)

    if response is not None:
        error_data = {
            'error': True,
            'status_code': response.status_code,
            'detail': response.data,
        }
        response.data = error_data
        return response

    if isinstance(exc, LedgerError):
        logger.error(
            "Ledger failure in %s: %s",
            context.get('view', 'unknown'),
            exc,
        )
    else:
        logger.exception(
            "Unhandled exception in %s",
            context.get('view', 'unknown'),
            exc_info=exc,
        )

    return Response(
        {
            'error': True,
            'status_code': 500,
            'detail': 'An unexpected error occurred. Please try again later.',
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
