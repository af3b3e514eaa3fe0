"""
Reconciliation service layer.

Receipts are summarized per (calendar day, clerk). A group becomes closed
once a Reconciliation links its receipts; closing posts the cash handed in
from Unreconciled Receipts to Cash on Hand.
"""

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional

from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.core.db import settlement_transaction
from apps.core.exceptions import SettlementValidationError
from apps.core.utils import sum_money
from apps.ledger.models import ActivityType, LedgerAccount
from apps.ledger.services import LedgerService, validate_amount
from apps.loans.models import Receipt
from apps.reconciliation.models import Reconciliation

logger = logging.getLogger(__name__)

OPEN = 'open'
CLOSED = 'closed'


def receipt_day(receipt) -> date:
    """Calendar day of a receipt in the configured TIME_ZONE."""
    return timezone.localdate(receipt.receipt_date)


class ReconciliationService:
    """Daily receipt summaries and reconciliation close-out."""

    @staticmethod
    def summarize(receipts: Iterable[Receipt]) -> List[dict]:
        """
        Group receipts by (day, clerk).

        Each summary carries ``date``, ``clerk_id``, ``total``, ``count``,
        ``status`` and, for closed groups, the ``reconciled`` amount,
        ``variance`` (reconciled less total) and ``notes`` of the latest
        reconciliation covering the group.

        Receipts should come with ``reconciliations`` prefetched.
        """
        groups = defaultdict(list)
        for receipt in receipts:
            groups[(receipt_day(receipt), receipt.received_by_id)].append(receipt)

        summaries = []
        for (day, clerk_id), members in sorted(groups.items(), key=lambda item: item[0]):
            total = sum_money(r.amount for r in members)
            reconciliations = [
                reconciliation
                for r in members
                for reconciliation in r.reconciliations.all()
            ]
            summary = {
                'date': day,
                'clerk_id': clerk_id,
                'total': total,
                'count': len(members),
                'status': OPEN,
                'reconciled': None,
                'variance': None,
                'notes': '',
            }
            if reconciliations:
                latest = max(reconciliations, key=lambda rec: (rec.created_at, rec.pk))
                summary.update(
                    status=CLOSED,
                    reconciled=latest.amount_surrendered,
                    variance=latest.amount_surrendered - total,
                    notes=latest.notes,
                )
            summaries.append(summary)

        return summaries

    @classmethod
    def receipt_summaries(
        cls,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        clerk_id: Optional[int] = None,
    ) -> List[dict]:
        """Summaries for receipts in [start_date, end_date], optionally one clerk."""
        receipts = Receipt.objects.prefetch_related('reconciliations')
        if start_date is not None:
            receipts = receipts.filter(receipt_date__date__gte=start_date)
        if end_date is not None:
            receipts = receipts.filter(receipt_date__date__lte=end_date)
        if clerk_id is not None:
            receipts = receipts.filter(received_by_id=clerk_id)

        return cls.summarize(receipts)

    @staticmethod
    def close(
        date: date,
        clerk_id: int,
        amount_surrendered,
        notes: str = '',
        reconciled_by=None,
    ) -> Reconciliation:
        """
        Close one clerk's day.

        Links every receipt the clerk took on ``date``, records the expected
        total, and posts Dr Cash on Hand / Cr Unreconciled Receipts for the
        amount surrendered. Any variance stays in Unreconciled Receipts.

        A second close of the same day is not blocked; it links the same
        receipts again and posts again.

        Raises:
            SettlementValidationError: Negative or malformed amount, or
                unknown clerk.
            MissingAccountError: If a configured ledger account is absent.
        """
        amount_surrendered = validate_amount(
            amount_surrendered, field='amount_surrendered', allow_zero=True,
        )
        if not get_user_model().objects.filter(pk=clerk_id).exists():
            raise SettlementValidationError.for_field(
                'clerk_id', f"Clerk with ID {clerk_id} not found."
            )

        with settlement_transaction('Reconciliation close'):
            ledger = LedgerService.resolve_many(
                LedgerAccount.CASH_ON_HAND,
                LedgerAccount.UNRECONCILED_RECEIPTS,
            )

            receipts = list(
                Receipt.objects.select_for_update()
                .filter(received_by_id=clerk_id, receipt_date__date=date)
                .order_by('pk')
            )
            amount_expected = sum_money(r.amount for r in receipts)

            if Reconciliation.objects.filter(clerk_id=clerk_id, date=date).exists():
                logger.warning(
                    "Clerk %d already has a reconciliation for %s; closing again",
                    clerk_id,
                    date,
                )

            reconciliation = Reconciliation.objects.create(
                date=date,
                clerk_id=clerk_id,
                reconciled_by=reconciled_by,
                amount_expected=amount_expected,
                amount_surrendered=amount_surrendered,
                notes=notes or '',
            )
            reconciliation.receipts.add(*receipts)

            if amount_surrendered > 0:
                LedgerService.post_transaction(
                    debit=ledger[LedgerAccount.CASH_ON_HAND],
                    credit=ledger[LedgerAccount.UNRECONCILED_RECEIPTS],
                    amount=amount_surrendered,
                    activity_type=ActivityType.RECONCILIATION,
                    activity_id=reconciliation.pk,
                )

        if reconciliation.variance != Decimal('0'):
            logger.warning(
                "Reconciliation %d for clerk %d on %s: variance %s "
                "(expected=%s, surrendered=%s)",
                reconciliation.pk,
                clerk_id,
                date,
                reconciliation.variance,
                amount_expected,
                amount_surrendered,
            )

        logger.info(
            "Reconciliation %d closed for clerk %d on %s: %d receipt(s), "
            "expected=%s, surrendered=%s",
            reconciliation.pk,
            clerk_id,
            date,
            len(receipts),
            amount_expected,
            amount_surrendered,
        )

        return reconciliation
