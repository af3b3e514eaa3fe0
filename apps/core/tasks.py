"""
Celery tasks for bulk reconciliation.

Reads a cash-count sheet (cash_count.xlsx) with pandas and closes one
clerk-day per row. Each row runs in its own database transaction, so a
bad row is counted and skipped without undoing the others.
"""

import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path

import pandas as pd
from celery import shared_task
from django.conf import settings
from django.contrib.auth import get_user_model
from rest_framework.exceptions import APIException

from apps.core.exceptions import ReconciliationImportError

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ('date', 'clerk_id', 'amount_surrendered')


def read_cash_count(file_path: Path) -> pd.DataFrame:
    """
    Load a cash-count sheet and normalize its column names.

    Raises:
        ReconciliationImportError: If required columns are missing.
    """
    df = pd.read_excel(file_path)
    df.columns = [str(col).strip().lower().replace(' ', '_') for col in df.columns]

    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise ReconciliationImportError(
            f"{file_path.name} is missing column(s): {', '.join(missing)}"
        )
    return df


@shared_task(
    bind=True,
    name='core.close_reconciliations_from_sheet',
    max_retries=3,
    default_retry_delay=10,
)
def close_reconciliations_from_sheet(self, filename='cash_count.xlsx', reconciled_by_id=None):
    """
    Close reconciliations listed in a cash-count sheet.

    Columns: date, clerk_id, amount_surrendered, notes (optional).
    Rows with missing or invalid values are logged and counted as errors.
    A clerk-day that already has a reconciliation is skipped, so a retry
    after a partial run never closes the same day twice.
    """
    from apps.reconciliation.models import Reconciliation
    from apps.reconciliation.services import ReconciliationService

    file_path = Path(settings.DATA_DIR) / filename

    if not file_path.exists():
        logger.error("Cash count file not found: %s", file_path)
        return {'status': 'error', 'message': f'File not found: {file_path}'}

    try:
        df = read_cash_count(file_path)
    except ReconciliationImportError as exc:
        logger.error("Cash count import rejected: %s", exc)
        return {'status': 'error', 'message': str(exc)}

    reconciled_by = None
    if reconciled_by_id is not None:
        reconciled_by = get_user_model().objects.filter(pk=reconciled_by_id).first()

    try:
        logger.info("Closing reconciliations from %s (%d rows)", file_path, len(df))

        closed_count = 0
        skipped_count = 0
        error_count = 0

        for index, row in df.iterrows():
            try:
                day = pd.to_datetime(row.get('date'), errors='coerce')
                clerk_id = row.get('clerk_id')
                amount = row.get('amount_surrendered')

                if pd.isna(day) or pd.isna(clerk_id) or pd.isna(amount):
                    logger.warning(
                        "Row %d: missing date, clerk_id or amount_surrendered, skipping",
                        index,
                    )
                    error_count += 1
                    continue

                notes = row.get('notes', '')
                if pd.isna(notes):
                    notes = ''

                day, clerk_id = day.date(), int(clerk_id)
                if Reconciliation.objects.filter(clerk_id=clerk_id, date=day).exists():
                    logger.info(
                        "Row %d: clerk %d already reconciled for %s, skipping",
                        index,
                        clerk_id,
                        day,
                    )
                    skipped_count += 1
                    continue

                ReconciliationService.close(
                    date=day,
                    clerk_id=clerk_id,
                    amount_surrendered=Decimal(str(amount)),
                    notes=str(notes).strip(),
                    reconciled_by=reconciled_by,
                )
                closed_count += 1

            except (ValueError, TypeError, InvalidOperation, APIException) as e:
                logger.warning("Row %d: failed to close reconciliation: %s", index, e)
                error_count += 1
                continue

        result = {
            'status': 'success',
            'total_rows': len(df),
            'closed': closed_count,
            'skipped': skipped_count,
            'errors': error_count,
        }
        logger.info("Cash count import complete: %s", result)
        return result

    except Exception as exc:
        logger.exception("Cash count import failed")
        raise self.retry(exc=exc)
