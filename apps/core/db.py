"""
Transaction boundary for settlement writes.
"""

import logging
from contextlib import contextmanager

from django.db import OperationalError, transaction

from apps.core.exceptions import ConcurrencyError

logger = logging.getLogger(__name__)


@contextmanager
def settlement_transaction(label: str):
    """
    Run one read-compute-write sequence as a single atomic block.

    Lock waits that time out, deadlocks and serialization failures surface
    from the database as OperationalError; they are reported as
    ConcurrencyError so the caller retries from a fresh read.
    """
    try:
        with transaction.atomic():
            yield
    except OperationalError as exc:
        logger.warning("%s aborted by a concurrent writer: %s", label, exc)
        raise ConcurrencyError() from exc
