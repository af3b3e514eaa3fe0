"""
Sequence counters for human-facing document numbers.
"""

from django.db import models


class SequenceCounterManager(models.Manager):

    def next_value(self, name: str, start: int) -> int:
        """
        Return the next number in the ``name`` sequence.

        The counter row is locked with select_for_update(), so the caller
        must already be inside transaction.atomic(). Concurrent callers
        queue on the row lock and never receive the same number.
        """
        counter, created = self.select_for_update().get_or_create(
            name=name,
            defaults={'last_value': start},
        )
        if created:
            return counter.last_value

        counter.last_value += 1
        counter.save(update_fields=['last_value', 'updated_at'])
        return counter.last_value


class SequenceCounter(models.Model):
    """
    Monotonic counter backing loan, receipt, adjustment and account numbers.
    """

    LOAN = 'loan'
    RECEIPT = 'receipt'
    ADJUSTMENT = 'adjustment'

    name = models.CharField(
        max_length=50,
        unique=True,
        help_text="Sequence name, e.g. 'receipt' or 'account:CASH'.",
    )
    last_value = models.PositiveBigIntegerField(
        help_text="Last number handed out."
    )
    updated_at = models.DateTimeField(auto_now=True)

    objects = SequenceCounterManager()

    class Meta:
        db_table = 'sequence_counters'

    def __str__(self):
        return f"{self.name}: {self.last_value}"
