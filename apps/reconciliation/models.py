"""
End-of-day cash reconciliation.
"""

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class Reconciliation(models.Model):
    """
    One clerk's one day of collections, closed against the cash handed in.

    The receipts it covers are linked through ``receipts``; the Receipt
    rows themselves are never modified.
    """

    date = models.DateField(help_text="Calendar day of the receipts closed.")
    clerk = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='reconciliations',
        help_text="Staff member who collected the receipts."
    )
    reconciled_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='+',
    )
    amount_expected = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        help_text="Sum of the receipts at close time.",
    )
    amount_surrendered = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))],
        help_text="Cash physically handed in.",
    )
    notes = models.TextField(blank=True, default='')
    receipts = models.ManyToManyField(
        'loans.Receipt',
        related_name='reconciliations',
        blank=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'reconciliations'
        ordering = ['-date', 'clerk']
        indexes = [
            models.Index(
                fields=['clerk', 'date'],
                name='idx_reconciliation_clerk_date'
            ),
        ]

    def __str__(self):
        return f"Reconciliation {self.date} - Clerk: {self.clerk_id}"

    @property
    def variance(self) -> Decimal:
        """Surrendered less expected; negative when cash is short."""
        return self.amount_surrendered - self.amount_expected
