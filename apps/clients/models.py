"""
Client model for the Loan Settlement service.
"""

from django.db import models


class Client(models.Model):
    """
    A borrower. Owns loans and the cash receipts collected against them.
    """

    first_name = models.CharField(
        max_length=100,
        help_text="Client's first name."
    )
    last_name = models.CharField(
        max_length=100,
        help_text="Client's last name."
    )
    phone_number = models.CharField(
        max_length=20,
        blank=True,
        db_index=True,
        help_text="Client's contact phone number."
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'clients'
        ordering = ['last_name', 'first_name']

    def __str__(self):
        return f"{self.first_name} {self.last_name} (ID: {self.pk})"

    @property
    def full_name(self):
        """Returns the client's full name."""
        return f"{self.first_name} {self.last_name}"
