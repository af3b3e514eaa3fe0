"""
Client serializers for the Loan Settlement service.
"""

from rest_framework import serializers


class RegisterClientSerializer(serializers.Serializer):
    """Serializer for client registration request."""

    first_name = serializers.CharField(
        max_length=100,
        required=True,
        help_text="Client's first name.",
    )
    last_name = serializers.CharField(
        max_length=100,
        required=True,
        help_text="Client's last name.",
    )
    phone_number = serializers.RegexField(
        r'^\+?[0-9 ]{7,20}$',
        max_length=20,
        required=False,
        allow_blank=True,
        help_text="Client's phone number.",
    )


class ClientResponseSerializer(serializers.Serializer):
    """Serializer for client registration response."""

    client_id = serializers.IntegerField()
    name = serializers.CharField()
    phone_number = serializers.CharField(allow_blank=True)
