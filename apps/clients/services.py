"""
Client service layer.

Views delegate to this service; no business logic in views.
"""

import logging

from apps.clients.models import Client
from apps.core.exceptions import ClientNotFoundError

logger = logging.getLogger(__name__)


class ClientService:
    """Service class for client-related operations."""

    @staticmethod
    def register(validated_data: dict) -> Client:
        """
        Register a new client.

        Args:
            validated_data: Dict with first_name, last_name and
                          optional phone_number.

        Returns:
            The newly created Client instance.
        """
        client = Client.objects.create(
            first_name=validated_data['first_name'],
            last_name=validated_data['last_name'],
            phone_number=validated_data.get('phone_number', ''),
        )

        logger.info("Registered client %s (ID: %d)", client.full_name, client.pk)

        return client

    @staticmethod
    def get_client(client_id: int) -> Client:
        """
        Retrieve a client by ID.

        Raises:
            ClientNotFoundError: If the client does not exist.
        """
        try:
            return Client.objects.get(pk=client_id)
        except Client.DoesNotExist:
            raise ClientNotFoundError(
                detail=f"Client with ID {client_id} not found."
            )
