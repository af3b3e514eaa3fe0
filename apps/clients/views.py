"""
Client views for the Loan Settlement service.

Views are thin; all business logic is in the service layer.
"""

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.clients.serializers import (
    ClientResponseSerializer,
    RegisterClientSerializer,
)
from apps.clients.services import ClientService


class RegisterClientView(APIView):
    """
    POST /api/register

    Register a new client.
    """

    def post(self, request):
        serializer = RegisterClientSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        client = ClientService.register(serializer.validated_data)

        response_serializer = ClientResponseSerializer({
            'client_id': client.pk,
            'name': client.full_name,
            'phone_number': client.phone_number,
        })

        return Response(response_serializer.data, status=status.HTTP_201_CREATED)
