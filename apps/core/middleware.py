"""
API key gate for the settlement API.

Requests under /api/ must carry a configured key in the X-API-KEY header
before DRF authentication resolves the acting staff member. Everything
else (health probe, admin) passes straight through.
"""

import hmac
import logging

from django.conf import settings
from django.http import JsonResponse

logger = logging.getLogger(__name__)

PROTECTED_PREFIX = '/api/'


def _error(status_code, detail):
    return JsonResponse(
        {'error': True, 'status_code': status_code, 'detail': detail},
        status=status_code,
    )


def _is_known_key(provided_key, api_keys):
    return any(
        hmac.compare_digest(provided_key.encode(), key.encode())
        for key in api_keys
    )


class APIKeyMiddleware:
    """
    Reject /api/ requests without a valid X-API-KEY header.

    With API_KEYS empty (local development, tests) the gate is open.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        api_keys = getattr(settings, 'API_KEYS', [])
        if not api_keys or not request.path.startswith(PROTECTED_PREFIX):
            return self.get_response(request)

        provided_key = request.META.get('HTTP_X_API_KEY', '')

        if not provided_key:
            logger.warning(
                "Request to %s from %s rejected: missing API key",
                request.path,
                request.META.get('REMOTE_ADDR', '-'),
            )
            return _error(401, 'Authentication required. Provide X-API-KEY header.')

        if not _is_known_key(provided_key, api_keys):
            logger.warning(
                "Request to %s from %s rejected: invalid API key",
                request.path,
                request.META.get('REMOTE_ADDR', '-'),
            )
            return _error(403, 'Invalid API key.')

        return self.get_response(request)
