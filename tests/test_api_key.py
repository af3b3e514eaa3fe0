"""
Tests for API key authentication middleware.
"""

from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from tests.helpers import make_user


@override_settings(API_KEYS=['test-api-key-123', 'another-key-456'])
class APIKeyAuthTests(TestCase):
    """Test X-API-KEY header authentication."""

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=make_user())

    def test_missing_api_key_returns_401(self):
        """Request without X-API-KEY → 401."""
        response = self.client.get('/api/accounts')
        self.assertEqual(response.status_code, 401)
        data = response.json()
        self.assertTrue(data['error'])
        self.assertIn('Authentication required', data['detail'])

    def test_invalid_api_key_returns_403(self):
        """Request with wrong X-API-KEY → 403."""
        response = self.client.get('/api/accounts', HTTP_X_API_KEY='wrong-key')
        self.assertEqual(response.status_code, 403)
        self.assertIn('Invalid API key', response.json()['detail'])

    def test_valid_api_key_passes(self):
        """Any configured key is accepted."""
        for key in ('test-api-key-123', 'another-key-456'):
            response = self.client.get('/api/accounts', HTTP_X_API_KEY=key)
            self.assertEqual(response.status_code, 200)

    def test_health_check_exempt(self):
        """Health check does not require an API key."""
        response = self.client.get('/health/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['status'], 'healthy')
