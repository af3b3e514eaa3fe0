"""
Settings used by the test suite.

SQLite in-memory database, a fixed secret key and no API keys.
"""

import os

os.environ.setdefault('DJANGO_SECRET_KEY', 'test-secret-key')

from config.settings import *  # noqa: E402,F401,F403

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

API_KEYS = []

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']
