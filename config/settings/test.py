"""
Stock Ledger — Test Settings

Used by pytest (see pyproject.toml). In-memory SQLite unless DATABASE_URL
points at PostgreSQL, which the concurrency tests need.

@file config/settings/test.py
"""

from .base import *  # noqa: F401, F403

DEBUG = False

SECRET_KEY = 'test-secret-key'

DATABASES = {
    'default': env.db('DATABASE_URL', default='sqlite://:memory:'),  # noqa: F405
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

CACHES = {
    'default': {'BACKEND': 'django.core.cache.backends.locmem.LocMemCache'},
}

REST_FRAMEWORK['DEFAULT_THROTTLE_CLASSES'] = []  # noqa: F405

STOCK_LOW_STOCK_THRESHOLD = 10
STOCK_VALIDATE_VARIANTS = False

# Let pytest's caplog see ledger records.
LOGGING['loggers']['stockledger']['propagate'] = True  # noqa: F405
LOGGING['loggers']['stockledger']['handlers'] = []  # noqa: F405
