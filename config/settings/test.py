"""Test settings: in-memory SQLite, eager Celery, sandbox payments."""

import os

from .base import *  # noqa: F401,F403

DEBUG = False

# DB_ENGINE=django.db.backends.postgresql runs the row-lock tests against a real server
if not os.environ.get('DB_ENGINE'):
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': ':memory:',
        }
    }

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

PAYPAL_CLIENT_ID = ''
PAYPAL_CLIENT_SECRET = ''

BOOKING_RENTER_FEE_RATE = '0.07'
BOOKING_LISTER_FEE_RATE = '0.03'

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {"null": {"class": "logging.NullHandler"}},
    "root": {"handlers": ["null"], "level": "WARNING"},
}
