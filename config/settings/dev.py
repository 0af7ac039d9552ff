"""Development settings.

Enables debug and allows all hosts. Without PayPal credentials payments
run against the in-process sandbox. Do not use these settings in production!
"""

from .base import *  # noqa: F401,F403

# Enable debug mode for development
DEBUG = True

# Allow all hosts in development
ALLOWED_HOSTS = ['*']

CORS_ALLOW_ALL_ORIGINS = True
