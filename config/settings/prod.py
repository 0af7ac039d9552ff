"""Production settings.

Ensure that sensitive values are provided via environment variables and
that security settings are appropriate for production use.
"""

from .base import *  # noqa: F401,F403

# Never run with debug enabled in production
DEBUG = False

# Allowed hosts should be defined explicitly via environment variable
ALLOWED_HOSTS = os.environ.get('DJANGO_ALLOWED_HOSTS', '').split(',')

# Configure secure proxies and cookies
CSRF_COOKIE_SECURE = True
SESSION_COOKIE_SECURE = True
SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')

# Live PayPal unless overridden
PAYPAL_API_BASE_URL = os.environ.get('PAYPAL_API_BASE_URL', 'https://api-m.paypal.com')
