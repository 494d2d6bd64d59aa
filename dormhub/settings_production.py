"""
Production settings for DormHub.

Reads the database from DATABASE_URL and serves static files with WhiteNoise.
"""

import os
import dj_database_url

from .settings import *  # noqa: F401,F403
from .settings import BASE_DIR, MIDDLEWARE, LOGGING

# =============================================================================
# CORE SETTINGS
# =============================================================================

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY')
if not SECRET_KEY:
    raise ValueError("DJANGO_SECRET_KEY environment variable is required")

DEBUG = os.environ.get('DJANGO_DEBUG', 'False').lower() == 'true'

ALLOWED_HOSTS = [host for host in os.environ.get('DJANGO_ALLOWED_HOSTS', '').split(',') if host]

# Always allow health checks
ALLOWED_HOSTS.append('localhost')
ALLOWED_HOSTS.append('127.0.0.1')

# =============================================================================
# MIDDLEWARE
# =============================================================================

MIDDLEWARE = MIDDLEWARE[:1] + ['whitenoise.middleware.WhiteNoiseMiddleware'] + MIDDLEWARE[1:]

# =============================================================================
# DATABASE
# =============================================================================

DATABASE_URL = os.environ.get('DATABASE_URL')

if DATABASE_URL:
    DATABASES = {
        'default': dj_database_url.config(
            default=DATABASE_URL,
            conn_max_age=600,
            conn_health_checks=True,
        )
    }

# =============================================================================
# STATIC FILES - WhiteNoise
# =============================================================================

STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

STORAGES = {
    'default': {
        'BACKEND': 'django.core.files.storage.FileSystemStorage',
    },
    'staticfiles': {
        'BACKEND': 'whitenoise.storage.CompressedManifestStaticFilesStorage',
    },
}

# =============================================================================
# SECURITY SETTINGS
# =============================================================================

SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')
SECURE_SSL_REDIRECT = not DEBUG

SESSION_COOKIE_SECURE = not DEBUG
CSRF_COOKIE_SECURE = not DEBUG
SESSION_COOKIE_HTTPONLY = True
CSRF_COOKIE_HTTPONLY = True

SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = 'DENY'

# =============================================================================
# LOGGING
# =============================================================================

LOGGING['formatters']['verbose']['format'] = '[{asctime}] [{request_id}] {levelname} {name}: {message}'
LOGGING['handlers']['console']['formatter'] = 'verbose'

# =============================================================================
# BACKGROUND JOBS
# =============================================================================

ENABLE_BACKGROUND_SCHEDULER = os.environ.get('DORM_SCHEDULER_ENABLED', 'True').lower() == 'true'
