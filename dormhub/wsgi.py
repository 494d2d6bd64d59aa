"""
WSGI config for dormhub project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'dormhub.settings')

application = get_wsgi_application()
