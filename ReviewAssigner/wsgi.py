"""WSGI entry point for the ReviewAssigner project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'ReviewAssigner.settings')

application = get_wsgi_application()
