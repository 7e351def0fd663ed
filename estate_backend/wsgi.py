"""
WSGI config for the estate back-office project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'estate_backend.settings')

application = get_wsgi_application()
