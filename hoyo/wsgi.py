"""
WSGI config for the Hoyo en Uno payments backend.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'hoyo.settings.production')

application = get_wsgi_application()
