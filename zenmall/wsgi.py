"""
WSGI config for the Zen Mall project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'zenmall.settings')

application = get_wsgi_application()
