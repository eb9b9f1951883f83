"""
WSGI config for the chat backend.

Serves the REST API only. Realtime delivery needs the ASGI application
(config.asgi), so WSGI deployments must run an ASGI process alongside.

For more information on this file, see:
https://docs.djangoproject.com/en/5.2/howto/deployment/wsgi/
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()
