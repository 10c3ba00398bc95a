"""
WSGI entry point.

Serves the REST API only. WebSocket connections need the ASGI application
in config/asgi.py (Uvicorn), so production runs ASGI; this module is kept
for management tooling and plain-HTTP deployments.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()
