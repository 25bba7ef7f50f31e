"""
ASGI config for the Job Portal API.

Serve with any ASGI server, e.g. `uvicorn config.asgi:application`.
"""
import os

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

from django.core.asgi import get_asgi_application

application = get_asgi_application()
