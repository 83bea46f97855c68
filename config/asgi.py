"""ASGI entry point for the TripoStay API.

Production servers are expected to set ``DJANGO_SETTINGS_MODULE``
explicitly; the development settings are only a fallback.
"""

import os
from django.core.asgi import get_asgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.dev')

application = get_asgi_application()
