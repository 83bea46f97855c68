"""Django configuration for the TripoStay marketplace backend.

Holds the settings modules for each environment plus the WSGI, ASGI and
Celery entry points.
"""

# Import the Celery application as soon as Django starts so that shared
# tasks are registered against it.
from .celery import app as celery_app  # noqa: F401
