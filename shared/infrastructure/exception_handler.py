"""
REST framework exception handler.

Domain errors become ``{"detail": ..., "error_code": ...}`` responses
with the status their class declares. Framework errors keep DRF's own
payload; plain ``detail`` payloads gain an ``error_code`` too, so
clients can branch on a single key.
"""

from __future__ import annotations

import logging

from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler, set_rollback  # type: ignore

from shared.domain.exceptions import DomainError

logger = logging.getLogger(__name__)

_DRF_ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: 'VALIDATION_ERROR',
    status.HTTP_401_UNAUTHORIZED: 'AUTHENTICATION_FAILED',
    status.HTTP_403_FORBIDDEN: 'PERMISSION_DENIED',
    status.HTTP_404_NOT_FOUND: 'NOT_FOUND',
    status.HTTP_405_METHOD_NOT_ALLOWED: 'METHOD_NOT_ALLOWED',
    status.HTTP_409_CONFLICT: 'CONFLICT',
    status.HTTP_429_TOO_MANY_REQUESTS: 'THROTTLED',
}


def domain_exception_handler(exc, context):  # type: ignore
    if isinstance(exc, DomainError):
        view = context.get('view')
        logger.info(
            "%s rejected with %s: %s",
            view.__class__.__name__ if view else 'view', exc.error_code, exc.message,
        )
        set_rollback()
        return Response(
            {'detail': exc.message, 'error_code': exc.error_code},
            status=exc.status_code,
        )

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(response.data, dict) and set(response.data) == {'detail'}:
        code = getattr(exc, 'default_code', None)
        response.data['error_code'] = _DRF_ERROR_CODES.get(
            response.status_code, str(code or 'ERROR').upper()
        )
    return response
