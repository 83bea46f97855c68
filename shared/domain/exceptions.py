"""
Domain errors

Every business failure the API reports is a ``DomainError``. Each
subclass fixes the HTTP status and machine-readable ``error_code`` the
exception handler renders, so services never build responses.
"""

from typing import Optional


class DomainError(Exception):
    status_code = 400
    error_code = 'DOMAIN_ERROR'
    default_message = 'The request could not be processed.'

    def __init__(self, message: Optional[str] = None, *, error_code: Optional[str] = None):
        self.message = message or self.default_message
        if error_code:
            self.error_code = error_code
        super().__init__(self.message)


class BusinessRuleError(DomainError):
    status_code = 400
    error_code = 'BUSINESS_RULE_VIOLATION'


class PermissionDeniedError(DomainError):
    status_code = 403
    error_code = 'PERMISSION_DENIED'
    default_message = 'You do not have permission to perform this action.'


class NotFoundError(DomainError):
    status_code = 404
    error_code = 'NOT_FOUND'
    default_message = 'Resource not found.'


class ConflictError(DomainError):
    status_code = 409
    error_code = 'CONFLICT'
    default_message = 'The request conflicts with the current state of the resource.'
