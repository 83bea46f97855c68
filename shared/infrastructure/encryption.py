"""
Encryption utilities

Symmetric (Fernet) encryption for data that must be readable by the
application but never stored in clear text, such as property check-in
instructions and door codes.
"""

import base64
import hashlib
from functools import lru_cache

from cryptography.fernet import Fernet, InvalidToken
from django.conf import settings  # type: ignore
from django.core.exceptions import ImproperlyConfigured  # type: ignore

__all__ = ['InvalidToken', 'encrypt_string', 'decrypt_string', 'get_fernet']


@lru_cache(maxsize=4)
def _fernet_for(key: str) -> Fernet:
    # Any passphrase is stretched to the 32-byte urlsafe key Fernet expects.
    derived = base64.urlsafe_b64encode(hashlib.sha256(key.encode()).digest())
    return Fernet(derived)


def get_fernet() -> Fernet:
    key = getattr(settings, 'ENCRYPTION_KEY', None)
    if not key:
        raise ImproperlyConfigured("ENCRYPTION_KEY is not configured")
    return _fernet_for(key)


def encrypt_string(plaintext: str) -> str:
    """Return the Fernet token for ``plaintext`` ('' stays '')."""
    if not plaintext:
        return ''
    return get_fernet().encrypt(plaintext.encode()).decode()


def decrypt_string(token: str) -> str:
    """
    Decrypt a token produced by :func:`encrypt_string`.

    Raises ``InvalidToken`` when the value was written with another key or
    is not a token at all.
    """
    if not token:
        return ''
    return get_fernet().decrypt(token.encode()).decode()
