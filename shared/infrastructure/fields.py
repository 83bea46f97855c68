"""
Model fields for sensitive data.
"""

import logging

from django.db import models  # type: ignore

from .encryption import InvalidToken, decrypt_string, encrypt_string

logger = logging.getLogger(__name__)


class EncryptedTextField(models.TextField):
    """
    Text column stored as a Fernet token and decrypted on load.

    Lookups other than ``isnull`` are meaningless on the ciphertext, so the
    field is never used for filtering.
    """

    description = "Encrypted text"

    def from_db_value(self, value, expression, connection):
        if value is None or value == '':
            return value
        try:
            return decrypt_string(value)
        except InvalidToken:
            logger.warning(
                "Could not decrypt %s.%s, the encryption key probably changed",
                self.model.__name__, self.name,
            )
            return ''

    def get_prep_value(self, value):
        value = super().get_prep_value(value)
        if value is None or value == '':
            return value
        return encrypt_string(value)
