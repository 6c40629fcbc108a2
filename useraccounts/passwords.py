"""Password hashing with bcrypt."""

import bcrypt

from . import logging
from .exceptions import ValidationFailed

logger = logging.getLogger(__name__)

MAX_PASSWORD_BYTES = 72
"""bcrypt ignores everything past this many bytes, so we refuse it."""


class PasswordHasher:
    """Hashes and verifies passwords with a fixed bcrypt work factor."""

    def __init__(self, rounds: int = 10) -> None:
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """
        Generate a salted bcrypt hash of ``password``.

        Raises
        ------
        :class:`.ValidationFailed`
            If the password is empty or longer than 72 bytes.

        """
        encoded = _encode(password)
        hashed: bytes = bcrypt.hashpw(encoded, bcrypt.gensalt(self.rounds))
        return hashed.decode('ascii')

    def verify(self, password: str, hashed: str) -> bool:
        """Check a password against a hash. Malformed input never matches."""
        if not password or not hashed:
            return False
        try:
            return bool(bcrypt.checkpw(password.encode('utf-8'),
                                       hashed.encode('ascii')))
        except ValueError as e:
            logger.debug('Could not check password: %s', e)
            return False


def _encode(password: str) -> bytes:
    if not password:
        raise ValidationFailed('Password must not be empty')
    encoded = password.encode('utf-8')
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValidationFailed('Password is too long')
    return encoded
