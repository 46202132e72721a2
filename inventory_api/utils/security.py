import logging
from functools import lru_cache

import bcrypt

from inventory_api.config import get_settings

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """One-way password hashing with bcrypt."""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def _encode(self, password: str) -> bytes:
        return password.encode("utf-8")[:BCRYPT_MAX_BYTES]

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(self._encode(password), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(self._encode(password), password_hash.encode("utf-8"))
        except ValueError as e:
            logger.error(f"Password verification error: {e}")
            return False


@lru_cache
def get_password_hasher() -> PasswordHasher:
    """Dependency providing the configured password hasher."""
    return PasswordHasher(rounds=get_settings().BCRYPT_ROUNDS)
