"""
VidTube Password Hasher — salted bcrypt hashing via passlib.

Digests are self-describing (``$2b$<cost>$<salt><hash>``), so verification
needs nothing but the stored string.
"""
from __future__ import annotations

from passlib.context import CryptContext

from vidtube.core.config import get_settings

settings = get_settings()

# bcrypt only ever reads this many bytes of the secret.
MAX_PASSWORD_BYTES = 72


def password_too_long(plaintext: str) -> bool:
    return len(plaintext.encode("utf-8")) > MAX_PASSWORD_BYTES


class PasswordHasher:
    """One-way, salted, deliberately slow password hashing."""

    def __init__(self, rounds: int = 10):
        self._context = CryptContext(
            schemes=["bcrypt"], deprecated="auto",
            bcrypt__rounds=rounds, bcrypt__truncate_error=True,
        )

    def hash(self, plaintext: str) -> str:
        """Raises ``ValueError`` for secrets longer than ``MAX_PASSWORD_BYTES``."""
        return self._context.hash(plaintext)

    def verify(self, plaintext: str, digest: str) -> bool:
        """Constant-time check; raises ``ValueError`` for a malformed digest."""
        if not self._context.identify(digest):
            raise ValueError("hash could not be identified")
        if password_too_long(plaintext):
            return False
        return self._context.verify(plaintext, digest)


password_hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
