"""
VidTube Token Issuer — signed, time-limited JWTs for sessions.

Access tokens are short-lived and carry enough identity for the identity
gate; refresh tokens are long-lived, carry only the user id, and are signed
with a different secret so one can never be passed off as the other.
Every token gets a random ``jti`` so two tokens minted in the same second
for the same user still differ.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from vidtube.core.config import get_settings
from vidtube.core.errors import UnauthorizedError

settings = get_settings()


class InvalidTokenError(UnauthorizedError):
    default_message = "Invalid token"


class ExpiredTokenError(UnauthorizedError):
    default_message = "Token has expired"


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenIssuer:
    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_ttl: timedelta,
        refresh_ttl: timedelta,
        algorithm: str = "HS256",
    ):
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.algorithm = algorithm

    # ── Issuing ──────────────────────────────────────────────────────────

    def _sign(self, claims: Dict[str, Any], secret: str, ttl: timedelta) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            **claims,
            "iat": now,
            "exp": now + ttl,
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def issue_access_token(self, user) -> str:
        role = user.role.value if hasattr(user.role, "value") else str(user.role)
        return self._sign(
            {
                "id": str(user.id),
                "role": role,
                "username": user.username,
                "email": user.email,
            },
            self.access_secret,
            self.access_ttl,
        )

    def issue_refresh_token(self, user) -> str:
        return self._sign({"id": str(user.id)}, self.refresh_secret, self.refresh_ttl)

    def issue_pair(self, user) -> TokenPair:
        return TokenPair(
            access_token=self.issue_access_token(user),
            refresh_token=self.issue_refresh_token(user),
        )

    # ── Verification ─────────────────────────────────────────────────────

    def verify(self, token: str, secret: str) -> Dict[str, Any]:
        """Decode ``token`` and return its claims.

        Raises ``ExpiredTokenError`` when the signature is good but ``exp``
        has passed, ``InvalidTokenError`` for anything else.
        """
        try:
            claims = jwt.decode(
                token, secret, algorithms=[self.algorithm],
                options={"require": ["exp", "id"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise ExpiredTokenError("jwt expired") from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenError(f"Invalid token: {exc}") from exc
        return claims

    def verify_access_token(self, token: str) -> Dict[str, Any]:
        return self.verify(token, self.access_secret)

    def verify_refresh_token(self, token: str) -> Dict[str, Any]:
        return self.verify(token, self.refresh_secret)

    @staticmethod
    def subject(claims: Dict[str, Any]) -> Optional[uuid.UUID]:
        """User id embedded in ``claims``, or None if it is not a UUID."""
        try:
            return uuid.UUID(str(claims.get("id")))
        except ValueError:
            return None


token_issuer = TokenIssuer(
    access_secret=settings.access_token_secret,
    refresh_secret=settings.refresh_token_secret,
    access_ttl=timedelta(minutes=settings.access_token_expire_minutes),
    refresh_ttl=timedelta(days=settings.refresh_token_expire_days),
    algorithm=settings.jwt_algorithm,
)
