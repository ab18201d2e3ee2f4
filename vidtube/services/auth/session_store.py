"""
VidTube Session Store — the one place refresh tokens are persisted.

Each user has at most one live refresh token, stored on the user row.
Issuing a new one overwrites the old; presenting anything other than the
stored value is rejected, which makes every refresh token single-use.
"""
from __future__ import annotations

import hmac
import logging

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from vidtube.core.errors import UnauthorizedError
from vidtube.models.models import User
from vidtube.services.auth.token_service import TokenIssuer, TokenPair, token_issuer

logger = logging.getLogger(__name__)


class SessionStore:
    def __init__(self, issuer: TokenIssuer):
        self.issuer = issuer

    async def issue(self, db: AsyncSession, user: User) -> TokenPair:
        """Mint a fresh token pair and make its refresh token the live one."""
        pair = self.issuer.issue_pair(user)
        user.refresh_token = pair.refresh_token
        await db.commit()
        return pair

    async def rotate(self, db: AsyncSession, presented: str) -> TokenPair:
        """Trade a live refresh token for a new pair, retiring the old token."""
        claims = self.issuer.verify_refresh_token(presented)

        user_id = self.issuer.subject(claims)
        user = await db.get(User, user_id) if user_id else None
        if user is None:
            raise UnauthorizedError("Invalid refresh token")

        stored = user.refresh_token or ""
        if not hmac.compare_digest(stored.encode(), presented.encode()):
            logger.warning(f"Rejected stale refresh token for user {user.id}")
            raise UnauthorizedError("Refresh token is expired or used")

        pair = self.issuer.issue_pair(user)

        # Compare-and-swap: only the request that still sees the presented
        # token stored gets to replace it.
        result = await db.execute(
            update(User)
            .where(User.id == user.id, User.refresh_token == presented)
            .values(refresh_token=pair.refresh_token)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await db.rollback()
            logger.warning(f"Concurrent refresh lost the race for user {user.id}")
            raise UnauthorizedError("Refresh token is expired or used")

        await db.commit()
        set_committed_value(user, "refresh_token", pair.refresh_token)
        return pair

    async def revoke(self, db: AsyncSession, user: User) -> None:
        user.refresh_token = None
        await db.commit()


session_store = SessionStore(token_issuer)
