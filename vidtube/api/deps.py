"""
VidTube API dependencies — the identity gate for protected routes.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import Depends, Request
from starlette.datastructures import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.config import get_settings
from vidtube.core.database import get_db
from vidtube.core.errors import ApiError, UnauthorizedError
from vidtube.models.models import User
from vidtube.services.auth.token_service import token_issuer
from vidtube.services.media.media_store import IncomingFile

logger = logging.getLogger(__name__)
settings = get_settings()


def _bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization") or ""
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return None


async def get_current_user(request: Request, db: AsyncSession = Depends(get_db)) -> User:
    """Resolve the caller from the ``accessToken`` cookie or a Bearer header.

    Every failure, whatever its cause, surfaces as 401 ``Unauthorized: <reason>``.
    """
    try:
        token = request.cookies.get(settings.access_cookie_name) or _bearer_token(request)
        if not token:
            raise UnauthorizedError("No token provided")

        claims = token_issuer.verify_access_token(token)
        user_id = token_issuer.subject(claims)
        user = await db.get(User, user_id) if user_id else None
        if user is None:
            raise UnauthorizedError("User not found")
    except Exception as exc:
        reason = exc.message if isinstance(exc, ApiError) else str(exc)
        logger.debug(f"Identity gate rejected {request.method} {request.url.path}: {reason}")
        raise UnauthorizedError(f"Unauthorized: {reason or 'Invalid access token'}") from exc

    request.state.user = user
    return user


async def read_upload(value) -> Optional[IncomingFile]:
    """Turn a multipart form value into an ``IncomingFile`` (None if not a non-empty file)."""
    if not isinstance(value, UploadFile) or not value.filename:
        return None
    data = await value.read()
    if not data:
        return None
    return IncomingFile(filename=value.filename, content_type=value.content_type, data=data)


def describe_form(form) -> tuple[List[str], List[str]]:
    """Split multipart field names into (file fields, plain body fields)."""
    files, fields = [], []
    for key, value in form.multi_items():
        (files if isinstance(value, UploadFile) else fields).append(key)
    return sorted(set(files)), sorted(set(fields))
