import logging
from typing import AsyncIterator

from fastapi import Header
from sqlalchemy.ext.asyncio import AsyncSession

import config
from db import get_db_session
from exceptions.base import UnauthorizedException
from utils.identity import IdentityValidationError, extract_bearer_token, validate_identity_token

logger = logging.getLogger(__name__)


async def get_session() -> AsyncIterator[AsyncSession]:
    async with get_db_session() as session:
        yield session


async def get_current_user_id(authorization: str | None = Header(default=None)) -> str:
    """
    Resolve the caller from an 'Authorization: Bearer <token>' header.

    Raises:
        UnauthorizedException: Header missing or token invalid
    """
    token = extract_bearer_token(authorization)
    if token is None:
        raise UnauthorizedException("Missing bearer token")
    try:
        return validate_identity_token(token, config.AUTH_SECRET, config.AUTH_TOKEN_MAX_AGE_SECONDS)
    except IdentityValidationError as e:
        logger.warning(f"Identity validation failed: {e}")
        raise UnauthorizedException(str(e))
