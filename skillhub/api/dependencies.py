from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from skillhub.db.engine import async_session_factory, get_async_session
from skillhub.models.principal import Principal
from skillhub.repos.store import InMemoryStore, PgStore, Store
from skillhub.services import token_service

logger = logging.getLogger(__name__)

# Tokens are issued by the identity provider; tokenUrl only feeds the docs UI.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/oauth/token")

# Process-wide store used when DATABASE_URL is not configured.
memory_store = InMemoryStore()


def require_principal(
    raw_token: Annotated[str, Depends(oauth2_scheme)],
) -> Principal:
    """Extract and validate the JWT bearer token. Returns a Principal.

    Used as a FastAPI dependency on any protected endpoint.
    """
    try:
        claims = token_service.decode_access_token(raw_token)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    principal = Principal(
        user_id=claims["sub"],
        name=claims.get("name", ""),
        email=claims.get("email", ""),
        avatar_url=claims.get("picture", ""),
        roles=frozenset(claims.get("roles", [])),
    )
    logger.debug(
        "Token validated for user=%s roles=%s",
        principal.user_id,
        principal.roles,
    )
    return principal


async def get_store() -> AsyncGenerator[Store, None]:
    """Request-scoped Store.

    With a database, every request gets its own session; service
    transactions run as savepoints and the session commits (or rolls
    back) when the request finishes.  Without one, the shared in-memory
    store is returned.
    """
    if async_session_factory is None:
        yield memory_store
        return

    async with asynccontextmanager(get_async_session)() as session:
        yield PgStore(session)
