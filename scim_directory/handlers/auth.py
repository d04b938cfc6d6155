"""
Bearer token authentication handler for SCIM Directory.

This module provides the FastAPI dependency that resolves the caller's bearer
token to the organisation (tenant) it belongs to.
"""

import logging
from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..errors import AuthenticationError, InternalError
from ..services.user_store import DirectoryStore, RecordNotFound, StoreError

logger = logging.getLogger(__name__)

# Missing or non-bearer headers are turned into AuthenticationError below
security = HTTPBearer(auto_error=False)


def get_store(request: Request) -> DirectoryStore:
    """Return the store the application was built with."""
    return request.app.state.store


def resolve_organisation_id(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    store: Annotated[DirectoryStore, Depends(get_store)],
) -> str:
    """
    Resolve the bearer token of a SCIM request to its organisation id.

    Used as a router-level dependency on every SCIM route, and as a parameter
    dependency where the route needs the tenant. FastAPI caches it per request,
    so the token is looked up once.

    Args:
        credentials: HTTP Authorization credentials extracted by FastAPI
        store: Directory store holding organisation tokens

    Returns:
        str: Id of the organisation the token is bound to

    Raises:
        AuthenticationError: Header missing, not "Bearer <token>", or token unknown
        InternalError: The token lookup failed

    Example:
        @router.get("/Users")
        def list_users(organisation_id: Annotated[str, Depends(resolve_organisation_id)]):
            ...
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("bearer token missing")

    try:
        token = store.get_organisation_token_by_token(credentials.credentials)
    except RecordNotFound as e:
        logger.info("Bearer token not found")
        raise AuthenticationError("invalid bearer token") from e
    except StoreError as e:
        logger.error(f"Token lookup failed: {e}")
        raise InternalError("token lookup failed") from e

    return token.organisation_id
