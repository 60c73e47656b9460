"""Bearer identity dependency.

Stub implementation that reads the acting user's id from a
"Bearer <user_id>" header. Every write records this id as its author.
"""

import uuid
from typing import Annotated

from fastapi import Header, HTTPException, status

from tripbuilder.app.db.context import RequestContext


def get_current_context(
    authorization: Annotated[str | None, Header()] = None,
) -> RequestContext:
    """Extract request context from authorization header.

    Args:
        authorization: Authorization header (e.g., "Bearer <user_id>")

    Returns:
        RequestContext with user_id

    Raises:
        HTTPException: 401 if the header is missing or malformed
    """
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization[7:].strip()  # Strip "Bearer "

    try:
        return RequestContext(user_id=uuid.UUID(token))
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token format (expected user_id)",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
