"""Input checks shared by services and repositories.

Each check raises ValidationFailure naming the offending field, before any
write happens.
"""

from uuid import UUID

from tripbuilder.app.db.context import RequestContext
from tripbuilder.app.errors import ValidationFailure


def require_text(value: str | None, field: str) -> str:
    """Return the stripped value or raise if it is missing or blank."""
    if value is None or not value.strip():
        raise ValidationFailure(field, f"{field} must not be empty")
    return value.strip()


def require_actor(ctx: RequestContext | None) -> UUID:
    """Return the acting user's id or raise if identity is missing."""
    if ctx is None or ctx.user_id is None:
        raise ValidationFailure("actor_id", "an authenticated user is required")
    return ctx.user_id
