"""Request context carrying the acting user's identity."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class RequestContext:
    """Identity of the operator performing a request.

    Every version and history write records `user_id` as its author.
    """

    user_id: UUID
