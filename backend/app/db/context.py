"""Request context for ownership enforcement."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class RequestContext:
    """Request context containing the caller's identity.

    Every plan belongs to exactly one user; services compare the plan owner
    against `user_id` before reading or mutating it.
    """

    user_id: UUID
