"""
Caller identity forwarded by the upstream authentication gateway.

Authentication happens before requests reach this service. The gateway passes
the verified user as ``X-User-Id``, ``X-User-Role`` and ``X-User-Email`` headers;
requests without them are treated as anonymous guests.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ActorRole(str, Enum):
    CLIENT = "client"
    PROPERTY_OWNER = "property_owner"
    ADMIN = "admin"


@dataclass(frozen=True)
class Actor:
    user_id: int | None
    role: ActorRole
    email: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == ActorRole.ADMIN

    @property
    def is_anonymous(self) -> bool:
        return self.user_id is None

    def owns(self, owner_id: int | None) -> bool:
        """True if this actor is the given owner (admins own everything)."""
        return self.is_admin or (self.user_id is not None and self.user_id == owner_id)


ANONYMOUS = Actor(user_id=None, role=ActorRole.CLIENT)
