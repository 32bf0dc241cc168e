from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Relationship:
    id: UUID
    requester_id: UUID
    recipient_id: UUID
    status: str
    created_at: datetime
    updated_at: datetime

    def involves(self, user_id: UUID) -> bool:
        return user_id in (self.requester_id, self.recipient_id)

    def counterpart(self, user_id: UUID) -> UUID:
        """Return the other side of the pair relative to ``user_id``."""
        if user_id == self.requester_id:
            return self.recipient_id
        if user_id == self.recipient_id:
            return self.requester_id
        raise ValueError(f"{user_id} is not part of relationship {self.id}")
