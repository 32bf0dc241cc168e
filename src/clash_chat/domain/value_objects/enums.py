from __future__ import annotations

from enum import StrEnum


class PresenceStatus(StrEnum):
    ONLINE = "online"
    OFFLINE = "offline"
    AWAY = "away"


class RelationshipStatus(StrEnum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class MessageType(StrEnum):
    TEXT = "text"
    IMAGE = "image"
    FILE = "file"


class DeliveryStatus(StrEnum):
    """Per-message receipt progress. Only ever moves forward."""

    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"

    @property
    def rank(self) -> int:
        return _DELIVERY_ORDER.index(self)

    def lower(self) -> list[DeliveryStatus]:
        """Statuses that may legally transition into this one."""
        return list(_DELIVERY_ORDER[: self.rank])


_DELIVERY_ORDER = (DeliveryStatus.SENT, DeliveryStatus.DELIVERED, DeliveryStatus.READ)


class FriendshipStatus(StrEnum):
    """Relationship as seen from one side, used to annotate user listings."""

    SELF = "self"
    FRIENDS = "friends"
    REQUEST_SENT = "request_sent"
    REQUEST_RECEIVED = "request_received"
    REJECTED = "rejected"
    NONE = "none"
