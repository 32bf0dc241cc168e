"""Import all models so every table is registered on Base.metadata."""
from clash_chat.infrastructure.db.models.account import AccountModel
from clash_chat.infrastructure.db.models.message import MessageModel
from clash_chat.infrastructure.db.models.relationship import RelationshipModel

__all__ = [
    "AccountModel",
    "MessageModel",
    "RelationshipModel",
]
