from __future__ import annotations

from clash_chat.domain.entities.account import Account
from clash_chat.infrastructure.db.models.account import AccountModel


def model_to_entity(model: AccountModel) -> Account:
    return Account(
        id=model.id,
        username=model.username,
        email=model.email,
        avatar=model.avatar,
        status=model.status,
        last_seen=model.last_seen,
        created_at=model.created_at,
    )
