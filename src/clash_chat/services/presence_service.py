from __future__ import annotations

import uuid
from datetime import datetime

from clash_chat.application.uow import UnitOfWork
from clash_chat.domain.value_objects.enums import PresenceStatus


async def go_online(user_id: uuid.UUID, uow: UnitOfWork) -> list[uuid.UUID]:
    """Persist ``online`` and return the ids of the user's accepted friends."""
    await uow.accounts_w.set_presence(user_id, PresenceStatus.ONLINE)
    relationships = await uow.relationships.list_accepted(user_id)
    await uow.commit()
    return [r.counterpart(user_id) for r in relationships]


async def go_offline(user_id: uuid.UUID, last_seen: datetime, uow: UnitOfWork) -> None:
    await uow.accounts_w.set_presence(user_id, PresenceStatus.OFFLINE, last_seen)
    await uow.commit()
