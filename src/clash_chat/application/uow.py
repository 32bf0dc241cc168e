from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Callable, Protocol

from clash_chat.application.repositories.account import AccountReader, AccountWriter
from clash_chat.application.repositories.message import MessageReader, MessageWriter
from clash_chat.application.repositories.relationship import (
    RelationshipReader,
    RelationshipWriter,
)


class UnitOfWork(Protocol):
    accounts: AccountReader
    accounts_w: AccountWriter
    relationships: RelationshipReader
    relationships_w: RelationshipWriter
    messages: MessageReader
    messages_w: MessageWriter

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
    async def flush(self) -> None: ...


# Opens a fresh unit of work per operation; used by long-lived WS handlers.
UnitOfWorkFactory = Callable[[], AbstractAsyncContextManager[UnitOfWork]]
