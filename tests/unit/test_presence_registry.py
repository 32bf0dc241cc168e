from __future__ import annotations

import uuid

from clash_chat.infrastructure.ws.registry import PresenceRegistry
from tests.conftest import FakeConnection


def test_set_and_get():
    registry = PresenceRegistry()
    user_id = uuid.uuid4()
    conn = FakeConnection()

    registry.set(user_id, conn)

    assert registry.get(user_id) is conn
    assert registry.is_online(user_id)
    assert len(registry) == 1


def test_get_unknown_user_returns_none():
    registry = PresenceRegistry()
    assert registry.get(uuid.uuid4()) is None


def test_second_connection_replaces_first():
    registry = PresenceRegistry()
    user_id = uuid.uuid4()
    first, second = FakeConnection(), FakeConnection()

    registry.set(user_id, first)
    registry.set(user_id, second)

    assert registry.get(user_id) is second
    assert len(registry) == 1


def test_set_returns_replaced_connection():
    registry = PresenceRegistry()
    user_id = uuid.uuid4()
    first, second = FakeConnection(), FakeConnection()

    assert registry.set(user_id, first) is None
    assert registry.set(user_id, second) is first


def test_delete_current_connection():
    registry = PresenceRegistry()
    user_id = uuid.uuid4()
    conn = FakeConnection()
    registry.set(user_id, conn)

    assert registry.delete(user_id, conn) is True
    assert registry.get(user_id) is None
    assert not registry.is_online(user_id)


def test_delete_stale_connection_keeps_newer_entry():
    registry = PresenceRegistry()
    user_id = uuid.uuid4()
    stale, current = FakeConnection(), FakeConnection()
    registry.set(user_id, stale)
    registry.set(user_id, current)

    assert registry.delete(user_id, stale) is False
    assert registry.get(user_id) is current


def test_delete_unknown_user_is_noop():
    registry = PresenceRegistry()
    assert registry.delete(uuid.uuid4(), FakeConnection()) is False
    assert len(registry) == 0
