from __future__ import annotations

import pytest
from sqlalchemy.dialects import postgresql

from clash_chat.infrastructure.db.repositories.account import AccountReaderRepo, _like_pattern


class _Result:
    def scalars(self):
        return self

    def all(self):
        return []


class RecordingSession:
    """Keeps the statements it is asked to run and returns no rows."""

    def __init__(self) -> None:
        self.statements = []

    async def execute(self, stmt):
        self.statements.append(stmt)
        return _Result()


def test_plain_query_becomes_substring_pattern():
    assert _like_pattern("bob") == "%bob%"


def test_wildcards_are_matched_literally():
    assert _like_pattern("50%_off") == "%50\\%\\_off%"
    assert _like_pattern("a\\b") == "%a\\\\b%"


@pytest.mark.asyncio
async def test_search_escapes_wildcards_in_both_columns():
    session = RecordingSession()

    assert await AccountReaderRepo(session).search("a_b") == []

    [stmt] = session.statements
    compiled = stmt.compile(dialect=postgresql.dialect())
    assert str(compiled).count("ESCAPE") == 2
    assert "%a\\_b%" in compiled.params.values()
