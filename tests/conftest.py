"""
Shared fixtures: a recording fake `Database`, an in-memory contact store
that stands in for `contacts.repository`, and a TestClient wired to both.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import pytest
from fastapi.testclient import TestClient

from contacts import repository
from core.config import AppConfig, AuthConfig, DatabaseConfig
from core.pagination import PageRequest
from main import create_app


class FakeConnection:
    def __init__(self, db: "FakeDatabase") -> None:
        self.db = db

    async def fetchrow(self, sql: str, *args: Any):
        return self.db._next("fetchrow", sql, args)

    async def fetch(self, sql: str, *args: Any):
        return self.db._next("fetch", sql, args) or []

    async def fetchval(self, sql: str, *args: Any):
        return self.db._next("fetchval", sql, args)


class FakeDatabase:
    """
    Records every statement and answers from a queue of canned results.

    A queued exception instance is raised instead of returned.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, tuple]] = []
        self.results: list[Any] = []
        self.transactions: list[dict[str, Any]] = []
        self.opened = False
        self.closed = False

    def queue(self, *results: Any) -> None:
        self.results.extend(results)

    def _next(self, kind: str, sql: str, args: tuple) -> Any:
        self.calls.append((kind, sql, args))
        result = self.results.pop(0) if self.results else None
        if isinstance(result, BaseException):
            raise result
        return result

    async def open(self) -> None:
        self.opened = True

    async def close(self) -> None:
        self.closed = True

    @asynccontextmanager
    async def transaction(self, *, isolation: str | None = None, readonly: bool = False):
        record = {"isolation": isolation, "readonly": readonly, "committed": False}
        self.transactions.append(record)
        yield FakeConnection(self)
        record["committed"] = True

    async def fetch_one(self, sql: str, *args: Any):
        return self._next("fetch_one", sql, args)

    async def fetch_all(self, sql: str, *args: Any):
        return self._next("fetch_all", sql, args) or []

    async def fetch_val(self, sql: str, *args: Any):
        return self._next("fetch_val", sql, args)

    async def execute(self, sql: str, *args: Any):
        return self._next("execute", sql, args)

    async def ping(self) -> bool:
        return (await self.fetch_val("SELECT 1")) == 1


class InMemoryContacts:
    """
    Dict-backed replacement for the functions in `contacts.repository`.
    """

    def __init__(self) -> None:
        self.rows: dict[int, dict[str, Any]] = {}
        self.next_id = 1

    def _ordered(self) -> list[dict[str, Any]]:
        return [dict(self.rows[k]) for k in sorted(self.rows)]

    def _store(self, values: dict[str, Any]) -> dict[str, Any]:
        row = {"id": self.next_id, **{c: values.get(c) for c in repository.CONTACT_TABLE.columns}}
        self.rows[self.next_id] = row
        self.next_id += 1
        return dict(row)

    async def list_contacts(self, db):
        return self._ordered()

    async def get_contact(self, db, contact_id):
        row = self.rows.get(contact_id)
        return dict(row) if row else None

    async def insert_contact(self, db, values):
        return self._store(values)

    async def update_contact(self, db, contact_id, values):
        if contact_id not in self.rows:
            return None
        self.rows[contact_id].update({c: values.get(c) for c in repository.CONTACT_TABLE.columns})
        return dict(self.rows[contact_id])

    async def delete_contact(self, db, contact_id):
        return self.rows.pop(contact_id, None) is not None

    async def delete_all_contacts(self, db):
        removed = len(self.rows)
        self.rows.clear()
        return removed

    def _matches(self, row, columns, term):
        term = term.lower()
        return any(term in str(row.get(c) or "").lower() for c in columns)

    async def search_by_name(self, db, name):
        return [r for r in self._ordered() if self._matches(r, ("name",), name)]

    async def search_all(self, db, query):
        return [
            r for r in self._ordered() if self._matches(r, repository.SEARCHABLE_COLUMNS, query)
        ]

    async def get_paginated(self, db, request: PageRequest):
        rows = self._ordered()
        return rows[request.offset : request.offset + request.limit], len(rows)

    async def bulk_insert_contacts(self, db, rows):
        return [self._store(values) for values in rows]


def make_config(**overrides) -> AppConfig:
    defaults = {
        "database": DatabaseConfig(dsn="postgresql://test@localhost:5432/test", sslmode="disable"),
        "auth": AuthConfig(),
        "max_page_size": 50,
        "max_bulk_upload": 5,
    }
    defaults.update(overrides)
    return AppConfig(**defaults)


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def store(monkeypatch) -> InMemoryContacts:
    memory = InMemoryContacts()
    for name in (
        "list_contacts",
        "get_contact",
        "insert_contact",
        "update_contact",
        "delete_contact",
        "delete_all_contacts",
        "search_by_name",
        "search_all",
        "get_paginated",
        "bulk_insert_contacts",
    ):
        monkeypatch.setattr(repository, name, getattr(memory, name))
    return memory


@pytest.fixture
def client(store, fake_db):
    app = create_app(make_config(), db=fake_db)
    with TestClient(app) as test_client:
        yield test_client


ALICE = {
    "name": "Alice",
    "gender": "Female",
    "birthday": "1990-01-01",
    "address": "1 Main St",
    "contactNum": "555-0001",
}
