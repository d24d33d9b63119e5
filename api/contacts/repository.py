"""
Contact persistence (raw SQL).

Plain CRUD goes through the generic helpers in `core.crud`; this module adds
the contact-specific queries: name search, cross-field search, pagination and
bulk insert.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from core import crud
from core.db import Database
from core.pagination import PageRequest

CONTACT_TABLE = crud.Table(
    name="contact",
    columns=("name", "gender", "birthday", "address", "contact_num"),
)

# Text columns searched by `search_all`. Birthday is a date and is left out.
SEARCHABLE_COLUMNS = ("name", "gender", "address", "contact_num")

# `id` is a serial (int4) column.
MIN_CONTACT_ID = 1
MAX_CONTACT_ID = 2**31 - 1


def is_valid_id(contact_id: int) -> bool:
    return MIN_CONTACT_ID <= contact_id <= MAX_CONTACT_ID


async def list_contacts(db: Database) -> list[dict[str, Any]]:
    return await crud.get_all(db, CONTACT_TABLE)


async def get_contact(db: Database, contact_id: int) -> dict[str, Any] | None:
    return await crud.get_by_id(db, CONTACT_TABLE, contact_id)


async def insert_contact(db: Database, values: Mapping[str, Any]) -> dict[str, Any]:
    return await crud.insert(db, CONTACT_TABLE, values)


async def update_contact(
    db: Database,
    contact_id: int,
    values: Mapping[str, Any],
) -> dict[str, Any] | None:
    return await crud.update(db, CONTACT_TABLE, contact_id, values)


async def delete_contact(db: Database, contact_id: int) -> bool:
    return await crud.delete(db, CONTACT_TABLE, contact_id)


async def delete_all_contacts(db: Database) -> int:
    return await crud.delete_all(db, CONTACT_TABLE)


async def search_by_name(db: Database, name: str) -> list[dict[str, Any]]:
    """
    Case-insensitive substring match on `name` only.
    """
    return await crud.find_where(
        db,
        CONTACT_TABLE,
        crud.ilike_any(("name",)),
        crud.like_pattern(name),
    )


async def search_all(db: Database, query: str) -> list[dict[str, Any]]:
    """
    Case-insensitive substring match on any text column (OR-combined).
    """
    return await crud.find_where(
        db,
        CONTACT_TABLE,
        crud.ilike_any(SEARCHABLE_COLUMNS),
        crud.like_pattern(query),
    )


async def get_paginated(
    db: Database,
    request: PageRequest,
) -> tuple[list[dict[str, Any]], int]:
    return await crud.get_page(db, CONTACT_TABLE, request)


async def bulk_insert_contacts(
    db: Database,
    rows: Sequence[Mapping[str, Any]],
) -> list[dict[str, Any]]:
    return await crud.insert_many(db, CONTACT_TABLE, rows)
