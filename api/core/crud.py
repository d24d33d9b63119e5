"""
Generic table access (raw SQL).

A `Table` describes one entity table: its name, primary key and the mutable
columns in a fixed order. The functions below build parameterized statements
from that description. Identifiers only ever come from a `Table` defined in
code and are quoted; values are always bound as $n parameters.

Rows travel as plain dicts keyed by column name.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

from .db import CONSTRAINT_ERRORS, Database
from .errors import BulkUploadError
from .pagination import PageRequest

LIKE_ESCAPE = "\\"


def quote_ident(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


@dataclass(frozen=True)
class Table:
    name: str
    columns: tuple[str, ...]
    primary_key: str = "id"

    @property
    def qualified(self) -> str:
        return quote_ident(self.name)

    @property
    def pk(self) -> str:
        return quote_ident(self.primary_key)

    @property
    def select_list(self) -> str:
        return ", ".join(quote_ident(c) for c in (self.primary_key, *self.columns))

    def values_for(self, values: Mapping[str, Any]) -> list[Any]:
        """
        Column values in table order. Missing columns bind as NULL.
        """
        unknown = set(values) - set(self.columns) - {self.primary_key}
        if unknown:
            raise ValueError(f"Unknown columns for {self.name}: {sorted(unknown)}")
        return [values.get(c) for c in self.columns]


def like_pattern(term: str) -> str:
    """
    Wrap `term` for a literal substring match with `LIKE ... ESCAPE '\\'`.
    """
    escaped = (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def ilike_any(columns: Iterable[str], placeholder: str = "$1") -> str:
    """
    `(a ILIKE $1 ESCAPE '\\' OR b ILIKE $1 ESCAPE '\\' ...)` over the given columns.
    """
    parts = [f"{quote_ident(c)} ILIKE {placeholder} ESCAPE '{LIKE_ESCAPE}'" for c in columns]
    if not parts:
        raise ValueError("ilike_any needs at least one column.")
    return "(" + " OR ".join(parts) + ")"


def insert_sql(table: Table) -> str:
    cols = ", ".join(quote_ident(c) for c in table.columns)
    placeholders = ", ".join(f"${i}" for i in range(1, len(table.columns) + 1))
    return (
        f"INSERT INTO {table.qualified} ({cols}) "
        f"VALUES ({placeholders}) "
        f"RETURNING {table.select_list}"
    )


def update_sql(table: Table) -> str:
    assignments = ", ".join(
        f"{quote_ident(c)} = ${i}" for i, c in enumerate(table.columns, start=2)
    )
    return (
        f"UPDATE {table.qualified} SET {assignments} "
        f"WHERE {table.pk} = $1 "
        f"RETURNING {table.select_list}"
    )


def select_sql(table: Table, *, where: str = "") -> str:
    sql = f"SELECT {table.select_list} FROM {table.qualified}"
    if where:
        sql += f" WHERE {where}"
    return sql + f" ORDER BY {table.pk} ASC"


def count_sql(table: Table) -> str:
    return f"SELECT count(*) FROM {table.qualified}"


async def get_all(db: Database, table: Table) -> list[dict[str, Any]]:
    return await db.fetch_all(select_sql(table))


async def find_where(db: Database, table: Table, where: str, *args: Any) -> list[dict[str, Any]]:
    """
    Rows matching a WHERE fragment built from placeholders only, by primary key.
    """
    return await db.fetch_all(select_sql(table, where=where), *args)


async def get_by_id(db: Database, table: Table, row_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(select_sql(table, where=f"{table.pk} = $1"), row_id)


async def insert(db: Database, table: Table, values: Mapping[str, Any]) -> dict[str, Any]:
    """
    Insert one row and return it including the generated primary key.
    """
    row = await db.fetch_one(insert_sql(table), *table.values_for(values))
    if row is None:
        raise RuntimeError(f"Failed to insert into {table.name}.")
    return row


async def insert_many(
    db: Database,
    table: Table,
    rows: Sequence[Mapping[str, Any]],
) -> list[dict[str, Any]]:
    """
    Insert rows in one transaction: all are stored or none are.

    A rejected row raises `BulkUploadError` carrying its position.
    """
    if not rows:
        return []

    sql = insert_sql(table)
    params = [table.values_for(values) for values in rows]
    inserted: list[dict[str, Any]] = []
    async with db.transaction() as conn:
        for index, args in enumerate(params):
            try:
                record = await conn.fetchrow(sql, *args)
            except CONSTRAINT_ERRORS as exc:
                raise BulkUploadError(f"Item {index} rejected: {exc}", index=index) from exc
            inserted.append(dict(record))
    return inserted


async def update(
    db: Database,
    table: Table,
    row_id: int,
    values: Mapping[str, Any],
) -> dict[str, Any] | None:
    """
    Replace every mutable column of one row. None means no row matched.
    """
    return await db.fetch_one(update_sql(table), row_id, *table.values_for(values))


async def delete(db: Database, table: Table, row_id: int) -> bool:
    row = await db.fetch_one(
        f"DELETE FROM {table.qualified} WHERE {table.pk} = $1 RETURNING {table.pk}",
        row_id,
    )
    return row is not None


async def delete_all(db: Database, table: Table) -> int:
    removed = await db.fetch_val(
        f"WITH removed AS (DELETE FROM {table.qualified} RETURNING 1) "
        f"SELECT count(*) FROM removed"
    )
    return int(removed or 0)


async def get_page(
    db: Database,
    table: Table,
    request: PageRequest,
) -> tuple[list[dict[str, Any]], int]:
    """
    Return (rows for one page, total rows in the table).

    Count and slice are read from one snapshot so they agree with each other.
    """
    page_sql = select_sql(table) + " LIMIT $1 OFFSET $2"
    async with db.transaction(isolation="repeatable_read", readonly=True) as conn:
        total = await conn.fetchval(count_sql(table))
        records = await conn.fetch(page_sql, request.limit, request.offset)
    return [dict(r) for r in records], int(total or 0)
