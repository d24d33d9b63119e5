"""
Contact business logic.

Maps repository rows onto response models and turns data-level outcomes
(no row, rejected values) into HTTP errors. Database failures other than
constraint violations propagate as `DataAccessError` and become a 500 in
`main.py`.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from fastapi import HTTPException, status

from core.db import Database
from core.errors import BulkUploadError, ConstraintViolationError
from core.pagination import Page, PageRequest

from . import repository, schemas

logger = logging.getLogger(__name__)


def _to_contact_response(row: dict[str, Any]) -> schemas.ContactResponse:
    return schemas.ContactResponse(
        id=int(row["id"]),
        name=str(row["name"]),
        gender=row.get("gender"),
        birthday=row.get("birthday"),
        address=row.get("address"),
        contact_num=row.get("contact_num"),
    )


def _to_values(payload: schemas.ContactCreate) -> dict[str, Any]:
    return payload.model_dump(include=set(repository.CONTACT_TABLE.columns))


def _not_found(contact_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Contact {contact_id} not found.",
    )


def _search_term(raw: str, *, field: str) -> str:
    term = raw or ""
    if not term.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{field} is required.",
        )
    return term


async def list_contacts(db: Database) -> list[schemas.ContactResponse]:
    rows = await repository.list_contacts(db)
    return [_to_contact_response(row) for row in rows]


async def get_contact(db: Database, contact_id: int) -> schemas.ContactResponse:
    if not repository.is_valid_id(contact_id):
        raise _not_found(contact_id)
    row = await repository.get_contact(db, contact_id)
    if row is None:
        raise _not_found(contact_id)
    return _to_contact_response(row)


async def create_contact(db: Database, payload: schemas.ContactCreate) -> schemas.ContactResponse:
    try:
        row = await repository.insert_contact(db, _to_values(payload))
    except ConstraintViolationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    logger.info("contact_created id=%s", row["id"])
    return _to_contact_response(row)


async def update_contact(
    db: Database,
    contact_id: int,
    payload: schemas.ContactCreate,
) -> schemas.ContactResponse:
    if not repository.is_valid_id(contact_id):
        raise _not_found(contact_id)
    try:
        row = await repository.update_contact(db, contact_id, _to_values(payload))
    except ConstraintViolationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    if row is None:
        raise _not_found(contact_id)
    return _to_contact_response(row)


async def delete_contact(db: Database, contact_id: int) -> schemas.DeleteResponse:
    if not repository.is_valid_id(contact_id):
        raise _not_found(contact_id)
    if not await repository.delete_contact(db, contact_id):
        raise _not_found(contact_id)
    logger.info("contact_deleted id=%s", contact_id)
    return schemas.DeleteResponse(deleted=True, id=contact_id)


async def delete_all_contacts(db: Database) -> schemas.DeleteAllResponse:
    removed = await repository.delete_all_contacts(db)
    logger.info("contacts_deleted_all count=%s", removed)
    return schemas.DeleteAllResponse(deleted=removed)


async def search_by_name(db: Database, name: str) -> list[schemas.ContactResponse]:
    rows = await repository.search_by_name(db, _search_term(name, field="name"))
    return [_to_contact_response(row) for row in rows]


async def search_all(db: Database, query: str) -> list[schemas.ContactResponse]:
    rows = await repository.search_all(db, _search_term(query, field="query"))
    return [_to_contact_response(row) for row in rows]


async def get_paginated(
    db: Database,
    *,
    page_number: int,
    page_size: int,
    max_page_size: int,
) -> Page[schemas.ContactResponse]:
    if page_size > max_page_size:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"pageSize must be <= {max_page_size}.",
        )
    try:
        request = PageRequest(page_number=page_number, page_size=page_size)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    rows, total_count = await repository.get_paginated(db, request)
    return Page[schemas.ContactResponse].build(
        [_to_contact_response(row) for row in rows],
        total_count=total_count,
        request=request,
    )


async def bulk_upload(
    db: Database,
    payloads: Sequence[schemas.ContactCreate],
    *,
    max_items: int,
) -> list[schemas.ContactResponse]:
    """
    Insert all contacts or none of them.

    On a rejected item nothing is stored and the 400 names the item's index.
    """
    if len(payloads) > max_items:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Bulk upload is limited to {max_items} contacts.",
        )

    try:
        rows = await repository.bulk_insert_contacts(db, [_to_values(p) for p in payloads])
    except BulkUploadError as exc:
        logger.info("contact_bulk_upload_rejected index=%s", exc.index)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": str(exc), "index": exc.index},
        ) from exc
    logger.info("contact_bulk_upload count=%s", len(rows))
    return [_to_contact_response(row) for row in rows]
