"""
Contact API endpoints.

Literal paths (`search-by-name`, `paginated`, `delete-all`, ...) are declared
before `/{contact_id}` so they are never captured as ids.
"""

from __future__ import annotations

from fastapi import APIRouter, Body, Depends, Query, status

from auth import dependencies as auth_dependencies
from core.config import AppConfig
from core.db import Database
from core.dependencies import get_config, get_db
from core.pagination import Page

from . import schemas, service

router = APIRouter(
    prefix="/contact",
    dependencies=[Depends(auth_dependencies.require_access_token)],
)


@router.get("", response_model=list[schemas.ContactResponse])
async def list_contacts(db: Database = Depends(get_db)) -> list[schemas.ContactResponse]:
    return await service.list_contacts(db)


@router.get("/search-by-name", response_model=list[schemas.ContactResponse])
async def search_by_name(
    name: str = Query(..., min_length=1, max_length=255),
    db: Database = Depends(get_db),
) -> list[schemas.ContactResponse]:
    return await service.search_by_name(db, name)


@router.get("/search-all", response_model=list[schemas.ContactResponse])
async def search_all(
    query: str = Query(..., min_length=1, max_length=255),
    db: Database = Depends(get_db),
) -> list[schemas.ContactResponse]:
    return await service.search_all(db, query)


@router.get("/paginated", response_model=Page[schemas.ContactResponse])
async def get_paginated(
    page_number: int = Query(1, alias="pageNumber", ge=1),
    page_size: int = Query(10, alias="pageSize", ge=1),
    db: Database = Depends(get_db),
    config: AppConfig = Depends(get_config),
) -> Page[schemas.ContactResponse]:
    return await service.get_paginated(
        db,
        page_number=page_number,
        page_size=page_size,
        max_page_size=config.max_page_size,
    )


@router.post(
    "/bulk-upload",
    response_model=list[schemas.ContactResponse],
    status_code=status.HTTP_201_CREATED,
)
async def bulk_upload(
    contacts: list[schemas.ContactCreate] = Body(...),
    db: Database = Depends(get_db),
    config: AppConfig = Depends(get_config),
) -> list[schemas.ContactResponse]:
    return await service.bulk_upload(db, contacts, max_items=config.max_bulk_upload)


@router.delete("/delete-all", response_model=schemas.DeleteAllResponse)
async def delete_all_contacts(db: Database = Depends(get_db)) -> schemas.DeleteAllResponse:
    return await service.delete_all_contacts(db)


@router.get("/{contact_id}", response_model=schemas.ContactResponse)
async def get_contact(contact_id: int, db: Database = Depends(get_db)) -> schemas.ContactResponse:
    return await service.get_contact(db, contact_id)


@router.post("", response_model=schemas.ContactResponse, status_code=status.HTTP_201_CREATED)
async def create_contact(
    payload: schemas.ContactCreate,
    db: Database = Depends(get_db),
) -> schemas.ContactResponse:
    return await service.create_contact(db, payload)


@router.put("/{contact_id}", response_model=schemas.ContactResponse)
async def update_contact(
    contact_id: int,
    payload: schemas.ContactCreate,
    db: Database = Depends(get_db),
) -> schemas.ContactResponse:
    return await service.update_contact(db, contact_id, payload)


@router.delete("/{contact_id}", response_model=schemas.DeleteResponse)
async def delete_contact(contact_id: int, db: Database = Depends(get_db)) -> schemas.DeleteResponse:
    return await service.delete_contact(db, contact_id)
