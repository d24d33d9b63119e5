"""
Pydantic schemas for contact endpoints.

JSON uses camelCase (`contactNum`); snake_case is accepted on input too.
Length limits apply to request bodies only; responses serve whatever the
table holds.
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ContactBase(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    gender: str | None = None
    birthday: date | None = None
    address: str | None = None
    contact_num: str | None = None


class ContactCreate(ContactBase):
    """
    Body for POST/PUT and bulk upload. Any `id` sent by the client is ignored.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    gender: str | None = Field(default=None, max_length=50)
    contact_num: str | None = Field(default=None, max_length=50)


class ContactResponse(ContactBase):
    id: int


class DeleteResponse(BaseModel):
    deleted: bool
    id: int


class DeleteAllResponse(BaseModel):
    deleted: int
