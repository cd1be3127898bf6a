"""
Pydantic models for entries.

An entry is either a user (can log in, has a password) or a group.
Password material is stored in the ``hash`` column and is never part
of a read model.
"""

import sqlite3
from enum import IntEnum
from typing import Optional

from pydantic import BaseModel, Field


class EntryType(IntEnum):
    user = 0
    group = 1


class EntryBase(BaseModel):
    email: Optional[str] = Field(None, examples=["alice@example.com"])
    description: Optional[str] = Field(None, examples=["Problem setter"])


class EntryCreate(EntryBase):
    """Schema used by the CLI to create an entry.

    ``password`` is required for users and ignored for groups; the
    check lives in ``EntryService.create_entry``.
    """

    id: str = Field(..., min_length=1, examples=["alice"])
    type: EntryType = EntryType.user
    password: Optional[str] = None


class EntryUpdate(EntryBase):
    """Profile edit.  Omitted fields are left untouched."""


class EntryRead(EntryBase):
    id: str
    type: EntryType
    created: Optional[str] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "EntryRead":
        return cls(
            id=row["id"],
            email=row["email"],
            description=row["description"],
            type=EntryType(row["type"]),
            created=row["created"],
        )
