"""Pydantic models for entry maps (entry to entry access relations)."""

import sqlite3
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool


class EntryMapWrite(BaseModel):
    """Body of ``POST /api/entrymap``: grant or revoke admin rights."""

    admin: StrictBool


class EntryMapRead(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(..., alias="from")
    to: str
    admin: bool
    created: Optional[str] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "EntryMapRead":
        return cls(
            from_=row["from_id"],
            to=row["to_id"],
            admin=bool(row["admin"]),
            created=row["created"],
        )
