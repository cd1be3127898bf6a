"""Pydantic model for system admin markers."""

import sqlite3
from typing import Optional

from pydantic import BaseModel


class SystemMapRead(BaseModel):
    user: str
    created: Optional[str] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "SystemMapRead":
        return cls(user=row["user"], created=row["created"])
