"""
Pydantic models for solutions.

``SolutionBrief`` is the projection used by list endpoints; it leaves
out ``details`` (judge output and similar bulky data).
"""

import json
import sqlite3
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class SolutionCreate(BaseModel):
    owner: str
    creator: Optional[str] = None
    problem: Optional[int] = None
    status: str = "pending"
    score: int = Field(0, ge=0)
    public: bool = False
    details: Optional[Dict[str, Any]] = None


class SolutionBrief(BaseModel):
    id: int
    problem: Optional[int] = None
    status: str
    score: int
    created: Optional[str] = None
    owner: str
    creator: Optional[str] = None
    public: bool

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "SolutionBrief":
        return cls(
            id=row["id"],
            problem=row["problem"],
            status=row["status"],
            score=row["score"],
            created=row["created"],
            owner=row["owner"],
            creator=row["creator"],
            public=bool(row["public"]),
        )


class SolutionRead(SolutionBrief):
    details: Optional[Dict[str, Any]] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "SolutionRead":
        brief = SolutionBrief.from_row(row)
        details = json.loads(row["details"]) if row["details"] else None
        return cls(**brief.model_dump(), details=details)
