"""
Business logic for solutions.

The public API only reads solutions whose ``public`` flag is set.
Solutions are numbered per owner: ``create_solution`` assigns the next
free ``id`` for the owning entry inside the insert statement.
"""

import json
import logging
from typing import Optional

from perilla_api.app.core.db import Database
from perilla_api.app.core.errors import NotFound
from perilla_api.app.core.pagination import SelectQuery
from perilla_api.app.schemas.solution import SolutionCreate, SolutionRead

logger = logging.getLogger(__name__)

BRIEF_COLUMNS = ("id", "problem", "status", "score", "created", "owner", "creator", "public")


class SolutionService:
    def __init__(self, db: Database):
        self.db = db

    async def create_solution(self, data: SolutionCreate) -> SolutionRead:
        with self.db.cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO solutions (id, owner, creator, problem, status, score, public, details)
                VALUES (
                    (SELECT COALESCE(MAX(id), 0) + 1 FROM solutions WHERE owner = ?),
                    ?, ?, ?, ?, ?, ?, ?
                )
                """,
                (
                    data.owner,
                    data.owner,
                    data.creator,
                    data.problem,
                    data.status,
                    data.score,
                    int(data.public),
                    json.dumps(data.details) if data.details is not None else None,
                ),
            )
            row = cursor.execute(
                "SELECT * FROM solutions WHERE rid = ?", (cursor.lastrowid,)
            ).fetchone()
        solution = SolutionRead.from_row(row)
        logger.info("Solution %s/%s created", solution.owner, solution.id)
        return solution

    async def get_public(self, owner: str, solution_id: int) -> SolutionRead:
        """Return a public solution; private and missing ones are "Not found"."""
        with self.db.cursor() as cursor:
            row = cursor.execute(
                "SELECT * FROM solutions WHERE owner = ? AND id = ?",
                (owner, solution_id),
            ).fetchone()
        if not row or not row["public"]:
            raise NotFound()
        return SolutionRead.from_row(row)

    def public_query(self) -> SelectQuery:
        return SelectQuery("solutions", BRIEF_COLUMNS).filter("public", True)

    async def count_public(self) -> int:
        with self.db.cursor() as cursor:
            return self.public_query().count(cursor)
