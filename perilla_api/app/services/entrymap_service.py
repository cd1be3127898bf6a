"""
Business logic for entry maps.

An entry map ``from -> to`` says that entry ``from`` is a member of
entry ``to`` (for example a user in a group), with admin rights on
``to`` when ``admin`` is set.  There is at most one map per pair: the
table carries a ``UNIQUE(from_id, to_id)`` constraint and writes go
through a single upsert statement, so two concurrent requests for the
same pair update one row instead of inserting two.
"""

import logging
from typing import Optional

from perilla_api.app.core.db import Database
from perilla_api.app.core.errors import EntryNotFound, NotFound
from perilla_api.app.core.pagination import SelectQuery
from perilla_api.app.schemas.entrymap import EntryMapRead

logger = logging.getLogger(__name__)

ENTRYMAP_COLUMNS = ("from_id", "to_id", "admin", "created")

# Fields accepted in the ``control`` filter of list/count endpoints.
CONTROL_FIELDS = {"from": "from_id", "to": "to_id", "admin": "admin"}


class EntryMapService:
    def __init__(self, db: Database):
        self.db = db

    async def get_map(self, from_id: str, to_id: str) -> Optional[EntryMapRead]:
        with self.db.cursor() as cursor:
            row = cursor.execute(
                f"SELECT {', '.join(ENTRYMAP_COLUMNS)} FROM entrymaps WHERE from_id = ? AND to_id = ?",
                (from_id, to_id),
            ).fetchone()
        return EntryMapRead.from_row(row) if row else None

    async def upsert_map(self, from_id: str, to_id: str, admin: bool) -> EntryMapRead:
        """Create the map or update its admin flag.

        Both entries must exist; otherwise ``EntryNotFound`` is raised
        and nothing is written.
        """
        with self.db.cursor() as cursor:
            found = cursor.execute(
                "SELECT COUNT(*) AS count FROM entries WHERE id IN (?, ?)",
                (from_id, to_id),
            ).fetchone()["count"]
            expected = 1 if from_id == to_id else 2
            if found != expected:
                raise EntryNotFound()
            cursor.execute(
                """
                INSERT INTO entrymaps (from_id, to_id, admin) VALUES (?, ?, ?)
                ON CONFLICT(from_id, to_id) DO UPDATE SET admin = excluded.admin
                """,
                (from_id, to_id, int(admin)),
            )
        logger.info("Entry map %s -> %s saved (admin=%s)", from_id, to_id, admin)
        return await self.get_map(from_id, to_id)

    async def remove_map(self, from_id: str, to_id: str) -> None:
        with self.db.cursor() as cursor:
            deleted = cursor.execute(
                "DELETE FROM entrymaps WHERE from_id = ? AND to_id = ?",
                (from_id, to_id),
            ).rowcount
        if not deleted:
            raise NotFound()
        logger.info("Entry map %s -> %s removed", from_id, to_id)

    def list_query(self, to_id: Optional[str] = None) -> SelectQuery:
        query = SelectQuery("entrymaps", ENTRYMAP_COLUMNS)
        if to_id is not None:
            query = query.filter("to_id", to_id)
        return query
