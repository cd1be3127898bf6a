"""
Business logic for system maps.

A system map row marks an entry as a system wide administrator:
presence means admin, absence means not admin.  ``add`` is idempotent
(``INSERT ... ON CONFLICT DO NOTHING`` against the unique ``user``
column).
"""

import logging
from typing import Optional

from perilla_api.app.core.db import Database
from perilla_api.app.core.errors import EntryNotFound, NotFound
from perilla_api.app.core.pagination import SelectQuery
from perilla_api.app.schemas.systemmap import SystemMapRead

logger = logging.getLogger(__name__)


class SystemMapService:
    def __init__(self, db: Database):
        self.db = db

    async def get_map(self, user: str) -> Optional[SystemMapRead]:
        with self.db.cursor() as cursor:
            row = cursor.execute(
                "SELECT user, created FROM systemmaps WHERE user = ?", (user,)
            ).fetchone()
        return SystemMapRead.from_row(row) if row else None

    async def is_admin(self, user: str) -> bool:
        return await self.get_map(user) is not None

    async def add(self, user: str) -> SystemMapRead:
        with self.db.cursor() as cursor:
            if not cursor.execute("SELECT 1 FROM entries WHERE id = ?", (user,)).fetchone():
                raise EntryNotFound()
            inserted = cursor.execute(
                "INSERT INTO systemmaps (user) VALUES (?) ON CONFLICT(user) DO NOTHING",
                (user,),
            ).rowcount
        if inserted:
            logger.info("System admin %s added", user)
        return await self.get_map(user)

    async def remove(self, user: str) -> None:
        with self.db.cursor() as cursor:
            deleted = cursor.execute("DELETE FROM systemmaps WHERE user = ?", (user,)).rowcount
        if not deleted:
            raise NotFound()
        logger.info("System admin %s removed", user)

    def list_query(self) -> SelectQuery:
        return SelectQuery("systemmaps", ("user", "created"))
