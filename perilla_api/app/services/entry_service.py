"""
Business logic for entries.

Entries are created by the CLI (``perilla init`` and ``perilla entry
<id> --create``), edited through the profile endpoint or the CLI and
removed by a system administrator.  Removing an entry cascades to its
entry maps, system map and solutions through the foreign keys declared
in ``core.db``.
"""

import logging
from typing import Any, Dict, Optional

from perilla_api.app.core.db import Database
from perilla_api.app.core.errors import EntryNotFound, InvalidRequest, StoreError
from perilla_api.app.core.pagination import SelectQuery
from perilla_api.app.core.security import hash_password, verify_password
from perilla_api.app.schemas.entry import EntryCreate, EntryRead, EntryType, EntryUpdate

logger = logging.getLogger(__name__)

ENTRY_COLUMNS = ("id", "email", "description", "type", "created")


class EntryService:
    """CRUD for ``entries``."""

    def __init__(self, db: Database):
        self.db = db

    async def get_entry(self, entry_id: str) -> Optional[EntryRead]:
        with self.db.cursor() as cursor:
            row = cursor.execute(
                f"SELECT {', '.join(ENTRY_COLUMNS)} FROM entries WHERE id = ?",
                (entry_id,),
            ).fetchone()
        return EntryRead.from_row(row) if row else None

    async def exists(self, entry_id: str) -> bool:
        with self.db.cursor() as cursor:
            row = cursor.execute("SELECT 1 FROM entries WHERE id = ?", (entry_id,)).fetchone()
        return row is not None

    async def create_entry(self, data: EntryCreate) -> EntryRead:
        """Insert a new entry.

        Users must be given a password.  Creating an entry whose id is
        already taken is an invalid request.
        """
        hashed = None
        if data.type == EntryType.user:
            if not data.password:
                raise InvalidRequest("Password is required for users")
            hashed = hash_password(data.password)
        try:
            with self.db.cursor() as cursor:
                cursor.execute(
                    "INSERT INTO entries (id, email, description, type, hash) VALUES (?, ?, ?, ?, ?)",
                    (data.id, data.email, data.description, int(data.type), hashed),
                )
        except StoreError as e:
            if "UNIQUE" in e.message:
                raise InvalidRequest(f"Entry {data.id} already exists") from e
            raise
        logger.info("Entry %s created (%s)", data.id, data.type.name)
        entry = await self.get_entry(data.id)
        return entry

    async def update_entry(self, entry_id: str, updates: EntryUpdate) -> EntryRead:
        """Apply a profile edit; only fields present in the body change."""
        fields: Dict[str, Any] = updates.model_dump(exclude_unset=True)
        with self.db.cursor() as cursor:
            row = cursor.execute("SELECT id FROM entries WHERE id = ?", (entry_id,)).fetchone()
            if not row:
                raise EntryNotFound()
            if fields:
                assignments = ", ".join(f"{key} = ?" for key in fields)
                cursor.execute(
                    f"UPDATE entries SET {assignments} WHERE id = ?",
                    (*fields.values(), entry_id),
                )
        if fields:
            logger.info("Entry %s updated: %s", entry_id, ", ".join(fields))
        return await self.get_entry(entry_id)

    async def set_password(self, entry_id: str, password: str) -> None:
        with self.db.cursor() as cursor:
            row = cursor.execute("SELECT type FROM entries WHERE id = ?", (entry_id,)).fetchone()
            if not row:
                raise EntryNotFound()
            if row["type"] != EntryType.user:
                raise InvalidRequest("Only users have a password")
            cursor.execute(
                "UPDATE entries SET hash = ? WHERE id = ?",
                (hash_password(password), entry_id),
            )
        logger.info("Password of %s changed", entry_id)

    async def remove_entry(self, entry_id: str) -> None:
        with self.db.cursor() as cursor:
            deleted = cursor.execute("DELETE FROM entries WHERE id = ?", (entry_id,)).rowcount
        if not deleted:
            raise EntryNotFound()
        logger.info("Entry %s removed", entry_id)

    async def authenticate(self, entry_id: str, password: str) -> Optional[EntryRead]:
        """Return the user entry if ``password`` matches, else ``None``.

        Groups never authenticate.
        """
        with self.db.cursor() as cursor:
            row = cursor.execute(
                f"SELECT {', '.join(ENTRY_COLUMNS)}, hash FROM entries WHERE id = ?",
                (entry_id,),
            ).fetchone()
        if not row or row["type"] != EntryType.user:
            return None
        if not verify_password(password, row["hash"]):
            return None
        return EntryRead.from_row(row)

    def list_query(self) -> SelectQuery:
        return SelectQuery("entries", ENTRY_COLUMNS)
