"""
Query building and paginated listing.

``SelectQuery`` is the "base query" handed to the lister: a table, the
columns to read and a list of equality conditions.  It is immutable;
``filter`` returns a new query, so list endpoints can start from a
service provided query and narrow it down.  ``extend_query`` applies
the client supplied ``control`` filters, and ``paginate`` either counts
the matches (``noexec``) or returns one page of them in insertion
order.
"""

import json
import sqlite3
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar, Union

from .constants import MAX_PAGINATION_LIMIT
from .db import Database
from .errors import InvalidRequest, ensure

T = TypeVar("T")


class SelectQuery:
    """SELECT over a single table with AND-ed equality conditions."""

    def __init__(
        self,
        table: str,
        columns: Sequence[str] = ("*",),
        conditions: Sequence[Tuple[str, Any]] = (),
        order_by: str = "rowid",
    ):
        self.table = table
        self.columns = tuple(columns)
        self.conditions = tuple(conditions)
        self.order_by = order_by

    def filter(self, column: str, value: Any) -> "SelectQuery":
        # column names are never taken from user input verbatim
        if isinstance(value, bool):
            value = int(value)
        return SelectQuery(
            self.table,
            self.columns,
            self.conditions + ((column, value),),
            self.order_by,
        )

    def _where(self) -> Tuple[str, List[Any]]:
        if not self.conditions:
            return "", []
        clause = " AND ".join(f"{column} = ?" for column, _ in self.conditions)
        return f" WHERE {clause}", [value for _, value in self.conditions]

    def count(self, cursor: sqlite3.Cursor) -> int:
        where, params = self._where()
        row = cursor.execute(f"SELECT COUNT(*) AS count FROM {self.table}{where}", params).fetchone()
        return row["count"]

    def fetch(self, cursor: sqlite3.Cursor, skip: int = 0, limit: Optional[int] = None) -> List[sqlite3.Row]:
        where, params = self._where()
        sql = f"SELECT {', '.join(self.columns)} FROM {self.table}{where} ORDER BY {self.order_by}"
        # SQLite needs a LIMIT to accept an OFFSET; -1 means unbounded
        sql += " LIMIT ? OFFSET ?"
        params.extend([-1 if limit is None else limit, skip])
        return cursor.execute(sql, params).fetchall()


def extend_query(query: SelectQuery, control: Optional[str], allowed: Dict[str, str]) -> SelectQuery:
    """Apply the JSON ``control`` filters to ``query``.

    ``control`` is a JSON object mapping public field names to the
    value they must equal, e.g. ``{"admin": true}``.  ``allowed`` maps
    the accepted field names to their column.  Anything else is an
    invalid request.
    """
    if not control:
        return query
    try:
        filters = json.loads(control)
    except json.JSONDecodeError:
        raise InvalidRequest() from None
    ensure(isinstance(filters, dict), InvalidRequest())
    for key, value in filters.items():
        ensure(key in allowed, InvalidRequest())
        ensure(isinstance(value, (str, int, bool)), InvalidRequest())
        query = query.filter(allowed[key], value)
    return query


@dataclass
class Pagination:
    skip: int = 0
    limit: Optional[int] = None
    noexec: bool = False

    @classmethod
    def parse(cls, skip: Optional[int], limit: Optional[int], noexec: bool = False) -> "Pagination":
        """Validate raw query values.

        A count request (``noexec``) needs no bounds.  Otherwise ``limit``
        is mandatory and may not exceed ``MAX_PAGINATION_LIMIT``.
        """
        skip = 0 if skip is None else skip
        ensure(skip >= 0, InvalidRequest())
        if noexec:
            return cls(skip=skip, limit=limit, noexec=True)
        ensure(limit is not None, InvalidRequest())
        ensure(0 <= limit <= MAX_PAGINATION_LIMIT, InvalidRequest())
        return cls(skip=skip, limit=limit)


async def paginate(
    db: Database,
    query: SelectQuery,
    pagination: Pagination,
    convert: Callable[[sqlite3.Row], T],
) -> Union[int, List[T]]:
    """Count (``noexec``) or fetch one page of ``query``."""
    with db.cursor() as cursor:
        if pagination.noexec:
            return query.count(cursor)
        rows = query.fetch(cursor, pagination.skip, pagination.limit)
    return [convert(row) for row in rows]
