"""
Pydantic schema definitions for records and request bodies.

Each record type (entries, entry maps, system maps, solutions) has its
own module.  Read models are built from ``sqlite3.Row`` objects with
``from_row`` so that column names (``from_id``, ``hash``...) never leak
into API payloads.
"""
