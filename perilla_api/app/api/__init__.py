"""
REST API.

``router.py`` aggregates one ``APIRouter`` per record type from the
``endpoints`` package; the application mounts it under ``/api``.
"""
