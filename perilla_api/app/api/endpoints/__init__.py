"""
Endpoint modules.

Each module defines an ``APIRouter`` for one record type.  Routers are
aggregated in ``api/router.py`` and every route answers with the REST
envelope (``core.envelope.RESTResponse``).
"""
