"""
Entry map endpoints.

``GET/POST/DELETE /api/entrymap?id=<from>&entry=<to>`` read, write and
remove the map from entry ``id`` to entry ``entry``.  Reading only
requires a session; writing requires admin rights on ``entry``
(directly, or as a system admin with ``forced``).
``GET /api/entrymap/list`` pages through all maps.
"""

from fastapi import APIRouter, Body, Depends, Query

from perilla_api.app.api.deps import (
    EntryAccess,
    get_context,
    pagination_params,
    require_entry_admin,
    require_login,
)
from perilla_api.app.core.context import AppContext
from perilla_api.app.core.envelope import RESTResponse
from perilla_api.app.core.errors import NotFound
from perilla_api.app.core.pagination import Pagination, paginate
from perilla_api.app.schemas.entrymap import EntryMapRead, EntryMapWrite

router = APIRouter()


@router.get("", response_model=RESTResponse)
async def get_entrymap(
    from_id: str = Query(..., alias="id", min_length=1),
    entry: str = Query(..., min_length=1),
    user: str = Depends(require_login),
    context: AppContext = Depends(get_context),
) -> RESTResponse:
    relation = await context.entrymaps.get_map(from_id, entry)
    if relation is None:
        raise NotFound()
    return RESTResponse.send(relation)


@router.post("", response_model=RESTResponse)
async def save_entrymap(
    from_id: str = Query(..., alias="id", min_length=1),
    body: EntryMapWrite = Body(...),
    access: EntryAccess = Depends(require_entry_admin),
    context: AppContext = Depends(get_context),
) -> RESTResponse:
    await context.entrymaps.upsert_map(from_id, access.entry, body.admin)
    return RESTResponse.end()


@router.delete("", response_model=RESTResponse)
async def delete_entrymap(
    from_id: str = Query(..., alias="id", min_length=1),
    access: EntryAccess = Depends(require_entry_admin),
    context: AppContext = Depends(get_context),
) -> RESTResponse:
    await context.entrymaps.remove_map(from_id, access.entry)
    return RESTResponse.end()


@router.get("/list", response_model=RESTResponse)
async def list_entrymaps(
    pagination: Pagination = Depends(pagination_params),
    context: AppContext = Depends(get_context),
) -> RESTResponse:
    result = await paginate(context.db, context.entrymaps.list_query(), pagination, EntryMapRead.from_row)
    return RESTResponse.send(result)
