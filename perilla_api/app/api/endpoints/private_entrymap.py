"""
Entry scoped entry map endpoints (``/api/private/entrymap``).

Every route here runs behind ``entry_access``: the caller must be a
member of ``entry`` (or a system admin with ``forced``).  Members may
read; changing or removing maps of ``entry`` needs admin rights.
``/count`` and ``/list`` only see maps pointing at ``entry`` and
accept a JSON ``control`` filter over ``from``, ``to`` and ``admin``.
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from perilla_api.app.api.deps import EntryAccess, entry_access, get_context, pagination_guard
from perilla_api.app.core.context import AppContext
from perilla_api.app.core.envelope import RESTResponse
from perilla_api.app.core.errors import AccessDenied, NotFound, ensure
from perilla_api.app.core.pagination import Pagination, extend_query, paginate
from perilla_api.app.schemas.entrymap import EntryMapRead, EntryMapWrite
from perilla_api.app.services.entrymap_service import CONTROL_FIELDS

router = APIRouter(dependencies=[Depends(entry_access)])


@router.get("", response_model=RESTResponse)
async def get_entrymap(
    from_id: str = Query(..., alias="id", min_length=1),
    access: EntryAccess = Depends(entry_access),
    context: AppContext = Depends(get_context),
) -> RESTResponse:
    relation = await context.entrymaps.get_map(from_id, access.entry)
    if relation is None:
        raise NotFound()
    return RESTResponse.send(relation)


@router.post("", response_model=RESTResponse)
async def save_entrymap(
    from_id: str = Query(..., alias="id", min_length=1),
    body: EntryMapWrite = Body(...),
    access: EntryAccess = Depends(entry_access),
    context: AppContext = Depends(get_context),
) -> RESTResponse:
    ensure(access.admin, AccessDenied())
    await context.entrymaps.upsert_map(from_id, access.entry, body.admin)
    return RESTResponse.end()


@router.delete("", response_model=RESTResponse)
async def delete_entrymap(
    from_id: str = Query(..., alias="id", min_length=1),
    access: EntryAccess = Depends(entry_access),
    context: AppContext = Depends(get_context),
) -> RESTResponse:
    ensure(access.admin, AccessDenied())
    await context.entrymaps.remove_map(from_id, access.entry)
    return RESTResponse.end()


@router.get("/count", response_model=RESTResponse)
async def count_entrymaps(
    control: Optional[str] = Query(None, description="JSON object of field filters"),
    access: EntryAccess = Depends(entry_access),
    context: AppContext = Depends(get_context),
) -> RESTResponse:
    query = extend_query(context.entrymaps.list_query(access.entry), control, CONTROL_FIELDS)
    result = await paginate(context.db, query, Pagination(noexec=True), EntryMapRead.from_row)
    return RESTResponse.send(result)


@router.get("/list", response_model=RESTResponse)
async def list_entrymaps(
    control: Optional[str] = Query(None, description="JSON object of field filters"),
    pagination: Pagination = Depends(pagination_guard),
    access: EntryAccess = Depends(entry_access),
    context: AppContext = Depends(get_context),
) -> RESTResponse:
    query = extend_query(context.entrymaps.list_query(access.entry), control, CONTROL_FIELDS)
    result = await paginate(context.db, query, pagination, EntryMapRead.from_row)
    return RESTResponse.send(result)
