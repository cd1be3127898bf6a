"""
Entry profile endpoints.

* ``GET /api/entry?entry=`` returns the public profile of an entry;
* ``POST /api/entry?entry=`` edits ``email``/``description`` and needs
  admin rights on the entry;
* ``DELETE /api/entry?entry=`` removes the entry and everything that
  references it; system admins only;
* ``GET /api/entry/list`` pages through all entries.

Entries themselves are created with ``perilla entry <id> --create``.
"""

from fastapi import APIRouter, Depends, Query

from perilla_api.app.api.deps import (
    EntryAccess,
    get_context,
    pagination_params,
    require_entry_admin,
    require_system_admin,
)
from perilla_api.app.core.context import AppContext
from perilla_api.app.core.envelope import RESTResponse
from perilla_api.app.core.errors import EntryNotFound
from perilla_api.app.core.pagination import Pagination, paginate
from perilla_api.app.schemas.entry import EntryRead, EntryUpdate

router = APIRouter()


@router.get("", response_model=RESTResponse)
async def get_entry(
    entry: str = Query(..., min_length=1),
    context: AppContext = Depends(get_context),
) -> RESTResponse:
    found = await context.entries.get_entry(entry)
    if found is None:
        raise EntryNotFound()
    return RESTResponse.send(found)


@router.post("", response_model=RESTResponse)
async def update_entry(
    body: EntryUpdate,
    access: EntryAccess = Depends(require_entry_admin),
    context: AppContext = Depends(get_context),
) -> RESTResponse:
    return RESTResponse.send(await context.entries.update_entry(access.entry, body))


@router.delete("", response_model=RESTResponse)
async def delete_entry(
    entry: str = Query(..., min_length=1),
    caller: str = Depends(require_system_admin),
    context: AppContext = Depends(get_context),
) -> RESTResponse:
    await context.entries.remove_entry(entry)
    return RESTResponse.end()


@router.get("/list", response_model=RESTResponse)
async def list_entries(
    pagination: Pagination = Depends(pagination_params),
    context: AppContext = Depends(get_context),
) -> RESTResponse:
    result = await paginate(context.db, context.entries.list_query(), pagination, EntryRead.from_row)
    return RESTResponse.send(result)
