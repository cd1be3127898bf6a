"""
System map endpoints.

Granting and revoking system admin rights (``POST``/``DELETE
/api/systemmap?user=``) is reserved to system admins.  Granting is
idempotent; revoking a missing map fails with "Not found".
"""

from fastapi import APIRouter, Depends, Query

from perilla_api.app.api.deps import get_context, pagination_params, require_login, require_system_admin
from perilla_api.app.core.context import AppContext
from perilla_api.app.core.envelope import RESTResponse
from perilla_api.app.core.errors import NotFound
from perilla_api.app.core.pagination import Pagination, paginate
from perilla_api.app.schemas.systemmap import SystemMapRead

router = APIRouter()


@router.get("", response_model=RESTResponse)
async def get_systemmap(
    user: str = Query(..., min_length=1),
    caller: str = Depends(require_login),
    context: AppContext = Depends(get_context),
) -> RESTResponse:
    marker = await context.systemmaps.get_map(user)
    if marker is None:
        raise NotFound()
    return RESTResponse.send(marker)


@router.post("", response_model=RESTResponse)
async def add_systemmap(
    user: str = Query(..., min_length=1),
    caller: str = Depends(require_system_admin),
    context: AppContext = Depends(get_context),
) -> RESTResponse:
    await context.systemmaps.add(user)
    return RESTResponse.end()


@router.delete("", response_model=RESTResponse)
async def delete_systemmap(
    user: str = Query(..., min_length=1),
    caller: str = Depends(require_system_admin),
    context: AppContext = Depends(get_context),
) -> RESTResponse:
    await context.systemmaps.remove(user)
    return RESTResponse.end()


@router.get("/list", response_model=RESTResponse)
async def list_systemmaps(
    pagination: Pagination = Depends(pagination_params),
    context: AppContext = Depends(get_context),
) -> RESTResponse:
    result = await paginate(context.db, context.systemmaps.list_query(), pagination, SystemMapRead.from_row)
    return RESTResponse.send(result)
