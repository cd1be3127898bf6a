"""
Public solution endpoints (``/api/public/solution``).

Anonymous, read only access to solutions flagged ``public``.
"""

from fastapi import APIRouter, Depends, Query

from perilla_api.app.api.deps import get_context, pagination_guard
from perilla_api.app.core.context import AppContext
from perilla_api.app.core.envelope import RESTResponse
from perilla_api.app.core.pagination import Pagination, paginate
from perilla_api.app.schemas.solution import SolutionBrief

router = APIRouter()


@router.get("/count", response_model=RESTResponse)
async def count_public_solutions(context: AppContext = Depends(get_context)) -> RESTResponse:
    return RESTResponse.send(await context.solutions.count_public())


@router.get("/list", response_model=RESTResponse)
async def list_public_solutions(
    pagination: Pagination = Depends(pagination_guard),
    context: AppContext = Depends(get_context),
) -> RESTResponse:
    result = await paginate(context.db, context.solutions.public_query(), pagination, SolutionBrief.from_row)
    return RESTResponse.send(result)


@router.get("", response_model=RESTResponse)
async def get_public_solution(
    solution_id: int = Query(..., alias="id"),
    entry: str = Query(..., min_length=1),
    context: AppContext = Depends(get_context),
) -> RESTResponse:
    return RESTResponse.send(await context.solutions.get_public(entry, solution_id))
