"""
Session endpoints.

``POST /api/auth/login`` exchanges a user's id and password for a
signed bearer token; ``GET /api/auth/session`` reports who the token
belongs to.  Sessions are stateless, so there is no logout: clients
drop the token.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from perilla_api.app.api.deps import current_user, get_context
from perilla_api.app.core.context import AppContext
from perilla_api.app.core.envelope import RESTResponse
from perilla_api.app.core.errors import AccessDenied
from perilla_api.app.core.security import create_access_token
from perilla_api.app.schemas.auth import LoginRequest, TokenRead

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=RESTResponse)
async def login(body: LoginRequest, context: AppContext = Depends(get_context)) -> RESTResponse:
    entry = await context.entries.authenticate(body.username, body.password)
    if entry is None:
        logger.warning("Failed login for %s", body.username)
        raise AccessDenied("Invalid credentials")
    token = create_access_token(
        entry.id,
        context.config.session_secret,
        context.settings.access_token_expire_minutes * 60,
    )
    return RESTResponse.send(TokenRead(access_token=token))


@router.get("/session", response_model=RESTResponse)
async def session(user: Optional[str] = Depends(current_user)) -> RESTResponse:
    return RESTResponse.send(user)
