"""
Dependencies shared by the API routes.

The permission checks are chained the same way on every router:

* ``current_user``: the caller's entry id from the bearer token, or
  ``None`` for anonymous requests;
* ``require_login``: rejects anonymous callers;
* ``require_system_admin``: requires a system map for the caller;
* ``entry_access``: resolves the caller's rights on the entry named
  by the ``entry`` query parameter (optionally ``forced``, see
  ``AccessGate``);
* ``require_entry_admin``: ``entry_access`` plus admin rights.

All of them fail with ``AccessDenied``/``InvalidRequest`` which the
envelope handlers turn into ``{"status": "failed", ...}``.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from perilla_api.app.core.context import AppContext
from perilla_api.app.core.errors import AccessDenied, InvalidRequest, ensure
from perilla_api.app.core.pagination import Pagination
from perilla_api.app.core.security import decode_access_token
from perilla_api.app.services.access_service import AccessLevel

security = HTTPBearer(auto_error=False)


def get_context(request: Request) -> AppContext:
    return request.app.state.context


async def current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    context: AppContext = Depends(get_context),
) -> Optional[str]:
    """Entry id of the caller.

    Invalid or expired tokens and tokens of removed entries count as
    anonymous.
    """
    if credentials is None:
        return None
    claims = decode_access_token(credentials.credentials, context.config.session_secret)
    if not claims:
        return None
    if not await context.entries.exists(claims["sub"]):
        return None
    return claims["sub"]


async def require_login(user: Optional[str] = Depends(current_user)) -> str:
    ensure(user, AccessDenied())
    return user


async def require_system_admin(
    user: str = Depends(require_login),
    context: AppContext = Depends(get_context),
) -> str:
    ensure(await context.gate.is_system_admin(user), AccessDenied())
    return user


@dataclass
class EntryAccess:
    """Outcome of a successful entry access check."""

    entry: str
    caller: str
    admin: bool = False


async def entry_access(
    entry: Optional[str] = Query(None, description="Target entry id"),
    forced: bool = Query(False, description="Use system admin rights instead of entry maps"),
    user: Optional[str] = Depends(current_user),
    context: AppContext = Depends(get_context),
) -> EntryAccess:
    ensure(user, AccessDenied())
    ensure(entry, InvalidRequest())
    level = await context.gate.resolve(user, entry, forced)
    ensure(level != AccessLevel.denied, AccessDenied())
    return EntryAccess(entry=entry, caller=user, admin=level == AccessLevel.admin)


async def require_entry_admin(access: EntryAccess = Depends(entry_access)) -> EntryAccess:
    ensure(access.admin, AccessDenied())
    return access


def pagination_params(
    skip: Optional[int] = Query(None, description="Number of records to skip"),
    limit: Optional[int] = Query(None, description="Page size"),
    noexec: bool = Query(False, description="Only count the matching records"),
) -> Pagination:
    return Pagination.parse(skip, limit, noexec)


def pagination_guard(
    skip: Optional[int] = Query(None, description="Number of records to skip"),
    limit: Optional[int] = Query(None, description="Page size"),
) -> Pagination:
    return Pagination.parse(skip, limit)
