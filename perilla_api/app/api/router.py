"""
Top‑level API router.

Aggregates the per record routers under the ``/api`` prefix applied
by ``create_app``.  The private entry map router lives under
``/private`` because every one of its routes is scoped to an entry the
caller has access to.
"""

from fastapi import APIRouter

from .endpoints import auth, entry, entrymap, private_entrymap, public_solution, systemmap

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(entry.router, prefix="/entry", tags=["entry"])
router.include_router(entrymap.router, prefix="/entrymap", tags=["entrymap"])
router.include_router(systemmap.router, prefix="/systemmap", tags=["systemmap"])
router.include_router(private_entrymap.router, prefix="/private/entrymap", tags=["private"])
router.include_router(public_solution.router, prefix="/public/solution", tags=["public"])
