"""Registration presentation layer.

Routes for registering groups and for the status reports sent by the
directory, owner-verification and app-configuration actors.
"""

from __future__ import annotations

from fastapi import APIRouter

from registration.presentation import routes

router = APIRouter(
    prefix="/registrar",
    tags=["registrar"],
)

router.include_router(routes.router)

__all__ = ["router"]
