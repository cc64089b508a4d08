"""Match lookup endpoint used by the results page."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Header
from fastapi.responses import JSONResponse

from pairing import ProfileRepository

from ..identity import IdentitySession
from ..orchestrator import handle_match_request


def create_router(
    repository: ProfileRepository,
    session: IdentitySession,
    *,
    capacity: Optional[int] = None,
) -> APIRouter:
    router = APIRouter()

    @router.get("/api/match", response_class=JSONResponse)
    async def api_match(authorization: Optional[str] = Header(None)):
        status_code, body = await handle_match_request(
            session, repository, authorization, capacity=capacity
        )
        return JSONResponse(body, status_code=status_code)

    @router.get("/api/health", response_class=JSONResponse)
    def api_health():
        return {"status": "ok", "identity_ready": session.is_ready}

    return router
