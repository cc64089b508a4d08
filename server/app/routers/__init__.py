"""Register FastAPI routers."""
from __future__ import annotations

from typing import Optional

from fastapi import FastAPI

from pairing import ProfileRepository

from ..identity import IdentitySession
from . import matching


def register_routers(
    app: FastAPI,
    repository: ProfileRepository,
    session: IdentitySession,
    *,
    capacity: Optional[int] = None,
) -> None:
    app.include_router(matching.create_router(repository, session, capacity=capacity))
