"""Application factory for the BixoMatch server."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from fastapi import FastAPI

from pairing import ProfileRepository

from .config import configure_logging
from .db import create_repository, get_conn
from .identity import IdentityProvider, IdentitySession
from .routers import register_routers
from .startup import register_startup_events

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"


def create_app(
    repository: Optional[ProfileRepository] = None,
    session: Optional[IdentitySession] = None,
    *,
    provider_factory: Optional[Callable[[], IdentityProvider]] = None,
    capacity: Optional[int] = None,
) -> FastAPI:
    configure_logging()
    app = FastAPI(title="BixoMatch")
    repository = repository if repository is not None else create_repository()
    session = session if session is not None else IdentitySession()
    app.state.repository = repository
    app.state.identity_session = session
    register_routers(app, repository, session, capacity=capacity)
    register_startup_events(
        app,
        repository,
        session,
        TEMPLATES_DIR,
        conn_factory=get_conn,
        provider_factory=provider_factory,
    )
    return app


app = create_app()
