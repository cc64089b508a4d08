"""Database and profile store helpers."""
from __future__ import annotations

import logging
import os
from typing import Callable, Optional

import psycopg2

from pairing import InMemoryProfileRepository, PostgresProfileRepository, ProfileRepository
from pairing.settings import PROFILE_STORE

logger = logging.getLogger(__name__)


def build_db_dsn() -> str:
    dsn = os.getenv("DATABASE_URL")
    if dsn:
        return dsn
    user = os.getenv("POSTGRES_USER", "bixomatch")
    password = os.getenv("POSTGRES_PASSWORD", "secret")
    host = os.getenv("POSTGRES_HOST", "localhost")
    port = os.getenv("POSTGRES_PORT", "5432")
    db = os.getenv("POSTGRES_DB", "bixomatch")
    return f"postgresql://{user}:{password}@{host}:{port}/{db}"


def get_conn():
    return psycopg2.connect(build_db_dsn())


ConnectionFactory = Callable[[], psycopg2.extensions.connection]


def create_repository(store: Optional[str] = None) -> ProfileRepository:
    """Build the profile repository selected by ``PROFILE_STORE``."""

    kind = (store or PROFILE_STORE).strip().lower()
    if kind == "memory":
        logger.info("Using in-memory profile store")
        return InMemoryProfileRepository()
    if kind != "postgres":
        logger.warning("Unknown PROFILE_STORE=%r, falling back to postgres", kind)
    return PostgresProfileRepository(get_conn)
