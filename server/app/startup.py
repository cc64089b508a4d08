"""Startup/shutdown hooks, lightweight migrations and test data seeding."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Optional

import psycopg2
from fastapi import FastAPI

from pairing import Participant, PostgresProfileRepository, ProfileRepository
from pairing.errors import RepositoryUnavailable
from pairing.repository import SCHEMA_STATEMENTS
from utils import parse_optional_int, read_csv_rows, truthy

from .db import ConnectionFactory
from .identity import IdentityProvider, IdentitySession

logger = logging.getLogger(__name__)

SEED_FILE = "test_participants.csv"


def maybe_seed_test_data(repository: ProfileRepository, templates_dir: Path) -> int:
    """Load participants from ``templates/test_participants.csv`` when ``TEST_IMPORT`` is set.

    Returns the number of participants written. Rows without an ``id`` are
    skipped; the ``parties`` column is stored as an integer.
    """
    if not truthy(os.getenv("TEST_IMPORT")):
        return 0

    rows = read_csv_rows(templates_dir / SEED_FILE)
    written = 0
    for row in rows:
        participant_id = row.pop("id", "")
        if not participant_id:
            continue
        document = {key: value for key, value in row.items() if value}
        if "parties" in document:
            document["parties"] = parse_optional_int(document["parties"])
        repository.save_participant(Participant.from_document(participant_id, document))
        written += 1
    if written:
        logger.info("Seeded %s participants from %s", written, SEED_FILE)
    return written


def run_lightweight_migrations(conn_factory: ConnectionFactory) -> None:
    conn = conn_factory()
    try:
        with conn, conn.cursor() as cur:
            for statement in SCHEMA_STATEMENTS:
                cur.execute(statement)
    finally:
        conn.close()


def register_startup_events(
    app: FastAPI,
    repository: ProfileRepository,
    session: IdentitySession,
    templates_dir: Path,
    *,
    conn_factory: Optional[ConnectionFactory] = None,
    provider_factory: Optional[Callable[[], IdentityProvider]] = None,
) -> None:
    @app.on_event("startup")
    async def _startup_event() -> None:
        if conn_factory is not None and isinstance(repository, PostgresProfileRepository):
            try:
                run_lightweight_migrations(conn_factory)
            except psycopg2.Error as exc:
                logger.warning("Failed to run startup migrations: %s", exc)
        try:
            maybe_seed_test_data(repository, templates_dir)
        except RepositoryUnavailable as exc:
            logger.warning("TEST_IMPORT failed: %s", exc)
        if not session.is_ready:
            session.initialize(provider_factory() if provider_factory else None)

    @app.on_event("shutdown")
    async def _shutdown_event() -> None:
        await session.teardown()
