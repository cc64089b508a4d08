"""Profile store access for pairing workflows."""
from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional, Protocol, Sequence, Union

import psycopg2
import psycopg2.extras
from psycopg2.extensions import connection

from .errors import RepositoryUnavailable
from .models import Conflict, ConflictReason, Pairing, Participant, Role

logger = logging.getLogger(__name__)

ConnectionFactory = Callable[[], connection]
PairingOutcome = Union[Pairing, Conflict]

SCHEMA_STATEMENTS: Sequence[str] = (
    """
    CREATE TABLE IF NOT EXISTS participants (
      id          TEXT PRIMARY KEY,
      role        TEXT,
      data        JSONB NOT NULL DEFAULT '{}'::jsonb,
      created_at  TIMESTAMPTZ NOT NULL DEFAULT now(),
      updated_at  TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_participants_role ON participants(role)",
    """
    CREATE TABLE IF NOT EXISTS pairings (
      id          TEXT PRIMARY KEY,
      mentee_id   TEXT NOT NULL UNIQUE REFERENCES participants(id),
      mentor_id   TEXT NOT NULL REFERENCES participants(id),
      created_at  TIMESTAMPTZ NOT NULL DEFAULT now(),
      CHECK (mentee_id <> mentor_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_pairings_mentor ON pairings(mentor_id)",
)


class ProfileRepository(Protocol):
    """Storage contract the engine relies on."""

    def get_participant(self, participant_id: str) -> Optional[Participant]:
        ...

    def list_participants(self, role: Optional[Role] = None) -> List[Participant]:
        ...

    def list_pairings(
        self, mentee_id: Optional[str] = None, mentor_id: Optional[str] = None
    ) -> List[Pairing]:
        ...

    def create_pairing_if_absent(
        self, mentee_id: str, mentor_id: str, *, capacity: int
    ) -> PairingOutcome:
        """Atomically persist a pairing or report why it was refused."""
        ...

    def save_participant(self, participant: Participant) -> Participant:
        ...


def _row_to_participant(row) -> Participant:
    document = dict(row.get("data") or {})
    document["role"] = row.get("role")
    return Participant.from_document(row["id"], document)


def _row_to_pairing(row) -> Pairing:
    return Pairing(
        id=str(row["id"]),
        mentee_id=str(row["mentee_id"]),
        mentor_id=str(row["mentor_id"]),
        created_at=row["created_at"],
    )


class PostgresProfileRepository:
    """``ProfileRepository`` backed by PostgreSQL through psycopg2."""

    def __init__(self, conn_factory: ConnectionFactory) -> None:
        self._conn_factory = conn_factory

    @contextmanager
    def _connection(self) -> Iterator[connection]:
        try:
            conn = self._conn_factory()
        except (psycopg2.OperationalError, psycopg2.InterfaceError) as exc:
            logger.warning("Profile store connection failed: %s", exc)
            raise RepositoryUnavailable(str(exc)) from exc
        try:
            with conn:
                yield conn
        except (psycopg2.OperationalError, psycopg2.InterfaceError) as exc:
            logger.warning("Profile store operation failed: %s", exc)
            raise RepositoryUnavailable(str(exc)) from exc
        finally:
            conn.close()

    def get_participant(self, participant_id: str) -> Optional[Participant]:
        with self._connection() as conn, conn.cursor(
            cursor_factory=psycopg2.extras.RealDictCursor
        ) as cur:
            cur.execute(
                "SELECT id, role, data FROM participants WHERE id = %s",
                (participant_id,),
            )
            row = cur.fetchone()
        return _row_to_participant(row) if row else None

    def list_participants(self, role: Optional[Role] = None) -> List[Participant]:
        with self._connection() as conn, conn.cursor(
            cursor_factory=psycopg2.extras.RealDictCursor
        ) as cur:
            if role is None:
                cur.execute("SELECT id, role, data FROM participants ORDER BY id")
            else:
                # Profiles written by other clients may use any accepted role alias.
                cur.execute(
                    "SELECT id, role, data FROM participants"
                    " WHERE lower(btrim(role)) = ANY(%s) ORDER BY id",
                    (list(role.aliases),),
                )
            rows = cur.fetchall()
        return [_row_to_participant(row) for row in rows]

    def list_pairings(
        self, mentee_id: Optional[str] = None, mentor_id: Optional[str] = None
    ) -> List[Pairing]:
        clauses: List[str] = []
        params: List[str] = []
        if mentee_id is not None:
            clauses.append("mentee_id = %s")
            params.append(mentee_id)
        if mentor_id is not None:
            clauses.append("mentor_id = %s")
            params.append(mentor_id)
        sql = "SELECT id, mentee_id, mentor_id, created_at FROM pairings"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY created_at, id"
        with self._connection() as conn, conn.cursor(
            cursor_factory=psycopg2.extras.RealDictCursor
        ) as cur:
            cur.execute(sql, params)
            rows = cur.fetchall()
        return [_row_to_pairing(row) for row in rows]

    def create_pairing_if_absent(
        self, mentee_id: str, mentor_id: str, *, capacity: int
    ) -> PairingOutcome:
        if mentee_id == mentor_id:
            return Conflict(ConflictReason.ROLE_MISMATCH)

        with self._connection() as conn, conn.cursor(
            cursor_factory=psycopg2.extras.RealDictCursor
        ) as cur:
            # Row locks in id order serialise racing writers for the same mentee or mentor.
            cur.execute(
                "SELECT id, role FROM participants WHERE id IN (%s, %s) ORDER BY id FOR UPDATE",
                (mentee_id, mentor_id),
            )
            roles = {row["id"]: Role.parse(row["role"]) for row in cur.fetchall()}
            if roles.get(mentee_id) is not Role.MENTEE or roles.get(mentor_id) is not Role.MENTOR:
                return Conflict(ConflictReason.ROLE_MISMATCH)

            cur.execute("SELECT 1 FROM pairings WHERE mentee_id = %s", (mentee_id,))
            if cur.fetchone():
                return Conflict(ConflictReason.MENTEE_ALREADY_PAIRED)

            cur.execute(
                "SELECT COUNT(*) AS assigned FROM pairings WHERE mentor_id = %s",
                (mentor_id,),
            )
            if int(cur.fetchone()["assigned"]) >= capacity:
                return Conflict(ConflictReason.MENTOR_AT_CAPACITY)

            cur.execute(
                """
                INSERT INTO pairings(id, mentee_id, mentor_id, created_at)
                VALUES (%s, %s, %s, now())
                ON CONFLICT (mentee_id) DO NOTHING
                RETURNING id, mentee_id, mentor_id, created_at
                """,
                (uuid.uuid4().hex, mentee_id, mentor_id),
            )
            row = cur.fetchone()
        if not row:
            return Conflict(ConflictReason.MENTEE_ALREADY_PAIRED)
        return _row_to_pairing(row)

    def save_participant(self, participant: Participant) -> Participant:
        document = dict(participant.attributes)
        with self._connection() as conn, conn.cursor() as cur:
            cur.execute(
                """
                INSERT INTO participants(id, role, data, created_at, updated_at)
                VALUES (%s, %s, %s, now(), now())
                ON CONFLICT (id)
                DO UPDATE SET role=EXCLUDED.role, data=EXCLUDED.data, updated_at=now()
                """,
                (
                    participant.id,
                    participant.role.value if participant.role else None,
                    psycopg2.extras.Json(document),
                ),
            )
        return participant


__all__ = [
    "SCHEMA_STATEMENTS",
    "ConnectionFactory",
    "PairingOutcome",
    "ProfileRepository",
    "PostgresProfileRepository",
]
