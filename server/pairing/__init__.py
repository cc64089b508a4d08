"""Pairing engine package exposing the repository contract and the match flow."""
from .errors import IdentityUnavailable, PairingError, RepositoryUnavailable
from .memory import InMemoryProfileRepository
from .models import (
    Conflict,
    ConflictReason,
    MatchedPairing,
    MatchResult,
    MatchStatus,
    Pairing,
    Participant,
    Role,
)
from .repository import PostgresProfileRepository, ProfileRepository
from .scoring import build_weights, score_pair, select_best
from .service import resolve_match

__all__ = [
    "Conflict",
    "ConflictReason",
    "IdentityUnavailable",
    "InMemoryProfileRepository",
    "MatchedPairing",
    "MatchResult",
    "MatchStatus",
    "Pairing",
    "PairingError",
    "Participant",
    "PostgresProfileRepository",
    "ProfileRepository",
    "RepositoryUnavailable",
    "Role",
    "build_weights",
    "resolve_match",
    "score_pair",
    "select_best",
]
