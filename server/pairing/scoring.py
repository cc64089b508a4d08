"""Weighted attribute-match scoring between a mentee and candidate mentors."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from utils import normalize_optional_str, parse_optional_int

from .models import Participant
from .settings import GAMES_WEIGHT

# Exact equality only: "parties" 7 vs 8 scores nothing.
ATTRIBUTE_WEIGHTS: Dict[str, int] = {
    "city": 2,
    "state": 1,
    "pronouns": 1,
    "parties": 2,
    "games": 1,
    "sports": 1,
    "ethnicity": 1,
    "interest": 1,
}

NUMERIC_ATTRIBUTES = frozenset({"parties"})

ScoredCandidate = Tuple[Participant, int]


def build_weights(games_weight: Optional[int] = None) -> Dict[str, int]:
    weights = dict(ATTRIBUTE_WEIGHTS)
    weights["games"] = GAMES_WEIGHT if games_weight is None else games_weight
    return weights


def _comparable(attribute: str, value: Any) -> Any:
    if attribute in NUMERIC_ATTRIBUTES:
        return parse_optional_int(value)
    if isinstance(value, str):
        return normalize_optional_str(value)
    return value


def score_pair(
    mentee: Participant,
    mentor: Participant,
    weights: Optional[Mapping[str, int]] = None,
) -> int:
    """Sum the weights of every attribute both profiles share exactly.

    Attributes missing on either side contribute nothing.
    """
    total = 0
    for attribute, weight in (weights or build_weights()).items():
        left = _comparable(attribute, mentee.get(attribute))
        right = _comparable(attribute, mentor.get(attribute))
        if left is None or right is None:
            continue
        if left == right:
            total += weight
    return total


def order_candidates(candidates: Iterable[Participant]) -> List[Participant]:
    return sorted(candidates, key=lambda candidate: candidate.id)


def select_best(
    mentee: Participant,
    candidates: Iterable[Participant],
    weights: Optional[Mapping[str, int]] = None,
) -> Optional[ScoredCandidate]:
    """Return the highest scoring candidate; ties go to the lowest id."""
    weights = weights or build_weights()
    best: Optional[ScoredCandidate] = None
    for candidate in order_candidates(candidates):
        score = score_pair(mentee, candidate, weights)
        if best is None or score > best[1]:
            best = (candidate, score)
    return best


def rank_candidates(
    mentee: Participant,
    candidates: Iterable[Participant],
    weights: Optional[Mapping[str, int]] = None,
) -> List[ScoredCandidate]:
    weights = weights or build_weights()
    scored = [(candidate, score_pair(mentee, candidate, weights)) for candidate in candidates]
    return sorted(scored, key=lambda item: (-item[1], item[0].id))


__all__ = [
    "ATTRIBUTE_WEIGHTS",
    "build_weights",
    "score_pair",
    "order_candidates",
    "select_best",
    "rank_candidates",
]
