"""High level orchestration for the mentee to mentor pairing flow."""
from __future__ import annotations

import logging
from collections import Counter
from typing import List, Mapping, Optional

from .models import (
    MatchedPairing,
    MatchResult,
    Pairing,
    Participant,
    Role,
)
from .repository import ProfileRepository
from .scoring import ScoredCandidate, build_weights, rank_candidates, select_best
from .settings import MENTOR_CAPACITY

logger = logging.getLogger(__name__)

MAX_CONFLICT_RETRIES = 1


def _existing_matches(repository: ProfileRepository, requester: Participant) -> List[MatchedPairing]:
    if requester.role is Role.MENTEE:
        pairings = repository.list_pairings(mentee_id=requester.id)
    else:
        pairings = repository.list_pairings(mentor_id=requester.id)
    pairings = sorted(pairings, key=lambda p: (p.created_at, p.id))

    matches: List[MatchedPairing] = []
    for pairing in pairings:
        counterpart_id = pairing.counterpart_of(requester.id)
        counterpart = repository.get_participant(counterpart_id)
        if counterpart is None:
            logger.warning(
                "Pairing %s references missing participant %s", pairing.id, counterpart_id
            )
        matches.append(MatchedPairing(pairing=pairing, counterpart=counterpart))
    return matches


def _eligible_mentors(
    repository: ProfileRepository, requester: Participant, capacity: int
) -> List[Participant]:
    mentors = [
        mentor
        for mentor in repository.list_participants(Role.MENTOR)
        if mentor.id != requester.id and mentor.role is Role.MENTOR and mentor.is_complete()
    ]
    assigned = Counter(pairing.mentor_id for pairing in repository.list_pairings())
    return [mentor for mentor in mentors if assigned[mentor.id] < capacity]


def _select_mentor(
    repository: ProfileRepository,
    requester: Participant,
    capacity: int,
    weights: Mapping[str, int],
) -> Optional[ScoredCandidate]:
    candidates = _eligible_mentors(repository, requester, capacity)
    if not candidates:
        return None
    if logger.isEnabledFor(logging.DEBUG):
        ranking = rank_candidates(requester, candidates, weights)
        logger.debug(
            "Candidates for %s: %s",
            requester.id,
            ", ".join(f"{mentor.id}={score}" for mentor, score in ranking),
        )
    return select_best(requester, candidates, weights)


def resolve_match(
    repository: ProfileRepository,
    requester_id: str,
    *,
    capacity: Optional[int] = None,
    weights: Optional[Mapping[str, int]] = None,
) -> MatchResult:
    """Return the requester's pairing, creating it on the first call for a mentee.

    Once a pairing exists for an identity it is returned as is and never
    recomputed. Mentors only ever receive pairings. ``UNMATCHED`` is a normal
    outcome; storage failures surface as
    :class:`~pairing.errors.RepositoryUnavailable`.
    """
    capacity = MENTOR_CAPACITY if capacity is None else capacity
    if capacity < 1:
        raise ValueError(f"capacity must be a positive integer, got {capacity!r}")
    weights = weights or build_weights()

    requester = repository.get_participant(requester_id)
    if requester is None:
        logger.info("Participant %s has no profile yet", requester_id)
        return MatchResult.not_found()
    if requester.role is None:
        logger.info("Participant %s is not eligible, missing: role", requester_id)
        return MatchResult.not_eligible()

    # Later profile edits never hide a pairing that already exists.
    existing = _existing_matches(repository, requester)
    if existing:
        return MatchResult.matched(existing, requester.role)

    if not requester.is_complete():
        logger.info(
            "Participant %s is not eligible, missing: %s",
            requester_id,
            ", ".join(requester.missing_attributes()),
        )
        return MatchResult.not_eligible()

    if requester.role is Role.MENTOR:
        return MatchResult.unmatched()

    conflicts = 0
    while True:
        selection = _select_mentor(repository, requester, capacity, weights)
        if selection is None:
            logger.info("No mentor under capacity for mentee %s", requester.id)
            return MatchResult.unmatched()
        mentor, score = selection

        outcome = repository.create_pairing_if_absent(requester.id, mentor.id, capacity=capacity)
        if isinstance(outcome, Pairing):
            logger.info(
                "Paired mentee %s with mentor %s (score %s)", requester.id, mentor.id, score
            )
            return MatchResult.matched(
                [MatchedPairing(pairing=outcome, counterpart=mentor)], requester.role
            )

        existing = _existing_matches(repository, requester)
        if existing:
            return MatchResult.matched(existing, requester.role)

        conflicts += 1
        if conflicts > MAX_CONFLICT_RETRIES:
            logger.warning(
                "Giving up pairing mentee %s after %s conflicts (last: %s)",
                requester.id,
                conflicts,
                outcome.reason.value,
            )
            return MatchResult.unmatched()
        logger.info(
            "Pairing mentee %s with mentor %s conflicted (%s), retrying",
            requester.id,
            mentor.id,
            outcome.reason.value,
        )


__all__ = ["MAX_CONFLICT_RETRIES", "resolve_match"]
