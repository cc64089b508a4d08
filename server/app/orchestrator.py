"""Request orchestration: authenticate, resolve the pairing, shape the response."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

from fastapi.concurrency import run_in_threadpool

from pairing import (
    MatchedPairing,
    MatchResult,
    MatchStatus,
    ProfileRepository,
    Role,
    resolve_match,
)
from pairing.errors import IdentityUnavailable, RepositoryUnavailable

from .identity import IdentitySession

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"
PROFILE_PATH = "/signup"

HEADLINES = {
    Role.MENTEE: "You were paired with:",
    Role.MENTOR: "You are mentoring:",
}


def _contact(item: MatchedPairing, requester_role: Optional[Role]) -> Dict[str, Any]:
    participant = item.counterpart
    if participant is None:
        # Profile gone from the store: keep the pairing, contact details unknown.
        counterpart_id = (
            item.pairing.mentor_id if requester_role is Role.MENTEE else item.pairing.mentee_id
        )
        contact: Dict[str, Any] = dict.fromkeys(("name", "phone", "pronouns", "city"))
        contact["id"] = counterpart_id
    else:
        contact = {
            "id": participant.id,
            "name": participant.name,
            "phone": participant.phone,
            "pronouns": participant.get("pronouns"),
            "city": participant.get("city"),
        }
    contact["profile_available"] = participant is not None
    contact["paired_at"] = item.pairing.created_at.isoformat()
    return contact


def present_match(result: MatchResult) -> Dict[str, Any]:
    """Map an engine result onto the caller-facing response body."""

    if result.status in (MatchStatus.NOT_FOUND, MatchStatus.NOT_ELIGIBLE):
        return {
            "status": "profile_required",
            "reason": result.status.value,
            "redirect": PROFILE_PATH,
        }
    if result.status is MatchStatus.UNMATCHED:
        return {
            "status": "no_match_yet",
            "message": "No match available at the moment, try again later.",
        }

    requester_role = result.requester_role
    matches = [_contact(item, requester_role) for item in result.matches]
    return {
        "status": "matched",
        "role": requester_role.value if requester_role else None,
        "headline": HEADLINES.get(requester_role) if requester_role else None,
        "matches": matches,
    }


def _unavailable(message: str) -> Tuple[int, Dict[str, Any]]:
    return 503, {"status": "unavailable", "message": message}


async def handle_match_request(
    session: IdentitySession,
    repository: ProfileRepository,
    authorization: Optional[str],
    *,
    capacity: Optional[int] = None,
) -> Tuple[int, Dict[str, Any]]:
    try:
        requester_id = await session.authenticate(authorization)
    except IdentityUnavailable as exc:
        logger.warning("Identity check failed: %s", exc)
        return _unavailable("Identity service temporarily unavailable, try again later.")
    if not requester_id:
        return 401, {"status": "unauthenticated", "redirect": LOGIN_PATH}

    try:
        result = await run_in_threadpool(
            resolve_match, repository, requester_id, capacity=capacity
        )
    except RepositoryUnavailable as exc:
        logger.warning("Profile store unavailable for %s: %s", requester_id, exc)
        return _unavailable("Profile store temporarily unavailable, try again later.")

    return 200, present_match(result)


__all__ = ["present_match", "handle_match_request", "LOGIN_PATH", "PROFILE_PATH"]
