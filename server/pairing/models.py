"""Typed records shared by the repository, the engine and the web layer."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class Role(str, Enum):
    MENTEE = "bixo"
    MENTOR = "veterano"

    @classmethod
    def parse(cls, value: Any) -> Optional["Role"]:
        """Map stored or user supplied role names onto :class:`Role`.

        Both the stored values (``bixo``/``veterano``) and the English aliases
        (``mentee``/``mentor``) are accepted, case-insensitively. Anything
        else yields ``None`` so the profile is treated as incomplete.
        """
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        if not text:
            return None
        return ROLE_ALIASES.get(text)

    @property
    def aliases(self) -> Tuple[str, ...]:
        """Lower-case names under which this role may be stored."""
        return tuple(sorted(name for name, role in ROLE_ALIASES.items() if role is self))


ROLE_ALIASES: Dict[str, Role] = {
    "bixo": Role.MENTEE,
    "mentee": Role.MENTEE,
    "veterano": Role.MENTOR,
    "mentor": Role.MENTOR,
}


REQUIRED_ATTRIBUTES: Tuple[str, ...] = (
    "name",
    "phone",
    "pronouns",
    "ethnicity",
    "state",
    "city",
    "parties",
    "games",
    "sports",
)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


@dataclass
class Participant:
    id: str
    role: Optional[Role]
    attributes: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_document(cls, participant_id: str, document: Optional[Dict[str, Any]]) -> "Participant":
        data = dict(document or {})
        role = Role.parse(data.pop("role", None))
        data.pop("id", None)
        return cls(id=str(participant_id), role=role, attributes=data)

    def to_document(self) -> Dict[str, Any]:
        document = dict(self.attributes)
        document["role"] = self.role.value if self.role else None
        return document

    def get(self, attribute: str, default: Any = None) -> Any:
        return self.attributes.get(attribute, default)

    @property
    def name(self) -> Optional[str]:
        return self.attributes.get("name")

    @property
    def phone(self) -> Optional[str]:
        return self.attributes.get("phone")

    def missing_attributes(self) -> List[str]:
        return [attr for attr in REQUIRED_ATTRIBUTES if _is_blank(self.attributes.get(attr))]

    def is_complete(self) -> bool:
        return self.role is not None and not self.missing_attributes()


@dataclass(frozen=True)
class Pairing:
    id: str
    mentee_id: str
    mentor_id: str
    created_at: datetime

    def counterpart_of(self, participant_id: str) -> str:
        return self.mentor_id if participant_id == self.mentee_id else self.mentee_id


class ConflictReason(str, Enum):
    MENTEE_ALREADY_PAIRED = "mentee_already_paired"
    MENTOR_AT_CAPACITY = "mentor_at_capacity"
    ROLE_MISMATCH = "role_mismatch"


@dataclass(frozen=True)
class Conflict:
    """Returned instead of a :class:`Pairing` when a conditional write loses."""

    reason: ConflictReason


class MatchStatus(str, Enum):
    MATCHED = "matched"
    UNMATCHED = "unmatched"
    NOT_ELIGIBLE = "not_eligible"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class MatchedPairing:
    pairing: Pairing
    # None when the counterpart profile has disappeared from the store
    counterpart: Optional[Participant]


@dataclass
class MatchResult:
    status: MatchStatus
    matches: List[MatchedPairing] = field(default_factory=list)
    requester_role: Optional[Role] = None

    @classmethod
    def matched(
        cls, matches: List[MatchedPairing], requester_role: Optional[Role] = None
    ) -> "MatchResult":
        return cls(MatchStatus.MATCHED, list(matches), requester_role)

    @classmethod
    def unmatched(cls) -> "MatchResult":
        return cls(MatchStatus.UNMATCHED)

    @classmethod
    def not_found(cls) -> "MatchResult":
        return cls(MatchStatus.NOT_FOUND)

    @classmethod
    def not_eligible(cls) -> "MatchResult":
        return cls(MatchStatus.NOT_ELIGIBLE)

    @property
    def pairings(self) -> List[Pairing]:
        return [item.pairing for item in self.matches]


__all__ = [
    "Role",
    "ROLE_ALIASES",
    "REQUIRED_ATTRIBUTES",
    "Participant",
    "Pairing",
    "ConflictReason",
    "Conflict",
    "MatchStatus",
    "MatchedPairing",
    "MatchResult",
]
