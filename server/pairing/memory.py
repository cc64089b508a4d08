"""In-process profile store used for local development and tests."""
from __future__ import annotations

import copy
import threading
import uuid
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from .models import Conflict, ConflictReason, Pairing, Participant, Role
from .repository import PairingOutcome


class InMemoryProfileRepository:
    """Dictionary backed ``ProfileRepository``.

    A single lock guards both collections, which makes
    :meth:`create_pairing_if_absent` a real conditional write: the capacity
    check and the insert happen without another writer in between.
    Participants are copied on the way in and out, the way a document store
    hands back fresh snapshots.
    """

    def __init__(self, participants: Optional[Iterable[Participant]] = None) -> None:
        self._lock = threading.Lock()
        self._participants: Dict[str, Participant] = {}
        self._pairings: List[Pairing] = []
        for participant in participants or ():
            self.save_participant(participant)

    def get_participant(self, participant_id: str) -> Optional[Participant]:
        with self._lock:
            participant = self._participants.get(participant_id)
            return copy.deepcopy(participant) if participant else None

    def list_participants(self, role: Optional[Role] = None) -> List[Participant]:
        with self._lock:
            return [
                copy.deepcopy(participant)
                for participant in self._participants.values()
                if role is None or participant.role is role
            ]

    def list_pairings(
        self, mentee_id: Optional[str] = None, mentor_id: Optional[str] = None
    ) -> List[Pairing]:
        with self._lock:
            return [
                pairing
                for pairing in self._pairings
                if (mentee_id is None or pairing.mentee_id == mentee_id)
                and (mentor_id is None or pairing.mentor_id == mentor_id)
            ]

    def create_pairing_if_absent(
        self, mentee_id: str, mentor_id: str, *, capacity: int
    ) -> PairingOutcome:
        with self._lock:
            mentee = self._participants.get(mentee_id)
            mentor = self._participants.get(mentor_id)
            if (
                mentee_id == mentor_id
                or mentee is None
                or mentor is None
                or mentee.role is not Role.MENTEE
                or mentor.role is not Role.MENTOR
            ):
                return Conflict(ConflictReason.ROLE_MISMATCH)
            if any(p.mentee_id == mentee_id for p in self._pairings):
                return Conflict(ConflictReason.MENTEE_ALREADY_PAIRED)
            assigned = sum(1 for p in self._pairings if p.mentor_id == mentor_id)
            if assigned >= capacity:
                return Conflict(ConflictReason.MENTOR_AT_CAPACITY)
            pairing = Pairing(
                id=uuid.uuid4().hex,
                mentee_id=mentee_id,
                mentor_id=mentor_id,
                created_at=datetime.now(timezone.utc),
            )
            self._pairings.append(pairing)
            return pairing

    def save_participant(self, participant: Participant) -> Participant:
        with self._lock:
            self._participants[participant.id] = copy.deepcopy(participant)
        return participant


__all__ = ["InMemoryProfileRepository"]
