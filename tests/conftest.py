from typing import Any, Callable, Dict, List, Optional

import pytest

from pairing import Conflict, InMemoryProfileRepository, Participant, Role


def _baseline(participant_id: str, role: Role) -> Dict[str, Any]:
    # Unique per participant so that only explicit overrides score.
    return {
        "name": f"Name {participant_id}",
        "phone": "11900000000",
        "pronouns": f"pronouns-{participant_id}",
        "ethnicity": f"ethnicity-{participant_id}",
        "state": f"state-{participant_id}",
        "city": f"city-{participant_id}",
        "parties": 0 if role is Role.MENTEE else 10,
        "games": f"games-{participant_id}",
        "sports": f"sports-{participant_id}",
    }


@pytest.fixture
def make_profile() -> Callable[..., Participant]:
    def factory(participant_id: str, role: Role = Role.MENTEE, **overrides: Any) -> Participant:
        attributes = _baseline(participant_id, role)
        attributes.update(overrides)
        attributes = {key: value for key, value in attributes.items() if value is not None}
        return Participant(id=participant_id, role=role, attributes=attributes)

    return factory


@pytest.fixture
def repo() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


class RecordingRepository:
    """Wraps a repository, counting calls and allowing scripted write outcomes."""

    def __init__(self, inner, *, create_hook: Optional[Callable[..., Any]] = None) -> None:
        self.inner = inner
        self.create_hook = create_hook
        self.create_calls: List[tuple] = []
        self.failing: Dict[str, Exception] = {}

    def _maybe_fail(self, name: str) -> None:
        if name in self.failing:
            raise self.failing[name]

    def get_participant(self, participant_id):
        self._maybe_fail("get_participant")
        return self.inner.get_participant(participant_id)

    def list_participants(self, role=None):
        self._maybe_fail("list_participants")
        return self.inner.list_participants(role)

    def list_pairings(self, mentee_id=None, mentor_id=None):
        self._maybe_fail("list_pairings")
        return self.inner.list_pairings(mentee_id=mentee_id, mentor_id=mentor_id)

    def create_pairing_if_absent(self, mentee_id, mentor_id, *, capacity):
        self._maybe_fail("create_pairing_if_absent")
        self.create_calls.append((mentee_id, mentor_id, capacity))
        if self.create_hook is not None:
            scripted = self.create_hook(self, mentee_id, mentor_id, capacity)
            if isinstance(scripted, Conflict):
                return scripted
        return self.inner.create_pairing_if_absent(mentee_id, mentor_id, capacity=capacity)

    def save_participant(self, participant):
        return self.inner.save_participant(participant)


@pytest.fixture
def recording():
    def factory(inner, **kwargs) -> RecordingRepository:
        return RecordingRepository(inner, **kwargs)

    return factory
