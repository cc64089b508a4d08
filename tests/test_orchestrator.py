import asyncio
from datetime import datetime, timezone

import pytest

from app.identity import IdentitySession, StaticIdentityProvider
from app.orchestrator import LOGIN_PATH, PROFILE_PATH, handle_match_request, present_match
from pairing import (
    MatchedPairing,
    MatchResult,
    Pairing,
    Participant,
    Role,
)
from pairing.errors import IdentityUnavailable, RepositoryUnavailable

TOKENS = {"tok-me": "me", "tok-ghost": "ghost", "tok-m": "m"}


@pytest.fixture
def session():
    session = IdentitySession()
    session.initialize(StaticIdentityProvider(TOKENS))
    return session


def call(session, repo, header):
    return asyncio.run(handle_match_request(session, repo, header, capacity=2))


def test_missing_credentials_redirect_to_login(session, repo):
    status, body = call(session, repo, None)
    assert status == 401
    assert body == {"status": "unauthenticated", "redirect": LOGIN_PATH}


def test_unknown_profile_redirects_to_profile_completion(session, repo):
    status, body = call(session, repo, "Bearer tok-ghost")
    assert status == 200
    assert body["status"] == "profile_required"
    assert body["reason"] == "not_found"
    assert body["redirect"] == PROFILE_PATH


def test_incomplete_profile_also_redirects(session, repo, make_profile):
    repo.save_participant(make_profile("me", phone=None))
    status, body = call(session, repo, "Bearer tok-me")
    assert (status, body["status"], body["reason"]) == (200, "profile_required", "not_eligible")


def test_no_mentor_available_is_no_match_yet(session, repo, make_profile):
    repo.save_participant(make_profile("me"))
    status, body = call(session, repo, "Bearer tok-me")
    assert status == 200
    assert body["status"] == "no_match_yet"


def test_matched_response_carries_counterpart_contact(session, repo, make_profile):
    repo.save_participant(make_profile("me"))
    repo.save_participant(
        make_profile("m", Role.MENTOR, name="Ana", phone="11999990000", city="Campinas")
    )

    status, body = call(session, repo, "Bearer tok-me")

    assert status == 200
    assert body["status"] == "matched"
    assert body["role"] == "bixo"
    [match] = body["matches"]
    assert match["id"] == "m"
    assert match["name"] == "Ana"
    assert match["phone"] == "11999990000"
    assert match["city"] == "Campinas"
    assert match["paired_at"]

    status, mentor_body = call(session, repo, "Bearer tok-m")
    assert mentor_body["role"] == "veterano"
    assert [m["id"] for m in mentor_body["matches"]] == ["me"]


def test_store_outage_is_distinct_from_no_match(session, repo, recording, make_profile):
    repo.save_participant(make_profile("me"))
    spy = recording(repo)
    spy.failing["list_participants"] = RepositoryUnavailable("timeout")

    status, body = call(session, spy, "Bearer tok-me")

    assert status == 503
    assert body["status"] == "unavailable"


def test_identity_outage_is_unavailable(repo):
    class DownProvider(StaticIdentityProvider):
        async def verify_token(self, token):
            raise IdentityUnavailable("provider down")

    session = IdentitySession()
    session.initialize(DownProvider())
    status, body = call(session, repo, "Bearer tok-me")
    assert (status, body["status"]) == (503, "unavailable")


def test_session_never_ready_is_unavailable(monkeypatch, repo):
    monkeypatch.setenv("IDENTITY_READY_TIMEOUT", "0.01")
    status, body = call(IdentitySession(), repo, "Bearer tok-me")
    assert (status, body["status"]) == (503, "unavailable")


def test_present_match_keeps_pairings_with_missing_counterparts():
    when = datetime(2025, 2, 10, tzinfo=timezone.utc)
    mentee = Participant(id="b1", role=Role.MENTEE, attributes={"name": "Duda", "phone": "1"})
    result = MatchResult.matched(
        [
            MatchedPairing(Pairing("p1", "b1", "m", when), mentee),
            MatchedPairing(Pairing("p2", "b2", "m", when), None),
        ],
        Role.MENTOR,
    )

    body = present_match(result)

    assert body["status"] == "matched"
    assert body["headline"] == "You are mentoring:"
    assert [m["id"] for m in body["matches"]] == ["b1", "b2"]
    present, missing = body["matches"]
    assert present["profile_available"] and present["name"] == "Duda"
    assert present["paired_at"] == when.isoformat()
    assert missing["profile_available"] is False
    assert missing["name"] is None and missing["phone"] is None
    assert missing["paired_at"] == when.isoformat()


def test_mentee_whose_mentor_vanished_still_sees_the_pairing():
    when = datetime(2025, 2, 10, tzinfo=timezone.utc)
    result = MatchResult.matched([MatchedPairing(Pairing("p1", "b1", "m", when), None)], Role.MENTEE)

    [match] = present_match(result)["matches"]

    assert match["id"] == "m"
    assert match["profile_available"] is False


def test_present_match_unmatched_shape():
    assert present_match(MatchResult.unmatched())["status"] == "no_match_yet"
    assert present_match(MatchResult.not_found())["redirect"] == PROFILE_PATH
