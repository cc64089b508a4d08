"""
Scoring tests

Covers exact-match weights, missing attributes, the configurable gaming
weight and the deterministic tie-break used by candidate selection.
"""

import random

import pytest

from pairing import Participant, Role
from pairing.scoring import (
    ATTRIBUTE_WEIGHTS,
    build_weights,
    rank_candidates,
    score_pair,
    select_best,
)


def person(pid: str, role: Role = Role.MENTOR, **attributes) -> Participant:
    return Participant(id=pid, role=role, attributes=attributes)


# ============================================================================
# score_pair
# ============================================================================

def test_scenario_a_prefers_same_city_party_and_games():
    mentee = person("me", Role.MENTEE, city="São Paulo", parties=5, games="Sim")
    x = person("X", city="São Paulo", parties=5, games="Sim")
    y = person("Y", city="Rio", parties=5, games="Não")

    assert score_pair(mentee, x) == 5
    assert score_pair(mentee, y) == 2
    best, score = select_best(mentee, [x, y])
    assert best.id == "X"
    assert score == 5


def test_every_attribute_matching_sums_all_weights():
    shared = dict(
        city="Campinas",
        state="SP",
        pronouns="Ela/Dela",
        parties=6,
        games="Sim",
        sports="Não",
        ethnicity="Parda",
        interest="Dados",
    )
    mentee = person("a", Role.MENTEE, **shared)
    mentor = person("b", **shared)
    assert score_pair(mentee, mentor) == sum(build_weights().values())
    assert score_pair(mentee, mentor, build_weights(games_weight=1)) == 10


def test_near_equal_party_values_score_nothing():
    mentee = person("a", Role.MENTEE, parties=7)
    assert score_pair(mentee, person("b", parties=8)) == 0
    assert score_pair(mentee, person("c", parties=7)) == ATTRIBUTE_WEIGHTS["parties"]


def test_party_values_compare_numerically():
    mentee = person("a", Role.MENTEE, parties="5")
    assert score_pair(mentee, person("b", parties=5)) == 2
    assert score_pair(mentee, person("c", parties=5.0)) == 2


def test_missing_attributes_contribute_zero():
    mentee = person("a", Role.MENTEE, city="Rio")
    mentor = person("b", state="RJ")
    assert score_pair(mentee, mentor) == 0
    assert score_pair(person("c", Role.MENTEE), person("d")) == 0


def test_blank_strings_never_match():
    mentee = person("a", Role.MENTEE, city="  ", sports="")
    mentor = person("b", city="  ", sports="")
    assert score_pair(mentee, mentor) == 0


def test_surrounding_whitespace_is_ignored_but_case_is_not():
    mentee = person("a", Role.MENTEE, city=" São Paulo ")
    assert score_pair(mentee, person("b", city="São Paulo")) == 2
    assert score_pair(mentee, person("c", city="são paulo")) == 0


@pytest.mark.parametrize("games_weight", [1, 2])
def test_games_weight_is_configurable(games_weight):
    weights = build_weights(games_weight=games_weight)
    mentee = person("a", Role.MENTEE, games="Neutro")
    assert score_pair(mentee, person("b", games="Neutro"), weights) == games_weight


def test_build_weights_returns_a_copy():
    weights = build_weights()
    weights["city"] = 100
    assert ATTRIBUTE_WEIGHTS["city"] == 2


# ============================================================================
# select_best / rank_candidates
# ============================================================================

def test_select_best_returns_none_without_candidates():
    assert select_best(person("a", Role.MENTEE), []) is None


def test_ties_go_to_lowest_id_regardless_of_listing_order():
    mentee = person("me", Role.MENTEE, city="Rio")
    candidates = [person("m-c", city="Rio"), person("m-a", city="Rio"), person("m-b", city="Rio")]
    assert select_best(mentee, candidates)[0].id == "m-a"
    assert select_best(mentee, list(reversed(candidates)))[0].id == "m-a"


def test_selection_is_deterministic_across_shuffles():
    mentee = person("me", Role.MENTEE, city="Rio", parties=3, games="Sim")
    candidates = [
        person(f"m{i:02d}", city="Rio" if i % 2 else "Niterói", parties=i % 4, games="Sim")
        for i in range(12)
    ]
    expected = select_best(mentee, candidates)[0].id
    rng = random.Random(7)
    for _ in range(20):
        shuffled = candidates[:]
        rng.shuffle(shuffled)
        assert select_best(mentee, shuffled)[0].id == expected


def test_selected_candidate_scores_at_least_every_other():
    mentee = person("me", Role.MENTEE, city="Rio", state="RJ", parties=3, sports="Sim")
    candidates = [
        person("a", city="Rio", parties=4),
        person("b", state="RJ", parties=3, sports="Sim"),
        person("c", city="Rio", state="RJ"),
        person("d"),
    ]
    best, best_score = select_best(mentee, candidates)
    assert all(best_score >= score_pair(mentee, c) for c in candidates)

    ranking = rank_candidates(mentee, candidates)
    assert ranking[0][0].id == best.id
    scores = [score for _, score in ranking]
    assert scores == sorted(scores, reverse=True)
