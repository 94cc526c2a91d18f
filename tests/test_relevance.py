import asyncio

import pytest

from rea.relevance import NEUTRAL_RELEVANCE, ActionRelevanceScorer


def _score(scorer, *args):
    return asyncio.run(scorer.score(*args))


@pytest.mark.parametrize("args", [
    (None, "allocate", "precedent"),
    ("dilemma", "", "precedent"),
    ("dilemma", "allocate", None),
    ("dilemma", "   ", "precedent"),
])
def test_missing_input_is_neutral(args):
    assert _score(ActionRelevanceScorer(), *args) == NEUTRAL_RELEVANCE


def test_score_bounded_and_text_driven():
    scorer = ActionRelevanceScorer()
    related = _score(scorer, "hospital triage", "allocate ventilators", "allocate ventilators to patients")
    unrelated = _score(scorer, "hospital triage", "allocate ventilators", "extend library opening hours")
    assert 0.0 <= unrelated < related <= 1.0


def test_contextual_boosting():
    scorer = ActionRelevanceScorer()
    dilemma = {
        "description": "Hospital must allocate ventilators",
        "contexts": ["hospital"],
        "parameters": {"resource_scarcity": 0.8},
    }
    boosted = scorer.apply_contextual_boosting(0.2, "allocate ventilators to patient", dilemma)
    # keywords (hospital, must, allocate, ventilators): 2 hits, medical domain, scarcity
    assert boosted == pytest.approx(0.2 + 0.1 + 0.1 + 0.08)


def test_boosting_capped_at_one():
    scorer = ActionRelevanceScorer()
    dilemma = {"description": "privacy data", "parameters": {"privacy_impact": 1.0}}
    assert scorer.apply_contextual_boosting(0.99, "privacy data", dilemma) == 1.0


def test_action_mapping_text():
    assert ActionRelevanceScorer._action_text({"action": "notify_users"}) == "notify users"
    assert ActionRelevanceScorer._action_text({"description": "Tell users"}) == "Tell users"
