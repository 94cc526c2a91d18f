import asyncio

import pytest

from rea.noop_error_recovery import NoopErrorRecovery
from rea.precedents import PrecedentRetriever, RetrievalOptions


DILEMMA = {
    "title": "Ventilator allocation",
    "description": "Allocate scarce ventilators among critically ill patients.",
    "possible_actions": [{"id": "allocate_by_prognosis"}, {"id": "lottery"}],
}


def _precedent(title, description, paths=True):
    return {
        "title": title,
        "description": description,
        "reasoning_paths": [{"framework": "Utilitarianism"}] if paths else [],
    }


class _FixedScorer:
    def __init__(self, score):
        self.value = score
        self.calls = []

    async def score(self, dilemma, action, precedent):
        self.calls.append(action)
        return self.value


class _FailingScorer:
    async def score(self, dilemma, action, precedent):
        raise RuntimeError("scorer offline")


def _run(retriever, *args, **kwargs):
    return asyncio.run(retriever.find_relevant_precedents(*args, **kwargs))


@pytest.mark.parametrize("dilemma,precedents", [
    (None, []),
    (DILEMMA, None),
    ({"possible_actions": ["x"]}, [_precedent("t", "d")]),
])
def test_invalid_inputs_return_empty(dilemma, precedents):
    assert _run(PrecedentRetriever(), dilemma, precedents) == []


def test_threshold_must_be_numeric():
    with pytest.raises(TypeError):
        _run(PrecedentRetriever(), DILEMMA, [], threshold="high")


def test_results_sorted_bounded_and_above_threshold():
    precedents = [
        _precedent("Ventilator allocation", "Allocate scarce ventilators among critically ill patients."),
        _precedent("Organ allocation", "Allocate scarce organs among waiting patients."),
        _precedent("Library hours", "A town debates extending weekend opening hours."),
        _precedent("No paths", "Allocate scarce ventilators", paths=False),
        {"description": "untitled", "reasoning_paths": [{}]},
    ]
    retriever = PrecedentRetriever(relevance_scorer=_FixedScorer(0.5))
    results = _run(retriever, DILEMMA, precedents, threshold=0.3, max_results=2)

    assert 0 < len(results) <= 2
    scores = [r["total_similarity_score"] for r in results]
    assert scores == sorted(scores, reverse=True)
    assert all(s >= 0.3 for s in scores)
    assert all(r["title"] != "No paths" for r in results)
    assert results[0]["title"] == "Ventilator allocation"
    assert results[0]["action_relevance"] == pytest.approx(0.5)


def test_scorer_awaited_once_per_action():
    scorer = _FixedScorer(0.8)
    retriever = PrecedentRetriever(relevance_scorer=scorer)
    _run(retriever, DILEMMA, [_precedent("Ventilator allocation", "x")], threshold=0.0)
    assert scorer.calls == ["allocate_by_prognosis", "lottery"]


def test_mapping_scores_are_coerced():
    class _DictScorer:
        async def score(self, dilemma, action, precedent):
            return {"base_score": 0.2, "boosted_score": 0.9}

    retriever = PrecedentRetriever(relevance_scorer=_DictScorer())
    results = _run(retriever, DILEMMA, [_precedent("Ventilator allocation", "x")], threshold=0.0)
    assert results[0]["action_relevance"] == pytest.approx(0.9)


def test_scorer_failure_uses_recovery_default():
    recovery = NoopErrorRecovery()
    retriever = PrecedentRetriever(relevance_scorer=_FailingScorer(), error_recovery=recovery)
    results = _run(retriever, DILEMMA, [_precedent("Ventilator allocation", "x")], threshold=0.0)
    assert results[0]["action_relevance"] == pytest.approx(0.5)
    assert recovery.handled == ["scorer offline", "scorer offline"]


def test_max_action_score_option():
    class _PerActionScorer:
        async def score(self, dilemma, action, precedent):
            return 0.9 if action == "lottery" else 0.1

    retriever = PrecedentRetriever(relevance_scorer=_PerActionScorer())
    precedents = [_precedent("Ventilator allocation", "x")]
    mean = _run(retriever, DILEMMA, precedents, threshold=0.0)
    best = _run(retriever, DILEMMA, precedents, threshold=0.0, use_max_action_score=True)
    assert mean[0]["action_relevance"] == pytest.approx(0.5)
    assert best[0]["action_relevance"] == pytest.approx(0.9)


def test_results_are_copies():
    precedent = _precedent("Ventilator allocation", "x")
    results = _run(PrecedentRetriever(relevance_scorer=_FixedScorer(0.5)), DILEMMA, [precedent], threshold=0.0)
    assert "total_similarity_score" not in precedent
    assert results[0] is not precedent


def test_retrieval_options_validation():
    with pytest.raises(ValueError):
        RetrievalOptions(max_results=-1)
    with pytest.raises(ValueError):
        RetrievalOptions(action_weight="heavy")


def test_rank_by_dilemma_similarity():
    retriever = PrecedentRetriever()
    precedents = [
        _precedent("Library hours", "A town debates extending weekend opening hours."),
        dict(DILEMMA, reasoning_paths=[{"framework": "Deontology"}]),
    ]
    ranked = retriever.rank_by_dilemma_similarity(DILEMMA, precedents, threshold=0.5)
    assert [p["title"] for p in ranked] == ["Ventilator allocation"]
    assert ranked[0]["similarity"] == pytest.approx(1.0)


def test_recovery_failure_falls_back_to_neutral_relevance():
    class _BrokenRecovery:
        async def handle_error(self, error_msg, *, retry_func=None, default=None, diagnostics=None):
            raise RuntimeError("recovery offline")

    retriever = PrecedentRetriever(relevance_scorer=_FailingScorer(), error_recovery=_BrokenRecovery())
    results = _run(retriever, DILEMMA, [_precedent("Ventilator allocation", "x")], threshold=0.0)
    assert results[0]["action_relevance"] == pytest.approx(0.5)
