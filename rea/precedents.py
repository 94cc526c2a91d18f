import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Mapping, Optional

import numpy as np

from rea.error_recovery_like import ErrorRecoveryLike
from rea.noop_error_recovery import NoopErrorRecovery
from rea.records import action_id, dilemma_actions
from rea.relevance import NEUTRAL_RELEVANCE, ActionRelevanceScorer
from rea.relevance_scorer_like import ActionRelevanceScorerLike
from rea.similarity import SimilarityEngine

logger = logging.getLogger("REA.PrecedentRetrieval")


@dataclass
class RetrievalOptions:
    max_results: int = 5
    description_weight: float = 0.4
    title_weight: float = 0.2
    action_weight: float = 0.4
    use_max_action_score: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.max_results, int) or isinstance(self.max_results, bool) or self.max_results < 0:
            raise ValueError("max_results must be a non-negative integer")
        for name in ("description_weight", "title_weight", "action_weight"):
            weight = getattr(self, name)
            if not isinstance(weight, (int, float)) or weight < 0:
                raise ValueError(f"{name} must be a non-negative number")


def _has_reasoning_paths(precedent: Mapping[str, Any]) -> bool:
    paths = precedent.get("reasoning_paths")
    return isinstance(paths, (list, tuple)) and len(paths) > 0


def _coerce_relevance(result: Any) -> float:
    if isinstance(result, Mapping):
        for key in ("boosted_score", "base_score"):
            value = result.get(key)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                return min(1.0, max(0.0, float(value)))
        return NEUTRAL_RELEVANCE
    if isinstance(result, (int, float)) and not isinstance(result, bool):
        return min(1.0, max(0.0, float(result)))
    return NEUTRAL_RELEVANCE


class PrecedentRetriever:
    """Ranks a precedent collection against a query dilemma.

    Scoring blends description similarity, title similarity and the
    relevance of the dilemma's actions to each precedent. The relevance
    scorer is awaited once per action, in order.
    """

    def __init__(
        self,
        *,
        similarity_engine: Optional[SimilarityEngine] = None,
        relevance_scorer: Optional[ActionRelevanceScorerLike] = None,
        error_recovery: Optional[ErrorRecoveryLike] = None,
        options: Optional[RetrievalOptions] = None,
    ) -> None:
        self.similarity_engine = similarity_engine or SimilarityEngine()
        self.relevance_scorer: ActionRelevanceScorerLike = relevance_scorer or ActionRelevanceScorer()
        self.error_recovery: ErrorRecoveryLike = error_recovery or NoopErrorRecovery()
        self.options = options or RetrievalOptions()
        logger.info(
            "PrecedentRetriever initialized (max_results=%d, weights=%.2f/%.2f/%.2f)",
            self.options.max_results,
            self.options.description_weight,
            self.options.title_weight,
            self.options.action_weight,
        )

    async def find_relevant_precedents(
        self,
        dilemma: Any,
        precedents: Any,
        threshold: float = 0.3,
        options: Optional[RetrievalOptions] = None,
        **overrides: Any,
    ) -> List[Dict[str, Any]]:
        """Return up to ``max_results`` precedents scoring at least ``threshold``.

        Keyword overrides (``max_results=3`` etc.) are applied on top of
        ``options`` or the retriever's configured options.
        """
        if not isinstance(threshold, (int, float)) or isinstance(threshold, bool):
            raise TypeError("threshold must be a number")
        opts = replace(options or self.options, **overrides) if overrides else (options or self.options)

        if not isinstance(dilemma, Mapping) or not isinstance(precedents, (list, tuple)):
            logger.warning("Invalid inputs to find_relevant_precedents; returning no precedents")
            return []
        if not dilemma.get("title") and not dilemma.get("description"):
            logger.warning("Dilemma has neither title nor description; returning no precedents")
            return []

        engine = self.similarity_engine
        candidates = [
            p for p in precedents
            if isinstance(p, Mapping) and _has_reasoning_paths(p) and p.get("title")
        ]
        logger.debug("%d of %d precedents eligible for scoring", len(candidates), len(precedents))

        ranked: List[Dict[str, Any]] = []
        for precedent in candidates:
            description_similarity = engine.similarity(dilemma.get("description"), precedent.get("description"))
            title_similarity = engine.similarity(dilemma.get("title"), precedent.get("title"))
            action_relevance = await self._action_relevance(dilemma, precedent, opts)

            total = (
                opts.description_weight * description_similarity
                + opts.title_weight * title_similarity
                + opts.action_weight * action_relevance
            )
            if total >= threshold:
                ranked.append({
                    **precedent,
                    "total_similarity_score": total,
                    "description_similarity": description_similarity,
                    "title_similarity": title_similarity,
                    "action_relevance": action_relevance,
                })

        ranked.sort(key=lambda p: p["total_similarity_score"], reverse=True)
        results = ranked[: opts.max_results]
        logger.info(
            "Found %d relevant precedents (threshold=%.2f, returned=%d)",
            len(ranked),
            threshold,
            len(results),
        )
        return results

    async def _action_relevance(self, dilemma: Mapping[str, Any], precedent: Mapping[str, Any], opts: RetrievalOptions) -> float:
        scores: List[float] = []
        for action in dilemma_actions(dilemma):
            aid = action_id(action)
            if not aid:
                continue
            try:
                result = await self.relevance_scorer.score(
                    dilemma.get("description"), aid, precedent.get("description")
                )
                scores.append(_coerce_relevance(result))
            except Exception as e:
                logger.warning("Action relevance failed for %r against %r: %s", aid, precedent.get("title"), e)
                try:
                    recovered = await self.error_recovery.handle_error(
                        str(e),
                        default=NEUTRAL_RELEVANCE,
                        diagnostics={"action": aid, "precedent": precedent.get("title")},
                    )
                except Exception as recovery_error:
                    logger.error("Error recovery failed for %r: %s", aid, recovery_error)
                    recovered = NEUTRAL_RELEVANCE
                scores.append(_coerce_relevance(recovered))

        if not scores:
            return NEUTRAL_RELEVANCE
        return max(scores) if opts.use_max_action_score else float(np.mean(scores))

    def rank_by_dilemma_similarity(self, dilemma: Any, precedents: Any, threshold: float = 0.3) -> List[Dict[str, Any]]:
        """Whole-record ranking with the weighted dilemma similarity, no action scoring."""
        if not isinstance(dilemma, Mapping) or not isinstance(precedents, (list, tuple)):
            logger.warning("Invalid inputs to rank_by_dilemma_similarity")
            return []
        scored = []
        for precedent in precedents:
            if not isinstance(precedent, Mapping):
                continue
            score = self.similarity_engine.dilemma_similarity(dilemma, precedent)
            if score >= threshold:
                scored.append({
                    **precedent,
                    "reasoning_paths": list(precedent.get("reasoning_paths") or []),
                    "similarity": score,
                })
        scored.sort(key=lambda p: p["similarity"], reverse=True)
        return scored
