import logging
import math
import numbers
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

import numpy as np

from rea.records import action_name, dilemma_actions, factor_name
from rea.similarity_cache import SimilarityCache
from rea.text_similarity import (
    normalize_text,
    normalized_levenshtein,
    semantic_similarity_approximation,
    short_string_ratio,
    significant_words,
)

logger = logging.getLogger("REA.Similarity")

MISSING_SCORE = 0.0
SHAPE_MISMATCH_SCORE = 0.1
NO_COMMON_KEYS_SCORE = 0.1
NO_DIMENSION_SCORE = 0.1


class ValueKind(Enum):
    NUMBER = "number"
    STRING = "string"
    SEQUENCE = "sequence"
    RECORD = "record"
    BOOLEAN = "boolean"


def value_kind(value: Any) -> Optional[ValueKind]:
    """Classify a comparand; bool is checked before numbers on purpose."""
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, numbers.Real):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, Mapping):
        return ValueKind.RECORD
    if isinstance(value, (list, tuple)):
        return ValueKind.SEQUENCE
    return None


@dataclass
class DilemmaWeights:
    title: float = 0.1
    description: float = 0.4
    situation: float = 0.2
    contextual_factors: float = 0.2
    actions: float = 0.1

    def __post_init__(self) -> None:
        for name, weight in asdict(self).items():
            if not isinstance(weight, (int, float)) or weight < 0:
                raise ValueError(f"{name} weight must be a non-negative number")


class SimilarityEngine:
    """Structural, textual and dilemma-level similarity in [0, 1].

    The string cache is injected; pass the same ``SimilarityCache`` to
    several engines to share memoised scores between them.
    """

    def __init__(
        self,
        *,
        cache: Optional[SimilarityCache] = None,
        weights: Optional[DilemmaWeights] = None,
        short_string_length: int = 10,
        long_text_length: int = 1000,
    ) -> None:
        if not isinstance(short_string_length, int) or short_string_length < 0:
            raise ValueError("short_string_length must be a non-negative integer")
        if not isinstance(long_text_length, int) or long_text_length < 1:
            raise ValueError("long_text_length must be a positive integer")
        self.cache = cache if cache is not None else SimilarityCache()
        self.weights = weights or DilemmaWeights()
        self.short_string_length = short_string_length
        self.long_text_length = long_text_length
        self._by_kind: Dict[ValueKind, Callable[[Any, Any], float]] = {
            ValueKind.NUMBER: self.numeric_similarity,
            ValueKind.STRING: self.string_similarity,
            ValueKind.SEQUENCE: self.sequence_similarity,
            ValueKind.RECORD: self.record_similarity,
            ValueKind.BOOLEAN: self.boolean_similarity,
        }
        logger.info(
            "SimilarityEngine initialized (short<%d, long>%d)",
            self.short_string_length,
            self.long_text_length,
        )

    # --- Generic values ------------------------------------------------------

    def similarity(self, first: Any, second: Any) -> float:
        if first is None or second is None:
            return MISSING_SCORE
        kind = value_kind(first)
        if kind is None or kind is not value_kind(second):
            return SHAPE_MISMATCH_SCORE
        return self._by_kind[kind](first, second)

    @staticmethod
    def numeric_similarity(first: float, second: float) -> float:
        if math.isnan(first) or math.isnan(second):
            return 0.0
        if first == second:
            return 1.0
        if math.isinf(first) or math.isinf(second):
            return 0.0
        largest = max(abs(first), abs(second))
        if largest == 0:
            return 1.0 if first == second else 0.0
        relative = min(abs(first - second) / largest, 1.0)
        return (1.0 - relative) ** 1.5

    @staticmethod
    def boolean_similarity(first: bool, second: bool) -> float:
        return 1.0 if first == second else 0.0

    def sequence_similarity(self, first: Sequence[Any], second: Sequence[Any]) -> float:
        if not first or not second:
            return 0.0
        shorter = min(len(first), len(second))
        longer = max(len(first), len(second))
        total = sum(self.similarity(first[i], second[i]) for i in range(shorter))
        return (total / shorter) * (shorter / longer)

    def record_similarity(self, first: Mapping[str, Any], second: Mapping[str, Any]) -> float:
        if not first and not second:
            return 1.0
        if not first or not second:
            return 0.0
        common = [k for k in first if k in second]
        if not common:
            return NO_COMMON_KEYS_SCORE
        union = set(first) | set(second)
        mean = float(np.mean([self.similarity(first[k], second[k]) for k in common]))
        return mean * (len(common) / len(union))

    # --- Text ----------------------------------------------------------------

    def string_similarity(self, first: str, second: str) -> float:
        if not isinstance(first, str) or not isinstance(second, str):
            return 0.0
        if first == second:
            return 1.0
        if not first or not second:
            return 0.0

        cached = self.cache.get(first, second)
        if cached is not None:
            return cached

        lo, hi = sorted((first, second))
        norm_lo, norm_hi = normalize_text(lo), normalize_text(hi)
        if len(norm_lo) < self.short_string_length or len(norm_hi) < self.short_string_length:
            score = short_string_ratio(norm_lo, norm_hi)
        else:
            edit = 1.0 - normalized_levenshtein(norm_lo, norm_hi, long_text_length=self.long_text_length)
            semantic = semantic_similarity_approximation(significant_words(norm_lo), significant_words(norm_hi))
            score = 0.3 * edit + 0.7 * semantic
        return self.cache.put(first, second, min(1.0, max(0.0, score)))

    # --- Dilemmas ------------------------------------------------------------

    def dilemma_similarity(self, first: Any, second: Any) -> float:
        """Weighted similarity over the dimensions both dilemmas carry."""
        if not isinstance(first, Mapping) or not isinstance(second, Mapping):
            return 0.0

        scores: List[float] = []
        weights: List[float] = []

        def _add(score: Optional[float], weight: float) -> None:
            if score is not None:
                scores.append(score)
                weights.append(weight)

        if first.get("title") and second.get("title"):
            _add(self.string_similarity(str(first["title"]), str(second["title"])), self.weights.title)
        if first.get("description") and second.get("description"):
            _add(
                self.string_similarity(str(first["description"]), str(second["description"])),
                self.weights.description,
            )
        _add(self._situation_similarity(first.get("situation"), second.get("situation")), self.weights.situation)
        _add(
            self._factor_similarity(first.get("contextual_factors"), second.get("contextual_factors")),
            self.weights.contextual_factors,
        )
        _add(self._action_similarity(dilemma_actions(first), dilemma_actions(second)), self.weights.actions)

        total_weight = sum(weights)
        if not scores or total_weight == 0:
            return NO_DIMENSION_SCORE
        return float(np.dot(scores, weights) / total_weight)

    def _situation_similarity(self, first: Any, second: Any) -> Optional[float]:
        if isinstance(first, str) and isinstance(second, str):
            return self.string_similarity(first, second) if first and second else None
        if isinstance(first, Mapping) and isinstance(second, Mapping):
            params1, params2 = first.get("parameters"), second.get("parameters")
            if isinstance(params1, Mapping) and isinstance(params2, Mapping):
                return self.record_similarity(params1, params2)
        return None

    def _factor_similarity(self, first: Any, second: Any) -> Optional[float]:
        if not isinstance(first, (list, tuple)) or not isinstance(second, (list, tuple)):
            return None
        factors1 = [(factor_name(f), f.get("value")) for f in first if isinstance(f, Mapping)]
        factors2 = [(factor_name(f), f.get("value")) for f in second if isinstance(f, Mapping)]

        matched: List[float] = []
        for name1, value1 in factors1:
            if not name1:
                continue
            for name2, value2 in factors2:
                if name2 and name2.lower() == name1.lower():
                    matched.append(self.similarity(value1, value2))
                    break

        if not matched:
            return None
        names = {n.lower() for n, _ in factors1 + factors2 if n}
        coverage = len(matched) / (len(names) or 1)
        return (sum(matched) / len(matched)) * coverage

    def _action_similarity(self, first: List[Any], second: List[Any]) -> Optional[float]:
        if not first or not second:
            return None
        names2 = [action_name(a) or "" for a in second]
        best_matches = [
            max(self.string_similarity(action_name(a) or "", name2) for name2 in names2)
            for a in first
        ]
        return sum(best_matches) / len(best_matches)

    def find_best_contextual_factor_match(self, factor: Any, contextual_factors: Any) -> Optional[Mapping[str, Any]]:
        """Exact (case-insensitive) factor-name match, else the closest name above 0.7."""
        wanted = factor_name(factor)
        if not wanted or not isinstance(contextual_factors, (list, tuple)):
            return None

        best: Optional[Mapping[str, Any]] = None
        best_score = 0.0
        for candidate in contextual_factors:
            name = factor_name(candidate)
            if not name:
                continue
            if name.lower() == wanted.lower():
                return candidate
            score = self.string_similarity(name, wanted)
            if score > best_score and score > 0.7:
                best, best_score = candidate, score
        return best
