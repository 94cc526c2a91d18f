import logging
import numbers
from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import numpy as np

from rea.conflict_types import Conflict, ConflictType, ResolutionStrategy, Severity
from rea.framework_importance import FrameworkImportance
from rea.framework_registry_like import FrameworkImportanceLike, FrameworkRegistryLike

logger = logging.getLogger("REA.Severity")

SeverityLike = Union[Severity, str]
ConflictLike = Union[Conflict, Mapping[str, Any]]

INITIAL_SEVERITY: Dict[ConflictType, Severity] = {
    ConflictType.PRIORITY: Severity.MEDIUM,
    ConflictType.VALUE: Severity.MEDIUM,
    ConflictType.CROSS_ACTION_VALUE: Severity.MEDIUM,
    ConflictType.PRINCIPLE: Severity.HIGH,
    ConflictType.CROSS_ACTION_PRINCIPLE: Severity.HIGH,
    ConflictType.FACTUAL: Severity.HIGH,
    ConflictType.METHOD: Severity.LOW,
}


def increase_severity(severity: SeverityLike) -> Severity:
    if severity == Severity.LOW:
        return Severity.MEDIUM
    return Severity.HIGH


def decrease_severity(severity: SeverityLike) -> Severity:
    if severity == Severity.HIGH:
        return Severity.MEDIUM
    return Severity.LOW


def _as_type(value: Any) -> Optional[ConflictType]:
    if isinstance(value, ConflictType):
        return value
    try:
        return ConflictType(value)
    except ValueError:
        return None


def _get(conflict: ConflictLike, key: str) -> Any:
    if isinstance(conflict, Mapping):
        return conflict.get(key)
    return getattr(conflict, key, None)


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


# --- Resolution strategies ---------------------------------------------------

def suggest_resolution_strategies(conflict_type: Any, severity: SeverityLike, framework1: Any, framework2: Any) -> List[ResolutionStrategy]:
    """Type-specific strategies followed by one strategy keyed on severity."""
    pair = [framework1, framework2]
    kind = _as_type(conflict_type)
    strategies: List[ResolutionStrategy] = []

    if kind is ConflictType.PRIORITY:
        strategies += [
            ResolutionStrategy("stakeholder", "Prioritize the most affected stakeholders", pair),
            ResolutionStrategy("balance", "Find a balance between competing priorities", pair),
        ]
    elif kind is ConflictType.VALUE:
        strategies += [
            ResolutionStrategy("compromise", "Find a middle ground between different value assessments", pair),
            ResolutionStrategy("conditional", "Apply different value assessments based on contextual factors", pair),
        ]
    elif kind is ConflictType.FACTUAL:
        strategies += [
            ResolutionStrategy("epistemic", "Acknowledge factual uncertainty and proceed with caution"),
            ResolutionStrategy("evidence", "Gather more evidence to resolve the factual disagreement"),
        ]
    elif kind is ConflictType.METHOD:
        strategies += [
            ResolutionStrategy("hybrid", "Create a hybrid approach combining elements of both methods"),
            ResolutionStrategy(
                "pluralistic",
                "Acknowledge the validity of multiple ethical methods and present the action assessment from each perspective",
            ),
        ]

    if severity == Severity.HIGH:
        strategies.append(ResolutionStrategy("pluralistic", "Acknowledge fundamental differences and present multiple perspectives", pair))
    elif severity == Severity.MEDIUM:
        strategies.append(ResolutionStrategy("balance", "Balance competing considerations", pair))
    else:
        strategies.append(ResolutionStrategy("simple_weighting", "Apply simple weighting to resolve minor conflicts", pair))
    return strategies


def generate_resolution_strategies(path1: Mapping[str, Any], path2: Mapping[str, Any], conflict: ConflictLike) -> List[ResolutionStrategy]:
    """Type strategies only; used by the path-pair detector."""
    kind = _as_type(_get(conflict, "type"))
    if kind is ConflictType.PRIORITY:
        return [
            ResolutionStrategy("balance", "Balance the competing priorities with contextual weighting"),
            ResolutionStrategy("stakeholder", "Prioritize the most affected stakeholders"),
        ]
    if kind is ConflictType.VALUE:
        return [
            ResolutionStrategy("compromise", "Find a compromise position between the differing value assessments"),
            ResolutionStrategy("conditional", "Apply different value assessments based on contextual factors"),
        ]
    if kind is ConflictType.FACTUAL:
        return [
            ResolutionStrategy("epistemic", "Acknowledge factual uncertainty and proceed with caution"),
            ResolutionStrategy("evidence", "Gather more evidence to resolve the factual disagreement"),
        ]
    if kind is ConflictType.METHOD:
        return [
            ResolutionStrategy("hybrid", "Create a hybrid approach combining elements of both methods"),
            ResolutionStrategy(
                "pluralistic",
                "Acknowledge the validity of multiple ethical methods and present the action assessment from each perspective",
            ),
        ]
    return []


# --- Severity model ----------------------------------------------------------

class SeverityModel:
    """Assigns low/medium/high severity to detected conflicts.

    The starting level comes from the conflict type. Element relevance,
    framework importance and element strength can each move it by one
    step; levels saturate at both ends.
    """

    def __init__(
        self,
        *,
        framework_registry: Optional[FrameworkRegistryLike] = None,
        framework_importance: Optional[FrameworkImportanceLike] = None,
        high_threshold: float = 0.7,
        low_threshold: float = 0.3,
    ) -> None:
        if not _is_number(high_threshold) or not _is_number(low_threshold):
            raise TypeError("severity thresholds must be numbers")
        if not 0.0 <= low_threshold <= high_threshold <= 1.0:
            raise ValueError("thresholds must satisfy 0 <= low_threshold <= high_threshold <= 1")
        self.framework_registry = framework_registry
        self.framework_importance: FrameworkImportanceLike = framework_importance or FrameworkImportance()
        self.high_threshold = float(high_threshold)
        self.low_threshold = float(low_threshold)
        logger.info(
            "SeverityModel initialized (thresholds=%.2f/%.2f, registry=%s)",
            self.low_threshold,
            self.high_threshold,
            "yes" if self.framework_registry else "no",
        )

    def _step(self, severity: Severity, score: float, reason: str) -> Severity:
        if score > self.high_threshold:
            stepped = increase_severity(severity)
        elif score < self.low_threshold:
            stepped = decrease_severity(severity)
        else:
            return severity
        logger.debug("Severity %s -> %s (%s=%.2f)", severity.value, stepped.value, reason, score)
        return stepped

    @staticmethod
    def initial_severity(conflict_type: Any) -> Severity:
        kind = _as_type(conflict_type)
        return INITIAL_SEVERITY.get(kind, Severity.MEDIUM) if kind else Severity.MEDIUM

    def calculate_conflict_severity(
        self,
        conflict: Optional[ConflictLike],
        granular_elements: Sequence[Mapping[str, Any]] = (),
        reasoning_paths: Sequence[Mapping[str, Any]] = (),
    ) -> Severity:
        if conflict is None:
            logger.warning("calculate_conflict_severity called without a conflict")
            return Severity.MEDIUM

        severity = self.initial_severity(_get(conflict, "type"))

        relevance = self._element_relevance(conflict, granular_elements)
        if relevance is not None:
            severity = self._step(severity, relevance, "action relevance")

        importance = self._framework_importance(conflict, reasoning_paths)
        if importance is not None:
            severity = self._step(severity, importance, "framework importance")

        element1, element2 = _get(conflict, "element1"), _get(conflict, "element2")
        if isinstance(element1, Mapping) and isinstance(element2, Mapping):
            strengths = (element1.get("strength"), element2.get("strength"))
            if strengths == ("strong", "strong"):
                severity = increase_severity(severity)
            elif strengths == ("weak", "weak"):
                severity = decrease_severity(severity)

        logger.debug("Final severity for %s: %s", _get(conflict, "type"), severity.value)
        return severity

    def _element_relevance(self, conflict: ConflictLike, elements: Sequence[Mapping[str, Any]]) -> Optional[float]:
        if not elements:
            return None
        action, action1, action2 = _get(conflict, "action"), _get(conflict, "action1"), _get(conflict, "action2")
        framework1, framework2 = _get(conflict, "framework1"), _get(conflict, "framework2")

        if action1 and action2:
            matched = [e for e in elements if isinstance(e, Mapping) and e.get("action") in (action1, action2)]
        elif action:
            matched = [e for e in elements if isinstance(e, Mapping) and e.get("action") == action]
        elif framework1 or framework2:
            wanted = {f for f in (framework1, framework2) if f}
            matched = [e for e in elements if isinstance(e, Mapping) and e.get("framework") in wanted]
        else:
            return None

        scores = [e["relevance"] for e in matched if _is_number(e.get("relevance"))]
        return float(np.mean(scores)) if scores else None

    def _framework_importance(self, conflict: ConflictLike, reasoning_paths: Sequence[Mapping[str, Any]]) -> Optional[float]:
        if self.framework_registry is None:
            return None
        names = _get(conflict, "frameworks") or [_get(conflict, "framework1"), _get(conflict, "framework2")]
        names = [n for n in names if n]
        if not names:
            return None

        first = reasoning_paths[0] if reasoning_paths else None
        dilemma = first.get("dilemma") if isinstance(first, Mapping) else None

        scores = []
        for name in names:
            framework = self.framework_registry.get_framework_by_name(name)
            if framework is not None:
                scores.append(float(self.framework_importance(framework, dilemma)))
        return float(np.mean(scores)) if scores else None

    def adjust_for_action_relevance(self, conflict: ConflictLike, granular_elements: Sequence[Mapping[str, Any]] = ()) -> ConflictLike:
        """Copy of ``conflict`` stepped by the relevance of its first matching element."""
        if not granular_elements:
            return conflict

        def _relevance_for(action: Any) -> float:
            for element in granular_elements:
                if not isinstance(element, Mapping):
                    continue
                if element.get("action") == action or (element.get("conclusion") and element.get("conclusion") == action):
                    value = element.get("relevance")
                    return float(value) if _is_number(value) else 0.5
            return 0.5

        action, action1, action2 = _get(conflict, "action"), _get(conflict, "action1"), _get(conflict, "action2")
        if action:
            score = _relevance_for(action)
        elif action1 and action2:
            score = max(_relevance_for(action1), _relevance_for(action2))
        else:
            score = 0.5

        current = _get(conflict, "severity") or Severity.MEDIUM
        if score > self.high_threshold:
            severity, note = increase_severity(current), "increased"
        elif score < self.low_threshold:
            severity, note = decrease_severity(current), "decreased"
        else:
            return replace(conflict) if isinstance(conflict, Conflict) else dict(conflict)

        if isinstance(conflict, Conflict):
            return replace(conflict, severity=severity, relevance_adjustment=note)
        return {**conflict, "severity": severity.value, "relevance_adjustment": note}

    def assess(
        self,
        conflicts: Sequence[Conflict],
        granular_elements: Sequence[Mapping[str, Any]] = (),
        reasoning_paths: Sequence[Mapping[str, Any]] = (),
    ) -> List[Conflict]:
        """Fresh copies of ``conflicts`` with severity and strategies filled in."""
        assessed = []
        for conflict in conflicts:
            severity = self.calculate_conflict_severity(conflict, granular_elements, reasoning_paths)
            strategies = suggest_resolution_strategies(conflict.type, severity, conflict.framework1, conflict.framework2)
            assessed.append(replace(conflict, severity=severity, resolution_strategies=strategies))
        logger.info("Assessed severity for %d conflicts", len(assessed))
        return assessed
