import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from rea.records import extract_dilemma_text

logger = logging.getLogger("REA.FrameworkImportance")

BASE_IMPORTANCE = 0.5

FRAMEWORK_KEYWORDS: Dict[str, Sequence[str]] = {
    "utilitarianism": ("utility", "happiness", "well-being", "welfare", "benefit", "harm", "consequence", "outcome"),
    "deontology": ("duty", "obligation", "right", "wrong", "principle", "rule", "categorical"),
    "virtue_ethics": ("character", "virtue", "vice", "excellence", "flourishing", "habit"),
    "care_ethics": ("care", "relationship", "connection", "vulnerability", "need", "attention"),
    "rights_based": ("rights", "dignity", "autonomy", "freedom", "liberty", "consent", "privacy", "justice"),
}
DEFAULT_KEYWORDS: Sequence[str] = ("ethical", "moral", "value", "principle")


def _field(framework: Any, *names: str, default: Any = None) -> Any:
    for name in names:
        if isinstance(framework, Mapping):
            value = framework.get(name)
        else:
            value = getattr(framework, name, None)
        if value is not None:
            return value
    return default


def framework_keywords(framework: Any) -> Sequence[str]:
    name = _field(framework, "name")
    if not isinstance(name, str) or not name:
        return ()
    lowered = name.lower()
    for key, keywords in FRAMEWORK_KEYWORDS.items():
        if key in lowered:
            return keywords
    return DEFAULT_KEYWORDS


def domain_relevance(framework: Any, dilemma: Optional[Mapping[str, Any]]) -> float:
    """0.5 for a name mention, 0.4 for an alias, else 0.1 per keyword capped at 0.8."""
    if framework is None or not dilemma:
        return 0.0
    text = extract_dilemma_text(dilemma).lower()

    name = _field(framework, "name")
    if isinstance(name, str) and name and name.lower() in text:
        return 0.5
    for alias in _field(framework, "aliases", default=()) or ():
        if isinstance(alias, str) and alias and alias.lower() in text:
            return 0.4

    matches = sum(1 for k in framework_keywords(framework) if k.lower() in text)
    return min(0.8, matches * 0.1)


def calculate_framework_importance(
    framework: Any,
    dilemma: Optional[Mapping[str, Any]],
    precedents: Sequence[Mapping[str, Any]] = (),
) -> float:
    if framework is None:
        logger.warning("calculate_framework_importance: framework is None")
        return BASE_IMPORTANCE

    importance = BASE_IMPORTANCE
    if _field(framework, "is_hybrid", "isHybrid", default=False):
        importance += 0.1

    name = _field(framework, "name")
    usage = 0
    for precedent in precedents or ():
        paths = precedent.get("reasoning_paths") if isinstance(precedent, Mapping) else None
        if isinstance(paths, (list, tuple)):
            usage += sum(1 for p in paths if isinstance(p, Mapping) and p.get("framework") == name)
    importance += min(0.2, usage * 0.02)

    relevance = domain_relevance(framework, dilemma)
    importance += relevance * 0.2
    logger.debug(
        "Framework importance for %s: usage=%d domain=%.2f final=%.2f",
        name, usage, relevance, min(1.0, importance),
    )
    return min(1.0, importance)


@dataclass
class FrameworkImportance:
    """Default importance callable; precedent usage is counted against ``precedents``."""
    precedents: List[Mapping[str, Any]] = field(default_factory=list)

    def __call__(self, framework: Any, dilemma: Optional[Mapping[str, Any]]) -> float:
        return calculate_framework_importance(framework, dilemma, self.precedents)


@dataclass
class StaticFrameworkRegistry:
    """In-memory registry keyed by framework name."""
    frameworks: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_records(cls, records: Sequence[Any]) -> "StaticFrameworkRegistry":
        return cls({_field(r, "name"): r for r in records if _field(r, "name")})

    def get_framework_by_name(self, name: str) -> Optional[Any]:
        if not isinstance(name, str):
            return None
        found = self.frameworks.get(name)
        if found is None:
            lowered = name.lower()
            found = next((f for n, f in self.frameworks.items() if n.lower() == lowered), None)
        return found
