"""Keyword and pattern tables behind the conflict heuristics.

The detectors only walk reasoning paths; every classification rule they
apply lives here so it can be tuned or swapped without touching the
traversal code. Pass a customised ``HeuristicTables`` to ``ConflictDetector``
to change the rules for one detector instance.
"""

import re
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Pattern, Tuple

PRIORITY_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "welfare": ("utility", "happiness", "well-being", "welfare", "benefit", "harm", "consequence", "outcome", "result"),
    "rights": ("right", "dignity", "autonomy", "freedom", "liberty", "consent", "privacy", "justice"),
    "virtue": ("character", "virtue", "excellence", "flourishing", "eudaimonia", "integrity", "honesty"),
    "care": ("care", "compassion", "empathy", "relationship", "connection", "vulnerability", "need"),
    "community": ("community", "tradition", "culture", "social", "collective", "common good", "harmony"),
}

# primary priority -> priorities it is fundamentally at odds with
PRIORITY_ANTAGONISMS: Dict[str, Tuple[str, ...]] = {
    "welfare": ("rights", "community"),
    "rights": ("welfare", "community"),
    "community": ("rights", "welfare"),
    "virtue": ("welfare",),
    "care": ("welfare",),
}

COMMON_VALUES: Tuple[str, ...] = (
    "life", "lives", "autonomy", "rights", "welfare", "justice", "fairness",
    "equality", "freedom", "liberty", "privacy", "dignity", "responsibility",
    "care", "compassion", "integrity", "honesty", "transparency", "duty",
    "virtue", "character", "community", "respect", "trust", "consent",
    "security", "safety", "efficiency", "benefit", "harm", "utility",
)

OPPOSING_VALUES: Tuple[Tuple[str, str], ...] = (
    ("freedom", "security"),
    ("autonomy", "welfare"),
    ("individual", "community"),
    ("efficiency", "equality"),
    ("privacy", "transparency"),
)

VALUATION_KEYWORDS: Tuple[str, ...] = ("value", "important", "significant", "crucial", "critical", "essential")

FACT_KEYWORDS: Tuple[str, ...] = ("fact", "evidence", "data", "study", "research", "statistics", "survey")


@dataclass(frozen=True)
class PolarityPattern:
    name: str
    positive: Pattern[str]
    negative: Pattern[str]


FACTUAL_POLARITY_PATTERNS: Tuple[PolarityPattern, ...] = (
    PolarityPattern(
        "direction",
        re.compile(r"increases|improved|higher|better|more"),
        re.compile(r"decreases|worsened|lower|worse|less"),
    ),
    PolarityPattern(
        "universality",
        re.compile(r"always|all|every|must"),
        re.compile(r"never|none|no|cannot"),
    ),
    PolarityPattern(
        "certainty",
        re.compile(r"certain|definitely|clearly"),
        re.compile(r"uncertain|possibly|arguably"),
    ),
)

METHOD_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "consequentialist": ("consequence", "outcome", "result", "utility", "benefit", "harm"),
    "deontological": ("duty", "obligation", "right", "wrong", "principle", "rule", "categorical"),
    "virtue": ("character", "virtue", "vice", "excellence", "flourishing", "habit"),
    "care": ("care", "relationship", "connection", "vulnerability", "need", "attention"),
    "communitarian": ("community", "tradition", "culture", "social", "common good", "history"),
}

CONTRADICTION_PAIRS: Tuple[Tuple[str, str], ...] = (
    ("should", "should not"),
    ("must", "must not"),
    ("right", "wrong"),
    ("good", "bad"),
    ("beneficial", "harmful"),
    ("increase", "decrease"),
    ("allow", "forbid"),
)

SENTENCE_SPLIT = re.compile(r"[.!?]+")


@dataclass(frozen=True)
class HeuristicTables:
    priority_keywords: Dict[str, Tuple[str, ...]] = field(default_factory=lambda: dict(PRIORITY_KEYWORDS))
    priority_antagonisms: Dict[str, Tuple[str, ...]] = field(default_factory=lambda: dict(PRIORITY_ANTAGONISMS))
    common_values: Tuple[str, ...] = COMMON_VALUES
    opposing_values: Tuple[Tuple[str, str], ...] = OPPOSING_VALUES
    valuation_keywords: Tuple[str, ...] = VALUATION_KEYWORDS
    fact_keywords: Tuple[str, ...] = FACT_KEYWORDS
    factual_patterns: Tuple[PolarityPattern, ...] = FACTUAL_POLARITY_PATTERNS
    method_keywords: Dict[str, Tuple[str, ...]] = field(default_factory=lambda: dict(METHOD_KEYWORDS))
    contradiction_pairs: Tuple[Tuple[str, str], ...] = CONTRADICTION_PAIRS

    def with_overrides(self, **tables: Any) -> "HeuristicTables":
        unknown = set(tables) - set(self.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown heuristic tables: {sorted(unknown)}")
        return replace(self, **tables)


DEFAULT_TABLES = HeuristicTables()
