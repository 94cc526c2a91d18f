import logging
from collections import OrderedDict
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set, Tuple

from rea.conflict_types import Conflict, ConflictType, Severity
from rea.heuristics import DEFAULT_TABLES, SENTENCE_SPLIT, HeuristicTables
from rea.records import is_reconciled, path_action, path_conclusion
from rea.severity import generate_resolution_strategies, suggest_resolution_strategies

logger = logging.getLogger("REA.ConflictDetection")

DEFAULT_PRINCIPLE = "general ethical considerations"
DEFAULT_SECONDARY = "other considerations"


def _argument(path: Any) -> str:
    value = path.get("argument") if isinstance(path, Mapping) else None
    return value if isinstance(value, str) else ""


def _label(path: Mapping[str, Any], fallback: str) -> str:
    return path.get("framework") or fallback


def group_paths_by_action(reasoning_paths: Sequence[Any]) -> Dict[str, List[Mapping[str, Any]]]:
    """Paths keyed by conclusion (falling back to action), in first-seen order."""
    grouped: Dict[str, List[Mapping[str, Any]]] = OrderedDict()
    for path in reasoning_paths or ():
        if not isinstance(path, Mapping):
            logger.warning("Skipping non-mapping reasoning path: %r", path)
            continue
        action = path_conclusion(path)
        if not action:
            logger.warning("Path missing action/conclusion: %s", path.get("id", "unknown"))
            continue
        grouped.setdefault(action, []).append(path)
    return grouped


class ConflictDetector:
    """Keyword heuristics over pairs of reasoning paths.

    All word lists and patterns come from the injected ``HeuristicTables``;
    the detector itself holds no other state.
    """

    def __init__(self, *, tables: Optional[HeuristicTables] = None) -> None:
        self.tables = tables or DEFAULT_TABLES
        logger.info(
            "ConflictDetector initialized (%d priority categories, %d value terms)",
            len(self.tables.priority_keywords),
            len(self.tables.common_values),
        )

    # --- Text heuristics -----------------------------------------------------

    def extract_priorities(self, argument: Any) -> List[str]:
        """Priority categories present in the text, in table order."""
        if not isinstance(argument, str) or not argument:
            return []
        lowered = argument.lower()
        return [
            priority
            for priority, keywords in self.tables.priority_keywords.items()
            if any(k.lower() in lowered for k in keywords)
        ]

    def get_priority(self, path: Any) -> Optional[str]:
        if not isinstance(path, Mapping):
            return None
        if path.get("priority"):
            return path["priority"]
        priorities = self.extract_priorities(_argument(path))
        return priorities[0] if priorities else None

    def extract_core_principle(self, path: Any) -> str:
        return self.get_priority(path) or DEFAULT_PRINCIPLE

    def extract_secondary_priority(self, path: Any) -> str:
        priorities = self.extract_priorities(_argument(path))
        return priorities[1] if len(priorities) > 1 else DEFAULT_SECONDARY

    def extract_values(self, text: Any) -> List[str]:
        if not isinstance(text, str) or not text:
            return []
        lowered = text.lower()
        return [v for v in self.tables.common_values if v.lower() in lowered]

    def find_value_conflicts(self, values1: Sequence[str], values2: Sequence[str]) -> List[Dict[str, str]]:
        found = []
        for first, second in self.tables.opposing_values:
            if first in values1 and second in values2:
                found.append({"value1": first, "value2": second})
            if second in values1 and first in values2:
                found.append({"value1": second, "value2": first})
        return found

    def find_contradictions(self, argument1: str, argument2: str) -> Optional[str]:
        lowered1, lowered2 = argument1.lower(), argument2.lower()
        for term1, term2 in self.tables.contradiction_pairs:
            if term1 in lowered1 and term2 in lowered2:
                return f'Opposing actions: "{term1}" vs "{term2}"'
            if term2 in lowered1 and term1 in lowered2:
                return f'Opposing actions: "{term2}" vs "{term1}"'
        return None

    def _sentences_with(self, text: str, keywords: Sequence[str]) -> List[str]:
        if not text:
            return []
        return [s for s in SENTENCE_SPLIT.split(text) if any(k in s.lower() for k in keywords)]

    def has_valuation_conflict(self, path1: Mapping[str, Any], path2: Mapping[str, Any]) -> bool:
        # placeholder heuristic: differing counts of valuation sentences
        statements1 = self._sentences_with(_argument(path1), self.tables.valuation_keywords)
        statements2 = self._sentences_with(_argument(path2), self.tables.valuation_keywords)
        if statements1 and statements2:
            return len(statements1) != len(statements2)
        return False

    def detect_priority_conflict(self, path1: Mapping[str, Any], path2: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        priorities1 = self.extract_priorities(_argument(path1))
        priorities2 = self.extract_priorities(_argument(path2))
        if not priorities1 or not priorities2 or priorities1[0] == priorities2[0]:
            return None

        primary1, primary2 = priorities1[0], priorities2[0]
        antagonists = self.tables.priority_antagonisms.get(primary1, ())
        severity = Severity.HIGH if primary2 in antagonists else Severity.MEDIUM
        return {"priority1": primary1, "priority2": primary2, "severity": severity}

    def detect_factual_interpretation_conflict(self, path1: Mapping[str, Any], path2: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        facts1 = [s.lower() for s in self._sentences_with(_argument(path1), self.tables.fact_keywords)]
        facts2 = [s.lower() for s in self._sentences_with(_argument(path2), self.tables.fact_keywords)]

        for pattern in self.tables.factual_patterns:
            positive1 = any(pattern.positive.search(f) for f in facts1)
            negative1 = any(pattern.negative.search(f) for f in facts1)
            positive2 = any(pattern.positive.search(f) for f in facts2)
            negative2 = any(pattern.negative.search(f) for f in facts2)
            if (positive1 and negative2) or (negative1 and positive2):
                return {
                    "fact_type": "contradictory claims",
                    "pattern": pattern.name,
                    "path1_claim": "positive" if positive1 else "negative",
                    "path2_claim": "positive" if positive2 else "negative",
                    "severity": Severity.HIGH,
                }
        return None

    def _dominant_method(self, text: str) -> Optional[str]:
        if not text:
            return None
        lowered = text.lower()
        dominant, highest = None, 0
        for method, keywords in self.tables.method_keywords.items():
            count = sum(1 for k in keywords if k.lower() in lowered)
            if count > highest:
                dominant, highest = method, count
        return dominant

    def has_method_conflict(self, path1: Mapping[str, Any], path2: Mapping[str, Any]) -> bool:
        framework1, framework2 = path1.get("framework"), path2.get("framework")
        if framework1 and framework2 and framework1 != framework2:
            return True
        method1 = self._dominant_method(_argument(path1))
        method2 = self._dominant_method(_argument(path2))
        return bool(method1 and method2 and method1 != method2)

    # --- Path pairs ----------------------------------------------------------

    def check_path_conflict(self, path1: Mapping[str, Any], path2: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        """First matching conflict kind for one pair: priority, value, factual, method."""
        if not path1.get("framework") or not path2.get("framework"):
            logger.warning(
                "Missing framework information: %s (%s) / %s (%s)",
                path1.get("id", "unknown"), path1.get("framework", "unknown"),
                path2.get("id", "unknown"), path2.get("framework", "unknown"),
            )
        name1, name2 = _label(path1, "Framework 1"), _label(path2, "Framework 2")

        priority = self.detect_priority_conflict(path1, path2)
        if priority:
            return {
                "type": ConflictType.PRIORITY,
                "description": f"Conflicting ethical priorities between {name1} and {name2}",
                "severity": priority["severity"],
                "details": priority,
            }
        if self.has_valuation_conflict(path1, path2):
            return {
                "type": ConflictType.VALUE,
                "description": f"Different value assessments between {name1} and {name2}",
                "severity": Severity.MEDIUM,
                "details": {"type": "value_conflict"},
            }
        factual = self.detect_factual_interpretation_conflict(path1, path2)
        if factual:
            return {
                "type": ConflictType.FACTUAL,
                "description": f"Different factual interpretations between {name1} and {name2}",
                "severity": Severity.HIGH,
                "details": factual,
            }
        if self.has_method_conflict(path1, path2):
            return {
                "type": ConflictType.METHOD,
                "description": f"Different ethical methods between {name1} and {name2}",
                "severity": Severity.LOW,
                "details": {"frameworks": [path1.get("framework"), path2.get("framework")]},
            }
        return None

    def detect_path_conflicts(self, reasoning_paths: Sequence[Any]) -> List[Conflict]:
        """Every same-conclusion pair that conflicts, with strategies attached."""
        paths = [p for p in reasoning_paths or () if isinstance(p, Mapping)]
        conflicts: List[Conflict] = []
        for i, path1 in enumerate(paths):
            conclusion = path_conclusion(path1)
            if not conclusion:
                continue
            for path2 in paths[i + 1:]:
                if path_conclusion(path2) != conclusion:
                    continue
                found = self.check_path_conflict(path1, path2)
                if not found:
                    continue
                conflict = Conflict(
                    type=found["type"],
                    severity=found["severity"],
                    framework1=path1.get("framework"),
                    framework2=path2.get("framework"),
                    frameworks=[path1.get("framework"), path2.get("framework")],
                    action=conclusion,
                    description=found["description"],
                    details=found["details"],
                    paths=[path1, path2],
                    path1_id=path1.get("id"),
                    path2_id=path2.get("id"),
                )
                conflict.resolution_strategies = generate_resolution_strategies(path1, path2, conflict)
                conflicts.append(conflict)
        logger.info("Detected %d conflicts between %d reasoning paths", len(conflicts), len(paths))
        return conflicts

    def identify_conflict(self, path1: Mapping[str, Any], path2: Mapping[str, Any], action: Optional[str]) -> Optional[Conflict]:
        """Classify one pair using explicit priorities where the paths carry them."""
        framework1, framework2 = path1.get("framework"), path2.get("framework")
        common = dict(
            framework1=framework1,
            framework2=framework2,
            action=action,
            path1_id=path1.get("id"),
            path2_id=path2.get("id"),
        )

        priority1, priority2 = self.get_priority(path1), self.get_priority(path2)
        if priority1 and priority2 and priority1 != priority2:
            kind, severity = ConflictType.PRIORITY, Severity.MEDIUM
            description = f"Different priorities: {priority1} vs {priority2}"
            details: Dict[str, Any] = {"priority1": priority1, "priority2": priority2}
        elif self.has_valuation_conflict(path1, path2):
            kind, severity = ConflictType.VALUE, Severity.MEDIUM
            description = "Different value assessments: ethical value assessment valued differently"
            details = {"factor": "ethical value assessment"}
        elif self.detect_factual_interpretation_conflict(path1, path2):
            kind, severity = ConflictType.FACTUAL, Severity.HIGH
            description = "Different factual interpretations: factual interpretation"
            details = {"factor": "factual interpretation"}
        elif self.has_method_conflict(path1, path2):
            kind, severity = ConflictType.METHOD, Severity.LOW
            method1, method2 = framework1 or "unknown", framework2 or "unknown"
            description = f"Different ethical methods: {method1} vs {method2}"
            details = {"method1": method1, "method2": method2}
        else:
            return None

        return Conflict(
            type=kind,
            severity=severity,
            description=description,
            details=details,
            resolution_strategies=suggest_resolution_strategies(kind, severity, framework1, framework2),
            **common,
        )

    # --- Baseline detector ---------------------------------------------------

    def detect_conflicts(self, reasoning_paths: Sequence[Any]) -> List[Conflict]:
        """Same-action pairs; at most one conflict per unordered framework pair."""
        if not isinstance(reasoning_paths, (list, tuple)) or not reasoning_paths:
            return []

        paths = [p for p in reasoning_paths if isinstance(p, Mapping)]
        seen_pairs: Set[Tuple[str, str]] = set()
        conflicts: List[Conflict] = []

        for i, path1 in enumerate(paths):
            for path2 in paths[i + 1:]:
                if is_reconciled(path1) and is_reconciled(path2):
                    continue
                action = path_action(path1)
                if not action or path_action(path2) != action:
                    continue
                framework_pair = tuple(sorted((str(path1.get("framework")), str(path2.get("framework")))))
                if framework_pair in seen_pairs:
                    continue
                argument1, argument2 = _argument(path1), _argument(path2)
                if not argument1 or not argument2:
                    continue

                conflict = self._baseline_conflict(path1, path2, action, argument1, argument2)
                if conflict is not None:
                    conflicts.append(conflict)
                    seen_pairs.add(framework_pair)

        logger.info("Baseline detection found %d conflicts", len(conflicts))
        return conflicts

    def _baseline_conflict(self, path1: Mapping[str, Any], path2: Mapping[str, Any], action: str, argument1: str, argument2: str) -> Optional[Conflict]:
        common = dict(
            action=action,
            framework1=path1.get("framework"),
            framework2=path2.get("framework"),
            path1_id=path1.get("id"),
            path2_id=path2.get("id"),
        )
        ids = f"{path1.get('id')}_{path2.get('id')}"

        if path1.get("priority") and path2.get("priority") and path1["priority"] != path2["priority"]:
            return Conflict(
                id=f"priority_{ids}",
                type=ConflictType.PRIORITY,
                severity=Severity.MEDIUM,
                description=f"Different priorities: {path1['priority']} vs {path2['priority']}",
                details={"priority1": path1["priority"], "priority2": path2["priority"]},
                **common,
            )

        opposing = self.find_value_conflicts(self.extract_values(argument1), self.extract_values(argument2))
        if opposing:
            return Conflict(
                id=f"value_{ids}",
                type=ConflictType.VALUE,
                severity=Severity.MEDIUM,
                description=f"Opposing values: {opposing[0]['value1']} vs {opposing[0]['value2']}",
                details=dict(opposing[0]),
                **common,
            )

        if path1.get("framework") != path2.get("framework"):
            contradiction = self.find_contradictions(argument1, argument2)
            if contradiction:
                return Conflict(
                    id=f"action_{ids}",
                    type=ConflictType.ACTION,
                    severity=Severity.HIGH,
                    description=contradiction,
                    details={"contradiction": contradiction},
                    **common,
                )
        return None
