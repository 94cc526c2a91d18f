"""Conflicts among granular elements, across actions and along dependencies.

These detectors complement ``ConflictDetector``: they look at the
principle elements extracted from reasoning paths and at the structure
between paths rather than at argument text.
"""

import logging
from collections.abc import Hashable
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Sequence, Set

import networkx as nx

from rea.conflict_detection import group_paths_by_action
from rea.conflict_types import Conflict, ConflictType, Severity
from rea.records import conflicting_principles, element_content, is_principle, is_reconciled, path_action

logger = logging.getLogger("REA.GranularConflicts")


def _same_scope(first: Mapping[str, Any], second: Mapping[str, Any]) -> bool:
    return (
        is_principle(first)
        and is_principle(second)
        and first.get("framework") == second.get("framework")
        and first.get("action") == second.get("action")
    )


def _principle_conflict(element1: Mapping[str, Any], element2: Mapping[str, Any]) -> Conflict:
    framework = element1.get("framework")
    principle1, principle2 = element_content(element1), element_content(element2)
    return Conflict(
        type=ConflictType.PRINCIPLE,
        severity=Severity.MEDIUM,
        framework1=framework,
        framework2=element2.get("framework"),
        frameworks=[framework],
        action1=element1.get("action"),
        element1=element1,
        element2=element2,
        description=f"Conflicting principles within {framework}: {principle1} vs. {principle2}",
        reason=f"Conflicting principles: {principle1} vs. {principle2}",
    )


def _resolve_reference(reference: str, elements: Sequence[Mapping[str, Any]]) -> Optional[Mapping[str, Any]]:
    for candidate in elements:
        if candidate.get("principle") == reference or candidate.get("content") == reference:
            return candidate
    return None


def detect_granular_element_conflicts(
    reasoning_paths: Sequence[Any],
    granular_elements: Sequence[Any],
) -> List[Conflict]:
    """PRINCIPLE conflicts from explicit ``conflicting_principles`` references.

    References that resolve to another principle of the same framework and
    action are left to the pair scan, so a one-directional reference yields
    one conflict and a reciprocal reference yields two.
    """
    elements = [e for e in granular_elements or () if isinstance(e, Mapping)]
    if not elements:
        return []
    conflicts: List[Conflict] = []

    for element in elements:
        if not is_principle(element):
            continue
        for reference in conflicting_principles(element):
            target = _resolve_reference(reference, elements)
            if target is None:
                logger.debug("Unresolved principle reference %r; using placeholder", reference)
                target = {
                    "type": "principle",
                    "principle": reference,
                    "content": reference,
                    "framework": element.get("framework"),
                }
            elif target is not element and _same_scope(element, target) and element_content(target) == reference:
                continue
            conflicts.append(_principle_conflict(element, target))

    for i, element1 in enumerate(elements):
        for element2 in elements[i + 1:]:
            if not _same_scope(element1, element2):
                continue
            if element_content(element2) in conflicting_principles(element1):
                conflicts.append(_principle_conflict(element1, element2))
            if element_content(element1) in conflicting_principles(element2):
                already = any(
                    c.type is ConflictType.PRINCIPLE and c.element1 is element2 and c.element2 is element1
                    for c in conflicts
                )
                if not already:
                    conflicts.append(_principle_conflict(element2, element1))

    logger.info("Detected %d granular element conflicts among %d elements", len(conflicts), len(elements))
    return conflicts


def detect_cross_action_conflicts(
    reasoning_paths: Sequence[Any],
    dilemma: Optional[Mapping[str, Any]] = None,
    granular_elements: Sequence[Any] = (),
) -> List[Conflict]:
    if not isinstance(reasoning_paths, (list, tuple)) or len(reasoning_paths) < 2:
        return []

    grouped = group_paths_by_action(reasoning_paths)
    actions = list(grouped)
    conflicts: List[Conflict] = []

    for i, action_a in enumerate(actions):
        for action_b in actions[i + 1:]:
            for path1 in grouped[action_a]:
                for path2 in grouped[action_b]:
                    if is_reconciled(path1) and is_reconciled(path2):
                        continue
                    conflicts.extend(_cross_action_pair(path1, path2))

    logger.info("Detected %d cross-action conflicts over %d actions", len(conflicts), len(actions))
    return conflicts


def _cross_action_pair(path1: Mapping[str, Any], path2: Mapping[str, Any]) -> List[Conflict]:
    framework1, framework2 = path1.get("framework"), path2.get("framework")
    action1, action2 = path_action(path1), path_action(path2)
    common = dict(
        framework1=framework1,
        framework2=framework2,
        frameworks=[framework1, framework2],
        action1=action1,
        action2=action2,
        action=action1,
        paths=[path1, path2],
        path1_id=path1.get("id"),
        path2_id=path2.get("id"),
    )
    found: List[Conflict] = []

    if framework1 != framework2:
        found.append(Conflict(
            type=ConflictType.CROSS_ACTION_VALUE,
            severity=Severity.MEDIUM,
            description=(
                f"Different actions recommended by different frameworks: "
                f"{framework1} recommends {action1} while {framework2} recommends {action2}"
            ),
            **common,
        ))

    sources1, sources2 = path1.get("source_elements"), path2.get("source_elements")
    if isinstance(sources1, (list, tuple)) and isinstance(sources2, (list, tuple)):
        principles1 = [e for e in sources1 if is_principle(e)]
        principles2 = [e for e in sources2 if is_principle(e)]
        for principle1 in principles1:
            for principle2 in principles2:
                content1, content2 = element_content(principle1), element_content(principle2)
                if content2 in conflicting_principles(principle1) or content1 in conflicting_principles(principle2):
                    found.append(Conflict(
                        type=ConflictType.CROSS_ACTION_PRINCIPLE,
                        severity=Severity.HIGH,
                        element1=principle1,
                        element2=principle2,
                        description=(
                            f"Conflicting principles between different actions: "
                            f"{content1} ({action1}) vs {content2} ({action2})"
                        ),
                        **common,
                    ))
    return found


def dependency_graph(reasoning_paths: Sequence[Any]) -> nx.DiGraph:
    """One edge per path, from its id to the id in ``depends_on``."""
    # a later depends_on for the same id replaces the earlier one
    depends_on: Dict[Any, Any] = {}
    for path in reasoning_paths or ():
        if not isinstance(path, Mapping) or path.get("id") is None or path.get("depends_on") is None:
            continue
        if not isinstance(path["id"], Hashable) or not isinstance(path["depends_on"], Hashable):
            logger.warning("Skipping path with unhashable id or depends_on: %r", path.get("id"))
            continue
        depends_on[path["id"]] = path["depends_on"]

    graph = nx.DiGraph()
    graph.add_edges_from(depends_on.items())
    return graph


def detect_circular_dependencies(reasoning_paths: Sequence[Any]) -> List[Conflict]:
    """One CIRCULAR_DEPENDENCY per unordered pair of a path and its successor on a cycle."""
    if not isinstance(reasoning_paths, (list, tuple)) or not reasoning_paths:
        return []

    graph = dependency_graph(reasoning_paths)
    by_id: Dict[Any, Mapping[str, Any]] = {}
    for path in reasoning_paths:
        if isinstance(path, Mapping) and isinstance(path.get("id"), Hashable) and path.get("id") is not None:
            by_id.setdefault(path["id"], path)

    reported: Set[FrozenSet[Any]] = set()
    conflicts: List[Conflict] = []
    for origin, successor in graph.edges():
        if not nx.has_path(graph, successor, origin):
            continue
        pair = frozenset((origin, successor))
        if pair in reported:
            continue
        path1, path2 = by_id.get(origin), by_id.get(successor)
        if path1 is None or path2 is None:
            continue
        reported.add(pair)
        framework1, framework2 = path1.get("framework"), path2.get("framework")
        conflicts.append(Conflict(
            type=ConflictType.CIRCULAR_DEPENDENCY,
            severity=Severity.HIGH,
            framework1=framework1,
            framework2=framework2,
            frameworks=[framework1, framework2],
            action1=path_action(path1),
            action2=path_action(path2),
            description=f"Circular dependency detected between {framework1} and {framework2}",
            paths=[path1, path2],
            path1_id=origin,
            path2_id=successor,
        ))

    if conflicts:
        logger.warning("Detected %d circular dependencies", len(conflicts))
    return conflicts


def detect_all_conflicts(
    reasoning_paths: Sequence[Any],
    dilemma: Optional[Mapping[str, Any]] = None,
    granular_elements: Sequence[Any] = (),
) -> Dict[str, List[Conflict]]:
    """Granular, cross-action and circular conflicts; severity is left to the caller."""
    granular = detect_granular_element_conflicts(reasoning_paths, granular_elements)
    cross_action = detect_cross_action_conflicts(reasoning_paths, dilemma, granular_elements)
    circular = detect_circular_dependencies(reasoning_paths)

    result = {
        "all": granular + cross_action + circular,
        "same_action": list(granular),
        "cross_action": list(cross_action),
        "granular": granular,
    }
    logger.info(
        "Found %d conflicts (granular=%d, cross_action=%d, circular=%d)",
        len(result["all"]), len(granular), len(cross_action), len(circular),
    )
    return result
