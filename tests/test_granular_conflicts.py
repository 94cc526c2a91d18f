from rea.conflict_types import ConflictType, Severity
from rea.granular_conflicts import (
    dependency_graph,
    detect_all_conflicts,
    detect_circular_dependencies,
    detect_cross_action_conflicts,
    detect_granular_element_conflicts,
)


def _principle(content, refs=(), framework="Deontology", action="disclose", **extra):
    return {
        "type": "Principle",
        "content": content,
        "framework": framework,
        "action": action,
        "conflicting_principles": list(refs),
        **extra,
    }


def test_one_directional_reference_yields_one_conflict():
    e1 = _principle("Respect autonomy", refs=["Prevent harm"])
    e2 = _principle("Prevent harm")
    conflicts = detect_granular_element_conflicts([], [e1, e2])
    assert len(conflicts) == 1
    assert conflicts[0].type is ConflictType.PRINCIPLE
    assert conflicts[0].element1 is e1 and conflicts[0].element2 is e2


def test_reciprocal_reference_yields_two_conflicts():
    e1 = _principle("Respect autonomy", refs=["Prevent harm"])
    e2 = _principle("Prevent harm", refs=["Respect autonomy"])
    conflicts = detect_granular_element_conflicts([], [e1, e2])
    assert len(conflicts) == 2
    assert {(c.element1["content"], c.element2["content"]) for c in conflicts} == {
        ("Respect autonomy", "Prevent harm"),
        ("Prevent harm", "Respect autonomy"),
    }


def test_unresolved_reference_uses_placeholder():
    e1 = _principle("Tell the truth", refs=["Keep promises"])
    conflicts = detect_granular_element_conflicts([], [e1])
    assert len(conflicts) == 1
    placeholder = conflicts[0].element2
    assert placeholder["content"] == "Keep promises"
    assert placeholder["framework"] == "Deontology"


def test_reference_across_frameworks_is_reported_once():
    e1 = _principle("Respect autonomy", refs=["Maximise welfare"])
    e2 = _principle("Maximise welfare", framework="Utilitarianism")
    conflicts = detect_granular_element_conflicts([], [e1, e2])
    assert len(conflicts) == 1
    assert conflicts[0].element2 is e2


def test_non_principles_are_ignored():
    e1 = {"type": "objection", "content": "x", "conflicting_principles": ["y"]}
    assert detect_granular_element_conflicts([], [e1, "junk"]) == []
    assert detect_granular_element_conflicts([], []) == []


def test_cross_action_conflicts():
    principle_a = {"type": "principle", "content": "Save the most lives", "conflicting_principles": ["Equal chance"]}
    principle_b = {"type": "principle", "content": "Equal chance"}
    paths = [
        {"id": "p1", "framework": "Utilitarianism", "conclusion": "prognosis", "source_elements": [principle_a]},
        {"id": "p2", "framework": "Egalitarianism", "conclusion": "lottery", "source_elements": [principle_b]},
        {"id": "p3", "framework": "Utilitarianism", "conclusion": "lottery", "source": "reconciled"},
        {"id": "p4", "framework": "Deontology", "conclusion": "prognosis", "source": "reconciled"},
    ]
    conflicts = detect_cross_action_conflicts(paths)
    kinds = [c.type for c in conflicts]
    assert kinds.count(ConflictType.CROSS_ACTION_PRINCIPLE) == 1
    # p1/p2 and p2/p4 differ in framework; p1/p3 share one; p4/p3 are both reconciled
    assert kinds.count(ConflictType.CROSS_ACTION_VALUE) == 2
    principle = next(c for c in conflicts if c.type is ConflictType.CROSS_ACTION_PRINCIPLE)
    assert principle.severity is Severity.HIGH
    assert (principle.action1, principle.action2) == ("prognosis", "lottery")


def test_cross_action_needs_two_paths():
    assert detect_cross_action_conflicts([{"conclusion": "a"}]) == []


def test_mutual_dependency_reported_once():
    paths = [
        {"id": "a", "framework": "F1", "action": "x", "depends_on": "b"},
        {"id": "b", "framework": "F2", "action": "y", "depends_on": "a"},
        {"id": "c", "framework": "F3", "action": "z", "depends_on": "a"},
    ]
    conflicts = detect_circular_dependencies(paths)
    assert len(conflicts) == 1
    conflict = conflicts[0]
    assert conflict.type is ConflictType.CIRCULAR_DEPENDENCY
    assert {conflict.path1_id, conflict.path2_id} == {"a", "b"}
    assert conflict.severity is Severity.HIGH


def test_three_cycle_and_acyclic_chain():
    cycle = [
        {"id": "a", "depends_on": "b"},
        {"id": "b", "depends_on": "c"},
        {"id": "c", "depends_on": "a"},
    ]
    assert len(detect_circular_dependencies(cycle)) == 3
    chain = [{"id": "a", "depends_on": "b"}, {"id": "b", "depends_on": "c"}, {"id": "c"}]
    assert detect_circular_dependencies(chain) == []
    assert set(dependency_graph(chain).edges()) == {("a", "b"), ("b", "c")}


def test_detect_all_conflicts_buckets():
    e1 = _principle("Respect autonomy", refs=["Prevent harm"])
    e2 = _principle("Prevent harm")
    paths = [
        {"id": "a", "framework": "F1", "conclusion": "x", "depends_on": "b"},
        {"id": "b", "framework": "F2", "conclusion": "y", "depends_on": "a"},
    ]
    result = detect_all_conflicts(paths, None, [e1, e2])
    assert len(result["granular"]) == 1
    assert result["same_action"] == result["granular"]
    assert len(result["cross_action"]) == 1
    assert len(result["all"]) == 3


def test_dependency_on_path_without_outgoing_edge():
    paths = [
        {"id": "a", "depends_on": "b"},
        {"id": "b", "depends_on": "a"},
        {"id": "ab", "depends_on": "a"},
    ]
    conflicts = detect_circular_dependencies(paths)
    assert len(conflicts) == 1
    assert {conflicts[0].path1_id, conflicts[0].path2_id} == {"a", "b"}


def test_integer_ids_and_unhashable_ids():
    paths = [
        {"id": 1, "depends_on": 2},
        {"id": 2, "depends_on": 1},
        {"id": ["x"], "depends_on": 1},
    ]
    conflicts = detect_circular_dependencies(paths)
    assert len(conflicts) == 1
    assert {conflicts[0].path1_id, conflicts[0].path2_id} == {1, 2}
    assert set(dependency_graph(paths).edges()) == {(1, 2), (2, 1)}
