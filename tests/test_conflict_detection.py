import pytest

from rea.conflict_detection import ConflictDetector, group_paths_by_action
from rea.conflict_types import ConflictType, Severity
from rea.heuristics import HeuristicTables


def test_extract_priorities_follows_table_order(detector):
    text = "Community harmony matters, but individual dignity and overall welfare too."
    assert detector.extract_priorities(text) == ["welfare", "rights", "community"]
    assert detector.extract_priorities(None) == []


def test_welfare_versus_rights_is_high(detector, welfare_path, rights_path):
    found = detector.detect_priority_conflict(welfare_path, rights_path)
    assert found["priority1"] == "welfare"
    assert found["priority2"] == "rights"
    assert found["severity"] is Severity.HIGH


def test_non_antagonistic_priorities_are_medium(detector):
    virtue = {"argument": "A person of good character acts with integrity."}
    care = {"argument": "We owe compassion to those who depend on us."}
    assert detector.detect_priority_conflict(virtue, care)["severity"] is Severity.MEDIUM


def test_find_value_conflicts_either_orientation(detector):
    assert detector.find_value_conflicts(["freedom"], ["security"]) == [{"value1": "freedom", "value2": "security"}]
    assert detector.find_value_conflicts(["security"], ["freedom"]) == [{"value1": "security", "value2": "freedom"}]
    assert detector.find_value_conflicts(["freedom"], ["freedom"]) == []


def test_factual_conflict(detector):
    path1 = {"argument": "Research shows the policy increases survival."}
    path2 = {"argument": "The data suggests outcomes are worse under it."}
    found = detector.detect_factual_interpretation_conflict(path1, path2)
    assert found["pattern"] == "direction"
    assert found["severity"] is Severity.HIGH


def test_method_conflict(detector):
    assert detector.has_method_conflict({"framework": "A"}, {"framework": "B"})
    assert not detector.has_method_conflict({"framework": "A"}, {"framework": "A"})
    assert detector.has_method_conflict(
        {"argument": "Our duty and obligation under the rule"},
        {"argument": "The outcome and consequence matter"},
    )


def test_valuation_heuristic_compares_sentence_counts(detector):
    one = {"argument": "Life is important."}
    two = {"argument": "Life is important. Liberty is essential."}
    assert detector.has_valuation_conflict(one, two)
    assert not detector.has_valuation_conflict(one, one)


def test_check_path_conflict_order(detector, welfare_path, rights_path):
    found = detector.check_path_conflict(welfare_path, rights_path)
    assert found["type"] is ConflictType.PRIORITY

    same_priorities = dict(rights_path, framework="Utilitarianism-2", argument="Utility for all.")
    assert detector.check_path_conflict(welfare_path, same_priorities)["type"] is ConflictType.METHOD


def test_detect_path_conflicts_attaches_strategies(detector, welfare_path, rights_path):
    other = dict(rights_path, id="p3", conclusion="wait", action="wait")
    conflicts = detector.detect_path_conflicts([welfare_path, rights_path, other])
    assert len(conflicts) == 1
    conflict = conflicts[0]
    assert conflict.path1_id == "p1" and conflict.path2_id == "p2"
    assert conflict.action == "allocate"
    assert [s.type for s in conflict.resolution_strategies] == ["balance", "stakeholder"]


def test_identify_conflict_prefers_explicit_priority(detector, welfare_path, rights_path):
    conflict = detector.identify_conflict(dict(welfare_path, priority="care"), rights_path, "allocate")
    assert conflict.type is ConflictType.PRIORITY
    assert conflict.details == {"priority1": "care", "priority2": "rights"}
    assert [s.type for s in conflict.resolution_strategies] == ["stakeholder", "balance", "balance"]


def test_identify_conflict_none_when_paths_agree(detector, welfare_path):
    assert detector.identify_conflict(welfare_path, dict(welfare_path), "allocate") is None


def test_detect_conflicts_one_per_framework_pair(detector):
    paths = [
        {"id": "a", "framework": "F1", "action": "x", "priority": "welfare", "argument": "freedom first"},
        {"id": "b", "framework": "F2", "action": "x", "priority": "rights", "argument": "security first"},
        {"id": "c", "framework": "F2", "action": "x", "priority": "care", "argument": "security first"},
        {"id": "d", "framework": "F1", "action": "y", "argument": "it is right"},
    ]
    conflicts = detector.detect_conflicts(paths)
    pairs = [tuple(sorted((c.framework1, c.framework2))) for c in conflicts]
    assert len(pairs) == len(set(pairs))
    assert conflicts[0].type is ConflictType.PRIORITY
    assert conflicts[0].id == "priority_a_b"


def test_detect_conflicts_value_then_action(detector):
    value = detector.detect_conflicts([
        {"id": "a", "framework": "F1", "action": "x", "argument": "protect privacy"},
        {"id": "b", "framework": "F2", "action": "x", "argument": "require transparency"},
    ])
    assert [c.type for c in value] == [ConflictType.VALUE]

    action = detector.detect_conflicts([
        {"id": "a", "framework": "F1", "action": "x", "argument": "we should act"},
        {"id": "b", "framework": "F2", "action": "x", "argument": "we should not act"},
    ])
    assert [c.type for c in action] == [ConflictType.ACTION]
    assert action[0].severity is Severity.HIGH


def test_detect_conflicts_skips_reconciled_pairs(detector):
    paths = [
        {"id": "a", "framework": "F1", "action": "x", "priority": "p", "argument": "a", "source": "reconciled"},
        {"id": "b", "framework": "F2", "action": "x", "priority": "q", "argument": "b", "source": "reconciled"},
    ]
    assert detector.detect_conflicts(paths) == []
    assert detector.detect_conflicts(None) == []


def test_core_and_secondary_priority(detector):
    path = {"argument": "Welfare matters, as does dignity."}
    assert detector.extract_core_principle(path) == "welfare"
    assert detector.extract_secondary_priority(path) == "rights"
    assert detector.extract_core_principle({}) == "general ethical considerations"
    assert detector.extract_secondary_priority({}) == "other considerations"


def test_group_paths_by_action_skips_missing():
    paths = [{"conclusion": "a"}, {"action": "b"}, {"id": "no-action"}, {"conclusion": "a"}]
    grouped = group_paths_by_action(paths)
    assert list(grouped) == ["a", "b"]
    assert len(grouped["a"]) == 2


def test_custom_tables():
    tables = HeuristicTables().with_overrides(opposing_values=(("life", "liberty"),))
    custom = ConflictDetector(tables=tables)
    assert custom.find_value_conflicts(["life"], ["liberty"]) == [{"value1": "life", "value2": "liberty"}]
    with pytest.raises(ValueError):
        HeuristicTables().with_overrides(colours=())
