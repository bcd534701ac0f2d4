import json

import pytest

from routine import config, db
from routine.core.models import BooleanConfig, ChoiceConfig, NumericConfig
from routine.habits import (
    add_habit,
    clear_all_habits,
    delete_habit,
    edit_habit,
    find_habit,
    get_active_habits,
    get_habits_sorted,
    move_habit,
    reorder_habits,
    validate_habit_limit,
)


def _add(make_draft, *names):
    added = []
    for name in names:
        result = add_habit(make_draft(name))
        assert result.success, result.error
        added.append(result.data)
    return added


def _stored():
    return get_habits_sorted().data


def test_add_habit_assigns_identity(tmp_routine_dir, make_draft):
    result = add_habit(make_draft("Read"))
    assert result.success
    habit = result.data
    assert habit.position == 0
    assert habit.created_at.tzinfo is not None
    assert len(habit.id) == 36
    assert _stored() == [habit]


def test_add_up_to_limit_keeps_creation_order(tmp_routine_dir, make_draft):
    names = [f"Habit {i}" for i in range(7)]
    _add(make_draft, *names)
    habits = _stored()
    assert [h.name for h in habits] == names
    assert [h.position for h in habits] == list(range(7))


def test_add_beyond_limit_fails_without_change(tmp_routine_dir, make_draft):
    _add(make_draft, *[f"Habit {i}" for i in range(7)])
    before = _stored()
    result = add_habit(make_draft("One too many"))
    assert result.success is False
    assert result.error == "Maximum of 7 habits allowed"
    assert _stored() == before


def test_configured_limit(tmp_routine_dir, make_draft):
    config.set_habit_limit(2)
    _add(make_draft, "A", "B")
    result = add_habit(make_draft("C"))
    assert result.error == "Maximum of 2 habits allowed"


def test_add_invalid_draft_fails(tmp_routine_dir, make_draft):
    result = add_habit(make_draft("Mood", type="choice", configuration=ChoiceConfig()))
    assert result.success is False
    assert "at least one option" in (result.error or "")
    assert _stored() == []


def test_add_from_mapping(tmp_routine_dir):
    result = add_habit(
        {
            "id": "ignored",
            "position": 5,
            "name": "Water",
            "type": "numeric",
            "atomic_prompt": "Glasses of water?",
            "configuration": {"numeric_unit": "glasses", "numeric_range": [0, 15]},
        }
    )
    assert result.success, result.error
    habit = result.data
    assert habit.id != "ignored"
    assert habit.position == 0
    assert habit.configuration == NumericConfig(unit="glasses", numeric_range=(0, 15))


def test_add_propagates_load_failure(tmp_routine_dir, make_draft):
    with db.get_db() as conn:
        conn.execute("INSERT INTO store (key, value) VALUES (?, ?)", (config.HABITS_KEY, "[oops"))
    assert get_habits_sorted().error == "Invalid JSON format"
    assert add_habit(make_draft("Read")).error == "Invalid JSON format"


def test_get_habits_sorted_is_idempotent(tmp_routine_dir, make_draft):
    _add(make_draft, "A", "B", "C")
    assert get_habits_sorted() == get_habits_sorted()


def test_edit_habit_updates_content(tmp_routine_dir, make_draft):
    (habit,) = _add(make_draft, "Read")
    result = edit_habit(
        habit.id,
        {"name": "Read fiction", "atomic_prompt": "Did you read fiction?", "is_active": False},
    )
    assert result.success, result.error
    updated = result.data
    assert updated.name == "Read fiction"
    assert updated.is_active is False
    assert _stored() == [updated]


def test_edit_ignores_identity_fields(tmp_routine_dir, make_draft):
    a, b = _add(make_draft, "A", "B")
    result = edit_habit(
        b.id,
        {
            "id": "11111111-1111-4111-8111-111111111111",
            "created_at": "2001-01-01T00:00:00+00:00",
            "type": "numeric",
            "position": 0,
            "name": "B2",
        },
    )
    assert result.success, result.error
    updated = result.data
    assert updated.id == b.id
    assert updated.created_at == b.created_at
    assert updated.type == "boolean"
    assert updated.position == 1
    assert [h.name for h in _stored()] == ["A", "B2"]


def test_edit_configuration_from_mapping(tmp_routine_dir, numeric_draft):
    habit = add_habit(numeric_draft).data
    result = edit_habit(habit.id, {"configuration": {"numeric_unit": "h", "numeric_range": [4, 10]}})
    assert result.success, result.error
    assert result.data.configuration == NumericConfig(unit="h", numeric_range=(4, 10))


def test_edit_rejects_mismatched_configuration(tmp_routine_dir, numeric_draft):
    habit = add_habit(numeric_draft).data
    result = edit_habit(habit.id, {"configuration": BooleanConfig()})
    assert result.success is False
    assert "NumericConfig" in (result.error or "")
    assert _stored() == [habit]


def test_edit_invalid_value_keeps_state(tmp_routine_dir, make_draft):
    (habit,) = _add(make_draft, "Read")
    result = edit_habit(habit.id, {"name": "   "})
    assert result.success is False
    assert "name is required" in (result.error or "")
    assert _stored() == [habit]


def test_edit_unknown_id(tmp_routine_dir):
    result = edit_habit("missing", {"name": "x"})
    assert result.success is False
    assert result.error == "Habit not found"


def test_delete_recompresses_positions(tmp_routine_dir, make_draft):
    a, b, c, d = _add(make_draft, "A", "B", "C", "D")
    assert delete_habit(b.id).success
    habits = _stored()
    assert [h.name for h in habits] == ["A", "C", "D"]
    assert [h.position for h in habits] == [0, 1, 2]
    assert b.id not in {h.id for h in habits}


def test_delete_last_and_first(tmp_routine_dir, make_draft):
    a, b, c = _add(make_draft, "A", "B", "C")
    delete_habit(c.id)
    delete_habit(a.id)
    habits = _stored()
    assert [(h.name, h.position) for h in habits] == [("B", 0)]


def test_delete_unknown_id(tmp_routine_dir, make_draft):
    _add(make_draft, "A")
    before = _stored()
    result = delete_habit("nope")
    assert result.error == "Habit not found"
    assert _stored() == before


def test_reorder_habits(tmp_routine_dir, make_draft):
    a, b, c = _add(make_draft, "A", "B", "C")
    result = reorder_habits([c.id, a.id, b.id])
    assert result.success, result.error
    habits = _stored()
    assert [h.name for h in habits] == ["C", "A", "B"]
    assert [h.position for h in habits] == [0, 1, 2]
    assert result.data == habits


@pytest.mark.parametrize(
    ("ids", "fragment"),
    [
        (lambda a, b, c: [a.id, b.id], "expected 3 habit IDs, got 2"),
        (lambda a, b, c: [a.id, b.id, "foreign"], "unknown habit ID foreign"),
        (lambda a, b, c: [a.id, a.id, b.id], "duplicate habit ID"),
        (lambda a, b, c: [a.id, b.id, c.id, c.id], "expected 3 habit IDs, got 4"),
    ],
)
def test_reorder_rejects_non_permutation(tmp_routine_dir, make_draft, ids, fragment):
    a, b, c = _add(make_draft, "A", "B", "C")
    before = _stored()
    result = reorder_habits(ids(a, b, c))
    assert result.success is False
    assert (result.error or "").startswith("Invalid reorder")
    assert fragment in (result.error or "")
    assert _stored() == before


def test_reorder_empty_collection(tmp_routine_dir):
    result = reorder_habits([])
    assert result.success
    assert result.data == []


def test_move_habit_issues_single_reorder(tmp_routine_dir, make_draft):
    a, b, c, d = _add(make_draft, "A", "B", "C", "D")
    result = move_habit(d.id, 1)
    assert result.success, result.error
    assert [h.name for h in _stored()] == ["A", "D", "B", "C"]


def test_move_habit_clamps_target(tmp_routine_dir, make_draft):
    a, b, c = _add(make_draft, "A", "B", "C")
    move_habit(a.id, 99)
    assert [h.name for h in _stored()] == ["B", "C", "A"]


def test_move_unknown_habit(tmp_routine_dir):
    assert move_habit("nope", 0).error == "Habit not found"


def test_clear_all_habits(tmp_routine_dir, make_draft):
    _add(make_draft, "A", "B")
    assert clear_all_habits().success
    assert _stored() == []
    with db.get_db() as conn:
        row = conn.execute("SELECT value FROM store WHERE key = ?", (config.HABITS_KEY,)).fetchone()
    assert json.loads(row[0]) == []


def test_validate_habit_limit(tmp_routine_dir):
    assert validate_habit_limit(0) is True
    assert validate_habit_limit(6) is True
    assert validate_habit_limit(7) is False
    assert validate_habit_limit(8) is False


def test_get_active_habits(tmp_routine_dir, make_draft):
    a, b, c = _add(make_draft, "A", "B", "C")
    edit_habit(b.id, {"is_active": False})
    assert [h.name for h in get_active_habits().data] == ["A", "C"]
    assert len(_stored()) == 3


def test_find_habit(tmp_routine_dir, make_draft):
    a, b = _add(make_draft, "Budget Reviewed", "Family Time")
    assert find_habit("family") == b
    assert find_habit(a.id[:8]) == a
    assert find_habit("zzz") is None


def test_configured_limit_cannot_raise_cap(tmp_routine_dir, make_draft):
    config.set_habit_limit(10)
    assert config.get_habit_limit() == 7
    _add(make_draft, *[f"Habit {i}" for i in range(7)])
    result = add_habit(make_draft("Habit 7"))
    assert result.error == "Maximum of 7 habits allowed"
    assert len(_stored()) == 7


def test_lowered_limit_still_allows_shrinking(tmp_routine_dir, make_draft):
    habits = _add(make_draft, "A", "B", "C", "D", "E")
    config.set_habit_limit(3)
    assert len(_stored()) == 5
    assert add_habit(make_draft("F")).error == "Maximum of 3 habits allowed"
    assert edit_habit(habits[0].id, {"name": "A2"}).success
    assert reorder_habits([h.id for h in reversed(habits)]).success
    assert delete_habit(habits[1].id).success
    assert delete_habit(habits[2].id).success
    assert [h.name for h in _stored()] == ["E", "D", "A2"]
