import dataclasses
import logging
import uuid
from collections.abc import Mapping, Sequence
from typing import Any

from fncli import UsageError, cli

from . import config, storage
from .core.errors import (
    InvalidReorderError,
    LimitExceededError,
    NotFoundError,
    StorageError,
)
from .core.models import (
    ChoiceConfig,
    Habit,
    HabitConfig,
    HabitDraft,
    NumericConfig,
    default_config,
)
from .core.result import expect, operation
from .lib import clock
from .lib.converters import config_from_record, draft_from_record
from .lib.errors import echo
from .lib.fuzzy import find_in_pool
from .lib.render import render_habits
from .validation import validate_draft, validate_habit

__all__ = [
    "EDITABLE_FIELDS",
    "add_habit",
    "clear_all_habits",
    "delete_habit",
    "edit_habit",
    "find_habit",
    "get_active_habits",
    "get_habits_sorted",
    "move_habit",
    "new_habit",
    "reorder_habits",
    "validate_habit_limit",
]

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"name", "atomic_prompt", "configuration", "is_active"})


# ── domain ───────────────────────────────────────────────────────────────────


def _load() -> list[Habit]:
    return list(expect(storage.load_habits(), StorageError) or [])


def _save(habits: Sequence[Habit]) -> None:
    expect(storage.save_habits(habits), StorageError)


def _index_of(habits: Sequence[Habit], habit_id: str) -> int:
    for i, habit in enumerate(habits):
        if habit.id == habit_id:
            return i
    raise NotFoundError("Habit not found")


def _renumber(habits: Sequence[Habit]) -> list[Habit]:
    return [
        h if h.position == i else dataclasses.replace(h, position=i) for i, h in enumerate(habits)
    ]


def new_habit(draft: HabitDraft, position: int) -> Habit:
    """Build a stored habit from a draft: fresh id, current timestamp, given position."""
    habit = Habit(
        id=str(uuid.uuid4()),
        name=draft.name,
        type=draft.type,
        atomic_prompt=draft.atomic_prompt,
        configuration=draft.resolved_config(),
        position=position,
        is_active=draft.is_active,
        created_at=clock.now(),
    )
    validate_habit(habit)
    return habit


def validate_habit_limit(current_count: int) -> bool:
    return current_count < config.get_habit_limit()


@operation("getting habits")
def get_habits_sorted() -> list[Habit]:
    return sorted(_load(), key=lambda h: h.position)


@operation("getting active habits")
def get_active_habits() -> list[Habit]:
    return [h for h in sorted(_load(), key=lambda h: h.position) if h.is_active]


@operation("adding habit")
def add_habit(draft: HabitDraft | Mapping[str, Any]) -> Habit:
    if not isinstance(draft, HabitDraft):
        draft = draft_from_record(draft)
    habits = _load()
    if not validate_habit_limit(len(habits)):
        raise LimitExceededError(f"Maximum of {config.get_habit_limit()} habits allowed")
    validate_draft(draft)
    habit = new_habit(draft, position=len(habits))
    _save([*habits, habit])
    logger.info("added habit %s (%s)", habit.id, habit.name)
    return habit


@operation("editing habit")
def edit_habit(habit_id: str, updates: Mapping[str, Any]) -> Habit:
    """Apply content-field updates; id, created_at, type and position never change."""
    habits = _load()
    idx = _index_of(habits, habit_id)
    current = habits[idx]

    ignored = sorted(set(updates) - EDITABLE_FIELDS)
    if ignored:
        logger.debug("edit_habit ignoring non-editable fields: %s", ", ".join(ignored))
    changes = {k: v for k, v in updates.items() if k in EDITABLE_FIELDS}
    cfg = changes.get("configuration", current.configuration)
    if cfg is None:
        changes.pop("configuration")
    elif isinstance(cfg, Mapping):
        changes["configuration"] = config_from_record(current.type, cfg)

    updated = dataclasses.replace(current, **changes)
    validate_habit(updated)
    habits[idx] = updated
    _save(habits)
    return updated


@operation("deleting habit")
def delete_habit(habit_id: str) -> None:
    habits = _load()
    removed = habits.pop(_index_of(habits, habit_id))
    _save(_renumber(habits))
    logger.info("deleted habit %s (%s)", removed.id, removed.name)


@operation("reordering habits")
def reorder_habits(habit_ids: Sequence[str]) -> list[Habit]:
    habits = _load()
    ids = list(habit_ids)
    if len(ids) != len(habits):
        raise InvalidReorderError(
            f"Invalid reorder: expected {len(habits)} habit IDs, got {len(ids)}"
        )

    by_id = {h.id: h for h in habits}
    seen: set[str] = set()
    reordered: list[Habit] = []
    for index, habit_id in enumerate(ids):
        if habit_id in seen:
            raise InvalidReorderError(f"Invalid reorder: duplicate habit ID {habit_id}")
        habit = by_id.get(habit_id)
        if habit is None:
            raise InvalidReorderError(f"Invalid reorder: unknown habit ID {habit_id}")
        seen.add(habit_id)
        reordered.append(dataclasses.replace(habit, position=index))

    _save(reordered)
    return reordered


@operation("moving habit")
def move_habit(habit_id: str, to_index: int) -> list[Habit]:
    """Turn one completed drag into a single reorder of the full id list."""
    ids = [h.id for h in sorted(_load(), key=lambda h: h.position)]
    if habit_id not in ids:
        raise NotFoundError("Habit not found")
    ids.remove(habit_id)
    ids.insert(max(0, min(to_index, len(ids))), habit_id)
    return expect(reorder_habits(ids), InvalidReorderError) or []


@operation("clearing habits")
def clear_all_habits() -> None:
    _save([])
    logger.info("cleared all habits")


def find_habit(ref: str) -> Habit | None:
    return find_in_pool(ref, _load())


# ── cli ──────────────────────────────────────────────────────────────────────


def _resolve(ref: str) -> Habit:
    habit = find_habit(ref)
    if not habit:
        raise NotFoundError(f"No habit found: '{ref}'")
    return habit


def _parse_number(text: str) -> float:
    try:
        val = float(text)
    except ValueError as e:
        raise UsageError(f"not a number: '{text}'") from e
    return int(val) if val.is_integer() else val


def _parse_range(text: str) -> tuple[float, float]:
    sep = "," if "," in text else "-"
    parts = [p.strip() for p in text.split(sep)]
    if len(parts) != 2 or not all(parts):
        raise UsageError(f"range must look like 0-12 or 0,12, got '{text}'")
    return _parse_number(parts[0]), _parse_number(parts[1])


def _parse_choices(text: str) -> tuple[str, ...]:
    return tuple(c.strip() for c in text.split(",") if c.strip())


def _build_config(
    habit_type: str,
    unit: str | None,
    bounds: str | None,
    choices: str | None,
    icon: str | None,
    base: HabitConfig | None = None,
) -> HabitConfig | None:
    if base is None and not any((unit, bounds, choices, icon)):
        return None
    if habit_type == "numeric":
        cfg = base if isinstance(base, NumericConfig) else NumericConfig()
        cfg = dataclasses.replace(
            cfg,
            unit=unit if unit is not None else cfg.unit,
            numeric_range=_parse_range(bounds) if bounds else cfg.numeric_range,
        )
    elif habit_type == "choice":
        cfg = base if isinstance(base, ChoiceConfig) else ChoiceConfig()
        if choices:
            cfg = dataclasses.replace(cfg, choices=_parse_choices(choices))
    else:
        cfg = default_config(habit_type) if base is None else base
    return dataclasses.replace(cfg, icon=icon) if icon is not None else cfg


def _show() -> None:
    result = get_habits_sorted()
    echo(render_habits(result.data or [], config.get_habit_limit()))
    if not result.success:
        logger.warning("could not load habits: %s", result.error)


@cli("routine", name="ls")
def ls() -> None:
    """List habits in order"""
    _show()


@cli(
    "routine",
    name="add",
    flags={
        "habit_type": ["-t", "--type"],
        "prompt": ["-p", "--prompt"],
        "unit": ["-u", "--unit"],
        "bounds": ["-r", "--range"],
        "choices": ["-c", "--choices"],
        "icon": ["-i", "--icon"],
    },
)
def add(
    name: list[str],
    habit_type: str = "boolean",
    prompt: str | None = None,
    unit: str | None = None,
    bounds: str | None = None,
    choices: str | None = None,
    icon: str | None = None,
) -> None:
    """Add a habit"""
    name_str = " ".join(name) if name else ""
    if not name_str or not prompt:
        raise UsageError('Usage: routine add <name> -p "<prompt>" [-t boolean|numeric|choice]')
    draft = HabitDraft(
        name=name_str,
        type=habit_type,  # type: ignore[arg-type]
        atomic_prompt=prompt,
        configuration=_build_config(habit_type, unit, bounds, choices, icon),
    )
    expect(add_habit(draft))
    _show()


@cli(
    "routine",
    name="edit",
    flags={
        "name": ["-n", "--name"],
        "prompt": ["-p", "--prompt"],
        "unit": ["-u", "--unit"],
        "bounds": ["-r", "--range"],
        "choices": ["-c", "--choices"],
        "icon": ["-i", "--icon"],
    },
)
def edit(
    ref: str,
    name: str | None = None,
    prompt: str | None = None,
    unit: str | None = None,
    bounds: str | None = None,
    choices: str | None = None,
    icon: str | None = None,
) -> None:
    """Edit a habit's name, prompt or configuration"""
    habit = _resolve(ref)
    updates: dict[str, Any] = {}
    if name is not None:
        updates["name"] = name
    if prompt is not None:
        updates["atomic_prompt"] = prompt
    if any((unit, bounds, choices, icon)):
        updates["configuration"] = _build_config(
            habit.type, unit, bounds, choices, icon, base=habit.configuration
        )
    if not updates:
        raise UsageError("nothing to update - use -n, -p, -u, -r, -c or -i")
    expect(edit_habit(habit.id, updates))
    _show()


@cli("routine", name="pause")
def pause(ref: str) -> None:
    """Exclude a habit from the daily routine without deleting it"""
    expect(edit_habit(_resolve(ref).id, {"is_active": False}))
    _show()


@cli("routine", name="resume")
def resume(ref: str) -> None:
    """Bring a paused habit back into the daily routine"""
    expect(edit_habit(_resolve(ref).id, {"is_active": True}))
    _show()


@cli("routine", name="rm")
def rm(ref: str) -> None:
    """Delete a habit"""
    habit = _resolve(ref)
    expect(delete_habit(habit.id))
    echo(f"deleted {habit.name}")
    _show()


@cli("routine", name="mv")
def mv(ref: str, to: int) -> None:
    """Move a habit to a 1-based slot"""
    if to < 1:
        raise UsageError("slot must be 1 or more")
    expect(move_habit(_resolve(ref).id, to - 1))
    _show()


@cli("routine", name="order")
def order(refs: list[str]) -> None:
    """Set the full habit order"""
    if not refs:
        raise UsageError("Usage: routine order <habit> <habit> ...")
    expect(reorder_habits([_resolve(ref).id for ref in refs]))
    _show()


@cli("routine", name="clear")
def clear(yes: bool = False) -> None:
    """Delete every habit (irreversible)"""
    if not yes:
        raise UsageError("this deletes every habit - rerun with --yes to confirm")
    expect(clear_all_habits())
    echo("all habits cleared")


@cli("routine", name="limit")
def limit(count: int | None = None) -> None:
    """Show or set the maximum number of habits"""
    if count is None:
        echo(str(config.get_habit_limit()))
        return
    if count > config.MAX_HABITS:
        raise UsageError(f"limit cannot exceed {config.MAX_HABITS}")
    current = len(_load())
    if count < max(current, 1):
        raise UsageError(f"limit must be at least {max(current, 1)} ({current} habits stored)")
    config.set_habit_limit(count)
    echo(f"habit limit set to {count}")
