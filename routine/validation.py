import math
import uuid
from collections.abc import Sequence
from datetime import datetime
from urllib.parse import urlparse

from .core.errors import ValidationError
from .core.models import (
    CONFIG_TYPES,
    HABIT_TYPES,
    ChoiceConfig,
    Habit,
    HabitConfig,
    HabitDraft,
    NumericConfig,
)

__all__ = [
    "MAX_NAME_LENGTH",
    "MAX_PROMPT_LENGTH",
    "validate_collection",
    "validate_config",
    "validate_draft",
    "validate_habit",
]

MAX_NAME_LENGTH = 100
MAX_PROMPT_LENGTH = 500


def _is_number(val: object) -> bool:
    return isinstance(val, (int, float)) and not isinstance(val, bool)


def _check_text(label: str, val: object, max_length: int) -> None:
    if not isinstance(val, str) or not val.strip():
        raise ValidationError(f"{label} is required")
    if len(val) > max_length:
        raise ValidationError(f"{label} too long (max {max_length} characters)")


def _check_numeric(cfg: NumericConfig) -> None:
    if cfg.unit is not None and not isinstance(cfg.unit, str):
        raise ValidationError("numeric unit must be a string")
    if cfg.numeric_range is None:
        return
    rng = cfg.numeric_range
    if not isinstance(rng, tuple) or len(rng) != 2:
        raise ValidationError("numeric range must be a [min, max] pair")
    lo, hi = rng
    if not (_is_number(lo) and _is_number(hi)):
        raise ValidationError("numeric range bounds must be numbers")
    if not (math.isfinite(lo) and math.isfinite(hi)):
        raise ValidationError("numeric range bounds must be finite")
    if lo < 0 or hi < 0:
        raise ValidationError("numeric range bounds must be non-negative")
    if lo > hi:
        raise ValidationError(f"numeric range min {lo} is greater than max {hi}")


def _check_choice(cfg: ChoiceConfig) -> None:
    if not isinstance(cfg.choices, tuple) or not cfg.choices:
        raise ValidationError("choice habits need at least one option")
    for option in cfg.choices:
        if not isinstance(option, str) or not option.strip():
            raise ValidationError("choice options must be non-empty strings")


def validate_config(habit_type: str, cfg: HabitConfig) -> None:
    if habit_type not in HABIT_TYPES:
        raise ValidationError(f"invalid habit type '{habit_type}'")
    expected = CONFIG_TYPES[habit_type]
    if type(cfg) is not expected:
        raise ValidationError(
            f"{habit_type} habit needs {expected.__name__}, got {type(cfg).__name__}"
        )
    if cfg.icon is not None and not isinstance(cfg.icon, str):
        raise ValidationError("icon must be a string")
    if cfg.context_url is not None:
        parsed = urlparse(cfg.context_url) if isinstance(cfg.context_url, str) else None
        if parsed is None or parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValidationError(f"invalid context url '{cfg.context_url}'")
    if isinstance(cfg, NumericConfig):
        _check_numeric(cfg)
    elif isinstance(cfg, ChoiceConfig):
        _check_choice(cfg)


def validate_draft(draft: HabitDraft) -> None:
    _check_text("Habit name", draft.name, MAX_NAME_LENGTH)
    _check_text("Atomic prompt", draft.atomic_prompt, MAX_PROMPT_LENGTH)
    validate_config(draft.type, draft.resolved_config())
    if not isinstance(draft.is_active, bool):
        raise ValidationError("is_active must be a boolean")


def validate_habit(habit: Habit) -> None:
    """Raise ValidationError unless the habit satisfies the field rules for its type."""
    try:
        uuid.UUID(habit.id)
    except (TypeError, ValueError, AttributeError) as e:
        raise ValidationError(f"invalid habit id '{habit.id}'") from e
    _check_text("Habit name", habit.name, MAX_NAME_LENGTH)
    _check_text("Atomic prompt", habit.atomic_prompt, MAX_PROMPT_LENGTH)
    validate_config(habit.type, habit.configuration)
    if not isinstance(habit.position, int) or isinstance(habit.position, bool):
        raise ValidationError("position must be an integer")
    if habit.position < 0:
        raise ValidationError("position must be non-negative")
    if not isinstance(habit.is_active, bool):
        raise ValidationError("is_active must be a boolean")
    if not isinstance(habit.created_at, datetime):
        raise ValidationError("created_at must be a timestamp")


def validate_collection(habits: Sequence[Habit], limit: int) -> None:
    """Check the collection-wide invariants: capacity, unique ids, contiguous positions."""
    if len(habits) > limit:
        raise ValidationError(f"Maximum of {limit} habits allowed ({len(habits)} stored)")
    seen: set[str] = set()
    for habit in habits:
        validate_habit(habit)
        if habit.id in seen:
            raise ValidationError(f"duplicate habit id {habit.id}")
        seen.add(habit.id)
    positions = sorted(h.position for h in habits)
    if positions != list(range(len(habits))):
        raise ValidationError(f"positions must be 0..{len(habits) - 1} without gaps, got {positions}")
