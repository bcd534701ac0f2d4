from collections.abc import Mapping
from datetime import UTC, date, datetime
from typing import Any, cast

from routine.core.errors import ValidationError
from routine.core.models import (
    CONFIG_TYPES,
    BooleanConfig,
    ChoiceConfig,
    Habit,
    HabitConfig,
    HabitDraft,
    HabitType,
    NumericConfig,
)

HabitRecord = dict[str, Any]

_HABIT_FIELDS = (
    "id",
    "name",
    "type",
    "atomic_prompt",
    "configuration",
    "position",
    "is_active",
    "created_at",
)


def _parse_datetime(val) -> datetime:
    """Parse a stored timestamp that may be an ISO string or numeric epoch."""
    if isinstance(val, (int, float)) and not isinstance(val, bool):
        try:
            return datetime.fromtimestamp(val, UTC)
        except (OverflowError, OSError, ValueError) as e:
            raise ValidationError(f"timestamp out of range: {val!r}") from e
    if isinstance(val, str) and val:
        try:
            parsed = datetime.fromisoformat(val)
        except ValueError:
            parsed = datetime.combine(date.fromisoformat(val), datetime.min.time())
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    raise ValidationError(f"invalid timestamp {val!r}")


def _optional_str(data: Mapping[str, Any], key: str) -> str | None:
    val = data.get(key)
    return None if val is None else cast(str, val)


def config_from_record(habit_type: str, data: Mapping[str, Any] | None) -> HabitConfig:
    """
    Builds the configuration variant for habit_type from its stored mapping.
    Keys that do not belong to the variant are dropped.
    """
    data = data or {}
    if not isinstance(data, Mapping):
        raise ValidationError("configuration must be an object")
    icon = _optional_str(data, "icon")
    context_url = _optional_str(data, "context_url")
    cls = CONFIG_TYPES.get(habit_type)
    if cls is NumericConfig:
        rng = data.get("numeric_range")
        return NumericConfig(
            unit=_optional_str(data, "numeric_unit"),
            numeric_range=tuple(rng) if isinstance(rng, (list, tuple)) else rng,
            icon=icon,
            context_url=context_url,
        )
    if cls is ChoiceConfig:
        choices = data.get("choices") or ()
        return ChoiceConfig(
            choices=tuple(choices) if isinstance(choices, (list, tuple)) else choices,
            icon=icon,
            context_url=context_url,
        )
    return BooleanConfig(icon=icon, context_url=context_url)


def config_to_record(cfg: HabitConfig) -> dict[str, Any]:
    record: dict[str, Any] = {}
    if isinstance(cfg, NumericConfig):
        if cfg.unit is not None:
            record["numeric_unit"] = cfg.unit
        if cfg.numeric_range is not None:
            record["numeric_range"] = list(cfg.numeric_range)
    elif isinstance(cfg, ChoiceConfig):
        record["choices"] = list(cfg.choices)
    if cfg.context_url is not None:
        record["context_url"] = cfg.context_url
    if cfg.icon is not None:
        record["icon"] = cfg.icon
    return record


def record_to_habit(record: Mapping[str, Any]) -> Habit:
    """
    Converts one stored habit record into a Habit.
    Expected keys: id, name, type, atomic_prompt, configuration, position, is_active, created_at
    """
    if not isinstance(record, Mapping):
        raise ValidationError("habit record must be an object")
    missing = [f for f in _HABIT_FIELDS if f not in record and f != "configuration"]
    if missing:
        raise ValidationError(f"habit record missing {', '.join(missing)}")
    habit_type = cast(HabitType, record["type"])
    return Habit(
        id=cast(str, record["id"]),
        name=cast(str, record["name"]),
        type=habit_type,
        atomic_prompt=cast(str, record["atomic_prompt"]),
        configuration=config_from_record(habit_type, record.get("configuration")),
        position=cast(int, record["position"]),
        is_active=cast(bool, record["is_active"]),
        created_at=_parse_datetime(record["created_at"]),
    )


def habit_to_record(habit: Habit) -> HabitRecord:
    return {
        "id": habit.id,
        "name": habit.name,
        "type": habit.type,
        "atomic_prompt": habit.atomic_prompt,
        "configuration": config_to_record(habit.configuration),
        "position": habit.position,
        "is_active": habit.is_active,
        "created_at": habit.created_at.isoformat(),
    }


def draft_from_record(record: Mapping[str, Any]) -> HabitDraft:
    """Builds a HabitDraft from a plain mapping. id, created_at and position are ignored."""
    if not isinstance(record, Mapping):
        raise ValidationError("habit must be an object")
    missing = [f for f in ("name", "type", "atomic_prompt") if f not in record]
    if missing:
        raise ValidationError(f"habit missing {', '.join(missing)}")
    habit_type = cast(HabitType, record["type"])
    cfg = record.get("configuration")
    if isinstance(cfg, Mapping):
        cfg = config_from_record(habit_type, cfg)
    return HabitDraft(
        name=cast(str, record["name"]),
        type=habit_type,
        atomic_prompt=cast(str, record["atomic_prompt"]),
        configuration=cfg,
        is_active=cast(bool, record.get("is_active", True)),
    )
