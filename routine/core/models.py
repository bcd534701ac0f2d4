import dataclasses
from datetime import datetime
from typing import Literal

HabitType = Literal["boolean", "numeric", "choice"]

HABIT_TYPES: tuple[HabitType, ...] = ("boolean", "numeric", "choice")


@dataclasses.dataclass(frozen=True)
class BooleanConfig:
    icon: str | None = None
    context_url: str | None = None


@dataclasses.dataclass(frozen=True)
class NumericConfig:
    unit: str | None = None
    numeric_range: tuple[float, float] | None = None
    icon: str | None = None
    context_url: str | None = None


@dataclasses.dataclass(frozen=True)
class ChoiceConfig:
    choices: tuple[str, ...] = ()
    icon: str | None = None
    context_url: str | None = None


HabitConfig = BooleanConfig | NumericConfig | ChoiceConfig

CONFIG_TYPES: dict[str, type[HabitConfig]] = {
    "boolean": BooleanConfig,
    "numeric": NumericConfig,
    "choice": ChoiceConfig,
}


def default_config(habit_type: str) -> HabitConfig:
    """Empty configuration variant for a habit type (BooleanConfig when unknown)."""
    return CONFIG_TYPES.get(habit_type, BooleanConfig)()


@dataclasses.dataclass(frozen=True)
class HabitDraft:
    name: str
    type: HabitType
    atomic_prompt: str
    configuration: HabitConfig | None = None
    is_active: bool = True

    def resolved_config(self) -> HabitConfig:
        if self.configuration is None:
            return default_config(self.type)
        return self.configuration


@dataclasses.dataclass(frozen=True)
class Habit:
    id: str
    name: str
    type: HabitType
    atomic_prompt: str
    configuration: HabitConfig
    position: int
    is_active: bool
    created_at: datetime


@dataclasses.dataclass(frozen=True)
class HabitTemplate:
    name: str
    description: str
    habits: tuple[HabitDraft, ...]


@dataclasses.dataclass(frozen=True)
class StorageStats:
    total_size: int = 0
    key_count: int = 0
    habits_count: int = 0
    approaching_limit: bool = False
