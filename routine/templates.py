"""Preset habit collections for quick setup."""

import logging

from fncli import UsageError, cli

from . import config, storage
from .core.errors import LimitExceededError, StorageError, TemplateNotFoundError
from .core.models import BooleanConfig, Habit, HabitDraft, HabitTemplate, NumericConfig
from .core.result import expect, operation
from .habits import get_habits_sorted, new_habit
from .lib.errors import echo
from .lib.render import render_habits, render_templates

__all__ = ["HABIT_TEMPLATES", "get_template", "load_habit_template"]

logger = logging.getLogger(__name__)

HABIT_TEMPLATES: tuple[HabitTemplate, ...] = (
    HabitTemplate(
        name="Productivity Focus",
        description="Deep work, financial awareness, and physical health",
        habits=(
            HabitDraft(
                name="Deep Work Hours",
                type="numeric",
                atomic_prompt="How many hours of focused, deep work did you complete today?",
                configuration=NumericConfig(unit="hours", numeric_range=(0, 12), icon="🧠"),
            ),
            HabitDraft(
                name="Budget Reviewed",
                type="boolean",
                atomic_prompt="Did you check your budget or financial situation today?",
                configuration=BooleanConfig(icon="💰"),
            ),
            HabitDraft(
                name="Exercise Completed",
                type="boolean",
                atomic_prompt="Did you complete at least 30 minutes of physical exercise?",
                configuration=BooleanConfig(icon="🏃"),
            ),
        ),
    ),
    HabitTemplate(
        name="Health & Wellness",
        description="Physical health tracking and wellness metrics",
        habits=(
            HabitDraft(
                name="Daily Steps",
                type="numeric",
                atomic_prompt="How many steps did you take today?",
                configuration=NumericConfig(unit="steps", numeric_range=(0, 30000), icon="👟"),
            ),
            HabitDraft(
                name="Water Intake",
                type="numeric",
                atomic_prompt="How many glasses of water did you drink today?",
                configuration=NumericConfig(unit="glasses", numeric_range=(0, 15), icon="💧"),
            ),
            HabitDraft(
                name="Sleep Hours",
                type="numeric",
                atomic_prompt="How many hours of sleep did you get last night?",
                configuration=NumericConfig(unit="hours", numeric_range=(0, 12), icon="😴"),
            ),
        ),
    ),
    HabitTemplate(
        name="Work-Life Balance",
        description="Personal relationships, growth, and mindfulness",
        habits=(
            HabitDraft(
                name="Family Time",
                type="boolean",
                atomic_prompt="Did you spend quality time with family or loved ones today?",
                configuration=BooleanConfig(icon="👨‍👩‍👧‍👦"),
            ),
            HabitDraft(
                name="Learning Activity",
                type="boolean",
                atomic_prompt="Did you engage in learning something new today?",
                configuration=BooleanConfig(icon="📚"),
            ),
            HabitDraft(
                name="Gratitude Practice",
                type="boolean",
                atomic_prompt="Did you practice gratitude or mindfulness today?",
                configuration=BooleanConfig(icon="🙏"),
            ),
        ),
    ),
)


def get_template(name: str) -> HabitTemplate | None:
    wanted = name.strip().lower()
    return next((t for t in HABIT_TEMPLATES if t.name.lower() == wanted), None)


@operation("loading template")
def load_habit_template(template_name: str) -> list[Habit]:
    """Append every habit of a preset, or none of them.

    Returns only the newly created habits.
    """
    template = get_template(template_name)
    if template is None:
        raise TemplateNotFoundError(f"Template '{template_name}' not found")

    existing = list(expect(storage.load_habits(), StorageError) or [])
    total = len(existing) + len(template.habits)
    limit = config.get_habit_limit()
    if total > limit:
        raise LimitExceededError(
            f"Cannot load template: would exceed {limit} habit limit ({total} total)"
        )

    new_habits = [
        new_habit(draft, position=len(existing) + i) for i, draft in enumerate(template.habits)
    ]
    expect(storage.save_habits([*existing, *new_habits]), StorageError)
    logger.info("loaded template %s (%d habits)", template.name, len(new_habits))
    return new_habits


# ── cli ──────────────────────────────────────────────────────────────────────


@cli("routine", name="templates")
def templates() -> None:
    """List habit templates"""
    echo(render_templates(HABIT_TEMPLATES))


@cli("routine", name="template")
def template(name: list[str]) -> None:
    """Load a habit template by name"""
    name_str = " ".join(name) if name else ""
    if not name_str:
        raise UsageError("Usage: routine template <name>")
    loaded = expect(load_habit_template(name_str)) or []
    echo(f"loaded {len(loaded)} habits from {name_str}")
    echo(render_habits(get_habits_sorted().data or [], config.get_habit_limit()))
