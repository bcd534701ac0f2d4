from collections.abc import Sequence

from routine.core.models import ChoiceConfig, Habit, HabitTemplate, NumericConfig, StorageStats

from . import ansi

__all__ = ["format_number", "render_habit", "render_habits", "render_stats", "render_templates"]


def format_number(val: float) -> str:
    return str(int(val)) if float(val).is_integer() else f"{val:g}"


def _describe_config(habit: Habit) -> str:
    cfg = habit.configuration
    if isinstance(cfg, NumericConfig):
        parts = []
        if cfg.numeric_range is not None:
            lo, hi = cfg.numeric_range
            parts.append(f"{format_number(lo)}-{format_number(hi)}")
        if cfg.unit:
            parts.append(cfg.unit)
        return " ".join(parts)
    if isinstance(cfg, ChoiceConfig):
        return " / ".join(cfg.choices)
    return ""


def render_habit(habit: Habit) -> str:
    icon = f"{habit.configuration.icon} " if habit.configuration.icon else ""
    detail = _describe_config(habit)
    detail_str = f"  {ansi.gray(habit.type)}" + (f" {ansi.gray(detail)}" if detail else "")
    id_str = ansi.muted(f"[{habit.id[:8]}]")
    head = f"{habit.position + 1}. {icon}{habit.name}"
    if not habit.is_active:
        return f"  {ansi.dim(head)}{detail_str}  {ansi.yellow('paused')} {id_str}"
    return f"  {ansi.bold(head)}{detail_str} {id_str}"


def render_habits(habits: Sequence[Habit], limit: int) -> str:
    header = ansi.gray(f"habits {len(habits)}/{limit}")
    if not habits:
        return f"{header}\n  {ansi.dim('no habits yet - add one or load a template')}"
    lines = [header]
    for habit in habits:
        lines.append(render_habit(habit))
        lines.append(f"     {ansi.dim(habit.atomic_prompt)}")
    return "\n".join(lines)


def render_templates(templates: Sequence[HabitTemplate]) -> str:
    lines = []
    for template in templates:
        lines.append(f"{ansi.bold(template.name)}  {ansi.gray(template.description)}")
        lines.extend(f"  - {draft.name} {ansi.muted(draft.type)}" for draft in template.habits)
    return "\n".join(lines)


def render_stats(stats: StorageStats, limit_bytes: int) -> str:
    pct = stats.total_size / limit_bytes * 100 if limit_bytes else 0.0
    usage = f"{stats.total_size} bytes ({pct:.1f}% of {limit_bytes})"
    if stats.approaching_limit:
        usage = ansi.red(usage)
    return "\n".join(
        [
            f"habits  {stats.habits_count}",
            f"keys    {stats.key_count}",
            f"usage   {usage}",
        ]
    )
