"""Whole-collection persistence for habits.

The collection lives as one JSON array under a single key of the ``store``
table. Every save replaces that value with one statement, so a reader never
sees a half-written collection.
"""

import json
import logging
import sqlite3
from collections.abc import Sequence

from fncli import cli

from . import config, db
from .core.errors import StorageError, ValidationError
from .core.models import Habit, StorageStats
from .core.result import operation
from .lib.converters import habit_to_record, record_to_habit
from .lib.errors import echo
from .lib.render import render_stats
from .validation import validate_collection

__all__ = ["get_storage_stats", "load_habits", "save_habits"]

logger = logging.getLogger(__name__)


def _decode(blob: str) -> list[Habit]:
    try:
        parsed = json.loads(blob)
    except json.JSONDecodeError as e:
        raise StorageError("Invalid JSON format", "load_habits") from e
    if not isinstance(parsed, list):
        raise StorageError("Invalid habits data: expected a list of habits", "load_habits")
    try:
        habits = [record_to_habit(record) for record in parsed]
        habits.sort(key=lambda h: h.position)
        validate_collection(habits, config.MAX_HABITS)
    except (ValidationError, TypeError, ValueError) as e:
        raise StorageError(f"Invalid habits data: {e}", "load_habits") from e
    return habits


def _used_bytes(conn: sqlite3.Connection, exclude_key: str | None = None) -> int:
    row = conn.execute(
        "SELECT COALESCE(SUM(LENGTH(CAST(key AS BLOB)) + LENGTH(CAST(value AS BLOB))), 0) "
        "FROM store WHERE key IS NOT ?",
        (exclude_key,),
    ).fetchone()
    return int(row[0])


@operation("getting habits")
def load_habits() -> list[Habit]:
    try:
        with db.get_db() as conn:
            row = conn.execute(
                "SELECT value FROM store WHERE key = ?", (config.HABITS_KEY,)
            ).fetchone()
    except sqlite3.Error as e:
        raise StorageError(f"Storage unavailable: {e}", "load_habits") from e
    if row is None or not row[0]:
        return []
    return _decode(row[0])


@operation("saving habits")
def save_habits(habits: Sequence[Habit]) -> None:
    ordered = sorted(habits, key=lambda h: h.position)
    validate_collection(ordered, config.MAX_HABITS)
    try:
        blob = json.dumps([habit_to_record(h) for h in ordered], ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise StorageError(f"Failed to serialize habits: {e}", "save_habits") from e

    key = config.HABITS_KEY
    try:
        with db.get_db() as conn:
            total = _used_bytes(conn, exclude_key=key) + len(key.encode()) + len(blob.encode())
            if total > config.STORAGE_LIMIT_BYTES:
                raise StorageError(
                    f"Storage quota exceeded ({total} of {config.STORAGE_LIMIT_BYTES} bytes)",
                    "save_habits",
                )
            if total > config.STORAGE_LIMIT_BYTES * config.STORAGE_WARNING_THRESHOLD:
                logger.warning(
                    "storage approaching limit: %d of %d bytes", total, config.STORAGE_LIMIT_BYTES
                )
            conn.execute(
                "INSERT INTO store (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP",
                (key, blob),
            )
    except sqlite3.Error as e:
        raise StorageError(f"Storage unavailable: {e}", "save_habits") from e
    logger.debug("saved %d habits", len(ordered))


def get_storage_stats() -> StorageStats:
    try:
        with db.get_db() as conn:
            total = _used_bytes(conn)
            key_count = conn.execute("SELECT COUNT(*) FROM store").fetchone()[0]
    except sqlite3.Error as e:
        logger.warning("could not read storage stats: %s", e)
        return StorageStats()
    loaded = load_habits()
    return StorageStats(
        total_size=total,
        key_count=key_count,
        habits_count=len(loaded.data or []),
        approaching_limit=total > config.STORAGE_LIMIT_BYTES * config.STORAGE_WARNING_THRESHOLD,
    )


@cli("routine", name="stats")
def stats() -> None:
    """Show storage usage"""
    echo(render_stats(get_storage_stats(), config.STORAGE_LIMIT_BYTES))
