from pathlib import Path

import yaml

ROUTINE_DIR = Path.home() / ".routine"
DB_PATH = ROUTINE_DIR / "routine.db"
CONFIG_PATH = ROUTINE_DIR / "config.yaml"

MAX_HABITS = 7
HABITS_KEY = "habits"

STORAGE_LIMIT_BYTES = 5 * 1024 * 1024
STORAGE_WARNING_THRESHOLD = 0.8

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Config:
    """Single-instance config manager. Load once, cache in memory."""

    _instance: "Config | None" = None
    _data: dict[str, object]

    def __new__(cls) -> "Config":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._data = {}
            cls._instance._load()
        return cls._instance

    def _load(self) -> None:
        """Load config from disk."""
        if not CONFIG_PATH.exists():
            self._data = {}
            return
        try:
            with CONFIG_PATH.open() as f:
                loaded = yaml.safe_load(f)
        except (OSError, yaml.YAMLError):
            loaded = None
        self._data = loaded if isinstance(loaded, dict) else {}

    def _save(self) -> None:
        """Persist config to disk."""
        ROUTINE_DIR.mkdir(exist_ok=True)
        with CONFIG_PATH.open("w") as f:
            yaml.dump(self._data, f, default_flow_style=False, allow_unicode=True)

    def get(self, key: str, default: object = None) -> object:
        return self._data.get(key, default)

    def set(self, key: str, value: object) -> None:
        """Set config value and persist."""
        self._data[key] = value
        self._save()


_config = Config()


def get_habit_limit() -> int:
    """Cap applied when adding habits. May lower MAX_HABITS, never raise it."""
    val = _config.get("habit_limit")
    if isinstance(val, int) and not isinstance(val, bool) and val > 0:
        return min(val, MAX_HABITS)
    return MAX_HABITS


def set_habit_limit(limit: int) -> None:
    _config.set("habit_limit", limit)


def get_log_level() -> str:
    val = _config.get("log_level")
    level = str(val).strip().upper() if val else "WARNING"
    return level if level in _LOG_LEVELS else "WARNING"
