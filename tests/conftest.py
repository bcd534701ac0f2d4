import pytest

from routine import config, db
from routine.core.models import HabitDraft, NumericConfig


@pytest.fixture
def tmp_routine_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "ROUTINE_DIR", tmp_path)
    monkeypatch.setattr(config, "DB_PATH", tmp_path / "routine.db")
    monkeypatch.setattr(config, "CONFIG_PATH", tmp_path / "config.yaml")
    monkeypatch.setattr(config._config, "_data", {})
    db.init()
    return tmp_path


@pytest.fixture
def make_draft():
    def _make(name: str = "Read", **kwargs) -> HabitDraft:
        kwargs.setdefault("type", "boolean")
        kwargs.setdefault("atomic_prompt", f"Did you {name.lower()} today?")
        return HabitDraft(name=name, **kwargs)

    return _make


@pytest.fixture
def numeric_draft():
    return HabitDraft(
        name="Sleep",
        type="numeric",
        atomic_prompt="How many hours did you sleep?",
        configuration=NumericConfig(unit="hours", numeric_range=(0, 12)),
    )
