from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from contentkit.adapters.memory import (
    InMemoryContentItemRepo,
    InMemoryContentModelRepo,
    InMemoryContentStore,
)
from contentkit.adapters.sqlite.migrator import SQLiteMigrator
from contentkit.rules.loader import load_rules
from contentkit.rules.models import ContentRules

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class FakeClock:
    """Deterministic clock; every call advances one second."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2026, 6, 15, 12, 0, 0, tzinfo=UTC)

    def now_utc(self) -> datetime:
        value = self.current
        self.current = value + timedelta(seconds=1)
        return value


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryContentStore:
    return InMemoryContentStore()


@pytest.fixture
def model_repo(store: InMemoryContentStore) -> InMemoryContentModelRepo:
    return InMemoryContentModelRepo(store)


@pytest.fixture
def item_repo(store: InMemoryContentStore) -> InMemoryContentItemRepo:
    return InMemoryContentItemRepo(store)


@pytest.fixture
def rules_path() -> Path:
    """The real rules file shipped at the project root."""
    path = PROJECT_ROOT / "rules.yaml"
    if not path.exists():
        raise FileNotFoundError(f"Rules not found at {path}")
    return path


@pytest.fixture
def content_rules(rules_path: Path) -> ContentRules:
    return load_rules(rules_path).content


@pytest.fixture
def db_path(tmp_path) -> str:
    """A migrated SQLite database in a temp dir."""
    path = str(tmp_path / "data" / "contentkit.db")
    SQLiteMigrator(path).run_migrations()
    return path
