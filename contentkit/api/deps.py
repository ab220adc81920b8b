import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any

from fastapi import Depends, Header, HTTPException, status

from contentkit.adapters.clock import SystemClock
from contentkit.adapters.memory import (
    InMemoryContentItemRepo,
    InMemoryContentModelRepo,
    InMemoryContentStore,
)
from contentkit.adapters.sqlite.repos import SQLiteContentItemRepo, SQLiteContentModelRepo
from contentkit.rules.loader import load_rules
from contentkit.rules.models import ContentRules, Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("CONTENTKIT_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "contentkit.db")
        self.rules_path = Path(os.environ.get("CONTENTKIT_RULES", self.base_dir / "rules.yaml"))
        self.storage = os.environ.get("CONTENTKIT_STORAGE", "sqlite")


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def _load_rules(path: Path) -> Rules:
    return load_rules(path)


def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return _load_rules(settings.rules_path)


def get_content_rules(rules: Rules = Depends(get_rules)) -> ContentRules:
    return rules.content


# --- Repos ---
@lru_cache
def get_memory_store() -> InMemoryContentStore:
    return InMemoryContentStore()


def get_model_repo(settings: Settings = Depends(get_settings)) -> Any:
    if settings.storage == "memory":
        return InMemoryContentModelRepo(get_memory_store())
    return SQLiteContentModelRepo(settings.db_path)


def get_item_repo(settings: Settings = Depends(get_settings)) -> Any:
    if settings.storage == "memory":
        return InMemoryContentItemRepo(get_memory_store())
    return SQLiteContentItemRepo(settings.db_path)


def get_time_port() -> SystemClock:
    return SystemClock()


# --- Identity ---
async def get_author_id(
    x_author_id: Annotated[str | None, Header()] = None,
) -> str:
    """
    Identity established by the upstream authentication layer.

    Authentication itself (tokens, API keys) happens before requests reach
    this service; it forwards the authenticated identity in X-Author-Id.
    """
    if not x_author_id or not x_author_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return x_author_id.strip()
