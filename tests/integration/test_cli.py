import sys

import pytest

from contentkit.adapters.clock import SystemClock
from contentkit.adapters.sqlite.repos import SQLiteContentItemRepo, SQLiteContentModelRepo
from contentkit.app_shell import cli
from contentkit.components.content import CreateItemInput
from contentkit.components.content import run_create as create_item
from contentkit.components.content_models import CreateModelInput
from contentkit.components.content_models import run_create as create_model


@pytest.fixture
def cli_env(tmp_path, rules_path, monkeypatch):
    monkeypatch.setenv("CONTENTKIT_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("CONTENTKIT_RULES", str(rules_path))
    return str(tmp_path / "data" / "contentkit.db")


def run_cli(monkeypatch, *args: str) -> None:
    monkeypatch.setattr(sys, "argv", ["contentkit", *args])
    cli.main()


def test_migrate_then_list(cli_env, monkeypatch, capsys):
    run_cli(monkeypatch, "migrate")
    assert "Applied 0001_content.sql" in capsys.readouterr().out

    run_cli(monkeypatch, "migrate")
    assert "up to date" in capsys.readouterr().out

    run_cli(monkeypatch, "models")
    assert "No content models." in capsys.readouterr().out


def test_items(cli_env, monkeypatch, capsys):
    run_cli(monkeypatch, "migrate")
    models = SQLiteContentModelRepo(cli_env)
    items = SQLiteContentItemRepo(cli_env)
    clock = SystemClock()
    create_model(
        CreateModelInput(
            name="Post",
            fields=[{"name": "title", "type": "text"}],
            settings={"slugField": "title"},
        ),
        repo=models,
        time=clock,
    )
    create_item(
        CreateItemInput(model_slug="post", data={"title": "Hello"}, author_id="u"),
        items=items,
        models=models,
        time=clock,
    )
    capsys.readouterr()

    run_cli(monkeypatch, "models")
    assert "post\tPost\t1 fields" in capsys.readouterr().out

    run_cli(monkeypatch, "items", "post", "--status", "draft")
    out = capsys.readouterr().out
    assert "hello\tdraft\tv1" in out
    assert "1 of 1 items." in out


def test_items_unknown_model(cli_env, monkeypatch):
    run_cli(monkeypatch, "migrate")
    with pytest.raises(SystemExit):
        run_cli(monkeypatch, "items", "ghost")
