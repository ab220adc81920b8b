import sqlite3
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from contentkit.adapters.memory import (
    InMemoryContentItemRepo,
    InMemoryContentModelRepo,
    InMemoryContentStore,
)
from contentkit.adapters.sqlite.migrator import SQLiteMigrator
from contentkit.adapters.sqlite.repos import SQLiteContentItemRepo, SQLiteContentModelRepo
from contentkit.components.content import CreateItemInput, UpdateItemInput
from contentkit.components.content import run_create as create_item
from contentkit.components.content import run_update as update_item
from contentkit.domain.entities import ContentField, ContentItem, ContentModel, ModelSettings
from contentkit.domain.errors import ConflictError, UnexpectedError

T0 = datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def model_repo(db_path):
    return SQLiteContentModelRepo(db_path)


@pytest.fixture
def item_repo(db_path):
    return SQLiteContentItemRepo(db_path)


def make_model(slug: str = "post", created_at: datetime = T0) -> ContentModel:
    return ContentModel(
        id=uuid4(),
        name=slug.title(),
        slug=slug,
        display_name=slug.title(),
        fields=[
            ContentField(name="title", type="text", validation={"required": True}),
            ContentField(name="tags", type="multiselect", options=[{"label": "A", "value": "a"}]),
        ],
        settings=ModelSettings(slugField="title"),
        created_by="user-1",
        created_at=created_at,
        updated_at=created_at,
    )


def make_item(model: ContentModel, slug: str | None, offset: int = 0, **kwargs) -> ContentItem:
    at = T0 + timedelta(minutes=offset)
    kwargs.setdefault("data", {"title": slug or "untitled"})
    return ContentItem(
        id=uuid4(),
        model_id=model.id,
        model_slug=model.slug,
        slug=slug,
        author_id="user-1",
        created_at=at,
        updated_at=at,
        **kwargs,
    )


def test_migrations_are_idempotent(db_path):
    assert SQLiteMigrator(db_path).run_migrations() == []


def test_model_round_trip(model_repo):
    model = make_model()
    model_repo.create(model)

    fetched = model_repo.get_by_slug("post")
    assert fetched.model_dump() == model.model_dump()
    assert model_repo.get_by_id(model.id).model_dump() == model.model_dump()
    assert fetched.fields[0].required
    assert fetched.settings.slug_field == "title"
    assert model_repo.slug_exists("post")
    assert not model_repo.slug_exists("page")


def test_model_slug_unique(model_repo):
    model_repo.create(make_model())
    with pytest.raises(ConflictError):
        model_repo.create(make_model())


def test_list_models_newest_first(model_repo):
    model_repo.create(make_model("old", created_at=T0))
    model_repo.create(make_model("new", created_at=T0 + timedelta(hours=1)))
    assert [m.slug for m in model_repo.list_all()] == ["new", "old"]


def test_model_update(model_repo):
    model = make_model()
    model_repo.create(model)
    later = T0 + timedelta(hours=1)

    model_repo.update(
        model.id,
        {
            "name": "Article",
            "fields": [ContentField(name="headline", type="text")],
            "settings": ModelSettings(singleton=True),
            "updated_at": later,
        },
    )

    fetched = model_repo.get_by_id(model.id)
    assert fetched.name == "Article"
    assert fetched.slug == "post"
    assert fetched.field_names() == ["headline"]
    assert fetched.settings.singleton is True
    assert fetched.updated_at == later


def test_model_delete_cascades_items(model_repo, item_repo):
    model = make_model()
    model_repo.create(model)
    item_repo.create(make_item(model, "hello"))

    model_repo.delete(model.id)

    assert model_repo.get_by_id(model.id) is None
    assert item_repo.count_by_model(model.id) == 0


def test_item_round_trip(model_repo, item_repo):
    model = make_model()
    model_repo.create(model)
    item = make_item(model, "hello", data={"title": "Hello", "tags": ["a"], "note": "Grüße"})
    item_repo.create(item)

    assert item_repo.get_by_id(item.id).model_dump() == item.model_dump()
    assert item_repo.get_by_slug("post", "hello").id == item.id
    assert item_repo.get_by_slug("post", str(item.id)).id == item.id
    assert item_repo.get_by_slug("page", "hello") is None


def test_item_slug_unique_per_model(model_repo, item_repo):
    post, page = make_model("post"), make_model("page")
    model_repo.create(post)
    model_repo.create(page)
    item_repo.create(make_item(post, "hello"))
    item_repo.create(make_item(page, "hello"))

    with pytest.raises(ConflictError):
        item_repo.create(make_item(post, "hello"))

    # Items without a slug never collide
    item_repo.create(make_item(post, None))
    item_repo.create(make_item(post, None))
    assert item_repo.count_by_model(post.id) == 3


def test_item_update_versions_and_keeps_first_publish(model_repo, item_repo):
    model = make_model()
    model_repo.create(model)
    item = make_item(model, "hello")
    item_repo.create(item)

    first = T0 + timedelta(hours=1)
    item_repo.update(item.id, updated_at=first, status="published", published_at=first)
    item_repo.update(item.id, updated_at=first, status="draft")
    second = T0 + timedelta(hours=2)
    item_repo.update(item.id, updated_at=second, status="published", published_at=second)

    fetched = item_repo.get_by_id(item.id)
    assert fetched.version == 4
    assert fetched.status == "published"
    assert fetched.published_at == first
    assert fetched.updated_at == second


def test_query_filters_sorts_and_pages(model_repo, item_repo):
    model = make_model()
    model_repo.create(model)
    for i in range(4):
        item_repo.create(make_item(model, f"draft-{i}", offset=i))
    for i in range(2):
        item_repo.create(make_item(model, f"live-{i}", offset=10 + i, status="published"))

    page, total = item_repo.query("post", status="draft", limit=2, offset=0)
    assert total == 4
    assert [i.slug for i in page] == ["draft-3", "draft-2"]

    page, total = item_repo.query("post", sort_by="slug", sort_order="asc", limit=2, offset=1)
    assert total == 6
    assert [i.slug for i in page] == ["draft-1", "draft-2"]

    page, total = item_repo.query("post", search="live")
    assert total == 2

    with pytest.raises(ValueError):
        item_repo.query("post", sort_by="data; DROP TABLE content_items")


def test_search_escapes_wildcards(model_repo, item_repo):
    model = make_model()
    model_repo.create(model)
    item_repo.create(make_item(model, "plain", data={"title": "plain"}))
    item_repo.create(make_item(model, "percent", data={"title": "100% sure"}))

    _, total = item_repo.query("post", search="%")
    assert total == 1


def test_corrupt_json_raises_unexpected(db_path, model_repo, item_repo):
    model = make_model()
    model_repo.create(model)
    item = make_item(model, "hello")
    item_repo.create(item)

    conn = sqlite3.connect(db_path)
    conn.execute("UPDATE content_items SET data = '{broken' WHERE id = ?", (str(item.id),))
    conn.commit()
    conn.close()

    with pytest.raises(UnexpectedError):
        item_repo.get_by_id(item.id)


def test_item_manager_over_sqlite(model_repo, item_repo):
    """The item manager runs unchanged on the SQLite adapters."""

    class Clock:
        def __init__(self):
            self.at = T0

        def now_utc(self):
            self.at += timedelta(seconds=1)
            return self.at

    model_repo.create(make_model())
    clock = Clock()
    deps = {"items": item_repo, "models": model_repo, "time": clock}

    first = create_item(
        CreateItemInput(model_slug="post", data={"title": "Hello World"}, author_id="u"), **deps
    )
    second = create_item(
        CreateItemInput(model_slug="post", data={"title": "Hello World"}, author_id="u"), **deps
    )
    assert (first.item.slug, second.item.slug) == ("hello-world", "hello-world-1")

    updated = update_item(
        UpdateItemInput(model_slug="post", slug="hello-world", data={"tags": ["a"]}), **deps
    )
    assert updated.item.version == 2
    assert updated.item.data == {"title": "Hello World", "tags": ["a"]}


@pytest.fixture(params=["sqlite", "memory"])
def repos(request, db_path):
    if request.param == "sqlite":
        return SQLiteContentModelRepo(db_path), SQLiteContentItemRepo(db_path)
    store = InMemoryContentStore()
    return InMemoryContentModelRepo(store), InMemoryContentItemRepo(store)


@pytest.mark.parametrize("sort_order", ["asc", "desc"])
def test_unpublished_items_sort_last(repos, sort_order):
    model_repo, item_repo = repos
    model = make_model()
    model_repo.create(model)
    item_repo.create(make_item(model, "draft", offset=0))
    item_repo.create(make_item(model, "early", offset=1, status="published", published_at=T0))
    item_repo.create(
        make_item(
            model,
            "late",
            offset=2,
            status="published",
            published_at=T0 + timedelta(days=1),
        )
    )

    page, _ = item_repo.query("post", sort_by="published_at", sort_order=sort_order)

    expected = ["early", "late"] if sort_order == "asc" else ["late", "early"]
    assert [i.slug for i in page] == [*expected, "draft"]


def test_failed_migration_rolls_back(tmp_path):
    migrations = tmp_path / "migrations"
    migrations.mkdir()
    ok = "CREATE TABLE a (id INTEGER);\n-- Down\nDROP TABLE a;\n"
    bad = "CREATE TABLE b (id INTEGER);\nINSERT INTO nope VALUES (1);\n"
    (migrations / "0001_ok.sql").write_text(ok)
    (migrations / "0002_bad.sql").write_text(bad)
    db = str(tmp_path / "db" / "test.db")
    migrator = SQLiteMigrator(db, migrations)

    with pytest.raises(RuntimeError, match="0002_bad.sql"):
        migrator.run_migrations()

    conn = sqlite3.connect(db)
    tables = {r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}
    applied = {r[0] for r in conn.execute("SELECT name FROM schema_migrations")}
    conn.close()
    assert "a" in tables
    assert "b" not in tables
    assert applied == {"0001_ok.sql"}


def test_down_section_is_not_applied(tmp_path):
    migrations = tmp_path / "migrations"
    migrations.mkdir()
    (migrations / "0001_t.sql").write_text("CREATE TABLE t (id INTEGER);\n-- Down\nDROP TABLE t;\n")
    db = str(tmp_path / "test.db")

    assert SQLiteMigrator(db, migrations).run_migrations() == ["0001_t.sql"]

    conn = sqlite3.connect(db)
    assert conn.execute("SELECT COUNT(*) FROM t").fetchone() == (0,)
    conn.close()
