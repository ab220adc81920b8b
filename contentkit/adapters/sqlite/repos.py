import builtins
import json
import logging
import sqlite3
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import ValidationError

from contentkit.domain.entities import ContentField, ContentItem, ContentModel, ModelSettings
from contentkit.domain.errors import ConflictError, UnexpectedError

logger = logging.getLogger(__name__)

SORT_COLUMNS = {"created_at", "updated_at", "published_at", "slug", "status", "version"}


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def parse_dt(s: str | None) -> datetime | None:
    return datetime.fromisoformat(s) if s else None


def _dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def _loads(raw: str, what: str) -> Any:
    try:
        return json.loads(raw)
    except (TypeError, json.JSONDecodeError) as e:
        raise UnexpectedError(f"Malformed stored JSON in {what}") from e


def _like(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _raise_conflict(e: sqlite3.IntegrityError, message: str) -> None:
    if "UNIQUE" in str(e):
        raise ConflictError(message) from e
    raise e


class _SQLiteRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn


class SQLiteContentModelRepo(_SQLiteRepo):
    def create(self, model: ContentModel) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO content_models (
                    id, name, slug, display_name, description,
                    fields, settings, created_by, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(model.id),
                    model.name,
                    model.slug,
                    model.display_name,
                    model.description,
                    self._dump_fields(model.fields),
                    self._dump_settings(model.settings),
                    model.created_by,
                    model.created_at.isoformat(),
                    model.updated_at.isoformat(),
                ),
            )
            conn.commit()
        except sqlite3.IntegrityError as e:
            conn.rollback()
            _raise_conflict(e, f"Content model slug '{model.slug}' already exists")
        finally:
            conn.close()

    def get_by_slug(self, slug: str) -> ContentModel | None:
        return self._get_one("SELECT * FROM content_models WHERE slug = ?", (slug,))

    def get_by_id(self, model_id: UUID) -> ContentModel | None:
        return self._get_one("SELECT * FROM content_models WHERE id = ?", (str(model_id),))

    def list_all(self) -> builtins.list[ContentModel]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM content_models ORDER BY created_at DESC, rowid DESC"
            ).fetchall()
            return [self._map_row(row) for row in rows]
        finally:
            conn.close()

    def update(self, model_id: UUID, changes: dict[str, Any]) -> None:
        columns: list[str] = []
        values: list[Any] = []

        for key in ("name", "display_name", "description"):
            if key in changes:
                columns.append(f"{key} = ?")
                values.append(changes[key])
        if "fields" in changes:
            columns.append("fields = ?")
            values.append(self._dump_fields(changes["fields"]))
        if "settings" in changes:
            columns.append("settings = ?")
            values.append(self._dump_settings(changes["settings"]))
        if "updated_at" in changes:
            columns.append("updated_at = ?")
            values.append(changes["updated_at"].isoformat())

        if not columns:
            return

        values.append(str(model_id))
        conn = self._get_conn()
        try:
            conn.execute(f"UPDATE content_models SET {', '.join(columns)} WHERE id = ?", values)
            conn.commit()
        finally:
            conn.close()

    def delete(self, model_id: UUID) -> None:
        conn = self._get_conn()
        try:
            # Items cascade through the foreign key
            conn.execute("DELETE FROM content_models WHERE id = ?", (str(model_id),))
            conn.commit()
        finally:
            conn.close()

    def slug_exists(self, slug: str) -> bool:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT 1 FROM content_models WHERE slug = ?", (slug,)).fetchone()
            return row is not None
        finally:
            conn.close()

    def _get_one(self, query: str, params: tuple[Any, ...]) -> ContentModel | None:
        conn = self._get_conn()
        try:
            row = conn.execute(query, params).fetchone()
            return self._map_row(row) if row else None
        finally:
            conn.close()

    @staticmethod
    def _dump_fields(fields: builtins.list[ContentField]) -> str:
        return _dumps([f.model_dump(mode="json", by_alias=True, exclude_none=True) for f in fields])

    @staticmethod
    def _dump_settings(settings: ModelSettings) -> str:
        return _dumps(settings.model_dump(mode="json", by_alias=True))

    def _map_row(self, row: dict[str, Any]) -> ContentModel:
        fields_raw = _loads(row["fields"], f"content model {row['id']} fields")
        settings_raw = _loads(row["settings"], f"content model {row['id']} settings")
        try:
            return ContentModel(
                id=UUID(row["id"]),
                name=row["name"],
                slug=row["slug"],
                display_name=row["display_name"],
                description=row["description"],
                fields=[ContentField.model_validate(f) for f in fields_raw],
                settings=ModelSettings.model_validate(settings_raw),
                created_by=row["created_by"],
                created_at=parse_dt(row["created_at"]),
                updated_at=parse_dt(row["updated_at"]),
            )
        except ValidationError as e:
            raise UnexpectedError(f"Stored content model {row['id']} is invalid") from e


class SQLiteContentItemRepo(_SQLiteRepo):
    def create(self, item: ContentItem) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO content_items (
                    id, model_id, model_slug, slug, status, data,
                    published_at, version, author_id, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(item.id),
                    str(item.model_id),
                    item.model_slug,
                    item.slug,
                    item.status,
                    _dumps(item.data),
                    item.published_at.isoformat() if item.published_at else None,
                    item.version,
                    item.author_id,
                    item.created_at.isoformat(),
                    item.updated_at.isoformat(),
                ),
            )
            conn.commit()
        except sqlite3.IntegrityError as e:
            conn.rollback()
            _raise_conflict(e, f"Item slug '{item.slug}' already exists in '{item.model_slug}'")
        finally:
            conn.close()

    def get_by_id(self, item_id: UUID) -> ContentItem | None:
        return self._get_one("SELECT * FROM content_items WHERE id = ?", (str(item_id),))

    def get_by_slug(self, model_slug: str, slug_or_id: str) -> ContentItem | None:
        return self._get_one(
            "SELECT * FROM content_items WHERE model_slug = ? AND (slug = ? OR id = ?)",
            (model_slug, slug_or_id, slug_or_id),
        )

    def query(
        self,
        model_slug: str,
        *,
        status: str | None = None,
        search: str | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        limit: int | None = None,
        offset: int = 0,
    ) -> tuple[builtins.list[ContentItem], int]:
        if sort_by not in SORT_COLUMNS:
            raise ValueError(f"Cannot sort by '{sort_by}'")
        direction = "ASC" if sort_order.lower() == "asc" else "DESC"

        where = "WHERE model_slug = ?"
        params: list[Any] = [model_slug]
        if status:
            where += " AND status = ?"
            params.append(status)
        if search:
            where += " AND (data LIKE ? ESCAPE '\\' OR slug LIKE ? ESCAPE '\\')"
            params.extend([_like(search), _like(search)])

        conn = self._get_conn()
        try:
            row = conn.execute(
                f"SELECT COUNT(*) AS cnt FROM content_items {where}", params
            ).fetchone()
            total = row["cnt"] if row else 0

            # Missing values sort last in either direction
            query = (
                f"SELECT * FROM content_items {where} "
                f"ORDER BY {sort_by} IS NULL, {sort_by} {direction}, rowid {direction}"
            )
            page_params = list(params)
            if limit is not None:
                query += " LIMIT ? OFFSET ?"
                page_params.extend([limit, offset])
            elif offset:
                query += " LIMIT -1 OFFSET ?"
                page_params.append(offset)

            rows = conn.execute(query, page_params).fetchall()
            return [self._map_row(r) for r in rows], total
        finally:
            conn.close()

    def update(
        self,
        item_id: UUID,
        *,
        updated_at: datetime,
        status: str | None = None,
        data: dict[str, Any] | None = None,
        published_at: datetime | None = None,
    ) -> None:
        columns = ["updated_at = ?", "version = version + 1"]
        values: list[Any] = [updated_at.isoformat()]

        if status is not None:
            columns.append("status = ?")
            values.append(status)
        if data is not None:
            columns.append("data = ?")
            values.append(_dumps(data))
        if published_at is not None:
            # first publish wins
            columns.append("published_at = COALESCE(published_at, ?)")
            values.append(published_at.isoformat())

        values.append(str(item_id))
        conn = self._get_conn()
        try:
            conn.execute(f"UPDATE content_items SET {', '.join(columns)} WHERE id = ?", values)
            conn.commit()
        finally:
            conn.close()

    def delete(self, item_id: UUID) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM content_items WHERE id = ?", (str(item_id),))
            conn.commit()
        finally:
            conn.close()

    def slug_exists(self, model_slug: str, slug: str) -> bool:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT 1 FROM content_items WHERE model_slug = ? AND slug = ?",
                (model_slug, slug),
            ).fetchone()
            return row is not None
        finally:
            conn.close()

    def count_by_model(self, model_id: UUID) -> int:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT COUNT(*) AS cnt FROM content_items WHERE model_id = ?", (str(model_id),)
            ).fetchone()
            return row["cnt"] if row else 0
        finally:
            conn.close()

    def _get_one(self, query: str, params: tuple[Any, ...]) -> ContentItem | None:
        conn = self._get_conn()
        try:
            row = conn.execute(query, params).fetchone()
            return self._map_row(row) if row else None
        finally:
            conn.close()

    def _map_row(self, row: dict[str, Any]) -> ContentItem:
        data = _loads(row["data"], f"content item {row['id']} data")
        if not isinstance(data, dict):
            raise UnexpectedError(f"Stored data of content item {row['id']} is not an object")
        return ContentItem(
            id=UUID(row["id"]),
            model_id=UUID(row["model_id"]),
            model_slug=row["model_slug"],
            slug=row["slug"],
            status=row["status"],
            data=data,
            published_at=parse_dt(row["published_at"]),
            version=row["version"],
            author_id=row["author_id"],
            created_at=parse_dt(row["created_at"]),
            updated_at=parse_dt(row["updated_at"]),
        )
