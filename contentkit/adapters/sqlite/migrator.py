"""
Schema migrations for the content store.

Migrations are plain `.sql` files shipped with the package, applied in
filename order. Only the part above a `-- Down` marker runs. Each file is
recorded in `schema_migrations` in the same transaction as its DDL, so a
failed file leaves neither tables nor a record behind.
"""

import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_MIGRATIONS_DIR = Path(__file__).parent / "migrations"
DOWN_MARKER = "-- Down"


@dataclass(frozen=True)
class Migration:
    name: str
    up_sql: str

    @classmethod
    def from_file(cls, path: Path) -> "Migration":
        text = path.read_text(encoding="utf-8")
        return cls(name=path.name, up_sql=text.split(DOWN_MARKER, 1)[0])


class SQLiteMigrator:
    def __init__(self, db_path: str, migrations_dir: str | Path = DEFAULT_MIGRATIONS_DIR):
        self.db_path = db_path
        self.migrations_dir = Path(migrations_dir)

    def discover(self) -> list[Migration]:
        """All shipped migrations, in the order they must run."""
        return [Migration.from_file(p) for p in sorted(self.migrations_dir.glob("*.sql"))]

    def applied(self, conn: sqlite3.Connection) -> set[str]:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_migrations (
                name TEXT PRIMARY KEY,
                applied_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
            )
            """
        )
        return {row[0] for row in conn.execute("SELECT name FROM schema_migrations")}

    def run_migrations(self) -> list[str]:
        """Apply pending migrations. Returns the names applied by this call."""
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        # isolation_level=None: transactions are opened explicitly per file
        conn = sqlite3.connect(self.db_path, isolation_level=None)
        try:
            done = self.applied(conn)
            pending = [m for m in self.discover() if m.name not in done]
            for migration in pending:
                self._apply(conn, migration)
            if pending:
                logger.info("Content store at %s migrated (%d files)", self.db_path, len(pending))
            return [m.name for m in pending]
        finally:
            conn.close()

    def _apply(self, conn: sqlite3.Connection, migration: Migration) -> None:
        logger.info("Applying migration %s", migration.name)
        try:
            conn.execute("BEGIN")
            # executescript() would commit first; run statement by statement instead
            for statement in _statements(migration.up_sql):
                conn.execute(statement)
            conn.execute("INSERT INTO schema_migrations (name) VALUES (?)", (migration.name,))
            conn.execute("COMMIT")
        except sqlite3.Error as e:
            conn.execute("ROLLBACK")
            raise RuntimeError(f"Migration {migration.name} failed: {e}") from e


def _statements(script: str) -> list[str]:
    """Split a script into complete statements."""
    statements: list[str] = []
    buffer = ""
    for line in script.splitlines(keepends=True):
        buffer += line
        if sqlite3.complete_statement(buffer):
            if buffer.strip():
                statements.append(buffer.strip())
            buffer = ""
    leftover = [ln for ln in buffer.splitlines() if ln.strip() and not ln.strip().startswith("--")]
    if leftover:
        raise sqlite3.OperationalError("incomplete statement at end of migration")
    return statements
