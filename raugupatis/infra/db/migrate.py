"""
Schema migrations.

Migrations are plain SQL scripts named ``NNN_description.sql`` in the
``migrations`` directory next to this module. They are applied in numeric
order, each exactly once and in its own transaction, and every applied
version is recorded in the ``schema_migrations`` table.
"""
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from raugupatis.exceptions import MigrationError

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"
MIGRATION_FILENAME = re.compile(r"^(\d{3})_([a-z0-9_]+)\.sql$")

CREATE_VERSION_TABLE = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    version INTEGER PRIMARY KEY NOT NULL,
    name TEXT NOT NULL,
    applied_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP
)
"""


@dataclass(frozen=True)
class Migration:
    version: int
    name: str
    path: Path

    def statements(self) -> list[str]:
        """Split the script into executable statements."""
        return split_sql(self.path.read_text(encoding="utf-8"))


def split_sql(script: str) -> list[str]:
    """
    Split a SQL script on ``;`` and drop ``--`` comments.

    Semicolons and ``--`` inside single- or double-quoted literals are kept;
    a doubled quote inside a literal is its escaped form.
    """
    statements: list[str] = []
    current: list[str] = []
    quote: Optional[str] = None
    i = 0
    while i < len(script):
        ch = script[i]
        if quote is not None:
            current.append(ch)
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
            current.append(ch)
        elif script.startswith("--", i):
            end = script.find("\n", i)
            if end == -1:
                break
            i = end
            continue
        elif ch == ";":
            statements.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    statements.append("".join(current))
    return [stmt.strip() for stmt in statements if stmt.strip()]


def discover_migrations(directory: Optional[Path] = None) -> list[Migration]:
    """Return migrations sorted by version; numbering must start at 1 with no gaps."""
    directory = directory or MIGRATIONS_DIR
    migrations = []
    for path in directory.glob("*.sql"):
        match = MIGRATION_FILENAME.match(path.name)
        if not match:
            raise MigrationError(f"Unrecognised migration filename: {path.name}")
        migrations.append(Migration(int(match.group(1)), match.group(2), path))

    migrations.sort(key=lambda m: m.version)
    for expected, migration in enumerate(migrations, start=1):
        if migration.version != expected:
            raise MigrationError(
                f"Migration sequence broken: expected {expected:03d}, found {migration.path.name}"
            )
    return migrations


async def applied_versions(conn: AsyncConnection) -> set[int]:
    await conn.execute(text(CREATE_VERSION_TABLE))
    result = await conn.execute(text("SELECT version FROM schema_migrations"))
    return {row[0] for row in result}


async def apply_migrations(engine: AsyncEngine, directory: Optional[Path] = None) -> list[int]:
    """
    Apply every pending migration and return the versions applied.

    Raises MigrationError on the first failure; the failing migration's
    transaction is rolled back and later migrations are not attempted.
    """
    migrations = discover_migrations(directory)

    async with engine.begin() as conn:
        done = await applied_versions(conn)

    applied: list[int] = []
    for migration in migrations:
        if migration.version in done:
            continue
        logger.info(f"[MIGRATE] Applying {migration.version:03d}_{migration.name}")
        try:
            async with engine.begin() as conn:
                for statement in migration.statements():
                    await conn.exec_driver_sql(statement)
                await conn.execute(
                    text("INSERT INTO schema_migrations (version, name) VALUES (:version, :name)"),
                    {"version": migration.version, "name": migration.name},
                )
        except SQLAlchemyError as e:
            logger.error(f"[MIGRATE] {migration.path.name} failed: {e}")
            raise MigrationError(f"Migration {migration.path.name} failed: {e}") from e
        applied.append(migration.version)

    if applied:
        logger.info(f"[MIGRATE] Applied {len(applied)} migration(s), schema at version {migrations[-1].version}")
    else:
        logger.info("[MIGRATE] Schema is up to date")
    return applied


async def current_version(engine: AsyncEngine) -> int:
    async with engine.begin() as conn:
        versions = await applied_versions(conn)
    return max(versions, default=0)
