"""
Tests for the SQL migration runner and the schema it produces.
"""
import pytest
import pytest_asyncio
from sqlalchemy import text

from raugupatis.exceptions import MigrationError
from raugupatis.infra.db.migrate import (
    MIGRATIONS_DIR,
    apply_migrations,
    current_version,
    discover_migrations,
    split_sql,
)
from raugupatis.infra.db.session import Database

EXPECTED_PROFILES = {
    "Pickles": ("vegetable", 3, 7, 65.0, 75.0),
    "Kombucha": ("beverage", 7, 14, 68.0, 78.0),
    "Kimchi": ("vegetable", 3, 5, 65.0, 75.0),
    "Sauerkraut": ("vegetable", 14, 28, 65.0, 72.0),
    "Sourdough Starter": ("bread", 5, 7, 70.0, 80.0),
    "Kefir (Milk)": ("dairy", 1, 1, 68.0, 76.0),
    "Water Kefir": ("beverage", 1, 3, 68.0, 76.0),
}


@pytest_asyncio.fixture
async def empty_db(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{(tmp_path / 'empty.db').as_posix()}")
    yield db
    await db.close()


def test_packaged_migrations_are_contiguous():
    migrations = discover_migrations()
    assert [m.version for m in migrations] == list(range(1, 8))
    assert all(m.path.parent == MIGRATIONS_DIR for m in migrations)


def test_gap_in_sequence_is_rejected(tmp_path):
    (tmp_path / "001_first.sql").write_text("CREATE TABLE a (id INTEGER);")
    (tmp_path / "003_third.sql").write_text("CREATE TABLE c (id INTEGER);")
    with pytest.raises(MigrationError, match="expected 002"):
        discover_migrations(tmp_path)


def test_statements_skip_comments(tmp_path):
    path = tmp_path / "001_demo.sql"
    path.write_text("-- header\nCREATE TABLE a (id INTEGER); -- trailing\n\nCREATE TABLE b (id INTEGER);\n")
    (migration,) = discover_migrations(tmp_path)
    assert migration.statements() == ["CREATE TABLE a (id INTEGER)", "CREATE TABLE b (id INTEGER)"]


def test_quoted_literals_survive_splitting():
    script = (
        "INSERT INTO t (a) VALUES ('semi;colon'); -- note\n"
        "INSERT INTO t (a) VALUES ('dash--dash', 'it''s; fine');\n"
        'CREATE TABLE "odd;name" (id INTEGER)'
    )
    assert split_sql(script) == [
        "INSERT INTO t (a) VALUES ('semi;colon')",
        "INSERT INTO t (a) VALUES ('dash--dash', 'it''s; fine')",
        'CREATE TABLE "odd;name" (id INTEGER)',
    ]


@pytest.mark.asyncio
async def test_literal_with_separators_is_stored_intact(empty_db, tmp_path):
    migrations = tmp_path / "migrations"
    migrations.mkdir()
    (migrations / "001_notes.sql").write_text(
        "CREATE TABLE notes (body TEXT NOT NULL);\n"
        "INSERT INTO notes (body) VALUES ('salt; 2% -- by weight');\n"
    )
    await apply_migrations(empty_db.engine, migrations)

    async with empty_db.engine.connect() as conn:
        body = (await conn.execute(text("SELECT body FROM notes"))).scalar_one()
    assert body == "salt; 2% -- by weight"


@pytest.mark.asyncio
async def test_fresh_database_seeds_exactly_seven_profiles(empty_db):
    applied = await apply_migrations(empty_db.engine)
    assert applied == [1, 2, 3, 4, 5, 6, 7]

    async with empty_db.engine.connect() as conn:
        rows = (await conn.execute(text(
            "SELECT name, type, min_days, max_days, temp_min, temp_max, is_active FROM fermentation_profiles"
        ))).all()

    assert len(rows) == 7
    by_name = {row[0]: tuple(row[1:6]) for row in rows}
    assert by_name == EXPECTED_PROFILES
    assert all(row[6] == 1 for row in rows)


@pytest.mark.asyncio
async def test_migrations_apply_once(empty_db):
    await apply_migrations(empty_db.engine)
    assert await apply_migrations(empty_db.engine) == []
    assert await current_version(empty_db.engine) == 7

    async with empty_db.engine.connect() as conn:
        count = (await conn.execute(text("SELECT COUNT(*) FROM fermentation_profiles"))).scalar_one()
    assert count == 7


@pytest.mark.asyncio
async def test_expected_tables_exist(empty_db):
    await apply_migrations(empty_db.engine)
    async with empty_db.engine.connect() as conn:
        names = {
            row[0]
            for row in (await conn.execute(text("SELECT name FROM sqlite_master WHERE type = 'table'"))).all()
        }
    assert {
        "users",
        "fermentation_profiles",
        "fermentations",
        "temperature_logs",
        "fermentation_photos",
        "taste_profiles",
        "sessions",
        "schema_migrations",
    } <= names


@pytest.mark.asyncio
async def test_failing_migration_raises_and_is_not_recorded(empty_db, tmp_path):
    migrations = tmp_path / "migrations"
    migrations.mkdir()
    (migrations / "001_ok.sql").write_text("CREATE TABLE ok_table (id INTEGER PRIMARY KEY);")
    (migrations / "002_broken.sql").write_text("CREATE TABLE broken (id INTEGER PRIMARY KEY;")

    with pytest.raises(MigrationError, match="002_broken.sql"):
        await apply_migrations(empty_db.engine, migrations)

    assert await current_version(empty_db.engine) == 1
