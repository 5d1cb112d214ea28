"""Tests for the schema migrator."""

from pathlib import Path

import aiosqlite
import pytest

from stockledger.core.exceptions import ConfigurationError, DatabaseError
from stockledger.infrastructure.storage.sqlite.inventory_store import connection_for
from stockledger.infrastructure.storage.sqlite.migrations import (
    MigrationInfo,
    discover_migrations,
    get_migration_status,
    run_migrations,
    verify_schema_integrity,
)
from stockledger.infrastructure.storage.sqlite.migrations.migrator import REQUIRED_TABLES
from tests.helpers import MAIN_STORE, WIDGET


class TestMigrationDiscovery:
    def test_discovers_packaged_migrations(self):
        migrations = discover_migrations()
        assert migrations
        assert migrations[0].version == "001"
        assert migrations[0].name == "inventory_ledger"

    def test_from_file_rejects_bad_names(self, tmp_path: Path):
        bad = tmp_path / "001-no-prefix.sql"
        bad.write_text("SELECT 1;")
        with pytest.raises(ValueError):
            MigrationInfo.from_file(bad)

    def test_checksum_tracks_content(self, tmp_path: Path):
        path = tmp_path / "v002_extra.sql"
        path.write_text("SELECT 1;")
        first = MigrationInfo.from_file(path).checksum
        path.write_text("SELECT 2;")
        assert MigrationInfo.from_file(path).checksum != first


class TestRunMigrations:
    async def test_creates_required_tables(self, temp_db_path: Path):
        results = await run_migrations(temp_db_path)

        assert results and all(r.success for r in results)
        async with aiosqlite.connect(temp_db_path) as conn:
            cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            tables = {row[0] for row in await cursor.fetchall()}
        assert set(REQUIRED_TABLES) <= tables

    async def test_second_run_is_noop(self, temp_db_path: Path):
        await run_migrations(temp_db_path)
        results = await run_migrations(temp_db_path)
        assert results == []

    async def test_applies_new_migration_from_dir(self, temp_db_path: Path, tmp_path: Path):
        migrations_dir = tmp_path / "migrations"
        migrations_dir.mkdir()
        for migration in discover_migrations():
            (migrations_dir / migration.path.name).write_text(migration.path.read_text())
        await run_migrations(temp_db_path, migrations_dir)

        (migrations_dir / "v002_branch_code.sql").write_text(
            "ALTER TABLE branches ADD COLUMN code TEXT;"
        )
        results = await run_migrations(temp_db_path, migrations_dir)

        assert [r.version for r in results] == ["002"]

    async def test_edited_applied_migration_is_refused(self, temp_db_path: Path, tmp_path: Path):
        migrations_dir = tmp_path / "migrations"
        migrations_dir.mkdir()
        (migrations_dir / "v001_notes.sql").write_text("CREATE TABLE notes (id INTEGER);")
        await run_migrations(temp_db_path, migrations_dir)

        (migrations_dir / "v001_notes.sql").write_text("CREATE TABLE notes (id TEXT);")
        with pytest.raises(ConfigurationError) as exc_info:
            await run_migrations(temp_db_path, migrations_dir)

        assert exc_info.value.code == "MIGRATION_CHECKSUM_MISMATCH"

    async def test_status(self, temp_db_path: Path):
        missing = await get_migration_status(temp_db_path)
        assert missing["exists"] is False

        await run_migrations(temp_db_path)
        status = await get_migration_status(temp_db_path)
        assert status["current_version"] == "001"
        assert status["pending_migrations"] == []


class TestSchemaIntegrity:
    async def test_all_checks_pass(self, ledger_db: Path):
        checks = await verify_schema_integrity(ledger_db)
        assert {c["check"] for c in checks} == {
            "foreign_keys",
            "integrity",
            "required_tables",
            "append_only_ledger",
        }
        assert all(c["status"] == "PASS" for c in checks)

    async def test_movements_cannot_be_updated_or_deleted(self, pool):
        async with pool.transaction("seed") as tx:
            await connection_for(tx, write=True).execute(
                "INSERT INTO inventory_movements (product_id, branch_id, type, quantity, created_at) "
                "VALUES (?, ?, 'IN', 5, '2026-01-01T00:00:00.000000+00:00')",
                (WIDGET, MAIN_STORE),
            )

        with pytest.raises(DatabaseError, match="append-only"):
            async with pool.transaction("tamper") as tx:
                await connection_for(tx, write=True).execute(
                    "UPDATE inventory_movements SET quantity = 50"
                )

        with pytest.raises(DatabaseError, match="append-only"):
            async with pool.transaction("tamper") as tx:
                await connection_for(tx, write=True).execute("DELETE FROM inventory_movements")
