"""
Versioned schema migrations for the ledger database.

Files named ``vNNN_name.sql`` are applied in version order. Each applied
version is recorded in ``schema_migrations`` with a checksum; an applied
file must never change afterwards.
"""

import hashlib
import re
import time
from dataclasses import dataclass
from pathlib import Path

import aiosqlite

from stockledger.config import get_logger, get_settings
from stockledger.core.exceptions import ConfigurationError

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

REQUIRED_TABLES = (
    "branches",
    "products",
    "inventory_records",
    "inventory_movements",
    "schema_migrations",
)

APPEND_ONLY_TRIGGERS = (
    "inventory_movements_no_update",
    "inventory_movements_no_delete",
)

_FILENAME = re.compile(r"v(\d+)_(.+)\.sql")


@dataclass
class MigrationInfo:
    """A migration file on disk."""

    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = _FILENAME.fullmatch(path.name)
        if not match:
            raise ValueError(f"Invalid migration filename: {path.name}")

        checksum = hashlib.sha256(path.read_bytes()).hexdigest()[:16]
        return cls(version=match.group(1), name=match.group(2), path=path, checksum=checksum)


@dataclass
class MigrationResult:
    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


def discover_migrations(migrations_dir: Path = MIGRATIONS_DIR) -> list[MigrationInfo]:
    """Migration files in version order; misnamed files are skipped."""
    migrations = []
    for path in sorted(migrations_dir.glob("v*.sql")):
        try:
            migrations.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return migrations


async def _applied_versions(conn: aiosqlite.Connection) -> dict[str, str]:
    await conn.execute(
        """
        CREATE TABLE IF NOT EXISTS schema_migrations (
            version TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            checksum TEXT NOT NULL,
            applied_at TEXT DEFAULT (datetime('now')),
            execution_time_ms INTEGER
        )
        """
    )
    await conn.commit()
    cursor = await conn.execute("SELECT version, checksum FROM schema_migrations")
    return {row[0]: row[1] for row in await cursor.fetchall()}


async def _apply(conn: aiosqlite.Connection, migration: MigrationInfo) -> MigrationResult:
    start = time.perf_counter()
    try:
        await conn.executescript(migration.path.read_text(encoding="utf-8"))
        elapsed = int((time.perf_counter() - start) * 1000)
        await conn.execute(
            "INSERT INTO schema_migrations (version, name, checksum, execution_time_ms) "
            "VALUES (?, ?, ?, ?)",
            (migration.version, migration.name, migration.checksum, elapsed),
        )
        await conn.commit()
    except aiosqlite.Error as e:
        await conn.rollback()
        logger.error("migration_failed", version=migration.version, error=str(e))
        return MigrationResult(
            version=migration.version,
            name=migration.name,
            success=False,
            execution_time_ms=int((time.perf_counter() - start) * 1000),
            error=str(e),
        )

    logger.info(
        "migration_applied",
        version=migration.version,
        name=migration.name,
        execution_time_ms=elapsed,
    )
    return MigrationResult(
        version=migration.version, name=migration.name, success=True, execution_time_ms=elapsed
    )


async def run_migrations(
    db_path: Path | None = None,
    migrations_dir: Path = MIGRATIONS_DIR,
) -> list[MigrationResult]:
    """
    Bring the database up to the latest schema version.

    Stops at the first failing migration. Returns results for the
    migrations that ran; an up-to-date database yields an empty list.

    Raises:
        ConfigurationError: an applied migration file was edited
    """
    db_path = db_path or get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)

    results: list[MigrationResult] = []
    async with aiosqlite.connect(db_path) as conn:
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA foreign_keys=ON")
        applied = await _applied_versions(conn)

        for migration in discover_migrations(migrations_dir):
            if migration.version in applied:
                if applied[migration.version] != migration.checksum:
                    raise ConfigurationError(
                        f"Migration v{migration.version} changed after it was applied",
                        code="MIGRATION_CHECKSUM_MISMATCH",
                        details={"version": migration.version},
                    )
                continue

            result = await _apply(conn, migration)
            results.append(result)
            if not result.success:
                break

    logger.info("database_migrated", db_path=str(db_path), applied=len(results))
    return results


async def get_migration_status(db_path: Path | None = None) -> dict:
    """Current version plus applied and pending migration versions."""
    db_path = db_path or get_settings().storage.db_path
    discovered = discover_migrations()

    if not db_path.exists():
        return {
            "exists": False,
            "current_version": None,
            "applied_migrations": [],
            "pending_migrations": [m.version for m in discovered],
        }

    async with aiosqlite.connect(db_path) as conn:
        applied = sorted(await _applied_versions(conn))

    return {
        "exists": True,
        "current_version": applied[-1] if applied else None,
        "applied_migrations": applied,
        "pending_migrations": [m.version for m in discovered if m.version not in applied],
    }


def _check(name: str, passed: bool, **extra) -> dict:
    return {"check": name, "status": "PASS" if passed else "FAIL", **extra}


async def verify_schema_integrity(db_path: Path | None = None) -> list[dict]:
    """SQLite integrity, foreign keys, required tables and the append-only triggers."""
    db_path = db_path or get_settings().storage.db_path

    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute("PRAGMA foreign_key_check")
        fk_violations = await cursor.fetchall()

        cursor = await conn.execute("PRAGMA integrity_check")
        integrity = (await cursor.fetchone())[0]

        cursor = await conn.execute("SELECT type, name FROM sqlite_master")
        objects = {(row[0], row[1]) for row in await cursor.fetchall()}

    missing_tables = [t for t in REQUIRED_TABLES if ("table", t) not in objects]
    missing_triggers = [t for t in APPEND_ONLY_TRIGGERS if ("trigger", t) not in objects]
    return [
        _check("foreign_keys", not fk_violations, violations=len(fk_violations)),
        _check("integrity", integrity == "ok", result=integrity),
        _check("required_tables", not missing_tables, missing=missing_tables),
        _check("append_only_ledger", not missing_triggers, missing=missing_triggers),
    ]
