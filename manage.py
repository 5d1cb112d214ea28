#!/usr/bin/env python3
"""
Stock ledger management CLI.

Usage:
    python manage.py migrate               Apply pending schema migrations
    python manage.py migrate --status      Show applied and pending migrations
    python manage.py migrate --verify      Run schema integrity checks
    python manage.py serve                 Start the API server
    python manage.py reconcile --company X Compare stock records with the ledger
"""

import argparse
import asyncio
import json
import subprocess
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent


async def _migrate(args: argparse.Namespace) -> int:
    from stockledger.infrastructure.storage.sqlite.migrations import (
        get_migration_status,
        run_migrations,
        verify_schema_integrity,
    )

    if args.status:
        status = await get_migration_status()
        print(json.dumps(status, indent=2))
        return 0

    if args.verify:
        checks = await verify_schema_integrity()
        failed = False
        for check in checks:
            print(f"  {check['check']}: {check['status']}")
            failed = failed or check["status"] != "PASS"
        return 1 if failed else 0

    results = await run_migrations()
    if not results:
        print("Database is up to date.")
        return 0

    for result in results:
        mark = "ok" if result.success else f"FAILED ({result.error})"
        print(f"  v{result.version} {result.name}: {mark} [{result.execution_time_ms}ms]")
    return 0 if all(r.success for r in results) else 1


async def _reconcile(args: argparse.Namespace) -> int:
    from stockledger.application.services import get_reconciler, reset_services
    from stockledger.infrastructure.storage.sqlite import close_connection_pool

    try:
        reconciler = await get_reconciler()
        report = await reconciler.reconcile(args.company)
    finally:
        await close_connection_pool()
        reset_services()

    print(f"Company {report.company_id}: {report.records_checked} records checked")
    if report.is_consistent:
        print("Ledger and stock records agree.")
        return 0

    for drift in report.ledger_drift:
        print(
            f"  record {drift.product_id}@{drift.branch_id}: "
            f"quantity={drift.record_quantity} ledger={drift.ledger_quantity}"
        )
    for drift in report.stock_drift:
        print(
            f"  product {drift.product_id}: "
            f"stock={drift.product_stock} records={drift.records_quantity}"
        )
    return 1


def cmd_migrate(args: argparse.Namespace) -> None:
    """Apply or inspect schema migrations."""
    sys.exit(asyncio.run(_migrate(args)))


def cmd_reconcile(args: argparse.Namespace) -> None:
    """Report drift between inventory records, the ledger and product totals."""
    sys.exit(asyncio.run(_reconcile(args)))


def cmd_serve(args: argparse.Namespace) -> None:
    """Start the API server in the foreground."""
    uvicorn_cmd = [
        sys.executable, "-m", "uvicorn",
        "stockledger.api.main:app",
        "--host", args.host,
        "--port", str(args.port),
    ]
    if args.reload:
        uvicorn_cmd.append("--reload")

    print(f"Starting server on {args.host}:{args.port}...")
    try:
        sys.exit(subprocess.call(uvicorn_cmd, cwd=str(ROOT_DIR)))
    except KeyboardInterrupt:
        print("\nServer stopped.")


def main() -> None:
    from stockledger.config import configure_logging, get_settings

    configure_logging()
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="Stock ledger management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # migrate
    p_migrate = sub.add_parser("migrate", help="Apply schema migrations")
    group = p_migrate.add_mutually_exclusive_group()
    group.add_argument("--status", action="store_true", help="Show migration status")
    group.add_argument("--verify", action="store_true", help="Verify schema integrity")
    p_migrate.set_defaults(func=cmd_migrate)

    # serve
    p_serve = sub.add_parser("serve", help="Start the API server")
    p_serve.add_argument("--host", default=settings.api.host, help=f"Bind host (default: {settings.api.host})")
    p_serve.add_argument("--port", type=int, default=settings.api.port, help=f"Bind port (default: {settings.api.port})")
    p_serve.add_argument("--reload", action="store_true", help="Reload on code changes")
    p_serve.set_defaults(func=cmd_serve)

    # reconcile
    p_reconcile = sub.add_parser("reconcile", help="Check stock records against the ledger")
    p_reconcile.add_argument("--company", required=True, help="Company ID to audit")
    p_reconcile.set_defaults(func=cmd_reconcile)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
