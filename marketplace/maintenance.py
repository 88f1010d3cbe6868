# marketplace/maintenance.py
"""Maintenance commands run against the live document store.

Commands:
  repair          Detect orphaned references (stores -> users, products ->
                  stores, orders -> users/stores, items -> orders).
                  Dry run by default; --apply deletes the orphans.
  check-db        Connectivity check; prints the user count.
  fix-admin-role  Promote the ADMIN_EMAIL user to ADMIN (and onboarded).

Usage examples:
  # Preview only (default dry-run)
  python repair_db.py

  # Apply fixes (delete orphans)
  python repair_db.py --apply

  marketplace-maintenance check-db

The repair command prints {"dryRun": ..., "actions": [...]} as JSON on
stdout and exits non-zero if any read or delete failed. On failure the
report still lists the actions applied before the failing phase.
"""

from __future__ import annotations

import argparse
import json
import sys

from marketplace.core.errors import AppError, RepairError
from marketplace.core.logging import configure_logging
from marketplace.database import DocumentStore, check_connection, get_store
from marketplace.repositories.user_repo import UserRepository
from marketplace.schemas.maintenance import RepairReport
from marketplace.services.repair_service import RepairExecutor
from marketplace.services.role_service import RoleService


def _print_json(data: dict) -> None:
    print(json.dumps(data, indent=2))


def run_repair(db: DocumentStore, apply: bool) -> int:
    try:
        report = RepairExecutor(db).run(apply=apply)
    except RepairError as exc:
        _print_json(
            RepairReport(
                dry_run=not apply,
                actions=exc.actions,
                failed_phase=exc.phase,
                error=str(exc.cause.detail if isinstance(exc.cause, AppError) else exc.cause),
            ).to_json_dict()
        )
        return 1

    _print_json(report.to_json_dict())
    return 0


def run_check_db(db: DocumentStore) -> int:
    try:
        users = check_connection(db)
    except AppError as exc:
        print(f"DB check failed: {exc.detail}", file=sys.stderr)
        return 1
    print(f"DB OK. users.count = {users}")
    return 0


def run_fix_admin_role(db: DocumentStore) -> int:
    try:
        user = RoleService(UserRepository()).promote_admin(db)
    except AppError as exc:
        print(f"Admin promotion failed: {exc.detail}", file=sys.stderr)
        return 1
    print(f"{user.email}: role={user.role} onboarded={user.onboarded}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="marketplace-maintenance",
        description="Marketplace document store maintenance.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    repair = commands.add_parser("repair", help="Detect and delete orphaned records.")
    repair.add_argument(
        "--apply",
        action="store_true",
        help="Apply fixes (default is dry-run).",
    )
    # `repair apply` is accepted as well as `repair --apply`
    repair.add_argument("mode", nargs="?", choices=["apply"], help=argparse.SUPPRESS)

    commands.add_parser("check-db", help="Check document store connectivity.")
    commands.add_parser("fix-admin-role", help="Promote the ADMIN_EMAIL user.")
    return parser


def main(argv: list[str] | None = None, db: DocumentStore | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()

    if db is None:
        db = get_store()

    if args.command == "repair":
        return run_repair(db, apply=args.apply or args.mode == "apply")
    if args.command == "check-db":
        return run_check_db(db)
    return run_fix_admin_role(db)


if __name__ == "__main__":
    sys.exit(main())
