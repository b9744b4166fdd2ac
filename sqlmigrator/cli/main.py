"""Run SQLite migration files from a given directory.

Usage:
    migrator [-s SOURCE] [-d DATABASE] create NAME
    migrator [-s SOURCE] [-d DATABASE] up [-n N]
    migrator [-s SOURCE] [-d DATABASE] down [-n N]
    migrator [-s SOURCE] [-d DATABASE] status
    migrator [-s SOURCE] validate
"""

import argparse
import logging
import sys
from pathlib import Path

from sqlmigrator.cli.create import create_migration
from sqlmigrator.config import resolve_config, resolve_source_path
from sqlmigrator.database import connect
from sqlmigrator.engine import Migrations
from sqlmigrator.exceptions import MigrationError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def configure_logging(verbosity: int) -> None:
    """Configure root logging: WARNING, INFO with -v, DEBUG with -vv."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT)


def cmd_create(args: argparse.Namespace) -> int:
    """Create a new migration folder."""
    source = resolve_source_path(args.source, args.config)
    folder = create_migration(source, args.migration_name)
    print(f"Created migration: {folder}")
    return 0


def cmd_up(args: argparse.Namespace) -> int:
    """Apply N migrations, or all pending ones."""
    config = resolve_config(args.source, args.database, args.config)
    migrations = Migrations.from_directory(config.source_path)

    conn = connect(config.database_path)
    try:
        if args.n is not None:
            current = int(migrations.current_version(conn))
            migrations.to_version(conn, current + args.n)
        else:
            migrations.to_latest(conn)
        print(f"Database at version {migrations.current_version(conn)}.")
    finally:
        conn.close()
    return 0


def cmd_down(args: argparse.Namespace) -> int:
    """Revert N migrations, or all of them."""
    config = resolve_config(args.source, args.database, args.config)
    migrations = Migrations.from_directory(config.source_path)

    conn = connect(config.database_path)
    try:
        if args.n is not None:
            current = int(migrations.current_version(conn))
            if args.n > current:
                raise MigrationError("The number of steps down is too large.")
            migrations.to_version(conn, current - args.n)
        else:
            migrations.to_version(conn, 0)
        print(f"Database at version {migrations.current_version(conn)}.")
    finally:
        conn.close()
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    """Show current database version and pending migrations."""
    config = resolve_config(args.source, args.database, args.config)
    migrations = Migrations.from_directory(config.source_path)

    if not config.database_path.exists():
        print(f"Database not found at: {config.database_path}")
        current = migrations.steps.classify(0)
        pending = list(enumerate(migrations.steps, start=1))
    else:
        conn = connect(config.database_path)
        try:
            current = migrations.current_version(conn)
            pending = migrations.pending(conn)
        finally:
            conn.close()
        print(f"Database at: {config.database_path}")

    print(f"Current version: {current}")
    print(f"Latest version: {len(migrations)}")

    if current.is_outside:
        print()
        print("WARNING: database is ahead of the known migrations.")
    elif pending:
        print()
        print("Pending migrations:")
        for version, step in pending:
            print(f"  {step.describe(version)}")
    else:
        print()
        print("Database is up to date.")
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Apply all migrations to an in-memory database."""
    source = resolve_source_path(args.source, args.config)
    migrations = Migrations.from_directory(source)
    migrations.validate()
    print(f"All {len(migrations)} migrations applied cleanly.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="migrator",
        description="Run SQLite migration files from a given directory",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s create add_users          Scaffold a new migration folder
  %(prog)s up                        Migrate to latest version
  %(prog)s up -n 2                   Apply the next 2 migrations
  %(prog)s down -n 1                 Revert the last migration
  %(prog)s down                      Revert every migration
  %(prog)s status                    Show current version and pending migrations
        """,
    )

    parser.add_argument(
        "-s", "--source",
        type=Path,
        help="Migration directory (env: MIGRATION_DIR)",
    )
    parser.add_argument(
        "-d", "--database",
        type=Path,
        help="Path to database file (env: DATABASE_PATH)",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        help="Config file (default: ./.migrate-config.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase log output (-v info, -vv debug)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    create_parser = subparsers.add_parser("create", help="Create a new migration")
    create_parser.add_argument("migration_name", help="Name of the new migration")
    create_parser.set_defaults(func=cmd_create)

    up_parser = subparsers.add_parser("up", help="Run migration UP to most recent or N")
    up_parser.add_argument("-n", type=int, help="Apply N up migrations")
    up_parser.set_defaults(func=cmd_up)

    down_parser = subparsers.add_parser("down", help="Run migration DOWN to oldest or N")
    down_parser.add_argument("-n", type=int, help="Apply N down migrations")
    down_parser.set_defaults(func=cmd_down)

    status_parser = subparsers.add_parser("status", help="Show current database status")
    status_parser.set_defaults(func=cmd_status)

    validate_parser = subparsers.add_parser(
        "validate", help="Check that all migrations apply to an empty database"
    )
    validate_parser.set_defaults(func=cmd_validate)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    configure_logging(args.verbose)

    if getattr(args, "n", None) is not None and args.n < 0:
        print("Error: -n must not be negative", file=sys.stderr)
        return 1

    try:
        return args.func(args)
    except MigrationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nAborted.", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
