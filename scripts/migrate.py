"""Script to run database migrations."""

import argparse
import sys

from alembic import command
from alembic.config import Config


def _config() -> Config:
    return Config("alembic.ini")


def upgrade(revision: str) -> None:
    """Upgrade the schema to the given revision."""
    try:
        print(f"Upgrading database to {revision}...")
        command.upgrade(_config(), revision)
        print("✓ Migrations completed successfully!")
    except Exception as e:
        print(f"✗ Migration failed: {e}", file=sys.stderr)
        sys.exit(1)


def downgrade(revision: str) -> None:
    """Downgrade the schema to the given revision."""
    try:
        print(f"Downgrading database to {revision}...")
        command.downgrade(_config(), revision)
        print("✓ Downgrade completed successfully!")
    except Exception as e:
        print(f"✗ Downgrade failed: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Manage clinic database migrations")
    subparsers = parser.add_subparsers(dest="command")

    up = subparsers.add_parser("upgrade", help="Apply migrations")
    up.add_argument("revision", nargs="?", default="head")

    down = subparsers.add_parser("downgrade", help="Revert migrations")
    down.add_argument("revision")

    subparsers.add_parser("current", help="Show the current revision")

    args = parser.parse_args()

    if args.command == "downgrade":
        downgrade(args.revision)
    elif args.command == "current":
        command.current(_config(), verbose=True)
    else:
        upgrade(getattr(args, "revision", "head"))
