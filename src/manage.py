"""MedStock database management CLI.

Creates and drops the database schema of the Supplies domain using the
setup_db/drop_db utilities.

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys


def setup_database():
    from supplies.domain import supplies
    from supplies.utils.db import setup_db

    print("Initializing supplies domain...")
    supplies.init()
    print("Creating supplies database schema...")
    setup_db(supplies)
    print("Done.")


def drop_database():
    from supplies.domain import supplies
    from supplies.utils.db import drop_db

    print("Initializing supplies domain...")
    supplies.init()
    print("Dropping supplies database schema...")
    drop_db(supplies)
    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="MedStock database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
