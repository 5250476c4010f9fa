#!/usr/bin/env python3
"""Quick script to check if pairing tables exist in the database"""

import sys

from sqlalchemy import inspect

from app.database import engine


def check_tables():
    """Check if required pairing tables exist"""
    inspector = inspect(engine)
    existing_tables = inspector.get_table_names()

    required_tables = ["tournamentbatch", "tournamentmatch", "tournamentsubscription", "playerseeding", "matchpairing"]

    print("Checking for required pairing tables...")
    print(f"Database: {engine.url}")
    print()

    missing_tables = []
    for table in required_tables:
        if table in existing_tables:
            print(f"✓ {table} exists")
        else:
            print(f"✗ {table} MISSING")
            missing_tables.append(table)

    if "tournamentmatch" in existing_tables:
        match_columns = {c["name"] for c in inspector.get_columns("tournamentmatch")}
        for column in ("current_pairing_id", "published_pairing_id"):
            if column not in match_columns:
                print(f"✗ tournamentmatch.{column} MISSING")
                missing_tables.append(f"tournamentmatch.{column}")

    print()
    if missing_tables:
        print("ERROR: Missing tables detected!")
        print("Run migrations with: alembic upgrade head")
        return False
    else:
        print("All required tables exist!")
        return True


if __name__ == "__main__":
    try:
        success = check_tables()
        sys.exit(0 if success else 1)
    except Exception as e:
        print(f"Error checking tables: {e}")
        import traceback

        traceback.print_exc()
        sys.exit(1)
