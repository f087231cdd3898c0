"""
Create Database Tables Using SQLAlchemy

Creates all tables directly with SQLAlchemy's create_all(). This bypasses
Alembic migrations and is meant for local development and demos.

Usage:
    python scripts/create_database_tables.py [--reset]
"""
import argparse
import sys
from pathlib import Path

# Add parent directory to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.buyerleads.db.session import create_all_tables, drop_all_tables
from src.buyerleads.utils.logger import setup_logging


def main():
    """Create all database tables."""
    parser = argparse.ArgumentParser(description="Create buyer lead tables")
    parser.add_argument("--reset", action="store_true", help="Drop existing tables first")
    args = parser.parse_args()

    setup_logging()

    if args.reset:
        drop_all_tables()

    create_all_tables()


if __name__ == "__main__":
    main()
