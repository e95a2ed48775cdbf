#!/usr/bin/env python3
"""
Initialize Event Updates database tables.

Creates every table that is missing and checks that each one is reachable.
Existing tables and their data are left untouched.
"""

import sys
import os
import logging

# Add the project root to Python path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from core.config import get_settings
from core.database import Base, Database

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def init_database(database: Database) -> bool:
    """Create tables and verify them."""
    print("🗄️  Initializing database...")

    try:
        database.create_tables()
        database.ping()
        print("✅ Database connected")

        existing = set(inspect(database.engine).get_table_names())
        missing = sorted(set(Base.metadata.tables) - existing)
        for table in sorted(Base.metadata.tables):
            if table in existing:
                print(f"✅ {table} table created/exists")
        if missing:
            print(f"❌ Tables were not created: {', '.join(missing)}")
            return False

        return True

    except SQLAlchemyError as e:
        print(f"❌ Database initialization failed: {str(e)}")
        return False


def main():
    print("🚀 Event Updates Database Initialization")
    print("=" * 50)

    database = Database.from_settings(get_settings())
    try:
        ok = init_database(database)
    finally:
        database.dispose()

    print("\n" + "=" * 50)
    if ok:
        print("🎉 Database initialization completed successfully!")
        return 0

    print("❌ Database initialization failed")
    return 1


if __name__ == "__main__":
    sys.exit(main())
