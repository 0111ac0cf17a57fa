"""
Database schema initialization
------------------------------
Creates the pgvector extension, the tables and the search indexes.
"""

import sys
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(PROJECT_ROOT / ".env")

# make the app package importable when run as a plain script
sys.path.insert(0, str(PROJECT_ROOT))

from sqlalchemy import text  # noqa: E402

from app import models  # noqa: F401,E402
from app.db.init_db import init_db  # noqa: E402
from app.db.session import engine  # noqa: E402


def init_db_schema() -> None:
    """Initialize the database schema."""
    print("🔧 Initializing database schema...")
    init_db()
    print("✅ Extension, tables and indexes ready")

    print("\n📋 Tables:")
    with engine.connect() as conn:
        result = conn.execute(text("""
            SELECT table_name
            FROM information_schema.tables
            WHERE table_schema = 'public'
            ORDER BY table_name
        """))
        for row in result:
            print(f"  - {row[0]}")


if __name__ == "__main__":
    init_db_schema()
