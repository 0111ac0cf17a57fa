"""
pgvector index creation
-----------------------
(Re)creates the HNSW cosine index on recommendations.embedding plus the
lookup indexes used by search hydration.
"""

import sys
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(PROJECT_ROOT / ".env")

sys.path.insert(0, str(PROJECT_ROOT))

from sqlalchemy import text  # noqa: E402

from app.db.init_db import INDEX_STATEMENTS, create_indexes  # noqa: E402
from app.db.session import engine  # noqa: E402


def main() -> None:
    print("🔧 Creating pgvector indexes...")
    failed = create_indexes()
    for name, _ddl in INDEX_STATEMENTS:
        marker = "⚠️ " if name in failed else "✅"
        print(f"  {marker} {name}")

    print("\n📋 Indexes on recommendations:")
    with engine.connect() as conn:
        result = conn.execute(text("""
            SELECT indexname
            FROM pg_indexes
            WHERE schemaname = 'public'
            AND tablename = 'recommendations'
            ORDER BY indexname;
        """))
        for row in result:
            print(f"  - {row[0]}")

    if failed:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
