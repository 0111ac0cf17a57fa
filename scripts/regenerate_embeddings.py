"""
Embedding backfill
------------------
Regenerates recommendation embeddings: only the missing ones by default,
every row with --all, or specific rows with --ids.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(PROJECT_ROOT / ".env")

sys.path.insert(0, str(PROJECT_ROOT))

from sqlalchemy import select  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from app import models  # noqa: F401,E402
from app.core.errors import NotFoundError, ProviderError  # noqa: E402
from app.db.session import SessionLocal  # noqa: E402
from app.models.recommendation import Recommendation  # noqa: E402
from app.services.llm import get_llm_service  # noqa: E402
from app.services.recommendation import Embedder, refresh_embedding  # noqa: E402


def target_ids(
    db: Session,
    ids: list[int] | None = None,
    include_existing: bool = False,
    limit: int | None = None,
) -> list[int]:
    """Pick the recommendation ids to (re)embed, oldest first."""
    if ids:
        unique = list(dict.fromkeys(ids))
        return unique[:limit] if limit else unique
    stmt = select(Recommendation.id).order_by(Recommendation.id)
    if not include_existing:
        stmt = stmt.where(Recommendation.embedding.is_(None))
    if limit:
        stmt = stmt.limit(limit)
    return list(db.execute(stmt).scalars().all())


def regenerate(db: Session, ids: list[int], embedder: Embedder) -> tuple[int, int]:
    """Embed each id in turn; returns (succeeded, failed)."""
    succeeded = 0
    failed = 0
    for i, rec_id in enumerate(ids, 1):
        print(f"[{i}/{len(ids)}] recommendation {rec_id}...", end=" ", flush=True, file=sys.stderr)
        try:
            refresh_embedding(db, rec_id, embedder)
        except (ProviderError, NotFoundError, ValueError) as exc:
            failed += 1
            print(f"❌ {exc}", file=sys.stderr)
            continue
        succeeded += 1
        print("✅", file=sys.stderr)
    return succeeded, failed


def main() -> None:
    parser = argparse.ArgumentParser(description="Regenerate recommendation embeddings")
    parser.add_argument("--ids", type=str, help="comma-separated recommendation ids, e.g. 12,40,41")
    parser.add_argument("--all", action="store_true", help="re-embed rows that already have a vector")
    parser.add_argument("--limit", type=int, help="maximum number of rows to process")
    args = parser.parse_args()

    ids = None
    if args.ids:
        try:
            ids = [int(x.strip()) for x in args.ids.split(",") if x.strip()]
        except ValueError:
            raise SystemExit("--ids must be a comma-separated list of integers")

    db = SessionLocal()
    try:
        todo = target_ids(db, ids, include_existing=args.all, limit=args.limit)
        print(f"🚀 Regenerating {len(todo)} embeddings...")
        succeeded, failed = regenerate(db, todo, get_llm_service())

        print("\n" + "=" * 60)
        print("Embedding regeneration finished")
        print("=" * 60)
        print(f"  succeeded: {succeeded}")
        print(f"  failed:    {failed}")
        print("=" * 60)
    finally:
        db.close()


if __name__ == "__main__":
    main()
