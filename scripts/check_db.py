#!/usr/bin/env python3
"""
Print the state of the vector collections and the chat tables.

Run from project root:

    python scripts/check_db.py
"""

import sys
from pathlib import Path

_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from app.core.config import CALENDAR_COLLECTION, ZONES_COLLECTION
from app.db.database import SessionLocal, init_db
from app.db.models import Chat, Message, User
from app.services.vector_store import get_collection_stats


def main() -> None:
    for name in (CALENDAR_COLLECTION, ZONES_COLLECTION):
        stats = get_collection_stats(name)
        if not stats["exists"]:
            print(f"{name}: collection does NOT exist (run scripts/ingest_data.py)")
            continue
        print(f"{name}: {stats['total_records']} records")
        for i, sample in enumerate(stats["samples"], 1):
            print(f"   {i}. {sample}")

    init_db()
    db = SessionLocal()
    try:
        print(f"users: {db.query(User).count()}")
        print(f"chats: {db.query(Chat).count()}")
        print(f"messages: {db.query(Message).count()}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
