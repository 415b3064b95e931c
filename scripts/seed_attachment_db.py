#!/usr/bin/env python3
"""
Seed the attachments SQLite DB for demos or tests.

Creates data/attachments.db (if missing), ensures the attachments table exists,
and inserts seed file records. Use --reset to clear existing rows first.

Run from project root:

    python scripts/seed_attachment_db.py
    python scripts/seed_attachment_db.py --reset

Messages that reference these names with a 📎 line resolve to the seeded URL and
size; edit SEED_ATTACHMENTS below to add or change demo files.
"""

import argparse
import sys
from pathlib import Path

# Project root on path so "zanichat" resolves
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from zanichat.core.attachment_db import SqliteAttachmentStore

# (name, url, size_bytes)
SEED_ATTACHMENTS = [
    ("report.pdf", "https://files.example.com/report.pdf", 48_213),
    ("roadmap.docx", "https://files.example.com/roadmap.docx", 120_554),
    ("budget.xlsx", "https://files.example.com/budget.xlsx", 33_010),
    ("team-photo.png", "https://files.example.com/team-photo.png", 812_447),
]


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed attachments DB for demos/tests.")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Clear all existing rows before inserting seed records.",
    )
    parser.add_argument("--db", default=None, help="Path to the SQLite file (default: data/attachments.db).")
    args = parser.parse_args()

    store = SqliteAttachmentStore(args.db)
    if args.reset:
        store.clear_all()
        print("Cleared existing attachment records.")

    for name, url, size in SEED_ATTACHMENTS:
        store.add(name, url, size)
        print(f"  added: {name}")

    print(f"Done. Seeded {len(SEED_ATTACHMENTS)} attachments.")


if __name__ == "__main__":
    main()
