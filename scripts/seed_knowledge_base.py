#!/usr/bin/env python3
"""
Seed the Milvus knowledge base for demos or tests.

Creates the question_answer collection (if missing) and inserts the sample
question/answer entries, or entries read from a JSON file. Use --reset to drop
existing entries first.

Run from project root:

    python scripts/seed_knowledge_base.py
    python scripts/seed_knowledge_base.py --reset
    python scripts/seed_knowledge_base.py --file data/entries.json

A JSON file holds a list of {"file_id": ..., "question": ..., "answer": ...} objects.
"""

import argparse
import sys
from pathlib import Path

# Project root on path so "app" resolves
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from app.services.ingestion_service import SAMPLE_ENTRIES, load_entries_file, seed_knowledge_base


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the knowledge base for demos/tests.")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop the collection before inserting entries.",
    )
    parser.add_argument(
        "--file",
        type=Path,
        default=None,
        help="JSON file of entries to insert instead of the built-in samples.",
    )
    args = parser.parse_args()

    entries = load_entries_file(args.file) if args.file else SAMPLE_ENTRIES
    result = seed_knowledge_base(entries, reset=args.reset)
    if result.reset:
        print("Dropped existing entries.")
    for entry in entries:
        print(f"  added: {entry['file_id']}")

    print(f"Done. Seeded {result.entries_inserted} entries.")


if __name__ == "__main__":
    main()
