#!/usr/bin/env python3
"""
seed_db.py — Populate Supabase with sample verses for local development.

Inserts:
  - A handful of well-known verses into `bible_verses`
  - Thematic links between them into `verse_relationships`

Usage:
    python scripts/seed_db.py

Requires:
    pip install supabase python-dotenv
    SUPABASE_URL and SUPABASE_KEY in the environment or .env
    (a service-role key if row-level security blocks inserts)

Safe to re-run: rows are upserted on their fixed ids.
"""

import asyncio
import os

from dotenv import load_dotenv
from supabase import acreate_client

load_dotenv()

SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_KEY = os.getenv("SUPABASE_KEY", "")

SAMPLE_VERSES = [
    {
        "id": 1,
        "book": "John",
        "chapter": 3,
        "verse": 16,
        "text": "For God so loved the world, that he gave his only begotten Son, that whosoever "
                "believeth in him should not perish, but have everlasting life.",
        "testament": "new",
    },
    {
        "id": 2,
        "book": "Romans",
        "chapter": 5,
        "verse": 8,
        "text": "But God commendeth his love toward us, in that, while we were yet sinners, "
                "Christ died for us.",
        "testament": "new",
    },
    {
        "id": 3,
        "book": "1 John",
        "chapter": 4,
        "verse": 9,
        "text": "In this was manifested the love of God toward us, because that God sent his "
                "only begotten Son into the world, that we might live through him.",
        "testament": "new",
    },
    {
        "id": 4,
        "book": "Psalms",
        "chapter": 23,
        "verse": 1,
        "text": "The LORD is my shepherd; I shall not want.",
        "testament": "old",
    },
    {
        "id": 5,
        "book": "Isaiah",
        "chapter": 53,
        "verse": 5,
        "text": "But he was wounded for our transgressions, he was bruised for our iniquities: "
                "the chastisement of our peace was upon him; and with his stripes we are healed.",
        "testament": "old",
    },
    {
        "id": 6,
        "book": "John",
        "chapter": 10,
        "verse": 11,
        "text": "I am the good shepherd: the good shepherd giveth his life for the sheep.",
        "testament": "new",
    },
]

SAMPLE_RELATIONSHIPS = [
    {"id": 1, "source_verse_id": 1, "target_verse_id": 2, "relationship_type": "thematic",
     "strength": 9, "description": "God's love shown in the death of Christ"},
    {"id": 2, "source_verse_id": 1, "target_verse_id": 3, "relationship_type": "linguistic",
     "strength": 8, "description": "Both speak of the 'only begotten Son' sent by God"},
    {"id": 3, "source_verse_id": 5, "target_verse_id": 2, "relationship_type": "theological",
     "strength": 7, "description": "Substitutionary suffering for sinners"},
    {"id": 4, "source_verse_id": 4, "target_verse_id": 6, "relationship_type": "direct_reference",
     "strength": 9, "description": "The LORD as shepherd fulfilled in the good shepherd"},
]


async def seed() -> None:
    if not SUPABASE_URL or not SUPABASE_KEY:
        raise SystemExit("SUPABASE_URL and SUPABASE_KEY must be set")

    print("Connecting to Supabase...")
    client = await acreate_client(SUPABASE_URL, SUPABASE_KEY)

    # ─── Verses ───────────────────────────────────────────────────────────────
    result = await client.table("bible_verses").upsert(SAMPLE_VERSES, on_conflict="id").execute()
    print(f"Upserted {len(result.data)} verses.")

    # ─── Relationships ────────────────────────────────────────────────────────
    result = await client.table("verse_relationships").upsert(SAMPLE_RELATIONSHIPS, on_conflict="id").execute()
    print(f"Upserted {len(result.data)} relationships.")

    print("\nSeed complete! Verses by testament:")
    for testament in ("old", "new"):
        rows = await client.table("bible_verses").select("id").eq("testament", testament).execute()
        print(f"  {testament}: {len(rows.data)} verses")


if __name__ == "__main__":
    asyncio.run(seed())
