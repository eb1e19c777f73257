"""
pytest configuration and shared fixtures for the Bible Insight API tests.

Key concern: tests must not require a live Supabase project or any LLM
API key. We achieve this by:
  1. Patching connect_to_supabase / close_supabase_connection to no-ops so
     FastAPI's lifespan doesn't try to reach a real project.
  2. Setting db_client.client = None (disconnected) so the health check
     correctly reports "disconnected" — a valid test-mode state.
  3. Ensuring AI_MOCK_MODE=true so both LLM clients return canned responses.
  4. Giving every test fresh rate limiters, so request counts never leak
     from one test into the next.

Routes that read verses get an in-memory FakeSupabase through
app.dependency_overrides (see the `verses_client` fixture).
"""

import os
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

# Set env vars BEFORE importing the app so Settings picks them up correctly
os.environ.setdefault("AI_MOCK_MODE", "true")
os.environ.setdefault("ENVIRONMENT", "test")


# ── Fake Supabase ─────────────────────────────────────────────────────────────

class FakeQuery:
    """Just enough of the PostgREST request builder for BibleRepository."""

    def __init__(self, rows, fail=False):
        self._rows = [dict(r) for r in rows]
        self._fail = fail
        self.calls = []

    def select(self, columns="*"):
        self.calls.append(("select", columns))
        return self

    def eq(self, column, value):
        self.calls.append(("eq", column, value))
        self._rows = [r for r in self._rows if r.get(column) == value]
        return self

    def in_(self, column, values):
        self.calls.append(("in_", column, list(values)))
        self._rows = [r for r in self._rows if r.get(column) in values]
        return self

    def order(self, column, desc=False):
        self.calls.append(("order", column))
        self._rows.sort(key=lambda r: r[column], reverse=desc)
        return self

    def limit(self, size):
        self.calls.append(("limit", size))
        self._rows = self._rows[:size]
        return self

    def text_search(self, column, query, options=None):
        self.calls.append(("text_search", column, query, options))
        words = query.lower().split()
        self._rows = [r for r in self._rows if all(w in r[column].lower() for w in words)]
        return self

    async def execute(self):
        if self._fail:
            raise RuntimeError("PostgREST exploded")
        return SimpleNamespace(data=self._rows)


class FakeSupabase:
    def __init__(self, tables=None, fail=False):
        self.tables = tables or {}
        self.fail = fail
        self.queries = []

    def table(self, name):
        query = FakeQuery(self.tables.get(name, []), fail=self.fail)
        self.queries.append((name, query))
        return query


SAMPLE_VERSES = [
    {"id": 1, "book": "John", "chapter": 3, "verse": 17,
     "text": "For God sent not his Son into the world to condemn the world.", "testament": "new"},
    {"id": 2, "book": "John", "chapter": 3, "verse": 16,
     "text": "For God so loved the world, that he gave his only begotten Son.", "testament": "new"},
    {"id": 3, "book": "Romans", "chapter": 5, "verse": 8,
     "text": "But God commendeth his love toward us.", "testament": "new"},
    {"id": 4, "book": "Psalms", "chapter": 23, "verse": 1,
     "text": "The LORD is my shepherd; I shall not want.", "testament": "old"},
    {"id": 5, "book": "1 John", "chapter": 4, "verse": 9,
     "text": "In this was manifested the love of God toward us.", "testament": "new"},
]

SAMPLE_RELATIONSHIPS = [
    {"id": 10, "source_verse_id": 2, "target_verse_id": 3, "relationship_type": "thematic",
     "strength": 9, "description": "God's love shown in Christ"},
    {"id": 11, "source_verse_id": 2, "target_verse_id": 5, "relationship_type": "linguistic",
     "strength": 8, "description": None},
]


@pytest.fixture()
def fake_supabase():
    return FakeSupabase(
        tables={"bible_verses": SAMPLE_VERSES, "verse_relationships": SAMPLE_RELATIONSHIPS}
    )


# ── App fixtures ──────────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
async def mock_db():
    """
    Patch the Supabase lifecycle for every test.

    - connect_to_supabase → no-op AsyncMock
    - close_supabase_connection → no-op AsyncMock
    - db_client.client → None  (health check reports "disconnected")
    """
    with (
        patch("bible_insight.core.database.connect_to_supabase", new_callable=AsyncMock),
        patch("bible_insight.core.database.close_supabase_connection", new_callable=AsyncMock),
    ):
        import bible_insight.core.database as db_module

        original_client = db_module.db_client.client
        db_module.db_client.client = None

        yield

        db_module.db_client.client = original_client


@pytest.fixture(autouse=True)
def fresh_limiters():
    """Generous AI limiter + empty slowapi storage for each test."""
    from bible_insight.core.rate_limit import FixedWindowRateLimiter, limiter
    from bible_insight.main import app

    original = app.state.ai_limiter
    app.state.ai_limiter = FixedWindowRateLimiter(window_ms=60_000, max_per_window=1_000)
    limiter.reset()

    yield app.state.ai_limiter

    app.state.ai_limiter = original


@pytest.fixture()
async def client(mock_db):  # noqa: ARG001 — mock_db must run first
    """
    HTTPX async test client wired to the FastAPI app.

    Usage:
        async def test_something(client):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    from bible_insight.main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
async def verses_client(fake_supabase):
    """Client whose get_db dependency yields the in-memory FakeSupabase."""
    from bible_insight.core.database import get_db
    from bible_insight.main import app

    app.dependency_overrides[get_db] = lambda: fake_supabase
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
