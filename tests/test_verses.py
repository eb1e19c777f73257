"""
Tests for the Supabase-backed verse routes and BibleRepository.

The `verses_client` fixture overrides get_db with the in-memory
FakeSupabase from conftest, so the real PostgREST query chain
(select/eq/order/text_search/in_/limit → execute) is exercised.
"""

from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from bible_insight.core.errors import UpstreamProviderError
from bible_insight.services.bible_repository import BibleRepository, parse_verse_reference

# ─── parse_verse_reference ────────────────────────────────────────────────────


class TestParseVerseReference:
    @pytest.mark.parametrize(
        "ref, expected",
        [
            ("John 3:16", ("John", 3, 16)),
            ("1 John 4:9", ("1 John", 4, 9)),
            ("  Psalms 23:1 ", ("Psalms", 23, 1)),
            ("Song of Solomon 2:4", ("Song of Solomon", 2, 4)),
            ("Genesis 1:1-3", ("Genesis", 1, 1)),
        ],
    )
    def test_valid_references(self, ref, expected):
        parsed = parse_verse_reference(ref)
        assert (parsed.book, parsed.chapter, parsed.verse) == expected

    @pytest.mark.parametrize("ref", ["", "John", "John 3", "3:16", "John three:16", "John 0:1", "John 3:0"])
    def test_invalid_references(self, ref):
        assert parse_verse_reference(ref) is None


# ─── BibleRepository ──────────────────────────────────────────────────────────


class TestBibleRepository:
    @pytest.mark.asyncio
    async def test_search_uses_english_full_text_and_limit(self, fake_supabase):
        repo = BibleRepository(fake_supabase)
        verses = await repo.search_verses_by_text("love")

        assert {v.id for v in verses} == {2, 3, 5}
        table, query = fake_supabase.queries[0]
        assert table == "bible_verses"
        assert ("text_search", "text", "love", {"config": "english"}) in query.calls
        assert ("limit", 20) in query.calls

    @pytest.mark.asyncio
    async def test_chapter_is_ordered_by_verse(self, fake_supabase):
        verses = await BibleRepository(fake_supabase).get_chapter_verses("John", 3)
        assert [v.verse for v in verses] == [16, 17]

    @pytest.mark.asyncio
    async def test_related_verses_join_relationship_metadata(self, fake_supabase):
        related = await BibleRepository(fake_supabase).get_related_verses(2)

        by_ref = {(r.book, r.chapter, r.verse): r for r in related}
        romans = by_ref[("Romans", 5, 8)]
        assert romans.relationship_type == "thematic"
        assert romans.strength == 9
        assert romans.description == "God's love shown in Christ"
        assert by_ref[("1 John", 4, 9)].description is None

    @pytest.mark.asyncio
    async def test_no_relationships_skips_second_query(self, fake_supabase):
        assert await BibleRepository(fake_supabase).get_related_verses(4) == []
        assert [t for t, _ in fake_supabase.queries] == ["verse_relationships"]

    @pytest.mark.asyncio
    async def test_client_failure_becomes_upstream_error(self, fake_supabase):
        fake_supabase.fail = True
        repo = BibleRepository(fake_supabase)
        with pytest.raises(UpstreamProviderError) as exc_info:
            await repo.get_chapter_verses("John", 3)

        assert exc_info.value.message == "Failed to fetch verses"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    @pytest.mark.asyncio
    async def test_missing_client_raises_on_first_query(self):
        repo = BibleRepository(None)
        with pytest.raises(UpstreamProviderError, match="Database unavailable"):
            await repo.search_verses_by_text("love")


# ─── GET /api/verses?q= ───────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_search_returns_matching_verses(verses_client):
    response = await verses_client.get("/api/verses", params={"q": "shepherd"})
    assert response.status_code == 200

    verses = response.json()["verses"]
    assert len(verses) == 1
    assert verses[0]["book"] == "Psalms"
    assert verses[0]["testament"] == "old"


@pytest.mark.asyncio
@pytest.mark.parametrize("params", [{}, {"q": ""}, {"q": "   "}])
async def test_search_requires_query(verses_client, params):
    response = await verses_client.get("/api/verses", params=params)
    assert response.status_code == 400
    assert response.json() == {"error": "Query parameter is required"}


@pytest.mark.asyncio
async def test_search_no_matches_is_empty_list(verses_client):
    response = await verses_client.get("/api/verses", params={"q": "leviathan"})
    assert response.status_code == 200
    assert response.json() == {"verses": []}


@pytest.mark.asyncio
async def test_search_datastore_failure_is_generic_500(verses_client, fake_supabase):
    fake_supabase.fail = True
    response = await verses_client.get("/api/verses", params={"q": "love"})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to search verses"}
    assert "PostgREST" not in response.text


@pytest.mark.asyncio
async def test_search_without_database_is_500(client):
    response = await client.get("/api/verses", params={"q": "love"})
    assert response.status_code == 500
    assert response.json() == {"error": "Database unavailable"}


# ─── GET /api/verses/lookup?ref= ──────────────────────────────────────────────


@pytest.mark.asyncio
async def test_lookup_by_reference(verses_client):
    response = await verses_client.get("/api/verses/lookup", params={"ref": "1 John 4:9"})
    assert response.status_code == 200
    assert response.json()["id"] == 5


@pytest.mark.asyncio
async def test_lookup_invalid_reference(verses_client):
    response = await verses_client.get("/api/verses/lookup", params={"ref": "the one about love"})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid verse reference"}


@pytest.mark.asyncio
async def test_lookup_unknown_verse_is_404(verses_client):
    response = await verses_client.get("/api/verses/lookup", params={"ref": "Genesis 1:1"})
    assert response.status_code == 404
    assert response.json() == {"error": "Verse Genesis 1:1 not found"}


# ─── GET /api/verses/{book}/{chapter} ─────────────────────────────────────────


@pytest.mark.asyncio
async def test_chapter_verses(verses_client):
    response = await verses_client.get("/api/verses/John/3")
    assert response.status_code == 200
    assert [v["verse"] for v in response.json()["verses"]] == [16, 17]


@pytest.mark.asyncio
async def test_chapter_with_numbered_book(verses_client):
    response = await verses_client.get("/api/verses/1 John/4")
    assert response.status_code == 200
    assert response.json()["verses"][0]["id"] == 5


@pytest.mark.asyncio
async def test_empty_chapter_is_404_with_empty_list(verses_client):
    response = await verses_client.get("/api/verses/John/99")
    assert response.status_code == 404
    assert response.json() == {"verses": [], "error": "No verses found for John chapter 99"}


@pytest.mark.asyncio
@pytest.mark.parametrize("chapter", ["abc", "3.5", "three"])
async def test_non_integer_chapter_is_400(verses_client, chapter):
    response = await verses_client.get(f"/api/verses/John/{chapter}")
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid book or chapter"}


# ─── GET /api/verses/{verse_id}/relationships ─────────────────────────────────


@pytest.mark.asyncio
async def test_stored_relationships(verses_client):
    response = await verses_client.get("/api/verses/2/relationships")
    assert response.status_code == 200

    data = response.json()
    assert data["verse_id"] == 2
    assert {r["relationship_type"] for r in data["related"]} == {"thematic", "linguistic"}


@pytest.mark.asyncio
async def test_verse_without_relationships(verses_client):
    response = await verses_client.get("/api/verses/4/relationships")
    assert response.status_code == 200
    assert response.json()["related"] == []


@pytest.mark.asyncio
async def test_non_numeric_id_reaches_chapter_route(verses_client):
    response = await verses_client.get("/api/verses/John/relationships")
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid book or chapter"}


# ─── Malformed rows / unexpected failures ─────────────────────────────────────


@pytest.mark.asyncio
async def test_unexpected_testament_is_json_500(verses_client, fake_supabase):
    rows = [dict(r) for r in fake_supabase.tables["bible_verses"]]
    rows[0]["testament"] = "NT"
    fake_supabase.tables["bible_verses"] = rows

    response = await verses_client.get("/api/verses/John/3")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch verses"}


@pytest.mark.asyncio
async def test_unknown_relationship_type_is_json_500(verses_client, fake_supabase):
    rows = [dict(r) for r in fake_supabase.tables["verse_relationships"]]
    rows[0]["relationship_type"] = "typological"
    fake_supabase.tables["verse_relationships"] = rows

    response = await verses_client.get("/api/verses/2/relationships")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch relationships"}


@pytest.mark.asyncio
async def test_relationship_row_without_target_is_upstream_error(fake_supabase):
    rows = [{k: v for k, v in r.items() if k != "target_verse_id"} for r in fake_supabase.tables["verse_relationships"]]
    fake_supabase.tables["verse_relationships"] = rows

    with pytest.raises(UpstreamProviderError, match="Failed to fetch relationships"):
        await BibleRepository(fake_supabase).get_related_verses(2)


@pytest.mark.asyncio
async def test_unhandled_exception_is_generic_json_500(fake_supabase):
    from bible_insight.core.database import get_db
    from bible_insight.main import app

    app.dependency_overrides[get_db] = lambda: fake_supabase
    boom = AsyncMock(side_effect=KeyError("secret-column"))
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    try:
        with patch.object(BibleRepository, "get_chapter_verses", new=boom):
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                response = await ac.get("/api/verses/John/3")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
    assert "secret-column" not in response.text

