"""
Supabase connection management using the async supabase-py client.

Architecture decision: single DatabaseClient instance shared across all
requests via a module-level singleton. FastAPI's dependency injection
(get_db) gives routes clean access without importing the singleton directly.

The connection is opened in FastAPI's lifespan (startup) and closed
on shutdown.
"""

import logging
import re

from supabase import AsyncClient, acreate_client

from bible_insight.core.config import settings

logger = logging.getLogger(__name__)


class DatabaseClient:
    """
    Holds the async Supabase client.

    Why a class rather than bare globals: we can safely replace
    .client in tests (monkeypatching a class attribute is cleaner than
    replacing module-level vars).
    """

    client: AsyncClient | None = None


# Module-level singleton — all app code references this object
db_client = DatabaseClient()


async def connect_to_supabase() -> None:
    """
    Create the Supabase client and validate it with a tiny query.

    Called once at app startup (via lifespan). Fails gracefully if
    Supabase is unavailable or not configured — the API still responds
    and the health check reports the real status.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logger.warning("SUPABASE_URL / SUPABASE_KEY not set — verse routes will fail.")
        db_client.client = None
        return

    logger.info("Connecting to Supabase at %s", _redact_url(settings.supabase_url))
    try:
        db_client.client = await acreate_client(settings.supabase_url, settings.supabase_key)
        await db_client.client.table("bible_verses").select("id").limit(1).execute()
        logger.info("Supabase connection established")
    except Exception as exc:
        logger.warning(
            "Supabase unavailable at startup: %s. "
            "API running in degraded mode — verse routes will fail.",
            exc,
        )
        db_client.client = None


async def close_supabase_connection() -> None:
    """Drop the client on app shutdown (supabase-py holds no pooled sockets of its own)."""
    if db_client.client is not None:
        db_client.client = None
        logger.info("Supabase client released")


def get_db() -> AsyncClient | None:
    """
    FastAPI dependency — inject the Supabase client into route handlers.

    Returns None when Supabase is unavailable; the repository layer turns
    that into an UpstreamProviderError.
    """
    return db_client.client


def _redact_url(url: str) -> str:
    """Keep only the project host before logging."""
    return re.sub(r"://[^@/]+@", "://<redacted>@", url)
