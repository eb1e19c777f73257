"""
GET /health — liveness plus a one-row Supabase probe.

The process being up is enough for a 200; `database` tells a reachable
project ("connected") apart from a missing or failing one ("disconnected"),
so the front end can keep chapter reading (bible-api.com) available while
verse search is down.
"""

import logging

from fastapi import APIRouter
from pydantic import BaseModel

from bible_insight.core import database
from bible_insight.core.config import settings

logger = logging.getLogger(__name__)
router = APIRouter()

API_VERSION = "0.1.0"


class HealthResponse(BaseModel):
    status: str
    version: str
    database: str
    environment: str
    ai_mock_mode: bool


async def _supabase_status() -> str:
    client = database.db_client.client
    if client is None:
        return "disconnected"
    try:
        await client.table("bible_verses").select("id").limit(1).execute()
    except Exception as exc:
        logger.warning("Supabase probe failed: %s", exc)
        return "disconnected"
    return "connected"


@router.get("", response_model=HealthResponse, summary="Liveness and datastore status")
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=API_VERSION,
        database=await _supabase_status(),
        environment=settings.environment,
        ai_mock_mode=settings.ai_mock_mode,
    )
