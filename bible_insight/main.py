"""
Bible Insight API — Application entry point.

Bootstraps FastAPI, wires up middleware, error handlers and rate limiters,
registers route groups, and manages the Supabase client lifecycle.

Extension points:
  - Add new route groups with app.include_router() below
  - Add new middleware in the middleware block
  - Change startup behaviour in the lifespan context manager

Run locally:
  uvicorn bible_insight.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bible_insight.core import database
from bible_insight.core.config import settings
from bible_insight.core.errors import register_error_handlers
from bible_insight.core.rate_limit import build_ai_limiter, limiter
from bible_insight.routes.analysis import router as analysis_router
from bible_insight.routes.bible import router as bible_router
from bible_insight.routes.health import router as health_router
from bible_insight.routes.verses import router as verses_router

# ─── Logging ───────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ─── Lifespan ──────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage startup and shutdown lifecycle.

    Code before `yield` runs on startup; code after runs on shutdown.
    """
    logger.info("Starting Bible Insight API (env: %s)", settings.environment)
    # Looked up on the module so tests can patch the lifecycle functions
    await database.connect_to_supabase()
    yield
    logger.info("Shutting down Bible Insight API")
    await database.close_supabase_connection()


# ─── App ───────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="Bible Insight API",
    description=(
        "Verse lookup, chapter reading and AI-assisted Bible study "
        "(topic analysis, cross-references, verse relationships)."
    ),
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.environment != "production" else None,
    redoc_url="/redoc" if settings.environment != "production" else None,
)


# ─── Rate limiting + errors ────────────────────────────────────────────────────
# slowapi finds its limiter on app.state; the AI quota limiter is resolved
# per request from app.state.ai_limiter (see core/rate_limit.py).
app.state.limiter = limiter
app.state.ai_limiter = build_ai_limiter()
register_error_handlers(app)

# ─── Middleware ─────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ─── Routes ────────────────────────────────────────────────────────────────────
app.include_router(health_router, prefix="/health", tags=["health"])
app.include_router(verses_router)
app.include_router(analysis_router)
app.include_router(bible_router)


@app.get("/", tags=["root"])
async def root():
    """API root — basic metadata."""
    return {
        "name": "Bible Insight API",
        "version": "0.1.0",
        "status": "running",
        "environment": settings.environment,
        "docs": "/docs",
    }
