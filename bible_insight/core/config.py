"""
Application configuration loaded from environment variables.

Uses pydantic-settings for type-safe env var parsing with automatic
.env file loading. All secrets are injected via environment — never
hard-coded.

To extend: add new fields here and document them in .env.example.
See https://docs.pydantic.dev/latest/concepts/pydantic_settings/
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # ─── Core ──────────────────────────────────────────────────────
    environment: str = "development"
    debug: bool = False

    # ─── Supabase ──────────────────────────────────────────────────
    # Project URL + anon/service key from the Supabase dashboard.
    # Left empty the API still boots; verse routes return 500.
    supabase_url: str = ""
    supabase_key: str = ""

    # ─── CORS ──────────────────────────────────────────────────────
    # Comma-separated allowed origins for the web front end.
    cors_origins_str: str = "http://localhost:3000"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins_str.split(",") if o.strip()]

    # ─── AI ────────────────────────────────────────────────────────
    # Get from https://aistudio.google.com/
    gemini_api_key: str = ""
    gemini_model: str = "gemini-1.5-pro"

    # Get from https://console.groq.com/keys
    groq_api_key: str = ""
    groq_model: str = "llama-3.3-70b-versatile"

    # Provider used when a request doesn't name one: "gemini" | "groq"
    default_ai_model: str = "gemini"

    # When True, all AI calls return canned mock responses.
    # Always True in tests; set False in production with real keys.
    ai_mock_mode: bool = True

    # Upper bound for a single outbound completion call.
    llm_timeout_seconds: float = 30.0

    # ─── Rate limiting ─────────────────────────────────────────────
    # Fixed window applied to the AI-backed routes.
    rate_limit_window_ms: int = 60_000
    rate_limit_max_requests: int = 10

    # Key per-client quotas on the first X-Forwarded-For entry. Enable only
    # behind a proxy that overwrites the header; otherwise callers can spoof it.
    trust_forwarded_for: bool = False

    # ─── Optional integrations ─────────────────────────────────────
    bible_api_base_url: str = "https://bible-api.com"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Don't fail on unknown env vars
    )


# Module-level singleton — import this everywhere instead of instantiating Settings()
settings = Settings()
