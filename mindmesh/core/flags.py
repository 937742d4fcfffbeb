"""
Central feature flags. One file controls every external dependency.

Set via environment variables (prefix FF_) or .env file.
"""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FeatureFlags(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Auth ─────────────────────────────────────────────────────────
    use_auth: bool = Field(default=True, alias="FF_USE_AUTH")
    # ON  → Bearer JWT validated against the hosted auth service.
    #       Needs SUPABASE_JWT_SECRET (HS256) or SUPABASE_URL (JWKS).
    # OFF → Dev user injected (user_id="dev-user"). No token needed.

    # ── LLM Provider ─────────────────────────────────────────────────
    llm_provider: str = Field(default="groq", alias="FF_LLM_PROVIDER")
    # "groq"       → Groq (default). Needs GROQ_API_KEY.
    # "openrouter" → OpenRouter. Needs OPENROUTER_API_KEY.
    # "openai"     → Direct OpenAI. Needs OPENAI_API_KEY.

    llm_retry_on_rate_limit: bool = Field(default=True, alias="FF_LLM_RETRY_ON_RATE_LIMIT")
    # ON  → 429 responses retried with exponential backoff (3 attempts total).
    # OFF → Single attempt; a 429 surfaces as an LLM error.

    # ── Resumes ──────────────────────────────────────────────────────
    persist_resumes: bool = Field(default=True, alias="FF_PERSIST_RESUMES")
    # ON  → Parsed resumes saved to the resumes table.
    # OFF → Parse-only. Response carries stored=false.


@lru_cache
def get_flags() -> FeatureFlags:
    return FeatureFlags()
