"""
Central configuration. All API keys and settings in one place.
"""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Environment ---
    env: str = Field(default="development", alias="ENV")
    log_level: str = Field(default="info", alias="LOG_LEVEL")
    debug: bool = Field(default=False, alias="DEBUG")

    # --- Database ---
    # Empty means "not configured": requests that need the DB fail with ConfigError.
    database_url: str = Field(default="", alias="DATABASE_URL")

    # --- Hosted auth (Supabase) ---
    supabase_url: str = Field(default="", alias="SUPABASE_URL")
    supabase_jwt_secret: str = Field(default="", alias="SUPABASE_JWT_SECRET")
    supabase_jwt_audience: str = Field(default="authenticated", alias="SUPABASE_JWT_AUDIENCE")
    # Comma-separated; tokens signed with anything else are rejected as 401.
    supabase_jwt_algorithms: str = Field(default="HS256,RS256,ES256", alias="SUPABASE_JWT_ALGORITHMS")

    # --- LLM ---
    groq_api_key: str = Field(default="", alias="GROQ_API_KEY")
    groq_base_url: str = Field(default="https://api.groq.com/openai/v1", alias="GROQ_BASE_URL")
    openrouter_api_key: str = Field(default="", alias="OPENROUTER_API_KEY")
    openrouter_base_url: str = Field(default="https://openrouter.ai/api/v1", alias="OPENROUTER_BASE_URL")
    openai_api_key: str = Field(default="", alias="OPENAI_API_KEY")
    openai_base_url: str = Field(default="https://api.openai.com/v1", alias="OPENAI_BASE_URL")
    chat_model: str = Field(default="llama-3.1-8b-instant", alias="CHAT_MODEL")
    planning_model: str = Field(default="llama-3.1-70b-versatile", alias="PLANNING_MODEL")
    simulator_model: str = Field(default="llama-3.1-70b-versatile", alias="SIMULATOR_MODEL")
    llm_temperature: float = Field(default=0.3, alias="LLM_TEMPERATURE")

    # OpenRouter wants these as HTTP-Referer / X-Title
    app_url: str = Field(default="https://mindmesh.app", alias="APP_URL")
    app_title: str = Field(default="MindMesh", alias="APP_TITLE")

    # --- API ---
    api_host: str = Field(default="0.0.0.0", alias="API_HOST")
    api_port: int = Field(default=8000, alias="API_PORT")
    cors_origins: str = Field(default="*", alias="CORS_ORIGINS")


@lru_cache
def get_settings() -> Settings:
    return Settings()
