"""Application configuration — reads from environment variables and Docker Swarm secrets."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

SECRET_DIR = Path("/run/secrets")


def _read_secret(name: str) -> str | None:
    """Read a Docker Swarm secret from /run/secrets/."""
    secret_path = SECRET_DIR / name
    if secret_path.exists():
        return secret_path.read_text().strip()
    return None


class Settings(BaseSettings):
    """Application settings with env var and secret support."""

    supabase_url: str = ""
    supabase_key: str = ""
    llm_gateway: str = "http://localhost:18789"
    llm_api_key: str = ""
    llm_model: str = "gemini-2.5-flash"
    llm_timeout: float = 60.0
    port: int = 8400
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        for name in ("supabase_url", "supabase_key", "llm_gateway", "llm_api_key"):
            if secret := _read_secret(name):
                setattr(self, name, secret)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
