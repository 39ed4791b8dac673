"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    anthropic_api_key: str = ""
    workwithme_env: str = "development"
    workwithme_log_level: str = "debug"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Model routing
    model_cheap: str = "claude-haiku-4-5-20251001"
    model_mid: str = "claude-sonnet-4-5-20250929"

    # Transport
    llm_timeout_s: float = 30.0
    max_transport_failures: int = 2
    conversation_turns: int = 20

    # Canvas / drawing
    canvas_width: int = 800
    canvas_height: int = 600
    draw_pacing_ms: int = 300
    history_limit: int = 30

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
