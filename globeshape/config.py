"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    globeshape_env: str = "development"
    globeshape_log_level: str = "info"

    # Export defaults
    default_projection: str = "octahedral"
    canvas_size: float = 1024.0

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
