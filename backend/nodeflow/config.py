"""Application configuration via environment variables."""
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "nodeflow"
    app_version: str = "0.1.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: Literal["debug", "info", "warning", "error"] = "info"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Engine policies
    cycle_policy: Literal["error", "skip"] = "error"
    error_policy: Literal["continue", "stop"] = "continue"

    # HTTP layer
    run_timeout_s: float | None = None
    max_sessions: int = 64

    model_config = {"env_prefix": "NODEFLOW_"}


settings = Settings()
