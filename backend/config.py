# backend/config.py
"""
Application settings and logging setup.

Settings are read once at startup (after .env is loaded) and handed to the
app factory, which passes them on to the gateway and the services.
"""

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the whole backend."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT
    )


@dataclass(frozen=True)
class Settings:
    """
    Explicit runtime configuration.

    Attributes:
        database_url: SQLAlchemy URL for the session store
        openai_api_key: Model provider key
        openai_model: Chat model used by every analysis call
        port: HTTP listen port
        max_upload_bytes: Resume upload size limit
        cors_origins: Allowed frontend origins
        log_level: Root logging level name
        model_max_attempts: Attempts per model call (first try included)
        model_backoff_ms: Base backoff before the first retry
    """
    database_url: str
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    port: int = 4000
    max_upload_bytes: int = 6 * 1024 * 1024
    cors_origins: List[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    log_level: str = "INFO"
    model_max_attempts: int = 3
    model_backoff_ms: int = 1000

    @classmethod
    def from_env(cls, env_path: Optional[Path] = None) -> "Settings":
        """
        Build settings from the environment, loading backend/.env first.

        Raises:
            RuntimeError: if DATABASE_URL is not set
        """
        load_dotenv(dotenv_path=env_path or Path(__file__).parent / ".env")

        database_url = os.getenv("DATABASE_URL")
        if not database_url:
            raise RuntimeError("DATABASE_URL is not set in the environment (.env)")

        origins = os.getenv("CORS_ORIGINS")
        cors_origins = (
            [o.strip() for o in origins.split(",") if o.strip()]
            if origins else list(DEFAULT_CORS_ORIGINS)
        )

        return cls(
            database_url=database_url,
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
            port=int(os.getenv("PORT", "4000")),
            max_upload_bytes=int(os.getenv("MAX_UPLOAD_BYTES", str(6 * 1024 * 1024))),
            cors_origins=cors_origins,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            model_max_attempts=int(os.getenv("MODEL_MAX_ATTEMPTS", "3")),
            model_backoff_ms=int(os.getenv("MODEL_BACKOFF_MS", "1000")),
        )
