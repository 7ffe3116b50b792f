"""
Runtime configuration, read from the environment.

    BOOKDRAW_ENV            development | production
    BOOKDRAW_CATALOG        Path to a catalog JSON file (sample catalog if unset)
    BOOKDRAW_STATE_FILE     Path to the JSON state file (in-memory if unset)
    ALLOWED_ORIGINS         Comma-separated CORS origins
    BOOKDRAW_LOG_LEVEL      debug, info, warning, error
    BOOKDRAW_SAVE_RETRIES   Attempts when the stored state changed underneath
"""

from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


@dataclass
class Settings:
    env: str = "development"
    catalog_path: str | None = None
    state_file: str | None = None
    allowed_origins: list[str] = field(default_factory=lambda: ["*"])
    log_level: str = "info"
    save_retries: int = 3

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            env=os.getenv("BOOKDRAW_ENV", "development"),
            catalog_path=os.getenv("BOOKDRAW_CATALOG") or None,
            state_file=os.getenv("BOOKDRAW_STATE_FILE") or None,
            allowed_origins=[
                o.strip() for o in os.getenv("ALLOWED_ORIGINS", "*").split(",") if o.strip()
            ],
            log_level=os.getenv("BOOKDRAW_LOG_LEVEL", "info").lower(),
            save_retries=int(os.getenv("BOOKDRAW_SAVE_RETRIES", "3")),
        )


def configure_logging(level: str = "info") -> None:
    """Set up root logging once for CLI and server runs."""
    logging.basicConfig(
        level=LOG_LEVELS.get(level.lower(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
