"""Logging setup for the server process."""
import logging
import sys

from .config import settings


def configure_logging(log_level: str | None = None) -> None:
    """Configure root logging once, at application startup."""
    level = (log_level or settings.log_level).upper()
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
        level=getattr(logging, level),
    )
    # Reduce noise from the server stack
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
