"""One-shot schema bootstrap for local development databases."""
from __future__ import annotations

import logging
import sys

from studypal.core.config import settings
from studypal.core.logging import configure_logging
from studypal.db import Base
from studypal.db.session import engine

logger = logging.getLogger(__name__)


def init_db() -> None:
    """Create any missing tables. Existing tables are left untouched."""
    Base.metadata.create_all(bind=engine)


def main() -> None:
    configure_logging(log_level=settings.log_level)
    logger.info("Initializing database schema at %s", engine.url.render_as_string(hide_password=True))
    try:
        init_db()
    except Exception:
        logger.exception("Failed to initialize database")
        sys.exit(1)
    logger.info("Database initialized successfully")


if __name__ == "__main__":  # pragma: no cover - manual launch
    main()
