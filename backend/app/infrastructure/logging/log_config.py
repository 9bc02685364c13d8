"""Per-category logging levels for the newsroom API.

Each ``LOG_LEVEL_*`` setting drives a group of loggers, so SQL statements
or uvicorn access lines can be silenced while the article workflow output
stays visible.

Usage:
    from app.infrastructure.logging.log_config import setup_logging
    setup_logging()   # once, from the FastAPI lifespan
"""

import logging
import sys

from app.config import Settings, get_settings

_CATEGORY_MAP: dict[str, tuple[str, ...]] = {
    "log_level_sql": ("sqlalchemy.engine", "sqlalchemy.pool", "aiosqlite"),
    "log_level_uvicorn": ("uvicorn", "uvicorn.access", "uvicorn.error"),
    "log_level_workflow": ("ArticleWorkflow", "app.application.services"),
    "log_level_storage": ("app.infrastructure.storage",),
}

_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(settings: Settings | None = None) -> None:
    """Apply the root level and every category level from ``settings``."""
    settings = settings or get_settings()

    root = logging.getLogger()
    root.setLevel(_parse_level(settings.log_level))
    # uvicorn installs its own handlers; bare scripts get a stderr one
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)

    applied: dict[str, str] = {}
    for field_name, logger_names in _CATEGORY_MAP.items():
        raw = getattr(settings, field_name, "INFO")
        for name in logger_names:
            logging.getLogger(name).setLevel(_parse_level(raw))
        applied[field_name.removeprefix("log_level_")] = raw

    logging.getLogger(__name__).debug("Log levels: root=%s %s", settings.log_level, applied)


def _parse_level(raw: str) -> int:
    """Level name to ``logging`` constant; unknown names fall back to INFO."""
    numeric = getattr(logging, raw.upper(), None)
    return numeric if isinstance(numeric, int) else logging.INFO
