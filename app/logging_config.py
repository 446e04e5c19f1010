"""Process-wide logging setup."""

from logging.config import dictConfig

from app.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def init_logging() -> None:
    """Console logging; DEBUG level while ``settings.DEBUG`` is on."""
    level = "DEBUG" if settings.DEBUG else "INFO"
    dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": {"format": LOG_FORMAT}},
        "handlers": {"console": {"class": "logging.StreamHandler", "formatter": "default"}},
        "root": {"level": level, "handlers": ["console"]},
        # SQL echo is controlled by the engine, keep the driver quiet.
        "loggers": {"aiosqlite": {"level": "WARNING"}},
    })
