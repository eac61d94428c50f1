import logging
import os
from logging.config import dictConfig

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
TELEMETRY_LOGGER = "course_wizard.telemetry"

# The OpenAI client logs every evaluator round trip; quiet unless asked for.
_CLIENT_LOGGERS = ("httpx", "openai")
_HTTP_LOGGERS = (*_CLIENT_LOGGERS, "uvicorn.access")


def configure_logging() -> None:
    """Configure process logging from the COURSE_WIZARD_* environment flags.

    ``COURSE_WIZARD_LOG_LEVEL`` sets the root level. ``COURSE_WIZARD_TELEMETRY_LEVEL``
    sets the level of the ``TELEMETRY`` event lines separately, so wizard events
    can be kept while the rest of the app logs at WARNING (or silenced with ERROR).
    ``COURSE_WIZARD_DEBUG_HTTP=1`` turns on request logging for the OpenAI client.
    """
    level = os.getenv("COURSE_WIZARD_LOG_LEVEL", "INFO").upper()
    telemetry_level = os.getenv("COURSE_WIZARD_TELEMETRY_LEVEL", "INFO").upper()

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": DEFAULT_LOG_FORMAT,
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "loggers": {
                TELEMETRY_LOGGER: {"level": telemetry_level},
                **{name: {"level": "WARNING"} for name in _CLIENT_LOGGERS},
            },
            "root": {
                "handlers": ["default"],
                "level": level,
            },
        }
    )

    if os.getenv("COURSE_WIZARD_DEBUG_HTTP", "0") == "1":
        for name in _HTTP_LOGGERS:
            logging.getLogger(name).setLevel(logging.DEBUG)
