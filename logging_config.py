import logging
import logging.config

from config import settings

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,

    "formatters": {
        "standard": {
            "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        },
        "access": {
            "format": "%(asctime)s | %(levelname)s | uvicorn.access | %(message)s",
        },
    },

    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "level": settings.LOG_LEVEL,
        },
        "access_console": {
            "class": "logging.StreamHandler",
            "formatter": "access",
            "level": settings.LOG_LEVEL,
        },
    },

    "loggers": {
        "uvicorn": {
            "handlers": ["console"],
            "level": settings.LOG_LEVEL,
            "propagate": False,
        },
        "uvicorn.error": {
            "handlers": ["console"],
            "level": settings.LOG_LEVEL,
            "propagate": False,
        },
        "uvicorn.access": {
            "handlers": ["access_console"],
            "level": settings.LOG_LEVEL,
            "propagate": False,
        },
    },

    "root": {
        "handlers": ["console"],
        "level": settings.LOG_LEVEL,
    },
}


def setup_logging() -> None:
    logging.config.dictConfig(LOGGING_CONFIG)
    logging.getLogger(__name__).info("Logging initialized (level=%s)", settings.LOG_LEVEL)
