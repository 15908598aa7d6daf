import logging
import logging.config
import os


# Define base directories
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../../../"))
LOG_DIR = os.environ.get("IVS_LOG_DIR", os.path.join(BASE_DIR, "logs"))
SESSION_LOG_DIR = os.path.join(LOG_DIR, "session")

# Ensure log directories exist
os.makedirs(SESSION_LOG_DIR, exist_ok=True)

# Log file paths
SESSION_LOG_FILE = os.path.join(SESSION_LOG_DIR, "session.log")
SESSION_ERROR_LOG_FILE = os.path.join(SESSION_LOG_DIR, "session.error.log")

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "[%(asctime)s] [%(levelname)s] [%(name)s] [%(filename)s:%(lineno)d] %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "console": {
            "level": "INFO",
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
        "file_session": {
            "level": "DEBUG",
            "class": "logging.handlers.TimedRotatingFileHandler",
            "filename": SESSION_LOG_FILE,
            "when": "midnight",
            "interval": 1,
            "backupCount": 30,
            "encoding": "utf-8",
            "formatter": "standard",
        },
        "file_error": {
            "level": "ERROR",
            "class": "logging.handlers.TimedRotatingFileHandler",
            "filename": SESSION_ERROR_LOG_FILE,
            "when": "midnight",
            "interval": 1,
            "backupCount": 30,
            "encoding": "utf-8",
            "formatter": "standard",
        },
    },
    "loggers": {
        "ivs": {
            "handlers": ["console", "file_session", "file_error"],
            "level": "DEBUG",
            "propagate": False,
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "INFO",
    },
}

_configured = False

def setup_logging():
    """Apply default logging configuration."""
    global _configured
    logging.config.dictConfig(LOGGING_CONFIG)
    _configured = True

def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with standard configuration."""
    # Ensure configuration is applied at least once
    if not _configured:
        setup_logging()

    return logging.getLogger(name)
