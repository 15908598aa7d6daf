from .config import setup_logging, get_logger, SESSION_LOG_FILE, SESSION_ERROR_LOG_FILE

__all__ = ["setup_logging", "get_logger", "SESSION_LOG_FILE", "SESSION_ERROR_LOG_FILE"]
