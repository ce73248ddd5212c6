from .logging import LOG_LEVELS, LogMessage, level_enabled

__all__ = ["LOG_LEVELS", "LogMessage", "level_enabled"]
