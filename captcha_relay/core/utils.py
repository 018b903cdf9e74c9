"""Core utilities."""

import logging
import re
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from urllib.parse import urlsplit, urlunsplit

from captcha_relay.core.settings.app_settings import LoggingSettings
from captcha_relay.enums import RedirectMode

logger = logging.getLogger(__name__)

# Handler names used to identify handlers and avoid duplicates
APP_STREAM_HANDLER_NAME = "relay_app_stream_handler"
APP_FILE_HANDLER_NAME = "relay_app_file_handler"

FRAGMENT_PATTERN = re.compile(r"#.*$", re.DOTALL)


class HealthCheckFilter(logging.Filter):
    """Filter to exclude health check requests from access logs."""

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Filter out health check log entries.

        Args:
            record (logging.LogRecord): Log record to check.

            bool: False to exclude the record, True to include it.
        """
        message = record.getMessage()
        if "/health" in message and "GET" in message:
            return False
        return True


def compose_redirect(base_url: str, payload: str | None, mode: RedirectMode) -> str:
    """
    Attach an opaque payload to the base redirect URL.

    The payload is inserted verbatim, it is never decoded or re-encoded.

    Args:
        base_url (str): Configured redirect URL.
        payload (str | None): Payload to attach. Nothing is attached when empty.
        mode (RedirectMode): FRAGMENT replaces any existing fragment with
            ``#payload``; PATH appends ``/payload`` to the URL path,
            keeping any query and fragment after it.

    Returns:
        str: The redirect URL.
    """
    if not payload:
        return base_url

    if mode is RedirectMode.PATH:
        parts = urlsplit(base_url)
        path = f"{parts.path.rstrip('/')}/{payload}"
        return urlunsplit(parts._replace(path=path))

    return f"{FRAGMENT_PATTERN.sub('', base_url)}#{payload}"


def _get_handler_by_name(root_logger: logging.Logger, name: str) -> logging.Handler | None:
    """
    Get a handler by name from a logger.

    Args:
        root_logger (logging.Logger): Logger to search.
        name (str): Handler name to find.

        logging.Handler | None: Handler if found, None otherwise.
    """
    for handler in root_logger.handlers:
        if getattr(handler, "name", None) == name:
            return handler
    return None


def _remove_handler_by_name(root_logger: logging.Logger, name: str) -> None:
    handler = _get_handler_by_name(root_logger=root_logger, name=name)
    if handler:
        root_logger.removeHandler(handler)
        handler.close()


def _get_min_level(root_level: str, loggers: dict[str, str]) -> int:
    """Get the minimum numeric log level from root and all custom loggers."""
    levels: list[int] = [logging.getLevelName(root_level.upper())]
    for level in loggers.values():
        levels.append(logging.getLevelName(level.upper()))
    return min(levels)


def setup_logging(settings: LoggingSettings) -> None:
    """
    Setup logging configuration for the application.

    Args:
        settings (LoggingSettings): Logging settings to configure logging.
    """
    root_logger = logging.getLogger()

    min_level = _get_min_level(
        root_level=settings.log_level,
        loggers=settings.loggers,
    )

    root_logger.setLevel(settings.log_level.upper())

    _remove_handler_by_name(root_logger=root_logger, name=APP_STREAM_HANDLER_NAME)
    _remove_handler_by_name(root_logger=root_logger, name=APP_FILE_HANDLER_NAME)

    formatter = logging.Formatter(
        fmt=settings.log_format,
        datefmt=settings.date_format,
    )

    if settings.log_file:
        log_path = Path(settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        if settings.rotate_logs:
            handler: logging.Handler = TimedRotatingFileHandler(
                filename=log_path,
                when="midnight",
                encoding="utf-8",
            )
        else:
            handler = logging.FileHandler(log_path, encoding="utf-8")

        handler.set_name(APP_FILE_HANDLER_NAME)
    else:
        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(APP_STREAM_HANDLER_NAME)

    handler.setFormatter(formatter)
    handler.setLevel(min_level)
    root_logger.addHandler(handler)

    # Let uvicorn and fastapi loggers inherit from root
    for logger_name in ["uvicorn", "uvicorn.error", "uvicorn.access", "fastapi"]:
        logging.getLogger(logger_name).setLevel(logging.NOTSET)

    for logger_name, level in settings.loggers.items():
        logging.getLogger(logger_name).setLevel(level.upper())

    uvicorn_access_logger = logging.getLogger("uvicorn.access")
    if not any(isinstance(f, HealthCheckFilter) for f in uvicorn_access_logger.filters):
        uvicorn_access_logger.addFilter(HealthCheckFilter())
