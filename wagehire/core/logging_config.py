"""
Logging configuration for the Wagehire API.

Everything goes to stdout; when a log directory is configured a rotating file
with call-site detail is added. Request payloads pass through
``sanitize_log_data`` before they are logged: credentials are redacted and
candidate contact details are masked.
"""
import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Any, Optional

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
LOG_FILE = "wagehire.log"

REDACTED = "***REDACTED***"
SECRET_KEYS = ("password", "token", "secret", "authorization", "api_key", "database_url")
CONTACT_KEYS = ("email", "phone")

QUIET_LOGGERS = ("uvicorn", "uvicorn.access", "sqlalchemy.engine", "python_http_client")


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=DATE_FORMAT))
    return handler


def setup_logging(log_level: str = "INFO", log_dir: Optional[str] = "logs") -> logging.Logger:
    """
    Configure the root logger.

    Args:
        log_level: Logging level name; unknown names fall back to INFO
        log_dir: Directory for ``wagehire.log``; None or "" means console only

    Returns:
        The root logger
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(_handler(logging.StreamHandler(sys.stdout), level, CONSOLE_FORMAT))

    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(path / LOG_FILE, maxBytes=10 * 1024 * 1024, backupCount=5)
        root.addHandler(_handler(file_handler, level, FILE_FORMAT))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root


def mask_contact(value: Any) -> Any:
    """``carol@example.com`` -> ``c***@example.com``; other strings keep their last two characters."""
    if not isinstance(value, str) or not value:
        return value
    if "@" in value:
        local, _, domain = value.partition("@")
        return f"{local[:1]}***@{domain}"
    return f"***{value[-2:]}"


def sanitize_log_data(data: dict) -> dict:
    """
    Return a copy of ``data`` safe to log. Nested dictionaries are sanitized too.

    Args:
        data: Dictionary to sanitize, typically a ``model_dump()``

    Returns:
        Copy with secret values redacted and contact values masked
    """
    sanitized = {}
    for key, value in data.items():
        lowered = str(key).lower()
        if any(secret in lowered for secret in SECRET_KEYS):
            sanitized[key] = REDACTED
        elif any(contact in lowered for contact in CONTACT_KEYS):
            sanitized[key] = mask_contact(value)
        elif isinstance(value, dict):
            sanitized[key] = sanitize_log_data(value)
        else:
            sanitized[key] = value
    return sanitized
