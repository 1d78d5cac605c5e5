"""
Logging framework for the Itinerary Planner service.

This module configures logging for the application, providing a consistent
logging interface across all modules.
"""

import json
import os
import sys
from typing import Any

from loguru import logger

from itinerary_planner.config import LogLevel

# Query parameters that carry credentials and must never reach the logs
SECRET_PARAMS = frozenset({"key", "api_key", "apikey", "authorization"})

_configured = False


def get_logger(name: str):
    """
    Get a logger instance for the specified module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Configured logger instance with the module name attached
    """
    return logger.bind(name=name)


def setup_logging(
    log_level: LogLevel | str = LogLevel.INFO, log_file: str | None = None
):
    """
    Set up the logging configuration for the application.

    Args:
        log_level: The logging level to use (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path to write logs to
    """
    global _configured

    if isinstance(log_level, str):
        log_level = LogLevel(log_level.upper())

    logger.remove()

    logger.add(
        sys.stderr,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        level=log_level.value,
        colorize=True,
    )

    if log_file:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        logger.add(
            log_file,
            format=(
                "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
                "{name}:{function}:{line} - {message}"
            ),
            level=log_level.value,
            rotation="10 MB",
            compression="zip",
        )

    _configured = True
    logger.info(f"Logging initialized with level {log_level.value}")


def is_logging_configured() -> bool:
    """Whether setup_logging has installed the application sinks."""
    return _configured


def redact_params(params: dict[str, Any] | None) -> dict[str, Any] | None:
    """Return a copy of request parameters with credentials masked."""
    if params is None:
        return None
    return {
        k: ("***" if k.lower() in SECRET_PARAMS and v else v)
        for k, v in params.items()
    }


class ServiceLogger:
    """
    Logger bound to an upstream service, used by the API clients to trace
    requests and responses without leaking credentials.
    """

    def __init__(self, service_name: str):
        self.service_name = service_name
        self.logger = logger.bind(service=service_name)

    def debug(self, message: str, **kwargs):
        self.logger.debug(message, **kwargs)

    def warning(self, message: str, **kwargs):
        self.logger.warning(message, **kwargs)

    def log_api_request(self, endpoint: str, params: dict[str, Any] | None = None):
        """
        Log an API request.

        Args:
            endpoint: API endpoint
            params: Request parameters (optional)
        """
        self.debug(
            f"API Request: {self.service_name} - {endpoint} "
            f"{self._safe_json(redact_params(params)) or ''}".rstrip()
        )

    def log_api_response(self, endpoint: str, status_code: int):
        """
        Log an API response.

        Args:
            endpoint: API endpoint
            status_code: HTTP status code
        """
        self.debug(
            f"API Response: {self.service_name} - {endpoint} - Status: {status_code}"
        )

    def _safe_json(self, obj: Any) -> str | None:
        if obj is None:
            return None

        try:
            return json.dumps(obj, default=str)
        except Exception as e:
            self.warning(f"Failed to serialize object to JSON: {e!s}")
            return str(obj)
