"""
Error handling utilities for the Itinerary Planner service.

This module provides the exception hierarchy shared by the data clients, the
itinerary service and the HTTP layer, plus a helper for fetches that must
degrade instead of aborting the pipeline.
"""

import traceback
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from loguru import logger

T = TypeVar("T")

HTTP_BAD_REQUEST = 400
HTTP_INTERNAL_ERROR = 500


class ItineraryPlannerError(Exception):
    """Base exception class for all Itinerary Planner errors."""

    status_code = HTTP_INTERNAL_ERROR

    def __init__(self, message: str, original_error: Exception | None = None):
        """
        Initialize an ItineraryPlannerError.

        Args:
            message: Error message
            original_error: The original exception that caused this error (optional)
        """
        self.message = message
        self.original_error = original_error
        super().__init__(message)


class APIError(ItineraryPlannerError):
    """Error raised when an external API request fails."""

    def __init__(
        self,
        message: str,
        service_name: str,
        status_code: int | None = None,
        original_error: Exception | None = None,
    ):
        """
        Initialize an APIError.

        Args:
            message: Error message
            service_name: Name of the API service
            status_code: Upstream HTTP status code (optional)
            original_error: The original exception that caused this error (optional)
        """
        self.service_name = service_name
        self.upstream_status = status_code
        status_str = f" (status: {status_code})" if status_code else ""
        full_message = f"Error in {service_name} API{status_str}: {message}"
        super().__init__(full_message, original_error)


class LocationNotFoundError(ItineraryPlannerError):
    """Error raised when the geocoder has no match for a location."""

    def __init__(self, location: str):
        self.location = location
        super().__init__(f"Location not found: {location}")


class ValidationError(ItineraryPlannerError):
    """Error raised when validation of input or data fails."""

    status_code = HTTP_BAD_REQUEST


class GuardRailError(ItineraryPlannerError):
    """Error raised when a request is refused by planning policy."""

    status_code = HTTP_BAD_REQUEST


class LLMError(ItineraryPlannerError):
    """Error raised when the language model request cannot be started."""

    def __init__(
        self,
        message: str,
        upstream_status: int | None = None,
        original_error: Exception | None = None,
    ):
        self.upstream_status = upstream_status
        super().__init__(message, original_error)


async def safe_execute(
    func: Callable[..., Awaitable[T]], *args: Any, default: T | None = None, **kwargs: Any
) -> T | None:
    """
    Await a coroutine function safely, catching any exceptions and
    returning a default value.

    Args:
        func: Coroutine function to execute
        *args: Positional arguments to pass to the function
        default: Default value to return if an exception occurs (optional)
        **kwargs: Keyword arguments to pass to the function

    Returns:
        Result of the function or default value if an exception occurs
    """
    try:
        return await func(*args, **kwargs)
    except Exception as e:
        func_name = getattr(func, "__name__", str(func))
        logger.error(f"Error executing {func_name}: {e!s}")
        logger.debug(f"Traceback: {traceback.format_exc()}")
        return default
