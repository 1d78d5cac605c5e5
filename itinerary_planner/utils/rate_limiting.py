"""
Rate limiting and API request management for external services.

Every upstream call goes through a per-service limiter (requests per minute
and per day) and, for idempotent requests, a tenacity retry loop with
exponential backoff. APIClient wraps both around aiohttp for the TomTom,
SerpApi and Groq clients.
"""

import asyncio
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from typing import Any

import aiohttp
from aiolimiter import AsyncLimiter
from loguru import logger
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from itinerary_planner.utils.error_handling import APIError
from itinerary_planner.utils.logging import ServiceLogger

# HTTP Status Codes
HTTP_STATUS_OK = 200
HTTP_STATUS_REDIRECT = 300
HTTP_STATUS_TOO_MANY_REQUESTS = 429

DEFAULT_TIMEOUT_SECONDS = 30.0
RETRY_STATUS_CODES = (429, 500, 502, 503, 504)
TRANSIENT_ERRORS = (
    aiohttp.ClientConnectorError,
    aiohttp.ServerDisconnectedError,
    asyncio.TimeoutError,
)


@dataclass
class RateLimitConfig:
    """Request budget of one upstream service."""

    service_name: str
    requests_per_minute: int
    requests_per_day: int
    max_retries: int = 3  # Total attempts, including the first
    min_wait_seconds: float = 1.0
    max_wait_seconds: float = 30.0
    retry_status_codes: list[int] = field(
        default_factory=lambda: list(RETRY_STATUS_CODES)
    )


RATE_LIMIT_FIELDS = {f.name for f in fields(RateLimitConfig)} - {"service_name"}


@dataclass
class QuotaUsage:
    """Requests made today against a daily quota."""

    daily_count: int = 0
    last_reset: datetime = field(default_factory=datetime.now)

    def _reset_if_new_day(self) -> None:
        now = datetime.now()
        if now.date() > self.last_reset.date():
            self.daily_count = 0
            self.last_reset = now

    def increment(self) -> None:
        self._reset_if_new_day()
        self.daily_count += 1

    def get_remaining(self, daily_quota: int) -> int:
        self._reset_if_new_day()
        return max(0, daily_quota - self.daily_count)

    def is_quota_exceeded(self, daily_quota: int) -> bool:
        return self.get_remaining(daily_quota) == 0


class ServiceRateLimiter:
    """
    Throttles calls to one upstream service.

    Requests are spread over the minute by a leaky bucket, and a daily
    counter stops calls once the service's quota is spent, so that callers
    fall back instead of burning a paid API.
    """

    def __init__(self, config: RateLimitConfig):
        self.config = config
        self.quota_usage = QuotaUsage()
        # Capacity must cover a single request
        self.limiter = AsyncLimiter(max(1, config.requests_per_minute), 60)
        logger.info(
            f"Initialized rate limiter for {config.service_name} "
            f"({config.requests_per_minute}/min, {config.requests_per_day}/day)"
        )

    async def acquire(self) -> bool:
        """
        Wait for a slot in the per-minute budget.

        Returns:
            False without waiting if today's quota is used up
        """
        if self.quota_usage.is_quota_exceeded(self.config.requests_per_day):
            logger.warning(
                f"Daily quota exceeded for {self.config.service_name} "
                f"({self.config.requests_per_day} requests/day)"
            )
            return False

        await self.limiter.acquire()
        self.quota_usage.increment()
        return True

    def should_retry_exception(self, exception: BaseException) -> bool:
        """Whether a failed call is worth another attempt."""
        if isinstance(exception, TRANSIENT_ERRORS):
            return True
        return (
            isinstance(exception, APIError)
            and exception.upstream_status in self.config.retry_status_codes
        )

    def get_quota_stats(self) -> dict[str, Any]:
        return {
            "service": self.config.service_name,
            "daily_quota": self.config.requests_per_day,
            "used_today": self.quota_usage.daily_count,
            "remaining": self.quota_usage.get_remaining(self.config.requests_per_day),
            "minute_limit": self.config.requests_per_minute,
        }


class RateLimitManager:
    """Registry of per-service limiters."""

    def __init__(self):
        self.limiters: dict[str, ServiceRateLimiter] = {}
        # Off: calls keep their retry settings but skip throttling and quotas
        self.enabled = True
        self.default_config = RateLimitConfig(
            service_name="default",
            requests_per_minute=30,
            requests_per_day=1000,
        )

    def register_service(self, config: RateLimitConfig) -> ServiceRateLimiter:
        limiter = ServiceRateLimiter(config)
        self.limiters[config.service_name] = limiter
        return limiter

    def get_limiter(self, service_name: str) -> ServiceRateLimiter:
        """The service's limiter, registering default limits on first use."""
        if service_name not in self.limiters:
            logger.debug(f"No rate limits configured for {service_name}, using defaults")
            self.register_service(
                replace(self.default_config, service_name=service_name)
            )
        return self.limiters[service_name]

    async def wait_if_needed(self, service_name: str) -> ServiceRateLimiter:
        """
        Block until the service may be called.

        Returns at once, without counting against the quota, while the
        manager is disabled.

        Returns:
            The limiter for the service

        Raises:
            APIError: If the daily quota is exhausted
        """
        limiter = self.get_limiter(service_name)
        if not self.enabled:
            return limiter
        if not await limiter.acquire():
            raise APIError(
                "Daily quota exhausted",
                service_name,
                status_code=HTTP_STATUS_TOO_MANY_REQUESTS,
            )
        return limiter


# Shared by every client in the process
rate_limit_manager = RateLimitManager()


def configure_rate_limits(service_configs: list[RateLimitConfig]) -> None:
    """Register limiters for the given services, replacing existing ones."""
    for service_config in service_configs:
        rate_limit_manager.register_service(service_config)


def before_sleep_callback(retry_state: RetryCallState) -> None:
    """Log a failed attempt before tenacity backs off."""
    exception = retry_state.outcome.exception()
    if exception:
        logger.warning(
            f"Attempt {retry_state.attempt_number}/"
            f"{retry_state.retry_object.stop.max_attempt_number} failed, "
            f"retrying in {retry_state.next_action.sleep:.2f}s: {exception!s}"
        )


async def with_rate_limit(
    service_name: str, func: Callable[..., Any], *args: Any, **kwargs: Any
) -> Any:
    """
    Await ``func(*args, **kwargs)`` within the service's rate limits.

    Connection errors, timeouts and the configured retry status codes (429
    and 5xx by default) are retried with exponential backoff. Any other
    failure is raised at once.

    Raises:
        APIError: If the daily quota is exhausted or the last attempt failed
    """
    limiter = await rate_limit_manager.wait_if_needed(service_name)
    retrying = AsyncRetrying(
        retry=retry_if_exception(limiter.should_retry_exception),
        stop=stop_after_attempt(limiter.config.max_retries),
        wait=wait_exponential(
            multiplier=1,
            min=limiter.config.min_wait_seconds,
            max=limiter.config.max_wait_seconds,
        ),
        reraise=True,
        before_sleep=before_sleep_callback,
    )

    try:
        async for attempt in retrying:
            with attempt:
                return await func(*args, **kwargs)
    except Exception as e:
        logger.error(f"Request to {service_name} failed: {e!s}")
        raise


class APIClient:
    """
    HTTP transport shared by the TomTom, SerpApi and Groq clients.

    Requests pass through the service limiter, and GETs are retried. The API
    key is sent either as a bearer token or, when ``auth_param`` is given, as
    a query parameter of that name.
    """

    def __init__(
        self,
        service_name: str,
        base_url: str,
        api_key: str | None = None,
        auth_param: str | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        """
        Initialize the API client.

        Args:
            service_name: Name of the service
            base_url: Base URL for API requests
            api_key: API key for authentication (optional)
            auth_param: Query parameter carrying the API key (optional)
            timeout: Request timeout in seconds
        """
        self.service_name = service_name
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.auth_param = auth_param
        self.timeout = timeout
        self.log = ServiceLogger(service_name)

    def _url(self, endpoint: str) -> str:
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def _prepare(
        self, params: dict[str, Any] | None, headers: dict[str, str] | None
    ) -> tuple[dict[str, Any], dict[str, str]]:
        request_params = dict(params or {})
        request_headers = dict(headers or {})
        if self.api_key:
            if self.auth_param:
                request_params[self.auth_param] = self.api_key
            else:
                request_headers["Authorization"] = f"Bearer {self.api_key}"
        return request_params, request_headers

    async def _raise_for_status(self, response: aiohttp.ClientResponse) -> None:
        status_code = response.status
        if HTTP_STATUS_OK <= status_code < HTTP_STATUS_REDIRECT:
            return

        response_text = await response.text()
        if status_code == HTTP_STATUS_TOO_MANY_REQUESTS:
            retry_after = response.headers.get("Retry-After")
            logger.warning(
                f"Rate limited by {self.service_name} API "
                f"(Retry-After: {retry_after})"
            )
            raise APIError(
                "Rate limit exceeded",
                self.service_name,
                status_code=status_code,
            )

        raise APIError(
            f"API request failed: {response_text}",
            self.service_name,
            status_code=status_code,
        )

    async def get_json(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """
        Make a GET request with rate limiting and retries.

        Args:
            endpoint: API endpoint path
            params: Query parameters (optional)
            headers: Additional HTTP headers (optional)

        Returns:
            Parsed JSON response

        Raises:
            APIError: If the request fails after retries
        """
        url = self._url(endpoint)
        request_params, request_headers = self._prepare(params, headers)

        async def do_request():
            self.log.log_api_request(endpoint, request_params)
            async with aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as session:
                async with session.get(
                    url, params=request_params, headers=request_headers
                ) as response:
                    self.log.log_api_response(endpoint, response.status)
                    await self._raise_for_status(response)
                    try:
                        return await response.json(content_type=None)
                    except ValueError as e:
                        raise APIError(
                            "Response was not valid JSON",
                            self.service_name,
                            status_code=response.status,
                            original_error=e,
                        ) from e

        return await with_rate_limit(self.service_name, do_request)

    @asynccontextmanager
    async def stream_post(
        self,
        endpoint: str,
        json_data: dict[str, Any],
        headers: dict[str, str] | None = None,
        error_handler: Callable[[aiohttp.ClientResponse], Any] | None = None,
    ) -> AsyncIterator[aiohttp.ClientResponse]:
        """
        Open a streaming POST request.

        The request is rate limited but never retried, since a partially
        consumed body cannot be replayed. Non-2xx responses are handed to
        ``error_handler`` when given, otherwise raised as APIError.

        Args:
            endpoint: API endpoint path
            json_data: JSON request body
            headers: Additional HTTP headers (optional)
            error_handler: Coroutine raising a service specific error (optional)

        Yields:
            The open response, whose ``content`` can be iterated
        """
        url = self._url(endpoint)
        _, request_headers = self._prepare(None, headers)
        await rate_limit_manager.wait_if_needed(self.service_name)

        self.log.log_api_request(endpoint)
        # Only bound the wait between chunks: a long generation is legitimate
        timeout = aiohttp.ClientTimeout(total=None, sock_read=self.timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(
                url, json=json_data, headers=request_headers
            ) as response:
                self.log.log_api_response(endpoint, response.status)
                if not (HTTP_STATUS_OK <= response.status < HTTP_STATUS_REDIRECT):
                    if error_handler is not None:
                        await error_handler(response)
                    await self._raise_for_status(response)
                yield response


# Default rate limit configurations for the upstream services
DEFAULT_RATE_LIMITS = [
    # TomTom free tier allows 5 queries per second on search and routing
    RateLimitConfig(
        service_name="tomtom",
        requests_per_minute=300,
        requests_per_day=2500,
        max_retries=3,
        min_wait_seconds=0.5,
        max_wait_seconds=10.0,
    ),
    # SerpApi bills per search, keep bursts small
    RateLimitConfig(
        service_name="serpapi",
        requests_per_minute=60,
        requests_per_day=1000,
        max_retries=2,
        min_wait_seconds=1.0,
        max_wait_seconds=15.0,
    ),
    # Groq free tier: 30 requests per minute, 1000 per day on 70b models
    RateLimitConfig(
        service_name="groq",
        requests_per_minute=30,
        requests_per_day=1000,
        max_retries=1,
    ),
    # Gemini API free tier: 15 requests per minute, 1500 per day
    RateLimitConfig(
        service_name="gemini",
        requests_per_minute=15,
        requests_per_day=1500,
        max_retries=1,
    ),
]


def initialize_rate_limiting(overwrite: bool = True):
    """
    Register the default limits of every upstream service.

    Args:
        overwrite: Replace limits already registered for a service
    """
    configs = [
        c
        for c in DEFAULT_RATE_LIMITS
        if overwrite or c.service_name not in rate_limit_manager.limiters
    ]
    configure_rate_limits(configs)
    logger.info(f"Initialized rate limiting for {len(configs)} services")


def update_rate_limits_from_config(config_dict: dict[str, dict[str, Any]]) -> None:
    """
    Override service limits from a mapping such as a loaded JSON file.

    Args:
        config_dict: Service name to ``RateLimitConfig`` fields; missing
            fields take the manager defaults
    """
    defaults = rate_limit_manager.default_config
    for service_name, overrides in config_dict.items():
        known = {k: v for k, v in overrides.items() if k in RATE_LIMIT_FIELDS}
        rate_limit_manager.register_service(
            replace(defaults, service_name=service_name, **known)
        )
        logger.info(f"Updated rate limits for {service_name} from configuration")
