"""
Unit tests for rate limiting and retries.
"""

import asyncio
from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import aiohttp
import pytest

from itinerary_planner.utils import APIError
from itinerary_planner.utils.rate_limiting import (
    APIClient,
    QuotaUsage,
    RateLimitConfig,
    RateLimitManager,
    ServiceRateLimiter,
    initialize_rate_limiting,
    rate_limit_manager,
    update_rate_limits_from_config,
    with_rate_limit,
)


@pytest.fixture
def fast_service():
    """Register a service that retries without real waiting."""
    config = RateLimitConfig(
        service_name="test-service",
        requests_per_minute=600,
        requests_per_day=1000,
        max_retries=3,
        min_wait_seconds=0,
        max_wait_seconds=0,
    )
    rate_limit_manager.register_service(config)
    yield config.service_name
    rate_limit_manager.limiters.pop(config.service_name, None)


def test_quota_usage_resets_on_new_day():
    usage = QuotaUsage(daily_count=10, last_reset=datetime.now() - timedelta(days=1))
    assert usage.get_remaining(10) == 10
    usage.increment()
    assert usage.daily_count == 1


def test_quota_exceeded():
    usage = QuotaUsage(daily_count=5)
    assert usage.is_quota_exceeded(5)
    assert not usage.is_quota_exceeded(6)


def test_should_retry_exception():
    limiter = ServiceRateLimiter(
        RateLimitConfig(service_name="x", requests_per_minute=10, requests_per_day=10)
    )
    assert limiter.should_retry_exception(asyncio.TimeoutError())
    assert limiter.should_retry_exception(aiohttp.ServerDisconnectedError())
    assert limiter.should_retry_exception(APIError("busy", "x", status_code=503))
    assert limiter.should_retry_exception(APIError("slow down", "x", status_code=429))
    assert not limiter.should_retry_exception(APIError("bad key", "x", status_code=401))
    assert not limiter.should_retry_exception(ValueError("nope"))


@pytest.mark.asyncio
async def test_acquire_respects_daily_quota():
    limiter = ServiceRateLimiter(
        RateLimitConfig(service_name="x", requests_per_minute=100, requests_per_day=2)
    )
    assert await limiter.acquire()
    assert await limiter.acquire()
    assert not await limiter.acquire()
    assert limiter.get_quota_stats()["remaining"] == 0


@pytest.mark.asyncio
async def test_exhausted_quota_raises():
    manager = RateLimitManager()
    manager.register_service(
        RateLimitConfig(service_name="serpapi", requests_per_minute=60, requests_per_day=1)
    )
    await manager.wait_if_needed("serpapi")

    with pytest.raises(APIError) as exc_info:
        await manager.wait_if_needed("serpapi")
    assert exc_info.value.upstream_status == 429
    assert "Daily quota exhausted" in exc_info.value.message


def test_manager_default_limiter():
    manager = RateLimitManager()
    limiter = manager.get_limiter("unknown")
    assert limiter.config.requests_per_minute == 30
    assert "unknown" in manager.limiters


@pytest.mark.asyncio
async def test_with_rate_limit_retries_transient_errors(fast_service):
    func = AsyncMock(
        side_effect=[APIError("busy", fast_service, status_code=503), {"ok": True}]
    )

    result = await with_rate_limit(fast_service, func, "arg", key="value")

    assert result == {"ok": True}
    assert func.await_count == 2
    func.assert_awaited_with("arg", key="value")


@pytest.mark.asyncio
async def test_with_rate_limit_does_not_retry_client_errors(fast_service):
    func = AsyncMock(side_effect=APIError("forbidden", fast_service, status_code=403))

    with pytest.raises(APIError):
        await with_rate_limit(fast_service, func)

    assert func.await_count == 1


@pytest.mark.asyncio
async def test_with_rate_limit_gives_up_after_max_retries(fast_service):
    func = AsyncMock(side_effect=asyncio.TimeoutError())

    with pytest.raises(asyncio.TimeoutError):
        await with_rate_limit(fast_service, func)

    assert func.await_count == 3


def test_update_rate_limits_from_config():
    update_rate_limits_from_config(
        {"custom": {"requests_per_minute": 5, "requests_per_day": 50}}
    )
    try:
        limiter = rate_limit_manager.get_limiter("custom")
        assert limiter.config.requests_per_minute == 5
        assert limiter.config.max_retries == 3
    finally:
        rate_limit_manager.limiters.pop("custom", None)


def test_api_client_auth_placement():
    query_client = APIClient("tomtom", "https://api.tomtom.com/", "k", auth_param="key")
    params, headers = query_client._prepare({"limit": 1}, None)
    assert params == {"limit": 1, "key": "k"}
    assert "Authorization" not in headers
    assert query_client._url("/search/2/x.json") == "https://api.tomtom.com/search/2/x.json"

    bearer_client = APIClient("groq", "https://api.groq.com/openai/v1", "g")
    params, headers = bearer_client._prepare(None, {"Content-Type": "application/json"})
    assert params == {}
    assert headers["Authorization"] == "Bearer g"

    anonymous = APIClient("serpapi", "https://serpapi.com", None, auth_param="api_key")
    assert anonymous._prepare(None, None) == ({}, {})


@pytest.mark.asyncio
async def test_disabled_manager_skips_throttling_and_quota():
    manager = RateLimitManager()
    manager.register_service(
        RateLimitConfig(service_name="serpapi", requests_per_minute=1, requests_per_day=1)
    )
    manager.enabled = False

    for _ in range(5):
        limiter = await manager.wait_if_needed("serpapi")

    assert limiter.quota_usage.daily_count == 0
    assert limiter.config.requests_per_minute == 1


def test_initialize_keeps_existing_limits(monkeypatch):
    monkeypatch.setattr(rate_limit_manager, "limiters", {})
    update_rate_limits_from_config({"serpapi": {"requests_per_minute": 1}})

    initialize_rate_limiting(overwrite=False)

    assert rate_limit_manager.get_limiter("serpapi").config.requests_per_minute == 1
    assert rate_limit_manager.get_limiter("tomtom").config.requests_per_minute == 300

    initialize_rate_limiting()
    assert rate_limit_manager.get_limiter("serpapi").config.requests_per_minute == 60
