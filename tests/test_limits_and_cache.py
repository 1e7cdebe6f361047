from datetime import timezone

import pytest
from pydantic import ValidationError

from promptsmith.config.settings import Settings
from promptsmith.services.prompt_enhancement.cache.result_cache import ResultCache
from promptsmith.services.prompt_enhancement.errors import RateLimiterConfigError
from promptsmith.services.prompt_enhancement.limits.rate_limiter import RateLimiter
from promptsmith.services.prompt_enhancement.models import ImprovementBreakdown, RewriteResult
from promptsmith.services.prompt_enhancement.shared import EnhancementServices


def rewrite(text: str) -> RewriteResult:
    return RewriteResult(original="fix it", enhanced=text, model="test", improvements=ImprovementBreakdown())


# Rate limiter

def test_rate_limiter_admits_up_to_max(clock):
    limiter = RateLimiter(3, 1000, clock=clock)

    for _ in range(3):
        assert limiter.can_make_request()
        limiter.record_request()

    assert not limiter.can_make_request()
    assert limiter.get_remaining_requests() == 0


def test_rate_limiter_window_slides(clock):
    limiter = RateLimiter(2, 1000, clock=clock)
    limiter.record_request()
    clock.advance(400)
    limiter.record_request()

    assert limiter.get_time_until_reset() == 600
    clock.advance(601)
    assert limiter.can_make_request()
    assert limiter.get_remaining_requests() == 1
    assert limiter.get_time_until_reset() == 399


def test_rate_limiter_ignores_records_over_capacity(clock):
    limiter = RateLimiter(1, 1000, clock=clock)
    limiter.record_request()
    clock.advance(10)
    limiter.record_request()

    clock.advance(991)
    assert limiter.can_make_request()


def test_rate_limiter_reset_and_idle(clock):
    limiter = RateLimiter(1, 1000, clock=clock)
    assert limiter.get_time_until_reset() == 0
    limiter.record_request()
    limiter.reset()
    assert limiter.can_make_request()


@pytest.mark.parametrize("max_requests, window_ms", [(0, 1000), (5, 0)])
def test_rate_limiter_rejects_bad_config(max_requests, window_ms):
    with pytest.raises(ValueError):
        RateLimiter(max_requests, window_ms)


def test_shared_limiter_cannot_be_reconfigured():
    services = EnhancementServices()
    limiter = services.configure_rate_limiter(5, 1000)

    assert services.configure_rate_limiter(5, 1000) is limiter
    with pytest.raises(RateLimiterConfigError):
        services.configure_rate_limiter(10, 1000)


def test_shared_services_reset_keeps_limiter_config():
    services = EnhancementServices()
    services.configure_rate_limiter(2, 1000)
    services.rate_limiter.record_request()
    services.cache.set("fix it", "", rewrite("a"))

    services.reset()

    assert services.rate_limiter.get_remaining_requests() == 2
    assert services.cache.size() == 0


# Result cache

def test_cache_key_is_normalized(clock):
    cache = ResultCache(10, 1000, clock=clock)
    cache.set("Fix It", " React ", rewrite("a"))

    assert cache.get("  fix it ", "react").enhanced == "a"
    assert cache.get("fix it", "vue") is None


def test_cache_entries_expire(clock):
    cache = ResultCache(10, 1000, clock=clock)
    cache.set("fix it", "", rewrite("a"))

    clock.advance(1000)
    assert cache.get("fix it") is not None
    clock.advance(1)
    assert cache.get("fix it") is None
    assert cache.size() == 0


def test_cache_evicts_least_recently_used(clock):
    cache = ResultCache(2, 1000, clock=clock)
    cache.set("a", "", rewrite("a"))
    cache.set("b", "", rewrite("b"))
    cache.get("a")
    cache.set("c", "", rewrite("c"))

    assert cache.get("a") is not None
    assert cache.get("b") is None
    assert cache.get("c") is not None


def test_cache_overwrite_does_not_evict(clock):
    cache = ResultCache(2, 1000, clock=clock)
    cache.set("a", "", rewrite("a"))
    cache.set("b", "", rewrite("b"))
    cache.set("a", "", rewrite("a2"))

    assert cache.size() == 2
    assert cache.get("a").enhanced == "a2"


def test_cache_prune(clock):
    cache = ResultCache(10, 1000, clock=clock)
    cache.set("old", "", rewrite("old"))
    clock.advance(800)
    cache.set("new", "", rewrite("new"))
    clock.advance(300)

    assert cache.prune() == 1
    assert cache.size() == 1


@pytest.mark.parametrize("max_size, ttl_ms", [(0, 1000), (10, 0)])
def test_cache_rejects_bad_config(max_size, ttl_ms):
    with pytest.raises(ValueError):
        ResultCache(max_size, ttl_ms)


@pytest.mark.parametrize("field", ["CACHE_MAX_SIZE", "CACHE_TTL_MS", "RATE_LIMIT_MAX_REQUESTS", "RATE_LIMIT_WINDOW_MS"])
def test_settings_reject_non_positive_limits(field):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{field: 0})


def test_cached_rewrite_keeps_utc_timestamp(clock):
    cache = ResultCache(10, 1000, clock=clock)
    cache.set("fix it", "", rewrite("a"))

    assert cache.get("fix it").timestamp.tzinfo == timezone.utc
