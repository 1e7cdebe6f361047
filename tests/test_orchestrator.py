import asyncio

from conftest import (
    ENHANCED_TEXT,
    SPECIFIC_PROMPT,
    VAGUE_PROMPT,
    FakeProvider,
    make_orchestrator,
    make_services
)
from promptsmith.core.cancellation import CancellationToken
from promptsmith.services.prompt_enhancement.context.aggregator import ContextAggregator
from promptsmith.services.prompt_enhancement.context.workspace_host import FilesystemWorkspaceHost
from promptsmith.services.prompt_enhancement.errors import ErrorCategory, ProviderError, message_for_category
from promptsmith.services.prompt_enhancement.models import WorkflowStatus


class ExplodingAnalyzer:
    def analyze(self, original, enhanced, original_analysis=None):
        raise RuntimeError("analyzer blew up")


class CancellingWorkspaceHost(FilesystemWorkspaceHost):
    """Workspace whose listing is interrupted by the host"""

    def __init__(self, root, token: CancellationToken):
        super().__init__(root)
        self.token = token

    async def list_workspace_files(self):
        self.token.cancel()
        return await super().list_workspace_files()


async def test_specific_prompt_is_skipped():
    """Prompts under the threshold never reach a provider"""
    provider = FakeProvider()
    orchestrator = make_orchestrator([provider])

    result = await orchestrator.process_prompt(SPECIFIC_PROMPT)

    assert result.status == WorkflowStatus.SKIPPED
    assert result.skipped
    assert result.analysis is not None
    assert result.analysis.score < 30
    assert provider.calls == []


async def test_vague_prompt_is_enhanced():
    provider = FakeProvider()
    services = make_services()
    orchestrator = make_orchestrator([provider], services=services)

    result = await orchestrator.process_prompt(VAGUE_PROMPT)

    assert result.success
    assert not result.cached
    assert result.rewrite.original == VAGUE_PROMPT
    assert result.rewrite.enhanced == ENHANCED_TEXT
    assert result.rewrite.model == "fake-model"
    assert result.rewrite.tokens_used == 42
    assert 0.0 < result.rewrite.confidence <= 1.0
    assert result.analysis.is_vague
    assert services.rate_limiter.get_remaining_requests() == 9
    assert services.cache.size() == 1


async def test_repeated_prompt_is_served_from_cache():
    provider = FakeProvider()
    services = make_services()
    orchestrator = make_orchestrator([provider], services=services)

    first = await orchestrator.process_prompt(VAGUE_PROMPT)
    second = await orchestrator.process_prompt("  FIX IT ")

    assert first.success and second.success
    assert second.cached
    assert second.rewrite == first.rewrite
    assert len(provider.calls) == 1
    # Cache hits do not consume quota
    assert services.rate_limiter.get_remaining_requests() == 9


async def test_falls_back_to_next_provider():
    failing = FakeProvider("primary", error=ProviderError("quota", status_code=429))
    backup = FakeProvider("backup")
    orchestrator = make_orchestrator([failing, backup])

    result = await orchestrator.process_prompt(VAGUE_PROMPT)

    assert result.success
    assert result.rewrite.model == "backup-model"
    assert len(failing.calls) == 1
    metrics = await orchestrator.metrics_collector.get_metrics()
    assert metrics.provider_fallbacks == 1


async def test_unavailable_providers_are_not_tried():
    offline = FakeProvider("offline", available=False)
    online = FakeProvider("online")
    orchestrator = make_orchestrator([offline, online])

    result = await orchestrator.process_prompt(VAGUE_PROMPT)

    assert result.success
    assert offline.calls == []


async def test_all_providers_failing_reports_last_category():
    first = FakeProvider("first", error=ProviderError("quota", status_code=429))
    second = FakeProvider("second", error=ProviderError("bad key", status_code=401))
    orchestrator = make_orchestrator([first, second])

    result = await orchestrator.process_prompt(VAGUE_PROMPT)

    assert result.is_error
    assert result.category == ErrorCategory.AUTH_FAILED
    assert result.error == message_for_category(ErrorCategory.AUTH_FAILED)
    assert "bad key" not in result.error


async def test_no_available_provider():
    orchestrator = make_orchestrator([FakeProvider(available=False)])

    result = await orchestrator.process_prompt(VAGUE_PROMPT)

    assert result.is_error
    assert result.category == ErrorCategory.MODEL_UNAVAILABLE


async def test_rate_limited_request_reports_wait_time(clock):
    services = make_services(clock=clock, max_requests=1)
    provider = FakeProvider()
    orchestrator = make_orchestrator([provider], services=services)

    first = await orchestrator.process_prompt(VAGUE_PROMPT)
    clock.advance(500)
    second = await orchestrator.process_prompt("make it better")

    assert first.success
    assert second.is_error
    assert second.category == ErrorCategory.QUOTA_EXCEEDED
    assert second.retry_after_seconds == 60
    assert "60 seconds" in second.error
    assert len(provider.calls) == 1


async def test_rate_limit_is_checked_before_cache(clock):
    services = make_services(clock=clock, max_requests=1)
    orchestrator = make_orchestrator([FakeProvider()], services=services)

    await orchestrator.process_prompt(VAGUE_PROMPT)
    repeat = await orchestrator.process_prompt(VAGUE_PROMPT)

    assert repeat.category == ErrorCategory.QUOTA_EXCEEDED


async def test_rate_limit_window_expires(clock):
    services = make_services(clock=clock, max_requests=1)
    orchestrator = make_orchestrator([FakeProvider()], services=services)

    await orchestrator.process_prompt(VAGUE_PROMPT)
    clock.advance(60001)
    result = await orchestrator.process_prompt("make it better")

    assert result.success


async def test_slow_provider_times_out_and_falls_back():
    slow = FakeProvider("slow", delay=5)
    fast = FakeProvider("fast")
    orchestrator = make_orchestrator([slow, fast], timeout=0.05)

    result = await orchestrator.process_prompt(VAGUE_PROMPT)

    assert result.success
    assert result.rewrite.model == "fast-model"
    assert slow.was_cancelled


async def test_timeout_without_fallback():
    orchestrator = make_orchestrator([FakeProvider("slow", delay=5)], timeout=0.05)

    result = await orchestrator.process_prompt(VAGUE_PROMPT)

    assert result.is_error
    assert result.category == ErrorCategory.TIMEOUT


async def test_cancelled_before_start():
    provider = FakeProvider()
    orchestrator = make_orchestrator([provider])
    token = CancellationToken()
    token.cancel()

    result = await orchestrator.process_prompt(VAGUE_PROMPT, token)

    assert result.is_cancelled
    assert provider.calls == []


async def test_cancelled_during_provider_call():
    provider = FakeProvider(delay=5)
    services = make_services()
    orchestrator = make_orchestrator([provider], services=services, timeout=10)
    token = CancellationToken()

    asyncio.get_running_loop().call_later(0.02, token.cancel)
    result = await orchestrator.process_prompt(VAGUE_PROMPT, token)

    assert result.status == WorkflowStatus.CANCELLED
    assert provider.was_cancelled
    assert services.cache.size() == 0
    metrics = await orchestrator.metrics_collector.get_metrics()
    assert metrics.cancellations == 1


async def test_cancelled_while_collecting_context(tmp_path):
    """Cancellation during context collection stops before the cache and providers"""
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "index.js").write_text("console.log('hi')")
    provider = FakeProvider()
    services = make_services()
    token = CancellationToken()
    aggregator = ContextAggregator(CancellingWorkspaceHost(str(tmp_path), token))
    orchestrator = make_orchestrator([provider], services=services, aggregator=aggregator)

    result = await orchestrator.process_prompt(VAGUE_PROMPT, token)

    assert result.status == WorkflowStatus.CANCELLED
    assert result.analysis is not None
    assert provider.calls == []
    assert services.cache.size() == 0
    assert services.rate_limiter.get_remaining_requests() == 10


async def test_unexpected_failure_becomes_error_result():
    orchestrator = make_orchestrator([FakeProvider()], quality_analyzer=ExplodingAnalyzer())

    result = await orchestrator.process_prompt(VAGUE_PROMPT)

    assert result.is_error
    assert result.category == ErrorCategory.UNKNOWN
    assert "analyzer blew up" not in result.error


async def test_workspace_context_reaches_provider(tmp_path):
    (tmp_path / "package.json").write_text('{"dependencies": {"react": "^18.0.0"}}')
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "index.js").write_text("console.log('hi')")
    provider = FakeProvider()
    aggregator = ContextAggregator(FilesystemWorkspaceHost(str(tmp_path)))
    orchestrator = make_orchestrator([provider], aggregator=aggregator)

    result = await orchestrator.process_prompt(VAGUE_PROMPT)

    assert result.success
    _, context = provider.calls[0]
    assert "Tech stack: JavaScript, React" in context
    assert "Size: 2 files, 1 directories" in context


async def test_metrics_track_outcomes():
    orchestrator = make_orchestrator([FakeProvider()])

    await orchestrator.process_prompt(SPECIFIC_PROMPT)
    await orchestrator.process_prompt(VAGUE_PROMPT)
    await orchestrator.process_prompt(VAGUE_PROMPT)

    metrics = await orchestrator.metrics_collector.get_metrics()
    assert metrics.total_requests == 3
    assert metrics.skipped == 1
    assert metrics.successful_enhancements == 2
    assert metrics.cache_hits == 1


async def test_health_check_reports_components():
    orchestrator = make_orchestrator([FakeProvider(available=False)])

    health = await orchestrator.health_check()

    assert health["status"] == "degraded"
    assert health["components"]["providers"] == [{"name": "fake", "available": False}]
    assert health["components"]["vagueness"]["trained"] is False
    assert health["components"]["rate_limiter"]["remaining"] == 10
    assert health["components"]["context"]["status"] == "disabled"
