import asyncio
from typing import List, Optional

import pytest

from promptsmith.core.cancellation import CancellationToken
from promptsmith.services.prompt_enhancement.analyzers.quality_analyzer import QualityAnalyzer
from promptsmith.services.prompt_enhancement.cache.result_cache import ResultCache
from promptsmith.services.prompt_enhancement.interfaces import (
    IHostModel,
    ILanguageModelHost,
    IPromptProvider
)
from promptsmith.services.prompt_enhancement.limits.rate_limiter import RateLimiter
from promptsmith.services.prompt_enhancement.models import ProviderSuccess
from promptsmith.services.prompt_enhancement.orchestrator import PromptOrchestrator, SimpleMetricsCollector
from promptsmith.services.prompt_enhancement.shared import EnhancementServices
from promptsmith.services.prompt_enhancement.streams import TextStream
from promptsmith.services.vagueness_classification.vagueness_service import VaguenessService

VAGUE_PROMPT = "fix it"
SPECIFIC_PROMPT = "Fix the TypeError in src/auth/login.ts where fetchUser() returns undefined on line 42"
ENHANCED_TEXT = (
    "Debug the login handler in src/auth/login.ts: implement validation for the user "
    "session token and add a unit test covering the failing case"
)


class FakeProvider(IPromptProvider):
    """Provider double: returns a fixed rewrite, raises, or hangs"""

    def __init__(
        self,
        name: str = "fake",
        text: str = ENHANCED_TEXT,
        error: Optional[Exception] = None,
        delay: float = 0.0,
        available: bool = True
    ):
        self.name = name
        self.text = text
        self.error = error
        self.delay = delay
        self.available = available
        self.calls: List[tuple] = []
        self.was_cancelled = False

    def is_available(self) -> bool:
        return self.available

    def get_name(self) -> str:
        return self.name

    async def enhance(self, prompt: str, context: str, token: CancellationToken) -> ProviderSuccess:
        self.calls.append((prompt, context))
        if self.delay:
            try:
                await asyncio.sleep(self.delay)
            except asyncio.CancelledError:
                self.was_cancelled = True
                raise
        if self.error is not None:
            raise self.error
        return ProviderSuccess(text=self.text, model=f"{self.name}-model", tokens_used=42)


class FakeHostModel(IHostModel):

    def __init__(self, vendor: str, family: str, chunks=("Implement ", "the login form")):
        self._vendor = vendor
        self._family = family
        self.chunks = list(chunks)
        self.requests = []

    @property
    def vendor(self) -> str:
        return self._vendor

    @property
    def family(self) -> str:
        return self._family

    def send_request(self, messages, token: CancellationToken) -> TextStream:
        self.requests.append(messages)
        return TextStream.from_chunks(self.chunks)


class FakeModelHost(ILanguageModelHost):

    def __init__(self, models=None):
        self.models = list(models) if models is not None else [FakeHostModel("copilot", "gpt-4o")]

    async def select_models(self):
        return list(self.models)


class FixedClock:
    """Millisecond clock under test control"""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float):
        self.now += ms


@pytest.fixture
def clock():
    return FixedClock()


def make_services(clock=None, threshold: int = 30, max_requests: int = 10) -> EnhancementServices:
    return EnhancementServices(
        rate_limiter=RateLimiter(max_requests, 60000, clock=clock),
        cache=ResultCache(100, 300000, clock=clock),
        vagueness_service=VaguenessService(threshold=threshold)
    )


def make_orchestrator(
    providers,
    services: Optional[EnhancementServices] = None,
    aggregator=None,
    timeout: float = 1.0,
    quality_analyzer=None
) -> PromptOrchestrator:
    return PromptOrchestrator(
        services=services or make_services(),
        providers=providers,
        quality_analyzer=quality_analyzer or QualityAnalyzer(),
        context_aggregator=aggregator,
        metrics_collector=SimpleMetricsCollector(),
        provider_timeout=timeout
    )
