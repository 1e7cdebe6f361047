"""
Main orchestrator for prompt enhancement system.
Gates a prompt on vagueness and rate limits, gathers context, then tries
each rewrite provider in order.
"""

import asyncio
import logging
import math
import time
from typing import Optional, Dict, Any, List, Union

from promptsmith.core.cancellation import CancellationToken

from .context.aggregator import ContextAggregator, get_context_summary
from .errors import (
    ErrorCategory,
    categorize_error,
    format_rate_limit_message,
    format_user_error,
    message_for_category
)
from .interfaces import (
    IEnhancementOrchestrator,
    IMetricsCollector,
    IPromptProvider,
    IQualityAnalyzer
)
from .models import (
    AnalysisResult,
    EnhancementMetrics,
    OrchestratorState,
    ProviderFailure,
    ProviderSuccess,
    RewriteResult,
    WorkflowResult
)
from .shared import EnhancementServices

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER_TIMEOUT_SECONDS = 30.0

ProviderOutcome = Union[ProviderSuccess, ProviderFailure]


class PromptOrchestrator(IEnhancementOrchestrator):
    """
    Main orchestrator for the prompt enhancement system.

    One call walks threshold check, rate limit check, context collection,
    cache lookup and provider attempts. Expected failures come back as
    WorkflowResult values; nothing a provider raises escapes process_prompt.
    """

    def __init__(
        self,
        services: EnhancementServices,
        providers: List[IPromptProvider],
        quality_analyzer: IQualityAnalyzer,
        context_aggregator: Optional[ContextAggregator] = None,
        metrics_collector: Optional[IMetricsCollector] = None,
        provider_timeout: float = DEFAULT_PROVIDER_TIMEOUT_SECONDS
    ):
        """
        Initialize orchestrator.

        Args:
            services: Shared rate limiter, cache and vagueness service
            providers: Rewrite providers in priority order
            quality_analyzer: Scores each rewrite against its original
            context_aggregator: Optional workspace context source
            metrics_collector: Optional metrics collector
            provider_timeout: Seconds allowed per provider attempt
        """
        self.services = services
        self.providers = list(providers)
        self.quality_analyzer = quality_analyzer
        self.context_aggregator = context_aggregator
        self.metrics_collector = metrics_collector
        self.provider_timeout = provider_timeout

    def _transition(self, state: OrchestratorState):
        logger.debug(f"Orchestrator -> {state.value}")

    async def process_prompt(
        self,
        prompt: str,
        token: Optional[CancellationToken] = None
    ) -> WorkflowResult:
        """
        Main enhancement orchestration method.

        Args:
            prompt: User prompt
            token: Optional cancellation handle

        Returns:
            WorkflowResult: Skipped, success, error or cancelled outcome
        """
        start_time = time.time()
        token = token or CancellationToken()
        self._transition(OrchestratorState.IDLE)

        try:
            result = await self._run(prompt, token)
        except Exception as e:
            logger.error(f"Enhancement orchestration failed: {e}", exc_info=True)
            self._transition(OrchestratorState.ERROR)
            result = WorkflowResult.failed(format_user_error(e), categorize_error(e).category)

        if self.metrics_collector:
            processing_time = (time.time() - start_time) * 1000
            await self.metrics_collector.record(result, processing_time)

        return result

    async def _run(self, prompt: str, token: CancellationToken) -> WorkflowResult:
        if token.is_cancellation_requested:
            self._transition(OrchestratorState.CANCELLED)
            return WorkflowResult.cancelled()

        # Step 1: Vagueness gate
        self._transition(OrchestratorState.THRESHOLD_CHECK)
        vagueness = self.services.vagueness_service
        analysis = vagueness.analyze_vagueness(prompt)
        if analysis.score < vagueness.get_threshold():
            logger.debug(f"Prompt below threshold ({analysis.score} < {vagueness.get_threshold()}), skipping")
            self._transition(OrchestratorState.DONE)
            return WorkflowResult.skipped_result(analysis)

        # Step 2: Rate limit gate
        self._transition(OrchestratorState.RATE_LIMIT_CHECK)
        limiter = self.services.rate_limiter
        if not limiter.can_make_request():
            seconds = math.ceil(limiter.get_time_until_reset() / 1000)
            logger.info(f"Rate limit reached, retry in {seconds}s")
            self._transition(OrchestratorState.ERROR)
            return WorkflowResult.failed(
                format_rate_limit_message(seconds),
                ErrorCategory.QUOTA_EXCEEDED,
                analysis=analysis,
                retry_after_seconds=seconds
            )

        # Step 3: Context
        self._transition(OrchestratorState.CONTEXT_COLLECT)
        context = ""
        if self.context_aggregator is not None:
            tiered = await self.context_aggregator.detect(token=token)
            context = tiered.formatted
            logger.debug(get_context_summary(tiered))

        if token.is_cancellation_requested:
            self._transition(OrchestratorState.CANCELLED)
            return WorkflowResult.cancelled(analysis)

        # Step 4: Cache
        self._transition(OrchestratorState.CACHE_CHECK)
        cached = self.services.cache.get(prompt, context)
        if cached is not None:
            logger.debug(f"Cache hit for prompt: {prompt[:50]}")
            self._transition(OrchestratorState.DONE)
            return WorkflowResult.succeeded(cached, analysis, cached=True)

        # Step 5: Providers in priority order
        return await self._try_providers(prompt, context, analysis, token)

    async def _try_providers(
        self,
        prompt: str,
        context: str,
        analysis: AnalysisResult,
        token: CancellationToken
    ) -> WorkflowResult:
        available = [provider for provider in self.providers if provider.is_available()]
        if not available:
            logger.warning("No rewrite provider is configured")
            self._transition(OrchestratorState.ERROR)
            return WorkflowResult.failed(
                message_for_category(ErrorCategory.MODEL_UNAVAILABLE),
                ErrorCategory.MODEL_UNAVAILABLE,
                analysis=analysis
            )

        last_failure: Optional[ProviderFailure] = None
        for index, provider in enumerate(available):
            self._transition(OrchestratorState.PROVIDER_ATTEMPT)
            outcome = await self._attempt(provider, prompt, context, token)

            if outcome is None:
                self._transition(OrchestratorState.CANCELLED)
                return WorkflowResult.cancelled(analysis)

            if isinstance(outcome, ProviderSuccess):
                return self._complete(prompt, context, analysis, outcome)

            last_failure = outcome
            logger.warning(
                f"Provider {outcome.provider} failed ({outcome.category.value}): {outcome.message}"
            )
            if index + 1 < len(available) and self.metrics_collector:
                await self.metrics_collector.record_fallback()

        self._transition(OrchestratorState.ERROR)
        return WorkflowResult.failed(
            message_for_category(last_failure.category),
            last_failure.category,
            analysis=analysis
        )

    async def _attempt(
        self,
        provider: IPromptProvider,
        prompt: str,
        context: str,
        token: CancellationToken
    ) -> Optional[ProviderOutcome]:
        """
        Race one provider call against cancellation and the timeout.

        Returns:
            Optional[ProviderOutcome]: None when the host cancelled the call
        """
        name = provider.get_name()
        task = asyncio.ensure_future(provider.enhance(prompt, context, token))
        cancel_waiter = asyncio.ensure_future(token.wait())

        try:
            done, _ = await asyncio.wait(
                {task, cancel_waiter},
                timeout=self.provider_timeout,
                return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            cancel_waiter.cancel()

        if token.is_cancellation_requested:
            await self._abandon(task)
            return None

        if task not in done:
            await self._abandon(task)
            return ProviderFailure(
                provider=name,
                category=ErrorCategory.TIMEOUT,
                message=f"{name} did not respond within {self.provider_timeout:g}s"
            )

        try:
            return task.result()
        except asyncio.CancelledError:
            return ProviderFailure(provider=name, category=ErrorCategory.UNKNOWN, message=f"{name} was cancelled")
        except Exception as e:
            categorized = categorize_error(e)
            return ProviderFailure(
                provider=name,
                category=categorized.category,
                message=categorized.original_message
            )

    @staticmethod
    async def _abandon(task: asyncio.Future):
        if not task.done():
            task.cancel()
        # Retrieve the outcome so an abandoned failure is not reported as unhandled
        await asyncio.gather(task, return_exceptions=True)

    def _complete(
        self,
        prompt: str,
        context: str,
        analysis: AnalysisResult,
        success: ProviderSuccess
    ) -> WorkflowResult:
        quality = self.quality_analyzer.analyze(prompt, success.text, analysis)
        rewrite = RewriteResult(
            original=prompt,
            enhanced=success.text,
            model=success.model,
            improvements=quality.improvements,
            confidence=quality.confidence,
            tokens_used=success.tokens_used
        )

        self.services.cache.set(prompt, context, rewrite)
        self.services.rate_limiter.record_request()

        logger.info(
            f"Enhanced prompt via {success.model}: "
            f"{quality.improvements.count} improvement(s), confidence {quality.confidence:.2f}"
        )
        self._transition(OrchestratorState.DONE)
        return WorkflowResult.succeeded(rewrite, analysis)

    async def health_check(self) -> Dict[str, Any]:
        """
        Check health of enhancement system.

        Returns:
            Dict[str, Any]: Health status of all components
        """
        health_status = {
            "status": "healthy",
            "timestamp": time.time(),
            "components": {}
        }

        providers = []
        for provider in self.providers:
            try:
                available = provider.is_available()
                providers.append({"name": provider.get_name(), "available": available})
            except Exception as e:
                providers.append({"name": provider.get_name(), "available": False, "error": str(e)})
        health_status["components"]["providers"] = providers
        if not any(entry["available"] for entry in providers):
            health_status["status"] = "degraded"

        vagueness = self.services.vagueness_service
        health_status["components"]["vagueness"] = vagueness.get_model_info()

        limiter = self.services.rate_limiter
        health_status["components"]["rate_limiter"] = {
            "max_requests": limiter.max_requests,
            "window_ms": limiter.window_ms,
            "remaining": limiter.get_remaining_requests(),
            "reset_in_ms": limiter.get_time_until_reset()
        }

        health_status["components"]["cache"] = {
            "size": self.services.cache.size(),
            "max_size": self.services.cache.max_size,
            "ttl_ms": self.services.cache.ttl_ms
        }

        health_status["components"]["context"] = {
            "status": "enabled" if self.context_aggregator else "disabled"
        }

        if self.metrics_collector:
            metrics = await self.metrics_collector.get_metrics()
            health_status["components"]["metrics"] = metrics.to_dict()
        else:
            health_status["components"]["metrics"] = {"status": "disabled"}

        return health_status


class SimpleMetricsCollector(IMetricsCollector):
    """
    Simple in-memory metrics collector.
    """

    def __init__(self):
        """Initialize metrics collector"""
        self.metrics = EnhancementMetrics()

    async def record(self, result: WorkflowResult, processing_time_ms: float):
        """Record orchestration result"""
        self.metrics.update(result, processing_time_ms)

    async def record_fallback(self):
        self.metrics.provider_fallbacks += 1

    async def get_metrics(self) -> EnhancementMetrics:
        """Get current metrics"""
        return self.metrics

    async def reset_metrics(self):
        """Reset metrics"""
        self.metrics = EnhancementMetrics()
