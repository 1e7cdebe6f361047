"""
Factory for creating prompt enhancement components.
Implements dependency injection and configuration.
"""

import logging
from typing import Optional, Dict, Any, List, Sequence

import httpx

from promptsmith.config.settings import Settings
from promptsmith.core.cancellation import CancellationToken
from promptsmith.services.vagueness_classification.learning.model_store import ModelStore
from promptsmith.services.vagueness_classification.learning.training_data import generate_seed_dataset
from promptsmith.services.vagueness_classification.models import LabeledPrompt
from promptsmith.services.vagueness_classification.vagueness_service import VaguenessService

from .analyzers.quality_analyzer import QualityAnalyzer
from .cache.result_cache import ResultCache
from .context.aggregator import ContextAggregator
from .context.models import ActiveDocument, Diagnostic
from .context.workspace_host import FilesystemWorkspaceHost
from .enhancers.chat_completion_enhancer import ChatCompletionEnhancer
from .enhancers.host_model_enhancer import HostModelEnhancer
from .interfaces import (
    ILanguageModelHost,
    IMetricsCollector,
    IPromptProvider,
    IQualityAnalyzer
)
from .orchestrator import PromptOrchestrator, SimpleMetricsCollector
from .shared import EnhancementServices

logger = logging.getLogger(__name__)


class EnhancementFactory:
    """
    Factory for creating enhancement system components.
    Handles dependency injection and configuration.
    """

    def __init__(
        self,
        config: Settings,
        language_model_host: Optional[ILanguageModelHost] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize factory with configuration.

        Args:
            config: Application settings
            language_model_host: Optional host exposing chat models
            http_client: Optional shared HTTP client for the chat completion provider
        """
        self.config = config
        self._language_model_host = language_model_host
        self._http_client = http_client
        self._services = None
        self._quality_analyzer = None
        self._providers = None
        self._metrics_collector = None

    def create_services(self) -> EnhancementServices:
        """Create the shared rate limiter, cache and vagueness service"""
        if self._services is None:
            services = EnhancementServices(
                cache=ResultCache(max_size=self.config.CACHE_MAX_SIZE, ttl_ms=self.config.CACHE_TTL_MS),
                vagueness_service=VaguenessService(threshold=self.config.VAGUENESS_THRESHOLD)
            )
            services.configure_rate_limiter(
                self.config.RATE_LIMIT_MAX_REQUESTS,
                self.config.RATE_LIMIT_WINDOW_MS
            )
            self._services = services

        return self._services

    def create_quality_analyzer(self) -> IQualityAnalyzer:
        if self._quality_analyzer is None:
            self._quality_analyzer = QualityAnalyzer()

        return self._quality_analyzer

    def create_providers(self) -> List[IPromptProvider]:
        """Create rewrite providers in priority order: host model first, then chat completion"""
        if self._providers is None:
            providers: List[IPromptProvider] = []
            if self._language_model_host is not None:
                providers.append(HostModelEnhancer(self._language_model_host, self.config.PREFERRED_MODEL))

            providers.append(ChatCompletionEnhancer(
                api_key=self.config.CHAT_API_KEY,
                api_url=self.config.CHAT_API_URL,
                model=self.config.CHAT_MODEL,
                max_tokens=self.config.CHAT_MAX_TOKENS,
                temperature=self.config.CHAT_TEMPERATURE,
                timeout=self.config.PROVIDER_TIMEOUT_SECONDS,
                client=self._http_client
            ))

            available = [provider.get_name() for provider in providers if provider.is_available()]
            logger.info(f"Rewrite providers available: {', '.join(available) or 'none'}")
            self._providers = providers

        return self._providers

    def create_metrics_collector(self) -> IMetricsCollector:
        """Create metrics collector instance"""
        if self._metrics_collector is None:
            self._metrics_collector = SimpleMetricsCollector()

        return self._metrics_collector

    def create_workspace_host(
        self,
        active_document: Optional[ActiveDocument] = None,
        diagnostics: Optional[Sequence[Diagnostic]] = None
    ) -> Optional[FilesystemWorkspaceHost]:
        """Workspace host for one request; None when no workspace is configured"""
        if not self.config.WORKSPACE_ROOT:
            return None
        return FilesystemWorkspaceHost(
            self.config.WORKSPACE_ROOT,
            active_document=active_document,
            diagnostics=diagnostics,
            semantic_consent=self.config.ENABLE_SEMANTIC_CONTEXT
        )

    def create_model_store(self) -> ModelStore:
        return ModelStore(self.config.MODEL_STORE_PATH)

    def create_orchestrator(
        self,
        active_document: Optional[ActiveDocument] = None,
        diagnostics: Optional[Sequence[Diagnostic]] = None
    ) -> PromptOrchestrator:
        """Create enhancement orchestrator bound to one editor snapshot"""
        host = self.create_workspace_host(active_document, diagnostics)
        aggregator = None
        if host is not None:
            aggregator = ContextAggregator(host, max_length=self.config.CONTEXT_MAX_LENGTH)

        return PromptOrchestrator(
            services=self.create_services(),
            providers=self.create_providers(),
            quality_analyzer=self.create_quality_analyzer(),
            context_aggregator=aggregator,
            metrics_collector=self.create_metrics_collector(),
            provider_timeout=self.config.PROVIDER_TIMEOUT_SECONDS
        )


class EnhancementService:
    """
    High-level service for prompt enhancement.
    Provides simple interface for integration.
    """

    def __init__(self, config: Settings, factory: Optional[EnhancementFactory] = None):
        """
        Initialize enhancement service.

        Args:
            config: Application settings
            factory: Optional pre-built factory, e.g. with a language model host
        """
        self.config = config
        self.factory = factory or EnhancementFactory(config)
        self.services = self.factory.create_services()
        self.model_store = self.factory.create_model_store()

        logger.info("Enhancement service initialized successfully")

    @property
    def vagueness(self) -> VaguenessService:
        return self.services.vagueness_service

    async def process_prompt(
        self,
        prompt: str,
        active_document: Optional[ActiveDocument] = None,
        diagnostics: Optional[Sequence[Diagnostic]] = None,
        token: Optional[CancellationToken] = None
    ) -> Dict[str, Any]:
        """
        Enhance a prompt.

        Args:
            prompt: User prompt
            active_document: File open in the caller's editor, if any
            diagnostics: Diagnostics for that file
            token: Optional cancellation handle

        Returns:
            Dict[str, Any]: Workflow result
        """
        orchestrator = self.factory.create_orchestrator(active_document, diagnostics)
        result = await orchestrator.process_prompt(prompt, token)

        # Return as dictionary for API response
        return result.to_dict()

    def analyze(self, prompt: str) -> Dict[str, Any]:
        """Vagueness analysis without enhancement"""
        result = self.vagueness.analyze_vagueness(prompt).to_dict()
        result["threshold"] = self.vagueness.get_threshold()
        return result

    def set_threshold(self, threshold: int) -> int:
        self.vagueness.set_threshold(threshold)
        logger.info(f"Vagueness threshold set to {threshold}")
        return self.vagueness.get_threshold()

    def train_model(
        self,
        examples: Optional[Sequence[LabeledPrompt]] = None,
        persist: bool = True
    ) -> Dict[str, Any]:
        """
        Train the vagueness model and persist it on success.

        Args:
            examples: Labelled prompts, the bundled seed set when omitted
            persist: Write the trained model to the model store

        Returns:
            Dict[str, Any]: Training result
        """
        dataset = list(examples) if examples is not None else generate_seed_dataset()
        result = self.vagueness.train_model(dataset)
        if result.success and persist:
            self.vagueness.save_model(self.model_store)
        return result.to_dict()

    def get_model(self) -> Optional[Dict[str, Any]]:
        return self.vagueness.export_model()

    def import_model(self, blob: Dict[str, Any], persist: bool = True) -> Dict[str, Any]:
        """
        Import an exported model.

        Raises:
            ModelImportError: When the blob is invalid
        """
        self.vagueness.import_model(blob)
        if persist:
            self.vagueness.save_model(self.model_store)
        return self.vagueness.get_model_info()

    def reset_model(self, delete_stored: bool = True) -> Dict[str, Any]:
        self.vagueness.reset_model()
        if delete_stored:
            self.model_store.delete()
        return self.vagueness.get_model_info()

    def load_persisted_model(self) -> bool:
        """
        Load the stored model, or train on the seed set when configured to.

        Returns:
            bool: True if a trained model is active afterwards
        """
        if self.vagueness.load_model(self.model_store):
            logger.info(f"Loaded vagueness model from {self.model_store.path}")
            return True

        if self.config.TRAIN_ON_STARTUP:
            logger.info("No stored vagueness model, training on seed prompts")
            return self.train_model()["success"]

        logger.info("No stored vagueness model, using rule-based scoring")
        return False

    async def health_check(self) -> Dict[str, Any]:
        """Check health of enhancement system"""
        return await self.factory.create_orchestrator().health_check()

    async def get_metrics(self) -> Dict[str, Any]:
        """Get enhancement metrics"""
        metrics = await self.factory.create_metrics_collector().get_metrics()
        return metrics.to_dict()

    def dispose(self):
        self.services.dispose()
