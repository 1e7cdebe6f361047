"""
Core interfaces for prompt enhancement system.
Defines contracts for all enhancement components and host collaborators.
"""

from abc import ABC, abstractmethod
from typing import Optional, Dict, Any, List

from promptsmith.core.cancellation import CancellationToken

from .context.models import ActiveDocument, Diagnostic
from .models import (
    AnalysisResult,
    EnhancementMetrics,
    ProviderSuccess,
    QualityResult,
    WorkflowResult
)
from .streams import TextStream


class IQualityAnalyzer(ABC):
    """Interface for measuring rewrite quality"""

    @abstractmethod
    def analyze(
        self,
        original: str,
        enhanced: str,
        original_analysis: Optional[AnalysisResult] = None
    ) -> QualityResult:
        """
        Compare a rewrite with its original.

        Args:
            original: Original prompt
            enhanced: Enhanced prompt
            original_analysis: Optional vagueness analysis of the original

        Returns:
            QualityResult: Improvement breakdown, raw scores and confidence
        """
        pass


class IPromptProvider(ABC):
    """Interface for text-generation providers that rewrite prompts"""

    @abstractmethod
    async def enhance(
        self,
        prompt: str,
        context: str,
        token: CancellationToken
    ) -> ProviderSuccess:
        """
        Rewrite a prompt.

        Args:
            prompt: Original prompt
            context: Formatted workspace context, may be empty
            token: Cancellation handle; providers abort in-flight work once it fires

        Returns:
            ProviderSuccess: Enhanced text and model identifier

        Raises:
            ProviderError: When the provider cannot produce a rewrite
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """
        Check if provider is configured for use.

        Returns:
            bool: True if provider can be used
        """
        pass

    @abstractmethod
    def get_name(self) -> str:
        """
        Get provider name for identification.

        Returns:
            str: Provider name
        """
        pass


class IHostModel(ABC):
    """A language model exposed by the host"""

    @property
    @abstractmethod
    def vendor(self) -> str:
        pass

    @property
    @abstractmethod
    def family(self) -> str:
        pass

    @abstractmethod
    def send_request(self, messages: List[Dict[str, str]], token: CancellationToken) -> TextStream:
        """
        Send chat messages to the model.

        Args:
            messages: Chat messages with "role" and "content"
            token: Cancellation handle

        Returns:
            TextStream: Streamed response fragments
        """
        pass


class ILanguageModelHost(ABC):
    """Host API for selecting language models"""

    @abstractmethod
    async def select_models(self) -> List[IHostModel]:
        """
        List models the host makes available.

        Returns:
            List[IHostModel]: Available models, possibly empty
        """
        pass


class IWorkspaceHost(ABC):
    """Read-only editor and workspace signals"""

    @abstractmethod
    def workspace_root(self) -> Optional[str]:
        """Absolute path of the open workspace, or None"""
        pass

    @abstractmethod
    def active_document(self) -> Optional[ActiveDocument]:
        """File currently open in the editor, or None"""
        pass

    @abstractmethod
    def diagnostics(self) -> List[Diagnostic]:
        """Diagnostics for the active document"""
        pass

    @abstractmethod
    async def list_workspace_files(self) -> List[str]:
        """
        Enumerate workspace files.

        Returns:
            List[str]: Paths relative to the workspace root, build and vendor trees excluded
        """
        pass

    @abstractmethod
    async def read_file(self, relative_path: str) -> Optional[str]:
        """
        Read a workspace file.

        Args:
            relative_path: Path relative to the workspace root

        Returns:
            Optional[str]: File text, or None when it cannot be read
        """
        pass

    @abstractmethod
    def has_semantic_consent(self) -> bool:
        """Persisted consent flag for source-level scanning"""
        pass


class IMetricsCollector(ABC):
    """Interface for collecting enhancement metrics"""

    @abstractmethod
    async def record(self, result: WorkflowResult, processing_time_ms: float):
        """
        Record an orchestration outcome.

        Args:
            result: Terminal workflow result
            processing_time_ms: Wall-clock duration of the call
        """
        pass

    @abstractmethod
    async def record_fallback(self):
        """Record that a provider failed and the next one was tried"""
        pass

    @abstractmethod
    async def get_metrics(self) -> EnhancementMetrics:
        """
        Get current metrics.

        Returns:
            EnhancementMetrics: Current metrics snapshot
        """
        pass

    @abstractmethod
    async def reset_metrics(self):
        """Reset all metrics to zero"""
        pass


class IEnhancementOrchestrator(ABC):
    """Interface for orchestrating the enhancement process"""

    @abstractmethod
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
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """
        Check health of enhancement system.

        Returns:
            Dict[str, Any]: Health status of all components
        """
        pass
