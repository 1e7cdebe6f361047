"""
Prompt Enhancement System

Scores prompts for vagueness and rewrites the vague ones through one or
more text-generation providers, with workspace context, caching, rate
limiting, provider fallback and cancellation.

Main Components:
- EnhancementService: High-level service interface (factory module)
- PromptOrchestrator: Main coordination logic
- ContextAggregator: Tiered workspace context
- QualityAnalyzer: Measures what a rewrite improved
- RateLimiter / ResultCache: Shared admission control and caching

Usage:
    from promptsmith.config.settings import settings
    from promptsmith.services.prompt_enhancement.factory import EnhancementService

    service = EnhancementService(settings)
    result = await service.process_prompt("fix it")
    print(result["status"])
"""

from .errors import ErrorCategory, ProviderError, PromptsmithError
from .models import (
    AnalysisResult,
    AnalysisSource,
    RewriteResult,
    WorkflowResult,
    WorkflowStatus
)

# Main exports
__all__ = [
    "AnalysisResult",
    "AnalysisSource",
    "RewriteResult",
    "WorkflowResult",
    "WorkflowStatus",
    "ErrorCategory",
    "ProviderError",
    "PromptsmithError"
]
