"""
Core data models for prompt enhancement system.
Provides type safety and clear contracts.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any, Tuple

from .errors import ErrorCategory


class IssueType(Enum):
    """Kinds of vagueness detected in a prompt"""
    VAGUE_VERB = "VAGUE_VERB"
    MISSING_CONTEXT = "MISSING_CONTEXT"
    UNCLEAR_SCOPE = "UNCLEAR_SCOPE"


class IssueSeverity(Enum):
    """Issue severity levels"""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class AnalysisSource(Enum):
    """Which scorer produced a vagueness score"""
    RULES = "rules"
    ML = "ml"
    HYBRID = "hybrid"


@dataclass(frozen=True)
class VaguenessIssue:
    """Single vagueness issue with a human-readable explanation"""
    type: IssueType
    severity: IssueSeverity
    description: str
    suggestion: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses"""
        return {
            "type": self.type.value,
            "severity": self.severity.value,
            "description": self.description,
            "suggestion": self.suggestion
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Vagueness analysis of a prompt"""
    score: int  # 0-100, higher = more vague
    issues: Tuple[VaguenessIssue, ...]
    source: AnalysisSource
    confidence: float
    has_vague_verb: bool
    has_missing_context: bool
    has_unclear_scope: bool
    specificity_score: int = 0
    is_vague: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses"""
        return {
            "score": self.score,
            "is_vague": self.is_vague,
            "source": self.source.value,
            "confidence": self.confidence,
            "issues": [issue.to_dict() for issue in self.issues],
            "has_vague_verb": self.has_vague_verb,
            "has_missing_context": self.has_missing_context,
            "has_unclear_scope": self.has_unclear_scope,
            "specificity_score": self.specificity_score
        }


@dataclass(frozen=True)
class ImprovementBreakdown:
    """Which quality dimensions a rewrite measurably improved"""
    added_specificity: bool = False
    made_actionable: bool = False
    addressed_issues: bool = False
    stayed_on_topic: bool = False

    @property
    def count(self) -> int:
        """Number of improved dimensions"""
        return sum([
            self.added_specificity,
            self.made_actionable,
            self.addressed_issues,
            self.stayed_on_topic
        ])

    def to_dict(self) -> Dict[str, bool]:
        """Convert to dictionary for API responses"""
        return {
            "added_specificity": self.added_specificity,
            "made_actionable": self.made_actionable,
            "addressed_issues": self.addressed_issues,
            "stayed_on_topic": self.stayed_on_topic
        }


@dataclass(frozen=True)
class QualityScores:
    """Raw 0-1 scores behind an improvement breakdown"""
    specificity_gain: float = 0.0
    actionability: float = 0.0
    issue_coverage: float = 0.0
    relevance: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {
            "specificity_gain": self.specificity_gain,
            "actionability": self.actionability,
            "issue_coverage": self.issue_coverage,
            "relevance": self.relevance
        }


@dataclass(frozen=True)
class QualityResult:
    """Outcome of comparing an original prompt with its rewrite"""
    improvements: ImprovementBreakdown
    scores: QualityScores
    confidence: float


@dataclass(frozen=True)
class RewriteResult:
    """An enhanced prompt together with what was improved"""
    original: str
    enhanced: str
    model: str
    improvements: ImprovementBreakdown
    confidence: float = 0.0
    tokens_used: Optional[int] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def was_enhanced(self) -> bool:
        """Check if prompt was actually changed"""
        return self.enhanced != self.original

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses"""
        return {
            "original": self.original,
            "enhanced": self.enhanced,
            "model": self.model,
            "tokens_used": self.tokens_used,
            "improvements": self.improvements.to_dict(),
            "confidence": self.confidence,
            "was_enhanced": self.was_enhanced,
            "timestamp": self.timestamp.isoformat()
        }


@dataclass(frozen=True)
class ProviderSuccess:
    """Provider produced an enhanced prompt"""
    text: str
    model: str
    tokens_used: Optional[int] = None


@dataclass(frozen=True)
class ProviderFailure:
    """Provider attempt failed; the orchestrator may try the next one"""
    provider: str
    category: ErrorCategory
    message: str


class WorkflowStatus(Enum):
    """Terminal outcome of one orchestration call"""
    SKIPPED = "skipped"
    SUCCESS = "success"
    ERROR = "error"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class WorkflowResult:
    """
    Outcome of Orchestrator.process_prompt.

    Build instances through the classmethods so that exactly one outcome
    shape is populated.
    """
    status: WorkflowStatus
    analysis: Optional[AnalysisResult] = None
    rewrite: Optional[RewriteResult] = None
    cached: bool = False
    error: Optional[str] = None
    category: Optional[ErrorCategory] = None
    retry_after_seconds: Optional[int] = None

    @classmethod
    def skipped_result(cls, analysis: AnalysisResult) -> "WorkflowResult":
        return cls(status=WorkflowStatus.SKIPPED, analysis=analysis)

    @classmethod
    def succeeded(
        cls,
        rewrite: RewriteResult,
        analysis: Optional[AnalysisResult] = None,
        cached: bool = False
    ) -> "WorkflowResult":
        return cls(status=WorkflowStatus.SUCCESS, analysis=analysis, rewrite=rewrite, cached=cached)

    @classmethod
    def failed(
        cls,
        error: str,
        category: ErrorCategory,
        analysis: Optional[AnalysisResult] = None,
        retry_after_seconds: Optional[int] = None
    ) -> "WorkflowResult":
        return cls(
            status=WorkflowStatus.ERROR,
            analysis=analysis,
            error=error,
            category=category,
            retry_after_seconds=retry_after_seconds
        )

    @classmethod
    def cancelled(cls, analysis: Optional[AnalysisResult] = None) -> "WorkflowResult":
        return cls(status=WorkflowStatus.CANCELLED, analysis=analysis, error="Request was cancelled.")

    @property
    def skipped(self) -> bool:
        return self.status == WorkflowStatus.SKIPPED

    @property
    def success(self) -> bool:
        return self.status == WorkflowStatus.SUCCESS

    @property
    def is_error(self) -> bool:
        return self.status == WorkflowStatus.ERROR

    @property
    def is_cancelled(self) -> bool:
        return self.status == WorkflowStatus.CANCELLED

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses"""
        return {
            "status": self.status.value,
            "skipped": self.skipped,
            "success": self.success,
            "cached": self.cached,
            "analysis": self.analysis.to_dict() if self.analysis else None,
            "rewrite": self.rewrite.to_dict() if self.rewrite else None,
            "error": self.error,
            "category": self.category.value if self.category else None,
            "retry_after_seconds": self.retry_after_seconds
        }


class OrchestratorState(Enum):
    """Steps of a single orchestration call"""
    IDLE = "idle"
    CACHE_CHECK = "cache-check"
    THRESHOLD_CHECK = "threshold-check"
    RATE_LIMIT_CHECK = "rate-limit-check"
    CONTEXT_COLLECT = "context-collect"
    PROVIDER_ATTEMPT = "provider-attempt"
    DONE = "done"
    ERROR = "error"
    CANCELLED = "cancelled"


@dataclass
class EnhancementMetrics:
    """Metrics for monitoring enhancement performance"""
    total_requests: int = 0
    skipped: int = 0
    successful_enhancements: int = 0
    cache_hits: int = 0
    rate_limited: int = 0
    errors: int = 0
    cancellations: int = 0
    provider_fallbacks: int = 0
    average_processing_time: float = 0.0
    average_confidence: float = 0.0

    @property
    def success_rate(self) -> float:
        """Calculate success rate"""
        if self.total_requests == 0:
            return 0.0
        return self.successful_enhancements / self.total_requests

    @property
    def cache_hit_rate(self) -> float:
        """Calculate cache hit rate"""
        if self.total_requests == 0:
            return 0.0
        return self.cache_hits / self.total_requests

    def update(self, result: WorkflowResult, processing_time_ms: float):
        """Update metrics with new result"""
        self.total_requests += 1

        if result.skipped:
            self.skipped += 1
        elif result.is_cancelled:
            self.cancellations += 1
        elif result.is_error:
            self.errors += 1
            if result.retry_after_seconds is not None:
                self.rate_limited += 1
        elif result.success:
            self.successful_enhancements += 1
            if result.cached:
                self.cache_hits += 1
            # Running average over successful rewrites only
            self.average_confidence = (
                (self.average_confidence * (self.successful_enhancements - 1) + result.rewrite.confidence)
                / self.successful_enhancements
            )

        # Update running averages
        self.average_processing_time = (
            (self.average_processing_time * (self.total_requests - 1) + processing_time_ms)
            / self.total_requests
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses"""
        return {
            "total_requests": self.total_requests,
            "skipped": self.skipped,
            "successful_enhancements": self.successful_enhancements,
            "cache_hits": self.cache_hits,
            "rate_limited": self.rate_limited,
            "errors": self.errors,
            "cancellations": self.cancellations,
            "provider_fallbacks": self.provider_fallbacks,
            "success_rate": self.success_rate,
            "cache_hit_rate": self.cache_hit_rate,
            "average_processing_time": self.average_processing_time,
            "average_confidence": self.average_confidence
        }
