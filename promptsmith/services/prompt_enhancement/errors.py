"""
Error taxonomy for prompt enhancement.
Categorizes provider failures and turns them into actionable user messages.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class ErrorCategory(Enum):
    """Categories of enhancement failures"""
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    AUTH_FAILED = "AUTH_FAILED"
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    MODEL_UNAVAILABLE = "MODEL_UNAVAILABLE"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    UNKNOWN = "UNKNOWN"

    @property
    def is_recoverable(self) -> bool:
        """Every known category can be retried or fixed by reconfiguration"""
        return self is not ErrorCategory.UNKNOWN


@dataclass(frozen=True)
class CategorizedError:
    """Error with its category attached"""
    category: ErrorCategory
    original_message: str
    is_recoverable: bool


class PromptsmithError(Exception):
    """Base exception for the enhancement engine"""


class ProviderError(PromptsmithError):
    """
    Failure raised by a text-generation provider.

    Carries the structured signals the categorizer prefers over message text.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        provider: Optional[str] = None,
        category: Optional[ErrorCategory] = None
    ):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.provider = provider
        self.category = category


class ModelImportError(PromptsmithError):
    """Raised when a persisted vagueness model blob cannot be imported"""


class RateLimiterConfigError(PromptsmithError):
    """Raised when the shared rate limiter is re-initialized with a different configuration"""


# HTTP status codes with an unambiguous category
_STATUS_CATEGORIES = {
    401: ErrorCategory.AUTH_FAILED,
    403: ErrorCategory.PERMISSION_DENIED,
    404: ErrorCategory.MODEL_UNAVAILABLE,
    408: ErrorCategory.TIMEOUT,
    429: ErrorCategory.QUOTA_EXCEEDED,
    503: ErrorCategory.MODEL_UNAVAILABLE,
    504: ErrorCategory.TIMEOUT,
}

# Error codes reported by host language-model APIs
_PLATFORM_CODES = {
    "nopermissions": ErrorCategory.PERMISSION_DENIED,
    "blocked": ErrorCategory.PERMISSION_DENIED,
    "notfound": ErrorCategory.MODEL_UNAVAILABLE,
    "quotaexceeded": ErrorCategory.QUOTA_EXCEEDED,
    "ratelimited": ErrorCategory.QUOTA_EXCEEDED,
    "unauthorized": ErrorCategory.AUTH_FAILED,
}

# Ordered (category, markers) pairs for last-resort message matching
_MESSAGE_MARKERS = [
    (ErrorCategory.QUOTA_EXCEEDED, ("429", "rate limit", "too many requests", "quota")),
    (ErrorCategory.AUTH_FAILED, (
        "401", "unauthorized", "invalid api key", "authentication failed",
        "invalid credentials", "api key not found"
    )),
    (ErrorCategory.PERMISSION_DENIED, ("permission", "consent", "access denied", "denied")),
    (ErrorCategory.NETWORK_ERROR, (
        "econnrefused", "network", "fetch failed", "enotfound", "etimedout", "connection"
    )),
    (ErrorCategory.TIMEOUT, ("timeout", "timed out")),
    (ErrorCategory.MODEL_UNAVAILABLE, (
        "model not available", "model not found", "no language models", "not accessible"
    )),
]

_USER_MESSAGES = {
    ErrorCategory.QUOTA_EXCEEDED: (
        "The AI provider's quota has been exceeded. "
        "Wait a moment or configure CHAT_API_KEY for a fallback provider."
    ),
    ErrorCategory.AUTH_FAILED: (
        "Authentication with the AI provider failed. "
        "Check that CHAT_API_KEY holds a valid API key."
    ),
    ErrorCategory.NETWORK_ERROR: (
        "The AI provider could not be reached. "
        "Check your network connection and try again."
    ),
    ErrorCategory.TIMEOUT: (
        "The AI provider took too long to respond. "
        "Try again in a moment."
    ),
    ErrorCategory.MODEL_UNAVAILABLE: (
        "No AI model is available. "
        "Make sure a host language model is active or configure CHAT_API_KEY."
    ),
    ErrorCategory.PERMISSION_DENIED: (
        "Permission to use the AI model was denied. "
        "Grant access to the language model and try again."
    ),
    ErrorCategory.UNKNOWN: (
        "Something went wrong while enhancing the prompt. "
        "Try again, and check the server logs if the problem persists."
    ),
}


def extract_error_message(error) -> str:
    """Extract a message from an exception, string or arbitrary object"""
    if error is None:
        return "Unknown error occurred"
    if isinstance(error, BaseException):
        return str(error) or type(error).__name__
    if isinstance(error, str):
        return error
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"]
    return str(error)


def _status_code_of(error) -> Optional[int]:
    """Get an HTTP status code from an exception, if it carries one"""
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code
    status = getattr(error, "status_code", None)
    if isinstance(status, int):
        return status
    return None


def _category_for_status(status: int) -> Optional[ErrorCategory]:
    if status in _STATUS_CATEGORIES:
        return _STATUS_CATEGORIES[status]
    if status >= 500:
        return ErrorCategory.NETWORK_ERROR
    return None


def _structured_category(error) -> Optional[ErrorCategory]:
    """Classify from explicit categories, status codes, platform codes and exception types"""
    explicit = getattr(error, "category", None)
    if isinstance(explicit, ErrorCategory):
        return explicit

    status = _status_code_of(error)
    if status is not None:
        category = _category_for_status(status)
        if category is not None:
            return category

    code = getattr(error, "code", None)
    if isinstance(code, str):
        category = _PLATFORM_CODES.get(code.replace("_", "").lower())
        if category is not None:
            return category

    if isinstance(error, (httpx.TimeoutException, asyncio.TimeoutError, TimeoutError)):
        return ErrorCategory.TIMEOUT
    if isinstance(error, (httpx.NetworkError, ConnectionError)):
        return ErrorCategory.NETWORK_ERROR

    return None


def categorize_error(error) -> CategorizedError:
    """
    Categorize an error for reporting.

    Structured signals win; the message text is only matched when the
    error carries nothing else.

    Args:
        error: Exception, string or object describing the failure

    Returns:
        CategorizedError: Category, original message and recoverability
    """
    message = extract_error_message(error)
    category = _structured_category(error)

    if category is None:
        lower_message = message.lower()
        category = ErrorCategory.UNKNOWN
        for candidate, markers in _MESSAGE_MARKERS:
            if any(marker in lower_message for marker in markers):
                category = candidate
                break

    return CategorizedError(
        category=category,
        original_message=message,
        is_recoverable=category.is_recoverable
    )


def message_for_category(category: ErrorCategory) -> str:
    """User-facing sentence plus next step for a category"""
    return _USER_MESSAGES[category]


def format_user_error(error) -> str:
    """
    Format an error as one sentence plus an actionable next step.

    Provider payloads and stack traces are never included.
    """
    return message_for_category(categorize_error(error).category)


def format_rate_limit_message(seconds: int) -> str:
    """Message for a rate-limited request"""
    unit = "second" if seconds == 1 else "seconds"
    return f"Rate limit reached. Please wait {seconds} {unit} before trying again."
