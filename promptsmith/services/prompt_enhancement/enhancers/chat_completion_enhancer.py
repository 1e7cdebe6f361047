"""
Rewrite provider backed by an OpenAI-compatible chat completion endpoint.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from promptsmith.core.cancellation import CancellationToken

from ..errors import ErrorCategory, ProviderError
from ..interfaces import IPromptProvider
from ..models import ProviderSuccess
from .prompts import build_messages, clean_enhanced_text

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.groq.com/openai/v1/chat/completions"
DEFAULT_MODEL = "llama-3.3-70b-versatile"
DEFAULT_MAX_TOKENS = 1000
DEFAULT_TEMPERATURE = 0.7
DEFAULT_TIMEOUT_SECONDS = 30.0


class ChatCompletionEnhancer(IPromptProvider):
    """
    Rewrites prompts through a remote chat completion API.

    The endpoint must accept `{model, messages, max_tokens, temperature}`
    and answer with `choices[0].message.content`.
    """

    def __init__(
        self,
        api_key: Optional[str],
        api_url: str = DEFAULT_API_URL,
        model: str = DEFAULT_MODEL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize chat completion enhancer.

        Args:
            api_key: Bearer token; the provider is unavailable without one
            api_url: Chat completion endpoint
            model: Model identifier sent with each request
            max_tokens: Completion token limit
            temperature: Sampling temperature
            timeout: Request timeout in seconds
            client: Optional shared HTTP client, owned by the caller
        """
        self.api_key = (api_key or "").strip()
        self.api_url = api_url
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout
        self._client = client
        self.name = "chat_completion"

    def is_available(self) -> bool:
        return bool(self.api_key)

    def get_name(self) -> str:
        return self.name

    async def enhance(
        self,
        prompt: str,
        context: str,
        token: CancellationToken
    ) -> ProviderSuccess:
        if not prompt or not prompt.strip():
            raise ProviderError("Prompt cannot be empty", provider=self.name, category=ErrorCategory.UNKNOWN)
        if not self.is_available():
            raise ProviderError(
                "Chat API key is not configured",
                provider=self.name,
                category=ErrorCategory.AUTH_FAILED
            )

        payload = {
            "model": self.model,
            "messages": build_messages(prompt, context),
            "max_tokens": self.max_tokens,
            "temperature": self.temperature
        }
        data = await self._post(payload)

        if token.is_cancellation_requested:
            raise ProviderError("Request was cancelled", provider=self.name)

        enhanced = self._extract_content(data)
        usage = data.get("usage") or {}
        logger.info(f"Chat completion rewrite via {self.model}: {len(prompt)} -> {len(enhanced)} chars")

        return ProviderSuccess(
            text=enhanced,
            model=self.model,
            tokens_used=usage.get("total_tokens")
        )

    async def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

        try:
            if self._client is not None:
                response = await self._client.post(
                    self.api_url, json=payload, headers=headers, timeout=self.timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.api_url, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            raise ProviderError(
                f"Chat API request timed out after {self.timeout:g} seconds",
                provider=self.name,
                category=ErrorCategory.TIMEOUT
            ) from e

        if response.status_code != 200:
            message = self._error_message(response)
            logger.error(f"Chat API error: {response.status_code} - {message}")
            raise ProviderError(
                f"Chat API error: {message}",
                status_code=response.status_code,
                provider=self.name
            )

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError("Chat API returned invalid JSON", provider=self.name) from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.reason_phrase or f"HTTP {response.status_code}"
        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        return f"HTTP {response.status_code}"

    def _extract_content(self, data: Dict[str, Any]) -> str:
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            content = None

        if not content:
            raise ProviderError("No content in chat API response", provider=self.name)

        return clean_enhanced_text(content)
