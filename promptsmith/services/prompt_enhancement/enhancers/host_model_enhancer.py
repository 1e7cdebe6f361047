"""
Rewrite provider that uses a language model exposed by the host.
"""

import logging
from typing import List, Optional

from promptsmith.core.cancellation import CancellationToken

from ..errors import ErrorCategory, ProviderError
from ..interfaces import IHostModel, ILanguageModelHost, IPromptProvider
from ..models import ProviderSuccess
from .prompts import build_messages, clean_enhanced_text

logger = logging.getLogger(__name__)

PREFERRED_MODELS = ("auto", "gpt-4", "claude")


def select_model(models: List[IHostModel], preference: str = "auto") -> IHostModel:
    """
    Pick a host model by preference.

    Args:
        models: Non-empty list of available models
        preference: "auto", "gpt-4" or "claude"

    Returns:
        IHostModel: Chosen model; auto prefers gpt-4, then claude, then the first one

    Raises:
        ProviderError: When an explicitly preferred family is not offered
    """
    gpt4 = [model for model in models if "gpt-4" in model.family.lower()]
    claude = [model for model in models if "claude" in model.family.lower()]

    if preference == "gpt-4":
        if gpt4:
            return gpt4[0]
        raise ProviderError("GPT-4 model not available", category=ErrorCategory.MODEL_UNAVAILABLE)

    if preference == "claude":
        if claude:
            return claude[0]
        raise ProviderError("Claude model not available", category=ErrorCategory.MODEL_UNAVAILABLE)

    return (gpt4 or claude or models)[0]


class HostModelEnhancer(IPromptProvider):
    """Rewrites prompts with whatever chat model the host offers"""

    def __init__(self, host: Optional[ILanguageModelHost], preferred_model: str = "auto"):
        if preferred_model not in PREFERRED_MODELS:
            raise ValueError(f"preferred_model must be one of {', '.join(PREFERRED_MODELS)}")
        self.host = host
        self.preferred_model = preferred_model
        self.name = "host_model"

    def is_available(self) -> bool:
        return self.host is not None

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
        if self.host is None:
            raise ProviderError(
                "No language model host configured",
                provider=self.name,
                category=ErrorCategory.MODEL_UNAVAILABLE
            )

        models = await self.host.select_models()
        if not models:
            raise ProviderError(
                "No language models available",
                provider=self.name,
                category=ErrorCategory.MODEL_UNAVAILABLE
            )

        model = select_model(models, self.preferred_model)
        model_id = f"{model.vendor}/{model.family}"
        logger.debug(f"Using host model {model_id}")

        stream = model.send_request(build_messages(prompt, context), token)
        text = await stream.collect(token)

        if token.is_cancellation_requested:
            raise ProviderError("Request was cancelled", provider=self.name)

        enhanced = clean_enhanced_text(text)
        if not enhanced:
            raise ProviderError(f"Empty response from {model_id}", provider=self.name)

        # Host models do not report token usage
        return ProviderSuccess(text=enhanced, model=model_id)
