"""
Tiered context aggregator.
Collects basic, structural and (with consent) semantic context for a prompt.
"""

import logging
from typing import Optional

from promptsmith.core.cancellation import CancellationToken

from ..interfaces import IWorkspaceHost
from .basic import detect_basic_context, format_tier1
from .models import TieredContext, TiersUsed
from .semantic import extract_semantic_context, format_tier3, SUPPORTED_LANGUAGES
from .structural import extract_structural_context, format_tier2

logger = logging.getLogger(__name__)

TIER_SEPARATOR = "\n\n"
TRUNCATION_MARKER = "\n..."


def truncate_context(formatted: str, max_length: Optional[int]) -> str:
    """
    Trim formatted context to whole lines.

    Args:
        formatted: Joined context text
        max_length: Character budget, None or 0 for unlimited

    Returns:
        str: Text within budget followed by a truncation marker, or the input unchanged
    """
    if not max_length or len(formatted) <= max_length:
        return formatted

    result = ""
    for line in formatted.split("\n"):
        if len(result) + len(line) + 1 > max_length:
            break
        result = f"{result}\n{line}" if result else line
    return result + TRUNCATION_MARKER


def has_context(context: TieredContext) -> bool:
    used = context.tiers_used
    return used.basic or used.structural or used.semantic


def get_context_summary(context: TieredContext) -> str:
    used = context.tiers_used
    tiers = [
        name for name, flag in (
            ("basic", used.basic),
            ("structural", used.structural),
            ("semantic", used.semantic),
        ) if flag
    ]
    if not tiers:
        return "No context available"
    return f"Context from {len(tiers)} tier(s): {', '.join(tiers)}"


class ContextAggregator:
    """Context detection over a workspace host"""

    def __init__(self, host: IWorkspaceHost, max_length: Optional[int] = None):
        """
        Initialize aggregator.

        Args:
            host: Workspace host supplying editor state and files
            max_length: Default character budget for formatted context
        """
        self.host = host
        self.max_length = max_length

    def _build(self, basic=None, structural=None, semantic=None, max_length=None) -> TieredContext:
        sections = [format_tier1(basic), format_tier2(structural), format_tier3(semantic)]
        formatted = TIER_SEPARATOR.join(section for section in sections if section)
        return TieredContext(
            basic=basic,
            structural=structural,
            semantic=semantic,
            formatted=truncate_context(formatted, max_length),
            tiers_used=TiersUsed(
                basic=basic is not None,
                structural=structural is not None,
                semantic=semantic is not None
            )
        )

    async def detect(
        self,
        token: Optional[CancellationToken] = None,
        skip_structural: bool = False,
        skip_semantic: bool = False,
        max_length: Optional[int] = None
    ) -> TieredContext:
        """
        Collect context tier by tier, stopping early on cancellation.

        Args:
            token: Optional cancellation handle, checked before each tier
            skip_structural: Skip the directory scan
            skip_semantic: Skip reading the active file
            max_length: Character budget, overrides the aggregator default

        Returns:
            TieredContext: Whatever tiers completed before cancellation
        """
        budget = max_length if max_length is not None else self.max_length

        def cancelled() -> bool:
            return token is not None and token.is_cancellation_requested

        if cancelled():
            return TieredContext()

        # A failing tier is dropped; the others still reach the provider
        try:
            files = await self.host.list_workspace_files()
        except Exception as e:
            logger.error(f"Workspace listing failed: {e}", exc_info=True)
            files = []

        basic = None
        try:
            basic = await detect_basic_context(self.host, files)
        except Exception as e:
            logger.error(f"Basic context detection failed: {e}", exc_info=True)

        if cancelled():
            return self._build(basic, max_length=budget)

        structural = None
        if not skip_structural:
            try:
                structural = extract_structural_context(files)
            except Exception as e:
                logger.error(f"Structural context extraction failed: {e}", exc_info=True)

        if cancelled():
            return self._build(basic, structural, max_length=budget)

        semantic = None
        if not skip_semantic and self.host.has_semantic_consent():
            try:
                semantic = await self._detect_semantic(basic, token)
            except Exception as e:
                logger.error(f"Semantic context extraction failed: {e}", exc_info=True)

        context = self._build(basic, structural, semantic, max_length=budget)
        logger.debug(get_context_summary(context))
        return context

    async def _detect_semantic(self, basic, token: Optional[CancellationToken]):
        document = self.host.active_document()
        if document is None or document.language_id not in SUPPORTED_LANGUAGES:
            return None

        content = None
        if basic is not None and basic.relative_path and self.host.workspace_root():
            content = await self.host.read_file(basic.relative_path)
        return extract_semantic_context(document, content, token)
