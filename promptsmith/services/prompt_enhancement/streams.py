"""
Restartable lazy sequence of streamed text fragments.
"""

from typing import AsyncIterator, Callable, Iterable, Optional

from promptsmith.core.cancellation import CancellationToken


class TextStream:
    """
    Finite stream of text chunks.

    Each iteration calls the factory again, so the stream can be consumed
    more than once.
    """

    def __init__(self, factory: Callable[[], AsyncIterator[str]]):
        self._factory = factory

    @classmethod
    def from_chunks(cls, chunks: Iterable[str]) -> "TextStream":
        """Stream over an in-memory list of chunks"""
        items = list(chunks)

        async def generate():
            for item in items:
                yield item

        return cls(generate)

    def __aiter__(self) -> AsyncIterator[str]:
        return self._factory()

    async def collect(self, token: Optional[CancellationToken] = None) -> str:
        """Accumulate all chunks, stopping early once cancellation is requested"""
        parts = []
        async for chunk in self:
            if token is not None and token.is_cancellation_requested:
                break
            parts.append(chunk)
        return "".join(parts)
