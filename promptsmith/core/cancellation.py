"""
Cooperative cancellation handle passed through every awaited call.
"""

import asyncio


class CancellationToken:
    """
    Host-owned cancellation signal.

    Work checks `is_cancellation_requested` at its checkpoints and may
    race long awaits against `wait()`.
    """

    def __init__(self):
        self._event = asyncio.Event()

    @property
    def is_cancellation_requested(self) -> bool:
        return self._event.is_set()

    def cancel(self):
        """Signal cancellation; idempotent"""
        self._event.set()

    async def wait(self):
        """Block until cancellation is requested"""
        await self._event.wait()
