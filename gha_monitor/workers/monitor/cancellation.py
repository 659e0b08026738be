"""Cooperative cancellation for the poll loop."""

import asyncio


class CancellationToken:
    """Stop flag shared between the signal handler and the poll task.

    The walker checks ``cancelled`` before every page fetch and every entity,
    and the loop sleeps through ``sleep`` so a stop request ends the wait
    between cycles immediately.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        """Request a stop."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def sleep(self, seconds: float) -> bool:
        """Wait for ``seconds`` or until cancelled.

        Returns:
            True if cancellation was requested
        """
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except TimeoutError:
            pass
        return self.cancelled
