"""
Settlement Token

Write-once result cell resolving exactly one outcome for a single call.
The first write wins; later writes are counted and discarded. Writes are
accepted from any thread and delivered on the token's event loop.
"""

import asyncio
import threading
from typing import Any, Generator, Optional

from .outcome import Failure, Outcome, Success
from ..utils.logging import get_logger


logger = get_logger(__name__)


class SettlementToken:
    """
    Single-settlement result cell

    Awaiting the token returns the success value or raises the failure error.
    """

    def __init__(
        self,
        label: Optional[str] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        """
        Create a settlement token

        Args:
            label: Name of the call, used in log events
            loop: Event loop that delivers the outcome (defaults to the running loop)
        """
        self._loop = loop or asyncio.get_running_loop()
        self._future: asyncio.Future = self._loop.create_future()
        self._lock = threading.Lock()
        self._outcome: Optional[Outcome] = None
        self._discarded_writes = 0
        self.label = label

    @property
    def settled(self) -> bool:
        return self._outcome is not None

    @property
    def outcome(self) -> Optional[Outcome]:
        return self._outcome

    @property
    def discarded_writes(self) -> int:
        return self._discarded_writes

    def settle(self, outcome: Outcome) -> bool:
        """
        Write an outcome

        Args:
            outcome: Success or Failure

        Returns:
            True if this write settled the token, False if it was discarded

        Raises:
            TypeError: not an outcome, or a Failure without an exception;
                the token is left untouched
        """
        if not isinstance(outcome, (Success, Failure)):
            raise TypeError(f"Expected Success or Failure, got {type(outcome).__name__}")
        if isinstance(outcome, Failure) and not isinstance(outcome.error, BaseException):
            raise TypeError(
                f"Failure must carry an exception, got {type(outcome.error).__name__}"
            )

        with self._lock:
            if self._outcome is not None:
                self._discarded_writes += 1
                discarded = self._discarded_writes
            else:
                self._outcome = outcome
                discarded = 0

        if discarded:
            logger.debug(
                "Settlement write discarded",
                call=self.label,
                attempted=type(outcome).__name__,
                discarded_writes=discarded,
            )
            return False

        if self._on_loop_thread():
            self._deliver(outcome)
        else:
            self._loop.call_soon_threadsafe(self._deliver, outcome)
        return True

    def resolve(self, value: Any = None) -> bool:
        """Settle with a success value"""
        return self.settle(Success(value))

    def reject(self, error: BaseException) -> bool:
        """Settle with a failure"""
        return self.settle(Failure(error))

    async def wait(self) -> Any:
        """Wait for the outcome; returns the value or raises the error"""
        return await self._future

    def __await__(self) -> Generator[Any, None, Any]:
        return self._future.__await__()

    def _on_loop_thread(self) -> bool:
        try:
            return asyncio.get_running_loop() is self._loop
        except RuntimeError:
            return False

    def _deliver(self, outcome: Outcome) -> None:
        # the awaiting side may have been cancelled
        if self._future.done():
            return

        if isinstance(outcome, Success):
            self._future.set_result(outcome.value)
        else:
            self._future.set_exception(outcome.error)

    def __repr__(self) -> str:
        state = type(self._outcome).__name__ if self._outcome else "Pending"
        return f"<SettlementToken call={self.label!r} state={state}>"
