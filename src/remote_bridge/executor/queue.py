"""
Operation Queue

Ordered scheduler for concurrent and barrier operations.

Ordering rules:
- operations keep a strict submission sequence number
- a concurrent operation starts once every earlier barrier has completed
- a barrier starts once every earlier operation has completed, and nothing
  later starts until the barrier completes
- priority only reorders concurrent operations that are already eligible

Scheduler state (pending list, running set, in-flight concurrent count and
barrier flag) is mutated only under the queue lock.
"""

import asyncio
import functools
import threading
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Generator, List, Optional

from pydantic import BaseModel, ConfigDict

from ..core.errors import QueueCancelled
from ..core.outcome import Failure, Outcome, Success
from ..utils.logging import create_queue_logger


OperationBody = Callable[[], Awaitable[Any]]


def _on_loop_thread(loop: asyncio.AbstractEventLoop) -> bool:
    try:
        return asyncio.get_running_loop() is loop
    except RuntimeError:
        return False


class OperationState(str, Enum):
    """Queued operation state"""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Operation(BaseModel):
    """
    Queued unit of work

    Created on enqueue; the future carries the result to the caller.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    sequence: int
    priority: int = 0
    barrier: bool = False
    body: Callable[[], Any]
    future: asyncio.Future
    state: OperationState = OperationState.PENDING
    task: Optional[asyncio.Task] = None


class OperationHandle:
    """
    Caller-side view of a queued operation

    Awaiting the handle returns the operation's value or raises its error.
    Cancelling a caller that awaits the handle does not cancel the operation.
    """

    def __init__(self, queue: "OperationQueue", operation: Operation):
        self._queue = queue
        self._operation = operation

    @property
    def sequence(self) -> int:
        return self._operation.sequence

    @property
    def priority(self) -> int:
        return self._operation.priority

    @property
    def barrier(self) -> bool:
        return self._operation.barrier

    @property
    def state(self) -> OperationState:
        return self._operation.state

    def done(self) -> bool:
        return self._operation.future.done()

    def cancel(self) -> bool:
        """
        Cancel the operation

        A pending operation is removed and resolves with QueueCancelled
        without its body ever running. A running operation receives a
        cooperative cancellation; the effect depends on the body.

        Safe to call from any thread. Off the event loop thread the request
        is handed to the loop and applied there.

        Returns:
            False if the operation had already finished
        """
        return self._queue._cancel(self._operation)

    def exception(self) -> Optional[BaseException]:
        """The operation's failure, or None; only valid once done()"""
        return self._operation.future.exception()

    def add_done_callback(self, fn: Callable[["OperationHandle"], None]) -> None:
        self._operation.future.add_done_callback(lambda _: fn(self))

    async def result(self) -> Any:
        return await asyncio.shield(self._operation.future)

    def __await__(self) -> Generator[Any, None, Any]:
        return self.result().__await__()

    def __repr__(self) -> str:
        kind = "barrier" if self.barrier else "concurrent"
        return f"<OperationHandle #{self.sequence} {kind} {self.state.value}>"


class OperationQueue:
    """
    Barrier-capable async operation queue

    Operations are added and scheduled on the event loop thread that runs
    them. Cancellation may be requested from any thread.
    """

    def __init__(self, max_concurrent: Optional[int] = None, name: str = "remote"):
        """
        Create an operation queue

        Args:
            max_concurrent: Cap on concurrently running operations (None is unbounded)
            name: Queue name for log events
        """
        if max_concurrent is not None and max_concurrent <= 0:
            raise ValueError("max_concurrent must be positive or None")

        self.name = name
        self.max_concurrent = max_concurrent
        self._lock = threading.RLock()
        self._pending: List[Operation] = []
        self._running: Dict[int, Operation] = {}
        self._running_concurrent = 0
        self._barrier_active = False
        self._sequence = 0
        self._idle_waiters: List[asyncio.Future] = []
        self._logger = create_queue_logger(name)

    @classmethod
    def from_config(cls, config: Any) -> "OperationQueue":
        """Build a queue from a BridgeConfig"""
        return cls(max_concurrent=config.max_concurrent_operations, name=config.queue_name)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def running_count(self) -> int:
        return len(self._running)

    @property
    def barrier_active(self) -> bool:
        return self._barrier_active

    def add_operation(
        self,
        body: OperationBody,
        *,
        priority: Optional[int] = None,
        barrier: bool = False,
    ) -> OperationHandle:
        """
        Enqueue an operation

        Args:
            body: Coroutine function producing the operation's result
            priority: Higher starts first among eligible concurrent operations
            barrier: Run in isolation, ordered against all other operations

        Returns:
            Handle to await or cancel the operation
        """
        loop = asyncio.get_running_loop()

        with self._lock:
            self._sequence += 1
            operation = Operation(
                sequence=self._sequence,
                priority=priority or 0,
                barrier=barrier,
                body=body,
                future=loop.create_future(),
            )
            self._pending.append(operation)
            self._logger.debug(
                "Operation enqueued",
                sequence=operation.sequence,
                barrier=barrier,
                priority=operation.priority,
            )
            self._schedule()

        return OperationHandle(self, operation)

    def cancel_all(self) -> int:
        """
        Cancel every pending operation

        Returns:
            Number of operations cancelled
        """
        with self._lock:
            pending = list(self._pending)
        return sum(1 for operation in pending if self._cancel(operation))

    async def join(self) -> None:
        """Wait until no operation is pending or running"""
        with self._lock:
            if self._is_idle():
                return
            waiter = asyncio.get_running_loop().create_future()
            self._idle_waiters.append(waiter)
        await waiter

    def _is_idle(self) -> bool:
        return not self._pending and not self._running

    def _schedule(self) -> None:
        """Start every operation that is eligible; caller holds the lock"""
        if self._barrier_active:
            return

        # concurrent operations ahead of the first pending barrier
        eligible: List[Operation] = []
        for operation in self._pending:
            if operation.barrier:
                break
            eligible.append(operation)

        if eligible:
            eligible.sort(key=lambda op: (-op.priority, op.sequence))
            if self.max_concurrent is None:
                capacity = len(eligible)
            else:
                capacity = self.max_concurrent - self._running_concurrent
            for operation in eligible[: max(capacity, 0)]:
                self._start(operation)
            return

        if self._pending and not self._running:
            self._start(self._pending[0])

    def _start(self, operation: Operation) -> None:
        self._pending.remove(operation)
        operation.state = OperationState.RUNNING
        self._running[operation.sequence] = operation
        if operation.barrier:
            self._barrier_active = True
        else:
            self._running_concurrent += 1

        self._logger.debug(
            "Operation started", sequence=operation.sequence, barrier=operation.barrier
        )
        task = operation.future.get_loop().create_task(self._run(operation))
        task.add_done_callback(functools.partial(self._on_task_done, operation))
        operation.task = task

    def _running_cancelled(self, operation: Operation) -> QueueCancelled:
        return QueueCancelled(
            f"Operation {operation.sequence} cancelled while running",
            {"sequence": operation.sequence, "queue": self.name},
        )

    async def _run(self, operation: Operation) -> Outcome:
        try:
            return Success(await operation.body())
        except asyncio.CancelledError:
            return Failure(self._running_cancelled(operation))
        except Exception as e:
            return Failure(e)

    def _on_task_done(self, operation: Operation, task: asyncio.Task) -> None:
        # a task cancelled before its first step never enters _run
        if task.cancelled():
            outcome: Outcome = Failure(self._running_cancelled(operation))
        elif task.exception() is not None:
            outcome = Failure(task.exception())
        else:
            outcome = task.result()
        self._finish(operation, outcome)

    def _finish(self, operation: Operation, outcome: Outcome) -> None:
        cancelled = isinstance(outcome, Failure) and isinstance(outcome.error, QueueCancelled)

        with self._lock:
            del self._running[operation.sequence]
            if operation.barrier:
                self._barrier_active = False
            else:
                self._running_concurrent -= 1
            operation.state = OperationState.CANCELLED if cancelled else OperationState.COMPLETED

            self._logger.debug(
                "Operation finished",
                sequence=operation.sequence,
                state=operation.state.value,
                success=isinstance(outcome, Success),
            )

            self._deliver(operation, outcome)
            self._schedule()
            waiters = self._take_idle_waiters()

        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(None)

    def _deliver(self, operation: Operation, outcome: Outcome) -> None:
        future = operation.future
        if future.done():
            return
        if isinstance(outcome, Success):
            future.set_result(outcome.value)
        else:
            future.set_exception(outcome.error)

    def _take_idle_waiters(self) -> List[asyncio.Future]:
        if not self._is_idle():
            return []
        waiters, self._idle_waiters = self._idle_waiters, []
        return waiters

    def _cancel(self, operation: Operation) -> bool:
        loop = operation.future.get_loop()
        if not _on_loop_thread(loop):
            # scheduler state is only touched on the loop thread
            if operation.future.done():
                return False
            loop.call_soon_threadsafe(self._cancel, operation)
            return True

        with self._lock:
            if operation.state is OperationState.PENDING:
                self._pending.remove(operation)
                operation.state = OperationState.CANCELLED
                self._logger.debug("Pending operation cancelled", sequence=operation.sequence)
                self._deliver(
                    operation,
                    Failure(
                        QueueCancelled(
                            f"Operation {operation.sequence} cancelled before it started",
                            {"sequence": operation.sequence, "queue": self.name},
                        )
                    ),
                )
                # a removed barrier may unblock later operations
                self._schedule()
                waiters = self._take_idle_waiters()
                task = None
            elif operation.state is OperationState.RUNNING:
                waiters = []
                task = operation.task
            else:
                return False

        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(None)

        if task is not None:
            self._logger.debug("Running operation signalled", sequence=operation.sequence)
            task.cancel()
        return True

    def __repr__(self) -> str:
        return (
            f"<OperationQueue name={self.name!r} pending={self.pending_count} "
            f"running={self.running_count} barrier_active={self._barrier_active}>"
        )
