"""
Queued Remote Service

Composes a channel provider with an OperationQueue. Every queued call runs
inside its own operation: it first asks the provider for a channel, so a
provider failure becomes that operation's failure, then runs the matching
result adapter on a fresh bridge call.
"""

from typing import Any, Awaitable, Callable, Optional

from .remote import RemoteService
from ..bridge import adapters
from ..bridge.decoding import Decoder
from ..core.binding import CapabilityBinding
from ..core.channel import Channel
from ..executor.queue import OperationHandle, OperationQueue
from ..utils.logging import get_logger, log_operation_failure


ChannelProvider = Callable[[], Awaitable[Channel]]


class QueuedRemoteService:
    """
    Remote service whose calls go through an operation queue

    Exactly one of ``provider`` or ``channel`` must be given. The provider is
    awaited once per operation and its result is never cached.
    """

    def __init__(
        self,
        queue: OperationQueue,
        provider: Optional[ChannelProvider] = None,
        *,
        channel: Optional[Channel] = None,
        interface: Optional[type] = None,
        default_barrier: bool = False,
    ):
        if (provider is None) == (channel is None):
            raise ValueError("Provide exactly one of provider or channel")

        if channel is not None:
            CapabilityBinding.create(channel, interface)
            fixed = channel

            async def provider() -> Channel:
                return fixed

        self.queue = queue
        self.interface = interface
        self.default_barrier = default_barrier
        self._provider = provider
        self._logger = get_logger(__name__).bind(queue=queue.name)

    @classmethod
    def from_config(
        cls,
        config: Any,
        provider: Optional[ChannelProvider] = None,
        *,
        channel: Optional[Channel] = None,
        interface: Optional[type] = None,
    ) -> "QueuedRemoteService":
        """Build a service and its queue from a BridgeConfig"""
        return cls(
            OperationQueue.from_config(config),
            provider,
            channel=channel,
            interface=interface,
            default_barrier=config.default_barrier,
        )

    async def _remote(self) -> RemoteService:
        channel = await self._provider()
        return RemoteService(channel, self.interface)

    def _enqueue(
        self,
        operation: Callable[[], Awaitable[Any]],
        barrier: Optional[bool],
        priority: Optional[int],
    ) -> OperationHandle:
        if barrier is None:
            barrier = self.default_barrier
        return self.queue.add_operation(operation, priority=priority, barrier=barrier)

    def _log_failure(self, handle: OperationHandle) -> None:
        error = handle.exception()
        if error is not None:
            log_operation_failure(self._logger, handle.sequence, error, handle.barrier)

    def add_operation(
        self,
        body: Callable[[Any], Any],
        *,
        barrier: Optional[bool] = None,
        priority: Optional[int] = None,
    ) -> OperationHandle:
        """
        Queue a value-or-throw call without waiting for it

        Failures are logged. The returned handle may still be awaited.
        """

        async def operation() -> Any:
            remote = await self._remote()
            return await remote.with_service(body)

        handle = self._enqueue(operation, barrier, priority)
        handle.add_done_callback(self._log_failure)
        return handle

    async def add_result_operation(
        self,
        body: Callable[[Any, adapters.ResultHandler], Any],
        *,
        barrier: Optional[bool] = None,
        priority: Optional[int] = None,
    ) -> Any:
        """Queue a call whose completion handler receives Success or Failure"""

        async def operation() -> Any:
            remote = await self._remote()
            return await remote.with_result_completion(body)

        return await self._enqueue(operation, barrier, priority)

    async def add_error_operation(
        self,
        body: Callable[[Any, adapters.ErrorHandler], Any],
        *,
        barrier: Optional[bool] = None,
        priority: Optional[int] = None,
    ) -> None:
        """Queue a call whose completion handler receives an optional error"""

        async def operation() -> None:
            remote = await self._remote()
            await remote.with_error_completion(body)

        await self._enqueue(operation, barrier, priority)

    def add_discarding_error_operation(
        self,
        body: Callable[[Any, adapters.ErrorHandler], Any],
        *,
        barrier: Optional[bool] = None,
        priority: Optional[int] = None,
    ) -> OperationHandle:
        """Queue an error-completion call without waiting; failures are logged"""

        async def operation() -> None:
            remote = await self._remote()
            await remote.with_error_completion(body)

        handle = self._enqueue(operation, barrier, priority)
        handle.add_done_callback(self._log_failure)
        return handle

    async def add_value_error_operation(
        self,
        body: Callable[[Any, adapters.ValueErrorHandler], Any],
        *,
        barrier: Optional[bool] = None,
        priority: Optional[int] = None,
    ) -> Any:
        """Queue a call whose completion handler receives a (value, error) pair"""

        async def operation() -> Any:
            remote = await self._remote()
            return await remote.with_value_error_completion(body)

        return await self._enqueue(operation, barrier, priority)

    async def add_decoding_operation(
        self,
        body: Callable[[Any, adapters.ValueErrorHandler], Any],
        value_type: Any = Any,
        decoder: Optional[Decoder] = None,
        *,
        barrier: Optional[bool] = None,
        priority: Optional[int] = None,
    ) -> Any:
        """Queue a call delivering a (data, error) pair, decoded on success"""

        async def operation() -> Any:
            remote = await self._remote()
            return await remote.with_decoding_completion(body, value_type, decoder)

        return await self._enqueue(operation, barrier, priority)
