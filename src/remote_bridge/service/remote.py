"""
Service Handle

A channel bound once to a capability interface, exposing the result
adapters without a queue.
"""

from typing import Any, Callable, Optional

from ..bridge import adapters
from ..bridge.decoding import Decoder
from ..core.binding import CapabilityBinding
from ..core.channel import Channel
from ..core.token import SettlementToken


class RemoteService:
    """
    Remote service bound to one capability interface

    The binding is checked at construction: a channel already bound to a
    different interface raises CapabilityBindingError. Omitting the interface
    adopts whatever the channel is already bound to.
    """

    def __init__(self, channel: Channel, interface: Optional[type] = None):
        self._binding = CapabilityBinding.create(channel, interface)

    @property
    def channel(self) -> Channel:
        return self._binding.channel

    @property
    def interface(self) -> Optional[type]:
        return self._binding.interface

    def invalidate(self) -> None:
        """
        Invalidate the underlying channel

        Calls in flight are not cancelled here; each fails on its own through
        the channel's error hook.
        """
        self.channel.invalidate()

    async def with_continuation(
        self,
        body: Callable[[Any, SettlementToken], Any],
        *,
        label: Optional[str] = None,
    ) -> Any:
        return await adapters.with_continuation(self.channel, body, self.interface, label=label)

    async def with_service(
        self, body: Callable[[Any], Any], *, label: Optional[str] = None
    ) -> Any:
        return await adapters.with_service(self.channel, body, self.interface, label=label)

    async def with_error_completion(
        self,
        body: Callable[[Any, adapters.ErrorHandler], Any],
        *,
        label: Optional[str] = None,
    ) -> None:
        await adapters.with_error_completion(self.channel, body, self.interface, label=label)

    async def with_value_error_completion(
        self,
        body: Callable[[Any, adapters.ValueErrorHandler], Any],
        *,
        label: Optional[str] = None,
    ) -> Any:
        return await adapters.with_value_error_completion(
            self.channel, body, self.interface, label=label
        )

    async def with_result_completion(
        self,
        body: Callable[[Any, adapters.ResultHandler], Any],
        *,
        label: Optional[str] = None,
    ) -> Any:
        return await adapters.with_result_completion(
            self.channel, body, self.interface, label=label
        )

    async def with_decoding_completion(
        self,
        body: Callable[[Any, adapters.ValueErrorHandler], Any],
        value_type: Any = Any,
        decoder: Optional[Decoder] = None,
        *,
        label: Optional[str] = None,
    ) -> Any:
        return await adapters.with_decoding_completion(
            self.channel, body, value_type, decoder, self.interface, label=label
        )

    def __repr__(self) -> str:
        interface = self.interface.__name__ if self.interface else None
        return f"<RemoteService interface={interface} channel={self.channel!r}>"
