"""
Continuation Bridge

Acquires a proxy from a channel, hands it to a caller-supplied body together
with a fresh SettlementToken, and waits for the token to settle.
"""

import inspect
from typing import Any, Awaitable, Callable, Optional, Union

from ..core.binding import check_interface, proxy_satisfies
from ..core.channel import Channel
from ..core.errors import CapabilityMismatch, TransportError, as_transport_error
from ..core.token import SettlementToken
from ..utils.logging import get_logger


logger = get_logger(__name__)


ContinuationBody = Callable[[Any, SettlementToken], Union[None, Awaitable[Any]]]


def call_label(body: Callable[..., Any], label: Optional[str] = None) -> Optional[str]:
    """Name a call after its body unless an explicit label is given"""
    if label:
        return label
    return getattr(body, "__qualname__", None)


async def begin_call(
    channel: Channel,
    body: ContinuationBody,
    interface: Optional[type] = None,
    *,
    label: Optional[str] = None,
) -> Any:
    """
    Begin a remote call and wait for its single outcome

    The body is invoked at most once, and only when a proxy was acquired
    without a transport error and satisfies the capability interface. The
    body settles the token, synchronously or later from any thread. If the
    body returns an awaitable it is awaited; errors it raises settle the token
    unless it was already settled. There is no timeout: a token that is never
    settled leaves the caller waiting.

    Args:
        channel: Channel to acquire the proxy from
        body: Callable receiving (proxy, token)
        interface: Capability interface; defaults to the channel's binding
        label: Call name for log events

    Returns:
        The success value

    Raises:
        TransportError: acquisition failed or the channel reported an error
        CapabilityMismatch: the proxy does not implement the interface
        CapabilityBindingError: the explicit interface cannot be checked at runtime
        Exception: whatever failure the body settled with
    """
    name = call_label(body, label)
    if interface is not None:
        check_interface(interface)
    expected = interface if interface is not None else getattr(channel, "remote_interface", None)
    token = SettlementToken(label=name)

    def on_error(error: BaseException) -> None:
        token.reject(as_transport_error(error))

    proxy = channel.acquire_proxy(on_error)

    if token.settled or proxy is None:
        if not token.settled:
            token.reject(TransportError("Channel produced no proxy", {"call": name}))
        logger.debug("Proxy acquisition failed", call=name)
        return await token

    if not proxy_satisfies(proxy, expected):
        token.reject(
            CapabilityMismatch(
                f"Proxy {type(proxy).__name__} does not implement {expected.__name__}",
                {"call": name, "interface": expected},
            )
        )
        return await token

    try:
        pending = body(proxy, token)
        if inspect.isawaitable(pending):
            await pending
    except Exception as e:
        if not token.reject(e):
            logger.debug("Body raised after settlement", call=name, error=str(e))

    return await token
