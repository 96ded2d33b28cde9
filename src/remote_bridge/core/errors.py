"""
remote-bridge Exception Definitions

Runtime error kinds surfaced as the single failure outcome of a bridged call,
plus the precondition error raised on an invalid capability binding.
"""

from typing import Any, Dict, Optional


class RemoteBridgeError(Exception):
    """remote-bridge base exception"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class TransportError(RemoteBridgeError):
    """
    Transport error

    Reported by the channel's error hook, either while acquiring a proxy or
    while a call is in flight.
    """

    pass


class ChannelInvalidated(TransportError):
    """
    Channel invalidated error

    The channel was invalidated before or during the call.
    """

    pass


class CapabilityMismatch(RemoteBridgeError):
    """
    Capability mismatch error

    The acquired proxy does not implement the capability interface the
    channel is bound to.
    """

    pass


class ProtocolViolation(RemoteBridgeError):
    """
    Protocol violation error

    A completion handler broke its callback-shape contract, such as a
    value/error pair handler called with neither a value nor an error.
    """

    pass


class DecodeError(RemoteBridgeError):
    """
    Payload decode error

    The payload was delivered but could not be decoded into the expected type.
    """

    pass


class QueueCancelled(RemoteBridgeError):
    """
    Queued operation cancelled

    The operation was cancelled before it started, or its body let a
    cooperative cancellation propagate.
    """

    pass


class CapabilityBindingError(RuntimeError):
    """
    Capability binding precondition failure

    Raised when a channel already bound to one capability interface is bound
    to a different one, or when the interface cannot be checked against a
    proxy at call time. This is a programming error and is intentionally not
    a RemoteBridgeError.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


def as_transport_error(error: BaseException) -> TransportError:
    """Wrap an error reported by a channel hook into a TransportError"""
    if isinstance(error, TransportError):
        return error

    wrapped = TransportError(
        f"Transport failure: {error}",
        {"cause": error, "cause_type": type(error).__name__},
    )
    wrapped.__cause__ = error
    return wrapped
