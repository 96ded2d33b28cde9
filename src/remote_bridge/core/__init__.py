"""
remote-bridge core: errors, outcomes, settlement tokens, channels and bindings
"""

from .errors import (
    RemoteBridgeError,
    TransportError,
    ChannelInvalidated,
    CapabilityMismatch,
    ProtocolViolation,
    DecodeError,
    QueueCancelled,
    CapabilityBindingError,
    as_transport_error,
)
from .outcome import Success, Failure, Outcome, is_outcome
from .token import SettlementToken
from .channel import Channel, ErrorHandler, LocalChannel, LocalProxy
from .binding import CapabilityBinding, bind_capability, check_interface, proxy_satisfies

__all__ = [
    # Errors
    "RemoteBridgeError",
    "TransportError",
    "ChannelInvalidated",
    "CapabilityMismatch",
    "ProtocolViolation",
    "DecodeError",
    "QueueCancelled",
    "CapabilityBindingError",
    "as_transport_error",
    # Outcomes
    "Success",
    "Failure",
    "Outcome",
    "is_outcome",
    # Token
    "SettlementToken",
    # Channel
    "Channel",
    "ErrorHandler",
    "LocalChannel",
    "LocalProxy",
    # Binding
    "CapabilityBinding",
    "bind_capability",
    "check_interface",
    "proxy_satisfies",
]
