"""
Capability Binding

A channel is bound to at most one capability interface for its lifetime.
The interface is recorded on the channel once, at bind time.
"""

from dataclasses import dataclass
from typing import Any, Optional

from .channel import Channel
from .errors import CapabilityBindingError


def check_interface(interface: Any) -> type:
    """
    Ensure a capability interface can be checked against a proxy at call time

    Raises:
        CapabilityBindingError: not a class, or a Protocol without @runtime_checkable
    """
    if not isinstance(interface, type):
        raise CapabilityBindingError(
            f"Capability interface must be a class, got {interface!r}",
            {"requested": interface},
        )
    if getattr(interface, "_is_protocol", False) and not getattr(
        interface, "_is_runtime_protocol", False
    ):
        raise CapabilityBindingError(
            f"Protocol {interface.__name__} must be decorated with @runtime_checkable",
            {"requested": interface},
        )
    return interface


def bind_capability(channel: Channel, interface: type) -> type:
    """
    Bind a channel to a capability interface

    Binding the interface the channel already carries is a no-op.

    Args:
        channel: Channel to bind
        interface: Capability interface class

    Returns:
        The bound interface

    Raises:
        CapabilityBindingError: interface cannot be checked at runtime, or the
            channel is already bound to a different interface
    """
    check_interface(interface)
    current = getattr(channel, "remote_interface", None)
    if current is None:
        channel.remote_interface = interface
        return interface

    if current is not interface:
        raise CapabilityBindingError(
            f"Channel already bound to {current.__name__}, cannot bind {interface.__name__}",
            {"bound": current, "requested": interface},
        )
    return interface


def proxy_satisfies(proxy: Any, interface: Optional[type]) -> bool:
    """Check a proxy against a capability interface; no interface accepts anything"""
    if interface is None:
        return True
    return isinstance(proxy, interface)


@dataclass(frozen=True)
class CapabilityBinding:
    """Fixed association between a channel and one capability interface"""

    channel: Channel
    interface: Optional[type]

    @classmethod
    def create(
        cls, channel: Channel, interface: Optional[type] = None
    ) -> "CapabilityBinding":
        """
        Bind a channel, or adopt its existing binding when no interface is given
        """
        if interface is None:
            return cls(channel, getattr(channel, "remote_interface", None))
        return cls(channel, bind_capability(channel, interface))
