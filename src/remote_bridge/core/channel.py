"""
Channel collaborator

Defines the protocol the bridge expects from a channel, and LocalChannel,
an in-process channel exporting a local object through forwarding proxies.
"""

import threading
import weakref
from typing import Any, Callable, Dict, Optional, Protocol, runtime_checkable

from .errors import ChannelInvalidated
from ..utils.logging import get_logger


logger = get_logger(__name__)


ErrorHandler = Callable[[BaseException], None]


@runtime_checkable
class Channel(Protocol):
    """Channel protocol: a source of remote proxies that can be invalidated"""

    remote_interface: Optional[type]

    def acquire_proxy(self, on_error: ErrorHandler) -> Optional[Any]:
        """
        Acquire a proxy for the remote object

        Transport failures, now or while the proxy is in use, are reported
        through ``on_error``. Returns None if no proxy could be produced.
        """
        ...

    def invalidate(self) -> None:
        """Make the channel permanently unusable"""
        ...


class LocalProxy:
    """
    Proxy forwarding calls to a LocalChannel's exported object

    Concrete proxy classes are generated per channel so that every exported
    method exists as a real attribute; runtime protocol checks see them.
    """

    def __init__(self, channel: "LocalChannel", on_error: ErrorHandler):
        self._channel = channel
        self._on_error = on_error
        self._failed = False

    def _dispatch(self, name: str, args: tuple, kwargs: Dict[str, Any]) -> Any:
        if self._channel.is_invalidated:
            self._report(
                ChannelInvalidated(
                    f"Channel {self._channel.name!r} is invalidated",
                    {"channel": self._channel.name, "method": name},
                )
            )
            return None
        return self._channel._call_exported(name, args, kwargs)

    def _report(self, error: BaseException) -> None:
        # the error hook fires at most once per proxy
        if self._failed:
            return
        self._failed = True
        self._on_error(error)


def _forwarder(name: str) -> Callable[..., Any]:
    def forward(self: LocalProxy, *args: Any, **kwargs: Any) -> Any:
        return self._dispatch(name, args, kwargs)

    forward.__name__ = name
    return forward


class LocalChannel:
    """
    In-process channel

    Exports one object. Calls made through its proxies are serialized by the
    channel, and invalidation reports ChannelInvalidated to every live proxy's
    error hook.
    """

    def __init__(self, exported: Any, name: Optional[str] = None):
        """
        Create a local channel

        Args:
            exported: Object whose public methods the proxies forward to
            name: Channel name used in errors and log events
        """
        self.name = name or type(exported).__name__
        self.remote_interface: Optional[type] = None
        self._exported = exported
        self._state_lock = threading.Lock()
        self._call_lock = threading.RLock()
        self._invalidated = False
        self._proxies: "weakref.WeakSet[LocalProxy]" = weakref.WeakSet()

        methods = {
            attr: _forwarder(attr)
            for attr in dir(exported)
            if not attr.startswith("_") and callable(getattr(exported, attr))
        }
        self._proxy_class = type(
            f"{type(exported).__name__}Proxy", (LocalProxy,), methods
        )

    @property
    def is_invalidated(self) -> bool:
        return self._invalidated

    def acquire_proxy(self, on_error: ErrorHandler) -> Optional[LocalProxy]:
        with self._state_lock:
            invalidated = self._invalidated
            if not invalidated:
                proxy = self._proxy_class(self, on_error)
                self._proxies.add(proxy)

        if invalidated:
            on_error(
                ChannelInvalidated(
                    f"Channel {self.name!r} is invalidated", {"channel": self.name}
                )
            )
            return None
        return proxy

    def invalidate(self) -> None:
        with self._state_lock:
            if self._invalidated:
                return
            self._invalidated = True
            live = list(self._proxies)
            self._proxies = weakref.WeakSet()

        logger.info("Channel invalidated", channel=self.name, live_proxies=len(live))

        for proxy in live:
            proxy._report(
                ChannelInvalidated(
                    f"Channel {self.name!r} was invalidated", {"channel": self.name}
                )
            )

    def _call_exported(self, name: str, args: tuple, kwargs: Dict[str, Any]) -> Any:
        with self._call_lock:
            return getattr(self._exported, name)(*args, **kwargs)

    def __repr__(self) -> str:
        interface = self.remote_interface.__name__ if self.remote_interface else None
        return f"<LocalChannel name={self.name!r} interface={interface} invalidated={self._invalidated}>"
