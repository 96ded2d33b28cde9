"""
Continuation bridge tests

Proxy acquisition, capability checks, body invocation and invalidation
"""

import asyncio
from typing import Any, Optional, Protocol, runtime_checkable

import pytest

from remote_bridge.bridge.continuation import begin_call
from remote_bridge.bridge.adapters import with_value_error_completion
from remote_bridge.core.binding import bind_capability
from remote_bridge.core.channel import LocalChannel
from remote_bridge.core.errors import (
    CapabilityMismatch,
    ChannelInvalidated,
    TransportError,
)


@runtime_checkable
class Greeter(Protocol):
    def greet(self, name: str, reply) -> None:
        ...


@runtime_checkable
class Printer(Protocol):
    def print_page(self, text: str) -> None:
        ...


class GreeterImpl:
    def __init__(self):
        self.pending_reply = None

    def greet(self, name, reply):
        reply(f"hello {name}", None)

    def greet_later(self, name, reply):
        self.pending_reply = reply


class FailingChannel:
    """Channel whose acquisition always reports an error"""

    def __init__(self, error: BaseException, proxy: Optional[Any] = None):
        self.remote_interface = None
        self.error = error
        self.proxy = proxy

    def acquire_proxy(self, on_error):
        on_error(self.error)
        return self.proxy

    def invalidate(self):
        pass


class SilentChannel:
    """Channel that returns no proxy and never reports why"""

    remote_interface = None

    def acquire_proxy(self, on_error):
        return None

    def invalidate(self):
        pass


def never_called(proxy, token):
    raise AssertionError("body must not be invoked")


class TestBeginCall:
    """Test begin_call"""

    @pytest.mark.asyncio
    async def test_body_settles_token(self):
        """The body receives the proxy and its token resolves the call"""
        channel = LocalChannel(GreeterImpl())
        calls = []

        def body(proxy, token):
            calls.append(proxy)
            proxy.greet("ada", lambda value, error: token.resolve(value))

        assert await begin_call(channel, body) == "hello ada"
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_async_body(self):
        """A coroutine body is awaited"""
        channel = LocalChannel(GreeterImpl())

        async def body(proxy, token):
            await asyncio.sleep(0)
            token.resolve("done")

        assert await begin_call(channel, body) == "done"

    @pytest.mark.asyncio
    async def test_body_raising_settles_failure(self):
        """A body that raises before settling fails the call"""
        channel = LocalChannel(GreeterImpl())

        def body(proxy, token):
            raise LookupError("no such method")

        with pytest.raises(LookupError):
            await begin_call(channel, body)

    @pytest.mark.asyncio
    async def test_body_raising_after_settle_keeps_value(self):
        """An error raised after settlement is discarded"""
        channel = LocalChannel(GreeterImpl())

        def body(proxy, token):
            token.resolve(1)
            raise RuntimeError("too late")

        assert await begin_call(channel, body) == 1

    @pytest.mark.asyncio
    async def test_settled_from_later_callback(self):
        """The token can be settled after begin_call has started waiting"""
        impl = GreeterImpl()
        channel = LocalChannel(impl)

        def body(proxy, token):
            proxy.greet_later("bob", lambda value, error: token.resolve(value))

        task = asyncio.ensure_future(begin_call(channel, body))
        await asyncio.sleep(0)
        assert not task.done()

        impl.pending_reply("hello bob", None)
        assert await task == "hello bob"


class TestAcquisitionFailures:
    """Transport errors during acquisition"""

    @pytest.mark.asyncio
    async def test_hook_error_wrapped_in_transport_error(self):
        """Errors reported by the hook become TransportError"""
        cause = ConnectionResetError("peer went away")
        channel = FailingChannel(cause, proxy=GreeterImpl())

        with pytest.raises(TransportError) as exc_info:
            await begin_call(channel, never_called)

        assert exc_info.value.__cause__ is cause
        assert exc_info.value.details["cause"] is cause

    @pytest.mark.asyncio
    async def test_transport_error_passed_through(self):
        """A TransportError from the hook is not wrapped again"""
        error = ChannelInvalidated("gone")
        channel = FailingChannel(error)

        with pytest.raises(ChannelInvalidated) as exc_info:
            await begin_call(channel, never_called)
        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_no_proxy(self):
        """No proxy and no hook error still fails with TransportError"""
        with pytest.raises(TransportError):
            await begin_call(SilentChannel(), never_called)


class TestCapabilityCheck:
    """Proxy capability check"""

    @pytest.mark.asyncio
    async def test_mismatch_with_bound_interface(self):
        """A proxy lacking the bound interface fails without calling the body"""
        channel = LocalChannel(GreeterImpl())
        bind_capability(channel, Printer)

        with pytest.raises(CapabilityMismatch):
            await begin_call(channel, never_called)

    @pytest.mark.asyncio
    async def test_mismatch_with_explicit_interface(self):
        """An explicit interface overrides the channel's binding"""
        channel = LocalChannel(GreeterImpl())

        with pytest.raises(CapabilityMismatch):
            await begin_call(channel, never_called, Printer)

    @pytest.mark.asyncio
    async def test_matching_interface(self):
        """A proxy implementing the interface is accepted"""
        channel = LocalChannel(GreeterImpl())
        bind_capability(channel, Greeter)

        def body(proxy, token):
            assert isinstance(proxy, Greeter)
            token.resolve("ok")

        assert await begin_call(channel, body) == "ok"


class TestInvalidation:
    """Channel invalidation"""

    @pytest.mark.asyncio
    async def test_calls_after_invalidation_fail(self):
        """Every call bridged after invalidation fails without its body"""
        channel = LocalChannel(GreeterImpl())
        channel.invalidate()

        for _ in range(3):
            with pytest.raises(ChannelInvalidated):
                await begin_call(channel, never_called)

    @pytest.mark.asyncio
    async def test_invalidation_in_flight(self):
        """A call waiting on its reply fails through the error hook"""
        impl = GreeterImpl()
        channel = LocalChannel(impl)
        started = asyncio.Event()

        def body(proxy, handler):
            proxy.greet_later("eve", handler)
            started.set()

        task = asyncio.ensure_future(with_value_error_completion(channel, body))
        await started.wait()

        channel.invalidate()
        with pytest.raises(ChannelInvalidated):
            await task

        # the late reply is discarded
        impl.pending_reply("hello eve", None)

    @pytest.mark.asyncio
    async def test_proxy_call_after_invalidation(self):
        """Using a proxy after invalidation reports through its hook"""
        channel = LocalChannel(GreeterImpl())
        errors = []
        proxy = channel.acquire_proxy(errors.append)
        channel.invalidate()

        assert proxy.greet("zed", lambda value, error: None) is None
        assert len(errors) == 1
        assert isinstance(errors[0], ChannelInvalidated)

    @pytest.mark.asyncio
    async def test_invalidate_is_idempotent(self):
        """Invalidating twice reports once"""
        channel = LocalChannel(GreeterImpl())
        errors = []
        proxy = channel.acquire_proxy(errors.append)
        channel.invalidate()
        channel.invalidate()

        assert channel.is_invalidated
        assert len(errors) == 1
        del proxy
