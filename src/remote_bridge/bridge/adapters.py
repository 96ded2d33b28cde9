"""
Result Adapters

Higher-level call shapes built on the continuation bridge:

- value-or-throw: the body returns a value or raises
- error-only: completion handler receives an optional error
- value/error pair: completion handler receives (value, error)
- tagged result: completion handler receives Success or Failure
- decodable payload: pair shape on bytes, decoded on success
"""

import inspect
from typing import Any, Awaitable, Callable, Optional

from .continuation import begin_call, call_label
from .decoding import Decoder, json_decoder
from ..core.channel import Channel
from ..core.errors import DecodeError, ProtocolViolation
from ..core.outcome import Failure, Outcome, Success, is_outcome
from ..core.token import SettlementToken


ErrorHandler = Callable[[Optional[BaseException]], None]
ValueErrorHandler = Callable[[Any, Optional[BaseException]], None]
ResultHandler = Callable[[Outcome], None]


def _error_outcome(error: Any) -> Failure:
    """Failure for a delivered error; non-exception error values are a ProtocolViolation"""
    if isinstance(error, BaseException):
        return Failure(error)
    return Failure(
        ProtocolViolation(
            f"Completion delivered a non-exception error: {error!r}",
            {"received": error},
        )
    )


def classify_error(error: Any) -> Outcome:
    """Error-only shape: absent error is success"""
    if error is None:
        return Success(None)
    return _error_outcome(error)


def classify_value_error(value: Any, error: Any) -> Outcome:
    """
    Value/error pair shape

    An error always wins, even if a value was delivered alongside it. A pair
    with neither is a ProtocolViolation. Only None counts as absent.
    """
    if error is not None:
        return _error_outcome(error)
    if value is None:
        return Failure(ProtocolViolation("Completion missing both value and error"))
    return Success(value)


def classify_result(result: Any) -> Outcome:
    """Tagged shape: outcomes pass through, anything else is a ProtocolViolation"""
    if isinstance(result, Failure):
        return _error_outcome(result.error)
    if is_outcome(result):
        return result
    return Failure(
        ProtocolViolation(
            f"Result completion expected Success or Failure, got {type(result).__name__}",
            {"received": result},
        )
    )


async def _resolve_awaitable(pending: Awaitable[Any], token: SettlementToken) -> None:
    token.resolve(await pending)


async def with_continuation(
    channel: Channel,
    body: Callable[[Any, SettlementToken], Any],
    interface: Optional[type] = None,
    *,
    label: Optional[str] = None,
) -> Any:
    """Raw bridge call: the body settles the token itself"""
    return await begin_call(channel, body, interface, label=call_label(body, label))


async def with_service(
    channel: Channel,
    body: Callable[[Any], Any],
    interface: Optional[type] = None,
    *,
    label: Optional[str] = None,
) -> Any:
    """
    Value-or-throw call

    The body returns a value, or an awaitable producing one, or raises. Even
    a body that returns nothing can fail, since the channel can always fail.
    """

    def call(proxy: Any, token: SettlementToken) -> Any:
        value = body(proxy)
        if inspect.isawaitable(value):
            return _resolve_awaitable(value, token)
        token.resolve(value)
        return None

    return await begin_call(channel, call, interface, label=call_label(body, label))


async def with_error_completion(
    channel: Channel,
    body: Callable[[Any, ErrorHandler], Any],
    interface: Optional[type] = None,
    *,
    label: Optional[str] = None,
) -> None:
    """Call whose completion handler receives an optional error"""

    def call(proxy: Any, token: SettlementToken) -> Any:
        def handler(error: Optional[BaseException] = None) -> None:
            token.settle(classify_error(error))

        return body(proxy, handler)

    await begin_call(channel, call, interface, label=call_label(body, label))


async def with_value_error_completion(
    channel: Channel,
    body: Callable[[Any, ValueErrorHandler], Any],
    interface: Optional[type] = None,
    *,
    label: Optional[str] = None,
) -> Any:
    """Call whose completion handler receives a (value, error) pair"""

    def call(proxy: Any, token: SettlementToken) -> Any:
        def handler(value: Any = None, error: Optional[BaseException] = None) -> None:
            token.settle(classify_value_error(value, error))

        return body(proxy, handler)

    return await begin_call(channel, call, interface, label=call_label(body, label))


async def with_result_completion(
    channel: Channel,
    body: Callable[[Any, ResultHandler], Any],
    interface: Optional[type] = None,
    *,
    label: Optional[str] = None,
) -> Any:
    """Call whose completion handler receives a Success or Failure"""

    def call(proxy: Any, token: SettlementToken) -> Any:
        def handler(result: Outcome) -> None:
            token.settle(classify_result(result))

        return body(proxy, handler)

    return await begin_call(channel, call, interface, label=call_label(body, label))


async def with_decoding_completion(
    channel: Channel,
    body: Callable[[Any, ValueErrorHandler], Any],
    value_type: Any = Any,
    decoder: Optional[Decoder] = None,
    interface: Optional[type] = None,
    *,
    label: Optional[str] = None,
) -> Any:
    """
    Call delivering a raw payload through a (data, error) pair, decoded on success

    Args:
        channel: Channel to call through
        body: Callable receiving (proxy, handler)
        value_type: Target type for the default JSON decoder
        decoder: Custom decoder; overrides ``value_type``
        interface: Capability interface; defaults to the channel's binding
        label: Call name for log events

    Raises:
        DecodeError: the payload was delivered but could not be decoded
    """
    name = call_label(body, label)
    data = await with_value_error_completion(channel, body, interface, label=name)

    decode = decoder or json_decoder(value_type)
    try:
        return decode(data)
    except Exception as e:
        raise DecodeError(
            f"Failed to decode payload: {e}",
            {"call": name, "payload_size": len(data) if hasattr(data, "__len__") else None},
        ) from e
