"""
Payload decoders

A decoder turns a raw payload into a value. The default decoder parses JSON
and validates it against a target type with pydantic.
"""

import functools
from typing import Any, Callable

from pydantic import TypeAdapter


Decoder = Callable[[bytes], Any]


@functools.lru_cache(maxsize=128)
def _cached_adapter(value_type: Any) -> TypeAdapter:
    return TypeAdapter(value_type)


def type_adapter(value_type: Any) -> TypeAdapter:
    """TypeAdapter for a target type, shared across calls when the type is hashable"""
    try:
        hash(value_type)
    except TypeError:
        return TypeAdapter(value_type)
    return _cached_adapter(value_type)


def json_decoder(value_type: Any = Any) -> Decoder:
    """
    Build a JSON decoder for a target type

    Args:
        value_type: Any type pydantic can validate (models, dataclasses,
            TypedDicts, builtins). ``Any`` returns the parsed JSON as is.

    Returns:
        Callable decoding bytes into ``value_type``
    """
    adapter = type_adapter(value_type)

    def decode(data: bytes) -> Any:
        return adapter.validate_json(data)

    return decode
