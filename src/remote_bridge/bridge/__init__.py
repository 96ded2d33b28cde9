"""
Continuation bridge and result adapters
"""

from .continuation import begin_call, call_label, ContinuationBody
from .decoding import Decoder, json_decoder
from .adapters import (
    classify_error,
    classify_result,
    classify_value_error,
    with_continuation,
    with_decoding_completion,
    with_error_completion,
    with_result_completion,
    with_service,
    with_value_error_completion,
)

__all__ = [
    "begin_call",
    "call_label",
    "ContinuationBody",
    "Decoder",
    "json_decoder",
    "classify_error",
    "classify_result",
    "classify_value_error",
    "with_continuation",
    "with_decoding_completion",
    "with_error_completion",
    "with_result_completion",
    "with_service",
    "with_value_error_completion",
]
