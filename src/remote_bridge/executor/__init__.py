"""
Operation scheduling
"""

from .queue import (
    Operation,
    OperationBody,
    OperationHandle,
    OperationQueue,
    OperationState,
)

__all__ = [
    "Operation",
    "OperationBody",
    "OperationHandle",
    "OperationQueue",
    "OperationState",
]
