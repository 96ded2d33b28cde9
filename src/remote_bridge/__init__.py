"""
remote-bridge - async results for callback-based remote calls

Supports:
- bridging completion-handler calls on a proxy channel into awaitables
- queueing calls with concurrent or barrier ordering
"""

__version__ = "0.1.0"

from .core import (
    # Errors
    RemoteBridgeError,
    TransportError,
    ChannelInvalidated,
    CapabilityMismatch,
    ProtocolViolation,
    DecodeError,
    QueueCancelled,
    CapabilityBindingError,
    # Core classes
    Success,
    Failure,
    Outcome,
    SettlementToken,
    Channel,
    LocalChannel,
    CapabilityBinding,
    bind_capability,
)
from .bridge import (
    begin_call,
    json_decoder,
    with_continuation,
    with_decoding_completion,
    with_error_completion,
    with_result_completion,
    with_service,
    with_value_error_completion,
)
from .executor import OperationHandle, OperationQueue, OperationState
from .service import ChannelProvider, QueuedRemoteService, RemoteService
from .config import BridgeConfig, get_default_config, load_config_from_env, load_config_from_file
from .utils.logging import configure_logging, configure_logging_from_config

__all__ = [
    "__version__",
    # Errors
    "RemoteBridgeError",
    "TransportError",
    "ChannelInvalidated",
    "CapabilityMismatch",
    "ProtocolViolation",
    "DecodeError",
    "QueueCancelled",
    "CapabilityBindingError",
    # Core
    "Success",
    "Failure",
    "Outcome",
    "SettlementToken",
    "Channel",
    "LocalChannel",
    "CapabilityBinding",
    "bind_capability",
    # Bridge
    "begin_call",
    "json_decoder",
    "with_continuation",
    "with_decoding_completion",
    "with_error_completion",
    "with_result_completion",
    "with_service",
    "with_value_error_completion",
    # Executor
    "OperationHandle",
    "OperationQueue",
    "OperationState",
    # Service
    "ChannelProvider",
    "QueuedRemoteService",
    "RemoteService",
    # Config
    "BridgeConfig",
    "get_default_config",
    "load_config_from_env",
    "load_config_from_file",
    # Logging
    "configure_logging",
    "configure_logging_from_config",
]
