"""
Utility helpers for remote-bridge
"""

from .logging import (
    configure_logging,
    configure_logging_from_config,
    create_queue_logger,
    get_logger,
    log_operation_failure,
)

__all__ = [
    "configure_logging",
    "configure_logging_from_config",
    "create_queue_logger",
    "get_logger",
    "log_operation_failure",
]
