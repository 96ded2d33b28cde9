"""
Logging Utilities

This module provides structlog-based logging for the bridge and the queue.
Loggers are stdlib-backed, so output still flows through the standard
logging handlers configured by the embedding application.
"""

import logging
import sys
from typing import Any, List, Optional

import structlog


_SHARED_PROCESSORS: List[Any] = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
]


def get_logger(name: str) -> Any:
    """
    Get a logger for the specified name

    Configures structlog with console rendering on first use if the embedding
    application has not configured it already.

    Args:
        name: Logger name (usually the module name)

    Returns:
        structlog bound logger
    """
    if not structlog.is_configured():
        structlog.configure(
            processors=_SHARED_PROCESSORS + [structlog.dev.ConsoleRenderer(colors=False)],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

    return structlog.get_logger(name)


def configure_logging(
    level: str = "INFO", format_string: Optional[str] = None, use_structlog: bool = True
) -> None:
    """
    Configure logging for remote-bridge components

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string for the stdlib handler
        use_structlog: Render events with structlog's console renderer. When
            False, events are handed to stdlib logging with their key/value
            pairs attached as ``extra``.
    """
    if use_structlog:
        final_processor: Any = structlog.dev.ConsoleRenderer(colors=False)
    else:
        final_processor = structlog.stdlib.render_to_log_kwargs

    structlog.configure(
        processors=_SHARED_PROCESSORS + [final_processor],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=format_string or "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )
    logging.getLogger().setLevel(getattr(logging, level.upper()))


def configure_logging_from_config(config: Any) -> None:
    """Apply the logging settings of a BridgeConfig"""
    configure_logging(
        level=config.log_level,
        format_string=config.log_format,
        use_structlog=config.use_structlog,
    )


def create_queue_logger(queue_name: str) -> Any:
    """
    Create a logger bound to a specific operation queue

    Args:
        queue_name: Name of the queue

    Returns:
        Queue-specific logger
    """
    return get_logger(f"remote_bridge.queue.{queue_name}").bind(queue=queue_name)


def log_operation_failure(
    logger: Any, sequence: int, error: BaseException, barrier: bool = False
) -> None:
    """
    Log a failed operation whose result nobody awaits

    Args:
        logger: Logger instance
        sequence: Operation sequence number
        error: The operation's failure
        barrier: Whether the operation was a barrier
    """
    logger.warning(
        "Queued operation failed",
        sequence=sequence,
        barrier=barrier,
        error=str(error),
        error_type=type(error).__name__,
    )
