"""
Centralized logging configuration for the tone transformation service.

All components log through structlog so pipeline decisions and history
mutations come out as structured events with consistent fields.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
        extra_processors: Additional structlog processors to include
    """
    log_level = getattr(logging, level.upper())

    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s"  # structlog will handle formatting
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_pipeline_logger(name: str) -> FilteringBoundLogger:
    """Get a logger bound to the transformation pipeline subsystem."""
    return get_logger(name).bind(subsystem="pipeline")


def get_history_logger(name: str) -> FilteringBoundLogger:
    """Get a logger bound to the history engine subsystem."""
    return get_logger(name).bind(subsystem="history")


def log_stage_decision(
    logger: FilteringBoundLogger,
    stage: str,
    passed: bool,
    client_id: str,
    reason: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a pipeline stage outcome with standardized format.

    Args:
        logger: Structlog logger instance
        stage: Pipeline stage name (validate, version, admission, cache, backend)
        passed: Whether the request continues past this stage
        client_id: Identifier of the requesting client
        reason: Short reason for the decision
        context: Additional context data
    """
    bound_logger = logger.bind(
        stage=stage,
        stage_result="PASS" if passed else "FAIL",
        client_id=client_id,
        reason=reason,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    if passed:
        bound_logger.debug("Pipeline stage passed")
    else:
        bound_logger.warning("Pipeline stage failed")


def log_history_mutation(
    logger: FilteringBoundLogger,
    operation: str,
    changed: bool,
    past_depth: int,
    future_depth: int,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a history mutation with standardized format.

    Args:
        logger: Structlog logger instance
        operation: History operation name
        changed: Whether the operation committed a new state
        past_depth: Length of the undo stack after the operation
        future_depth: Length of the redo stack after the operation
        context: Additional context data
    """
    bound_logger = logger.bind(
        operation=operation,
        changed=changed,
        past_depth=past_depth,
        future_depth=future_depth,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.debug("History mutation")
