"""
Logging utilities for structured ingestion and retrieval logs.

Every value placed in `extra` goes through safe_log_value so that raw
document bytes, chunk lists or long error strings never flood a log line.

Dependencies: logging (stdlib)
System role: Logging helper functions
"""

import logging
from typing import Any

MAX_VALUE_LENGTH = 500


def safe_log_value(value: Any, max_length: int = MAX_VALUE_LENGTH) -> str:
    """
    Safely convert any value to a string for logging.

    Collections and byte payloads are summarized by size, long strings are
    truncated.

    Args:
        value: Value to convert
        max_length: Maximum length before truncating

    Returns:
        str: Safe string representation
    """
    try:
        if value is None:
            return "None"
        if isinstance(value, str):
            val_str = value
        elif isinstance(value, (bytes, bytearray)):
            return f"bytes({len(value)})"
        elif isinstance(value, (list, tuple, set)):
            val_str = f"{type(value).__name__}({len(value)} items)"
        elif isinstance(value, dict):
            val_str = f"dict({len(value)} keys)"
        else:
            val_str = str(value)

        if len(val_str) > max_length:
            return val_str[:max_length] + f"... (truncated, {len(val_str)} total)"
        return val_str
    except Exception as e:
        return f"<unable to log: {type(e).__name__}>"


def _safe_context(context: dict[str, Any]) -> dict[str, str]:
    return {key: safe_log_value(val) for key, val in context.items()}


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **context: Any,
) -> None:
    """
    Log a message with structured context, safely converting all values.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        message: Log message
        **context: Arbitrary key-value context
    """
    logger.log(level, message, extra=_safe_context(context))


def log_stage_transition(
    logger: logging.Logger,
    document_id: Any,
    current: str,
    target: str,
    **context: Any,
) -> None:
    """
    Log one committed ingestion status change.

    Failures are logged at WARNING so a dashboard filtering on level shows
    them without the surrounding stage noise.

    Args:
        logger: Logger instance
        document_id: Document whose status changed
        current: Previous status value
        target: New status value
        **context: Additional context
    """
    level = logging.WARNING if target == "FAILED" else logging.INFO
    extra = _safe_context(context)
    extra.update({"document_id": safe_log_value(document_id), "from_status": current, "to_status": target})
    logger.log(level, f"{logger.name}:advance - {current} -> {target}", extra=extra)


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    **context: Any,
) -> None:
    """
    Log an exception with full context and traceback.

    Knowledge base errors also contribute their retry classification and
    their details dict.

    Args:
        logger: Logger instance
        message: Log message
        exc: Exception instance
        **context: Additional context
    """
    safe_context = _safe_context(context)
    safe_context.update({
        "error_type": type(exc).__name__,
        "error_msg": safe_log_value(getattr(exc, "message", None) or str(exc)),
    })
    retryable = getattr(exc, "retryable", None)
    if retryable is not None:
        safe_context["retryable"] = str(retryable)
    details = getattr(exc, "details", None)
    if isinstance(details, dict) and details:
        safe_context["error_details"] = safe_log_value(str(details))
    logger.error(message, exc_info=exc, extra=safe_context)
