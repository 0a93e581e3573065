"""
Structured logging utilities.

Provides context managers and helpers for structured operation logging
with timing, error tracking, and metadata.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable  # noqa: TCH003
from contextlib import asynccontextmanager
from typing import Any

logger = logging.getLogger(__name__)


def configure_logging(level: str, fmt: str, file_path: str | None = None) -> None:
    """Configure the root logger once at process start."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if file_path:
        handlers.append(logging.FileHandler(file_path))
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=fmt, handlers=handlers, force=True)


@asynccontextmanager
async def log_operation(
    operation: str,
    subject_ids: dict[str, str] | None = None,
    **context: Any,
) -> Any:  # AsyncGenerator[None, None]
    """
    Context manager for structured operation logging.

    Logs operation start, completion, and errors with timing information.

    Args:
        operation: Name of the operation being performed
        subject_ids: Dictionary of subject identifiers (e.g., {"repo": "owner/repo", "sha": "abc1234"})
        **context: Additional context to include in logs

    Example:
        async with log_operation("step:run eslint", repo=repo):
            result = await step.run(context)
    """
    start_time = time.time()
    log_context = {
        "operation": operation,
        **(subject_ids or {}),
        **context,
    }

    logger.info(f"🚀 Starting {operation}", extra=log_context)

    try:
        yield
    except Exception as e:
        latency_ms = int((time.time() - start_time) * 1000)
        logger.error(
            f"❌ {operation} failed after {latency_ms}ms",
            extra={**log_context, "error": str(e), "latency_ms": latency_ms},
            exc_info=True,
        )
        raise
    else:
        latency_ms = int((time.time() - start_time) * 1000)
        logger.info(
            f"✅ {operation} completed in {latency_ms}ms",
            extra={**log_context, "latency_ms": latency_ms},
        )


def log_structured(
    logger_obj: logging.Logger,
    event: str,
    level: str = "info",
    **context: Any,
) -> None:
    """
    Lightweight structured logging helper.

    Args:
        logger_obj: Logger instance to use.
        event: Event/operation name.
        level: Logging level (info|warning|error).
        **context: Arbitrary key/value metadata.
    """
    log_fn: Callable[..., Any] = getattr(logger_obj, level, logger_obj.info)
    log_fn(event, extra=context)
