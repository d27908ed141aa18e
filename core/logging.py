# ============================================================================
# STRUCTURED LOGGING
# ============================================================================
# STATUS: Core - Structured logging with context
# PURPOSE: Consistent, queryable logging across chain and handlers
# CREATED: 19 OCT 2026
# ============================================================================
"""
Structured Logging

Log records from the chain carry the dispatch they belong to (task_id) and
the handler being run (handler, priority).

Usage:
    from core.logging import get_logger, log_context

    logger = get_logger("handlers.chain")

    with log_context(task_id="a1b2c3", operation="dispatch"):
        logger.info("Dispatching", extra={"handler_count": 3})

The context stack lives in a ContextVar, so each asyncio task sees its own
stack and interleaved dispatches do not leak context into one another.
"""

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from core.config import get_defaults


class ComponentType(str, Enum):
    """Component types for logging categorization."""
    CHAIN = "chain"
    HANDLER = "handler"
    TASK = "task"


@dataclass(frozen=True)
class LogContext:
    """Contextual fields attached to every record logged inside log_context()."""
    task_id: Optional[str] = None
    handler: Optional[str] = None
    priority: Optional[int] = None
    component: Optional[str] = None
    operation: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict, excluding None values."""
        result = {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "extra" and getattr(self, f.name) is not None
        }
        result.update(self.extra)
        return result

    def label(self) -> str:
        """Short inline form used by HumanFormatter, e.g. [task=.., handler=..]."""
        parts = []
        if self.task_id:
            parts.append(f"task={self.task_id}")
        if self.handler:
            parts.append(f"handler={self.handler}")
        if self.priority is not None:
            parts.append(f"priority={self.priority}")
        return f" [{', '.join(parts)}]" if parts else ""


_context_stack: ContextVar[Tuple[LogContext, ...]] = ContextVar("log_context_stack", default=())


def get_current_context() -> LogContext:
    """Get current logging context."""
    stack = _context_stack.get()
    return stack[-1] if stack else LogContext()


@contextmanager
def log_context(**kwargs):
    """
    Push context fields, merged onto the enclosing context.

    Example:
        with log_context(task_id="a1b2c3", handler="auth"):
            logger.info("Running handler")
    """
    parent = get_current_context()
    extra = {**parent.extra, **kwargs.pop("extra", {})}
    merged = {f.name: getattr(parent, f.name) for f in fields(parent) if f.name != "extra"}
    merged.update(kwargs)
    new_context = LogContext(extra=extra, **merged)

    token = _context_stack.set(_context_stack.get() + (new_context,))
    try:
        yield new_context
    finally:
        _context_stack.reset(token)


def _record_data(record: logging.LogRecord) -> Optional[Dict[str, Any]]:
    # Set by ContextLogger
    return getattr(record, "extra", None) or None


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, for log aggregators."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context_dict = get_current_context().to_dict()
        if context_dict:
            log_data["context"] = context_dict

        data = _record_data(record)
        if data:
            log_data["data"] = data

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data["source"] = {
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }
        return json.dumps(log_data, default=str)


class HumanFormatter(logging.Formatter):
    """Single-line format for development."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        label = get_current_context().label()
        data = _record_data(record)
        data_str = f" {data}" if data else ""

        result = (
            f"{timestamp} {record.levelname.ljust(8)} {record.name}{label}: "
            f"{record.getMessage()}{data_str}"
        )
        if record.exc_info:
            result += f"\n{self.formatException(record.exc_info)}"
        return result


class ContextLogger(logging.LoggerAdapter):
    """
    Logger adapter merging the current LogContext into each record.

    Caller-supplied `extra` and the context end up together in record.extra.
    """

    def process(self, msg, kwargs):
        extra = dict(kwargs.get("extra") or {})
        extra.update(get_current_context().to_dict())
        if self.extra and self.extra.get("component"):
            extra.setdefault("component", self.extra["component"])

        kwargs["extra"] = {"extra": extra}
        return msg, kwargs


def get_logger(
    name: str,
    component: Optional[ComponentType] = None,
) -> ContextLogger:
    """
    Get a context-aware logger.

    Args:
        name: Logger name (e.g., "handlers.chain")
        component: Optional component type for categorization
    """
    component_value = component.value if component is not None else None
    return ContextLogger(logging.getLogger(name), {"component": component_value})


def configure_logging(
    level: Optional[Union[str, int]] = None,
    json_output: Optional[bool] = None,
) -> None:
    """
    Install a single stdout handler on the root logger.

    Args:
        level: Log level name or number; LOG_LEVEL if omitted
        json_output: Use StructuredFormatter; LOG_FORMAT=json if omitted
    """
    defaults = get_defaults().logging
    if level is None:
        level = defaults.level
    if json_output is None:
        json_output = defaults.json_output
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter() if json_output else HumanFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ComponentType",
    "LogContext",
    "StructuredFormatter",
    "HumanFormatter",
    "ContextLogger",
    "get_logger",
    "configure_logging",
    "log_context",
    "get_current_context",
]
