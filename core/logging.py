# ============================================================================
# STRUCTURED LOGGING
# ============================================================================
# EPOCH: 1 - TASK HEALTH MONITORING
# STATUS: Core - Task-scoped logging
# PURPOSE: Tag every log line with the workload and check it concerns
# CREATED: 18 OCT 2026
# ============================================================================
"""
Structured Logging

Every monitor, probe and supervisor log line carries the task_id and
check kind of the workload it belongs to, taken from log_context().

The context lives in a ContextVar: each monitor's asyncio task copies it
at creation, so monitors sharing one event loop never see each other's
task_id.

Output is either one human-readable line per record or one JSON object
per record (LOG_FORMAT=json or configure_logging(json_output=True)).

Usage:
    from core.logging import get_logger, log_context

    logger = get_logger(__name__, ComponentType.MONITOR)

    with log_context(task_id="task-123", check_kind="tcp"):
        logger.warning("Health check failed")
"""

import json
import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union


class ComponentType(str, Enum):
    """Subsystem a log line comes from."""
    MONITOR = "monitor"
    EXECUTOR = "executor"
    SUPERVISOR = "supervisor"
    REPORTER = "reporter"
    HOOK = "hook"
    CLI = "cli"


# ============================================================================
# CONTEXT
# ============================================================================

@dataclass(frozen=True)
class LogContext:
    """Fields attached to every record logged inside log_context()."""
    task_id: Optional[str] = None
    check_kind: Optional[str] = None
    component: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        fields = {
            "task_id": self.task_id,
            "check_kind": self.check_kind,
            "component": self.component,
        }
        return {k: v for k, v in fields.items() if v is not None}


_current: ContextVar[LogContext] = ContextVar("taskhealth_log_context", default=LogContext())


def get_current_context() -> LogContext:
    """Context of the running task (empty outside log_context)."""
    return _current.get()


@contextmanager
def log_context(
    task_id: Optional[str] = None,
    check_kind: Optional[str] = None,
    component: Optional[str] = None,
):
    """
    Scope task fields onto log records.

    Unset arguments inherit from the enclosing context.
    """
    parent = _current.get()
    context = replace(
        parent,
        task_id=task_id or parent.task_id,
        check_kind=check_kind or parent.check_kind,
        component=component or parent.component,
    )
    token = _current.set(context)
    try:
        yield context
    finally:
        _current.reset(token)


# ============================================================================
# FORMATTERS
# ============================================================================

class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **get_current_context().to_dict(),
        }
        data = getattr(record, "data", None)
        if data:
            entry["data"] = data
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class HumanFormatter(logging.Formatter):
    """`<time> <LEVEL> <logger> [task=..., check=...]: <message>`"""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        context = get_current_context()

        tags = []
        if context.task_id:
            tags.append(f"task={context.task_id}")
        if context.check_kind:
            tags.append(f"check={context.check_kind}")
        tag_str = f" [{', '.join(tags)}]" if tags else ""

        line = f"{timestamp} {record.levelname:<8} {record.name}{tag_str}: {record.getMessage()}"

        data = getattr(record, "data", None)
        if data:
            line += f" {data}"
        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


# ============================================================================
# LOGGERS
# ============================================================================

class ContextLogger(logging.LoggerAdapter):
    """Adds the logger's component to records made outside a component context."""

    def process(self, msg, kwargs):
        component = self.extra.get("component")
        if component is not None and get_current_context().component is None:
            extra = dict(kwargs.get("extra") or {})
            extra.setdefault("data", {"component": component.value})
            kwargs["extra"] = extra
        return msg, kwargs


def get_logger(name: str, component: Optional[ComponentType] = None) -> ContextLogger:
    """Module logger tagged with a component."""
    return ContextLogger(logging.getLogger(name), {"component": component})


def configure_logging(level: Union[str, int] = "INFO", json_output: bool = False) -> None:
    """
    Install a single stderr handler on the root logger.

    Args:
        level: Log level name or number
        json_output: JSON lines instead of human-readable lines
            (also enabled by LOG_FORMAT=json)
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    if json_output or os.getenv("LOG_FORMAT", "").lower() == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = HumanFormatter()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)


# ============================================================================
# CHECKPOINTS
# ============================================================================

def log_checkpoint(name: str, data: Optional[Dict[str, Any]] = None) -> None:
    """
    Log a named decision point of a monitor or supervisor.

    Checkpoints (health_monitor_started, health_escalated,
    workload_launched, workload_exited) go to the "checkpoint" logger so
    they can be filtered out of the stream and replayed per task.
    """
    logging.getLogger("checkpoint").info(
        f"CHECKPOINT: {name}",
        extra={"data": {"checkpoint": name, **(data or {})}},
    )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ComponentType",
    "LogContext",
    "JsonFormatter",
    "HumanFormatter",
    "ContextLogger",
    "get_logger",
    "configure_logging",
    "log_context",
    "get_current_context",
    "log_checkpoint",
]
