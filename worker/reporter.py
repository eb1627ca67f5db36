# ============================================================================
# STATUS REPORTERS
# ============================================================================
# EPOCH: 1 - TASK HEALTH MONITORING
# STATUS: Core - Health report delivery
# PURPOSE: Forward health determinations to the supervising process
# CREATED: 18 OCT 2026
# ============================================================================
"""
Status Reporters

Implementations of health.core.StatusReporter:

1. LoggingReporter: one log line per determination
2. CallbackReporter: hands each report to a sync or async callable
3. InMemoryReporter: keeps per-task history for status queries
4. CompositeReporter: fans one report out to several reporters

Serialising reports for remote observers is left to the surrounding
orchestrator; InMemoryReporter.to_dict() is the hand-off point.
"""

import asyncio
import logging
from collections import defaultdict, deque
from typing import Any, Awaitable, Callable, Deque, Dict, List, Optional, Union

from core.models import HealthReport
from health.core import StatusReporter

logger = logging.getLogger(__name__)

ReportCallback = Callable[[HealthReport], Union[None, Awaitable[None]]]


# ============================================================================
# LOGGING REPORTER
# ============================================================================

class LoggingReporter(StatusReporter):
    """Logs every health report."""

    def __init__(self, logger_name: str = "taskhealth.status"):
        self._logger = logging.getLogger(logger_name)

    async def on_health_report(self, report: HealthReport) -> None:
        """Log one report at a level matching its severity."""
        if report.terminated:
            self._logger.error(
                f"Task {report.task_id} killed by health check: {report.message}"
            )
        elif report.healthy:
            self._logger.info(f"Task {report.task_id} is healthy")
        else:
            self._logger.warning(
                f"Task {report.task_id} is unhealthy "
                f"(consecutive_failures={report.consecutive_failures}): {report.message}"
            )


# ============================================================================
# CALLBACK REPORTER
# ============================================================================

class CallbackReporter(StatusReporter):
    """
    Forwards reports to a callable.

    Supports both sync and async callbacks.
    """

    def __init__(self, callback: ReportCallback):
        """
        Initialize callback reporter.

        Args:
            callback: Function receiving each HealthReport
        """
        self._callback = callback

    async def on_health_report(self, report: HealthReport) -> None:
        """Invoke the callback, awaiting it if it is a coroutine."""
        result = self._callback(report)
        if asyncio.iscoroutine(result):
            await result


# ============================================================================
# IN-MEMORY REPORTER
# ============================================================================

class InMemoryReporter(StatusReporter):
    """
    Keeps recent reports per task.

    Observers read the latest determination (or the history) through
    latest() / history() / to_dict().
    """

    def __init__(self, max_history: int = 100):
        """
        Initialize in-memory reporter.

        Args:
            max_history: Reports kept per task (oldest dropped first)
        """
        self.max_history = max_history
        self._history: Dict[str, Deque[HealthReport]] = defaultdict(
            lambda: deque(maxlen=self.max_history)
        )

    async def on_health_report(self, report: HealthReport) -> None:
        """Record one report."""
        self._history[report.task_id].append(report)

    def history(self, task_id: str) -> List[HealthReport]:
        """All retained reports for a task, oldest first."""
        return list(self._history.get(task_id, ()))

    def latest(self, task_id: str) -> Optional[HealthReport]:
        """Most recent report for a task."""
        reports = self._history.get(task_id)
        if not reports:
            return None
        return reports[-1]

    def task_ids(self) -> List[str]:
        """Tasks with at least one report."""
        return list(self._history.keys())

    def clear(self, task_id: Optional[str] = None) -> None:
        """Drop history for one task, or for all tasks."""
        if task_id is None:
            self._history.clear()
        else:
            self._history.pop(task_id, None)

    def to_dict(self) -> Dict[str, Any]:
        """Latest report per task, for status snapshots."""
        return {
            task_id: reports[-1].to_dict()
            for task_id, reports in self._history.items()
            if reports
        }


# ============================================================================
# COMPOSITE REPORTER
# ============================================================================

class CompositeReporter(StatusReporter):
    """
    Sends each report to several reporters in order.

    A failing reporter is logged and does not stop the others.
    """

    def __init__(self, reporters: List[StatusReporter]):
        self._reporters = list(reporters)

    async def on_health_report(self, report: HealthReport) -> None:
        """Deliver to every child reporter."""
        for reporter in self._reporters:
            try:
                await reporter.on_health_report(report)
            except Exception as e:
                logger.error(f"{type(reporter).__name__} failed for {report.task_id}: {e}")

    async def close(self) -> None:
        """Close every child reporter."""
        for reporter in self._reporters:
            await reporter.close()


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "LoggingReporter",
    "CallbackReporter",
    "InMemoryReporter",
    "CompositeReporter",
]
