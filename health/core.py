# ============================================================================
# HEALTH MONITOR COLLABORATOR INTERFACES
# ============================================================================
# EPOCH: 1 - TASK HEALTH MONITORING
# STATUS: Core - Interfaces the monitor consumes and exposes
# PURPOSE: Task supervision and status reporting contracts
# CREATED: 18 OCT 2026
# ============================================================================
"""
Health Monitor Collaborator Interfaces

The monitor talks to exactly two collaborators:

TaskSupervision (consumed):
    get_workload_start_time() -> datetime
    terminate_workload(reason) -> None   (fire-and-forget, must not block)

StatusReporter (exposed to):
    on_health_report(report)             (once per un-masked outcome,
                                          once more on escalation)

worker.supervisor.WorkloadSupervisor and the reporters in
worker.reporter are the production implementations.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from core.models import HealthReport


class TaskSupervision(ABC):
    """
    Task-supervision collaborator.

    Owns the workload process; the monitor only reads its start time
    and asks for it to be killed.
    """

    @abstractmethod
    def get_workload_start_time(self) -> datetime:
        """When the workload started running (timezone-aware)."""
        pass

    @abstractmethod
    def terminate_workload(self, reason: str) -> None:
        """
        Issue a kill directive.

        Must return without waiting for the workload to die; carrying
        out and confirming the kill is the supervisor's job.
        """
        pass


class StatusReporter(ABC):
    """
    Receives every health determination.

    Subclass and implement on_health_report() to forward reports to the
    supervising process.
    """

    @abstractmethod
    async def on_health_report(self, report: HealthReport) -> None:
        """
        Handle one health report.

        Args:
            report: Determination to forward
        """
        pass

    async def close(self) -> None:
        """Clean up resources."""
        pass


__all__ = [
    "TaskSupervision",
    "StatusReporter",
]
