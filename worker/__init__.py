# ============================================================================
# WORKER MODULE
# ============================================================================
# EPOCH: 1 - TASK HEALTH MONITORING
# STATUS: Core - Workload supervision components
# PURPOSE: Launch workloads, deliver health reports, command-line runner
# CREATED: 18 OCT 2026
# ============================================================================
"""
Worker Module

Components that run on the node alongside workloads:
- reporter: Status reporters (logging, callback, in-memory, composite)
- supervisor: Workload process supervision and two-phase kill
- main: Command-line runner
"""

from worker.reporter import (
    LoggingReporter,
    CallbackReporter,
    InMemoryReporter,
    CompositeReporter,
)
from worker.supervisor import (
    SupervisorError,
    WorkloadResult,
    WorkloadSupervisor,
)

__all__ = [
    # Reporter
    "LoggingReporter",
    "CallbackReporter",
    "InMemoryReporter",
    "CompositeReporter",
    # Supervisor
    "SupervisorError",
    "WorkloadResult",
    "WorkloadSupervisor",
]
