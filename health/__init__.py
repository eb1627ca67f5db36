# ============================================================================
# HEALTH CHECK MODULE
# ============================================================================
# EPOCH: 1 - TASK HEALTH MONITORING
# STATUS: Core - Task health monitoring
# PURPOSE: Probe workloads, mask startup noise, escalate to kill
# CREATED: 18 OCT 2026
# ============================================================================
"""
Health Check Module

Per-workload health monitoring for a task orchestrator:
- validate_health_check: static validation before admission
- CheckExecutor: one command / HTTP / TCP probe with a timeout
- HealthMonitor: delay, grace masking, consecutive failures, escalation
- TaskSupervision / StatusReporter: collaborator interfaces

Usage:
    from health import HealthMonitor, load_health_check

    spec = load_health_check("health.yaml")
    monitor = HealthMonitor("task-1", spec, supervisor, reporter)
    monitor.start()
    ...
    await monitor.stop()
"""

from health.core import TaskSupervision, StatusReporter
from health.validation import (
    HealthCheckError,
    HealthCheckValidationError,
    validate_health_check,
    ensure_valid,
)
from health.executor import CheckExecutor
from health.monitor import HealthMonitor
from health.loader import HealthCheckConfigError, parse_health_check, load_health_check

__all__ = [
    # Interfaces
    "TaskSupervision",
    "StatusReporter",
    # Validation
    "HealthCheckError",
    "HealthCheckValidationError",
    "validate_health_check",
    "ensure_valid",
    # Execution
    "CheckExecutor",
    "HealthMonitor",
    # Configuration
    "HealthCheckConfigError",
    "parse_health_check",
    "load_health_check",
]
