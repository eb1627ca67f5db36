# ============================================================================
# CLAUDE CONTEXT - BASE CONTRACTS & ENUMS
# ============================================================================
# EPOCH: 1 - TASK HEALTH MONITORING
# STATUS: Foundation - Core enums shared by monitor, executor, supervisor
# PURPOSE: Define check kinds and lifecycle enums for health monitoring
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: CheckKind, MonitorPhase, WorkloadState, HTTP_SCHEMES
# DEPENDENCIES: enum
# ============================================================================
"""
Base contracts for the task health subsystem.

These enums cross every boundary in the package:
- Configuration (YAML / dict health check definitions)
- Monitor (state machine phases)
- Supervisor (workload lifecycle)
"""

from enum import Enum


# ============================================================================
# CHECK KINDS
# ============================================================================

class CheckKind(str, Enum):
    """
    Kind of probe a health check runs.

    UNKNOWN is accepted by the configuration layer so that a bad value
    reaches the validator (and gets a precise error) instead of failing
    deep inside model parsing. It is never valid for monitoring.
    """
    COMMAND = "command"
    HTTP = "http"
    TCP = "tcp"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value):
        """Map unrecognised strings to UNKNOWN."""
        if isinstance(value, str):
            lowered = value.lower()
            for member in cls:
                if member.value == lowered:
                    return member
            return cls.UNKNOWN
        return None

    def is_known(self) -> bool:
        """Check if this kind can actually be probed."""
        return self is not CheckKind.UNKNOWN


# Schemes an HTTP check may use
HTTP_SCHEMES = ("http", "https")


# ============================================================================
# MONITOR PHASES
# ============================================================================

class MonitorPhase(str, Enum):
    """
    Health monitor lifecycle.

    State transitions:
        PENDING -> MONITORING -> TERMINAL  (escalated)
                              -> STOPPED   (workload ended some other way)
        PENDING -> STOPPED
    """
    PENDING = "pending"          # Waiting out delay_seconds
    MONITORING = "monitoring"    # Steady-state probing
    TERMINAL = "terminal"        # Escalated, kill directive issued
    STOPPED = "stopped"          # Shut down by the owner

    def is_terminal(self) -> bool:
        """Check if no further ticks may run."""
        return self in (MonitorPhase.TERMINAL, MonitorPhase.STOPPED)


# ============================================================================
# WORKLOAD STATES
# ============================================================================

class WorkloadState(str, Enum):
    """
    Supervised workload lifecycle.

    State transitions:
        STAGING -> RUNNING -> FINISHED
                           -> FAILED
                           -> KILLED
    """
    STAGING = "staging"          # Accepted, not yet spawned
    RUNNING = "running"          # Process alive
    FINISHED = "finished"        # Exited with status 0
    FAILED = "failed"            # Exited non-zero (or failed to spawn)
    KILLED = "killed"            # Terminated by a kill directive

    def is_terminal(self) -> bool:
        """Check if this is a terminal state."""
        return self in (WorkloadState.FINISHED, WorkloadState.FAILED, WorkloadState.KILLED)


__all__ = [
    "CheckKind",
    "HTTP_SCHEMES",
    "MonitorPhase",
    "WorkloadState",
]
