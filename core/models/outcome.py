# ============================================================================
# CLAUDE CONTEXT - PROBE OUTCOME & HEALTH REPORT MODELS
# ============================================================================
# EPOCH: 1 - TASK HEALTH MONITORING
# STATUS: Core model - Results flowing out of executor and monitor
# PURPOSE: Probe results and the reports sent to the supervising process
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: ProbeOutcome, HealthReport
# DEPENDENCIES: dataclasses
# ============================================================================
"""
Probe Outcome & Health Report

ProbeOutcome is what one Check Executor invocation produces.
HealthReport is what the Health Monitor emits for every un-masked
outcome, plus one terminal report on escalation.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


@dataclass
class ProbeOutcome:
    """Result of a single probe."""
    healthy: bool
    timed_out: bool = False
    error: Optional[str] = None
    observed_at: datetime = field(default_factory=utcnow)
    duration_ms: float = 0.0
    details: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.timed_out:
            self.healthy = False

    @classmethod
    def success(cls, **details) -> "ProbeOutcome":
        """Create healthy outcome."""
        return cls(healthy=True, details=details)

    @classmethod
    def failure(cls, error: str, **details) -> "ProbeOutcome":
        """Create unhealthy outcome with a diagnostic."""
        return cls(healthy=False, error=error, details=details)

    @classmethod
    def timeout(cls, timeout_seconds: float, **details) -> "ProbeOutcome":
        """Create timed-out outcome."""
        return cls(
            healthy=False,
            timed_out=True,
            error=f"Timeout after {timeout_seconds}s",
            details=details,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {
            "healthy": self.healthy,
            "timed_out": self.timed_out,
            "observed_at": self.observed_at.isoformat(),
            "duration_ms": round(self.duration_ms, 2),
        }
        if self.error:
            result["error"] = self.error
        if self.details:
            result["details"] = self.details
        return result


@dataclass
class HealthReport:
    """
    One health determination for a workload.

    A terminal report (terminated=True) is always unhealthy and is sent
    once, after the kill directive, so observers can tell an escalation
    apart from an ordinary failure.
    """
    task_id: str
    healthy: bool
    terminated: bool = False
    observed_at: datetime = field(default_factory=utcnow)
    consecutive_failures: int = 0
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for observers."""
        result = {
            "task_id": self.task_id,
            "healthy": self.healthy,
            "terminated": self.terminated,
            "observed_at": self.observed_at.isoformat(),
            "consecutive_failures": self.consecutive_failures,
        }
        if self.message:
            result["message"] = self.message
        return result
