# ============================================================================
# CLAUDE CONTEXT - MONITOR STATE MODEL
# ============================================================================
# EPOCH: 1 - TASK HEALTH MONITORING
# STATUS: Core model - Mutable state of one health monitor
# PURPOSE: Counters and flags driving grace masking and escalation
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: MonitorState
# DEPENDENCIES: dataclasses
# ============================================================================
"""
Monitor State

Owned exclusively by one HealthMonitor instance and mutated only by its
own ticks. Created when the workload starts running, discarded when the
workload ends.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class MonitorState:
    """Runtime state of a single workload's health monitor."""
    started_at: datetime
    ever_succeeded: bool = False          # Sticky once set
    consecutive_failures: int = 0         # Reset on any success
    last_reported_healthy: Optional[bool] = None  # Informational only
    terminal: bool = False                # Escalation fired

    # Metrics
    probes_run: int = 0
    probes_masked: int = 0
    reports_emitted: int = 0
    last_probe_at: Optional[datetime] = None

    def record_success(self) -> None:
        """Apply an un-masked healthy outcome."""
        self.ever_succeeded = True
        self.consecutive_failures = 0

    def record_failure(self) -> int:
        """Apply an un-masked unhealthy outcome, returning the new count."""
        self.consecutive_failures += 1
        return self.consecutive_failures

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for status snapshots."""
        return {
            "started_at": self.started_at.isoformat(),
            "ever_succeeded": self.ever_succeeded,
            "consecutive_failures": self.consecutive_failures,
            "last_reported_healthy": self.last_reported_healthy,
            "terminal": self.terminal,
            "probes_run": self.probes_run,
            "probes_masked": self.probes_masked,
            "reports_emitted": self.reports_emitted,
            "last_probe_at": self.last_probe_at.isoformat() if self.last_probe_at else None,
        }
