# ============================================================================
# CLAUDE CONTEXT - CORE MODULE
# ============================================================================
# EPOCH: 1 - TASK HEALTH MONITORING
# STATUS: Core module initialization
# PURPOSE: Export core contracts and models
# LAST_REVIEWED: 18 OCT 2026
# ============================================================================

from core.contracts import CheckKind, MonitorPhase, WorkloadState
from core.models import (
    HealthCheckSpec,
    CommandPayload,
    HttpPayload,
    TcpPayload,
    ProbeOutcome,
    HealthReport,
    MonitorState,
)

__all__ = [
    # Enums
    "CheckKind",
    "MonitorPhase",
    "WorkloadState",
    # Models
    "HealthCheckSpec",
    "CommandPayload",
    "HttpPayload",
    "TcpPayload",
    "ProbeOutcome",
    "HealthReport",
    "MonitorState",
]
