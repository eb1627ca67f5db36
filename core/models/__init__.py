# ============================================================================
# CLAUDE CONTEXT - MODELS MODULE
# ============================================================================
# EPOCH: 1 - TASK HEALTH MONITORING
# STATUS: Model exports
# PURPOSE: Central export point for health check models
# LAST_REVIEWED: 18 OCT 2026
# ============================================================================
"""
Models Module - Central Export Point

Configuration (pydantic) and runtime (dataclass) models for health
monitoring.
"""

from core.models.health_check import (
    HealthCheckSpec,
    CommandPayload,
    HttpPayload,
    TcpPayload,
    Payload,
)
from core.models.outcome import ProbeOutcome, HealthReport, utcnow
from core.models.monitor_state import MonitorState

__all__ = [
    # Configuration
    "HealthCheckSpec",
    "CommandPayload",
    "HttpPayload",
    "TcpPayload",
    "Payload",
    # Runtime
    "ProbeOutcome",
    "HealthReport",
    "MonitorState",
    "utcnow",
]
