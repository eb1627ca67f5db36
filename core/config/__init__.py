# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# EPOCH: 1 - TASK HEALTH MONITORING
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 18 OCT 2026
# ============================================================================
"""
Configuration Module

Provides centralized configuration and defaults for health monitoring.
"""

from core.config.defaults import (
    HealthCheckDefaults,
    SupervisorDefaults,
    Defaults,
    get_defaults,
    reset_defaults,
)

__all__ = [
    "HealthCheckDefaults",
    "SupervisorDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
