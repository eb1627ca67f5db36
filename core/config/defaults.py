# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# EPOCH: 1 - TASK HEALTH MONITORING
# STATUS: Core - Default configuration values
# PURPOSE: Centralized defaults for probes, timeouts and workload shutdown
# CREATED: 18 OCT 2026
# ============================================================================
"""
Configuration Defaults

Provides sensible defaults for health probing and workload supervision.
These can be overridden via environment variables.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Passed explicitly into monitors and supervisors (never read
  from inside the state machine)
"""

import os
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class HealthCheckDefaults:
    """
    Defaults for health probes.

    Controls probe timeouts, target host and diagnostics.
    """
    # Applied when a health check leaves timeout_seconds unset
    default_timeout_seconds: float = 20.0

    # Probes always target the workload on the local host
    probe_host: str = "localhost"

    # Local HTTPS endpoints usually carry self-signed certificates
    http_verify_tls: bool = False

    # Truncation length for stderr / exception text in outcomes
    max_diagnostic_chars: int = 2000

    @classmethod
    def from_env(cls) -> "HealthCheckDefaults":
        """Create from environment variables."""
        return cls(
            default_timeout_seconds=float(os.getenv("TASKHEALTH_DEFAULT_TIMEOUT_SEC", 20.0)),
            probe_host=os.getenv("TASKHEALTH_PROBE_HOST", "localhost"),
            http_verify_tls=os.getenv("TASKHEALTH_HTTP_VERIFY_TLS", "false").lower() == "true",
            max_diagnostic_chars=int(os.getenv("TASKHEALTH_MAX_DIAGNOSTIC_CHARS", 2000)),
        )


@dataclass(frozen=True)
class SupervisorDefaults:
    """
    Defaults for workload supervision.

    Controls the two-phase kill (SIGTERM, wait, SIGKILL).
    """
    kill_grace_period_seconds: float = 3.0

    # Shell used to launch workloads and shell health checks
    shell: str = "/bin/sh"

    @classmethod
    def from_env(cls) -> "SupervisorDefaults":
        """Create from environment variables."""
        return cls(
            kill_grace_period_seconds=float(os.getenv("TASKHEALTH_KILL_GRACE_SEC", 3.0)),
            shell=os.getenv("TASKHEALTH_SHELL", "/bin/sh"),
        )


# ============================================================================
# GLOBAL DEFAULTS INSTANCE
# ============================================================================

@dataclass
class Defaults:
    """Container for all default configurations."""
    health: HealthCheckDefaults = field(default_factory=HealthCheckDefaults)
    supervisor: SupervisorDefaults = field(default_factory=SupervisorDefaults)

    @classmethod
    def from_env(cls) -> "Defaults":
        """Create all defaults from environment variables."""
        return cls(
            health=HealthCheckDefaults.from_env(),
            supervisor=SupervisorDefaults.from_env(),
        )


_defaults: Optional[Defaults] = None


def get_defaults() -> Defaults:
    """Get process defaults instance (read once from the environment)."""
    global _defaults
    if _defaults is None:
        _defaults = Defaults.from_env()
    return _defaults


def reset_defaults() -> None:
    """Reset defaults (for testing)."""
    global _defaults
    _defaults = None


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "HealthCheckDefaults",
    "SupervisorDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
