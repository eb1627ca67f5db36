# ============================================================================
# HEALTH PROBES
# ============================================================================
# EPOCH: 1 - TASK HEALTH MONITORING
# STATUS: Core - Probe implementations
# PURPOSE: One coroutine per check kind
# CREATED: 18 OCT 2026
# ============================================================================
"""
Health Probes

One probe coroutine per check kind:
- probe_command: run a child process, exit 0 is healthy
- probe_http: GET the local endpoint, any response is healthy
- probe_tcp: connect to the local port

Probes never enforce their own timeout; the executor wraps them.
"""

from health.checks.command import probe_command
from health.checks.http import probe_http
from health.checks.tcp import probe_tcp

__all__ = [
    "probe_command",
    "probe_http",
    "probe_tcp",
]
