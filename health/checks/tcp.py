# ============================================================================
# TCP PROBE
# ============================================================================
# EPOCH: 1 - TASK HEALTH MONITORING
# STATUS: Core - TCP connect probe
# PURPOSE: Check that the workload accepts connections on its port
# CREATED: 18 OCT 2026
# ============================================================================
"""
TCP Probe

Opens a connection to <probe host>:port. A completed connect is healthy;
refusal or any socket error is unhealthy. The connection is closed
immediately, including when the probe is cancelled mid-close.
"""

import asyncio
import logging

from core.config import HealthCheckDefaults
from core.models import TcpPayload, ProbeOutcome

logger = logging.getLogger(__name__)


async def probe_tcp(
    payload: TcpPayload,
    defaults: HealthCheckDefaults,
) -> ProbeOutcome:
    """
    Run a TCP health probe.

    Args:
        payload: Port to connect to
        defaults: Probe host settings

    Returns:
        Healthy outcome if the connection was established
    """
    host = defaults.probe_host

    try:
        _, writer = await asyncio.open_connection(host, payload.port)
    except OSError as e:
        logger.debug(f"TCP probe {host}:{payload.port} failed: {e}")
        return ProbeOutcome.failure(
            f"Connection to {host}:{payload.port} failed: {e}"[:defaults.max_diagnostic_chars],
            host=host,
            port=payload.port,
        )

    try:
        writer.close()
        await writer.wait_closed()
    except OSError as e:
        # Peer reset after a completed connect is still a pass
        logger.debug(f"TCP probe close error on {host}:{payload.port}: {e}")

    return ProbeOutcome.success(host=host, port=payload.port)


__all__ = [
    "probe_tcp",
]
