# ============================================================================
# HTTP PROBE
# ============================================================================
# EPOCH: 1 - TASK HEALTH MONITORING
# STATUS: Core - HTTP reachability probe
# PURPOSE: GET the workload's health endpoint on the local host
# CREATED: 18 OCT 2026
# ============================================================================
"""
HTTP Probe

Issues GET scheme://<probe host>:port/path (scheme defaults to http,
path to '/').

Any response counts as healthy: the status code is recorded in the
outcome details but does not decide health. Transport failures
(refused, reset, TLS, protocol errors) are unhealthy.

No client-side timeout is set here; the executor bounds the whole
probe and cancellation closes the client.
"""

import logging
from typing import Optional

import httpx

from core.config import HealthCheckDefaults
from core.models import HttpPayload, ProbeOutcome

logger = logging.getLogger(__name__)

DEFAULT_SCHEME = "http"
DEFAULT_PATH = "/"


def build_url(payload: HttpPayload, host: str) -> str:
    """Target URL for an HTTP payload."""
    scheme = payload.scheme or DEFAULT_SCHEME
    path = payload.path or DEFAULT_PATH
    return f"{scheme}://{host}:{payload.port}{path}"


async def probe_http(
    payload: HttpPayload,
    defaults: HealthCheckDefaults,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ProbeOutcome:
    """
    Run an HTTP health probe.

    Args:
        payload: Port, scheme and path to probe
        defaults: Probe host and TLS settings
        transport: Optional httpx transport (tests inject a MockTransport)

    Returns:
        Healthy outcome if a response was received
    """
    url = build_url(payload, defaults.probe_host)

    try:
        async with httpx.AsyncClient(
            timeout=None,
            verify=defaults.http_verify_tls,
            transport=transport,
        ) as client:
            response = await client.get(url)

    except httpx.HTTPError as e:
        logger.debug(f"HTTP probe {url} failed: {e}")
        return ProbeOutcome.failure(
            f"Cannot reach {url}: {type(e).__name__}: {e}"[:defaults.max_diagnostic_chars],
            url=url,
        )

    return ProbeOutcome.success(url=url, status_code=response.status_code)


__all__ = [
    "build_url",
    "probe_http",
]
