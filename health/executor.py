# ============================================================================
# HEALTH CHECK EXECUTOR
# ============================================================================
# EPOCH: 1 - TASK HEALTH MONITORING
# STATUS: Core - Single probe execution with timeout
# PURPOSE: Run one probe of a configured kind and produce a ProbeOutcome
# CREATED: 18 OCT 2026
# ============================================================================
"""
Health Check Executor

Executes exactly one probe per call with:
- Dispatch on check kind (command / http / tcp) through a fixed table
- Uniform timeout enforcement
- Error capture: nothing a probe does ever raises to the caller

Timeout semantics:
    The probe coroutine runs under asyncio.wait_for. On expiry it is
    cancelled and its cleanup (killing the child process group, closing
    the socket or HTTP client) completes before the timed-out outcome is
    returned. A timeout is a failure outcome like any other.

The executor keeps no state between calls.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Dict, Optional

import httpx

from core.config import HealthCheckDefaults
from core.contracts import CheckKind
from core.models import Payload, ProbeOutcome, utcnow
from health.checks import probe_command, probe_http, probe_tcp

logger = logging.getLogger(__name__)

ProbeFunc = Callable[[Payload], Awaitable[ProbeOutcome]]


class CheckExecutor:
    """
    Runs a single health probe with a timeout.

    The monitor awaits execute() once per tick; the only suspension
    point is the probe itself.
    """

    def __init__(
        self,
        defaults: Optional[HealthCheckDefaults] = None,
        shell: str = "/bin/sh",
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize executor.

        Args:
            defaults: Probe host, TLS and diagnostic settings
            shell: Interpreter for shell command checks
            http_transport: Optional httpx transport for HTTP checks
        """
        self.defaults = defaults or HealthCheckDefaults()
        self.shell = shell
        self._http_transport = http_transport

        self._probes: Dict[CheckKind, ProbeFunc] = {
            CheckKind.COMMAND: self._probe_command,
            CheckKind.HTTP: self._probe_http,
            CheckKind.TCP: self._probe_tcp,
        }

    async def execute(
        self,
        kind: CheckKind,
        payload: Payload,
        timeout_seconds: float,
    ) -> ProbeOutcome:
        """
        Execute one probe.

        Args:
            kind: Check kind selecting the probe
            payload: Payload matching kind
            timeout_seconds: Upper bound on the probe's duration

        Returns:
            ProbeOutcome (timed_out=True if the bound was hit)
        """
        start_time = time.monotonic()
        probe = self._probes.get(kind)

        if probe is None or payload is None:
            outcome = ProbeOutcome.failure(f"No probe available for check kind '{kind}'")
            logger.error(outcome.error)
            return outcome

        try:
            outcome = await asyncio.wait_for(probe(payload), timeout=timeout_seconds)

        except asyncio.TimeoutError:
            logger.warning(f"Health probe ({kind.value}) timed out after {timeout_seconds}s")
            outcome = ProbeOutcome.timeout(timeout_seconds)

        except Exception as e:
            logger.exception(f"Health probe ({kind.value}) raised unexpectedly")
            outcome = ProbeOutcome.failure(
                f"{type(e).__name__}: {e}"[:self.defaults.max_diagnostic_chars],
                exception_type=type(e).__name__,
            )

        outcome.duration_ms = (time.monotonic() - start_time) * 1000
        outcome.observed_at = utcnow()

        logger.debug(
            f"Health probe ({kind.value}): healthy={outcome.healthy} "
            f"({outcome.duration_ms:.1f}ms)"
        )

        return outcome

    async def _probe_command(self, payload: Payload) -> ProbeOutcome:
        return await probe_command(payload, self.defaults, shell=self.shell)

    async def _probe_http(self, payload: Payload) -> ProbeOutcome:
        return await probe_http(payload, self.defaults, transport=self._http_transport)

    async def _probe_tcp(self, payload: Payload) -> ProbeOutcome:
        return await probe_tcp(payload, self.defaults)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "CheckExecutor",
]
