# ============================================================================
# HEALTH MONITOR
# ============================================================================
# EPOCH: 1 - TASK HEALTH MONITORING
# STATUS: Core - Per-workload health state machine
# PURPOSE: Probe, mask, count, report and escalate for one workload
# CREATED: 18 OCT 2026
# ============================================================================
"""
Health Monitor

One monitor per workload. It owns a MonitorState and a single asyncio
task that runs ticks strictly one after another.

Phases:
    PENDING     elapsed < delay_seconds, no probes yet
    MONITORING  one probe per tick
    TERMINAL    escalated: kill directive issued, no more ticks
    STOPPED     owner shut the monitor down (workload ended)

Per tick:
1. PENDING and still inside delay_seconds: sleep the remainder.
2. Run the probe (awaited; timeouts come back as failures).
3. Grace masking: a failure while elapsed < grace_period_seconds AND no
   success has ever been seen is dropped completely. No counter change,
   no report, no escalation check. Successes are never masked, and the
   first success ends masking for good even inside the grace window.
4. Success: ever_succeeded, counter reset, report healthy.
   Failure: counter + 1, report unhealthy.
5. After a failure report, if consecutive_failures >= threshold > 0:
   go TERMINAL, issue terminate_workload, then send a second report
   with terminated=True.
6. Otherwise sleep interval_seconds and tick again.

Every un-masked outcome is reported; reporting is per tick, not per
transition.
"""

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, Optional

from core.config import HealthCheckDefaults
from core.contracts import MonitorPhase
from core.logging import log_context, log_checkpoint
from core.models import HealthCheckSpec, HealthReport, MonitorState, ProbeOutcome, utcnow
from health.core import StatusReporter, TaskSupervision
from health.executor import CheckExecutor
from health.validation import ensure_valid

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
Sleep = Callable[[float], Awaitable[None]]


class HealthMonitor:
    """
    Health state machine for a single workload.

    Ticks never overlap: the next one is scheduled only after the
    current probe (including any timeout cleanup) and its reports are
    done, so the counters need no locking.
    """

    def __init__(
        self,
        task_id: str,
        spec: HealthCheckSpec,
        supervisor: TaskSupervision,
        reporter: StatusReporter,
        executor: Optional[CheckExecutor] = None,
        defaults: Optional[HealthCheckDefaults] = None,
        clock: Optional[Clock] = None,
        sleep: Optional[Sleep] = None,
    ):
        """
        Initialize monitor.

        Args:
            task_id: Workload identifier (used in reports and logs)
            spec: Health check definition (validated here)
            supervisor: Task-supervision collaborator
            reporter: Destination for health reports
            executor: Probe executor (default CheckExecutor)
            defaults: Health defaults; supplies the timeout when the
                      spec leaves it unset
            clock: Current-time source (default UTC wall clock)
            sleep: Coroutine used to wait between ticks

        Raises:
            HealthCheckValidationError: If spec is invalid
        """
        self.task_id = task_id
        self.spec = ensure_valid(spec)
        self.defaults = defaults or HealthCheckDefaults()
        self.timeout_seconds = spec.effective_timeout(self.defaults.default_timeout_seconds)

        self._supervisor = supervisor
        self._reporter = reporter
        self._executor = executor or CheckExecutor(defaults=self.defaults)
        self._clock = clock or utcnow
        self._sleep = sleep or asyncio.sleep

        self.state = MonitorState(started_at=supervisor.get_workload_start_time())
        self._phase = MonitorPhase.PENDING
        self._task: Optional[asyncio.Task] = None

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def phase(self) -> MonitorPhase:
        """Current lifecycle phase."""
        return self._phase

    @property
    def is_running(self) -> bool:
        """True while the background task is alive."""
        return self._task is not None and not self._task.done()

    def elapsed_seconds(self) -> float:
        """Seconds since the workload started."""
        return (self._clock() - self.state.started_at).total_seconds()

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start(self) -> asyncio.Task:
        """
        Start ticking in a background task.

        Returns:
            The monitor's asyncio task
        """
        if self.is_running:
            logger.warning(f"Health monitor for {self.task_id} already running")
            return self._task

        self._task = asyncio.create_task(
            self.run(),
            name=f"health-monitor-{self.task_id}",
        )
        return self._task

    async def stop(self) -> None:
        """
        Stop the monitor.

        Cancels the pending timer or in-flight probe (the probe's own
        cleanup still runs). No tick fires after this returns.
        """
        if not self._phase.is_terminal():
            self._phase = MonitorPhase.STOPPED

        task = self._task
        if task and not task.done() and task is not asyncio.current_task():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        logger.debug(f"Health monitor for {self.task_id} stopped ({self._phase.value})")

    async def run(self) -> MonitorPhase:
        """
        Tick until terminal or stopped.

        Returns:
            Final phase
        """
        with log_context(task_id=self.task_id, check_kind=self.spec.kind.value, component="monitor"):
            log_checkpoint("health_monitor_started", {
                "delay_seconds": self.spec.delay_seconds,
                "interval_seconds": self.spec.interval_seconds,
                "grace_period_seconds": self.spec.grace_period_seconds,
                "timeout_seconds": self.timeout_seconds,
                "consecutive_failures": self.spec.consecutive_failures,
            })

            while True:
                delay = await self.tick()
                if delay is None:
                    break
                await self._sleep(delay)

            return self._phase

    # =========================================================================
    # STATE MACHINE
    # =========================================================================

    async def tick(self) -> Optional[float]:
        """
        Execute one scheduled tick.

        Returns:
            Seconds until the next tick, or None if no further tick
            may be scheduled
        """
        if self._phase.is_terminal():
            return None

        if self._phase == MonitorPhase.PENDING:
            remaining = self.spec.delay_seconds - self.elapsed_seconds()
            if remaining > 0:
                return remaining
            self._phase = MonitorPhase.MONITORING
            logger.info(f"Health monitoring started for {self.task_id}")

        outcome = await self._executor.execute(
            self.spec.kind,
            self.spec.payload,
            self.timeout_seconds,
        )

        # Stopped while the probe was in flight
        if self._phase.is_terminal():
            return None

        self.state.probes_run += 1
        self.state.last_probe_at = outcome.observed_at

        if outcome.healthy:
            await self._on_success(outcome)
            return self.spec.interval_seconds

        if self._within_grace():
            self.state.probes_masked += 1
            logger.debug(
                f"Ignoring failure of {self.task_id} during grace period: {outcome.error}"
            )
            return self.spec.interval_seconds

        await self._on_failure(outcome)

        if self._should_escalate():
            await self._escalate()
            return None

        return self.spec.interval_seconds

    def _within_grace(self) -> bool:
        """Failures are masked only until the first success ever."""
        if self.state.ever_succeeded:
            return False
        return self.elapsed_seconds() < self.spec.grace_period_seconds

    def _should_escalate(self) -> bool:
        threshold = self.spec.consecutive_failures
        return threshold > 0 and self.state.consecutive_failures >= threshold

    async def _on_success(self, outcome: ProbeOutcome) -> None:
        if self.state.consecutive_failures > 0:
            logger.info(
                f"{self.task_id} healthy again after "
                f"{self.state.consecutive_failures} consecutive failure(s)"
            )
        self.state.record_success()
        await self._report(healthy=True, observed_at=outcome.observed_at)

    async def _on_failure(self, outcome: ProbeOutcome) -> None:
        count = self.state.record_failure()
        logger.warning(
            f"Health check failed for {self.task_id} "
            f"({count} consecutive): {outcome.error}"
        )
        await self._report(healthy=False, observed_at=outcome.observed_at, message=outcome.error)

    async def _escalate(self) -> None:
        """Transition to TERMINAL, issue the kill, send the terminal report."""
        self.state.terminal = True
        self._phase = MonitorPhase.TERMINAL

        reason = (
            f"Health check failed {self.state.consecutive_failures} "
            f"consecutive time(s) (threshold {self.spec.consecutive_failures})"
        )
        log_checkpoint("health_escalated", {
            "consecutive_failures": self.state.consecutive_failures,
            "reason": reason,
        })
        logger.error(f"Killing {self.task_id}: {reason}")

        try:
            self._supervisor.terminate_workload(reason)
        except Exception as e:
            # Delivery failure: stay terminal, supervisor owns retries
            logger.error(f"Failed to issue kill directive for {self.task_id}: {e}")

        await self._report(healthy=False, terminated=True, observed_at=utcnow(), message=reason)

    async def _report(
        self,
        healthy: bool,
        observed_at: datetime,
        terminated: bool = False,
        message: Optional[str] = None,
    ) -> None:
        report = HealthReport(
            task_id=self.task_id,
            healthy=healthy,
            terminated=terminated,
            observed_at=observed_at,
            consecutive_failures=self.state.consecutive_failures,
            message=message,
        )
        self.state.last_reported_healthy = healthy
        self.state.reports_emitted += 1

        try:
            await self._reporter.on_health_report(report)
        except Exception as e:
            logger.error(f"Status reporter failed for {self.task_id}: {e}")

    # =========================================================================
    # STATUS
    # =========================================================================

    def to_dict(self) -> dict:
        """Snapshot for status endpoints and logs."""
        return {
            "task_id": self.task_id,
            "phase": self._phase.value,
            "check_kind": self.spec.kind.value,
            "timeout_seconds": self.timeout_seconds,
            "state": self.state.to_dict(),
        }


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "HealthMonitor",
]
