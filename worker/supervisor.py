# ============================================================================
# WORKLOAD SUPERVISOR
# ============================================================================
# EPOCH: 1 - TASK HEALTH MONITORING
# STATUS: Core - Workload process supervision
# PURPOSE: Launch a workload, own its health monitor, kill it on escalation
# CREATED: 18 OCT 2026
# ============================================================================
"""
Workload Supervisor

Runs one shell command as a supervised workload:

1. Validate the health check (nothing is spawned if it is invalid)
2. Collect environment decorations, run PRE_LAUNCH hooks
3. Spawn the workload in its own process group
4. Run POST_LAUNCH hooks, start the HealthMonitor
5. On escalation: SIGTERM the group, wait kill_grace_period_seconds,
   SIGKILL if still alive
6. On exit: stop the monitor, run REMOVE hooks, return a WorkloadResult

Usage:
    supervisor = WorkloadSupervisor(
        "task-1",
        "python -m http.server 8080",
        health_check=HealthCheckSpec.http_check(8080),
    )
    result = await supervisor.run()
"""

import asyncio
import logging
import os
import signal
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.config import Defaults, get_defaults
from core.contracts import MonitorPhase, WorkloadState
from core.logging import log_context, log_checkpoint
from core.models import HealthCheckSpec, utcnow
from health.core import StatusReporter, TaskSupervision
from health.executor import CheckExecutor
from health.monitor import HealthMonitor
from health.validation import ensure_valid
from hooks.registry import HookContext, HookFailure, HookRegistry, get_registry
from worker.reporter import LoggingReporter

logger = logging.getLogger(__name__)


# ============================================================================
# ERRORS & RESULTS
# ============================================================================

class SupervisorError(Exception):
    """Raised when the supervisor is used out of order or cannot launch."""

    def __init__(self, message: str, task_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.task_id = task_id


@dataclass
class WorkloadResult:
    """Final outcome of a supervised workload."""
    task_id: str
    state: WorkloadState
    exit_code: Optional[int] = None
    killed_by_health_check: bool = False
    kill_reason: Optional[str] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    hook_failures: List[HookFailure] = field(default_factory=list)

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.started_at is None or self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "task_id": self.task_id,
            "state": self.state.value,
            "exit_code": self.exit_code,
            "killed_by_health_check": self.killed_by_health_check,
            "kill_reason": self.kill_reason,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "duration_seconds": self.duration_seconds,
            "hook_failures": [
                {"hook": f.hook, "point": f.point.value, "error": f.error}
                for f in self.hook_failures
            ],
        }


# ============================================================================
# SUPERVISOR
# ============================================================================

class WorkloadSupervisor(TaskSupervision):
    """
    Supervises one workload process and its health monitor.

    terminate_workload() never blocks: it schedules the two-phase kill
    on the running loop and returns.
    """

    def __init__(
        self,
        task_id: str,
        command: str,
        health_check: Optional[HealthCheckSpec] = None,
        reporter: Optional[StatusReporter] = None,
        hooks: Optional[HookRegistry] = None,
        defaults: Optional[Defaults] = None,
        executor: Optional[CheckExecutor] = None,
        environment: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize supervisor.

        Args:
            task_id: Workload identifier
            command: Shell command to run
            health_check: Optional health check definition
            reporter: Destination for health reports (default LoggingReporter)
            hooks: Lifecycle hooks (default: process-wide registry)
            defaults: Probe and kill defaults (default: from environment)
            executor: Probe executor override
            environment: Extra environment variables for the workload
        """
        self.task_id = task_id
        self.command = command
        self.health_check = health_check
        self.reporter = reporter or LoggingReporter()
        self.hooks = hooks if hooks is not None else get_registry()
        self.defaults = defaults or get_defaults()

        self._executor = executor or CheckExecutor(
            defaults=self.defaults.health,
            shell=self.defaults.supervisor.shell,
        )
        self._environment = dict(environment or {})

        self._state = WorkloadState.STAGING
        self._process: Optional[asyncio.subprocess.Process] = None
        self._monitor: Optional[HealthMonitor] = None
        self._context: Optional[HookContext] = None
        self._started_at: Optional[datetime] = None
        self._kill_task: Optional[asyncio.Task] = None
        self._kill_reason: Optional[str] = None
        self._hook_failures: List[HookFailure] = []
        self._result: Optional[WorkloadResult] = None

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def state(self) -> WorkloadState:
        return self._state

    @property
    def pid(self) -> Optional[int]:
        return self._process.pid if self._process else None

    @property
    def monitor(self) -> Optional[HealthMonitor]:
        return self._monitor

    # =========================================================================
    # TASK SUPERVISION
    # =========================================================================

    def get_workload_start_time(self) -> datetime:
        """
        When the workload process was spawned.

        Raises:
            SupervisorError: If the workload has not been launched
        """
        if self._started_at is None:
            raise SupervisorError(f"Workload {self.task_id} has not been launched", self.task_id)
        return self._started_at

    def terminate_workload(self, reason: str) -> None:
        """
        Request termination of the workload.

        Schedules SIGTERM, then SIGKILL after the kill grace period.
        Repeated calls are ignored.
        """
        if self._kill_task is not None:
            logger.debug(f"Termination of {self.task_id} already in progress")
            return

        if self._process is None or self._process.returncode is not None:
            logger.info(f"Not terminating {self.task_id}: workload is not running")
            return

        self._kill_reason = reason
        logger.warning(f"Terminating {self.task_id}: {reason}")

        self._kill_task = asyncio.get_running_loop().create_task(
            self._kill_sequence(),
            name=f"kill-workload-{self.task_id}",
        )

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def launch(self) -> int:
        """
        Launch the workload and start health monitoring.

        Returns:
            Workload PID

        Raises:
            HealthCheckValidationError: If the health check is invalid
            SupervisorError: If already launched or the spawn fails
        """
        if self._process is not None:
            raise SupervisorError(f"Workload {self.task_id} already launched", self.task_id)

        with log_context(task_id=self.task_id, component="supervisor"):
            if self.health_check is not None:
                ensure_valid(self.health_check)

            ctx = HookContext(
                task_id=self.task_id,
                command=self.command,
                environment=dict(self._environment),
            )
            ctx.environment.update(await self.hooks.decorate_environment(ctx))
            self._context = ctx

            self._hook_failures.extend(await self.hooks.run_pre_launch(ctx))

            try:
                self._process = await asyncio.create_subprocess_exec(
                    self.defaults.supervisor.shell, "-c", self.command,
                    env={**os.environ, **ctx.environment},
                    start_new_session=True,
                )
            except OSError as e:
                self._state = WorkloadState.FAILED
                raise SupervisorError(
                    f"Failed to launch {self.task_id}: {e}", self.task_id
                ) from e

            self._started_at = utcnow()
            self._state = WorkloadState.RUNNING
            ctx.pid = self._process.pid
            ctx.started_at = self._started_at

            log_checkpoint("workload_launched", {
                "pid": self._process.pid,
                "command": self.command,
                "health_check": self.health_check.kind.value if self.health_check else None,
            })

            self._hook_failures.extend(await self.hooks.run_post_launch(ctx))

            if self.health_check is not None:
                self._monitor = HealthMonitor(
                    self.task_id,
                    self.health_check,
                    supervisor=self,
                    reporter=self.reporter,
                    executor=self._executor,
                    defaults=self.defaults.health,
                )
                self._monitor.start()

            return self._process.pid

    async def wait(self) -> WorkloadResult:
        """
        Wait for the workload to exit and clean up.

        Stops the monitor, finishes any kill in progress and runs
        REMOVE hooks.

        Raises:
            SupervisorError: If the workload has not been launched
        """
        if self._result is not None:
            return self._result
        if self._process is None:
            raise SupervisorError(f"Workload {self.task_id} has not been launched", self.task_id)

        exit_code = await self._process.wait()
        finished_at = utcnow()

        with log_context(task_id=self.task_id, component="supervisor"):
            if self._monitor is not None:
                await self._monitor.stop()

            if self._kill_task is not None:
                await self._kill_task

            if self._kill_reason is not None:
                self._state = WorkloadState.KILLED
            elif exit_code == 0:
                self._state = WorkloadState.FINISHED
            else:
                self._state = WorkloadState.FAILED

            if self._context is not None:
                self._context.exit_code = exit_code
                self._hook_failures.extend(await self.hooks.run_remove(self._context))

            self._result = WorkloadResult(
                task_id=self.task_id,
                state=self._state,
                exit_code=exit_code,
                killed_by_health_check=(
                    self._monitor is not None
                    and self._monitor.phase == MonitorPhase.TERMINAL
                ),
                kill_reason=self._kill_reason,
                started_at=self._started_at,
                finished_at=finished_at,
                hook_failures=list(self._hook_failures),
            )

            log_checkpoint("workload_exited", self._result.to_dict())

        return self._result

    async def run(self) -> WorkloadResult:
        """Launch the workload and wait for it."""
        await self.launch()
        return await self.wait()

    # =========================================================================
    # KILL SEQUENCE
    # =========================================================================

    async def _kill_sequence(self) -> None:
        grace = self.defaults.supervisor.kill_grace_period_seconds

        self._signal_group(signal.SIGTERM)
        try:
            await asyncio.wait_for(self._process.wait(), timeout=grace)
            return
        except asyncio.TimeoutError:
            logger.warning(
                f"{self.task_id} still running {grace}s after SIGTERM, sending SIGKILL"
            )

        self._signal_group(signal.SIGKILL)

    def _signal_group(self, sig: signal.Signals) -> None:
        if self._process is None or self._process.returncode is not None:
            return
        try:
            os.killpg(self._process.pid, sig)
        except ProcessLookupError:
            logger.debug(f"Process group {self._process.pid} already gone")

    # =========================================================================
    # STATUS
    # =========================================================================

    def status(self) -> Dict[str, Any]:
        """Snapshot for status queries."""
        return {
            "task_id": self.task_id,
            "state": self._state.value,
            "pid": self.pid,
            "command": self.command,
            "started_at": self._started_at.isoformat() if self._started_at else None,
            "exit_code": self._process.returncode if self._process else None,
            "kill_reason": self._kill_reason,
            "monitor": self._monitor.to_dict() if self._monitor else None,
        }


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "SupervisorError",
    "WorkloadResult",
    "WorkloadSupervisor",
]
