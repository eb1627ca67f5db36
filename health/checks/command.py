# ============================================================================
# COMMAND PROBE
# ============================================================================
# EPOCH: 1 - TASK HEALTH MONITORING
# STATUS: Core - Child process health probe
# PURPOSE: Run a command and map its exit status to health
# CREATED: 18 OCT 2026
# ============================================================================
"""
Command Probe

Spawns the configured command in its own process group:
- shell=True: value runs through the configured shell (`sh -c value`)
- shell=False: value is the program path, arguments is argv

The child inherits the parent environment overlaid with the check's
environment. stdout is discarded; stderr is kept as the diagnostic when
the command fails.

If the probe is cancelled (timeout or monitor shutdown) the whole
process group is killed and reaped before the cancellation propagates.
"""

import asyncio
import logging
import os
import signal
from typing import List

from core.config import HealthCheckDefaults
from core.models import CommandPayload, ProbeOutcome

logger = logging.getLogger(__name__)


def build_argv(payload: CommandPayload, shell: str) -> List[str]:
    """
    Build the argv for a command payload.

    For non-shell commands, arguments carries the full argv including
    argv[0]; when it is empty argv is just [value].
    """
    if payload.shell:
        return [shell, "-c", payload.value]
    return list(payload.arguments) or [payload.value]


def build_environment(payload: CommandPayload) -> dict:
    """Parent environment with the payload's overrides applied."""
    env = dict(os.environ)
    env.update(payload.environment)
    return env


def kill_process_group(process: asyncio.subprocess.Process) -> None:
    """SIGKILL the process group led by process (no-op if already gone)."""
    try:
        os.killpg(process.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass


async def probe_command(
    payload: CommandPayload,
    defaults: HealthCheckDefaults,
    shell: str = "/bin/sh",
) -> ProbeOutcome:
    """
    Run a command health probe.

    Args:
        payload: Command to run
        defaults: Diagnostic settings
        shell: Interpreter for shell commands

    Returns:
        Healthy outcome on exit status 0, unhealthy otherwise
    """
    argv = build_argv(payload, shell)
    executable = shell if payload.shell else payload.value

    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            executable=executable,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
            env=build_environment(payload),
            start_new_session=True,
        )
    except OSError as e:
        logger.debug(f"Failed to launch health command '{payload.value}': {e}")
        return ProbeOutcome.failure(
            f"Failed to launch '{payload.value}': {e}"[:defaults.max_diagnostic_chars],
            command=payload.value,
        )

    try:
        _, stderr = await process.communicate()
    except asyncio.CancelledError:
        # The shell may be gone while its children still hold stderr open
        logger.debug(f"Killing health command process group {process.pid}")
        kill_process_group(process)
        await process.wait()
        raise

    if process.returncode == 0:
        return ProbeOutcome.success(command=payload.value, exit_code=0)

    stderr_text = stderr.decode("utf-8", errors="replace").strip() if stderr else ""
    message = f"Command '{payload.value}' exited with status {process.returncode}"
    if stderr_text:
        message += f": {stderr_text}"

    return ProbeOutcome.failure(
        message[:defaults.max_diagnostic_chars],
        command=payload.value,
        exit_code=process.returncode,
    )


__all__ = [
    "build_argv",
    "build_environment",
    "kill_process_group",
    "probe_command",
]
