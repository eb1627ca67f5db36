# ============================================================================
# SHELL COMMAND HOOK
# ============================================================================
# EPOCH: 1 - TASK HEALTH MONITORING
# STATUS: Infrastructure - Post-launch shell command hook
# PURPOSE: Run an operator command against each freshly launched workload
# CREATED: 18 OCT 2026
# ============================================================================
"""
Shell Command Hook

After a workload launches, runs `<command> <workload name>` through the
shell, e.g. to register the container with an external inventory.

stdin and stdout go to /dev/null; stderr is captured and included in the
HookError raised when the command exits non-zero.
"""

import asyncio
import logging
from typing import Optional

from hooks.registry import HookContext, HookError, TaskLifecycleHook

logger = logging.getLogger(__name__)


class ShellCommandHook(TaskLifecycleHook):
    """Runs a shell command after each workload launch."""

    name = "shell_command"

    def __init__(
        self,
        command: str,
        name: Optional[str] = None,
        timeout_seconds: float = 30.0,
        shell: str = "/bin/sh",
    ):
        """
        Initialize hook.

        Args:
            command: Command prefix; the workload name is appended
            name: Registry name (default "shell_command")
            timeout_seconds: Upper bound on the command's runtime
            shell: Interpreter used to run the command
        """
        self.command = command
        if name:
            self.name = name
        self.timeout_seconds = timeout_seconds
        self.shell = shell

    async def post_launch(self, ctx: HookContext) -> None:
        """Run the command for the launched workload."""
        await self.run_command(f"{self.command} {ctx.name}")

    async def run_command(self, cmd: str) -> None:
        """
        Run cmd and raise if it fails.

        Raises:
            HookError: On spawn failure, timeout or non-zero exit
        """
        logger.info(f"Running {cmd}")

        try:
            process = await asyncio.create_subprocess_exec(
                self.shell, "-c", cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise HookError(f"Failed to '{cmd}': {e}") from e

        try:
            _, stderr = await asyncio.wait_for(
                process.communicate(),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise HookError(f"Failed to '{cmd}': timed out after {self.timeout_seconds}s")

        if process.returncode is None:
            raise HookError(f"No status found for '{cmd}'")

        if process.returncode != 0:
            err = stderr.decode("utf-8", errors="replace").strip() if stderr else ""
            raise HookError(
                f"Failed to '{cmd}': exit status = {process.returncode} stderr = {err}"
            )


__all__ = [
    "ShellCommandHook",
]
