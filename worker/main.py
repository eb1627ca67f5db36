# ============================================================================
# WORKLOAD RUNNER ENTRY POINT
# ============================================================================
# EPOCH: 1 - TASK HEALTH MONITORING
# STATUS: Core - Command-line entry point
# PURPOSE: Run one command as a supervised, health-checked workload
# CREATED: 18 OCT 2026
# ============================================================================
"""
Workload Runner Entry Point

Runs a shell command under a WorkloadSupervisor, probing it with the
health check from a YAML file and killing it when the check escalates.

Usage:
    # Plain supervised run
    python -m worker.main --task-id web-1 -- python -m http.server 8080

    # With a health check and a post-launch hook
    python -m worker.main --task-id web-1 \\
        --health-check health.yaml \\
        --post-launch-hook /usr/local/bin/register-task \\
        -- python -m http.server 8080

Exit status is the workload's exit code; 137 when it was killed.

Environment Variables:
    TASKHEALTH_DEFAULT_TIMEOUT_SEC: Probe timeout when the check sets none
    TASKHEALTH_PROBE_HOST: Host probed by HTTP and TCP checks
    TASKHEALTH_KILL_GRACE_SEC: Seconds between SIGTERM and SIGKILL
    TASKHEALTH_SHELL: Shell used for the workload and command checks
    LOG_FORMAT: "json" for structured logs
"""

import argparse
import asyncio
import os
import shlex
import signal
import sys
import uuid
from typing import List, Optional

from core.config import get_defaults
from core.contracts import WorkloadState
from core.logging import ComponentType, configure_logging, get_logger, log_context
from health.loader import load_health_check
from health.validation import HealthCheckError
from hooks import ShellCommandHook, get_registry
from worker.reporter import CompositeReporter, InMemoryReporter, LoggingReporter
from worker.supervisor import SupervisorError, WorkloadSupervisor
from __version__ import __version__

logger = get_logger(__name__, ComponentType.CLI)

EXIT_KILLED = 137
EXIT_CONFIG_ERROR = 2


# ============================================================================
# ARGUMENTS
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taskhealth",
        description="Run a command as a supervised workload with health checking",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --task-id web-1 --health-check health.yaml -- ./server --port 8080
  %(prog)s --task-id batch-7 -- sleep 30
""",
    )
    parser.add_argument(
        "--task-id",
        default=None,
        help="Workload identifier (default: random)",
    )
    parser.add_argument(
        "--health-check",
        metavar="FILE",
        help="YAML file with the health check definition",
    )
    parser.add_argument(
        "--post-launch-hook",
        metavar="CMD",
        action="append",
        default=[],
        help="Command run as '<CMD> <task-id>' after launch (repeatable)",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("TASKHEALTH_LOG_LEVEL", "INFO"),
        help="Log level (default: INFO)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit JSON log lines",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "command",
        nargs=argparse.REMAINDER,
        help="Workload command (prefix with -- to stop option parsing)",
    )
    return parser


def _command_string(parts: List[str]) -> str:
    if parts and parts[0] == "--":
        parts = parts[1:]
    if len(parts) == 1:
        return parts[0]
    return shlex.join(parts)


def exit_status(state: WorkloadState, exit_code: Optional[int]) -> int:
    """Process exit status for a finished workload."""
    if state == WorkloadState.KILLED:
        return EXIT_KILLED
    if exit_code is None:
        return 1
    if exit_code < 0:
        return 128 - exit_code
    return exit_code


# ============================================================================
# MAIN
# ============================================================================

async def main(args: argparse.Namespace) -> int:
    """Run the workload; returns the process exit status."""
    command = _command_string(args.command)
    if not command:
        logger.error("No workload command given")
        return EXIT_CONFIG_ERROR

    task_id = args.task_id or f"task-{uuid.uuid4().hex[:8]}"

    with log_context(task_id=task_id, component="cli"):
        logger.info(f"Task runner v{__version__} starting {task_id}: {command}")

        health_check = None
        if args.health_check:
            try:
                health_check = load_health_check(args.health_check)
            except HealthCheckError as e:
                logger.error(f"Health check rejected: {e}")
                return EXIT_CONFIG_ERROR

        registry = get_registry()
        for i, hook_command in enumerate(args.post_launch_hook):
            registry.register(ShellCommandHook(hook_command, name=f"post_launch_{i}"))

        status = InMemoryReporter()
        reporter = CompositeReporter([LoggingReporter(), status])
        supervisor = WorkloadSupervisor(
            task_id,
            command,
            health_check=health_check,
            reporter=reporter,
            hooks=registry,
            defaults=get_defaults(),
        )

        try:
            await supervisor.launch()
        except HealthCheckError as e:
            logger.error(f"Health check rejected: {e}")
            return EXIT_CONFIG_ERROR
        except SupervisorError as e:
            logger.error(str(e))
            return 1

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(
                sig,
                supervisor.terminate_workload,
                f"Runner received {sig.name}",
            )

        try:
            result = await supervisor.wait()
        finally:
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.remove_signal_handler(sig)
            await reporter.close()

        latest = status.latest(task_id)
        logger.info(
            f"{task_id} {result.state.value} (exit_code={result.exit_code}, "
            f"killed_by_health_check={result.killed_by_health_check}, "
            f"last_healthy={latest.healthy if latest else None})"
        )
        return exit_status(result.state, result.exit_code)


def run(argv: Optional[List[str]] = None) -> None:
    """Synchronous entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(level=args.log_level, json_output=args.json_logs)
    sys.exit(asyncio.run(main(args)))


if __name__ == "__main__":
    run()
