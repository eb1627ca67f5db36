# ============================================================================
# CHECK EXECUTOR TESTS
# ============================================================================
# EPOCH: 1 - TASK HEALTH MONITORING
# STATUS: Tests - Command, HTTP and TCP probes
# PURPOSE: Verify single-probe execution, timeouts and diagnostics
# CREATED: 18 OCT 2026
# ============================================================================
"""
Check Executor Tests

Covers:
1. Command probes: shell, non-shell argv, environment, stderr diagnostic
2. Timeout: outcome marked timed_out, probe process killed
3. TCP probes against a local listener
4. HTTP probes through httpx.MockTransport
5. Unexpected probe errors become failure outcomes

Run with:
    pytest tests/test_executor.py -v
"""

import asyncio
import socket
import time

import httpx
import pytest

from core.config import HealthCheckDefaults
from core.contracts import CheckKind
from core.models import CommandPayload, HttpPayload, TcpPayload
from health.checks.command import build_argv
from health.checks.http import build_url
from health.executor import CheckExecutor


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def defaults():
    return HealthCheckDefaults(probe_host="127.0.0.1")


@pytest.fixture
def executor(defaults):
    return CheckExecutor(defaults=defaults)


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def _process_alive(pid: int) -> bool:
    """True unless the process is gone or a zombie awaiting its reaper."""
    try:
        with open(f"/proc/{pid}/stat") as f:
            stat = f.read()
    except (FileNotFoundError, ProcessLookupError):
        return False
    return stat.rsplit(")", 1)[1].split()[0] != "Z"


def _wait_until_gone(pid: int, timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if not _process_alive(pid):
            return True
        time.sleep(0.05)
    return False


# ============================================================================
# COMMAND PROBES
# ============================================================================

class TestCommandProbe:
    """Tests for command health probes."""

    def test_exit_zero_is_healthy(self, executor):
        outcome = asyncio.run(
            executor.execute(CheckKind.COMMAND, CommandPayload(value="exit 0"), 5)
        )
        assert outcome.healthy is True
        assert outcome.details["exit_code"] == 0

    def test_nonzero_exit_is_unhealthy_with_stderr(self, executor):
        payload = CommandPayload(value="echo broken >&2; exit 3")
        outcome = asyncio.run(executor.execute(CheckKind.COMMAND, payload, 5))

        assert outcome.healthy is False
        assert outcome.timed_out is False
        assert outcome.details["exit_code"] == 3
        assert "status 3" in outcome.error
        assert "broken" in outcome.error

    def test_environment_is_applied(self, executor):
        ok = CommandPayload(value="exit $STATUS", environment={"STATUS": "0"})
        bad = CommandPayload(value="exit $STATUS", environment={"STATUS": "1"})

        assert asyncio.run(executor.execute(CheckKind.COMMAND, ok, 5)).healthy is True
        assert asyncio.run(executor.execute(CheckKind.COMMAND, bad, 5)).healthy is False

    def test_non_shell_command(self, executor):
        payload = CommandPayload(value="true", shell=False, arguments=["true"])
        outcome = asyncio.run(executor.execute(CheckKind.COMMAND, payload, 5))
        assert outcome.healthy is True

    def test_non_shell_missing_program(self, executor):
        payload = CommandPayload(value="/nonexistent/health-probe", shell=False)
        outcome = asyncio.run(executor.execute(CheckKind.COMMAND, payload, 5))
        assert outcome.healthy is False
        assert "Failed to launch" in outcome.error

    def test_build_argv(self):
        assert build_argv(CommandPayload(value="exit 0"), "/bin/sh") == ["/bin/sh", "-c", "exit 0"]
        assert build_argv(
            CommandPayload(value="/bin/echo", shell=False, arguments=["echo", "hi"]), "/bin/sh"
        ) == ["echo", "hi"]
        assert build_argv(CommandPayload(value="/bin/true", shell=False), "/bin/sh") == ["/bin/true"]

    def test_timeout_kills_probe(self, executor):
        """A probe exceeding its timeout is a timed-out failure and is killed."""
        payload = CommandPayload(value="sleep 120")

        start = time.monotonic()
        outcome = asyncio.run(executor.execute(CheckKind.COMMAND, payload, 0.5))
        elapsed = time.monotonic() - start

        assert outcome.healthy is False
        assert outcome.timed_out is True
        assert outcome.error == "Timeout after 0.5s"
        assert elapsed < 10

    def test_timeout_kills_orphaned_background_child(self, executor, tmp_path):
        """A background child still holding stderr is killed with the group."""
        pid_file = tmp_path / "child.pid"
        payload = CommandPayload(value=f"sleep 30 & echo $! > {pid_file}; exit 0")

        outcome = asyncio.run(executor.execute(CheckKind.COMMAND, payload, 1))

        assert outcome.timed_out is True
        child_pid = int(pid_file.read_text().strip())
        assert _wait_until_gone(child_pid)


# ============================================================================
# TCP PROBES
# ============================================================================

class TestTcpProbe:
    """Tests for TCP health probes."""

    def test_listening_port_is_healthy(self, executor):
        async def scenario():
            async def handle(reader, writer):
                writer.close()

            server = await asyncio.start_server(handle, "127.0.0.1", 0)
            port = server.sockets[0].getsockname()[1]
            try:
                return await executor.execute(CheckKind.TCP, TcpPayload(port=port), 5)
            finally:
                server.close()
                await server.wait_closed()

        outcome = asyncio.run(scenario())
        assert outcome.healthy is True
        assert outcome.details["host"] == "127.0.0.1"

    def test_closed_port_is_unhealthy(self, executor):
        port = _free_port()
        outcome = asyncio.run(executor.execute(CheckKind.TCP, TcpPayload(port=port), 5))
        assert outcome.healthy is False
        assert str(port) in outcome.error


# ============================================================================
# HTTP PROBES
# ============================================================================

class TestHttpProbe:
    """Tests for HTTP health probes."""

    def test_build_url_defaults(self):
        assert build_url(HttpPayload(port=8080), "localhost") == "http://localhost:8080/"
        assert build_url(
            HttpPayload(port=443, scheme="https", path="/ready"), "localhost"
        ) == "https://localhost:443/ready"

    def test_any_response_is_healthy(self, defaults):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(500)

        executor = CheckExecutor(defaults=defaults, http_transport=httpx.MockTransport(handler))
        payload = HttpPayload(port=8080, path="/health")
        outcome = asyncio.run(executor.execute(CheckKind.HTTP, payload, 5))

        assert outcome.healthy is True
        assert outcome.details["status_code"] == 500
        assert seen == ["http://127.0.0.1:8080/health"]

    def test_connection_error_is_unhealthy(self, defaults):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        executor = CheckExecutor(defaults=defaults, http_transport=httpx.MockTransport(handler))
        outcome = asyncio.run(executor.execute(CheckKind.HTTP, HttpPayload(port=8080), 5))

        assert outcome.healthy is False
        assert "Cannot reach" in outcome.error


# ============================================================================
# EXECUTOR
# ============================================================================

class TestExecutor:
    """Tests for executor plumbing."""

    def test_unknown_kind_fails(self, executor):
        outcome = asyncio.run(executor.execute(CheckKind.UNKNOWN, TcpPayload(port=1), 5))
        assert outcome.healthy is False

    def test_unexpected_exception_becomes_failure(self, executor):
        async def explode(payload):
            raise RuntimeError("probe bug")

        executor._probes[CheckKind.TCP] = explode
        outcome = asyncio.run(executor.execute(CheckKind.TCP, TcpPayload(port=1), 5))

        assert outcome.healthy is False
        assert outcome.details["exception_type"] == "RuntimeError"
        assert "probe bug" in outcome.error

    def test_duration_recorded(self, executor):
        outcome = asyncio.run(
            executor.execute(CheckKind.COMMAND, CommandPayload(value="exit 0"), 5)
        )
        assert outcome.duration_ms > 0
