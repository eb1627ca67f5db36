# ============================================================================
# STATUS REPORTER TESTS
# ============================================================================
# EPOCH: 1 - TASK HEALTH MONITORING
# STATUS: Tests - Status reporter implementations
# PURPOSE: Verify report delivery, history and fan-out
# CREATED: 18 OCT 2026
# ============================================================================
"""
Status Reporter Tests

Run with:
    pytest tests/test_reporter.py -v
"""

import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock

from core.models import HealthReport
from worker.reporter import (
    CallbackReporter,
    CompositeReporter,
    InMemoryReporter,
    LoggingReporter,
)


def _report(task_id="task-1", healthy=True, terminated=False, message=None):
    return HealthReport(task_id=task_id, healthy=healthy, terminated=terminated, message=message)


class TestLoggingReporter:
    """Tests for LoggingReporter."""

    def test_levels(self, caplog):
        reporter = LoggingReporter(logger_name="test.status")

        with caplog.at_level(logging.INFO, logger="test.status"):
            asyncio.run(reporter.on_health_report(_report(healthy=True)))
            asyncio.run(reporter.on_health_report(_report(healthy=False, message="exit 1")))
            asyncio.run(reporter.on_health_report(
                _report(healthy=False, terminated=True, message="3 failures")
            ))

        levels = [r.levelno for r in caplog.records]
        assert levels == [logging.INFO, logging.WARNING, logging.ERROR]
        assert "killed by health check" in caplog.records[-1].getMessage()


class TestCallbackReporter:
    """Tests for CallbackReporter."""

    def test_sync_callback(self):
        callback = MagicMock(return_value=None)
        report = _report()

        asyncio.run(CallbackReporter(callback).on_health_report(report))

        callback.assert_called_once_with(report)

    def test_async_callback(self):
        callback = AsyncMock()
        report = _report(healthy=False)

        asyncio.run(CallbackReporter(callback).on_health_report(report))

        callback.assert_awaited_once_with(report)


class TestInMemoryReporter:
    """Tests for InMemoryReporter."""

    def test_history_and_latest(self):
        reporter = InMemoryReporter()

        async def send():
            await reporter.on_health_report(_report(healthy=True))
            await reporter.on_health_report(_report(healthy=False))
            await reporter.on_health_report(_report(task_id="task-2"))

        asyncio.run(send())

        assert [r.healthy for r in reporter.history("task-1")] == [True, False]
        assert reporter.latest("task-1").healthy is False
        assert reporter.latest("missing") is None
        assert sorted(reporter.task_ids()) == ["task-1", "task-2"]
        assert reporter.to_dict()["task-1"]["healthy"] is False

    def test_history_is_bounded(self):
        reporter = InMemoryReporter(max_history=2)

        async def send():
            for healthy in (True, False, True):
                await reporter.on_health_report(_report(healthy=healthy))

        asyncio.run(send())

        assert [r.healthy for r in reporter.history("task-1")] == [False, True]

    def test_clear(self):
        reporter = InMemoryReporter()
        asyncio.run(reporter.on_health_report(_report()))
        reporter.clear("task-1")
        assert reporter.history("task-1") == []


class TestCompositeReporter:
    """Tests for CompositeReporter."""

    def test_fan_out_survives_failing_child(self):
        failing = MagicMock()
        failing.on_health_report = AsyncMock(side_effect=RuntimeError("down"))
        failing.close = AsyncMock()
        memory = InMemoryReporter()
        composite = CompositeReporter([failing, memory])

        asyncio.run(composite.on_health_report(_report()))
        asyncio.run(composite.close())

        assert len(memory.history("task-1")) == 1
        failing.close.assert_awaited_once()
