# ============================================================================
# STRUCTURED LOGGING TESTS
# ============================================================================
# EPOCH: 1 - TASK HEALTH MONITORING
# STATUS: Tests - core.logging context and formatters
# PURPOSE: Verify task fields reach log lines and never leak between tasks
# CREATED: 18 OCT 2026
# ============================================================================
"""
Structured Logging Tests

Run with:
    pytest tests/test_logging.py -v
"""

import asyncio
import json
import logging

import pytest

from core.logging import (
    ComponentType,
    HumanFormatter,
    JsonFormatter,
    configure_logging,
    get_current_context,
    get_logger,
    log_checkpoint,
    log_context,
)


def _record(msg: str = "probe failed", name: str = "health.monitor", **extra) -> logging.LogRecord:
    record = logging.LogRecord(name, logging.WARNING, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


# ============================================================================
# CONTEXT
# ============================================================================

class TestLogContext:
    """Tests for log_context scoping."""

    def test_empty_outside_context(self):
        assert get_current_context().to_dict() == {}

    def test_nesting_inherits_and_restores(self):
        with log_context(task_id="task-1"):
            with log_context(check_kind="tcp"):
                assert get_current_context().to_dict() == {
                    "task_id": "task-1",
                    "check_kind": "tcp",
                }
            assert get_current_context().to_dict() == {"task_id": "task-1"}
        assert get_current_context().to_dict() == {}

    def test_restored_after_exception(self):
        with pytest.raises(RuntimeError):
            with log_context(task_id="task-1"):
                raise RuntimeError("boom")
        assert get_current_context().task_id is None

    def test_concurrent_tasks_are_isolated(self):
        async def monitor(task_id):
            with log_context(task_id=task_id):
                await asyncio.sleep(0.01)
                return get_current_context().task_id

        async def scenario():
            return await asyncio.gather(monitor("a"), monitor("b"))

        assert asyncio.run(scenario()) == ["a", "b"]


# ============================================================================
# FORMATTERS
# ============================================================================

class TestFormatters:
    """Tests for the JSON and human formatters."""

    def test_json_includes_context_and_data(self):
        with log_context(task_id="task-1", check_kind="http"):
            line = JsonFormatter().format(_record(data={"attempt": 3}))

        entry = json.loads(line)
        assert entry["message"] == "probe failed"
        assert entry["level"] == "WARNING"
        assert entry["task_id"] == "task-1"
        assert entry["check_kind"] == "http"
        assert entry["data"] == {"attempt": 3}

    def test_json_without_context(self):
        entry = json.loads(JsonFormatter().format(_record()))
        assert "task_id" not in entry
        assert "data" not in entry

    def test_human_tags(self):
        with log_context(task_id="task-1", check_kind="command"):
            line = HumanFormatter().format(_record())
        assert "health.monitor [task=task-1, check=command]: probe failed" in line


# ============================================================================
# LOGGERS
# ============================================================================

class TestLoggers:
    """Tests for get_logger, configure_logging and checkpoints."""

    def test_component_added_outside_component_context(self, caplog):
        logger = get_logger("test.component", ComponentType.SUPERVISOR)
        with caplog.at_level(logging.INFO, logger="test.component"):
            logger.info("launched")
            with log_context(component="cli"):
                logger.info("inside")

        assert caplog.records[0].data == {"component": "supervisor"}
        assert not hasattr(caplog.records[1], "data")

    def test_checkpoint_record(self, caplog):
        with caplog.at_level(logging.INFO, logger="checkpoint"):
            log_checkpoint("health_escalated", {"failures": 3})

        record = caplog.records[-1]
        assert record.getMessage() == "CHECKPOINT: health_escalated"
        assert record.data == {"checkpoint": "health_escalated", "failures": 3}

    def test_configure_json_from_env(self, monkeypatch, restore_root_logger):
        monkeypatch.setenv("LOG_FORMAT", "json")
        configure_logging("debug")

        assert restore_root_logger.level == logging.DEBUG
        assert len(restore_root_logger.handlers) == 1
        assert isinstance(restore_root_logger.handlers[0].formatter, JsonFormatter)

    def test_configure_human_by_default(self, monkeypatch, restore_root_logger):
        monkeypatch.delenv("LOG_FORMAT", raising=False)
        configure_logging()
        assert isinstance(restore_root_logger.handlers[0].formatter, HumanFormatter)
