# ============================================================================
# LIFECYCLE HOOK TESTS
# ============================================================================
# EPOCH: 1 - TASK HEALTH MONITORING
# STATUS: Tests - Hook registry and shell command hook
# PURPOSE: Verify hook ordering, failure isolation and shell hook errors
# CREATED: 18 OCT 2026
# ============================================================================
"""
Lifecycle Hook Tests

Run with:
    pytest tests/test_hooks.py -v
"""

import asyncio

import pytest

from hooks import (
    HookContext,
    HookError,
    HookPoint,
    HookRegistry,
    ShellCommandHook,
    TaskLifecycleHook,
    get_registry,
    register_hook,
)


# ============================================================================
# FIXTURES
# ============================================================================

class RecordingHook(TaskLifecycleHook):
    """Records every call it receives."""

    def __init__(self, name, calls, env=None, fail_on=None):
        self.name = name
        self.calls = calls
        self.env = env
        self.fail_on = fail_on

    def _record(self, point):
        self.calls.append((self.name, point))
        if self.fail_on == point:
            raise HookError(f"{self.name} failed")

    async def decorate_environment(self, ctx):
        self._record("environment_decorator")
        return self.env

    async def pre_launch(self, ctx):
        self._record("pre_launch")

    async def post_launch(self, ctx):
        self._record("post_launch")

    async def on_remove(self, ctx):
        self._record("remove")


@pytest.fixture
def ctx():
    return HookContext(task_id="task-1", command="sleep 1")


@pytest.fixture
def clean_registry():
    registry = get_registry()
    registry.clear()
    yield registry
    registry.clear()


# ============================================================================
# REGISTRY
# ============================================================================

class TestHookRegistry:
    """Tests for HookRegistry dispatch."""

    def test_dispatch_in_registration_order(self, ctx):
        calls = []
        registry = HookRegistry()
        registry.register(RecordingHook("a", calls))
        registry.register(RecordingHook("b", calls))

        asyncio.run(registry.run_post_launch(ctx))

        assert calls == [("a", "post_launch"), ("b", "post_launch")]

    def test_failure_is_collected_not_raised(self, ctx):
        calls = []
        registry = HookRegistry()
        registry.register(RecordingHook("a", calls, fail_on="pre_launch"))
        registry.register(RecordingHook("b", calls))

        failures = asyncio.run(registry.run_pre_launch(ctx))

        assert calls == [("a", "pre_launch"), ("b", "pre_launch")]
        assert len(failures) == 1
        assert failures[0].hook == "a"
        assert failures[0].point == HookPoint.PRE_LAUNCH
        assert failures[0].error == "a failed"

    def test_environment_merge(self, ctx):
        calls = []
        registry = HookRegistry()
        registry.register(RecordingHook("a", calls, env={"A": "1", "SHARED": "a"}))
        registry.register(RecordingHook("b", calls, env={"SHARED": "b"}))
        registry.register(RecordingHook("c", calls, fail_on="environment_decorator"))

        env = asyncio.run(registry.decorate_environment(ctx))

        assert env == {"A": "1", "SHARED": "b"}

    def test_base_hook_is_noop(self, ctx):
        registry = HookRegistry()
        registry.register(TaskLifecycleHook())

        assert asyncio.run(registry.decorate_environment(ctx)) == {}
        assert asyncio.run(registry.run_remove(ctx)) == []

    def test_same_name_replaces(self):
        calls = []
        registry = HookRegistry()
        registry.register(RecordingHook("a", calls))
        registry.register(RecordingHook("a", calls))

        assert len(registry) == 1
        assert "a" in registry
        assert registry.unregister("a") is True
        assert len(registry) == 0

    def test_register_hook_decorator(self, clean_registry):
        @register_hook
        class LaunchMarker(TaskLifecycleHook):
            name = "launch_marker"

        assert "launch_marker" in clean_registry
        assert isinstance(clean_registry.get_all()[0], LaunchMarker)


# ============================================================================
# SHELL COMMAND HOOK
# ============================================================================

class TestShellCommandHook:
    """Tests for ShellCommandHook."""

    def test_appends_task_name(self, ctx, tmp_path):
        hook = ShellCommandHook(f"cd {tmp_path} && touch")

        asyncio.run(hook.post_launch(ctx))

        assert (tmp_path / "task-1").exists()

    def test_nonzero_exit_raises(self, ctx):
        hook = ShellCommandHook("echo nope >&2; exit 3;")

        with pytest.raises(HookError) as exc_info:
            asyncio.run(hook.post_launch(ctx))

        message = str(exc_info.value)
        assert message.startswith("Failed to 'echo nope >&2; exit 3; task-1'")
        assert "exit status = 3" in message
        assert "stderr = nope" in message

    def test_failure_logged_by_registry(self, ctx):
        registry = HookRegistry()
        registry.register(ShellCommandHook("false"))

        failures = asyncio.run(registry.run_post_launch(ctx))

        assert len(failures) == 1
        assert failures[0].point == HookPoint.POST_LAUNCH
        assert "exit status = 1" in failures[0].error
