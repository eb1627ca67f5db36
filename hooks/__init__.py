# ============================================================================
# LIFECYCLE HOOKS
# ============================================================================
# EPOCH: 1 - TASK HEALTH MONITORING
# STATUS: Infrastructure - Task lifecycle hooks
# PURPOSE: Register and dispatch hooks around workload launch and removal
# CREATED: 18 OCT 2026
# ============================================================================
"""
Lifecycle Hooks

Usage:
    from hooks import get_registry, ShellCommandHook

    get_registry().register(ShellCommandHook("/usr/local/bin/on-launch"))
"""

from hooks.registry import (
    HookPoint,
    HookContext,
    HookFailure,
    HookError,
    TaskLifecycleHook,
    HookRegistry,
    get_registry,
    register_hook,
)
from hooks.shell import ShellCommandHook

__all__ = [
    "HookPoint",
    "HookContext",
    "HookFailure",
    "HookError",
    "TaskLifecycleHook",
    "HookRegistry",
    "get_registry",
    "register_hook",
    "ShellCommandHook",
]
