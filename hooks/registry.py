# ============================================================================
# LIFECYCLE HOOK REGISTRY
# ============================================================================
# EPOCH: 1 - TASK HEALTH MONITORING
# STATUS: Infrastructure - Task lifecycle hook registration and dispatch
# PURPOSE: Let operators run extra logic around workload launch and removal
# CREATED: 18 OCT 2026
# ============================================================================
"""
Lifecycle Hook Registry

Hooks are strategy objects registered once at process startup and called
by the supervisor at a fixed, closed set of points:

    ENVIRONMENT_DECORATOR  before launch; may add environment variables
    PRE_LAUNCH             before the workload process is spawned
    POST_LAUNCH            right after the workload process is running
    REMOVE                 after the workload has exited

Design:
- TaskLifecycleHook subclasses override only the points they care about
- Registration order is dispatch order
- A failing hook is logged and collected; it never aborts the launch

Usage:
    @register_hook
    class AuditHook(TaskLifecycleHook):
        name = "audit"

        async def post_launch(self, ctx: HookContext) -> None:
            ...

    # Manual registration
    get_registry().register(ShellCommandHook("notify-launch"))
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

logger = logging.getLogger(__name__)


# ============================================================================
# HOOK TYPES
# ============================================================================

class HookPoint(str, Enum):
    """Points in a workload's life where hooks run."""
    ENVIRONMENT_DECORATOR = "environment_decorator"
    PRE_LAUNCH = "pre_launch"
    POST_LAUNCH = "post_launch"
    REMOVE = "remove"


@dataclass
class HookContext:
    """Information about the workload passed to every hook."""
    task_id: str
    command: str
    environment: Dict[str, str] = field(default_factory=dict)
    pid: Optional[int] = None
    started_at: Optional[datetime] = None
    exit_code: Optional[int] = None

    @property
    def name(self) -> str:
        """Name operators use to refer to the workload."""
        return self.task_id


@dataclass
class HookFailure:
    """A hook that raised during dispatch."""
    hook: str
    point: HookPoint
    error: str


class HookError(Exception):
    """Raised by a hook that could not do its job."""
    pass


class TaskLifecycleHook:
    """
    Base class for lifecycle hooks.

    Every point is a no-op by default.
    """

    name: str = "unnamed"

    async def decorate_environment(self, ctx: HookContext) -> Optional[Dict[str, str]]:
        """Return extra environment variables for the workload, or None."""
        return None

    async def pre_launch(self, ctx: HookContext) -> None:
        """Called before the workload is spawned."""
        return None

    async def post_launch(self, ctx: HookContext) -> None:
        """Called once the workload is running (ctx.pid is set)."""
        return None

    async def on_remove(self, ctx: HookContext) -> None:
        """Called after the workload exited (ctx.exit_code is set)."""
        return None


# ============================================================================
# REGISTRY
# ============================================================================

class HookRegistry:
    """
    Ordered collection of lifecycle hooks.

    Dispatch methods call each hook's method for that point directly.
    """

    def __init__(self):
        self._hooks: List[TaskLifecycleHook] = []

    def register(self, hook: TaskLifecycleHook) -> None:
        """
        Register a hook instance.

        Hooks with the same name replace the earlier registration.
        """
        for i, existing in enumerate(self._hooks):
            if existing.name == hook.name:
                logger.warning(f"Overwriting lifecycle hook: {hook.name}")
                self._hooks[i] = hook
                return

        self._hooks.append(hook)
        logger.debug(f"Registered lifecycle hook: {hook.name} ({type(hook).__name__})")

    def unregister(self, name: str) -> bool:
        """
        Remove a hook by name.

        Returns:
            True if a hook was removed
        """
        before = len(self._hooks)
        self._hooks = [h for h in self._hooks if h.name != name]
        return len(self._hooks) < before

    def get_all(self) -> List[TaskLifecycleHook]:
        """Registered hooks in dispatch order."""
        return list(self._hooks)

    def clear(self) -> None:
        """Remove all hooks."""
        self._hooks.clear()

    def __len__(self) -> int:
        return len(self._hooks)

    def __contains__(self, name: str) -> bool:
        return any(h.name == name for h in self._hooks)

    # =========================================================================
    # DISPATCH
    # =========================================================================

    async def decorate_environment(self, ctx: HookContext) -> Dict[str, str]:
        """
        Collect environment additions from every hook.

        Later hooks win on conflicting keys.
        """
        merged: Dict[str, str] = {}
        for hook in self._hooks:
            try:
                extra = await hook.decorate_environment(ctx)
            except Exception as e:
                self._log_failure(hook, HookPoint.ENVIRONMENT_DECORATOR, e)
                continue
            if extra:
                merged.update(extra)
        return merged

    async def run_pre_launch(self, ctx: HookContext) -> List[HookFailure]:
        """Run PRE_LAUNCH on every hook."""
        return await self._dispatch(HookPoint.PRE_LAUNCH, ctx, lambda h: h.pre_launch(ctx))

    async def run_post_launch(self, ctx: HookContext) -> List[HookFailure]:
        """Run POST_LAUNCH on every hook."""
        return await self._dispatch(HookPoint.POST_LAUNCH, ctx, lambda h: h.post_launch(ctx))

    async def run_remove(self, ctx: HookContext) -> List[HookFailure]:
        """Run REMOVE on every hook."""
        return await self._dispatch(HookPoint.REMOVE, ctx, lambda h: h.on_remove(ctx))

    async def _dispatch(
        self,
        point: HookPoint,
        ctx: HookContext,
        call: Callable[[TaskLifecycleHook], Awaitable[Any]],
    ) -> List[HookFailure]:
        failures = []
        for hook in self._hooks:
            logger.info(f"Executing '{point.value}' hook {hook.name} for {ctx.name}")
            try:
                await call(hook)
            except Exception as e:
                failures.append(self._log_failure(hook, point, e))
        return failures

    @staticmethod
    def _log_failure(hook: TaskLifecycleHook, point: HookPoint, e: Exception) -> HookFailure:
        logger.error(f"Lifecycle hook {hook.name} failed at {point.value}: {e}")
        return HookFailure(hook=hook.name, point=point, error=str(e))


# ============================================================================
# GLOBAL REGISTRY & DECORATOR
# ============================================================================

_registry: Optional[HookRegistry] = None


def get_registry() -> HookRegistry:
    """Get the process-wide hook registry."""
    global _registry
    if _registry is None:
        _registry = HookRegistry()
    return _registry


def register_hook(cls: Type[TaskLifecycleHook]) -> Type[TaskLifecycleHook]:
    """
    Class decorator registering a no-argument hook with the global registry.

    Example:
        @register_hook
        class LaunchLogger(TaskLifecycleHook):
            name = "launch_logger"
    """
    get_registry().register(cls())
    return cls


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "HookPoint",
    "HookContext",
    "HookFailure",
    "HookError",
    "TaskLifecycleHook",
    "HookRegistry",
    "get_registry",
    "register_hook",
]
