# ============================================================================
# CLAUDE CONTEXT - HEALTH CHECK DEFINITION MODEL
# ============================================================================
# EPOCH: 1 - TASK HEALTH MONITORING
# STATUS: Core model - Health check configuration attached to a workload
# PURPOSE: Define health check structure loaded from YAML or dicts
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: HealthCheckSpec, CommandPayload, HttpPayload, TcpPayload
# DEPENDENCIES: pydantic, enum
# ============================================================================
"""
Health Check Definition Models

A HealthCheckSpec is the immutable configuration attached to a workload
when it is launched. It defines:
- Which kind of probe runs (command, HTTP, TCP)
- When probing starts and how often it repeats
- How long startup failures are masked
- How many consecutive failures trigger a kill

Structural checks (non-negative numbers, port range) happen here at
parse time. Semantic checks (kind/payload agreement, scheme, path) live
in health.validation so that a partially-filled spec can still be built
and reported on.
"""

from typing import Dict, List, Optional, Union
from pydantic import BaseModel, Field, field_validator

from core.contracts import CheckKind


# ============================================================================
# PAYLOADS
# ============================================================================

class CommandPayload(BaseModel):
    """Command probe: exit status 0 means healthy."""
    value: Optional[str] = Field(
        default=None,
        description="Shell command, or program path when shell is false"
    )
    shell: bool = Field(default=True, description="Run value through /bin/sh -c")
    arguments: List[str] = Field(
        default_factory=list,
        description="argv for non-shell commands (argv[0] included)"
    )
    environment: Dict[str, str] = Field(
        default_factory=dict,
        description="Overrides merged into the parent environment"
    )

    model_config = {"frozen": True}

    @field_validator("environment", mode="before")
    @classmethod
    def handle_variable_list(cls, v):
        """Allow [{name, value}] lists as well as plain mappings."""
        if isinstance(v, list):
            return {str(item["name"]): str(item["value"]) for item in v}
        return v


class HttpPayload(BaseModel):
    """HTTP probe against the workload's own port."""
    port: Optional[int] = Field(default=None, ge=0, le=65535)
    scheme: Optional[str] = Field(default=None, description="http or https")
    path: Optional[str] = Field(default=None, description="Must start with '/'")

    model_config = {"frozen": True}


class TcpPayload(BaseModel):
    """TCP connect probe."""
    port: Optional[int] = Field(default=None, ge=0, le=65535)

    model_config = {"frozen": True}


Payload = Union[CommandPayload, HttpPayload, TcpPayload]


# ============================================================================
# HEALTH CHECK SPEC
# ============================================================================

class HealthCheckSpec(BaseModel):
    """
    Health check configuration for one workload.

    Defaults follow the orchestrator's historical values: first probe
    after 15s, every 10s, 10s grace, kill after 3 consecutive failures.
    A consecutive_failures of 0 disables escalation entirely.
    """
    kind: Optional[CheckKind] = Field(default=None, description="command, http or tcp")

    delay_seconds: float = Field(default=15.0, ge=0)
    interval_seconds: float = Field(default=10.0, ge=0)
    grace_period_seconds: float = Field(default=10.0, ge=0)
    timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        description="Probe timeout; falls back to the configured default"
    )
    consecutive_failures: int = Field(default=3, ge=0)

    # Exactly one of these, matching kind
    command: Optional[CommandPayload] = None
    http: Optional[HttpPayload] = None
    tcp: Optional[TcpPayload] = None

    # Documentation
    description: Optional[str] = None

    model_config = {"frozen": True}

    @field_validator("kind", mode="before")
    @classmethod
    def coerce_kind(cls, v):
        """Accept any casing; unrecognised names become UNKNOWN."""
        if v is None or isinstance(v, CheckKind):
            return v
        return CheckKind(str(v))

    @field_validator("command", mode="before")
    @classmethod
    def handle_string_command(cls, v):
        """Allow a bare string as shorthand for a shell command."""
        if isinstance(v, str):
            return {"value": v}
        return v

    @property
    def payload(self) -> Optional[Payload]:
        """The payload variant selected by kind (None if absent)."""
        if self.kind == CheckKind.COMMAND:
            return self.command
        if self.kind == CheckKind.HTTP:
            return self.http
        if self.kind == CheckKind.TCP:
            return self.tcp
        return None

    def configured_payloads(self) -> Dict[CheckKind, Payload]:
        """All payload variants that are set, keyed by kind."""
        found = {}
        if self.command is not None:
            found[CheckKind.COMMAND] = self.command
        if self.http is not None:
            found[CheckKind.HTTP] = self.http
        if self.tcp is not None:
            found[CheckKind.TCP] = self.tcp
        return found

    def effective_timeout(self, default_seconds: float) -> float:
        """Probe timeout, using default_seconds when unset."""
        if self.timeout_seconds is None:
            return default_seconds
        return self.timeout_seconds

    @classmethod
    def command_check(cls, value: str, **kwargs) -> "HealthCheckSpec":
        """Shorthand for a shell command check."""
        return cls(kind=CheckKind.COMMAND, command=CommandPayload(value=value), **kwargs)

    @classmethod
    def http_check(
        cls,
        port: int,
        path: Optional[str] = None,
        scheme: Optional[str] = None,
        **kwargs,
    ) -> "HealthCheckSpec":
        """Shorthand for an HTTP check."""
        return cls(
            kind=CheckKind.HTTP,
            http=HttpPayload(port=port, path=path, scheme=scheme),
            **kwargs,
        )

    @classmethod
    def tcp_check(cls, port: int, **kwargs) -> "HealthCheckSpec":
        """Shorthand for a TCP check."""
        return cls(kind=CheckKind.TCP, tcp=TcpPayload(port=port), **kwargs)
