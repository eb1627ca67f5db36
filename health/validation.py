# ============================================================================
# HEALTH CHECK VALIDATION
# ============================================================================
# EPOCH: 1 - TASK HEALTH MONITORING
# STATUS: Core - Static validation of health check definitions
# PURPOSE: Reject malformed health checks before a workload is admitted
# CREATED: 18 OCT 2026
# ============================================================================
"""
Health Check Validation

Pure checks over a HealthCheckSpec. Called once when a workload is
accepted; a failing spec must keep the workload from launching at all.

Rules (first violation wins):
1. kind must be command, http or tcp
2. the payload for kind must be present, and no other payload may be set
3. command: value present and non-empty
4. http: port set; scheme (if set) is http/https; path (if set) starts with '/'
5. tcp: port set
"""

import logging
from typing import Optional

from core.contracts import CheckKind, HTTP_SCHEMES
from core.models import HealthCheckSpec

logger = logging.getLogger(__name__)


# ============================================================================
# EXCEPTIONS
# ============================================================================

class HealthCheckError(Exception):
    """Base exception for health check configuration errors."""
    pass


class HealthCheckValidationError(HealthCheckError):
    """Raised (or returned) when a health check definition is invalid."""
    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(message)


# ============================================================================
# VALIDATION
# ============================================================================

def validate_health_check(spec: HealthCheckSpec) -> Optional[HealthCheckValidationError]:
    """
    Validate a health check definition.

    Args:
        spec: Health check to validate

    Returns:
        None if valid, otherwise the first violation found
    """
    if spec.kind is None or not spec.kind.is_known():
        return HealthCheckValidationError(
            "Health check type must be set to a known value "
            f"(one of: {', '.join(k.value for k in CheckKind if k.is_known())})",
            field="kind",
        )

    configured = spec.configured_payloads()
    stray = [kind.value for kind in configured if kind != spec.kind]
    if stray:
        return HealthCheckValidationError(
            f"Health check of type '{spec.kind.value}' must not define "
            f"{', '.join(stray)} settings",
            field=stray[0],
        )

    if spec.kind == CheckKind.COMMAND:
        return _validate_command(spec)
    if spec.kind == CheckKind.HTTP:
        return _validate_http(spec)
    return _validate_tcp(spec)


def _validate_command(spec: HealthCheckSpec) -> Optional[HealthCheckValidationError]:
    if spec.command is None:
        return HealthCheckValidationError(
            "Expecting 'command' to be set for command health check",
            field="command",
        )

    if not spec.command.value:
        return HealthCheckValidationError(
            "Command health check must contain 'command.value'",
            field="command.value",
        )

    return None


def _validate_http(spec: HealthCheckSpec) -> Optional[HealthCheckValidationError]:
    if spec.http is None:
        return HealthCheckValidationError(
            "Expecting 'http' to be set for HTTP health check",
            field="http",
        )

    if spec.http.port is None:
        return HealthCheckValidationError(
            "HTTP health check must specify 'http.port'",
            field="http.port",
        )

    if spec.http.scheme is not None and spec.http.scheme not in HTTP_SCHEMES:
        return HealthCheckValidationError(
            f"Unsupported HTTP health check scheme: '{spec.http.scheme}'",
            field="http.scheme",
        )

    if spec.http.path is not None and not spec.http.path.startswith("/"):
        return HealthCheckValidationError(
            f"The path '{spec.http.path}' of HTTP health check must start with '/'",
            field="http.path",
        )

    return None


def _validate_tcp(spec: HealthCheckSpec) -> Optional[HealthCheckValidationError]:
    if spec.tcp is None:
        return HealthCheckValidationError(
            "Expecting 'tcp' to be set for TCP health check",
            field="tcp",
        )

    if spec.tcp.port is None:
        return HealthCheckValidationError(
            "TCP health check must specify 'tcp.port'",
            field="tcp.port",
        )

    return None


def ensure_valid(spec: HealthCheckSpec) -> HealthCheckSpec:
    """
    Validate a health check, raising on the first violation.

    Returns:
        The same spec, for chaining

    Raises:
        HealthCheckValidationError
    """
    error = validate_health_check(spec)
    if error is not None:
        logger.warning(f"Rejected health check: {error.message}")
        raise error
    return spec


__all__ = [
    "HealthCheckError",
    "HealthCheckValidationError",
    "validate_health_check",
    "ensure_valid",
]
