# ============================================================================
# HEALTH CHECK LOADER
# ============================================================================
# EPOCH: 1 - TASK HEALTH MONITORING
# STATUS: Core - Health check definitions from YAML / dicts
# PURPOSE: Parse and validate health check configuration files
# CREATED: 18 OCT 2026
# ============================================================================
"""
Health Check Loader

Health checks are supplied as structured configuration. This module turns
a dict or a YAML document into a validated HealthCheckSpec.

YAML format:
    kind: command
    delay_seconds: 0
    interval_seconds: 5
    grace_period_seconds: 30
    timeout_seconds: 3
    consecutive_failures: 3
    command:
      value: "curl -sf localhost:8080/ready"
      environment:
        STATUS: "0"

A document may also nest everything under a top-level `health_check` key.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Union

import yaml
from pydantic import ValidationError

from core.models import HealthCheckSpec
from health.validation import HealthCheckError, ensure_valid

logger = logging.getLogger(__name__)


class HealthCheckConfigError(HealthCheckError):
    """Raised when a health check document cannot be parsed."""
    def __init__(self, message: str, source: str = "<dict>"):
        self.source = source
        super().__init__(f"{source}: {message}")


def parse_health_check(
    data: Dict[str, Any],
    source: str = "<dict>",
) -> HealthCheckSpec:
    """
    Build and validate a HealthCheckSpec from a mapping.

    Args:
        data: Health check fields (optionally under 'health_check')
        source: Name used in error messages

    Returns:
        Validated HealthCheckSpec

    Raises:
        HealthCheckConfigError: If the mapping does not parse
        HealthCheckValidationError: If the parsed check is invalid
    """
    if not isinstance(data, dict):
        raise HealthCheckConfigError(
            f"Expected a mapping, got {type(data).__name__}", source=source
        )

    if "health_check" in data:
        data = data["health_check"]
        if not isinstance(data, dict):
            raise HealthCheckConfigError("'health_check' must be a mapping", source=source)

    try:
        spec = HealthCheckSpec.model_validate(data)
    except ValidationError as e:
        raise HealthCheckConfigError(str(e), source=source) from e

    return ensure_valid(spec)


def load_health_check(path: Union[str, Path]) -> HealthCheckSpec:
    """
    Load a health check from a YAML file.

    Args:
        path: YAML file path

    Returns:
        Validated HealthCheckSpec
    """
    path = Path(path)

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise HealthCheckConfigError(f"Cannot read file: {e}", source=str(path)) from e
    except yaml.YAMLError as e:
        raise HealthCheckConfigError(f"Invalid YAML: {e}", source=str(path)) from e

    spec = parse_health_check(data, source=str(path))
    logger.info(f"Loaded {spec.kind.value} health check from {path}")
    return spec


__all__ = [
    "HealthCheckConfigError",
    "parse_health_check",
    "load_health_check",
]
