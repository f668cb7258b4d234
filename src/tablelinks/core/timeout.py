"""Timeout configuration from the environment.

``TABLELINKS_<OPERATION>_TIMEOUT`` overrides the default for an operation;
otherwise CI runs get a shorter default than local runs.
"""

from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}


def is_ci() -> bool:
    return os.environ.get("CI", "").strip().lower() in _TRUTHY


def get_environment_timeout(
    operation: str, default_local: float = 10.0, default_ci: float = 5.0
) -> float:
    """Return the timeout in seconds for ``operation``.

    Args:
        operation: Operation name, e.g. "probe"
        default_local: Timeout outside CI
        default_ci: Timeout when the CI environment variable is set

    Returns:
        Timeout in seconds
    """
    env_var = f"TABLELINKS_{operation.upper()}_TIMEOUT"
    raw = os.environ.get(env_var)
    if raw is not None:
        try:
            value = float(raw)
        except ValueError:
            logger.warning("Invalid timeout value in %s: %s, using defaults", env_var, raw)
        else:
            if value > 0:
                return value
            logger.warning("Non-positive timeout in %s: %s, using defaults", env_var, raw)

    if is_ci():
        logger.debug("Using CI timeout for %s: %ss", operation, default_ci)
        return default_ci
    logger.debug("Using local timeout for %s: %ss", operation, default_local)
    return default_local


__all__ = ["get_environment_timeout", "is_ci"]
