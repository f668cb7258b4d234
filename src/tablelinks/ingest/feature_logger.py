"""Centralized decision logging for the reconciliation run.

This module logs configuration and policy decisions for debugging and
troubleshooting. User-facing progress is handled by ProgressReporter.
"""

from __future__ import annotations

import logging
from typing import Any

from tablelinks.model.options import ReconcileOptions

logger = logging.getLogger(__name__)


def log_run_configuration(options: ReconcileOptions) -> None:
    """Log the reconciliation configuration.

    Args:
        options: Options for this run
    """
    logger.info("Run configuration:")
    logger.info("  Profile: %s", options.profile.value)
    logger.info("  Languages: %s / %s", options.primary_lang, options.secondary_lang)
    logger.info("  Probe timeout: %.1fs", options.timeout)
    logger.info("  Workers: %d (max %d per host)", options.workers, options.per_host)
    logger.info("  Alternate URLs: %s", "enabled" if options.try_alternates else "disabled")
    logger.info("  Skip unlinked cells: %s", "yes" if options.skip_unlinked else "no")
    logger.info("  Demote empty rows: %s", "yes" if options.demote_empty_rows else "no")
    if options.base_url:
        logger.info("  Base URL: %s", options.base_url)
    if options.dry_run:
        logger.info("  Dry run: no files will be written")


def log_cell_decision(item: str, row: int, column: int, rule: str, state: str) -> None:
    logger.debug("%s r%d c%d: %s -> %s", item, row, column, rule, state)


def log_feature_decision(feature: str, decision: str, context: dict[str, Any] | None = None) -> None:
    detail = ", ".join(f"{k}={v}" for k, v in (context or {}).items())
    logger.info("%s: %s%s", feature, decision, f" ({detail})" if detail else "")


def log_error_policy(feature: str, error_type: str, action: str, details: str | None = None) -> None:
    """Record how an item-local error was handled."""
    suffix = f" ({details})" if details else ""
    logger.warning("%s error policy: %s -> %s%s", feature, error_type, action, suffix)


__all__ = [
    "log_cell_decision",
    "log_error_policy",
    "log_feature_decision",
    "log_run_configuration",
]
