"""Integration check helpers."""

from .checks import (
    IntegrationCheckResult,
    check_admin_api,
    check_admin_stats,
    run_all_checks,
)

__all__ = [
    "IntegrationCheckResult",
    "check_admin_api",
    "check_admin_stats",
    "run_all_checks",
]
