"""Check that the admin API is reachable and accepts the configured token."""

from __future__ import annotations

import asyncio
from typing import Iterable

from admin_console.integrations import IntegrationCheckResult, run_all_checks
from admin_console.monitoring.logging import configure_logging


def _format_result(result: IntegrationCheckResult) -> str:
    status = "✅" if result.success else "❌"
    return f"{status} {result.name}: {result.message}"


def print_results(results: Iterable[IntegrationCheckResult]) -> int:
    failures = 0
    for result in results:
        print(_format_result(result))
        failures += not result.success
    return failures


def main() -> int:
    configure_logging()
    results = asyncio.run(run_all_checks())
    return 1 if print_results(results) else 0


if __name__ == "__main__":
    raise SystemExit(main())
