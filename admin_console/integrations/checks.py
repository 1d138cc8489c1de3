"""Connectivity checks for the remote admin API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable

from admin_console.api.client import HttpResourceApi
from admin_console.config.settings import get_settings


@dataclass(slots=True)
class IntegrationCheckResult:
    """Structured result describing the integration check outcome."""

    name: str
    success: bool
    message: str


async def _run_check(
    name: str,
    factory: Callable[[], Awaitable[bool]],
    success_message: str,
) -> IntegrationCheckResult:
    try:
        result = await factory()
    except Exception as exc:
        return IntegrationCheckResult(name=name, success=False, message=str(exc) or type(exc).__name__)

    if result:
        return IntegrationCheckResult(name=name, success=True, message=success_message)
    return IntegrationCheckResult(
        name=name,
        success=False,
        message="Service responded with non-success status.",
    )


async def check_admin_api() -> IntegrationCheckResult:
    """Hit the health endpoint of the configured admin API."""

    settings = get_settings()
    client = HttpResourceApi(settings)

    async def _ping() -> bool:
        try:
            return await client.ping()
        finally:
            await client.close()

    return await _run_check(
        name="Admin API",
        factory=_ping,
        success_message=f"{settings.api_url} is reachable.",
    )


async def check_admin_stats() -> IntegrationCheckResult:
    """Verify the configured token is accepted by an admin-only endpoint."""

    client = HttpResourceApi(get_settings())

    async def _stats() -> bool:
        try:
            return isinstance(await client.stats(), dict)
        finally:
            await client.close()

    return await _run_check(
        name="Admin stats",
        factory=_stats,
        success_message="Admin token accepted.",
    )


async def run_all_checks() -> list[IntegrationCheckResult]:
    """Execute all integration checks concurrently."""

    return list(await asyncio.gather(check_admin_api(), check_admin_stats()))
