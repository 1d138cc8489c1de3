"""Admin session lifecycle: stores are created at login and cleared at logout."""

from __future__ import annotations

import logging
from typing import Optional

from admin_console.api.client import HttpResourceApi, ResourceApi
from admin_console.config.settings import Settings, get_settings
from admin_console.services.loader import LazyTabLoader
from admin_console.services.workflow import AdminWorkflowFacade
from admin_console.storage.store import StoreRegistry

logger = logging.getLogger(__name__)


class AdminSession:
    """Bundles the per-session stores, facade and tab loader."""

    def __init__(self, api: ResourceApi) -> None:
        self.api = api
        self.stores = StoreRegistry()
        self.workflow = AdminWorkflowFacade(api, self.stores)
        self.loader = LazyTabLoader(self.workflow)
        self._closed = False

    @classmethod
    def open(cls, token: str, settings: Optional[Settings] = None) -> "AdminSession":
        """Start a session against the configured admin API with ``token``."""

        return cls(HttpResourceApi(settings or get_settings(), token=token))

    @property
    def closed(self) -> bool:
        return self._closed

    async def close(self) -> None:
        """Logout: drop every cached page and discard in-flight responses."""

        if self._closed:
            return
        self._closed = True
        self.stores.clear()
        await self.api.close()
        logger.info("Admin session closed")

    async def __aenter__(self) -> "AdminSession":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


_current: Optional[AdminSession] = None


def start_session(token: str, settings: Optional[Settings] = None) -> AdminSession:
    """Open the process-wide session; a previous one must be ended first."""

    global _current
    if _current is not None and not _current.closed:
        raise RuntimeError("An admin session is already active; end it before starting another.")
    _current = AdminSession.open(token, settings)
    return _current


def get_session() -> AdminSession:
    if _current is None or _current.closed:
        raise RuntimeError("No active admin session.")
    return _current


async def end_session() -> None:
    global _current
    if _current is None:
        return
    session, _current = _current, None
    await session.close()
