"""Fetch-on-first-visit for management tabs, with an explicit refresh."""

from __future__ import annotations

import asyncio
import logging
from typing import Mapping, Optional

from admin_console.domain.models import PageResult, ResourceKind
from admin_console.domain.query import build_query, default_query
from admin_console.services.workflow import AdminWorkflowFacade

logger = logging.getLogger(__name__)


class LazyTabLoader:
    """Loads each resource kind once per session unless explicitly refreshed."""

    def __init__(self, facade: AdminWorkflowFacade) -> None:
        self._facade = facade
        self._first_loads: dict[ResourceKind, asyncio.Task[PageResult]] = {}

    async def ensure_loaded(self, kind: ResourceKind) -> Optional[PageResult]:
        """Load ``kind`` if this is the first visit; otherwise return what is cached.

        Concurrent callers share one in-flight first load. A failed first load
        keeps the kind marked as loaded; use :meth:`force_refresh` to retry.
        """

        pending = self._first_loads.get(kind)
        if pending is not None and not pending.done():
            return await asyncio.shield(pending)

        store = self._facade.store(kind)
        if store.has_loaded_once():
            return store.current_page

        # Claim the flag before awaiting so concurrent calls see it taken.
        store.mark_loaded_once()
        task = asyncio.ensure_future(self._facade.fetch(default_query(kind)))
        self._first_loads[kind] = task
        task.add_done_callback(lambda done, kind=kind: self._forget(kind, done))
        logger.debug("First load of %s", kind.value)
        return await asyncio.shield(task)

    async def force_refresh(
        self,
        kind: ResourceKind,
        page: Optional[int] = None,
        filters: Optional[Mapping[str, object]] = None,
        search: Optional[str] = None,
    ) -> PageResult:
        """Always hit the remote API, keeping the screen's current query unless overridden."""

        store = self._facade.store(kind)
        current = store.current_spec or default_query(kind)
        spec = build_query(
            kind,
            page if page is not None else current.page,
            filters if filters is not None else current.filter_map,
            search if search is not None else current.search,
            page_size=current.page_size,
        )
        store.mark_loaded_once()
        return await self._facade.fetch(spec, refresh=True)

    def cancel(self, kind: ResourceKind) -> None:
        """Screen teardown: responses still in flight for ``kind`` are discarded."""

        store = self._facade.store(kind)
        pending = self._first_loads.pop(kind, None)
        store.cancel_pending()
        if pending is not None and not pending.done():
            # The first load never landed; the next visit must fetch again.
            store.invalidate()

    def _forget(self, kind: ResourceKind, task: asyncio.Task) -> None:
        if self._first_loads.get(kind) is task:
            del self._first_loads[kind]
