"""Per-kind page cache with first-visit tracking and stale-response protection."""

from __future__ import annotations

import itertools
import logging
import math
from dataclasses import dataclass, replace
from typing import Iterator, Optional

from admin_console.domain.models import PageResult, ResourceKind, ResourceRecord
from admin_console.domain.query import QuerySpec

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class FetchTicket:
    """Tags an outgoing listing call with the spec and store generation it was issued for."""

    spec: QuerySpec
    generation: int
    serial: int


class ResourceStore:
    """Holds the current page for one resource kind.

    A ``None`` from :meth:`get_page` is a cache miss. Only the workflow facade
    writes to a store.
    """

    def __init__(self, kind: ResourceKind) -> None:
        self.kind = kind
        self._spec: Optional[QuerySpec] = None
        self._page: Optional[PageResult] = None
        self._loaded = False
        self._generation = 0
        self._latest: Optional[FetchTicket] = None
        self._in_flight: set[int] = set()
        self._serials = itertools.count(1)

    # -- cache ---------------------------------------------------------------

    def get_page(self, spec: QuerySpec) -> Optional[PageResult]:
        if self._page is not None and self._spec == spec:
            return self._page
        return None

    def set_page(self, spec: QuerySpec, result: PageResult) -> None:
        self._spec = spec
        self._page = result

    @property
    def current_spec(self) -> Optional[QuerySpec]:
        return self._spec

    @property
    def current_page(self) -> Optional[PageResult]:
        return self._page

    def has_loaded_once(self) -> bool:
        return self._loaded

    def mark_loaded_once(self) -> None:
        self._loaded = True

    def invalidate(self) -> None:
        """Forget the cached page and the first-visit flag."""

        self._spec = None
        self._page = None
        self._loaded = False

    # -- fetch bookkeeping ---------------------------------------------------

    @property
    def is_loading(self) -> bool:
        return bool(self._in_flight)

    def begin_fetch(self, spec: QuerySpec) -> FetchTicket:
        ticket = FetchTicket(spec=spec, generation=self._generation, serial=next(self._serials))
        self._latest = ticket
        self._in_flight.add(ticket.serial)
        return ticket

    def end_fetch(self, ticket: FetchTicket) -> None:
        self._in_flight.discard(ticket.serial)

    def show(self, spec: QuerySpec) -> None:
        """Record that ``spec`` is now displayed; responses for any other spec are dropped."""

        self._latest = FetchTicket(spec=spec, generation=self._generation, serial=next(self._serials))

    def accept(self, ticket: FetchTicket, result: PageResult) -> bool:
        """Store ``result`` unless another spec is displayed or the screen was torn down."""

        if ticket.generation != self._generation:
            logger.debug("Discarding %s page %s fetched before teardown", self.kind.value, ticket.spec.page)
            return False
        if self._latest is not None and self._latest.spec != ticket.spec:
            logger.debug("Discarding stale %s response for %s", self.kind.value, ticket.spec)
            return False
        self.set_page(ticket.spec, result)
        return True

    def cancel_pending(self) -> None:
        """Make every in-flight response land nowhere; the cache itself is kept."""

        self._generation += 1
        self._latest = None
        self._in_flight.clear()

    def reset(self) -> None:
        self.cancel_pending()
        self.invalidate()

    # -- in-place record updates ---------------------------------------------

    def find(self, record_id: str) -> Optional[ResourceRecord]:
        if self._page is None:
            return None
        return self._page.find(record_id)

    def replace_record(self, record: ResourceRecord) -> bool:
        if self._page is None or self._page.find(record.id) is None:
            return False
        items = tuple(record if item.id == record.id else item for item in self._page.items)
        self._page = replace(self._page, items=items)
        return True

    def drop_record(self, record_id: str) -> bool:
        if self._page is None or self._page.find(record_id) is None:
            return False
        items = tuple(item for item in self._page.items if item.id != record_id)
        self._page = self._with_total(replace(self._page, items=items), self._page.total - 1)
        return True

    def add_record(self, record: ResourceRecord) -> None:
        """Account for a newly created record; newest-first pages show it on page 1."""

        if self._page is None or self._spec is None:
            return
        page = self._page
        if page.page == 1:
            page = replace(page, items=((record,) + page.items)[: self._spec.page_size])
        self._page = self._with_total(page, page.total + 1)

    def _with_total(self, page: PageResult, total: int) -> PageResult:
        total = max(0, total)
        size = self._spec.page_size if self._spec is not None else max(1, len(page.items))
        pages = math.ceil(total / size)
        # The shown page number stays valid until the next refresh.
        if pages:
            pages = max(pages, page.page)
        return replace(page, total=total, total_pages=pages)


class StoreRegistry:
    """Process-wide set of stores, one per resource kind."""

    def __init__(self) -> None:
        self._stores = {kind: ResourceStore(kind) for kind in ResourceKind}

    def get(self, kind: ResourceKind) -> ResourceStore:
        return self._stores[kind]

    def clear(self) -> None:
        for store in self._stores.values():
            store.reset()

    def __iter__(self) -> Iterator[ResourceStore]:
        return iter(self._stores.values())
