"""Tests for the per-kind page cache."""

from __future__ import annotations

from conftest import make_record

from admin_console.domain.models import PageResult, ResourceKind
from admin_console.domain.query import build_query
from admin_console.storage.store import ResourceStore, StoreRegistry

DEVICE = ResourceKind.DEVICE


def _page(*ids: str, page: int = 1, total: int | None = None) -> PageResult:
    items = tuple(make_record(DEVICE, record_id, "pending") for record_id in ids)
    count = len(items) if total is None else total
    return PageResult(items=items, page=page, total_pages=max(1, -(-count // 10)), total=count)


def test_get_page_requires_exact_spec() -> None:
    store = ResourceStore(DEVICE)
    spec = build_query(DEVICE, 1, {"status": "pending"})
    store.set_page(spec, _page("d1"))

    assert store.get_page(build_query(DEVICE, 1, {"status": "pending"})) is not None
    assert store.get_page(build_query(DEVICE, 2, {"status": "pending"})) is None
    assert store.get_page(build_query(DEVICE, 1, {"status": "approved"})) is None


def test_invalidate_clears_flag_and_page() -> None:
    store = ResourceStore(DEVICE)
    spec = build_query(DEVICE)
    store.set_page(spec, _page("d1"))
    store.mark_loaded_once()

    store.invalidate()

    assert not store.has_loaded_once()
    assert store.get_page(spec) is None


def test_newer_spec_wins_over_late_response() -> None:
    store = ResourceStore(DEVICE)
    pending = build_query(DEVICE, 1, {"status": "pending"})
    approved = build_query(DEVICE, 1, {"status": "approved"})
    slow = store.begin_fetch(pending)
    fast = store.begin_fetch(approved)

    assert store.accept(fast, _page("a1"))
    assert not store.accept(slow, _page("p1"))
    assert store.current_spec == approved


def test_shown_cached_spec_rejects_in_flight_response() -> None:
    store = ResourceStore(DEVICE)
    pending = build_query(DEVICE, 1, {"status": "pending"})
    approved = build_query(DEVICE, 1, {"status": "approved"})
    store.set_page(pending, _page("p1"))
    ticket = store.begin_fetch(approved)

    store.show(pending)

    assert not store.accept(ticket, _page("a1"))
    assert store.current_spec == pending



def test_cancel_pending_discards_in_flight_but_keeps_cache() -> None:
    store = ResourceStore(DEVICE)
    spec = build_query(DEVICE)
    store.set_page(spec, _page("d1"))
    ticket = store.begin_fetch(spec)
    assert store.is_loading

    store.cancel_pending()

    assert not store.is_loading
    assert not store.accept(ticket, _page("d2"))
    assert store.get_page(spec).items[0].id == "d1"


def test_replace_and_drop_record_update_page_in_place() -> None:
    store = ResourceStore(DEVICE)
    spec = build_query(DEVICE)
    store.set_page(spec, _page("d1", "d2", total=11))

    assert store.replace_record(make_record(DEVICE, "d1", "approved"))
    assert store.find("d1").status == "approved"

    assert store.drop_record("d2")
    page = store.current_page
    assert [item.id for item in page.items] == ["d1"]
    assert page.total == 10
    assert page.total_pages == 1


def test_add_record_prepends_on_first_page() -> None:
    store = ResourceStore(DEVICE)
    store.set_page(build_query(DEVICE, page_size=2), _page("d1", "d2"))

    store.add_record(make_record(DEVICE, "d3", "pending"))

    page = store.current_page
    assert [item.id for item in page.items] == ["d3", "d1"]
    assert page.total == 3
    assert page.total_pages == 2


def test_registry_holds_one_store_per_kind_and_clears_all() -> None:
    registry = StoreRegistry()
    for kind in ResourceKind:
        registry.get(kind).mark_loaded_once()

    registry.clear()

    assert len(list(registry)) == len(ResourceKind)
    assert not any(store.has_loaded_once() for store in registry)
