"""Tests for first-visit loading of management tabs."""

from __future__ import annotations

import asyncio

import pytest
from conftest import FakeResourceApi, make_record

from admin_console.api.client import ApiRequestError
from admin_console.domain.errors import FetchFailed
from admin_console.domain.models import ResourceKind
from admin_console.services.loader import LazyTabLoader
from admin_console.services.workflow import AdminWorkflowFacade

REQUEST = ResourceKind.REQUEST


def _slow_lists(api: FakeResourceApi) -> asyncio.Event:
    release = asyncio.Event()

    async def hold(kind: ResourceKind, params: dict[str, str]) -> None:
        await release.wait()

    api.list_hook = hold
    return release


@pytest.mark.asyncio
async def test_ensure_loaded_fetches_once_under_concurrency(
    api: FakeResourceApi, facade: AdminWorkflowFacade
) -> None:
    api.seed(make_record(REQUEST, "r1", "pending"))
    loader = LazyTabLoader(facade)
    release = _slow_lists(api)

    calls = [asyncio.create_task(loader.ensure_loaded(REQUEST)) for _ in range(3)]
    await asyncio.sleep(0)
    release.set()
    pages = await asyncio.gather(*calls)

    assert len(api.list_calls) == 1
    assert all(page is pages[0] for page in pages)
    assert facade.store(REQUEST).has_loaded_once()


@pytest.mark.asyncio
async def test_ensure_loaded_is_noop_after_first_visit(
    api: FakeResourceApi, facade: AdminWorkflowFacade
) -> None:
    loader = LazyTabLoader(facade)

    first = await loader.ensure_loaded(REQUEST)
    second = await loader.ensure_loaded(REQUEST)
    third = await loader.ensure_loaded(REQUEST)

    assert len(api.list_calls) == 1
    assert first is second is third


@pytest.mark.asyncio
async def test_force_refresh_always_fetches(api: FakeResourceApi, facade: AdminWorkflowFacade) -> None:
    loader = LazyTabLoader(facade)

    await loader.force_refresh(REQUEST)
    await loader.ensure_loaded(REQUEST)
    await loader.force_refresh(REQUEST)

    assert len(api.list_calls) == 2
    assert facade.store(REQUEST).has_loaded_once()


@pytest.mark.asyncio
async def test_force_refresh_keeps_current_filters(
    api: FakeResourceApi, facade: AdminWorkflowFacade
) -> None:
    loader = LazyTabLoader(facade)
    await facade.list_page(REQUEST, 2, {"status": "approved"})

    await loader.force_refresh(REQUEST)

    kind, params = api.list_calls[-1]
    assert params["status"] == "approved"
    assert params["page"] == "2"


@pytest.mark.asyncio
async def test_failed_first_load_stays_claimed(api: FakeResourceApi, facade: AdminWorkflowFacade) -> None:
    loader = LazyTabLoader(facade)
    api.fail_next = ApiRequestError("Failed to fetch requests", status_code=503)

    with pytest.raises(FetchFailed):
        await loader.ensure_loaded(REQUEST)
    assert await loader.ensure_loaded(REQUEST) is None
    assert len(api.list_calls) == 1

    page = await loader.force_refresh(REQUEST)
    assert page.total == 0
    assert len(api.list_calls) == 2


@pytest.mark.asyncio
async def test_cancel_discards_in_flight_first_load(
    api: FakeResourceApi, facade: AdminWorkflowFacade
) -> None:
    api.seed(make_record(REQUEST, "r1", "pending"))
    loader = LazyTabLoader(facade)
    release = _slow_lists(api)

    pending = asyncio.create_task(loader.ensure_loaded(REQUEST))
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    loader.cancel(REQUEST)
    release.set()
    await pending

    store = facade.store(REQUEST)
    assert store.current_page is None
    assert not store.has_loaded_once()

    api.list_hook = None
    page = await loader.ensure_loaded(REQUEST)
    assert [item.id for item in page.items] == ["r1"]
    assert len(api.list_calls) == 2
