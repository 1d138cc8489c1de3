"""Shared fixtures: an in-memory admin API whose calls can be held open."""

from __future__ import annotations

import math
from typing import Any, Awaitable, Callable, Mapping, Optional

import pytest

from admin_console.api.records import ListResponse
from admin_console.config.settings import get_settings
from admin_console.domain.models import (
    PAYLOAD_TYPES,
    ResourceKind,
    ResourceRecord,
)
from admin_console.services.workflow import AdminWorkflowFacade

Hook = Callable[..., Awaitable[None]]


def make_record(kind: ResourceKind, record_id: str, status: str, **payload: Any) -> ResourceRecord:
    return ResourceRecord(
        id=record_id,
        kind=kind,
        status=status,
        payload=PAYLOAD_TYPES[kind](**payload),
    )


class FakeResourceApi:
    """Minimal stand-in for the remote API.

    ``list_hook`` / ``mutation_hook`` are awaited before a call returns, which
    lets a test keep a call in flight until it sets an event.
    """

    def __init__(self) -> None:
        self.records: dict[ResourceKind, dict[str, ResourceRecord]] = {kind: {} for kind in ResourceKind}
        self.list_calls: list[tuple[ResourceKind, dict[str, str]]] = []
        self.status_calls: list[tuple[ResourceKind, str, str, dict[str, str]]] = []
        self.update_calls: list[tuple[ResourceKind, str, dict[str, Any]]] = []
        self.create_calls: list[tuple[ResourceKind, dict[str, Any]]] = []
        self.delete_calls: list[tuple[ResourceKind, str]] = []
        self.list_hook: Optional[Hook] = None
        self.mutation_hook: Optional[Hook] = None
        self.fail_next: Optional[Exception] = None
        self.closed = False
        self._created = 0

    def seed(self, *records: ResourceRecord) -> None:
        for record in records:
            self.records[record.kind][record.id] = record

    def _raise_if_failing(self) -> None:
        if self.fail_next is not None:
            error, self.fail_next = self.fail_next, None
            raise error

    async def list(self, kind: ResourceKind, params: Mapping[str, str]) -> ListResponse:
        self.list_calls.append((kind, dict(params)))
        if self.list_hook is not None:
            await self.list_hook(kind, dict(params))
        self._raise_if_failing()
        matching = [
            record
            for record in self.records[kind].values()
            if "status" not in params or record.status == params["status"]
        ]
        page, limit = int(params["page"]), int(params["limit"])
        start = (page - 1) * limit
        return ListResponse(
            items=tuple(matching[start : start + limit]),
            total=len(matching),
            total_pages=math.ceil(len(matching) / limit),
        )

    async def update_status(
        self,
        kind: ResourceKind,
        record_id: str,
        status: str,
        audit_fields: Mapping[str, str],
    ) -> ResourceRecord:
        self.status_calls.append((kind, record_id, status, dict(audit_fields)))
        if self.mutation_hook is not None:
            await self.mutation_hook(kind, record_id)
        self._raise_if_failing()
        updated = self.records[kind][record_id].with_status(status)
        self.records[kind][record_id] = updated
        return updated

    async def update(self, kind: ResourceKind, record_id: str, patch: Mapping[str, Any]) -> ResourceRecord:
        self.update_calls.append((kind, record_id, dict(patch)))
        if self.mutation_hook is not None:
            await self.mutation_hook(kind, record_id)
        self._raise_if_failing()
        current = self.records[kind][record_id]
        payload = type(current.payload)(**{**_payload_fields(current), **patch})
        updated = ResourceRecord(id=record_id, kind=kind, status=current.status, payload=payload)
        self.records[kind][record_id] = updated
        return updated

    async def create(self, kind: ResourceKind, payload: Mapping[str, Any]) -> ResourceRecord:
        self.create_calls.append((kind, dict(payload)))
        if self.mutation_hook is not None:
            await self.mutation_hook(kind, None)
        self._raise_if_failing()
        self._created += 1
        status = "pending" if kind in (ResourceKind.DEVICE, ResourceKind.REQUEST) else "active"
        record = make_record(kind, f"new-{self._created}", status, **payload)
        self.records[kind][record.id] = record
        return record

    async def delete(self, kind: ResourceKind, record_id: str) -> None:
        self.delete_calls.append((kind, record_id))
        if self.mutation_hook is not None:
            await self.mutation_hook(kind, record_id)
        self._raise_if_failing()
        del self.records[kind][record_id]

    async def stats(self) -> dict[str, Any]:
        self._raise_if_failing()
        devices = self.records[ResourceKind.DEVICE].values()
        return {
            "totalDevices": len(devices),
            "pendingDevices": sum(1 for d in devices if d.status == "pending"),
        }

    async def close(self) -> None:
        self.closed = True


def _payload_fields(record: ResourceRecord) -> dict[str, Any]:
    return {name: getattr(record.payload, name) for name in record.payload.__dataclass_fields__}


@pytest.fixture(autouse=True)
def _settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ADMIN_API_URL", "http://admin.test")
    monkeypatch.setenv("ADMIN_API_BASE_PATH", "/api")
    monkeypatch.setenv("ADMIN_API_TOKEN", "test-token")
    monkeypatch.setenv("ADMIN_DEFAULT_PAGE_SIZE", "10")
    monkeypatch.setenv("ADMIN_MAX_PAGE_SIZE", "100")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def api() -> FakeResourceApi:
    return FakeResourceApi()


@pytest.fixture
def facade(api: FakeResourceApi) -> AdminWorkflowFacade:
    return AdminWorkflowFacade(api)
