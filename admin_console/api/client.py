"""Async client for the donation platform admin API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol

import httpx

from admin_console.api.records import ListResponse, list_from_api, record_from_api, status_body
from admin_console.config.settings import Settings
from admin_console.domain.models import ResourceKind, ResourceRecord

logger = logging.getLogger(__name__)


class ApiRequestError(RuntimeError):
    """Raised when the admin API cannot be reached or answers with an error status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class ResourceApi(Protocol):
    """Remote operations the workflow facade relies on."""

    async def list(self, kind: ResourceKind, params: Mapping[str, str]) -> ListResponse: ...

    async def update_status(
        self,
        kind: ResourceKind,
        record_id: str,
        status: str,
        audit_fields: Mapping[str, str],
    ) -> ResourceRecord: ...

    async def update(self, kind: ResourceKind, record_id: str, patch: Mapping[str, Any]) -> ResourceRecord: ...

    async def create(self, kind: ResourceKind, payload: Mapping[str, Any]) -> ResourceRecord: ...

    async def delete(self, kind: ResourceKind, record_id: str) -> None: ...

    async def stats(self) -> dict[str, Any]: ...

    async def close(self) -> None: ...


@dataclass(slots=True, frozen=True)
class Endpoints:
    """REST routes for one resource kind, relative to the API base path."""

    collection: str
    status: str
    status_method: str
    item: str
    create: str
    delete: str
    items_key: str
    item_key: str


ENDPOINTS: dict[ResourceKind, Endpoints] = {
    ResourceKind.DEVICE: Endpoints(
        collection="/admin/devices",
        status="/admin/devices/{id}/status",
        status_method="PATCH",
        item="/devices/{id}",
        create="/devices",
        delete="/devices/admin/{id}",
        items_key="devices",
        item_key="device",
    ),
    ResourceKind.REQUEST: Endpoints(
        collection="/admin/requests",
        status="/device-requests/admin/{id}/status",
        status_method="PUT",
        item="/device-requests/admin/{id}",
        create="/device-requests",
        delete="/device-requests/admin/{id}",
        items_key="requests",
        item_key="request",
    ),
    ResourceKind.USER: Endpoints(
        collection="/admin/users",
        status="/admin/users/{id}/status",
        status_method="PUT",
        item="/admin/users/{id}",
        create="/auth/register",
        delete="/admin/users/{id}",
        items_key="users",
        item_key="user",
    ),
    ResourceKind.TEAM_MEMBER: Endpoints(
        collection="/admin/team-members",
        status="/admin/team-members/{id}/status",
        status_method="PATCH",
        item="/admin/team-members/{id}",
        create="/admin/team-members",
        delete="/admin/team-members/{id}",
        items_key="members",
        item_key="member",
    ),
}


class HttpResourceApi:
    """:class:`ResourceApi` over the platform's REST endpoints."""

    def __init__(
        self,
        settings: Settings,
        *,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        bearer = token if token is not None else settings.api_token
        headers = {"Content-Type": "application/json"}
        if bearer:
            headers["Authorization"] = f"Bearer {bearer}"
        self._client = httpx.AsyncClient(
            base_url=settings.api_root,
            timeout=settings.request_timeout,
            headers=headers,
            transport=transport,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""

        await self._client.aclose()

    async def _request_json(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, str] | None = None,
        json_body: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        try:
            response = await self._client.request(method, endpoint, params=params, json=json_body)
            response.raise_for_status()
            if not response.content:
                return {}
            return response.json()
        except httpx.TimeoutException as exc:
            raise ApiRequestError(f"{method} {endpoint} timed out.") from exc
        except httpx.HTTPStatusError as exc:
            raise ApiRequestError(
                self._error_message(exc.response),
                status_code=exc.response.status_code,
            ) from exc
        except httpx.TransportError as exc:
            raise ApiRequestError(f"{method} {endpoint} failed: {exc}") from exc
        except ValueError as exc:
            raise ApiRequestError(f"{method} {endpoint} returned invalid JSON.") from exc

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, Mapping) and body.get("error"):
            return str(body["error"])
        return f"HTTP error! status: {response.status_code}"

    @staticmethod
    def _unwrap(body: Mapping[str, Any], key: str) -> Mapping[str, Any]:
        inner = body.get(key)
        return inner if isinstance(inner, Mapping) else body

    async def list(self, kind: ResourceKind, params: Mapping[str, str]) -> ListResponse:
        routes = ENDPOINTS[kind]
        body = await self._request_json("GET", routes.collection, params=params)
        return list_from_api(kind, body, routes.items_key)

    async def update_status(
        self,
        kind: ResourceKind,
        record_id: str,
        status: str,
        audit_fields: Mapping[str, str],
    ) -> ResourceRecord:
        routes = ENDPOINTS[kind]
        body = await self._request_json(
            routes.status_method,
            routes.status.format(id=record_id),
            json_body=status_body(kind, status, audit_fields),
        )
        return record_from_api(kind, self._unwrap(body, routes.item_key))

    async def update(self, kind: ResourceKind, record_id: str, patch: Mapping[str, Any]) -> ResourceRecord:
        routes = ENDPOINTS[kind]
        body = await self._request_json("PUT", routes.item.format(id=record_id), json_body=patch)
        return record_from_api(kind, self._unwrap(body, routes.item_key))

    async def create(self, kind: ResourceKind, payload: Mapping[str, Any]) -> ResourceRecord:
        routes = ENDPOINTS[kind]
        body = await self._request_json("POST", routes.create, json_body=payload)
        return record_from_api(kind, self._unwrap(body, routes.item_key))

    async def delete(self, kind: ResourceKind, record_id: str) -> None:
        await self._request_json("DELETE", ENDPOINTS[kind].delete.format(id=record_id))

    async def stats(self) -> dict[str, Any]:
        """Dashboard counters (users, devices, requests, devices per status)."""

        return await self._request_json("GET", "/admin/stats")

    async def ping(self) -> bool:
        """Return ``True`` when the server health endpoint answers."""

        response = await self._client.get(self._settings.api_url.rstrip("/") + "/health")
        return response.status_code == 200
