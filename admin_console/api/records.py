"""Translation between the donation platform's JSON documents and resource records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from admin_console.domain.models import (
    AUDIT_FIELD_KEYS,
    DevicePayload,
    Payload,
    RequestPayload,
    ResourceKind,
    ResourceRecord,
    TeamMemberPayload,
    UserPayload,
)

# Keys that live on the envelope rather than in the payload.
_ENVELOPE_KEYS = {"_id", "id", "status", "createdAt", "updatedAt", "__v"}

# Remote field -> payload attribute, per kind.
_FIELD_MAP: dict[ResourceKind, dict[str, str]] = {
    ResourceKind.DEVICE: {
        "title": "title",
        "description": "description",
        "deviceType": "device_type",
        "condition": "condition",
        "ownerId": "owner_id",
        "rejectionReason": "rejection_reason",
        "adminNotes": "admin_notes",
    },
    ResourceKind.REQUEST: {
        "message": "message",
        "deviceId": "device_id",
        "requesterId": "requester_id",
        "rejectionReason": "rejection_reason",
        "adminNotes": "admin_notes",
    },
    ResourceKind.USER: {
        "name": "name",
        "email": "email",
        "userRole": "role",
        "categoryType": "category_type",
        "organization": "organization",
    },
    ResourceKind.TEAM_MEMBER: {
        "name": "name",
        "email": "email",
        "role": "role",
        "bio": "bio",
    },
}

_PAYLOADS = {
    ResourceKind.DEVICE: DevicePayload,
    ResourceKind.REQUEST: RequestPayload,
    ResourceKind.USER: UserPayload,
    ResourceKind.TEAM_MEMBER: TeamMemberPayload,
}


@dataclass(slots=True, frozen=True)
class ListResponse:
    """Normalised body of a listing call."""

    items: tuple[ResourceRecord, ...]
    total: int
    total_pages: int


def parse_datetime(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _reference_id(value: Any) -> Any:
    """Populated references arrive as documents; keep only their id."""

    if isinstance(value, Mapping):
        return value.get("_id") or value.get("id")
    return value


def _status_of(kind: ResourceKind, data: Mapping[str, Any]) -> str:
    status = data.get("status")
    if status:
        return str(status)
    if kind in (ResourceKind.USER, ResourceKind.TEAM_MEMBER):
        return "active" if data.get("isActive", True) else "inactive"
    return "pending"


def _build_payload(kind: ResourceKind, data: Mapping[str, Any]) -> Payload:
    mapping = _FIELD_MAP[kind]
    values: dict[str, Any] = {}
    extra: dict[str, Any] = {}
    for key, value in data.items():
        if key in _ENVELOPE_KEYS:
            continue
        if key in mapping:
            values[mapping[key]] = _reference_id(value) if key.endswith("Id") else value
        else:
            extra[key] = value

    # Request documents embed the device and requester under *Info keys.
    if kind is ResourceKind.REQUEST:
        values.setdefault("device_id", _reference_id(data.get("deviceInfo")))
        values.setdefault("requester_id", _reference_id(data.get("requesterInfo")))
    return _PAYLOADS[kind](**values, extra=extra)


def record_from_api(kind: ResourceKind, data: Mapping[str, Any]) -> ResourceRecord:
    """Build a :class:`ResourceRecord` from a remote document."""

    record_id = data.get("_id") or data.get("id")
    if not record_id:
        raise ValueError(f"{kind.label} document has no id: {dict(data)!r}")
    return ResourceRecord(
        id=str(record_id),
        kind=kind,
        status=_status_of(kind, data),
        payload=_build_payload(kind, data),
        created_at=parse_datetime(data.get("createdAt")),
        updated_at=parse_datetime(data.get("updatedAt")),
    )


def list_from_api(kind: ResourceKind, body: Mapping[str, Any], items_key: str) -> ListResponse:
    raw_items = body.get(items_key)
    if raw_items is None:
        raw_items = body.get("items", [])
    items = tuple(record_from_api(kind, item) for item in raw_items)
    total = int(body.get("total", len(items)))
    return ListResponse(
        items=items,
        total=total,
        total_pages=int(body.get("totalPages", 1 if total else 0)),
    )


def status_body(kind: ResourceKind, status: str, audit_fields: Mapping[str, str]) -> dict[str, Any]:
    """JSON body for a status update."""

    body: dict[str, Any] = {"status": status}
    for name, value in audit_fields.items():
        body[AUDIT_FIELD_KEYS.get(name, name)] = value
    if kind is ResourceKind.USER:
        body["isActive"] = status == "active"
    return body
