"""Resource kinds, records and page results shared by every admin screen."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional, Union


class ResourceKind(str, Enum):
    """The four independently moderated collections."""

    DEVICE = "device"
    REQUEST = "request"
    USER = "user"
    TEAM_MEMBER = "team_member"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


class Action(str, Enum):
    """Moderation actions an administrator can trigger."""

    APPROVE = "approve"
    REJECT = "reject"
    RESET = "reset"
    COMPLETE = "complete"
    ACTIVATE = "activate"
    DEACTIVATE = "deactivate"
    SUSPEND = "suspend"

    @classmethod
    def _missing_(cls, value: object) -> Optional["Action"]:
        return _ACTION_ALIASES.get(value) if isinstance(value, str) else None


# Names the web console uses for the same actions.
_ACTION_ALIASES = {"resetToPending": Action.RESET}

# Audit field -> JSON key used by the remote API.
AUDIT_FIELD_KEYS: dict[str, str] = {
    "admin_notes": "adminNotes",
    "rejection_reason": "rejectionReason",
    "reset_reason": "resetReason",
}



STATUSES: dict[ResourceKind, frozenset[str]] = {
    ResourceKind.DEVICE: frozenset({"pending", "approved", "rejected"}),
    ResourceKind.REQUEST: frozenset({"pending", "approved", "rejected", "completed"}),
    ResourceKind.USER: frozenset({"active", "inactive", "suspended"}),
    ResourceKind.TEAM_MEMBER: frozenset({"active", "inactive"}),
}


@dataclass(slots=True, frozen=True)
class DevicePayload:
    """Donated device attributes."""

    title: str = ""
    description: str = ""
    device_type: str = ""
    condition: str = ""
    owner_id: Optional[str] = None
    rejection_reason: Optional[str] = None
    admin_notes: Optional[str] = None
    extra: Mapping[str, Any] = field(default_factory=dict)


@dataclass(slots=True, frozen=True)
class RequestPayload:
    """A requester's ask for a specific device."""

    message: str = ""
    device_id: Optional[str] = None
    requester_id: Optional[str] = None
    rejection_reason: Optional[str] = None
    admin_notes: Optional[str] = None
    extra: Mapping[str, Any] = field(default_factory=dict)


@dataclass(slots=True, frozen=True)
class UserPayload:
    name: str = ""
    email: str = ""
    role: str = ""
    category_type: str = ""
    organization: Optional[str] = None
    extra: Mapping[str, Any] = field(default_factory=dict)


@dataclass(slots=True, frozen=True)
class TeamMemberPayload:
    name: str = ""
    email: str = ""
    role: str = ""
    bio: str = ""
    extra: Mapping[str, Any] = field(default_factory=dict)


Payload = Union[DevicePayload, RequestPayload, UserPayload, TeamMemberPayload]

PAYLOAD_TYPES: dict[ResourceKind, type] = {
    ResourceKind.DEVICE: DevicePayload,
    ResourceKind.REQUEST: RequestPayload,
    ResourceKind.USER: UserPayload,
    ResourceKind.TEAM_MEMBER: TeamMemberPayload,
}


@dataclass(slots=True, frozen=True)
class ResourceRecord:
    """Envelope around a single moderated resource.

    Records are immutable; updates produce a new record through
    :meth:`with_status` or a fresh copy returned by the remote API.
    """

    id: str
    kind: ResourceKind
    status: str
    payload: Payload
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        expected = PAYLOAD_TYPES[self.kind]
        if not isinstance(self.payload, expected):
            raise TypeError(
                f"{self.kind.label} record {self.id} needs a {expected.__name__} payload, "
                f"got {type(self.payload).__name__}",
            )

    def with_status(self, status: str) -> "ResourceRecord":
        return replace(self, status=status)


@dataclass(slots=True, frozen=True)
class PageResult:
    """One page of records as returned by a listing call."""

    items: tuple[ResourceRecord, ...]
    page: int
    total_pages: int
    total: int

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    def find(self, record_id: str) -> Optional[ResourceRecord]:
        for item in self.items:
            if item.id == record_id:
                return item
        return None
