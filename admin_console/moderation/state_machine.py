"""Table-driven moderation workflow shared by all resource kinds."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional, Union

from admin_console.domain.models import AUDIT_FIELD_KEYS, Action, ResourceKind


class RejectionReason(str, Enum):
    """Why the state machine refused a transition."""

    INVALID_TRANSITION = "invalid_transition"
    MISSING_REQUIRED_FIELD = "missing_required_field"


@dataclass(slots=True, frozen=True)
class Edge:
    next_status: str
    required_field: Optional[str] = None


@dataclass(slots=True, frozen=True)
class Accepted:
    """A legal transition together with the audit payload to send downstream."""

    next_status: str
    audit: Mapping[str, str] = field(default_factory=dict)


@dataclass(slots=True, frozen=True)
class Rejected:
    reason: RejectionReason
    field: Optional[str] = None


Decision = Union[Accepted, Rejected]

D, R, U, T = (
    ResourceKind.DEVICE,
    ResourceKind.REQUEST,
    ResourceKind.USER,
    ResourceKind.TEAM_MEMBER,
)

TRANSITIONS: dict[tuple[ResourceKind, str, Action], Edge] = {
    (D, "pending", Action.APPROVE): Edge("approved"),
    (D, "pending", Action.REJECT): Edge("rejected", "rejection_reason"),
    (D, "approved", Action.REJECT): Edge("rejected", "rejection_reason"),
    (D, "rejected", Action.RESET): Edge("pending", "reset_reason"),
    (R, "pending", Action.APPROVE): Edge("approved"),
    (R, "pending", Action.REJECT): Edge("rejected", "rejection_reason"),
    (R, "approved", Action.COMPLETE): Edge("completed"),
    (U, "active", Action.DEACTIVATE): Edge("inactive"),
    (U, "active", Action.SUSPEND): Edge("suspended"),
    (U, "inactive", Action.ACTIVATE): Edge("active"),
    (U, "suspended", Action.ACTIVATE): Edge("active"),
    (T, "active", Action.DEACTIVATE): Edge("inactive"),
    (T, "inactive", Action.ACTIVATE): Edge("active"),
}

# Free-form audit fields forwarded when present; required ones come from the edge.
_OPTIONAL_FIELDS = ("admin_notes",)

_REMOTE_KEYS = {remote: name for name, remote in AUDIT_FIELD_KEYS.items()}


def _text(value: object) -> str:
    return value.strip() if isinstance(value, str) else ""


def _audit_values(audit_fields: Optional[Mapping[str, object]]) -> dict[str, object]:
    """Accept audit fields under either their own or their remote (camelCase) name."""

    values: dict[str, object] = {}
    for key, value in (audit_fields or {}).items():
        name = _REMOTE_KEYS.get(key, key)
        if key == name or name not in values:
            values[name] = value
    return values


def _as_action(action: Union[Action, str]) -> Optional[Action]:
    try:
        return Action(action)
    except ValueError:
        return None


def decide(
    kind: ResourceKind,
    current_status: str,
    action: Union[Action, str],
    audit_fields: Optional[Mapping[str, object]] = None,
) -> Decision:
    """Decide whether ``action`` is legal for a ``kind`` record in ``current_status``.

    Pure: never raises and never performs I/O. Unknown statuses and actions
    are reported as :attr:`RejectionReason.INVALID_TRANSITION`.
    """

    resolved = _as_action(action)
    edge = TRANSITIONS.get((kind, current_status, resolved)) if resolved else None
    if edge is None:
        return Rejected(RejectionReason.INVALID_TRANSITION)

    fields = _audit_values(audit_fields)
    audit: dict[str, str] = {}
    if edge.required_field:
        value = _text(fields.get(edge.required_field))
        if not value:
            return Rejected(RejectionReason.MISSING_REQUIRED_FIELD, edge.required_field)
        audit[edge.required_field] = value

    for name in _OPTIONAL_FIELDS:
        value = _text(fields.get(name))
        if value:
            audit[name] = value

    return Accepted(edge.next_status, audit)


def allowed_actions(kind: ResourceKind, current_status: str) -> list[Action]:
    """Actions a screen should offer for a record in ``current_status``."""

    return [
        action
        for (edge_kind, status, action) in TRANSITIONS
        if edge_kind is kind and status == current_status
    ]
