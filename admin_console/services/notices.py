"""Turn workflow outcomes into toast-style notices for the screens."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from admin_console.domain.errors import (
    Busy,
    ConsoleError,
    FetchFailed,
    InvalidTransition,
    MissingRequiredField,
    MutationFailed,
    RecordNotLoaded,
)
from admin_console.domain.models import Action, ResourceKind

DEFAULT = "default"
DESTRUCTIVE = "destructive"

_PAST_TENSE = {
    "approve": "approved",
    "reject": "rejected",
    "reset": "reset to pending",
    "complete": "marked as completed",
    "activate": "activated",
    "deactivate": "deactivated",
    "suspend": "suspended",
    "edit": "updated",
    "create": "created",
    "delete": "deleted",
}

_TITLES: dict[type, str] = {
    InvalidTransition: "Action not available",
    MissingRequiredField: "More information needed",
    Busy: "Already processing",
    RecordNotLoaded: "Refresh required",
    FetchFailed: "Could not load data",
    MutationFailed: "Update failed",
}


@dataclass(slots=True, frozen=True)
class Notice:
    title: str
    description: str
    variant: str = DEFAULT


def describe(error: ConsoleError) -> Notice:
    """Notice naming the resource and the attempted action."""

    title = _TITLES.get(type(error), "Error")
    # Busy and missing fields are recoverable by the user without anything having failed.
    variant = DEFAULT if isinstance(error, (Busy, MissingRequiredField)) else DESTRUCTIVE
    return Notice(title=title, description=str(error), variant=variant)


def confirm(kind: ResourceKind, record_id: str, action: Union[Action, str]) -> Notice:
    """Success notice, e.g. ``Device d1 approved successfully``."""

    name = action.value if isinstance(action, Action) else str(action)
    done = _PAST_TENSE.get(name, f"{name} applied")
    return Notice(
        title="Success",
        description=f"{kind.label.capitalize()} {record_id} {done} successfully",
    )
