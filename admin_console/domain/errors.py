"""Outcome vocabulary raised at the workflow facade boundary.

Every error names the resource and the attempted action so that screens can
show a precise notice even when several resources fail at the same time.
None of them is retried by the core.
"""

from __future__ import annotations

from typing import Optional

from admin_console.domain.models import ResourceKind


def _describe_target(kind: Optional[ResourceKind], record_id: Optional[str]) -> str:
    if kind is None:
        return "dashboard"
    if record_id is None:
        return f"{kind.label} list"
    return f"{kind.label} {record_id}"


class ConsoleError(RuntimeError):
    """Base class for every outcome the facade reports to a screen."""

    def __init__(
        self,
        message: str,
        *,
        kind: Optional[ResourceKind] = None,
        record_id: Optional[str] = None,
        action: Optional[str] = None,
    ) -> None:
        self.kind = kind
        self.record_id = record_id
        self.action = action
        super().__init__(message)

    @property
    def target(self) -> str:
        return _describe_target(self.kind, self.record_id)


class InvalidTransition(ConsoleError):
    """The requested action is not legal from the record's current status."""

    def __init__(self, kind: ResourceKind, record_id: str, action: str, status: str) -> None:
        self.status = status
        super().__init__(
            f"Cannot {action} {kind.label} {record_id} while it is {status}.",
            kind=kind,
            record_id=record_id,
            action=action,
        )


class MissingRequiredField(ConsoleError):
    """An audit field such as a rejection reason was not supplied."""

    def __init__(self, kind: ResourceKind, record_id: str, action: str, field: str) -> None:
        self.field = field
        super().__init__(
            f"A {field.replace('_', ' ')} is required to {action} {kind.label} {record_id}.",
            kind=kind,
            record_id=record_id,
            action=action,
        )


class Busy(ConsoleError):
    """Another mutation for the same resource is still in flight."""

    def __init__(self, kind: ResourceKind, record_id: str, action: Optional[str] = None) -> None:
        verb = action or "change"
        super().__init__(
            f"{kind.label.capitalize()} {record_id} is already processing; cannot {verb} it now.",
            kind=kind,
            record_id=record_id,
            action=action,
        )


class RecordNotLoaded(ConsoleError):
    """The record is not on the cached page, so its status is unknown."""

    def __init__(self, kind: ResourceKind, record_id: str, action: str) -> None:
        super().__init__(
            f"Cannot {action} {kind.label} {record_id}: it is not on the loaded page.",
            kind=kind,
            record_id=record_id,
            action=action,
        )


class FetchFailed(ConsoleError):
    """A listing call failed; the previously cached page stays available."""

    def __init__(self, kind: Optional[ResourceKind], cause: BaseException) -> None:
        self.cause = cause
        super().__init__(
            f"Failed to load {_describe_target(kind, None)}: {cause}",
            kind=kind,
            action="load",
        )


class MutationFailed(ConsoleError):
    """A remote mutation failed after passing local validation."""

    def __init__(
        self,
        kind: ResourceKind,
        record_id: str,
        action: str,
        cause: BaseException,
    ) -> None:
        self.cause = cause
        super().__init__(
            f"Failed to {action} {kind.label} {record_id}: {cause}",
            kind=kind,
            record_id=record_id,
            action=action,
        )
