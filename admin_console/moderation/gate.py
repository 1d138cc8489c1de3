"""Single-flight guard for mutations on one resource."""

from __future__ import annotations

import itertools
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from admin_console.domain.errors import Busy
from admin_console.domain.models import ResourceKind

logger = logging.getLogger(__name__)

GateKey = tuple[ResourceKind, str]


@dataclass(slots=True, frozen=True)
class MutationTicket:
    """Proof that the holder owns the in-flight mutation for ``key``."""

    key: GateKey
    serial: int
    action: Optional[str] = None


class MutationGate:
    """Admits at most one outstanding mutation per ``(kind, id)``.

    A second caller gets :class:`Busy` instead of waiting in line; different
    keys never block each other.
    """

    def __init__(self) -> None:
        self._held: dict[GateKey, MutationTicket] = {}
        self._serials = itertools.count(1)

    def acquire(
        self,
        kind: ResourceKind,
        record_id: str,
        action: Optional[str] = None,
    ) -> MutationTicket:
        key = (kind, record_id)
        if key in self._held:
            logger.debug("Gate busy for %s %s (%s)", kind.value, record_id, action)
            raise Busy(kind, record_id, action)
        ticket = MutationTicket(key=key, serial=next(self._serials), action=action)
        self._held[key] = ticket
        return ticket

    def release(self, ticket: MutationTicket) -> None:
        if self._held.get(ticket.key) != ticket:
            raise RuntimeError(f"Ticket {ticket.serial} for {ticket.key} is not outstanding")
        del self._held[ticket.key]

    @contextmanager
    def hold(
        self,
        kind: ResourceKind,
        record_id: str,
        action: Optional[str] = None,
    ) -> Iterator[MutationTicket]:
        """Acquire a ticket for the duration of the block; release on every exit path."""

        ticket = self.acquire(kind, record_id, action)
        try:
            yield ticket
        finally:
            self.release(ticket)

    def is_busy(self, kind: ResourceKind, record_id: str) -> bool:
        return (kind, record_id) in self._held

    def __len__(self) -> int:
        return len(self._held)
