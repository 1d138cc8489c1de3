"""Public surface every management screen calls."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Mapping, Optional, Union

from admin_console.api.client import ApiRequestError, ResourceApi
from admin_console.domain.errors import (
    FetchFailed,
    InvalidTransition,
    MissingRequiredField,
    MutationFailed,
    RecordNotLoaded,
)
from admin_console.domain.models import Action, PageResult, ResourceKind, ResourceRecord
from admin_console.domain.query import QuerySpec, build_query
from admin_console.moderation.gate import MutationGate
from admin_console.moderation.state_machine import RejectionReason, Rejected, allowed_actions, decide
from admin_console.storage.store import ResourceStore, StoreRegistry

logger = logging.getLogger(__name__)


def _action_name(action: Union[Action, str]) -> str:
    try:
        return Action(action).value
    except ValueError:
        return str(action)


class AdminWorkflowFacade:
    """Lists, moderates and edits resources of every kind.

    Mutations on the same ``(kind, id)`` are single-flight; failures are
    reported once and never retried here.
    """

    def __init__(
        self,
        api: ResourceApi,
        stores: Optional[StoreRegistry] = None,
        gate: Optional[MutationGate] = None,
    ) -> None:
        self._api = api
        self._stores = stores if stores is not None else StoreRegistry()
        self._gate = gate if gate is not None else MutationGate()

    def store(self, kind: ResourceKind) -> ResourceStore:
        return self._stores.get(kind)

    def is_busy(self, kind: ResourceKind, record_id: str) -> bool:
        return self._gate.is_busy(kind, record_id)

    # -- listing -------------------------------------------------------------

    async def list_page(
        self,
        kind: ResourceKind,
        page: int = 1,
        filters: Optional[Mapping[str, object]] = None,
        search: Optional[str] = None,
        *,
        page_size: Optional[int] = None,
        refresh: bool = False,
    ) -> PageResult:
        spec = build_query(kind, page, filters, search, page_size=page_size)
        return await self.fetch(spec, refresh=refresh)

    async def fetch(self, spec: QuerySpec, *, refresh: bool = False) -> PageResult:
        """Return the page for ``spec``, from cache unless ``refresh`` is set."""

        store = self.store(spec.kind)
        if not refresh:
            cached = store.get_page(spec)
            if cached is not None:
                store.show(spec)
                return cached

        ticket = store.begin_fetch(spec)
        logger.debug("Fetching %s page %s with %s", spec.kind.value, spec.page, spec.filters)
        try:
            response = await self._api.list(spec.kind, spec.to_params())
        except Exception as exc:
            logger.warning("Listing %s failed: %s", spec.kind.value, exc)
            raise FetchFailed(spec.kind, exc) from exc
        finally:
            store.end_fetch(ticket)

        total_pages = response.total_pages
        if total_pages >= 1:
            total_pages = max(total_pages, spec.page)
        result = PageResult(
            items=response.items[: spec.page_size],
            page=spec.page,
            total_pages=total_pages,
            total=response.total,
        )
        store.accept(ticket, result)
        return result

    async def fetch_stats(self) -> dict[str, Any]:
        """Dashboard counters; not cached."""

        try:
            return await self._api.stats()
        except Exception as exc:
            logger.warning("Loading dashboard stats failed: %s", exc)
            raise FetchFailed(None, exc) from exc

    # -- moderation ----------------------------------------------------------

    def allowed_actions(self, kind: ResourceKind, record_id: str) -> list[Action]:
        record = self.store(kind).find(record_id)
        if record is None:
            return []
        return allowed_actions(kind, record.status)

    async def transition(
        self,
        kind: ResourceKind,
        record_id: str,
        action: Union[Action, str],
        audit_fields: Optional[Mapping[str, object]] = None,
    ) -> ResourceRecord:
        name = _action_name(action)
        store = self.store(kind)
        with self._gate.hold(kind, record_id, name):
            current = store.find(record_id)
            if current is None:
                raise RecordNotLoaded(kind, record_id, name)

            decision = decide(kind, current.status, action, audit_fields)
            if isinstance(decision, Rejected):
                if decision.reason is RejectionReason.MISSING_REQUIRED_FIELD:
                    raise MissingRequiredField(kind, record_id, name, decision.field or "reason")
                raise InvalidTransition(kind, record_id, name, current.status)

            try:
                updated = await self._api.update_status(
                    kind,
                    record_id,
                    decision.next_status,
                    decision.audit,
                )
            except Exception as exc:
                logger.warning("Could not %s %s %s: %s", name, kind.value, record_id, exc)
                raise MutationFailed(kind, record_id, name, exc) from exc

            store.replace_record(updated)
            if updated.status != decision.next_status:
                # The remote stored something else; the cache follows the remote.
                logger.warning(
                    "%s %s came back %s after %s, expected %s",
                    kind.value,
                    record_id,
                    updated.status,
                    name,
                    decision.next_status,
                )
                raise MutationFailed(
                    kind,
                    record_id,
                    name,
                    ApiRequestError(f"status is {updated.status}, not {decision.next_status}"),
                )
            logger.info(
                "%s %s: %s -> %s via %s",
                kind.value,
                record_id,
                current.status,
                updated.status,
                name,
            )
            return updated

    async def edit_fields(
        self,
        kind: ResourceKind,
        record_id: str,
        patch: Mapping[str, Any],
    ) -> ResourceRecord:
        """Send ``patch`` as-is; field validation belongs to the remote API."""

        with self._gate.hold(kind, record_id, "edit"):
            try:
                updated = await self._api.update(kind, record_id, patch)
            except Exception as exc:
                logger.warning("Could not edit %s %s: %s", kind.value, record_id, exc)
                raise MutationFailed(kind, record_id, "edit", exc) from exc
            self.store(kind).replace_record(updated)
            logger.info("Edited %s %s fields %s", kind.value, record_id, sorted(patch))
            return updated

    async def create(
        self,
        kind: ResourceKind,
        payload: Mapping[str, Any],
        submission_token: Optional[str] = None,
    ) -> ResourceRecord:
        """Create a record; re-submitting with the same token while in flight is ``Busy``."""

        token = submission_token or uuid.uuid4().hex
        with self._gate.hold(kind, f"new:{token}", "create"):
            try:
                record = await self._api.create(kind, payload)
            except Exception as exc:
                logger.warning("Could not create %s: %s", kind.value, exc)
                raise MutationFailed(kind, f"new:{token}", "create", exc) from exc
            self.store(kind).add_record(record)
            logger.info("Created %s %s", kind.value, record.id)
            return record

    async def remove(self, kind: ResourceKind, record_id: str) -> None:
        with self._gate.hold(kind, record_id, "delete"):
            try:
                await self._api.delete(kind, record_id)
            except Exception as exc:
                logger.warning("Could not delete %s %s: %s", kind.value, record_id, exc)
                raise MutationFailed(kind, record_id, "delete", exc) from exc
            self.store(kind).drop_record(record_id)
            logger.info("Deleted %s %s", kind.value, record_id)
