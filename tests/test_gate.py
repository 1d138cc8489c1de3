"""Tests for the single-flight mutation gate."""

from __future__ import annotations

import pytest

from admin_console.domain.errors import Busy
from admin_console.domain.models import ResourceKind
from admin_console.moderation.gate import MutationGate


def test_second_acquire_for_same_key_is_busy() -> None:
    gate = MutationGate()
    gate.acquire(ResourceKind.DEVICE, "d1", "approve")

    with pytest.raises(Busy) as excinfo:
        gate.acquire(ResourceKind.DEVICE, "d1", "reject")

    assert "device d1" in str(excinfo.value).lower()
    assert excinfo.value.action == "reject"


def test_different_keys_hold_tickets_concurrently() -> None:
    gate = MutationGate()

    gate.acquire(ResourceKind.DEVICE, "d1")
    gate.acquire(ResourceKind.DEVICE, "d2")
    gate.acquire(ResourceKind.REQUEST, "d1")

    assert len(gate) == 3


def test_release_readmits_key() -> None:
    gate = MutationGate()
    ticket = gate.acquire(ResourceKind.USER, "u1")

    gate.release(ticket)

    assert not gate.is_busy(ResourceKind.USER, "u1")
    gate.acquire(ResourceKind.USER, "u1")


def test_double_release_is_an_error() -> None:
    gate = MutationGate()
    ticket = gate.acquire(ResourceKind.USER, "u1")
    gate.release(ticket)

    with pytest.raises(RuntimeError):
        gate.release(ticket)


def test_hold_releases_when_block_raises() -> None:
    gate = MutationGate()

    with pytest.raises(ValueError):
        with gate.hold(ResourceKind.TEAM_MEMBER, "m1", "edit"):
            assert gate.is_busy(ResourceKind.TEAM_MEMBER, "m1")
            raise ValueError("boom")

    assert not gate.is_busy(ResourceKind.TEAM_MEMBER, "m1")
