"""
All-or-nothing behaviour of ledger operations, and what event subscribers
observe.
"""
from __future__ import annotations

from typing import List

import pytest

from grok_token.errors import InsufficientAllowance, TokenError
from grok_token.events import Event, TransferEvent


def _state(ledger, *accounts):
    return (
        ledger.total_supply(),
        tuple(ledger.balance_of(a) for a in accounts),
        tuple(ledger.allowance(a, b) for a in accounts for b in accounts),
        ledger.events.digest(),
        len(ledger.events),
    )


@pytest.mark.parametrize(
    "call",
    [
        lambda L, o, a, b, z: L.transfer(o, z, 1),
        lambda L, o, a, b, z: L.transfer(a, b, 1),
        lambda L, o, a, b, z: L.transfer_from(b, o, a, 11),
        lambda L, o, a, b, z: L.transfer_from(b, a, o, 1),
        lambda L, o, a, b, z: L.approve(o, z, 1),
        lambda L, o, a, b, z: L.mint(a, a, 1),
        lambda L, o, a, b, z: L.mint(o, z, 1),
        lambda L, o, a, b, z: L.burn(o, z, 1),
        lambda L, o, a, b, z: L.burn(o, b, 1),
        lambda L, o, a, b, z: L.transfer(o, "0x1234", 1),
    ],
)
def test_failed_operation_changes_nothing(ledger, owner, addr1, addr2, zero, call) -> None:
    ledger.approve(owner, addr2, 10)
    before = _state(ledger, owner, addr1, addr2)
    with pytest.raises(TokenError):
        call(ledger, owner, addr1, addr2, zero)
    assert _state(ledger, owner, addr1, addr2) == before
    assert ledger._journal.depth() == 0


def test_failure_after_partial_writes_is_rolled_back(ledger, owner, addr1, monkeypatch) -> None:
    """Balances were already debited/credited when the event append blows up."""

    def boom(ev):
        raise RuntimeError("event sink unavailable")

    monkeypatch.setattr(ledger.events, "append", boom)
    with pytest.raises(RuntimeError):
        ledger.transfer(owner, addr1, 5)
    monkeypatch.undo()

    assert ledger.balance_of(owner) == ledger.total_supply()
    assert ledger.balance_of(addr1) == 0
    assert ledger._journal.depth() == 0


def test_transfer_from_rolls_back_allowance_on_late_failure(ledger, owner, addr1, monkeypatch) -> None:
    ledger.approve(owner, addr1, 10)

    def boom(ev):
        raise RuntimeError("event sink unavailable")

    monkeypatch.setattr(ledger.events, "append", boom)
    with pytest.raises(RuntimeError):
        ledger.transfer_from(addr1, owner, addr1, 4)
    monkeypatch.undo()

    assert ledger.allowance(owner, addr1) == 10
    assert ledger.balance_of(addr1) == 0


def test_mint_rolls_back_supply_on_late_failure(ledger, owner, addr1, monkeypatch) -> None:
    supply = ledger.total_supply()

    def boom(account, value):
        raise RuntimeError("disk full")

    # Supply is written before the balance inside a mint.
    monkeypatch.setattr(ledger, "_write_balance", boom)
    with pytest.raises(RuntimeError):
        ledger.mint(owner, addr1, 9)
    monkeypatch.undo()

    assert ledger.total_supply() == supply
    assert ledger.supply_is_conserved()


def test_subscriber_sees_committed_state(ledger, owner, addr1) -> None:
    seen: List[int] = []
    ledger.events.subscribe(lambda ev: seen.append(ledger.balance_of(addr1)))
    ledger.transfer(owner, addr1, 3)
    assert seen == [3]


def test_subscriber_not_called_on_failure(ledger, owner, addr1) -> None:
    seen: List[Event] = []
    ledger.events.subscribe(seen.append)
    with pytest.raises(InsufficientAllowance):
        ledger.transfer_from(addr1, owner, addr1, 1)
    assert seen == []


def test_subscriber_may_call_back_into_ledger(ledger, owner, addr1, addr2) -> None:
    def forward(ev: Event) -> None:
        if isinstance(ev, TransferEvent) and ev.to == addr1 and ev.value:
            ledger.transfer(addr1, addr2, ev.value)

    ledger.events.subscribe(forward)
    ledger.transfer(owner, addr1, 8)

    assert ledger.balance_of(addr1) == 0
    assert ledger.balance_of(addr2) == 8
    assert [e.to for e in ledger.events.records(since=1)] == [addr1, addr2]


def test_nested_events_reach_every_subscriber_in_commit_order(ledger, owner, addr1, addr2) -> None:
    def forward(ev: Event) -> None:
        if isinstance(ev, TransferEvent) and ev.to == addr1 and ev.value:
            ledger.transfer(addr1, addr2, ev.value)

    recorded: List[Event] = []
    ledger.events.subscribe(forward)
    ledger.events.subscribe(recorded.append)
    ledger.transfer(owner, addr1, 8)

    assert recorded == ledger.events.records(since=1)
    assert [e.to for e in recorded] == [addr1, addr2]


def test_subscriber_error_does_not_undo_commit(ledger, owner, addr1, caplog) -> None:
    def broken(ev: Event) -> None:
        raise ZeroDivisionError("observer bug")

    seen: List[Event] = []
    ledger.events.subscribe(broken)
    ledger.events.subscribe(seen.append)

    assert ledger.transfer(owner, addr1, 2) is True
    assert ledger.balance_of(addr1) == 2
    assert seen == [TransferEvent(from_=owner, to=addr1, value=2)]
    assert ledger._journal.depth() == 0
    assert not ledger.events.publishing
    assert any("subscriber" in r.getMessage() for r in caplog.records)

    # later operations still deliver normally
    ledger.transfer(owner, addr1, 1)
    assert len(seen) == 2


def test_unsubscribe_stops_delivery(ledger, owner, addr1) -> None:
    seen: List[Event] = []
    unsubscribe = ledger.events.subscribe(seen.append)
    ledger.transfer(owner, addr1, 1)
    unsubscribe()
    ledger.transfer(owner, addr1, 1)
    assert len(seen) == 1
    unsubscribe()  # second call is a no-op
