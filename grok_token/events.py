"""
grok_token.events — Transfer/Approval records and the append-only event log.

Conventions
-----------
* Addresses are raw 20-byte `bytes`; `to_dict()` renders them as 0x-hex.
* Mint is recorded as Transfer(zero -> to) and burn as Transfer(from -> zero).
* Records are frozen; the log only ever grows during normal operation.

The ledger appends records inside its journal checkpoint, so a failed
operation leaves no trace here. Subscribers are called by the ledger through
`publish()` only once the operation has committed.

`digest()` is a deterministic SHA3-256 chain over a canonical encoding of
every record:

    h0 = sha3_256("GTN-EVLOG\\0")
    hi = sha3_256(h{i-1} || name || 0x00 || a(20) || b(20) || u256(value))

Two ledgers that committed the same operation stream have the same digest.
"""

from __future__ import annotations

import hashlib
import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Deque, Dict, Iterator, List, Optional, Sequence, Union

from .address import to_hex
from .journal import Journal

log = logging.getLogger(__name__)

EVT_TRANSFER = "Transfer"
EVT_APPROVAL = "Approval"

_DIGEST_SEED = b"GTN-EVLOG\x00"


@dataclass(frozen=True)
class TransferEvent:
    name: ClassVar[str] = EVT_TRANSFER

    from_: bytes
    to: bytes
    value: int

    def accounts(self) -> tuple:
        return (self.from_, self.to)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.name,
            "from": to_hex(self.from_),
            "to": to_hex(self.to),
            "value": self.value,
        }


@dataclass(frozen=True)
class ApprovalEvent:
    name: ClassVar[str] = EVT_APPROVAL

    owner: bytes
    spender: bytes
    value: int

    def accounts(self) -> tuple:
        return (self.owner, self.spender)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.name,
            "owner": to_hex(self.owner),
            "spender": to_hex(self.spender),
            "value": self.value,
        }


Event = Union[TransferEvent, ApprovalEvent]
Subscriber = Callable[[Event], None]


def _encode(ev: Event) -> bytes:
    a, b = ev.accounts()
    return ev.name.encode("ascii") + b"\x00" + bytes(a) + bytes(b) + ev.value.to_bytes(32, "big")


class EventLog:
    """
    Ordered, append-only record of committed Transfer/Approval events.

    Never consulted by the ledger's own logic.
    """

    def __init__(self, journal: Optional[Journal] = None) -> None:
        self._records: List[Event] = []
        self._subscribers: List[Subscriber] = []
        self._journal = journal
        self._pending: Deque[Event] = deque()
        self._publishing = False

    # --- writing (ledger-internal) ---

    def append(self, ev: Event) -> Event:
        n = len(self._records)
        if self._journal is not None:
            self._journal.record(lambda: self._truncate(n))
        self._records.append(ev)
        return ev

    def publish(self, events: Sequence[Event]) -> None:
        """
        Deliver already-committed events to subscribers, in commit order.

        Events committed by a subscriber calling back into the ledger are
        queued behind the one being delivered, so every subscriber sees the
        same order as the log. A failing subscriber is logged and skipped;
        it cannot affect the committed operation or the other subscribers.
        """
        self._pending.extend(events)
        if self._publishing:
            return
        self._publishing = True
        try:
            while self._pending:
                ev = self._pending.popleft()
                for cb in list(self._subscribers):
                    try:
                        cb(ev)
                    except Exception:
                        log.exception("events: subscriber %r failed on %s", cb, ev.name)
        finally:
            self._publishing = False

    @property
    def publishing(self) -> bool:
        """True while subscribers are being called."""
        return self._publishing

    def _truncate(self, n: int) -> None:
        del self._records[n:]

    # --- observers ---

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register `callback`; returns a zero-arg function that unsubscribes it."""
        self._subscribers.append(callback)
        return lambda: self.unsubscribe(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        try:
            self._subscribers.remove(callback)
        except ValueError:
            log.debug("events: unsubscribe of unknown callback ignored")

    # --- queries ---

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Event]:
        return iter(list(self._records))

    def __getitem__(self, idx: int) -> Event:
        return self._records[idx]

    def records(self, name: Optional[str] = None, *, since: int = 0) -> List[Event]:
        """Records from index `since` on, optionally filtered by event name."""
        out = self._records[since:]
        if name is not None:
            out = [e for e in out if e.name == name]
        return list(out)

    def for_account(self, account: bytes) -> List[Event]:
        """Records in which `account` appears on either side."""
        return [e for e in self._records if account in e.accounts()]

    def last(self) -> Optional[Event]:
        return self._records[-1] if self._records else None

    def to_list(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self._records]

    def digest(self) -> bytes:
        h = hashlib.sha3_256(_DIGEST_SEED).digest()
        for ev in self._records:
            h = hashlib.sha3_256(h + _encode(ev)).digest()
        return h


__all__ = [
    "EVT_TRANSFER",
    "EVT_APPROVAL",
    "TransferEvent",
    "ApprovalEvent",
    "Event",
    "Subscriber",
    "EventLog",
]
