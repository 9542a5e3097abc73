"""
grok_token.ledger — the fungible token state machine.

Balances, total supply and allowances live in one explicitly-owned `Ledger`
object. Every public mutation follows the same shape:

    with self._lock:                       # one operation at a time
        with self._journal.checkpoint():   # all-or-nothing
            ...checks...                   # raise TokenError -> full revert
            ...writes + event append...
        self._events.publish(...)          # observers see committed state

Check order per operation (the first violated check decides the error):

    transfer       InvalidRecipient, InvalidSource, InvalidAmount,
                   InsufficientBalance
    transfer_from  InvalidRecipient, InvalidSource, InvalidSpender,
                   InvalidAmount, InsufficientBalance, InsufficientAllowance
    approve        InvalidSpender, InvalidSource, InvalidAmount
    mint           Unauthorized, InvalidRecipient, InvalidAmount, AmountOverflow
    burn           Unauthorized, InvalidSource, InvalidAmount, InsufficientBalance

Malformed addresses fail with InvalidAddress before any of the above.

Invariants
----------
- sum(balances) == total_supply after every operation.
- No balance, allowance or supply ever leaves [0, 2**256-1].
- Exactly one event per successful mutation, none for a failed one.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional, Tuple

from . import metrics
from .access import AccessControl
from .address import ZERO_ADDRESS, HexLike, is_zero, to_address, to_hex
from .allowances import AllowanceKey, AllowanceRegistry
from .config import DEFAULT_DECIMALS, DEFAULT_NAME, DEFAULT_SYMBOL, TokenConfig
from .errors import (
    ConfigError,
    InsufficientBalance,
    InvalidRecipient,
    InvalidSource,
    InvalidSpender,
    TokenError,
)
from .events import ApprovalEvent, Event, EventLog, TransferEvent
from .journal import Journal
from .safe_uint import require_amount, u256_add, u256_sub

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerSnapshot:
    """
    Point-in-time copy of ledger state, taken between operations.

    Restoring truncates the event log back to `event_count`; it does not
    replay or rewrite records.
    """

    balances: Tuple[Tuple[bytes, int], ...]
    allowances: Tuple[Tuple[AllowanceKey, int], ...]
    total_supply: int
    event_count: int


class Ledger:
    """
    Fungible-token ledger with allowance delegation and role-gated supply.

    Parameters
    ----------
    name, symbol, decimals :
        Token metadata (read-only after construction).
    initial_supply : int
        Minted to `initial_holder` at construction, emitting
        Transfer(zero -> holder) when non-zero.
    initial_holder : HexLike, optional
        Required when initial_supply > 0.
    minters, burners : Iterable[HexLike]
        Fixed role sets.
    """

    def __init__(
        self,
        *,
        name: str = DEFAULT_NAME,
        symbol: str = DEFAULT_SYMBOL,
        decimals: int = DEFAULT_DECIMALS,
        initial_supply: int = 0,
        initial_holder: Optional[HexLike] = None,
        minters: Iterable[HexLike] = (),
        burners: Iterable[HexLike] = (),
    ) -> None:
        self._name = name
        self._symbol = symbol
        self._decimals = decimals

        self._lock = threading.RLock()
        self._journal = Journal()
        self._balances: Dict[bytes, int] = {}
        self._total_supply = 0
        self._allowances = AllowanceRegistry(self._journal)
        self._events = EventLog(self._journal)
        self._access = AccessControl(minters, burners)

        require_amount(initial_supply)
        if initial_supply > 0:
            if initial_holder is None:
                raise ConfigError("initial_holder is required for a non-zero initial supply")
            holder = to_address(initial_holder)
            if is_zero(holder):
                raise ConfigError("initial_holder cannot be the zero address")
            # No checkpoint is open, so the seed mint is not journaled.
            self._mint_to(holder, initial_supply)
            log.info("ledger: seeded %s with %d %s", to_hex(holder), initial_supply, symbol)
        metrics.set_total_supply(self._total_supply)

    @classmethod
    def from_config(cls, cfg: TokenConfig) -> "Ledger":
        return cls(
            name=cfg.name,
            symbol=cfg.symbol,
            decimals=cfg.decimals,
            initial_supply=cfg.initial_supply,
            initial_holder=cfg.initial_holder,
            minters=cfg.minters,
            burners=cfg.burners,
        )

    def __repr__(self) -> str:
        return (
            f"Ledger(symbol={self._symbol!r}, total_supply={self._total_supply}, "
            f"holders={len(self.holders())}, events={len(self._events)})"
        )

    # ------------------------------------------------------------------ #
    # Metadata & views
    # ------------------------------------------------------------------ #

    def name(self) -> str:
        return self._name

    def symbol(self) -> str:
        return self._symbol

    def decimals(self) -> int:
        return self._decimals

    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, account: HexLike) -> int:
        return self._balances.get(to_address(account), 0)

    def allowance(self, owner: HexLike, spender: HexLike) -> int:
        return self._allowances.get(to_address(owner), to_address(spender))

    @property
    def events(self) -> EventLog:
        return self._events

    @property
    def access(self) -> AccessControl:
        return self._access

    def holders(self) -> Dict[bytes, int]:
        """Accounts with a non-zero balance."""
        return {a: b for a, b in sorted(self._balances.items()) if b}

    def supply_is_conserved(self) -> bool:
        return sum(self._balances.values()) == self._total_supply

    # ------------------------------------------------------------------ #
    # Mutations (explicit caller)
    # ------------------------------------------------------------------ #

    def transfer(self, caller: HexLike, to: HexLike, value: int) -> bool:
        def _op() -> Event:
            src = to_address(caller)
            dst = to_address(to)
            if is_zero(dst):
                raise InvalidRecipient()
            if is_zero(src):
                raise InvalidSource()
            require_amount(value)
            self._move(src, dst, value)
            return self._events.append(TransferEvent(from_=src, to=dst, value=value))

        return self._run("transfer", _op)

    def transfer_from(self, caller: HexLike, from_: HexLike, to: HexLike, value: int) -> bool:
        """
        `caller` (the spender) moves `value` from `from_` to `to` using the
        allowance `from_` granted it.
        """
        def _op() -> Event:
            spender = to_address(caller)
            src = to_address(from_)
            dst = to_address(to)
            if is_zero(dst):
                raise InvalidRecipient()
            if is_zero(src):
                raise InvalidSource()
            if is_zero(spender):
                raise InvalidSpender()
            require_amount(value)
            # Balance is checked before allowance.
            self._require_balance(src, value)
            self._allowances.decrease(src, spender, value)
            self._move(src, dst, value)
            return self._events.append(TransferEvent(from_=src, to=dst, value=value))

        return self._run("transfer_from", _op)

    def approve(self, caller: HexLike, spender: HexLike, value: int) -> bool:
        """Set (not add to) the amount `spender` may move on `caller`'s behalf."""
        def _op() -> Event:
            owner = to_address(caller)
            sp = to_address(spender)
            if is_zero(sp):
                raise InvalidSpender()
            if is_zero(owner):
                raise InvalidSource()
            require_amount(value)
            self._allowances.set(owner, sp, value)
            return self._events.append(ApprovalEvent(owner=owner, spender=sp, value=value))

        return self._run("approve", _op)

    def mint(self, caller: HexLike, to: HexLike, value: int) -> bool:
        def _op() -> Event:
            minter = to_address(caller)
            dst = to_address(to)
            self._access.require_minter(minter)
            if is_zero(dst):
                raise InvalidRecipient()
            require_amount(value)
            self._mint_to(dst, value)
            log.info("ledger: %s minted %d to %s", to_hex(minter), value, to_hex(dst))
            return self._events[-1]

        return self._run("mint", _op)

    def burn(self, caller: HexLike, from_: HexLike, value: int) -> bool:
        """Destroy `value` from `from_`. Burners need no allowance."""
        def _op() -> Event:
            burner = to_address(caller)
            src = to_address(from_)
            self._access.require_burner(burner)
            if is_zero(src):
                raise InvalidSource()
            require_amount(value)
            self._require_balance(src, value)
            self._write_balance(src, u256_sub(self._balances.get(src, 0), value))
            self._write_supply(u256_sub(self._total_supply, value))
            log.info("ledger: %s burned %d from %s", to_hex(burner), value, to_hex(src))
            return self._events.append(TransferEvent(from_=src, to=ZERO_ADDRESS, value=value))

        return self._run("burn", _op)

    # ------------------------------------------------------------------ #
    # Snapshots
    # ------------------------------------------------------------------ #

    def snapshot(self) -> LedgerSnapshot:
        with self._lock:
            return LedgerSnapshot(
                balances=tuple(sorted(self._balances.items())),
                allowances=tuple(self._allowances.items()),
                total_supply=self._total_supply,
                event_count=len(self._events),
            )

    def restore(self, snap: LedgerSnapshot) -> None:
        """
        Rewind to `snap`. Only allowed between operations (not from an event
        subscriber), and only with a snapshot of this ledger's past.
        """
        with self._lock:
            if self._journal.depth() or self._events.publishing:
                raise RuntimeError("cannot restore while an operation is in progress")
            if snap.event_count > len(self._events):
                raise ValueError("snapshot is ahead of this ledger's event log")
            self._balances = dict(snap.balances)
            self._allowances._replace(dict(snap.allowances))
            self._total_supply = snap.total_supply
            self._events._truncate(snap.event_count)
            metrics.set_total_supply(self._total_supply)
            log.debug("ledger: restored snapshot (events=%d)", snap.event_count)

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _run(self, op: str, body: Callable[[], Event]) -> bool:
        with self._lock:
            try:
                with self._journal.checkpoint():
                    ev = body()
            except TokenError as e:
                log.debug("ledger: %s rejected: %s", op, e.code)
                metrics.observe_op(op=op, result=e.code)
                raise
            metrics.observe_op(op=op, result="success", event=ev.name)
            if op in ("mint", "burn"):
                metrics.set_total_supply(self._total_supply)
            log.debug("ledger: %s ok %s", op, ev.to_dict())
            self._events.publish([ev])
            return True

    def _require_balance(self, account: bytes, value: int) -> None:
        bal = self._balances.get(account, 0)
        if bal < value:
            raise InsufficientBalance(account=to_hex(account), balance=bal, required=value)

    def _move(self, src: bytes, dst: bytes, value: int) -> None:
        self._require_balance(src, value)
        self._write_balance(src, u256_sub(self._balances.get(src, 0), value))
        # Re-read after the debit so src == dst nets to zero.
        self._write_balance(dst, u256_add(self._balances.get(dst, 0), value))

    def _mint_to(self, dst: bytes, value: int) -> None:
        """Unchecked-role mint: credit + supply + Transfer(zero -> dst)."""
        new_supply = u256_add(self._total_supply, value)
        self._write_supply(new_supply)
        self._write_balance(dst, u256_add(self._balances.get(dst, 0), value))
        self._events.append(TransferEvent(from_=ZERO_ADDRESS, to=dst, value=value))

    def _write_balance(self, account: bytes, value: int) -> None:
        self._journal.record_item(self._balances, account)
        self._balances[account] = value

    def _write_supply(self, value: int) -> None:
        self._journal.record_attr(self, "_total_supply")
        self._total_supply = value


__all__ = ["Ledger", "LedgerSnapshot"]
