"""
grok_token.allowances — per-(owner, spender) spending limits.

The registry only stores and adjusts limits. Who may set or consume them is
decided by the Ledger. When a Journal is attached, every write is recorded so
an enclosing checkpoint can roll it back.
"""

from __future__ import annotations

from typing import Dict, Iterator, Optional, Tuple

from .address import to_hex
from .errors import InsufficientAllowance
from .journal import Journal
from .safe_uint import require_amount

AllowanceKey = Tuple[bytes, bytes]


class AllowanceRegistry:
    def __init__(self, journal: Optional[Journal] = None) -> None:
        self._limits: Dict[AllowanceKey, int] = {}
        self._journal = journal

    def get(self, owner: bytes, spender: bytes) -> int:
        """Current limit; zero for pairs never approved."""
        return self._limits.get((owner, spender), 0)

    def set(self, owner: bytes, spender: bytes, value: int) -> None:
        """Absolute set (not an increment)."""
        require_amount(value)
        key = (owner, spender)
        if self._journal is not None:
            self._journal.record_item(self._limits, key)
        self._limits[key] = value

    def decrease(self, owner: bytes, spender: bytes, value: int) -> int:
        """
        Consume `value` from the limit and return what remains.

        Raises InsufficientAllowance when value exceeds the current limit;
        the limit is left untouched in that case.
        """
        require_amount(value)
        current = self.get(owner, spender)
        if current < value:
            raise InsufficientAllowance(
                owner=to_hex(owner),
                spender=to_hex(spender),
                allowance=current,
                required=value,
            )
        remaining = current - value
        self.set(owner, spender, remaining)
        return remaining

    # --- introspection ---

    def items(self) -> Iterator[Tuple[AllowanceKey, int]]:
        return iter(sorted(self._limits.items()))

    def __len__(self) -> int:
        return len(self._limits)

    def _replace(self, limits: Dict[AllowanceKey, int]) -> None:
        """Wholesale state swap used by Ledger.restore()."""
        self._limits = dict(limits)


__all__ = ["AllowanceKey", "AllowanceRegistry"]
