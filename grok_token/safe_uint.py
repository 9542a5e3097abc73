"""
grok_token.safe_uint
====================

Checked U256 arithmetic for ledger amounts.

- Integer-only; floats and bools are rejected as amounts.
- Checked variants raise instead of wrapping or clamping:
    * out-of-domain input  -> InvalidAmount
    * add above U256_MAX   -> AmountOverflow
    * sub below zero       -> AmountUnderflow
- `try_*` variants return None instead of raising, for callers that want to
  pick their own error (e.g. InsufficientBalance before a debit).
"""

from __future__ import annotations

from typing import Final, Optional

from .errors import AmountOverflow, AmountUnderflow, InvalidAmount

U256_MAX: Final[int] = 2**256 - 1


def is_u256(n: object) -> bool:
    return isinstance(n, int) and not isinstance(n, bool) and 0 <= n <= U256_MAX


def require_amount(n: object) -> int:
    """Return `n` if it is an integer in [0, U256_MAX]; raise InvalidAmount otherwise."""
    if not is_u256(n):
        raise InvalidAmount(data={"value": repr(n)})
    return n  # type: ignore[return-value]


def u256_add(x: int, y: int) -> int:
    """Checked add: raise AmountOverflow above U256_MAX."""
    require_amount(x)
    require_amount(y)
    s = x + y
    if s > U256_MAX:
        raise AmountOverflow(data={"lhs": x, "rhs": y})
    return s


def u256_sub(x: int, y: int) -> int:
    """Checked sub: raise AmountUnderflow when y > x."""
    require_amount(x)
    require_amount(y)
    if y > x:
        raise AmountUnderflow(data={"lhs": x, "rhs": y})
    return x - y


def try_add_u256(x: int, y: int) -> Optional[int]:
    """Return x+y or None on overflow/out-of-domain input."""
    if not (is_u256(x) and is_u256(y)):
        return None
    s = x + y
    return s if s <= U256_MAX else None


def try_sub_u256(x: int, y: int) -> Optional[int]:
    """Return x-y or None on underflow/out-of-domain input."""
    if not (is_u256(x) and is_u256(y)):
        return None
    return x - y if y <= x else None


__all__ = [
    "U256_MAX",
    "is_u256",
    "require_amount",
    "u256_add",
    "u256_sub",
    "try_add_u256",
    "try_sub_u256",
]
