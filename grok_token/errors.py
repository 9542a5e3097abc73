"""
grok_token.errors — typed failures raised by the token ledger.

Every guarded operation reports failure by raising one of these exceptions.
A raised error always means the operation was rolled back in full: balances,
allowances, total supply and the event log are exactly as they were before
the call.

Hierarchy
---------
TokenError (base)
 ├─ InvalidRecipient      : destination is the zero address
 ├─ InvalidSource         : source/owner is the zero address
 ├─ InvalidSpender        : spender is the zero address
 ├─ InsufficientBalance   : debit exceeds the source balance
 ├─ InsufficientAllowance : delegated transfer exceeds the granted allowance
 ├─ Unauthorized          : caller lacks the minter/burner role
 ├─ InvalidAmount         : value is not an integer in [0, 2**256-1]
 ├─ AmountOverflow        : credit or supply increase would exceed 2**256-1
 ├─ AmountUnderflow       : checked subtraction would go below zero
 ├─ InvalidAddress        : malformed account identifier
 ├─ ConfigError           : bad construction-time configuration
 └─ DispatchError         : unknown operation name or bad argument list

The module imports nothing from the rest of the package so that low-level
helpers (address, safe_uint, journal) can raise without import cycles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class TokenError(Exception):
    """
    Base ledger error.

    Attributes:
        message: Human-readable explanation.
        code:    Stable machine code string (e.g., 'INSUFFICIENT_BALANCE').
        data:    Optional structured details (kept JSON-serializable).
    """
    message: str = "token error"
    code: str = "TOKEN_ERROR"
    data: Optional[Dict[str, Any]] = field(default=None)

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.data:
            return f"{self.code}: {self.message} ({self.data})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-safe dict for tooling output."""
        out: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        return out


def _merge(data: Optional[Dict[str, Any]], **fields: Any) -> Optional[Dict[str, Any]]:
    d: Dict[str, Any] = {}
    if data:
        d.update(data)
    for k, v in fields.items():
        if v is not None:
            d.setdefault(k, v)
    return d or None


class InvalidRecipient(TokenError):
    """Destination is the zero address where a real account is required."""
    def __init__(self, message: str = "recipient is the zero address", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INVALID_RECIPIENT", data=data)


class InvalidSource(TokenError):
    """Source (sender, owner or burn target) is the zero address."""
    def __init__(self, message: str = "source is the zero address", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INVALID_SOURCE", data=data)


class InvalidSpender(TokenError):
    def __init__(self, message: str = "spender is the zero address", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INVALID_SPENDER", data=data)


class InsufficientBalance(TokenError):
    """
    Debit exceeds the source account's current balance.

    Optional fields:
        account:  hex address of the debited account
        balance:  balance at the time of the check
        required: requested amount
    """
    def __init__(
        self,
        message: str = "insufficient balance",
        *,
        account: Optional[str] = None,
        balance: Optional[int] = None,
        required: Optional[int] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code="INSUFFICIENT_BALANCE",
            data=_merge(data, account=account, balance=balance, required=required),
        )


class InsufficientAllowance(TokenError):
    """Delegated transfer exceeds the allowance granted to the spender."""
    def __init__(
        self,
        message: str = "insufficient allowance",
        *,
        owner: Optional[str] = None,
        spender: Optional[str] = None,
        allowance: Optional[int] = None,
        required: Optional[int] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code="INSUFFICIENT_ALLOWANCE",
            data=_merge(
                data, owner=owner, spender=spender, allowance=allowance, required=required
            ),
        )


class Unauthorized(TokenError):
    """Caller lacks the role required for a privileged operation."""
    def __init__(
        self,
        message: str = "caller lacks required role",
        *,
        role: Optional[str] = None,
        caller: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code="UNAUTHORIZED",
            data=_merge(data, role=role, caller=caller),
        )


class InvalidAmount(TokenError):
    def __init__(self, message: str = "amount outside [0, 2**256-1]", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INVALID_AMOUNT", data=data)


class AmountOverflow(TokenError):
    def __init__(self, message: str = "u256 overflow", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="AMOUNT_OVERFLOW", data=data)


class AmountUnderflow(TokenError):
    def __init__(self, message: str = "u256 underflow", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="AMOUNT_UNDERFLOW", data=data)


class InvalidAddress(TokenError):
    def __init__(self, message: str = "malformed address", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INVALID_ADDRESS", data=data)


class ConfigError(TokenError):
    def __init__(self, message: str = "invalid configuration", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="CONFIG_ERROR", data=data)


class DispatchError(TokenError):
    """Raised when an operation name cannot be routed or its arguments do not bind."""
    def __init__(self, message: str = "cannot dispatch", *, op: Optional[str] = None, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="DISPATCH_ERROR", data=_merge(data, op=op))


# Failure kinds that a well-formed call can legitimately hit against ledger
# state. Everything else indicates a malformed request.
_REVERT_CODES = frozenset(
    {
        "INVALID_RECIPIENT",
        "INVALID_SOURCE",
        "INVALID_SPENDER",
        "INSUFFICIENT_BALANCE",
        "INSUFFICIENT_ALLOWANCE",
        "UNAUTHORIZED",
        "AMOUNT_OVERFLOW",
        "AMOUNT_UNDERFLOW",
    }
)


def error_to_result_fields(err: TokenError) -> Dict[str, Any]:
    """
    Map a TokenError to canonical result fields:

        {
          "status": "REVERT" | "ERROR",
          "error":  {code, message, data?}
        }
    """
    status = "REVERT" if err.code in _REVERT_CODES else "ERROR"
    return {"status": status, "error": err.to_dict()}


__all__ = [
    "TokenError",
    "InvalidRecipient",
    "InvalidSource",
    "InvalidSpender",
    "InsufficientBalance",
    "InsufficientAllowance",
    "Unauthorized",
    "InvalidAmount",
    "AmountOverflow",
    "AmountUnderflow",
    "InvalidAddress",
    "ConfigError",
    "DispatchError",
    "error_to_result_fields",
]
