"""
grok_token.address — account identifiers.

Accounts are fixed-width raw `bytes` (20 bytes). Callers may hand in either
bytes-like values or hex strings (with or without a 0x prefix); everything is
normalized to `bytes` at the ledger boundary so table keys compare exactly.

The all-zero address is reserved. It never holds balance or allowance and is
used as the `from`/`to` sentinel of mint and burn Transfer events.
"""

from __future__ import annotations

import hashlib
from typing import Final, Union

from .errors import InvalidAddress

ADDRESS_LEN: Final[int] = 20
ZERO_ADDRESS: Final[bytes] = b"\x00" * ADDRESS_LEN

HexLike = Union[str, bytes, bytearray, memoryview]


def to_address(value: HexLike) -> bytes:
    """
    Normalize `value` to a 20-byte address.

    Raises InvalidAddress on wrong type, bad hex or wrong width.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        raw = bytes(value)
    elif isinstance(value, str):
        s = value.strip()
        if s.startswith(("0x", "0X")):
            s = s[2:]
        try:
            raw = bytes.fromhex(s)
        except ValueError as e:
            raise InvalidAddress(f"invalid hex address: {value!r}") from e
    else:
        raise InvalidAddress(f"expected bytes or hex string, got {type(value).__name__}")

    if len(raw) != ADDRESS_LEN:
        raise InvalidAddress(
            f"address must be {ADDRESS_LEN} bytes, got {len(raw)}",
            data={"length": len(raw)},
        )
    return raw


def is_zero(addr: bytes) -> bool:
    return addr == ZERO_ADDRESS


def to_hex(addr: bytes) -> str:
    """0x-prefixed lowercase hex rendering, for logs and JSON output."""
    return "0x" + bytes(addr).hex()


def derive_address(tag: Union[str, bytes]) -> bytes:
    """
    Deterministic address from a label: first 20 bytes of sha3_256(tag).

    Used for well-known dev accounts ("deployer", "alice", ...) and for the
    ledger's own deployment address.
    """
    if isinstance(tag, str):
        tag = tag.encode("utf-8")
    return hashlib.sha3_256(tag).digest()[:ADDRESS_LEN]


__all__ = [
    "ADDRESS_LEN",
    "ZERO_ADDRESS",
    "HexLike",
    "to_address",
    "is_zero",
    "to_hex",
    "derive_address",
]
