"""
grok_token.access — role-based authorization for supply control.

Two privilege sets are fixed at construction:

- **MINTER_ROLE** members may mint to any non-zero address.
- **BURNER_ROLE** members may burn from any non-zero address, without
  allowance.

Membership is checked per operation; there is no owner-as-superadmin rule and
no grant/revoke entrypoint. A role change means constructing a new ledger.
"""

from __future__ import annotations

import logging
from typing import Final, FrozenSet, Iterable, Tuple

from .address import HexLike, is_zero, to_address, to_hex
from .errors import ConfigError, Unauthorized

log = logging.getLogger(__name__)

# Fixed, readable tags padded to 32 bytes.
MINTER_ROLE: Final[bytes] = b"tok:role:minter".ljust(32, b"\x00")
BURNER_ROLE: Final[bytes] = b"tok:role:burner".ljust(32, b"\x00")


def role_name(role: bytes) -> str:
    """b"tok:role:minter\\x00..." -> "minter"."""
    return role.rstrip(b"\x00").decode("ascii").rsplit(":", 1)[-1]


def _normalize_members(role: bytes, accounts: Iterable[HexLike]) -> FrozenSet[bytes]:
    out = set()
    for a in accounts:
        addr = to_address(a)
        if is_zero(addr):
            raise ConfigError(
                f"zero address cannot hold the {role_name(role)} role",
                data={"role": role_name(role)},
            )
        out.add(addr)
    return frozenset(out)


class AccessControl:
    """
    Immutable minter/burner sets.

    Parameters
    ----------
    minters, burners : Iterable[HexLike]
        Accounts holding each role. Duplicates collapse; the zero address is
        rejected with ConfigError.
    """

    def __init__(self, minters: Iterable[HexLike] = (), burners: Iterable[HexLike] = ()) -> None:
        self._members = {
            MINTER_ROLE: _normalize_members(MINTER_ROLE, minters),
            BURNER_ROLE: _normalize_members(BURNER_ROLE, burners),
        }
        log.debug(
            "access: %d minter(s), %d burner(s)",
            len(self._members[MINTER_ROLE]),
            len(self._members[BURNER_ROLE]),
        )

    # --- queries ---

    def has_role(self, role: bytes, account: bytes) -> bool:
        members = self._members.get(role)
        if members is None:
            return False
        return account in members

    def is_minter(self, account: bytes) -> bool:
        return self.has_role(MINTER_ROLE, account)

    def is_burner(self, account: bytes) -> bool:
        return self.has_role(BURNER_ROLE, account)

    def members(self, role: bytes) -> Tuple[bytes, ...]:
        """Role members in a stable (sorted) order."""
        return tuple(sorted(self._members.get(role, frozenset())))

    # --- guards ---

    def require_role(self, role: bytes, caller: bytes) -> None:
        if not self.has_role(role, caller):
            raise Unauthorized(
                f"caller is not a {role_name(role)}",
                role=role_name(role),
                caller=to_hex(caller),
            )

    def require_minter(self, caller: bytes) -> None:
        self.require_role(MINTER_ROLE, caller)

    def require_burner(self, caller: bytes) -> None:
        self.require_role(BURNER_ROLE, caller)


__all__ = [
    "MINTER_ROLE",
    "BURNER_ROLE",
    "role_name",
    "AccessControl",
]
