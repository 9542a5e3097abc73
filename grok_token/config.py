"""
grok_token.config — construction-time configuration for the token ledger.

The ledger is handed its configuration exactly once, at construction. This
module builds that configuration from environment variables and explicit
overrides, validates it, and caches a process-wide default.

Environment variables (all optional):
  GROK_TOKEN_NAME            -> token name (default: GrokToken)
  GROK_TOKEN_SYMBOL          -> token symbol, upper-cased (default: GTN)
  GROK_TOKEN_DECIMALS        -> display precision, clamped to [0, 36] (default: 18)
  GROK_TOKEN_INITIAL_SUPPLY  -> base units minted at construction
                                (default: 1_000_000 * 10**18; "_" separators allowed)
  GROK_TOKEN_INITIAL_HOLDER  -> 0x-hex address receiving the initial supply
                                (default: derive_address("deployer"))
  GROK_TOKEN_MINTERS         -> comma-separated 0x-hex addresses
                                (default: the initial holder)
  GROK_TOKEN_BURNERS         -> comma-separated 0x-hex addresses
                                (default: the initial holder)

Programmatic usage:
    from grok_token.config import load_config
    cfg = load_config(overrides={"initial_supply": 1_000})
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

from .address import HexLike, derive_address, is_zero, to_address, to_hex
from .errors import ConfigError, InvalidAddress
from .safe_uint import is_u256

DEFAULT_NAME = "GrokToken"
DEFAULT_SYMBOL = "GTN"
DEFAULT_DECIMALS = 18
DEFAULT_INITIAL_SUPPLY = 1_000_000 * 10**DEFAULT_DECIMALS
DEFAULT_HOLDER_TAG = "deployer"

# ----------------------------- helpers -------------------------------------


def _is_printable_ascii(s: str) -> bool:
    return bool(s) and all(32 <= ord(c) <= 126 for c in s)


def _parse_int(value: Union[str, int], *, field: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{field} must be an integer", data={"field": field})
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip().replace("_", ""), 0)
    except ValueError as e:
        raise ConfigError(f"{field} must be an integer: {value!r}", data={"field": field}) from e


def _parse_addr(value: HexLike, *, field: str) -> bytes:
    try:
        addr = to_address(value)
    except InvalidAddress as e:
        raise ConfigError(f"{field}: {e.message}", data={"field": field}) from e
    if is_zero(addr):
        raise ConfigError(f"{field} cannot be the zero address", data={"field": field})
    return addr


def _parse_addr_list(value: Union[str, Sequence[HexLike]], *, field: str) -> Tuple[bytes, ...]:
    if isinstance(value, str):
        items = [p for p in (s.strip() for s in value.split(",")) if p]
    else:
        items = list(value)
    out = []
    for item in items:
        addr = _parse_addr(item, field=field)
        if addr not in out:
            out.append(addr)
    return tuple(out)


def _clamp_decimals(n: int) -> int:
    if n < 0:
        return 0
    if n > 36:
        return 36
    return n


# ------------------------------ dataclass -----------------------------------


@dataclass(frozen=True)
class TokenConfig:
    name: str = DEFAULT_NAME
    symbol: str = DEFAULT_SYMBOL
    decimals: int = DEFAULT_DECIMALS
    initial_supply: int = DEFAULT_INITIAL_SUPPLY
    initial_holder: bytes = derive_address(DEFAULT_HOLDER_TAG)
    minters: Tuple[bytes, ...] = ()
    burners: Tuple[bytes, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "initial_supply": self.initial_supply,
            "initial_holder": to_hex(self.initial_holder),
            "minters": [to_hex(a) for a in self.minters],
            "burners": [to_hex(a) for a in self.burners],
        }


def _validate(cfg: TokenConfig) -> TokenConfig:
    if not _is_printable_ascii(cfg.name) or not (1 <= len(cfg.name) <= 64):
        raise ConfigError("name must be 1..64 printable ASCII characters", data={"field": "name"})
    if not _is_printable_ascii(cfg.symbol) or not (1 <= len(cfg.symbol) <= 11):
        raise ConfigError("symbol must be 1..11 printable ASCII characters", data={"field": "symbol"})
    if not is_u256(cfg.initial_supply):
        raise ConfigError("initial_supply must be in [0, 2**256-1]", data={"field": "initial_supply"})
    return cfg


# ------------------------------ loader --------------------------------------


def load_config(
    env: Optional[Mapping[str, str]] = None,
    *,
    overrides: Optional[Mapping[str, Any]] = None,
) -> TokenConfig:
    """
    Build a TokenConfig from environment and optional overrides.

    Overrides win over environment values. Supported keys: 'name', 'symbol',
    'decimals', 'initial_supply', 'initial_holder', 'minters', 'burners'.
    Address-valued overrides may be bytes or hex strings; role lists may be a
    sequence or a comma-separated string.
    """
    env = os.environ if env is None else env
    overrides = dict(overrides or {})

    def pick(key: str, var: str, default: Any) -> Any:
        if key in overrides:
            return overrides[key]
        return env.get(var, default)

    name = str(pick("name", "GROK_TOKEN_NAME", DEFAULT_NAME)).strip()
    symbol = str(pick("symbol", "GROK_TOKEN_SYMBOL", DEFAULT_SYMBOL)).strip().upper()
    decimals = _clamp_decimals(
        _parse_int(pick("decimals", "GROK_TOKEN_DECIMALS", DEFAULT_DECIMALS), field="decimals")
    )
    initial_supply = _parse_int(
        pick("initial_supply", "GROK_TOKEN_INITIAL_SUPPLY", DEFAULT_INITIAL_SUPPLY),
        field="initial_supply",
    )

    raw_holder = pick("initial_holder", "GROK_TOKEN_INITIAL_HOLDER", None)
    holder = (
        derive_address(DEFAULT_HOLDER_TAG)
        if raw_holder in (None, "")
        else _parse_addr(raw_holder, field="initial_holder")
    )

    raw_minters = pick("minters", "GROK_TOKEN_MINTERS", None)
    minters = (holder,) if raw_minters is None else _parse_addr_list(raw_minters, field="minters")
    raw_burners = pick("burners", "GROK_TOKEN_BURNERS", None)
    burners = (holder,) if raw_burners is None else _parse_addr_list(raw_burners, field="burners")

    return _validate(
        TokenConfig(
            name=name,
            symbol=symbol,
            decimals=decimals,
            initial_supply=initial_supply,
            initial_holder=holder,
            minters=minters,
            burners=burners,
        )
    )


@lru_cache(maxsize=1)
def get_config() -> TokenConfig:
    """Cached process-wide config read from os.environ."""
    return load_config()


def summary(cfg: Optional[TokenConfig] = None) -> str:
    """One-line human-friendly rendering of the most important knobs."""
    cfg = cfg or get_config()
    return (
        "token{"
        f"name={cfg.name}, symbol={cfg.symbol}, decimals={cfg.decimals}, "
        f"supply={cfg.initial_supply}, holder={to_hex(cfg.initial_holder)}, "
        f"minters={len(cfg.minters)}, burners={len(cfg.burners)}"
        "}"
    )


__all__ = [
    "DEFAULT_NAME",
    "DEFAULT_SYMBOL",
    "DEFAULT_DECIMALS",
    "DEFAULT_INITIAL_SUPPLY",
    "TokenConfig",
    "load_config",
    "get_config",
    "summary",
]
