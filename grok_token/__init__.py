"""
grok_token — a deterministic fungible-token ledger.

Balances, allowances and role-gated mint/burn behind one explicitly-owned
`Ledger` object, with an append-only event log for observers.

Common symbols are lazily re-exported from their submodules on first access
so that `import grok_token` stays cheap (no prometheus/typer import until a
ledger or the CLI is actually used).

Submodules:
- ledger:      Ledger, LedgerSnapshot
- access:      AccessControl, MINTER_ROLE, BURNER_ROLE
- allowances:  AllowanceRegistry
- events:      EventLog, TransferEvent, ApprovalEvent
- journal:     Journal (checkpoint/commit/revert)
- config:      TokenConfig, load_config, get_config
- deploy:      deploy(), Deployment (import from grok_token.deploy)
- dispatcher:  dispatch, apply_call, run_batch
- errors:      TokenError and failure kinds
"""

from __future__ import annotations

from importlib import import_module as _imp
from typing import Any, Dict, Tuple

from .version import __version__

# Map of public attributes → (submodule, symbol)
_exports: Dict[str, Tuple[str, str]] = {
    "Ledger": ("ledger", "Ledger"),
    "LedgerSnapshot": ("ledger", "LedgerSnapshot"),
    "AccessControl": ("access", "AccessControl"),
    "AllowanceRegistry": ("allowances", "AllowanceRegistry"),
    "EventLog": ("events", "EventLog"),
    "TransferEvent": ("events", "TransferEvent"),
    "ApprovalEvent": ("events", "ApprovalEvent"),
    "Journal": ("journal", "Journal"),
    "TokenConfig": ("config", "TokenConfig"),
    "load_config": ("config", "load_config"),
    "dispatch": ("dispatcher", "dispatch"),
    "ZERO_ADDRESS": ("address", "ZERO_ADDRESS"),
    "TokenError": ("errors", "TokenError"),
}

__all__ = tuple(["__version__", *_exports.keys()])


def __getattr__(name: str) -> Any:
    """
    Lazy attribute loader to avoid import-time dependency tangles.
    """
    if name in _exports:
        submod, symbol = _exports[name]
        mod = _imp(f"{__name__}.{submod}")
        return getattr(mod, symbol)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:  # pragma: no cover
    return sorted(list(globals().keys()) + list(__all__))
