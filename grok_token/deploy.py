"""
grok_token.deploy — construct the ledger once and describe the deployment.

A deployment is the ledger instance plus a record that operator tooling can
store and look up later:

    {
      "address":  "0x…",          # sha3_256(canonical config JSON)[:20]
      "name": "GrokToken", "symbol": "GTN", "decimals": 18,
      "initial_supply": …, "total_supply": …, "initial_holder": "0x…",
      "minters": [...], "burners": [...],
      "version": "0.1.0"
    }

The address is a pure function of the configuration, so redeploying the same
config yields the same address.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .address import ADDRESS_LEN, to_hex
from .config import TokenConfig, get_config
from .ledger import Ledger
from .version import __version__

log = logging.getLogger(__name__)


def canonical_json_str(obj: Any) -> str:
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def deployment_address(cfg: TokenConfig) -> bytes:
    payload = b"GTN-DEPLOY\x00" + canonical_json_str(cfg.to_dict()).encode("utf-8")
    return hashlib.sha3_256(payload).digest()[:ADDRESS_LEN]


@dataclass
class Deployment:
    address: bytes
    config: TokenConfig
    ledger: Ledger

    def to_dict(self) -> Dict[str, Any]:
        out = self.config.to_dict()
        out.update(
            {
                "address": to_hex(self.address),
                "total_supply": self.ledger.total_supply(),
                "version": __version__,
            }
        )
        return out


def deploy(cfg: Optional[TokenConfig] = None) -> Deployment:
    """Construct a ledger from `cfg` (default: the cached env config)."""
    cfg = cfg or get_config()
    ledger = Ledger.from_config(cfg)
    dep = Deployment(address=deployment_address(cfg), config=cfg, ledger=ledger)
    log.info("deploy: %s deployed to %s", cfg.name, to_hex(dep.address))
    return dep


def write_record(dep: Deployment, path: Path) -> Path:
    """Atomically write the deployment record as pretty JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(dep.to_dict(), indent=2, sort_keys=True) + "\n", encoding="utf-8")
    os.replace(tmp, path)
    return path


__all__ = ["Deployment", "canonical_json_str", "deployment_address", "deploy", "write_record"]
