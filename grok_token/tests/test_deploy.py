from __future__ import annotations

import json

from grok_token.config import load_config
from grok_token.deploy import canonical_json_str, deploy, deployment_address, write_record
from grok_token.ledger import Ledger
from grok_token.version import __version__

from conftest import SUPPLY


def test_canonical_json_is_compact_and_sorted() -> None:
    assert canonical_json_str({"b": 1, "a": [1, 2]}) == '{"a":[1,2],"b":1}'


def test_deploy_builds_ledger(token_config, owner) -> None:
    dep = deploy(token_config)
    assert isinstance(dep.ledger, Ledger)
    assert dep.ledger.balance_of(owner) == SUPPLY
    assert dep.address == deployment_address(token_config)
    assert len(dep.address) == 20


def test_address_is_a_function_of_config(token_config) -> None:
    same = load_config(env={}, overrides={"initial_supply": SUPPLY, "initial_holder": token_config.initial_holder})
    other = load_config(env={}, overrides={"initial_supply": SUPPLY + 1, "initial_holder": token_config.initial_holder})
    assert deploy(same).address == deploy(token_config).address
    assert deploy(other).address != deploy(token_config).address


def test_record(token_config, owner) -> None:
    d = deploy(token_config).to_dict()
    assert d["address"].startswith("0x") and len(d["address"]) == 42
    assert d["symbol"] == "GTN"
    assert d["initial_supply"] == d["total_supply"] == SUPPLY
    assert d["initial_holder"] == "0x" + owner.hex()
    assert d["version"] == __version__


def test_write_record(tmp_path, token_config) -> None:
    dep = deploy(token_config)
    out = write_record(dep, tmp_path / "build" / "deployment.json")
    assert out.exists()
    assert json.loads(out.read_text(encoding="utf-8")) == dep.to_dict()
    assert not list(out.parent.glob("*.tmp"))
