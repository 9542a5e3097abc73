from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from grok_token.address import derive_address
from grok_token.cli.main import app
from grok_token.version import git_describe, version_metadata

runner = CliRunner()

OWNER = derive_address("deployer")
ALICE = derive_address("alice")
BOB = derive_address("bob")


def _hex(a: bytes) -> str:
    return "0x" + a.hex()


@pytest.fixture(autouse=True)
def token_env(monkeypatch):
    for var in (
        "GROK_TOKEN_NAME",
        "GROK_TOKEN_SYMBOL",
        "GROK_TOKEN_DECIMALS",
        "GROK_TOKEN_INITIAL_HOLDER",
        "GROK_TOKEN_MINTERS",
        "GROK_TOKEN_BURNERS",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("GROK_TOKEN_INITIAL_SUPPLY", "1000")


def test_no_args_shows_help() -> None:
    result = runner.invoke(app, [])
    for command in ("deploy", "run", "call", "config", "version"):
        assert command in result.output


def test_deploy_prints_record() -> None:
    result = runner.invoke(app, ["deploy"])
    assert result.exit_code == 0, result.output
    rec = json.loads(result.stdout)
    assert rec["symbol"] == "GTN"
    assert rec["total_supply"] == 1000
    assert rec["initial_holder"] == _hex(OWNER)


def test_deploy_writes_record(tmp_path) -> None:
    out = tmp_path / "deployment.json"
    result = runner.invoke(app, ["deploy", "--out", str(out)])
    assert result.exit_code == 0, result.output
    rec = json.loads(out.read_text(encoding="utf-8"))
    assert "ERC20 deployed to: " + rec["address"] in result.output


def test_call_view() -> None:
    result = runner.invoke(app, ["call", "balanceOf", _hex(OWNER)])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["result"] == 1000


def test_call_transfer_defaults_caller_to_holder() -> None:
    result = runner.invoke(app, ["call", "transfer", _hex(ALICE), "1"])
    assert result.exit_code == 0, result.output
    res = json.loads(result.stdout)
    assert res["status"] == "SUCCESS"
    assert res["events"][0]["from"] == _hex(OWNER)


def test_call_failure_exits_nonzero() -> None:
    result = runner.invoke(app, ["call", "transfer", _hex(BOB), "1", "--caller", _hex(ALICE)])
    assert result.exit_code == 1
    assert json.loads(result.stdout)["error"]["code"] == "INSUFFICIENT_BALANCE"


def test_call_after_batch(tmp_path) -> None:
    batch = tmp_path / "setup.json"
    batch.write_text(json.dumps([{"op": "approve", "args": [_hex(ALICE), 10]}]), encoding="utf-8")
    result = runner.invoke(
        app,
        ["call", "transferFrom", _hex(OWNER), _hex(BOB), "6", "--caller", _hex(ALICE), "--batch", str(batch)],
    )
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["events"][0]["value"] == 6


def test_run_batch(tmp_path) -> None:
    batch = tmp_path / "calls.json"
    batch.write_text(
        json.dumps(
            {
                "calls": [
                    {"op": "transfer", "args": {"to": _hex(ALICE), "value": 100}},
                    {"op": "transfer", "caller": _hex(BOB), "args": [_hex(ALICE), 1]},
                    {"op": "burn", "args": [_hex(ALICE), 40]},
                ]
            }
        ),
        encoding="utf-8",
    )
    result = runner.invoke(app, ["run", str(batch)])
    assert result.exit_code == 0, result.output
    out = json.loads(result.stdout)
    assert [r["ok"] for r in out["results"]] == [True, False, True]
    assert out["total_supply"] == 960
    assert out["holders"] == {_hex(OWNER): 900, _hex(ALICE): 60}
    assert out["events_digest"].startswith("0x")

    strict = runner.invoke(app, ["run", str(batch), "--strict"])
    assert strict.exit_code == 1

    stopped = runner.invoke(app, ["run", str(batch), "--stop-on-error"])
    assert len(json.loads(stopped.stdout)["results"]) == 2


def test_run_rejects_bad_batch(tmp_path) -> None:
    batch = tmp_path / "bad.json"
    batch.write_text('{"calls": 3}', encoding="utf-8")
    assert runner.invoke(app, ["run", str(batch)]).exit_code == 2
    assert runner.invoke(app, ["run", str(tmp_path / "missing.json")]).exit_code == 2


def test_bad_config_exits_2(monkeypatch) -> None:
    monkeypatch.setenv("GROK_TOKEN_INITIAL_HOLDER", "0x" + "00" * 20)
    result = runner.invoke(app, ["deploy"])
    assert result.exit_code == 2
    assert "config error" in result.output


def test_config_command(monkeypatch) -> None:
    monkeypatch.setenv("GROK_TOKEN_SYMBOL", "abc")
    text = runner.invoke(app, ["config"])
    assert text.exit_code == 0
    assert "symbol=ABC" in text.stdout

    as_json = runner.invoke(app, ["config", "--json"])
    assert json.loads(as_json.stdout)["symbol"] == "ABC"


def test_version_command(monkeypatch) -> None:
    monkeypatch.setenv("GROK_TOKEN_GIT_DESCRIBE", "v0.1.0-3-gabc1234-dirty")
    git_describe.cache_clear()
    version_metadata.cache_clear()
    try:
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0, result.output
        meta = json.loads(result.stdout)
        assert meta["describe"] == "v0.1.0-3-gabc1234-dirty"
        assert meta["dirty"] == "true"
    finally:
        git_describe.cache_clear()
        version_metadata.cache_clear()
