"""
grok_token.cli.main
-------------------

Typer application behind the `grok-token` console script.

The ledger lives only for the duration of one invocation (no persistence), so
every command deploys a fresh ledger from the environment configuration
(see grok_token.config) before doing its work. Use `--batch` / `run` to
replay a setup sequence first.

Batch file format (JSON):

    [
      {"op": "approve", "caller": "0x…", "args": ["0x…", 10]},
      {"op": "transferFrom", "caller": "0x…", "args": {"from": "0x…", "to": "0x…", "value": 6}}
    ]

or {"calls": [...]}. A missing "caller" defaults to the initial holder.

Examples
--------
python -m grok_token.cli.main deploy --out build/deployment.json
python -m grok_token.cli.main run calls.json --strict
python -m grok_token.cli.main call balanceOf 0x…
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer

from ..address import to_hex
from ..config import TokenConfig, load_config, summary
from ..deploy import Deployment, deploy as deploy_ledger, write_record
from ..dispatcher import apply_call, run_batch
from ..errors import TokenError
from ..version import version_metadata

log = logging.getLogger(__name__)

app = typer.Typer(
    name="grok-token",
    add_completion=False,
    no_args_is_help=True,
    help="Deploy and drive the GrokToken ledger.",
)


# -------------------- utils --------------------


def _load_config_or_exit() -> TokenConfig:
    try:
        return load_config()
    except TokenError as e:
        typer.secho(f"config error: {e.message}", fg=typer.colors.RED, err=True)
        raise typer.Exit(2)


def _load_calls(path: Path) -> List[Dict[str, Any]]:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        typer.secho(f"cannot read batch {path}: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(2)
    calls = raw.get("calls") if isinstance(raw, dict) else raw
    if not isinstance(calls, list) or not all(isinstance(c, dict) for c in calls):
        typer.secho(f"batch {path} must be a list of call objects", fg=typer.colors.RED, err=True)
        raise typer.Exit(2)
    return calls


def _with_default_caller(calls: List[Dict[str, Any]], dep: Deployment) -> List[Dict[str, Any]]:
    holder = to_hex(dep.config.initial_holder)
    return [c if c.get("caller") else {**c, "caller": holder} for c in calls]


def _deploy(batch: Optional[Path]) -> Deployment:
    dep = deploy_ledger(_load_config_or_exit())
    if batch is not None:
        results = run_batch(dep.ledger, _with_default_caller(_load_calls(batch), dep))
        failed = [r for r in results if not r.ok]
        log.info("cli: replayed %d call(s) from %s, %d failed", len(results), batch, len(failed))
    return dep


def _echo_json(obj: Any) -> None:
    typer.echo(json.dumps(obj, indent=2, sort_keys=True))


# -------------------- commands --------------------


@app.command()
def deploy(
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write the deployment record to this file."),
) -> None:
    """Deploy a ledger and print its deployment record."""
    dep = _deploy(None)
    if out is not None:
        write_record(dep, out)
        typer.echo(f"ERC20 deployed to: {to_hex(dep.address)} (record: {out})", err=True)
    _echo_json(dep.to_dict())


@app.command()
def run(
    batch: Path = typer.Argument(..., help="JSON file with the calls to apply."),
    strict: bool = typer.Option(False, "--strict", help="Exit 1 if any call failed."),
    stop_on_error: bool = typer.Option(False, "--stop-on-error", help="Stop at the first failing call."),
) -> None:
    """Deploy, apply a batch of calls, and print results plus final state."""
    dep = deploy_ledger(_load_config_or_exit())
    calls = _with_default_caller(_load_calls(batch), dep)
    results = run_batch(dep.ledger, calls, stop_on_error=stop_on_error)
    ledger = dep.ledger
    _echo_json(
        {
            "address": to_hex(dep.address),
            "results": [r.to_dict() for r in results],
            "total_supply": ledger.total_supply(),
            "holders": {to_hex(a): b for a, b in ledger.holders().items()},
            "events_digest": "0x" + ledger.events.digest().hex(),
        }
    )
    if strict and any(not r.ok for r in results):
        raise typer.Exit(1)


@app.command()
def call(
    op: str = typer.Argument(..., help="Operation name, e.g. transfer, transferFrom, balanceOf."),
    args: Optional[List[str]] = typer.Argument(None, help="Positional operation arguments."),
    caller: Optional[str] = typer.Option(None, "--caller", help="Calling account (default: initial holder)."),
    batch: Optional[Path] = typer.Option(None, "--batch", help="Calls to replay before this one."),
) -> None:
    """Invoke a single operation by name."""
    dep = _deploy(batch)
    who = caller or to_hex(dep.config.initial_holder)
    res = apply_call(dep.ledger, {"op": op, "caller": who, "args": list(args or [])})
    _echo_json(res.to_dict())
    if not res.ok:
        raise typer.Exit(1)


@app.command("config")
def show_config(
    json_out: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """Print the effective token configuration."""
    cfg = _load_config_or_exit()
    if json_out:
        _echo_json(cfg.to_dict())
    else:
        typer.echo(summary(cfg))


@app.command()
def version() -> None:
    """Print package version and VCS describe info."""
    _echo_json(version_metadata())


@app.callback()
def _root(
    log_level: str = typer.Option("WARNING", "--log-level", help="Python logging level."),
) -> None:
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
