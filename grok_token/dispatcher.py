"""
grok_token.dispatcher — invoke ledger operations by name and argument list.

Operator tooling (the CLI, scripted batches) talks to the ledger through this
module rather than calling methods directly:

    dispatch(ledger, "transferFrom", caller=spender, args=[owner, to, 6])
    apply_call(ledger, {"op": "approve", "caller": owner, "args": {"spender": s, "value": 10}})
    run_batch(ledger, [call, call, ...])

Operation names are accepted in the public interface spelling (camelCase,
e.g. `balanceOf`) or as the snake_case method name. Arguments may be a
positional sequence or a mapping keyed by parameter name. Amount arguments
given as strings (e.g. from a shell) are parsed as integers, with 0x and "_"
allowed.

`apply_call` never raises for ledger failures; it maps them into a
`CallResult` with the same {code, message, data} payload as
`errors.error_to_result_fields`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .address import to_hex
from .errors import DispatchError, TokenError, error_to_result_fields
from .ledger import Ledger

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class OpSpec:
    method: str
    params: Tuple[str, ...]
    mutating: bool


OPERATIONS: Dict[str, OpSpec] = {
    "name": OpSpec("name", (), False),
    "symbol": OpSpec("symbol", (), False),
    "decimals": OpSpec("decimals", (), False),
    "total_supply": OpSpec("total_supply", (), False),
    "balance_of": OpSpec("balance_of", ("account",), False),
    "allowance": OpSpec("allowance", ("owner", "spender"), False),
    "transfer": OpSpec("transfer", ("to", "value"), True),
    "transfer_from": OpSpec("transfer_from", ("from", "to", "value"), True),
    "approve": OpSpec("approve", ("spender", "value"), True),
    "mint": OpSpec("mint", ("to", "value"), True),
    "burn": OpSpec("burn", ("from", "value"), True),
}

_ALIASES: Dict[str, str] = {
    "totalsupply": "total_supply",
    "balanceof": "balance_of",
    "transferfrom": "transfer_from",
}


def resolve_op(op: str) -> str:
    """Canonical snake_case operation name for `op`; DispatchError if unknown."""
    key = str(op).strip()
    if key in OPERATIONS:
        return key
    folded = key.replace("-", "_").lower()
    if folded in OPERATIONS:
        return folded
    alias = _ALIASES.get(folded.replace("_", ""))
    if alias is not None:
        return alias
    raise DispatchError(f"unknown operation {op!r}", op=str(op))


def _coerce_value(v: Any) -> Any:
    if isinstance(v, str):
        s = v.strip().replace("_", "")
        try:
            return int(s, 0)
        except ValueError:
            return v
    return v


def _bind(name: str, spec: OpSpec, args: Any) -> List[Any]:
    if args is None:
        args = ()
    if isinstance(args, Mapping):
        bound = []
        for p in spec.params:
            if p in args:
                bound.append(args[p])
            elif p + "_" in args:
                bound.append(args[p + "_"])
            else:
                raise DispatchError(f"missing argument {p!r}", op=name)
        extra = set(args) - set(spec.params) - {p + "_" for p in spec.params}
        if extra:
            raise DispatchError(f"unexpected arguments {sorted(extra)}", op=name)
    elif not isinstance(args, (list, tuple)):
        raise DispatchError("args must be a list or a mapping", op=name)
    else:
        bound = list(args)
        if len(bound) != len(spec.params):
            raise DispatchError(
                f"{name} takes {len(spec.params)} argument(s), got {len(bound)}",
                op=name,
                data={"params": list(spec.params)},
            )
    return [_coerce_value(v) if p == "value" else v for p, v in zip(spec.params, bound)]


def dispatch(ledger: Ledger, op: str, caller: Any = None, args: Any = ()) -> Any:
    """
    Invoke `op` on `ledger`. Mutating operations require `caller`.

    Returns whatever the ledger method returns (True for mutations). Ledger
    failures propagate as TokenError subclasses.
    """
    name = resolve_op(op)
    spec = OPERATIONS[name]
    bound = _bind(name, spec, args)
    fn = getattr(ledger, spec.method)
    if spec.mutating:
        if caller is None:
            raise DispatchError(f"{name} requires a caller", op=name)
        return fn(caller, *bound)
    return fn(*bound)


@dataclass
class CallResult:
    op: str
    ok: bool
    status: str
    result: Any = None
    error: Optional[Dict[str, Any]] = None
    events: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"op": self.op, "ok": self.ok, "status": self.status}
        if self.ok:
            out["result"] = self.result
        else:
            out["error"] = self.error
        if self.events:
            out["events"] = self.events
        return out


def _jsonable(x: Any) -> Any:
    if isinstance(x, (bytes, bytearray)):
        return to_hex(bytes(x))
    return x


def apply_call(ledger: Ledger, call: Mapping[str, Any]) -> CallResult:
    """
    Apply one `{"op", "caller"?, "args"?}` mapping and capture the outcome,
    including any events the call committed.
    """
    op = str(call.get("op", ""))
    before = len(ledger.events)
    try:
        result = dispatch(ledger, op, call.get("caller"), call.get("args", ()))
    except TokenError as e:
        fields = error_to_result_fields(e)
        log.debug("dispatch: %s -> %s", op, e.code)
        return CallResult(op=op, ok=False, status=fields["status"], error=fields["error"])
    events = [ev.to_dict() for ev in ledger.events.records(since=before)]
    return CallResult(op=op, ok=True, status="SUCCESS", result=_jsonable(result), events=events)


def run_batch(
    ledger: Ledger, calls: Iterable[Mapping[str, Any]], *, stop_on_error: bool = False
) -> List[CallResult]:
    """Apply calls in order. With stop_on_error, stop after the first failure."""
    out: List[CallResult] = []
    for call in calls:
        res = apply_call(ledger, call)
        out.append(res)
        if stop_on_error and not res.ok:
            break
    return out


__all__ = [
    "OpSpec",
    "OPERATIONS",
    "resolve_op",
    "dispatch",
    "CallResult",
    "apply_call",
    "run_batch",
]
