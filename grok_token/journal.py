"""
grok_token.journal — undo journal, checkpoints, revert/commit.

The ledger mutates plain dicts (balances, allowances) and a couple of scalar
attributes (total supply) in place. To give each public operation
all-or-nothing semantics, every write first records how to undo itself in the
journal's top frame:

    j = Journal()
    with j.checkpoint():
        j.record_item(balances, addr)      # remembers old value / absence
        balances[addr] = new_value
        ...                                # any raise here undoes everything

Frames nest. `commit()` folds the top frame's undo entries into its parent
(or drops them when the root checkpoint commits); `revert()` replays the top
frame's undo entries in reverse order.

Writes made while no checkpoint is open are not recorded and cannot be undone.
Construction-time seeding relies on this.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Hashable, Iterator, List, MutableMapping

_MISSING = object()

UndoFn = Callable[[], None]


class Journal:
    """
    Stack of undo frames.

    API highlights
    --------------
    - begin() / commit() / revert() / depth()
    - checkpoint() context manager (commit on success, revert on any exception)
    - record_item(mapping, key), record_attr(obj, name), record(undo_fn)
    """

    def __init__(self) -> None:
        self._frames: List[List[UndoFn]] = []

    # ------------------------------------------------------------------ #
    # Checkpointing
    # ------------------------------------------------------------------ #

    def depth(self) -> int:
        """Number of open checkpoints (0 when idle)."""
        return len(self._frames)

    def begin(self) -> int:
        """Open a checkpoint. Returns the new depth."""
        self._frames.append([])
        return len(self._frames)

    def commit(self) -> None:
        if not self._frames:
            raise RuntimeError("commit without an open checkpoint")
        top = self._frames.pop()
        if self._frames:
            # An outer checkpoint may still revert these writes.
            self._frames[-1].extend(top)

    def revert(self) -> None:
        if not self._frames:
            raise RuntimeError("revert without an open checkpoint")
        top = self._frames.pop()
        for undo in reversed(top):
            undo()

    @contextmanager
    def checkpoint(self) -> Iterator[int]:
        marker = self.begin()
        try:
            yield marker
        except BaseException:
            self.revert()
            raise
        else:
            self.commit()

    # ------------------------------------------------------------------ #
    # Recording
    # ------------------------------------------------------------------ #

    def record(self, undo: UndoFn) -> None:
        """Push an arbitrary undo callback onto the top frame."""
        if self._frames:
            self._frames[-1].append(undo)

    def record_item(self, mapping: MutableMapping[Any, Any], key: Hashable) -> None:
        """Remember mapping[key] (or its absence) before it is overwritten."""
        if not self._frames:
            return
        old = mapping.get(key, _MISSING)

        def _undo() -> None:
            if old is _MISSING:
                mapping.pop(key, None)
            else:
                mapping[key] = old

        self._frames[-1].append(_undo)

    def record_attr(self, obj: Any, name: str) -> None:
        """Remember getattr(obj, name) before it is overwritten."""
        if not self._frames:
            return
        old = getattr(obj, name)
        self._frames[-1].append(lambda: setattr(obj, name, old))


__all__ = ["Journal"]
