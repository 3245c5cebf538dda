"""Structural invariant checks for both table backends."""

from __future__ import annotations

from typing import Any, List, Tuple

from hashlab.contracts.error import InvariantError

from .chaining import MIN_CAPACITY as CHAIN_MIN_CAPACITY, ChainTable
from .hashing import bucket_index
from .open_address import MIN_CAPACITY as OPEN_MIN_CAPACITY, OpenAddressTable


def _verify_open(table: OpenAddressTable, verbose: bool) -> Tuple[bool, List[str]]:
    msgs: List[str] = []
    ok = True
    cap = table.capacity()
    if cap < OPEN_MIN_CAPACITY:
        ok = False
        msgs.append(f"capacity {cap} below minimum {OPEN_MIN_CAPACITY}")
    states = list(table.slots())
    live = [entry for _, state, entry in states if state == "occupied"]
    if len(live) != table.size():
        ok = False
        msgs.append(f"size mismatch: stored={table.size()} live={len(live)}")
    keys = [entry.key for entry in live if entry is not None]
    if len(set(keys)) != len(keys):
        ok = False
        msgs.append("duplicate keys present")
    for idx, state, entry in states:
        if entry is None:
            continue
        home = bucket_index(entry.key, cap)
        cursor = home
        # Every slot between home and the entry must be non-empty.
        while cursor != idx:
            if states[cursor][1] == "empty":
                ok = False
                msgs.append(f"slot {idx} key={entry.key!r} unreachable from home {home}")
                break
            cursor = (cursor + 1) % cap
    if verbose:
        msgs.append(
            f"open: capacity={cap} size={table.size()} "
            f"load_factor={table.load_factor():.3f} tombstones={table.tombstone_count()}"
        )
    return ok, msgs


def _verify_chaining(table: ChainTable, verbose: bool) -> Tuple[bool, List[str]]:
    msgs: List[str] = []
    ok = True
    cap = table.capacity()
    if cap < CHAIN_MIN_CAPACITY:
        ok = False
        msgs.append(f"capacity {cap} below minimum {CHAIN_MIN_CAPACITY}")
    seen: List[Any] = []
    for idx in range(cap):
        for entry in table.chain(idx):
            if bucket_index(entry.key, cap) != idx:
                ok = False
                msgs.append(f"key={entry.key!r} stored in bucket {idx}, expected {bucket_index(entry.key, cap)}")
            seen.append(entry.key)
    if len(seen) != table.size():
        ok = False
        msgs.append(f"size mismatch: stored={table.size()} live={len(seen)}")
    if len(set(seen)) != len(seen):
        ok = False
        msgs.append("duplicate keys present")
    if verbose:
        msgs.append(
            f"chaining: capacity={cap} size={table.size()} "
            f"load_factor={table.load_factor():.3f} max_chain_len={table.max_chain_len()}"
        )
    return ok, msgs


def verify_table(table: Any, verbose: bool = False) -> Tuple[bool, List[str]]:
    """Return ``(ok, messages)`` describing any broken invariants."""

    if isinstance(table, OpenAddressTable):
        return _verify_open(table, verbose)
    if isinstance(table, ChainTable):
        return _verify_chaining(table, verbose)
    return False, [f"Unsupported table type: {type(table).__name__}"]


def ensure_valid(table: Any) -> None:
    """Raise ``InvariantError`` listing every violation when ``table`` is broken."""

    ok, messages = verify_table(table)
    if not ok:
        raise InvariantError.from_violations(type(table).__name__, messages)


__all__ = ["ensure_valid", "verify_table"]
