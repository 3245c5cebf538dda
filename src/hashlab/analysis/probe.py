"""Probe-path tracing for open-addressing and chained tables."""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from jsonschema import Draft202012Validator

from hashlab.contracts.error import BadInputError
from hashlab.core.chaining import ChainTable
from hashlab.core.open_address import OpenAddressTable

ProbeTrace = Dict[str, Any]

TRACE_SCHEMA = "probe-trace.v1"


def _base_trace(backend: str, operation: str, key: Any, capacity: int, start: int) -> ProbeTrace:
    return {
        "schema": TRACE_SCHEMA,
        "backend": backend,
        "operation": operation,
        "key_repr": repr(key),
        "found": False,
        "terminal": "exhausted",
        "capacity": capacity,
        "start_slot": start,
        "path": [],
    }


def _capacity_after_insert(table: Any, size_after: int) -> int:
    cap = table.capacity()
    while size_after >= table.max_load_factor() * cap:
        cap *= 2
    return cap


def trace_open_get(table: OpenAddressTable, key: Any) -> ProbeTrace:
    cap = table.capacity()
    start = table.home_slot(key)
    trace = _base_trace("open", "get", key, cap, start)
    states = list(table.slots())
    path: List[Dict[str, Any]] = trace["path"]
    idx = start
    for step in range(cap):
        _, state, entry = states[idx]
        record: Dict[str, Any] = {"step": step, "slot": idx, "state": state}
        path.append(record)
        if state == "empty":
            trace["terminal"] = "empty"
            break
        if entry is not None:
            matches = entry.key == key
            record.update(key_repr=repr(entry.key), value_repr=repr(entry.value), matches=matches)
            if matches:
                trace["terminal"] = "match"
                trace["found"] = True
                break
        idx = (idx + 1) % cap
    return trace


def trace_open_put(table: OpenAddressTable, key: Any, value: Any) -> ProbeTrace:
    if key is None or value is None:
        raise ValueError("put requires a non-None key and value")
    cap = table.capacity()
    start = table.home_slot(key)
    trace = _base_trace("open", "put", key, cap, start)
    states = list(table.slots())
    path: List[Dict[str, Any]] = trace["path"]
    free: Optional[Dict[str, Any]] = None
    idx = start
    for step in range(cap):
        _, state, entry = states[idx]
        record: Dict[str, Any] = {"step": step, "slot": idx, "state": state}
        path.append(record)
        if state == "empty":
            if free is None:
                free = record
            break
        if state == "tombstone":
            if free is None:
                free = record
        elif entry is not None:
            matches = entry.key == key
            record.update(key_repr=repr(entry.key), value_repr=repr(entry.value), matches=matches)
            if matches:
                record["action"] = "update"
                trace["terminal"] = "update"
                trace["found"] = True
                return trace
        idx = (idx + 1) % cap
    if free is not None:
        free["action"] = "reuse-tombstone" if free["state"] == "tombstone" else "insert"
        trace["terminal"] = "insert"
        cap_after = _capacity_after_insert(table, table.size() + 1)
        trace["resized"] = cap_after != cap
        trace["capacity_after"] = cap_after
    return trace


def trace_chaining_get(table: ChainTable, key: Any) -> ProbeTrace:
    bucket = table.home_slot(key)
    trace = _base_trace("chaining", "get", key, table.capacity(), bucket)
    path: List[Dict[str, Any]] = trace["path"]
    for position, entry in enumerate(table.chain(bucket)):
        matches = entry.key == key
        path.append(
            {
                "step": position,
                "slot": bucket,
                "position": position,
                "state": "occupied",
                "key_repr": repr(entry.key),
                "value_repr": repr(entry.value),
                "matches": matches,
            }
        )
        if matches:
            trace["terminal"] = "match"
            trace["found"] = True
            return trace
    path.append({"step": len(path), "slot": bucket, "state": "empty"})
    trace["terminal"] = "empty"
    return trace


def trace_chaining_put(table: ChainTable, key: Any, value: Any) -> ProbeTrace:
    if key is None or value is None:
        raise ValueError("put requires a non-None key and value")
    trace = trace_chaining_get(table, key)
    trace["operation"] = "put"
    path: List[Dict[str, Any]] = trace["path"]
    if trace["found"]:
        path[-1]["action"] = "update"
        trace["terminal"] = "update"
        return trace
    # Drop the end-of-chain marker unless the bucket itself was empty.
    if len(path) > 1:
        path.pop()
        path[-1]["action"] = "append"
    else:
        path[-1]["action"] = "insert"
    trace["terminal"] = "insert"
    cap_after = _capacity_after_insert(table, table.size() + 1)
    trace["resized"] = cap_after != table.capacity()
    trace["capacity_after"] = cap_after
    return trace


def trace_probe_get(table: Any, key: Any) -> ProbeTrace:
    if isinstance(table, OpenAddressTable):
        return trace_open_get(table, key)
    if isinstance(table, ChainTable):
        return trace_chaining_get(table, key)
    raise TypeError(f"Unsupported table type: {type(table).__name__}")


def trace_probe_put(table: Any, key: Any, value: Any) -> ProbeTrace:
    if isinstance(table, OpenAddressTable):
        return trace_open_put(table, key, value)
    if isinstance(table, ChainTable):
        return trace_chaining_put(table, key, value)
    raise TypeError(f"Unsupported table type: {type(table).__name__}")


@lru_cache(maxsize=1)
def _trace_validator() -> Draft202012Validator:
    schema_resource = resources.files("hashlab.contracts") / "trace_schema.json"
    with schema_resource.open(encoding="utf-8") as stream:
        schema = json.load(stream)
    return Draft202012Validator(schema)


def validate_trace(trace: ProbeTrace) -> None:
    """Raise ``BadInputError`` when ``trace`` does not match the bundled schema."""

    errors = sorted(_trace_validator().iter_errors(trace), key=lambda err: list(err.path))
    if errors:
        detail = "; ".join(f"{err.message} @ {list(err.path)}" for err in errors)
        raise BadInputError(f"Invalid probe trace: {detail}")


def format_trace_lines(
    trace: ProbeTrace,
    *,
    seeds: Optional[Sequence[str]] = None,
    export_path: Optional[Union[str, Path]] = None,
) -> List[str]:
    """Return a human-friendly rendering of a probe trace."""

    lines: List[str] = []
    backend = trace.get("backend", "?")
    operation = trace.get("operation", "?")
    lines.append(f"Probe visualization [{backend}] {operation.upper()} key={trace.get('key_repr', '?')}")
    lines.append(f"Found: {trace.get('found')} | Terminal: {trace.get('terminal')}")
    capacity_line = f"Capacity: {trace.get('capacity')} | Home slot: {trace.get('start_slot')}"
    if trace.get("resized"):
        capacity_line += f" (grows to {trace.get('capacity_after')})"
    lines.append(capacity_line)
    if seeds:
        lines.append("Seed entries: " + ", ".join(seeds))
    lines.append("Steps:")
    path = trace.get("path")
    if not path:
        lines.append("  (no path recorded)")
    else:
        for item in path:
            attrs: List[str] = []
            for key in ("slot", "position", "state", "action", "matches", "key_repr"):
                if key in item and item[key] is not None:
                    value = item[key]
                    if isinstance(value, bool):
                        value = str(value).lower()
                    attrs.append(f"{key}={value}")
            lines.append(f"  Step {item.get('step')}: " + ", ".join(attrs))
    if export_path:
        lines.append(f"Trace JSON written to: {export_path}")
    return lines


__all__ = [
    "TRACE_SCHEMA",
    "format_trace_lines",
    "trace_chaining_get",
    "trace_chaining_put",
    "trace_open_get",
    "trace_open_put",
    "trace_probe_get",
    "trace_probe_put",
    "validate_trace",
]
