#!/usr/bin/env python3
"""
app.py

Command-line front end for the hashlab tables:
- OpenAddressTable (linear probing, tombstone deletion)
- ChainTable (separate chaining with singly-linked buckets)
- interactive demo menu, CSV operation replay, probe tracing, invariant checks

Global flags select the backend and initial capacity; a TOML config
(``--config`` or ``HASHLAB_CONFIG``) supplies defaults that env vars override.
"""

from __future__ import annotations

import argparse
import contextlib
import csv
import json
import logging
import os
import sys
from collections.abc import Iterator
from logging.handlers import RotatingFileHandler
from typing import Any

from hashlab.cli.commands import CLIContext, register_subcommands
from hashlab.cli.demo import run_demo
from hashlab.config import CONFIG_ENV_VAR, AppConfig, load_app_config
from hashlab.contracts.error import BadInputError, IOErrorEnvelope, guard_cli
from hashlab.core import BACKENDS, AnyTable, build_table

# --------------------------------------------------------------------
# Logging
# --------------------------------------------------------------------
logger = logging.getLogger("hashlab")
logger.setLevel(logging.INFO)
logger.propagate = False

DEFAULT_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"
DEFAULT_LOG_MAX_BYTES = 5_000_000
DEFAULT_LOG_BACKUP_COUNT = 5
DEFAULT_OPS_MAX_ROWS = 1_000_000

OPS_COLUMNS = ("op", "key", "value")
KNOWN_OPS = ("put", "get", "remove", "rehash")


class JsonFormatter(logging.Formatter):
    """Render log records as JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": self.formatTime(record, DEFAULT_LOG_DATEFMT),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(
    use_json: bool = False,
    log_file: str | None = None,
    *,
    max_bytes: int = DEFAULT_LOG_MAX_BYTES,
    backup_count: int = DEFAULT_LOG_BACKUP_COUNT,
) -> None:
    """Configure console (and optional rotating file) logging."""

    formatter: logging.Formatter
    if use_json:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(DEFAULT_LOG_FORMAT, DEFAULT_LOG_DATEFMT)

    for handler in list(logger.handlers):
        with contextlib.suppress(Exception):
            handler.close()
        logger.removeHandler(handler)

    stream = logging.StreamHandler()
    stream.setFormatter(formatter)
    logger.addHandler(stream)

    if log_file:
        handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count)
        handler.setFormatter(formatter)
        logger.addHandler(handler)


configure_logging()

APP_CONFIG: AppConfig = AppConfig()
OUTPUT_JSON: bool = False


def set_app_config(cfg: AppConfig) -> None:
    global APP_CONFIG
    APP_CONFIG = cfg


def emit_success(
    command: str, *, text: str | None = None, data: dict[str, Any] | None = None
) -> None:
    if OUTPUT_JSON:
        payload: dict[str, Any] = {"ok": True, "command": command}
        if data:
            payload.update(data)
        if text is not None and "result" not in payload:
            payload["result"] = text
        print(json.dumps(payload, ensure_ascii=False))
    else:
        if text is not None:
            print(text)


def make_table() -> AnyTable:
    policy = APP_CONFIG.table
    return build_table(
        policy.backend, policy.initial_capacity, max_load_factor=policy.max_load_factor
    )


def parse_seed(raw: str) -> tuple[str, str]:
    key, sep, value = raw.partition("=")
    if not sep or not key:
        raise BadInputError(f"Seed entries must look like key=value (got {raw!r})")
    return key, value


def seed_table(table: AnyTable, seeds: list[str] | None) -> list[str]:
    applied: list[str] = []
    for raw in seeds or []:
        key, value = parse_seed(raw)
        table.put(key, value)
        applied.append(f"{key}={value}")
    return applied


# --------------------------------------------------------------------
# Ops runner
# --------------------------------------------------------------------
def run_op(table: AnyTable, op: str, key: str | None, value: str | None) -> str | None:
    if op == "put":
        if not key or value is None:
            raise BadInputError("PUT operations require both key and value")
        table.put(key, value)
        return "OK"
    if op == "get":
        if not key:
            raise BadInputError("GET operations require a key")
        found = table.get(key)
        return None if found is None else str(found)
    if op == "remove":
        if not key:
            raise BadInputError("REMOVE operations require a key")
        removed = table.remove(key)
        return None if removed is None else str(removed)
    if op == "rehash":
        raw = value if value not in (None, "") else key
        try:
            size = int(raw or "")
        except ValueError as exc:
            raise BadInputError(f"REHASH operations require an integer size (got {raw!r})") from exc
        return "1" if table.rehash(size) else "0"
    raise BadInputError(f"unknown op: {op}")


def load_ops(path: str, max_rows: int = DEFAULT_OPS_MAX_ROWS) -> Iterator[tuple[int, str, str, str | None]]:
    """Yield ``(line, op, key, value)`` rows from an ``op,key,value`` CSV."""

    try:
        fh = open(path, newline="", encoding="utf-8")
    except OSError as exc:
        raise IOErrorEnvelope(f"Cannot read {path}: {exc}") from exc
    with fh:
        reader = csv.DictReader(fh)
        header = reader.fieldnames or []
        missing = [col for col in ("op", "key") if col not in header]
        if missing:
            raise BadInputError(
                f"Missing CSV columns: {', '.join(missing)}",
                hint=f"Expected header: {','.join(OPS_COLUMNS)}",
            )
        for row_idx, row in enumerate(reader, start=2):
            if row_idx - 1 > max_rows:
                raise BadInputError(f"Too many rows in {path} (limit {max_rows})")
            op = (row.get("op") or "").strip().lower()
            if op not in KNOWN_OPS:
                raise BadInputError(f"Line {row_idx}: unknown op {op!r}")
            key = row.get("key") or ""
            value = row.get("value")
            yield row_idx, op, key, (value if value not in (None, "") else None)


def run_ops_csv(table: AnyTable, path: str) -> dict[str, Any]:
    counts = {op: 0 for op in KNOWN_OPS}
    results: list[dict[str, Any]] = []
    for line, op, key, value in load_ops(path):
        try:
            out = run_op(table, op, key, value)
        except BadInputError as exc:
            raise BadInputError(f"Line {line}: {exc}", hint=exc.hint) from exc
        counts[op] += 1
        results.append({"line": line, "op": op, "key": key, "result": out})
        logger.debug("line %d %s %r -> %r", line, op, key, out)
    logger.info(
        "Replayed %d ops from %s (size=%d, capacity=%d)",
        len(results),
        path,
        table.size(),
        table.capacity(),
    )
    return {"ops": counts, "results": results}


# --------------------------------------------------------------------
# CLI
# --------------------------------------------------------------------
def main(argv: list[str]) -> int:
    p = argparse.ArgumentParser(
        description=(
            "Hash table toolkit: open addressing with linear probing or separate "
            "chaining, with an interactive demo, op replay, probe tracing and verification."
        )
    )
    p.add_argument(
        "--backend",
        default=None,
        choices=list(BACKENDS),
        help="Table backend (default: from config, else 'open').",
    )
    p.add_argument(
        "--capacity",
        type=int,
        default=None,
        help="Initial table capacity (default: from config, else 2).",
    )
    p.add_argument("--log-json", action="store_true", help="Emit logs in JSON format")
    p.add_argument(
        "--log-file",
        default=None,
        help="Optional log file path (rotates at 5MB, keeps 5 backups by default)",
    )
    p.add_argument(
        "--log-max-bytes",
        type=int,
        default=DEFAULT_LOG_MAX_BYTES,
        help="Max bytes per log file before rotation (default: %(default)s)",
    )
    p.add_argument(
        "--log-backup-count",
        type=int,
        default=DEFAULT_LOG_BACKUP_COUNT,
        help="Number of rotated log files to keep (default: %(default)s)",
    )
    p.add_argument(
        "--json", action="store_true", help="Emit machine-readable success output to stdout"
    )
    p.add_argument(
        "--config",
        default=None,
        help=f"Path to TOML config file (falls back to ${CONFIG_ENV_VAR})",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    ctx = CLIContext(
        emit_success=emit_success,
        make_table=make_table,
        seed_table=seed_table,
        run_ops_csv=run_ops_csv,
        run_demo=run_demo,
        logger=logger,
        json_enabled=lambda: OUTPUT_JSON,
        guard=guard_cli,
    )

    handlers = register_subcommands(sub, ctx)

    args = p.parse_args(argv)

    global OUTPUT_JSON
    OUTPUT_JSON = bool(args.json)

    configure_logging(
        args.log_json,
        args.log_file,
        max_bytes=args.log_max_bytes,
        backup_count=args.log_backup_count,
    )

    handler = handlers[args.cmd]

    @guard_cli
    def _load_config() -> None:
        cfg_path = args.config or os.getenv(CONFIG_ENV_VAR)
        cfg = load_app_config(cfg_path)
        if args.backend is not None:
            cfg.table.backend = args.backend
        if args.capacity is not None:
            cfg.table.initial_capacity = args.capacity
        cfg.validate()
        set_app_config(cfg)
        if cfg_path:
            logger.info("Loaded config from %s", cfg_path)

    _load_config()
    return handler(args)


def console_main() -> None:
    """Entry point for console_scripts."""

    try:
        raise SystemExit(main(sys.argv[1:]))
    except SystemExit:
        raise
    except Exception as e:  # noqa: BLE001
        logger.exception("Fatal error: %s", e)
        raise SystemExit(2) from e


if __name__ == "__main__":
    console_main()
