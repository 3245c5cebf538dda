"""CLI command registration and handlers for hashlab."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from hashlab.analysis import format_trace_lines, trace_probe_get, trace_probe_put, validate_trace
from hashlab.contracts.error import Exit, InvariantError, IOErrorEnvelope
from hashlab.core import backend_name, ensure_valid, verify_table


@dataclass(frozen=True)
class CLIContext:
    """Runtime hooks supplied by the top-level CLI entrypoint."""

    emit_success: Callable[..., None]
    make_table: Callable[[], Any]
    seed_table: Callable[[Any, Optional[List[str]]], List[str]]
    run_ops_csv: Callable[[Any, str], Dict[str, Any]]
    run_demo: Callable[..., None]
    logger: logging.Logger
    json_enabled: Callable[[], bool]
    guard: Callable[[Callable[[argparse.Namespace], int]], Callable[[argparse.Namespace], int]]


def register_subcommands(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    ctx: CLIContext,
) -> Dict[str, Callable[[argparse.Namespace], int]]:
    """Define CLI subcommands and return their handlers."""

    handlers: Dict[str, Callable[[argparse.Namespace], int]] = {}

    def _register(
        name: str,
        help_text: Optional[str],
        configure: Callable[[argparse.ArgumentParser], Callable[[argparse.Namespace], int]],
    ) -> None:
        parser = subparsers.add_parser(name, help=help_text)
        handler = configure(parser)
        handlers[name] = ctx.guard(handler)

    _register(
        "demo",
        "Interactive add/get/remove/resize menu against the selected table.",
        lambda parser: _configure_demo(parser, ctx),
    )
    _register(
        "run-ops",
        "Replay an op,key,value CSV against a fresh table and print the result.",
        lambda parser: _configure_run_ops(parser, ctx),
    )
    _register(
        "probe",
        "Trace the probe path for a GET (or PUT with --value).",
        lambda parser: _configure_probe(parser, ctx),
    )
    _register(
        "verify",
        "Build a table from seeds/ops and check its structural invariants.",
        lambda parser: _configure_verify(parser, ctx),
    )
    return handlers


def _add_seed_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--seed",
        action="append",
        default=None,
        metavar="KEY=VALUE",
        help="Insert KEY=VALUE before running (repeatable).",
    )


def _table_summary(table: Any) -> Dict[str, Any]:
    return {
        "backend": backend_name(table),
        "size": table.size(),
        "capacity": table.capacity(),
        "load_factor": round(table.load_factor(), 6),
    }


def _configure_demo(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    def handler(args: argparse.Namespace) -> int:
        del args
        table = ctx.make_table()
        ctx.logger.info("Demo started on %s table (capacity=%d)", backend_name(table), table.capacity())
        ctx.run_demo(table)
        return int(Exit.OK)

    return handler


def _configure_run_ops(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    parser.add_argument("ops_csv", help="CSV with header op,key,value")
    parser.add_argument(
        "--debug-dump", action="store_true", help="Print every slot instead of live entries only"
    )
    parser.add_argument(
        "--verify", action="store_true", help="Check invariants after replay (exit 3 on failure)"
    )

    def handler(args: argparse.Namespace) -> int:
        table = ctx.make_table()
        summary = ctx.run_ops_csv(table, args.ops_csv)
        dump = table.to_string_debug() if args.debug_dump else table.to_string()
        data: Dict[str, Any] = {**_table_summary(table), **summary, "dump": dump}
        if args.verify:
            try:
                ensure_valid(table)
            except InvariantError as exc:
                for msg in exc.violations:
                    ctx.logger.error("verify: %s", msg)
                raise
            data["verified"] = True
        ctx.emit_success("run-ops", text=dump, data=data)
        return int(Exit.OK)

    return handler


def _configure_probe(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    parser.add_argument("key", help="Key to trace")
    parser.add_argument("--value", default=None, help="Trace a PUT of this value instead of a GET")
    _add_seed_argument(parser)
    parser.add_argument("--export-json", default=None, help="Write the trace JSON to this path")

    def handler(args: argparse.Namespace) -> int:
        table = ctx.make_table()
        seeds = ctx.seed_table(table, args.seed)
        if args.value is None:
            trace = trace_probe_get(table, args.key)
        else:
            trace = trace_probe_put(table, args.key, args.value)
        validate_trace(trace)
        export_path: Optional[Path] = None
        if args.export_json:
            export_path = Path(args.export_json).expanduser()
            try:
                export_path.parent.mkdir(parents=True, exist_ok=True)
                export_path.write_text(json.dumps(trace, indent=2), encoding="utf-8")
            except OSError as exc:
                raise IOErrorEnvelope(f"Cannot write trace to {export_path}: {exc}") from exc
        if ctx.json_enabled():
            data = {"trace": trace, "seeds": seeds}
            if export_path is not None:
                data["export_json"] = str(export_path)
            ctx.emit_success("probe", data=data)
        else:
            lines = format_trace_lines(trace, seeds=seeds, export_path=export_path)
            ctx.emit_success("probe", text="\n".join(lines))
        return int(Exit.OK)

    return handler


def _configure_verify(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    _add_seed_argument(parser)
    parser.add_argument("--ops", default=None, help="Optional op,key,value CSV to replay first")
    parser.add_argument("--verbose", action="store_true", help="Include table statistics")

    def handler(args: argparse.Namespace) -> int:
        table = ctx.make_table()
        ctx.seed_table(table, args.seed)
        if args.ops:
            ctx.run_ops_csv(table, args.ops)
        ok, messages = verify_table(table, verbose=args.verbose)
        text = "OK" if ok else "FAILED"
        if messages:
            text += "\n" + "\n".join(messages)
        data = {**_table_summary(table), "verified": ok, "messages": messages}
        ctx.emit_success("verify", text=text, data=data)
        return int(Exit.OK if ok else Exit.INVARIANT)

    return handler
