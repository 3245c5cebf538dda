"""hashlab CLI package."""

from .app import configure_logging, console_main, emit_success, main, run_op, run_ops_csv
from .commands import CLIContext, register_subcommands
from .demo import run_demo

__all__ = [
    "CLIContext",
    "configure_logging",
    "console_main",
    "emit_success",
    "main",
    "register_subcommands",
    "run_demo",
    "run_op",
    "run_ops_csv",
]
