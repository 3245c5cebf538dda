"""Probe-path analysis helpers."""

from .probe import format_trace_lines, trace_probe_get, trace_probe_put, validate_trace

__all__ = ["trace_probe_get", "trace_probe_put", "format_trace_lines", "validate_trace"]
