"""Error taxonomy, JSON error envelope and exit codes for the hashlab CLI."""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import IntEnum
from functools import wraps
from typing import Any, ClassVar, NoReturn, TypeVar

logger = logging.getLogger(__name__)
T = TypeVar("T")


class Exit(IntEnum):
    """Stable exit codes shared across the CLI."""

    OK = 0
    BAD_INPUT = 2
    INVARIANT = 3
    INTERNAL = 4
    IO = 5


@dataclass(slots=True)
class ErrorEnvelope:
    """Machine-readable error written to stderr when a command fails."""

    error: str
    detail: str
    hint: str | None = None
    violations: list[str] = field(default_factory=list)

    def to_json(self) -> str:
        payload: dict[str, Any] = {"error": self.error, "detail": self.detail}
        if self.hint:
            payload["hint"] = self.hint
        if self.violations:
            payload["violations"] = list(self.violations)
        return json.dumps(payload, ensure_ascii=False)


def die(envelope: ErrorEnvelope, code: Exit) -> NoReturn:
    """Write ``envelope`` to stderr and exit with ``code``."""

    sys.stderr.write(envelope.to_json() + "\n")
    try:
        sys.stderr.flush()
    finally:
        sys.exit(int(code))


class EnvelopeError(Exception):
    """Base for failures the CLI reports as an envelope instead of a traceback."""

    exit_code: ClassVar[Exit] = Exit.INTERNAL
    label: ClassVar[str] = "Error"

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint

    def envelope(self) -> ErrorEnvelope:
        return ErrorEnvelope(error=self.label, detail=str(self), hint=self.hint)


class BadInputError(EnvelopeError):
    """Malformed user input: op files, config values, flags."""

    exit_code = Exit.BAD_INPUT
    label = "BadInput"


class InvariantError(EnvelopeError):
    """A table's structural invariant does not hold.

    ``violations`` carries the individual findings of an invariant check so the
    envelope can list them one by one.
    """

    exit_code = Exit.INVARIANT
    label = "Invariant"

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        violations: Iterable[str] = (),
    ) -> None:
        super().__init__(message, hint=hint)
        self.violations = list(violations)

    @classmethod
    def from_violations(cls, backend: str, violations: Iterable[str]) -> InvariantError:
        found = list(violations)
        return cls(
            f"{backend} table failed {len(found)} invariant check(s)",
            hint="Run `hashlab verify --verbose` with the same input for table statistics",
            violations=found,
        )

    def envelope(self) -> ErrorEnvelope:
        env = super().envelope()
        env.violations = list(self.violations)
        return env


class IOErrorEnvelope(EnvelopeError):  # noqa: N818
    """File access failures that map to Exit.IO."""

    exit_code = Exit.IO
    label = "IO"


def guard_cli(fn: Callable[..., T]) -> Callable[..., T]:
    """Wrap a CLI handler so failures become envelopes with stable exit codes.

    ``ValueError`` comes from table argument checks (``None`` keys, capacity
    below the backend minimum) and is reported as bad input.
    """

    @wraps(fn)
    def _wrapped(*args: Any, **kwargs: Any) -> T:
        try:
            return fn(*args, **kwargs)
        except EnvelopeError as exc:
            die(exc.envelope(), exc.exit_code)
        except ValueError as exc:
            die(ErrorEnvelope("BadInput", str(exc)), Exit.BAD_INPUT)
        except FileNotFoundError as exc:
            die(ErrorEnvelope("FileNotFound", str(exc)), Exit.IO)
        except Exception as exc:  # pragma: no cover
            logger.exception("Unhandled CLI exception")
            die(ErrorEnvelope("Unhandled", f"{type(exc).__name__}: {exc}"), Exit.INTERNAL)

    return _wrapped


__all__ = [
    "Exit",
    "ErrorEnvelope",
    "EnvelopeError",
    "BadInputError",
    "InvariantError",
    "IOErrorEnvelope",
    "guard_cli",
    "die",
]
