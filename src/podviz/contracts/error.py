"""JSON error envelopes and exit codes for the podviz CLI.

Every failure a user can cause (bad flags, bad env overrides, unreadable
config or units files) leaves the process as one JSON line on stderr plus a
stable exit code. Transport failures never reach here; they only skip a
scrape cycle.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum
from functools import wraps
from typing import Any, ClassVar, NoReturn, TypeVar

T = TypeVar("T")


class Exit(IntEnum):
    OK = 0
    BAD_INPUT = 2
    IO = 5


@dataclass(slots=True)
class ErrorEnvelope:
    error: str
    detail: str
    hint: str | None = None

    def to_json(self) -> str:
        payload = {"error": self.error, "detail": self.detail}
        if self.hint:
            payload["hint"] = self.hint
        return json.dumps(payload, ensure_ascii=False)


def die(code: Exit, kind: str, detail: str, hint: str | None = None) -> NoReturn:
    """Write the envelope for ``kind`` to stderr and exit with ``code``."""

    sys.stderr.write(ErrorEnvelope(error=kind, detail=detail, hint=hint).to_json() + "\n")
    try:
        sys.stderr.flush()
    finally:
        sys.exit(int(code))


class EnvelopeError(Exception):
    """User-facing failure; subclasses pick the envelope label and exit code."""

    kind: ClassVar[str] = "BadInput"
    exit_code: ClassVar[Exit] = Exit.BAD_INPUT

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class BadInputError(EnvelopeError):
    """Malformed flags, env overrides, durations or unit patterns."""


class IOErrorEnvelope(EnvelopeError):  # noqa: N818 - public API name
    """Unreadable config or units file."""

    kind = "IO"
    exit_code = Exit.IO


def guard_cli(fn: Callable[..., T]) -> Callable[..., T]:
    """Turn envelope errors and missing files raised by ``fn`` into ``die`` calls."""

    @wraps(fn)
    def _wrapped(*args: Any, **kwargs: Any) -> T:
        try:
            return fn(*args, **kwargs)
        except EnvelopeError as exc:
            die(exc.exit_code, exc.kind, str(exc), hint=exc.hint)
        except FileNotFoundError as exc:
            die(Exit.IO, "FileNotFound", str(exc))

    return _wrapped


__all__ = [
    "BadInputError",
    "EnvelopeError",
    "ErrorEnvelope",
    "Exit",
    "IOErrorEnvelope",
    "die",
    "guard_cli",
]
