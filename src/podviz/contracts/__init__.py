"""Contract helpers for the podviz CLI."""

from .error import (
    BadInputError,
    EnvelopeError,
    ErrorEnvelope,
    Exit,
    IOErrorEnvelope,
    die,
    guard_cli,
)

__all__ = [
    "BadInputError",
    "EnvelopeError",
    "ErrorEnvelope",
    "Exit",
    "IOErrorEnvelope",
    "die",
    "guard_cli",
]
