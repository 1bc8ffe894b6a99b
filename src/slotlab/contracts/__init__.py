"""Contract helpers for the SlotLab CLI."""

from .error import (
    BadInputError,
    EnvelopeError,
    ErrorEnvelope,
    Exit,
    IOErrorEnvelope,
    PolicyError,
    TableFullError,
    die,
    guard_cli,
)

__all__ = [
    "Exit",
    "ErrorEnvelope",
    "EnvelopeError",
    "BadInputError",
    "PolicyError",
    "IOErrorEnvelope",
    "TableFullError",
    "guard_cli",
    "die",
]
