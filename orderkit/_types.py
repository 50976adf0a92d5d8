"""
Core types for orderkit.

Re-exports from kungfu + custom type aliases.
"""

from __future__ import annotations

from typing import Any

# Re-export from kungfu
from kungfu import Result, Ok, Error, Option, Some, Nothing, LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Lazy Computation Aliases
# ═══════════════════════════════════════════════════════════════════════════════

type Lazy[T, E] = LazyCoroResult[T, E]
"""Deferred async operation that may fail with E."""

# ═══════════════════════════════════════════════════════════════════════════════
# Wire Payloads
# ═══════════════════════════════════════════════════════════════════════════════

type Payload = dict[str, Any] | list[Any]
"""Parsed JSON body, as sent or received by the API."""

type FieldErrors = dict[str, list[str]]
"""Field-keyed validation errors, one entry per invalid field."""


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    "Option",
    "Some",
    "Nothing",
    "LazyCoroResult",
    # Type aliases
    "Lazy",
    "Payload",
    "FieldErrors",
)
