"""Exception hierarchy for the KaTeX rendering service."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


__all__ = [
    "ChannelError",
    "EngineError",
    "KatexError",
    "TypesettingError",
    "exception_hint",
    "exception_messages",
]


class KatexError(RuntimeError):
    """Base exception for KaTeX rendering failures."""


class EngineError(KatexError):
    """Raised when the embedded engine fails or its reply cannot be decoded."""


class ChannelError(KatexError):
    """Raised when a request cannot reach the render worker or its reply is lost."""


class TypesettingError(KatexError):
    """Raised when KaTeX rejects an expression.

    The macro table reflects every definition processed before the failure so
    callers can keep it for the next call.
    """

    def __init__(self, message: str, expression: str, macros: Mapping[str, Any]) -> None:
        self.message = message
        self.expression = expression
        self.macros = dict(macros)
        super().__init__(f"KaTeX error: {message} (math: {expression!r})")


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


def exception_hint(exc: BaseException) -> str | None:
    """Return the most specific message available for an exception chain."""
    messages = exception_messages(exc)
    return messages[-1] if messages else None
