"""Request and response records exchanged with the render worker.

A request carries the expression, the KaTeX options and a copy of the caller's
macro table. The reply is either a :class:`RenderSuccess` or a
:class:`RenderFailure`; both carry the macro table as it stands after the
call because ``\\gdef`` side effects survive a parse error.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, TypeAlias

from .config import RenderOptions
from .exceptions import EngineError


@dataclass(frozen=True, slots=True)
class MacroToken:
    """Single token of a KaTeX macro expansion."""

    text: str
    noexpand: bool | None = None
    treat_as_relax: bool | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> MacroToken:
        return cls(
            text=str(payload.get("text", "")),
            noexpand=payload.get("noexpand"),
            treat_as_relax=payload.get("treatAsRelax"),
        )

    def to_payload(self) -> dict[str, Any]:
        data: dict[str, Any] = {"text": self.text}
        if self.noexpand is not None:
            data["noexpand"] = self.noexpand
        if self.treat_as_relax is not None:
            data["treatAsRelax"] = self.treat_as_relax
        return data


@dataclass(frozen=True, slots=True)
class MacroExpansion:
    """Multi-token macro body as KaTeX stores it (tokens in reverse order)."""

    tokens: tuple[MacroToken, ...] = ()
    num_args: int = 0
    delimiters: tuple[tuple[str, ...], ...] = ()

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> MacroExpansion:
        return cls(
            tokens=tuple(MacroToken.from_payload(token) for token in payload.get("tokens") or ()),
            num_args=int(payload.get("numArgs") or 0),
            delimiters=tuple(tuple(group) for group in payload.get("delimiters") or ()),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "tokens": [token.to_payload() for token in self.tokens],
            "numArgs": self.num_args,
            "delimiters": [list(group) for group in self.delimiters],
        }

    def as_text(self) -> str:
        """Return the replacement text, restoring source token order."""
        return "".join(token.text for token in reversed(self.tokens))


MacroValue: TypeAlias = str | MacroExpansion
MacroEnvironment: TypeAlias = dict[str, MacroValue]


def encode_macros(macros: Mapping[str, MacroValue]) -> dict[str, Any]:
    """Return the JSON-shaped macro table sent to KaTeX."""
    return {
        name: value if isinstance(value, str) else value.to_payload()
        for name, value in macros.items()
    }


def decode_macros(payload: Any) -> MacroEnvironment:
    """Parse a macro table returned by the engine."""
    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise EngineError(f"Malformed macro table in engine reply: {payload!r}")
    macros: MacroEnvironment = {}
    for name, value in payload.items():
        if isinstance(value, str):
            macros[str(name)] = value
        elif isinstance(value, Mapping):
            macros[str(name)] = MacroExpansion.from_payload(value)
        else:
            raise EngineError(f"Malformed definition for macro {name!r}: {value!r}")
    return macros


@dataclass(frozen=True, slots=True)
class RenderRequest:
    """One expression to typeset."""

    expression: str
    options: RenderOptions = field(default_factory=RenderOptions)
    macros: MacroEnvironment = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        return {
            "latex": self.expression,
            "options": self.options.to_payload(),
            "macros": encode_macros(self.macros),
        }


@dataclass(frozen=True, slots=True)
class RenderSuccess:
    """KaTeX produced markup."""

    markup: str
    macros: MacroEnvironment


@dataclass(frozen=True, slots=True)
class RenderFailure:
    """KaTeX rejected the expression with a parse error."""

    message: str
    macros: MacroEnvironment


RenderResponse: TypeAlias = RenderSuccess | RenderFailure


def decode_response(payload: Any) -> RenderResponse:
    """Classify a decoded engine reply.

    ``{"html", "macros"}`` is a success, ``{"error", "macros"}`` a parse
    failure and ``{"fault"}`` an engine-side exception. Anything else is a
    malformed reply.
    """
    if not isinstance(payload, Mapping):
        raise EngineError(f"Unexpected engine reply: {payload!r}")
    if "fault" in payload:
        raise EngineError(f"KaTeX engine raised: {payload['fault']}")
    if isinstance(payload.get("html"), str):
        return RenderSuccess(markup=payload["html"], macros=decode_macros(payload.get("macros")))
    if isinstance(payload.get("error"), str):
        return RenderFailure(message=payload["error"], macros=decode_macros(payload.get("macros")))
    raise EngineError(f"Unexpected engine reply: {dict(payload)!r}")


__all__ = [
    "MacroEnvironment",
    "MacroExpansion",
    "MacroToken",
    "MacroValue",
    "RenderFailure",
    "RenderRequest",
    "RenderResponse",
    "RenderSuccess",
    "decode_macros",
    "decode_response",
    "encode_macros",
]
