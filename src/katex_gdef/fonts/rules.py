"""Class-to-font rules mirroring the selectors of ``katex.css``.

Each class token of a ``<span>`` may change the family, weight or slant
inherited from the parent element. Tokens are applied in document order, so a
later token overrides an earlier one. Some size tokens only apply in context:

* ``size1`` .. ``size4`` on a ``delimsizing`` element;
* ``delim-size1`` / ``delim-size4`` under a ``delimsizing mult`` element;
* ``small-op`` / ``large-op`` on an ``op-symbol`` element.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .model import FontDescriptor, FontFamily


DELIMSIZING = "delimsizing"
MULT = "mult"
OP_SYMBOL = "op-symbol"

_F = FontFamily

CLASS_RULES: dict[str, dict[str, Any]] = {
    "textbf": {"bold": True},
    "textit": {"italic": True},
    "textrm": {"family": _F.MAIN},
    "mathsf": {"family": _F.SANS_SERIF},
    "textsf": {"family": _F.SANS_SERIF},
    "texttt": {"family": _F.TYPEWRITER},
    "mathnormal": {"family": _F.MATH, "italic": True},
    "mathit": {"family": _F.MAIN, "italic": True},
    "mathrm": {"italic": False},
    "mathbf": {"family": _F.MAIN, "bold": True},
    "boldsymbol": {"family": _F.MATH, "bold": True, "italic": True},
    "amsrm": {"family": _F.AMS},
    "mathbb": {"family": _F.AMS},
    "textbb": {"family": _F.AMS},
    "mathcal": {"family": _F.CALIGRAPHIC},
    "mathfrak": {"family": _F.FRAKTUR},
    "textfrak": {"family": _F.FRAKTUR},
    "mathboldfrak": {"family": _F.FRAKTUR, "bold": True},
    "textboldfrak": {"family": _F.FRAKTUR, "bold": True},
    "mathtt": {"family": _F.TYPEWRITER},
    "mathscr": {"family": _F.SCRIPT},
    "mathboldsf": {"family": _F.SANS_SERIF, "bold": True},
    "textboldsf": {"family": _F.SANS_SERIF, "bold": True},
    "mathsfit": {"family": _F.SANS_SERIF, "italic": True},
    "mathitsf": {"family": _F.SANS_SERIF, "italic": True},
    "textitsf": {"family": _F.SANS_SERIF, "italic": True},
    "mainrm": {"family": _F.MAIN, "italic": False},
}

DELIMSIZING_SIZES: dict[str, FontFamily] = {
    "size1": _F.SIZE1,
    "size2": _F.SIZE2,
    "size3": _F.SIZE3,
    "size4": _F.SIZE4,
}

MULT_SIZES: dict[str, FontFamily] = {
    "delim-size1": _F.SIZE1,
    "delim-size4": _F.SIZE4,
}

OP_SIZES: dict[str, FontFamily] = {
    "small-op": _F.SIZE1,
    "large-op": _F.SIZE2,
}


def derive(parent: FontDescriptor, classes: Iterable[str]) -> FontDescriptor:
    """Return the descriptor of a child ``<span>`` carrying ``classes``."""
    tokens = list(classes)
    token_set = set(tokens)
    delimsizing = DELIMSIZING in token_set
    op_symbol = OP_SYMBOL in token_set

    fields: dict[str, Any] = {
        "family": parent.family,
        "bold": parent.bold,
        "italic": parent.italic,
        "delimsizing_mult": parent.delimsizing_mult or (delimsizing and MULT in token_set),
    }
    for token in tokens:
        if token in CLASS_RULES:
            fields.update(CLASS_RULES[token])
        elif delimsizing and token in DELIMSIZING_SIZES:
            fields["family"] = DELIMSIZING_SIZES[token]
        elif fields["delimsizing_mult"] and token in MULT_SIZES:
            fields["family"] = MULT_SIZES[token]
        elif op_symbol and token in OP_SIZES:
            fields["family"] = OP_SIZES[token]
    return FontDescriptor(**fields)


__all__ = [
    "CLASS_RULES",
    "DELIMSIZING_SIZES",
    "MULT_SIZES",
    "OP_SIZES",
    "derive",
]
