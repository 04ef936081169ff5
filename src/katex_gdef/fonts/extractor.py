"""Find which KaTeX font faces a rendered fragment needs.

The walk starts at the first ``span.katex-html`` and keeps an explicit stack
of ``(descriptor, children)`` frames: entering a ``<span>`` pushes the
descriptor derived from its classes, exhausting an element's children pops
its frame, and every text node that is not blank marks the faces of the
descriptor on top of the stack. Only the first math block of the fragment is
inspected; use :func:`collect_used_fonts` for several fragments.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PageElement, PreformattedString, Tag

from .model import FontDescriptor, UsedFontSet
from .rules import derive


ROOT_CLASS = "katex-html"
# KaTeX renders explicit spaces as no-break spaces that still need a face.
_BLANK = " \t\n\r\f"


def _class_tokens(tag: Tag) -> list[str]:
    value = tag.get("class")
    if isinstance(value, str):
        return value.split()
    if isinstance(value, list):
        return [token for token in value if isinstance(token, str) and token]
    return []


def _is_text(node: PageElement) -> bool:
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def find_math_root(soup: BeautifulSoup) -> Tag | None:
    """Return the first ``<span>`` carrying the ``katex-html`` class."""
    for span in soup.find_all("span"):
        if ROOT_CLASS in _class_tokens(span):
            return span
    return None


def extract_used_fonts(markup: str) -> UsedFontSet:
    """Return the font faces used by the first KaTeX block in ``markup``."""
    used = UsedFontSet()
    root = find_math_root(BeautifulSoup(markup, "html.parser"))
    if root is None:
        return used

    stack: list[tuple[FontDescriptor, Iterator[PageElement]]] = [
        (FontDescriptor(), iter(root.children))
    ]
    while stack:
        descriptor, children = stack[-1]
        node = next(children, None)
        if node is None:
            stack.pop()
            continue
        if isinstance(node, Tag):
            if node.name == "span":
                stack.append((derive(descriptor, _class_tokens(node)), iter(node.children)))
            else:
                stack.append((descriptor, iter(node.children)))
        elif _is_text(node) and node.strip(_BLANK):
            used.mark(descriptor)
    return used


def collect_used_fonts(fragments: Iterable[str]) -> UsedFontSet:
    """Merge the font faces used by each fragment."""
    used = UsedFontSet()
    for fragment in fragments:
        used.merge(extract_used_fonts(fragment))
    return used


__all__ = ["ROOT_CLASS", "collect_used_fonts", "extract_used_fonts", "find_math_root"]
