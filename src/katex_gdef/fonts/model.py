"""Font descriptors and the set of KaTeX font variants used by a fragment."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum


class FontFamily(Enum):
    """KaTeX font families."""

    AMS = "AMS"
    CALIGRAPHIC = "Caligraphic"
    FRAKTUR = "Fraktur"
    MAIN = "Main"
    MATH = "Math"
    SANS_SERIF = "SansSerif"
    SCRIPT = "Script"
    SIZE1 = "Size1"
    SIZE2 = "Size2"
    SIZE3 = "Size3"
    SIZE4 = "Size4"
    TYPEWRITER = "Typewriter"


class FontVariant(Enum):
    """The twenty font faces shipped with KaTeX, in drain order."""

    AMS_REGULAR = "KaTeX_AMS-Regular"
    CALIGRAPHIC_BOLD = "KaTeX_Caligraphic-Bold"
    CALIGRAPHIC_REGULAR = "KaTeX_Caligraphic-Regular"
    FRAKTUR_BOLD = "KaTeX_Fraktur-Bold"
    FRAKTUR_REGULAR = "KaTeX_Fraktur-Regular"
    MAIN_BOLD = "KaTeX_Main-Bold"
    MAIN_BOLD_ITALIC = "KaTeX_Main-BoldItalic"
    MAIN_ITALIC = "KaTeX_Main-Italic"
    MAIN_REGULAR = "KaTeX_Main-Regular"
    MATH_BOLD_ITALIC = "KaTeX_Math-BoldItalic"
    MATH_ITALIC = "KaTeX_Math-Italic"
    SANS_SERIF_BOLD = "KaTeX_SansSerif-Bold"
    SANS_SERIF_ITALIC = "KaTeX_SansSerif-Italic"
    SANS_SERIF_REGULAR = "KaTeX_SansSerif-Regular"
    SCRIPT_REGULAR = "KaTeX_Script-Regular"
    SIZE1_REGULAR = "KaTeX_Size1-Regular"
    SIZE2_REGULAR = "KaTeX_Size2-Regular"
    SIZE3_REGULAR = "KaTeX_Size3-Regular"
    SIZE4_REGULAR = "KaTeX_Size4-Regular"
    TYPEWRITER_REGULAR = "KaTeX_Typewriter-Regular"

    @property
    def bit(self) -> int:
        return 1 << _VARIANT_INDEX[self]


_VARIANTS: tuple[FontVariant, ...] = tuple(FontVariant)
_VARIANT_INDEX: dict[FontVariant, int] = {variant: index for index, variant in enumerate(_VARIANTS)}


@dataclass(frozen=True, slots=True)
class FontDescriptor:
    """Font in effect for one element.

    ``delimsizing_mult`` records that the element or one of its ancestors
    carried both ``delimsizing`` and ``mult``.
    """

    family: FontFamily = FontFamily.MAIN
    bold: bool = False
    italic: bool = False
    delimsizing_mult: bool = False


_SINGLE_VARIANT: dict[FontFamily, FontVariant] = {
    FontFamily.AMS: FontVariant.AMS_REGULAR,
    FontFamily.SCRIPT: FontVariant.SCRIPT_REGULAR,
    FontFamily.SIZE1: FontVariant.SIZE1_REGULAR,
    FontFamily.SIZE2: FontVariant.SIZE2_REGULAR,
    FontFamily.SIZE3: FontVariant.SIZE3_REGULAR,
    FontFamily.SIZE4: FontVariant.SIZE4_REGULAR,
    FontFamily.TYPEWRITER: FontVariant.TYPEWRITER_REGULAR,
}

_MAIN_VARIANTS: dict[tuple[bool, bool], FontVariant] = {
    (False, False): FontVariant.MAIN_REGULAR,
    (True, False): FontVariant.MAIN_BOLD,
    (False, True): FontVariant.MAIN_ITALIC,
    (True, True): FontVariant.MAIN_BOLD_ITALIC,
}


def classify(descriptor: FontDescriptor) -> tuple[FontVariant, ...]:
    """Return the font faces needed to draw text under ``descriptor``.

    Every descriptor maps to one face except bold italic sans-serif: KaTeX has
    no combined face for it, so both the bold and the italic faces count.
    """
    family = descriptor.family
    if family in _SINGLE_VARIANT:
        return (_SINGLE_VARIANT[family],)
    if family is FontFamily.CALIGRAPHIC:
        return (
            FontVariant.CALIGRAPHIC_BOLD if descriptor.bold else FontVariant.CALIGRAPHIC_REGULAR,
        )
    if family is FontFamily.FRAKTUR:
        return (FontVariant.FRAKTUR_BOLD if descriptor.bold else FontVariant.FRAKTUR_REGULAR,)
    if family is FontFamily.MATH:
        return (FontVariant.MATH_BOLD_ITALIC if descriptor.bold else FontVariant.MATH_ITALIC,)
    if family is FontFamily.SANS_SERIF:
        if descriptor.bold and descriptor.italic:
            return (FontVariant.SANS_SERIF_BOLD, FontVariant.SANS_SERIF_ITALIC)
        if descriptor.bold:
            return (FontVariant.SANS_SERIF_BOLD,)
        if descriptor.italic:
            return (FontVariant.SANS_SERIF_ITALIC,)
        return (FontVariant.SANS_SERIF_REGULAR,)
    return (_MAIN_VARIANTS[descriptor.bold, descriptor.italic],)


class UsedFontSet:
    """Set of KaTeX font faces stored as a bitset over :class:`FontVariant`."""

    __slots__ = ("_bits",)

    def __init__(self, variants: Iterable[FontVariant] = ()) -> None:
        self._bits = 0
        for variant in variants:
            self.add(variant)

    def add(self, variant: FontVariant) -> None:
        self._bits |= variant.bit

    def mark(self, descriptor: FontDescriptor) -> None:
        """Record the faces needed by text drawn under ``descriptor``."""
        for variant in classify(descriptor):
            self._bits |= variant.bit

    def merge(self, other: UsedFontSet) -> None:
        """Add every member of ``other`` to this set."""
        self._bits |= other._bits

    def is_empty(self) -> bool:
        return self._bits == 0

    def drain(self) -> Iterator[str]:
        """Yield each member's font name in variant order, removing it."""
        for variant in _VARIANTS:
            if self._bits & variant.bit:
                self._bits &= ~variant.bit
                yield variant.value

    def names(self) -> list[str]:
        return [variant.value for variant in self]

    def __contains__(self, item: object) -> bool:
        if isinstance(item, str):
            try:
                item = FontVariant(item)
            except ValueError:
                return False
        return isinstance(item, FontVariant) and bool(self._bits & item.bit)

    def __iter__(self) -> Iterator[FontVariant]:
        return (variant for variant in _VARIANTS if self._bits & variant.bit)

    def __len__(self) -> int:
        return bin(self._bits).count("1")

    def __bool__(self) -> bool:
        return self._bits != 0

    def __or__(self, other: UsedFontSet) -> UsedFontSet:
        if not isinstance(other, UsedFontSet):
            return NotImplemented
        merged = UsedFontSet()
        merged._bits = self._bits | other._bits
        return merged

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UsedFontSet):
            return NotImplemented
        return self._bits == other._bits

    def __repr__(self) -> str:
        return f"UsedFontSet({self.names()!r})"


__all__ = ["FontDescriptor", "FontFamily", "FontVariant", "UsedFontSet", "classify"]
