"""Font usage analysis for KaTeX markup."""

from __future__ import annotations

from .extractor import ROOT_CLASS, collect_used_fonts, extract_used_fonts, find_math_root
from .model import FontDescriptor, FontFamily, FontVariant, UsedFontSet, classify
from .rules import CLASS_RULES, derive


__all__ = [
    "CLASS_RULES",
    "ROOT_CLASS",
    "FontDescriptor",
    "FontFamily",
    "FontVariant",
    "UsedFontSet",
    "classify",
    "collect_used_fonts",
    "derive",
    "extract_used_fonts",
    "find_math_root",
]
