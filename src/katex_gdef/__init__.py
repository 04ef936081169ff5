"""Render LaTeX with KaTeX from Python and report the fonts it needs.

Architecture
: A single render worker thread owns one engine instance (by default a Node.js
  child process restored from a V8 snapshot) and serves requests in arrival
  order. `KatexService` starts it lazily; the module-level `render` helpers use
  a process-wide default service.
: Macro tables travel with every call. Definitions made with `\\gdef` come back
  in the caller's mapping, including when KaTeX reports a parse error.
: `extract_used_fonts` walks the produced HTML and returns the KaTeX font
  faces that actually carry glyphs, so pages can preload only those.
"""

from __future__ import annotations

from .config import EngineSettings, OutputFormat, RenderOptions
from .diagnostics import DiagnosticEmitter, LoggingEmitter, NullEmitter
from .engines import EngineAdapter, NodeEngine
from .exceptions import ChannelError, EngineError, KatexError, TypesettingError
from .fonts import (
    FontDescriptor,
    FontFamily,
    FontVariant,
    UsedFontSet,
    collect_used_fonts,
    extract_used_fonts,
)
from .protocol import (
    MacroEnvironment,
    MacroExpansion,
    MacroToken,
    RenderFailure,
    RenderRequest,
    RenderResponse,
    RenderSuccess,
)
from .service import KatexService, get_service, render, render_with_options, set_cache
from .cache import default_snapshot_path
from .version import KATEX_VERSION, get_version
from .worker import RenderWorker


__version__ = get_version()

__all__ = [
    "KATEX_VERSION",
    "ChannelError",
    "DiagnosticEmitter",
    "EngineAdapter",
    "EngineError",
    "EngineSettings",
    "FontDescriptor",
    "FontFamily",
    "FontVariant",
    "KatexError",
    "KatexService",
    "LoggingEmitter",
    "MacroEnvironment",
    "MacroExpansion",
    "MacroToken",
    "NodeEngine",
    "NullEmitter",
    "OutputFormat",
    "RenderFailure",
    "RenderOptions",
    "RenderRequest",
    "RenderResponse",
    "RenderSuccess",
    "RenderWorker",
    "TypesettingError",
    "UsedFontSet",
    "__version__",
    "collect_used_fonts",
    "default_snapshot_path",
    "extract_used_fonts",
    "get_service",
    "render",
    "render_with_options",
    "set_cache",
]
