"""Script engine adapters hosting the KaTeX bundle.

An adapter is anything that can be created cold (``new``), created from a
persisted snapshot (``new_from_snapshot``) and asked to run one render call
(``exec``). The render worker only ever talks to this protocol, so a different
JavaScript host can be dropped in by passing its class to
:class:`katex_gdef.service.KatexService`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from katex_gdef.config import EngineSettings
from katex_gdef.protocol import RenderRequest, RenderResponse

from .node import NodeEngine


class EngineAdapter(Protocol):
    """Capability interface implemented by every engine."""

    @classmethod
    def new(cls, settings: EngineSettings | None = None) -> EngineAdapter:
        """Start a fresh engine and evaluate the KaTeX bootstrap."""
        ...

    @classmethod
    def new_from_snapshot(
        cls, path: Path, settings: EngineSettings | None = None
    ) -> EngineAdapter:
        """Restore an engine from ``path``, falling back to :meth:`new`."""
        ...

    def exec(self, request: RenderRequest) -> RenderResponse:
        """Render one request; raise ``EngineError`` on engine faults."""
        ...


__all__ = ["EngineAdapter", "NodeEngine"]
