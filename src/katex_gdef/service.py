r"""Public render API backed by a lazily started render worker.

:class:`KatexService` is the explicit service handle: the first render call
(or :meth:`KatexService.ensure_started`) creates the worker exactly once, even
when several threads race for it. Module-level helpers delegate to a
process-wide default service for callers that do not want to manage one.

Usage Example
:
    from katex_gdef import render_with_options

    macros = {}
    render_with_options(r"\gdef\R{\mathbb{R}} x \in \R", macros=macros)
    render_with_options(r"y \in \R", macros=macros)  # reuses \R
"""

from __future__ import annotations

from collections.abc import MutableMapping
import logging
from pathlib import Path
from threading import Lock

from .config import EngineSettings, RenderOptions
from .diagnostics import DiagnosticEmitter, LoggingEmitter
from .engines import EngineAdapter, NodeEngine
from .exceptions import TypesettingError
from .protocol import MacroValue, RenderFailure, RenderRequest
from .cache import default_snapshot_path
from .worker import RenderWorker


logger = logging.getLogger(__name__)


class KatexService:
    """Handle owning at most one render worker."""

    def __init__(
        self,
        engine: type[EngineAdapter] = NodeEngine,
        *,
        settings: EngineSettings | None = None,
        cache_path: str | Path | None = None,
        emitter: DiagnosticEmitter | None = None,
    ) -> None:
        self._engine = engine
        self._settings = settings
        self._cache_path = Path(cache_path) if cache_path is not None else None
        self._emitter = emitter or LoggingEmitter(logger_obj=logger)
        self._lock = Lock()
        self._worker: RenderWorker | None = None

    @property
    def is_started(self) -> bool:
        return self._worker is not None

    @property
    def cache_path(self) -> Path | None:
        return self._cache_path

    def configure_cache(self, path: str | Path | None = None) -> None:
        """Persist engine snapshots at ``path`` (default location when omitted).

        Only effective before the worker starts; later calls are ignored.
        """
        with self._lock:
            if self._worker is not None:
                logger.debug("Render worker already running; ignoring cache path %s", path)
                return
            self._cache_path = Path(path) if path is not None else default_snapshot_path()

    def ensure_started(self) -> RenderWorker:
        """Return the render worker, starting it on first use."""
        worker = self._worker
        if worker is not None:
            return worker
        with self._lock:
            if self._worker is None:
                worker = RenderWorker(
                    self._create_engine,
                    engine_name=self._engine.__name__,
                    emitter=self._emitter,
                )
                worker.start()
                self._worker = worker
            return self._worker

    def _create_engine(self) -> EngineAdapter:
        # Runs on the worker thread.
        if self._cache_path is not None:
            return self._engine.new_from_snapshot(self._cache_path, settings=self._settings)
        return self._engine.new(settings=self._settings)

    def render(self, expression: str) -> str:
        """Render ``expression`` with default options and no macros."""
        return self.render_with_options(expression, RenderOptions(), {})

    def render_with_options(
        self,
        expression: str,
        options: RenderOptions | None = None,
        macros: MutableMapping[str, MacroValue] | None = None,
    ) -> str:
        """Render ``expression`` and update ``macros`` in place.

        ``macros`` is replaced by the engine's table on success and on
        ``TypesettingError``; it is left untouched when the engine itself
        fails.
        """
        if macros is None:
            macros = {}
        request = RenderRequest(
            expression=expression,
            options=options or RenderOptions(),
            macros=dict(macros),
        )
        response = self.ensure_started().call(request)
        macros.clear()
        macros.update(response.macros)
        if isinstance(response, RenderFailure):
            raise TypesettingError(response.message, expression, response.macros)
        return response.markup


_DEFAULT_SERVICE = KatexService()


def get_service() -> KatexService:
    """Return the process-wide default service."""
    return _DEFAULT_SERVICE


def set_cache(path: str | Path | None = None) -> None:
    """Configure the snapshot path of the default service before first use."""
    _DEFAULT_SERVICE.configure_cache(path)


def render(expression: str) -> str:
    """Render ``expression`` with the default service."""
    return _DEFAULT_SERVICE.render(expression)


def render_with_options(
    expression: str,
    options: RenderOptions | None = None,
    macros: MutableMapping[str, MacroValue] | None = None,
) -> str:
    """Render ``expression`` with the default service, threading ``macros``."""
    return _DEFAULT_SERVICE.render_with_options(expression, options, macros)


__all__ = [
    "KatexService",
    "get_service",
    "render",
    "render_with_options",
    "set_cache",
]
