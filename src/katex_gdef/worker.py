"""Single-owner worker thread serialising access to one engine instance.

Callers never touch the engine: they enqueue a request together with a
private :class:`~concurrent.futures.Future` and block on it. The worker thread
creates the engine, then drains the queue one request at a time for the rest
of the process lifetime. If the thread dies, every queued and future request
fails with :class:`~katex_gdef.exceptions.ChannelError` instead of hanging.
"""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import Future
import logging
import queue
from threading import Lock, Thread
import time
from typing import TYPE_CHECKING

from .diagnostics import DiagnosticEmitter, NullEmitter
from .exceptions import ChannelError, EngineError
from .protocol import RenderRequest, RenderResponse


if TYPE_CHECKING:
    from .engines import EngineAdapter


logger = logging.getLogger(__name__)

EngineFactory = Callable[[], "EngineAdapter"]

_STOP = object()


class RenderWorker:
    """Own one engine on a dedicated thread and serve queued requests."""

    def __init__(
        self,
        engine_factory: EngineFactory,
        *,
        name: str = "katex-render",
        engine_name: str = "engine",
        emitter: DiagnosticEmitter | None = None,
    ) -> None:
        self._engine_factory = engine_factory
        self._engine_name = engine_name
        self._emitter = emitter or NullEmitter()
        self._queue: queue.SimpleQueue[object] = queue.SimpleQueue()
        self._lock = Lock()
        self._closed = False
        self._failure: BaseException | None = None
        self._thread = Thread(target=self._run, name=name, daemon=True)

    def start(self) -> None:
        self._thread.start()

    @property
    def is_running(self) -> bool:
        return self._thread.is_alive() and not self._closed

    def submit(self, request: RenderRequest) -> Future[RenderResponse]:
        """Enqueue ``request`` and return its reply channel.

        The future is already running when returned, so ``cancel()`` has no
        effect: every accepted request is rendered or failed.
        """
        reply: Future[RenderResponse] = Future()
        reply.set_running_or_notify_cancel()
        with self._lock:
            if self._closed:
                raise self._terminal_error()
            self._queue.put((request, reply))
        return reply

    def call(self, request: RenderRequest) -> RenderResponse:
        """Submit ``request`` and block until its reply arrives."""
        return self.submit(request).result()

    def close(self, timeout: float | None = None) -> None:
        """Ask the worker to stop after the requests already queued."""
        with self._lock:
            if self._closed:
                return
            self._queue.put(_STOP)
        if self._thread.is_alive():
            self._thread.join(timeout)

    def _terminal_error(self) -> ChannelError:
        error = ChannelError("Render worker is not running")
        if self._failure is not None:
            error.__cause__ = self._failure
        return error

    def _run(self) -> None:
        current: Future[RenderResponse] | None = None
        engine: EngineAdapter | None = None
        try:
            started = time.perf_counter()
            try:
                engine = self._engine_factory()
            except BaseException as exc:
                self._emitter.event(
                    "engine_failed", {"engine": self._engine_name, "reason": str(exc)}
                )
                raise
            self._emitter.event(
                "engine_ready",
                {"engine": self._engine_name, "elapsed": time.perf_counter() - started},
            )

            while True:
                item = self._queue.get()
                if item is _STOP:
                    return
                request, current = item  # type: ignore[misc]
                try:
                    response = engine.exec(request)
                except EngineError as exc:
                    current.set_exception(exc)
                except Exception as exc:
                    error = EngineError(f"KaTeX engine raised {type(exc).__name__}: {exc}")
                    error.__cause__ = exc
                    self._emitter.warning(str(error), exc)
                    current.set_exception(error)
                else:
                    current.set_result(response)
                current = None
        except BaseException as exc:
            self._failure = exc
            if engine is None:
                logger.debug("Render worker terminated", exc_info=exc)
            else:
                self._emitter.error("Render worker terminated unexpectedly", exc)
            if not isinstance(exc, Exception):
                raise
        finally:
            self._shutdown(current)

    def _shutdown(self, current: Future[RenderResponse] | None) -> None:
        with self._lock:
            self._closed = True
        pending: list[Future[RenderResponse]] = []
        if current is not None and not current.done():
            pending.append(current)
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                break
            if item is not _STOP:
                pending.append(item[1])  # type: ignore[index]
        for reply in pending:
            if not reply.done():
                reply.set_exception(self._terminal_error())
        self._emitter.event("worker_stopped", {"pending": len(pending)})


__all__ = ["EngineFactory", "RenderWorker"]
