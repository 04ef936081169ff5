"""KaTeX hosted in a long-lived Node.js child process.

The child evaluates ``katex.min.js`` and ``bootstrap.js`` once, then answers
one JSON line per request on stdout. Startup cost is amortised with a V8
startup snapshot: ``node --build-snapshot`` serialises the heap after KaTeX
has been evaluated and ``node --snapshot-blob`` restores it.
"""

from __future__ import annotations

import atexit
from collections import deque
from collections.abc import Sequence
import contextlib
import json
import logging
import os
from pathlib import Path
import subprocess
from threading import Thread
from typing import IO

from katex_gdef.config import EngineSettings
from katex_gdef.exceptions import EngineError
from katex_gdef.protocol import RenderRequest, RenderResponse, decode_response
from katex_gdef.version import KATEX_VERSION

from .locator import resolve_katex_bundle, resolve_node


logger = logging.getLogger(__name__)

BOOTSTRAP_PATH = Path(__file__).with_name("bootstrap.js")
BUNDLE_ENV = "KATEX_GDEF_BUNDLE"


class _StderrTail:
    """Drain a child's stderr on a daemon thread, keeping the last lines."""

    def __init__(self, stream: IO[str], *, limit: int = 20) -> None:
        self._lines: deque[str] = deque(maxlen=limit)
        self._thread = Thread(
            target=self._run, args=(stream,), name="katex-node-stderr", daemon=True
        )
        self._thread.start()

    def _run(self, stream: IO[str]) -> None:
        for line in stream:
            text = line.rstrip()
            if text:
                self._lines.append(text)
                logger.debug("node: %s", text)

    def text(self, timeout: float = 1.0) -> str:
        self._thread.join(timeout)
        return "\n".join(self._lines)


def _engine_env(bundle: Path | None) -> dict[str, str]:
    env = dict(os.environ)
    if bundle is not None:
        env[BUNDLE_ENV] = str(bundle)
    return env


def _terminate(process: subprocess.Popen[str]) -> None:
    if process.poll() is not None:
        return
    with contextlib.suppress(OSError):
        if process.stdin is not None:
            process.stdin.close()
    try:
        process.wait(timeout=5)
    except subprocess.TimeoutExpired:
        process.kill()
        process.wait()


class NodeEngine:
    """Engine adapter backed by a ``node`` child process."""

    def __init__(
        self,
        process: subprocess.Popen[str],
        stderr: _StderrTail,
        *,
        version: str | None = None,
    ) -> None:
        self._process = process
        self._stderr = stderr
        self.version = version
        if version and version != KATEX_VERSION:
            logger.warning(
                "KaTeX %s loaded; macro collection is only verified against %s.",
                version,
                KATEX_VERSION,
            )
        atexit.register(self.close)

    @classmethod
    def new(cls, settings: EngineSettings | None = None) -> NodeEngine:
        settings = settings or EngineSettings.from_env()
        node = resolve_node(settings)
        bundle = resolve_katex_bundle(settings, node=node)
        return cls._spawn([node, *settings.node_options, str(BOOTSTRAP_PATH)], bundle=bundle)

    @classmethod
    def new_from_snapshot(
        cls, path: str | Path, settings: EngineSettings | None = None
    ) -> NodeEngine:
        settings = settings or EngineSettings.from_env()
        snapshot = Path(path)
        node = resolve_node(settings)
        restore = [node, *settings.node_options, "--snapshot-blob", str(snapshot)]

        if snapshot.is_file():
            try:
                return cls._spawn(restore, bundle=None)
            except EngineError as exc:
                logger.debug("Snapshot %s could not be restored: %s", snapshot, exc)
            with contextlib.suppress(EngineError):
                write_snapshot(snapshot, settings, node=node)
            return cls.new(settings)

        try:
            write_snapshot(snapshot, settings, node=node)
            return cls._spawn(restore, bundle=None)
        except EngineError as exc:
            logger.debug("Snapshot %s unavailable, starting cold: %s", snapshot, exc)
        return cls.new(settings)

    @classmethod
    def _spawn(cls, argv: Sequence[str], *, bundle: Path | None) -> NodeEngine:
        logger.debug("Starting KaTeX engine: %s", " ".join(argv))
        try:
            process = subprocess.Popen(
                list(argv),
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=_engine_env(bundle),
                text=True,
                bufsize=1,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            raise EngineError(f"Unable to start '{argv[0]}': {exc}") from exc

        assert process.stdout is not None and process.stderr is not None
        stderr = _StderrTail(process.stderr)
        handshake = process.stdout.readline()
        try:
            payload = json.loads(handshake) if handshake else None
        except json.JSONDecodeError:
            payload = None
        if not isinstance(payload, dict) or payload.get("ready") is not True:
            _terminate(process)
            detail = stderr.text() or handshake.strip() or f"exit code {process.returncode}"
            raise EngineError(f"KaTeX engine failed to start: {detail}")
        return cls(process, stderr, version=payload.get("version"))

    def exec(self, request: RenderRequest) -> RenderResponse:
        process = self._process
        assert process.stdin is not None and process.stdout is not None
        line = json.dumps(request.to_payload())
        try:
            process.stdin.write(line + "\n")
            process.stdin.flush()
            reply = process.stdout.readline()
        except (OSError, ValueError) as exc:
            raise EngineError(f"KaTeX engine is unreachable: {exc}") from exc

        if not reply:
            code = process.poll()
            detail = self._stderr.text(timeout=0.2)
            raise EngineError(f"KaTeX engine exited unexpectedly (exit code {code}). {detail}".strip())
        try:
            payload = json.loads(reply)
        except json.JSONDecodeError as exc:
            raise EngineError(f"Undecodable reply from KaTeX engine: {reply[:200]!r}") from exc
        return decode_response(payload)

    @property
    def alive(self) -> bool:
        return self._process.poll() is None

    def close(self) -> None:
        """Stop the child process."""
        _terminate(self._process)
        atexit.unregister(self.close)

    def __enter__(self) -> NodeEngine:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def write_snapshot(
    path: Path, settings: EngineSettings, *, node: str | None = None
) -> Path:
    """Build a V8 startup snapshot holding an initialised KaTeX at ``path``."""
    node = node or resolve_node(settings)
    bundle = resolve_katex_bundle(settings, node=node)
    staging = path.with_name(path.name + ".tmp")
    argv = [
        node,
        *settings.node_options,
        "--snapshot-blob",
        str(staging),
        "--build-snapshot",
        str(BOOTSTRAP_PATH),
    ]
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        result = subprocess.run(
            argv, env=_engine_env(bundle), capture_output=True, text=True, check=False
        )
        if result.returncode != 0 or not staging.is_file():
            detail = result.stderr.strip() or f"exit code {result.returncode}"
            raise EngineError(f"Snapshot build failed: {detail}")
        os.replace(staging, path)
    except OSError as exc:
        raise EngineError(f"Unable to write snapshot '{path}': {exc}") from exc
    finally:
        with contextlib.suppress(OSError):
            staging.unlink(missing_ok=True)
    logger.info("Wrote KaTeX snapshot to %s", path)
    return path


__all__ = ["BOOTSTRAP_PATH", "NodeEngine", "write_snapshot"]
