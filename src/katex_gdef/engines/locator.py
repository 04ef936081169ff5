"""Locate the Node.js executable and the KaTeX bundle."""

from __future__ import annotations

import logging
from pathlib import Path
import shutil
import subprocess

from katex_gdef.config import EngineSettings
from katex_gdef.exceptions import EngineError
from katex_gdef.version import KATEX_VERSION


logger = logging.getLogger(__name__)

BUNDLE_MODULE = "katex/dist/katex.min.js"
_NODE_HINT = "Install Node.js 20 or newer, or point KATEX_GDEF_NODE at the executable."
_BUNDLE_HINT = (
    f"Install it with `npm install katex@{KATEX_VERSION}` or point KATEX_GDEF_BUNDLE "
    "at katex.min.js."
)


def resolve_node(settings: EngineSettings) -> str:
    """Return an absolute path to the Node.js executable."""
    resolved = shutil.which(settings.node)
    if resolved is None:
        raise EngineError(f"Node.js executable '{settings.node}' was not found. {_NODE_HINT}")
    return resolved


def resolve_katex_bundle(settings: EngineSettings, *, node: str) -> Path:
    """Return the path of ``katex.min.js``."""
    if settings.katex_bundle is not None:
        bundle = settings.katex_bundle
        if not bundle.is_file():
            raise EngineError(f"KaTeX bundle '{bundle}' does not exist. {_BUNDLE_HINT}")
        return bundle

    try:
        result = subprocess.run(
            [node, "-p", f"require.resolve({BUNDLE_MODULE!r})"],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        raise EngineError(f"Unable to run '{node}': {exc}") from exc

    candidate = result.stdout.strip()
    if result.returncode != 0 or not candidate:
        logger.debug("require.resolve(%s) failed: %s", BUNDLE_MODULE, result.stderr.strip())
        raise EngineError(f"KaTeX bundle could not be resolved by Node.js. {_BUNDLE_HINT}")
    bundle = Path(candidate)
    logger.debug("Resolved KaTeX bundle at %s", bundle)
    return bundle


__all__ = ["BUNDLE_MODULE", "resolve_katex_bundle", "resolve_node"]
