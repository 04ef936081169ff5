"""Where katex-gdef keeps engine snapshots.

The cache root is looked up in order from ``KATEX_GDEF_CACHE_DIR``,
``KATEX_GDEF_HOME/cache``, ``XDG_CACHE_HOME/katex-gdef`` and finally
``~/.cache/katex-gdef``. Nothing is created until a snapshot is written.
"""

from __future__ import annotations

from collections.abc import Mapping
import os
from pathlib import Path

from .version import KATEX_VERSION


CACHE_ENV = "KATEX_GDEF_CACHE_DIR"
HOME_ENV = "KATEX_GDEF_HOME"


def cache_root(environ: Mapping[str, str] | None = None) -> Path:
    """Return the katex-gdef cache directory for ``environ`` (default ``os.environ``)."""
    env = os.environ if environ is None else environ
    if env.get(CACHE_ENV):
        return Path(env[CACHE_ENV]).expanduser()
    if env.get(HOME_ENV):
        return Path(env[HOME_ENV]).expanduser() / "cache"
    if env.get("XDG_CACHE_HOME"):
        return Path(env["XDG_CACHE_HOME"]).expanduser() / "katex-gdef"
    return Path.home() / ".cache" / "katex-gdef"


def default_snapshot_path(environ: Mapping[str, str] | None = None) -> Path:
    """Return the snapshot location used when no explicit cache path is given."""
    return cache_root(environ) / "snapshots" / f"katex-{KATEX_VERSION}.blob"


__all__ = ["cache_root", "default_snapshot_path"]
