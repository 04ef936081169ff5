"""Package version helpers."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as _pkg_version


# Release whose macro internals the bootstrap script flattens.
KATEX_VERSION = "0.16.21"


def get_version() -> str:
    """Return the installed katex-gdef version."""
    try:
        return _pkg_version("katex-gdef")
    except PackageNotFoundError:
        return "0.0.0"


__all__ = ["KATEX_VERSION", "get_version"]
