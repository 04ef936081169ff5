from __future__ import annotations

from pathlib import Path

import pytest

from katex_gdef.cache import cache_root, default_snapshot_path
from katex_gdef.version import KATEX_VERSION


def test_cache_root_defaults_to_home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))

    assert cache_root({}) == tmp_path / ".cache" / "katex-gdef"


@pytest.mark.parametrize(
    ("environ", "expected"),
    [
        ({"XDG_CACHE_HOME": "/xdg"}, Path("/xdg/katex-gdef")),
        ({"XDG_CACHE_HOME": "/xdg", "KATEX_GDEF_HOME": "/kg"}, Path("/kg/cache")),
        (
            {"XDG_CACHE_HOME": "/xdg", "KATEX_GDEF_HOME": "/kg", "KATEX_GDEF_CACHE_DIR": "/c"},
            Path("/c"),
        ),
        ({"KATEX_GDEF_CACHE_DIR": ""}, None),
    ],
)
def test_cache_root_lookup_order(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, environ: dict, expected: Path | None
) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))

    assert cache_root(environ) == (expected or tmp_path / ".cache" / "katex-gdef")


def test_default_snapshot_path_is_versioned(tmp_path: Path) -> None:
    path = default_snapshot_path({"KATEX_GDEF_CACHE_DIR": str(tmp_path)})

    assert path == tmp_path / "snapshots" / f"katex-{KATEX_VERSION}.blob"
    assert not path.parent.exists()


def test_default_snapshot_path_reads_process_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("KATEX_GDEF_CACHE_DIR", str(tmp_path))

    assert default_snapshot_path().parent == tmp_path / "snapshots"
