from __future__ import annotations

from pathlib import Path
from threading import Barrier, Thread

import pytest

from katex_gdef import service as service_mod
from katex_gdef.config import EngineSettings, RenderOptions
from katex_gdef.exceptions import EngineError, TypesettingError
from katex_gdef.service import KatexService


def test_render_starts_worker_lazily(fake_engine) -> None:
    service = KatexService(fake_engine)
    assert not service.is_started
    assert fake_engine.starts == []

    assert service.render("E = mc^2") == '<span class="katex">E = mc^2</span>'
    assert service.is_started
    assert fake_engine.starts == ["cold"]
    assert service.ensure_started() is service.ensure_started()


def test_macros_are_threaded_through_calls(fake_engine) -> None:
    service = KatexService(fake_engine)
    macros: dict = {}

    service.render_with_options(r"\gdef\R{\mathbb R} x", RenderOptions(), macros)
    assert macros == {"\\R": "\\mathbb R"}

    html = service.render_with_options(r"y \in \R", RenderOptions(), macros)
    assert "\\mathbb R" in html
    assert macros == {"\\R": "\\mathbb R"}


def test_request_receives_a_copy_of_the_macros(fake_engine) -> None:
    service = KatexService(fake_engine)
    macros = {"\\a": "b"}

    service.render_with_options("x", macros=macros)

    sent = fake_engine.requests[0].macros
    assert sent == {"\\a": "b"}
    assert sent is not macros


def test_parse_error_keeps_macros_defined_before_failure(fake_engine) -> None:
    service = KatexService(fake_engine)
    macros = {"\\old": "o"}

    with pytest.raises(TypesettingError) as excinfo:
        service.render_with_options(r"\gdef\new{n} \undefined", macros=macros)

    error = excinfo.value
    assert error.expression == r"\gdef\new{n} \undefined"
    assert error.message.startswith("Undefined control sequence")
    assert error.macros == {"\\old": "o", "\\new": "n"}
    assert macros == {"\\old": "o", "\\new": "n"}


def test_engine_error_leaves_macros_untouched(fake_engine) -> None:
    service = KatexService(fake_engine)
    macros = {"\\keep": "k"}

    with pytest.raises(EngineError):
        service.render_with_options(r"\gdef\lost{l} \crash", macros=macros)

    assert macros == {"\\keep": "k"}


def test_options_are_forwarded(fake_engine) -> None:
    service = KatexService(fake_engine)
    options = RenderOptions(display_mode=True)

    service.render_with_options("x", options)

    assert fake_engine.requests[0].options is options


def test_settings_reach_the_engine(fake_engine) -> None:
    settings = EngineSettings(node="/usr/local/bin/node")
    service = KatexService(fake_engine, settings=settings)

    service.render("x")

    assert fake_engine.settings == [settings]


def test_cache_path_must_be_set_before_first_render(fake_engine, tmp_path: Path) -> None:
    service = KatexService(fake_engine)
    snapshot = tmp_path / "snap.blob"
    service.configure_cache(snapshot)

    service.render("x")
    service.configure_cache(tmp_path / "ignored.blob")

    assert fake_engine.starts == ["snapshot"]
    assert fake_engine.snapshot_writes == [snapshot]
    assert service.cache_path == snapshot
    assert not (tmp_path / "ignored.blob").exists()


def test_default_cache_path_lives_under_cache_root(
    monkeypatch: pytest.MonkeyPatch, fake_engine, tmp_path: Path
) -> None:
    monkeypatch.setenv("KATEX_GDEF_CACHE_DIR", str(tmp_path / "cache"))
    service = KatexService(fake_engine)
    service.configure_cache()
    service.render("x")

    assert service.cache_path is not None
    assert service.cache_path.parent == tmp_path / "cache" / "snapshots"
    assert fake_engine.snapshot_writes == [service.cache_path]


def test_concurrent_first_calls_start_one_worker(fake_engine, tmp_path: Path) -> None:
    service = KatexService(fake_engine, cache_path=tmp_path / "snap.blob")
    callers = 16
    barrier = Barrier(callers)
    results: list[str] = []

    def call(index: int) -> None:
        barrier.wait()
        results.append(service.render(f"x_{index}"))

    threads = [Thread(target=call, args=(index,)) for index in range(callers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(10)

    assert len(results) == callers
    assert fake_engine.starts == ["snapshot"]
    assert fake_engine.snapshot_writes == [tmp_path / "snap.blob"]


def test_module_helpers_use_default_service(monkeypatch, fake_engine, tmp_path: Path) -> None:
    default = KatexService(fake_engine)
    monkeypatch.setattr(service_mod, "_DEFAULT_SERVICE", default)

    service_mod.set_cache(tmp_path / "default.blob")
    macros: dict = {}
    service_mod.render_with_options(r"\gdef\v{w} v", macros=macros)

    assert service_mod.get_service() is default
    assert service_mod.render("q") == '<span class="katex">q</span>'
    assert macros == {"\\v": "w"}
    assert fake_engine.starts == ["snapshot"]
