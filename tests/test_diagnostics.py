from __future__ import annotations

import logging

import pytest

from katex_gdef.diagnostics import (
    DiagnosticEmitter,
    LoggingEmitter,
    NullEmitter,
    format_event_message,
)


def test_emitters_satisfy_protocol() -> None:
    assert isinstance(NullEmitter(), DiagnosticEmitter)
    assert isinstance(LoggingEmitter(), DiagnosticEmitter)


@pytest.mark.parametrize(
    ("name", "payload", "expected"),
    [
        ("engine_ready", {"engine": "NodeEngine", "elapsed": 0.1234}, "KaTeX engine NodeEngine ready in 0.12s"),
        ("engine_ready", {}, "KaTeX engine <unknown> ready"),
        (
            "engine_failed",
            {"engine": "NodeEngine", "reason": "node not found"},
            "KaTeX engine NodeEngine failed to start: node not found",
        ),
        ("worker_stopped", {"pending": 2}, "Render worker stopped (2 pending request(s) failed)"),
        ("something_else", {"x": 1}, None),
    ],
)
def test_format_event_message(name: str, payload: dict, expected: str | None) -> None:
    assert format_event_message(name, payload) == expected


def test_logging_emitter_routes_levels(caplog: pytest.LogCaptureFixture) -> None:
    log = logging.getLogger("katex_gdef.tests")
    emitter = LoggingEmitter(logger_obj=log)

    with caplog.at_level(logging.DEBUG, logger="katex_gdef.tests"):
        emitter.event("engine_ready", {"engine": "NodeEngine"})
        emitter.event("custom", {"k": "v"})
        emitter.warning("careful")
        emitter.error("broken", RuntimeError("cause"))

    levels = [(record.levelno, record.getMessage()) for record in caplog.records]
    assert levels[0] == (logging.INFO, "KaTeX engine NodeEngine ready")
    assert levels[1] == (logging.DEBUG, "diagnostic event custom: {'k': 'v'}")
    assert levels[2] == (logging.WARNING, "careful")
    assert levels[3] == (logging.ERROR, "broken")
    assert caplog.records[3].exc_info is not None
