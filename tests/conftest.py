from __future__ import annotations

from html import escape
from pathlib import Path
import re
from typing import ClassVar

import pytest

from katex_gdef.config import EngineSettings
from katex_gdef.exceptions import EngineError
from katex_gdef.protocol import RenderFailure, RenderRequest, RenderResponse, RenderSuccess


_GDEF = re.compile(r"\\gdef(\\[A-Za-z]+)\{([^{}]*)\}")


class FakeEngine:
    """In-process stand-in for KaTeX understanding a tiny subset of TeX.

    ``\\gdef\\name{body}`` defines a macro, ``\\undefined`` is a parse error,
    ``\\crash`` an engine fault and ``\\boom`` an unexpected Python error.
    """

    starts: ClassVar[list[str]]
    snapshot_writes: ClassVar[list[Path]]
    requests: ClassVar[list[RenderRequest]]
    settings: ClassVar[list[EngineSettings | None]]

    def __init__(self, origin: str) -> None:
        self.origin = origin

    @classmethod
    def new(cls, settings: EngineSettings | None = None) -> FakeEngine:
        cls.settings.append(settings)
        cls.starts.append("cold")
        return cls("cold")

    @classmethod
    def new_from_snapshot(cls, path: Path, settings: EngineSettings | None = None) -> FakeEngine:
        cls.settings.append(settings)
        path = Path(path)
        if not path.exists():
            cls.snapshot_writes.append(path)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(b"fake-snapshot")
        cls.starts.append("snapshot")
        return cls("snapshot")

    def exec(self, request: RenderRequest) -> RenderResponse:
        type(self).requests.append(request)
        expression = request.expression
        macros = dict(request.macros)
        for name, body in _GDEF.findall(expression):
            macros[name] = body
            expression = expression.replace(f"\\gdef{name}{{{body}}}", "")
        if "\\crash" in expression:
            raise EngineError("engine fault")
        if "\\boom" in expression:
            raise ValueError("unexpected failure")
        if "\\undefined" in expression:
            return RenderFailure("Undefined control sequence: \\undefined", macros)
        for name, body in macros.items():
            if isinstance(body, str):
                expression = expression.replace(name, body)
        return RenderSuccess(
            markup=f'<span class="katex">{escape(expression.strip())}</span>',
            macros=macros,
        )


@pytest.fixture
def fake_engine() -> type[FakeEngine]:
    """Return a fresh FakeEngine subclass with its own counters."""
    return type(
        "FakeEngine",
        (FakeEngine,),
        {"starts": [], "snapshot_writes": [], "requests": [], "settings": []},
    )


KATEX_E_MC2 = (
    '<span class="katex"><span class="katex-mathml"><math xmlns="http://www.w3.org/1998/Math/MathML">'
    "<semantics><mrow><mi>E</mi><mo>=</mo><mi>m</mi><msup><mi>c</mi><mn>2</mn></msup></mrow>"
    '<annotation encoding="application/x-tex">E = mc^2</annotation></semantics></math></span>'
    '<span class="katex-html" aria-hidden="true"><span class="base">'
    '<span class="strut" style="height:0.6833em;"></span>'
    '<span class="mord mathnormal" style="margin-right:0.05764em;">E</span>'
    '<span class="mspace" style="margin-right:0.2778em;"></span><span class="mrel">=</span>'
    '<span class="mspace" style="margin-right:0.2778em;"></span></span><span class="base">'
    '<span class="strut" style="height:0.8141em;"></span><span class="mord mathnormal">m</span>'
    '<span class="mord"><span class="mord mathnormal">c</span><span class="msupsub">'
    '<span class="vlist-t"><span class="vlist-r"><span class="vlist" style="height:0.8141em;">'
    '<span style="top:-3.063em;margin-right:0.05em;"><span class="pstrut" style="height:2.7em;">'
    '</span><span class="sizing reset-size6 size3 mtight"><span class="mord mtight">2</span>'
    "</span></span></span></span></span></span></span></span></span></span>"
)


@pytest.fixture
def katex_e_mc2() -> str:
    """KaTeX 0.16 output for ``E = mc^2``."""
    return KATEX_E_MC2
