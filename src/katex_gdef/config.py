"""Configuration models for the KaTeX engine and render calls.

EngineSettings

`node` (`str`)
: Name or path of the Node.js executable hosting KaTeX. Resolved through
  `PATH` when it is a bare name.

`katex_bundle` (`Path | None`)
: Path to `katex.min.js`. When omitted, Node is asked to resolve
  `katex/dist/katex.min.js` from the current directory or `NODE_PATH`.

`node_options` (`tuple[str, ...]`)
: Extra flags passed to every Node invocation (e.g. `--max-old-space-size=256`).

RenderOptions

Mirrors the options accepted by `katex.renderToString`. Field names are
snake_case in Python and camelCase on the wire; `None` values are omitted so
KaTeX applies its own defaults.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
import math
import os
from pathlib import Path
import shlex
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class OutputFormat(str, Enum):
    """Markup flavours KaTeX can emit."""

    HTML = "html"
    MATHML = "mathml"
    HTML_AND_MATHML = "htmlAndMathml"


class RenderOptions(BaseModel):
    """Options forwarded verbatim to KaTeX."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    display_mode: bool = False
    output: OutputFormat = OutputFormat.HTML_AND_MATHML
    leqno: bool = False
    fleqn: bool = False
    throw_on_error: bool = True
    error_color: str = "#cc0000"
    min_rule_thickness: float | None = Field(default=None, allow_inf_nan=False)
    color_is_text_color: bool = False
    max_size: float | None = None
    max_expand: int = 1000
    strict: bool | Literal["ignore", "warn", "error"] | None = None
    trust: bool = False
    global_group: bool = False

    @field_validator("max_size")
    @classmethod
    def _finite_max_size(cls, value: float | None) -> float | None:
        # JSON has no Infinity; an absent maxSize is unlimited in KaTeX.
        if value is None or value == math.inf:
            return None
        if not math.isfinite(value):
            raise ValueError("max_size must be a finite number or infinity")
        return value

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON-shaped options object expected by KaTeX."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class EngineSettings(BaseModel):
    """Where to find Node.js and the KaTeX bundle."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    node: str = "node"
    katex_bundle: Path | None = None
    node_options: tuple[str, ...] = Field(default_factory=tuple)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> EngineSettings:
        """Build settings from ``KATEX_GDEF_*`` environment variables."""
        env = os.environ if environ is None else environ
        data: dict[str, Any] = {}
        if env.get("KATEX_GDEF_NODE"):
            data["node"] = env["KATEX_GDEF_NODE"]
        if env.get("KATEX_GDEF_BUNDLE"):
            data["katex_bundle"] = Path(env["KATEX_GDEF_BUNDLE"]).expanduser()
        if env.get("KATEX_GDEF_NODE_OPTIONS"):
            data["node_options"] = tuple(shlex.split(env["KATEX_GDEF_NODE_OPTIONS"]))
        return cls(**data)


__all__ = ["EngineSettings", "OutputFormat", "RenderOptions"]
