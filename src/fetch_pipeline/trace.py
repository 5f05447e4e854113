"""PipelineTrace and TraceEntry — debug execution recording."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from fetch_pipeline.exceptions import FetchError


@dataclass(frozen=True)
class TraceEntry:
    """Single middleware frame, recorded when it unwinds."""

    middleware_name: str
    position: int
    duration_ms: float
    outcome: Literal["OK", "FAILED"]
    reason: str | None = None


@dataclass
class PipelineTrace:
    """Structured record of a single pipeline run."""

    entries: list[TraceEntry] = field(default_factory=list)
    total_duration_ms: float = 0.0
    outcome: Literal["OK", "SHORT_CIRCUITED", "ERROR"] = "OK"
    committed: bool = False
    error: FetchError | Exception | None = None
