"""Public API for rulegraph.

High-level functions that return complete, structured results. Callers
should use these instead of importing from ``rulegraph.kernel`` or
``rulegraph._internal`` directly.

Everything here returns ``Result`` values for bad input; only the
rendering coroutines raise (``RenderError``) when the backend fails.
"""

from typing import List, Optional, Sequence, Tuple, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from rulegraph.contracts import NormalizationError, Result
from rulegraph.kernel.canonical import CanonicalGraph
from rulegraph.kernel.diff import DiffResult, LabeledGraph, compute_diff
from rulegraph.kernel.normalizers import normalize as _normalize
from rulegraph.kernel.validate import validate_graph
from rulegraph.kernel.visual import GraphRenderer, RenderResult, canonical_to_visual, diff_to_visual


class LabeledSource(BaseModel):
    """One input document: raw JSON text plus the label it is reported under."""
    label: str
    text: str
    format: Optional[str] = None  # None or "auto" detects

    model_config = ConfigDict(frozen=True, extra="forbid")


class SourceReport(BaseModel):
    """Outcome of normalizing and validating one source."""
    label: str
    ok: bool
    graph: Optional[CanonicalGraph] = None
    errors: List[NormalizationError] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, extra="forbid")


class ComparisonReport(BaseModel):
    """Per-source outcomes plus the diff of the sources that succeeded."""
    sources: List[SourceReport]
    diff: Optional[DiffResult] = None
    diff_errors: List[NormalizationError] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def ok(self) -> bool:
        return all(s.ok for s in self.sources) and self.diff is not None


def normalize(text: str, format: Optional[str] = None) -> Result:
    """Parse and normalize one document into ``Result[CanonicalGraph]``."""
    return _normalize(text, format)


def validate(graph: CanonicalGraph) -> Result:
    """Validate a canonical graph; returns the same graph object when valid."""
    return validate_graph(graph)


def normalize_and_validate(text: str, format: Optional[str] = None) -> Result:
    """Normalize then validate. Normalization errors stop before validation."""
    normalized = _normalize(text, format)
    if not normalized.ok:
        return normalized
    return validate_graph(normalized.value)


def normalize_all(inputs: Sequence[LabeledSource]) -> List[Tuple[str, Result]]:
    """Normalize each source independently, in input order.

    One failing source does not affect the others.
    """
    return [(source.label, _normalize(source.text, source.format)) for source in inputs]


def diff(labeled: Sequence[Union[LabeledGraph, Tuple[str, CanonicalGraph]]]) -> Result:
    """Diff two or more labeled graphs into ``Result[DiffResult]``.

    Accepts ``LabeledGraph`` instances or ``(label, graph)`` pairs.
    """
    entries = [
        item if isinstance(item, LabeledGraph) else LabeledGraph(label=item[0], graph=item[1])
        for item in labeled
    ]
    return compute_diff(entries)


def compare(inputs: Sequence[LabeledSource]) -> ComparisonReport:
    """Full pipeline: normalize and validate every source, then diff the valid ones.

    The diff runs only when at least two sources are valid; otherwise
    ``diff`` is None and ``diff_errors`` says why.
    """
    reports: List[SourceReport] = []
    valid: List[LabeledGraph] = []
    for source in inputs:
        result = normalize_and_validate(source.text, source.format)
        if result.ok:
            reports.append(SourceReport(label=source.label, ok=True, graph=result.value))
            valid.append(LabeledGraph(label=source.label, graph=result.value))
        else:
            logger.debug(f"Source {source.label!r} failed with {len(result.errors)} error(s)")
            reports.append(SourceReport(label=source.label, ok=False, errors=result.errors))

    diffed = compute_diff(valid)
    if not diffed.ok:
        return ComparisonReport(sources=reports, diff_errors=diffed.errors)
    return ComparisonReport(sources=reports, diff=diffed.value)


def _default_renderer() -> GraphRenderer:
    from rulegraph.adapters.graphviz import GraphvizRenderer

    return GraphvizRenderer()


async def visualize(graph: CanonicalGraph, renderer: Optional[GraphRenderer] = None) -> RenderResult:
    """Render a canonical graph (Graphviz unless another renderer is given)."""
    renderer = renderer or _default_renderer()
    return await renderer.render(canonical_to_visual(graph))


async def render_diff(diff_result: DiffResult, renderer: Optional[GraphRenderer] = None) -> RenderResult:
    """Render a diff graph coloured by agreement status."""
    renderer = renderer or _default_renderer()
    return await renderer.render(diff_to_visual(diff_result.graph))


__all__ = [
    "ComparisonReport",
    "LabeledSource",
    "SourceReport",
    "compare",
    "diff",
    "normalize",
    "normalize_all",
    "normalize_and_validate",
    "render_diff",
    "validate",
    "visualize",
]
