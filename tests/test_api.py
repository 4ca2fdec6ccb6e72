"""Tests for the public API functions."""

import asyncio
import json

from rulegraph.api import (
    ComparisonReport,
    LabeledSource,
    compare,
    diff,
    normalize,
    normalize_all,
    normalize_and_validate,
    render_diff,
    validate,
    visualize,
)
from rulegraph.codes import ErrorType
from rulegraph.kernel.diff import LabeledGraph
from rulegraph.kernel.visual import RenderResult

CYCLIC = json.dumps({
    "parameters": {"a": {"type": "number"}, "b": {"type": "number"}},
    "rules": [
        {"id": "r1", "inputs": ["a"], "outputs": ["b"]},
        {"id": "r2", "inputs": ["b"], "outputs": ["a"]},
    ],
})


class RecordingRenderer:
    def __init__(self):
        self.graphs = []

    async def render(self, graph):
        self.graphs.append(graph)
        return RenderResult(svg="<svg/>", width=1, height=2)


def test_normalize_and_validate(hypertension_text):
    graph = normalize(hypertension_text).value
    validated = validate(graph)

    assert validated.value is graph
    assert normalize_and_validate(hypertension_text).value == graph


def test_normalize_and_validate_stops_on_normalization_errors():
    result = normalize_and_validate("[1, 2", "C")

    assert result.error_types() == [ErrorType.INVALID_JSON]


def test_normalize_and_validate_reports_cycle():
    result = normalize_and_validate(CYCLIC)

    assert result.error_types() == [ErrorType.CYCLE_DETECTED]


def test_normalize_all_isolates_failures(hypertension_text):
    results = normalize_all([
        LabeledSource(label="good", text=hypertension_text),
        LabeledSource(label="bad", text="{", format="A"),
        LabeledSource(label="typed", text=hypertension_text, format="A"),
    ])

    assert [label for label, _ in results] == ["good", "bad", "typed"]
    assert [r.ok for _, r in results] == [True, False, True]


def test_diff_accepts_pairs(hypertension_text):
    graph = normalize(hypertension_text).value
    from_pairs = diff([("x", graph), ("y", graph)])
    from_models = diff([LabeledGraph(label="x", graph=graph), LabeledGraph(label="y", graph=graph)])

    assert from_pairs.ok
    assert from_pairs.value == from_models.value
    assert from_pairs.value.metrics.rules.common == 1


def test_compare_full_pipeline(hypertension_text, hypertension_doc):
    variant = dict(hypertension_doc)
    variant["parameters"] = dict(hypertension_doc["parameters"], age={"type": "number"})

    report = compare([
        LabeledSource(label="m1", text=hypertension_text),
        LabeledSource(label="m2", text=json.dumps(variant)),
        LabeledSource(label="m3", text=CYCLIC),
    ])

    assert isinstance(report, ComparisonReport)
    assert [s.label for s in report.sources] == ["m1", "m2", "m3"]
    assert [s.ok for s in report.sources] == [True, True, False]
    assert report.sources[2].graph is None
    assert report.sources[2].errors[0].error_type == ErrorType.CYCLE_DETECTED
    assert report.diff is not None
    assert report.diff.graph.sources == ("m1", "m2")
    assert report.diff.graph.parameters["age"].status == "unique"
    assert not report.ok


def test_compare_with_single_valid_source(hypertension_text):
    report = compare([
        LabeledSource(label="m1", text=hypertension_text),
        LabeledSource(label="m2", text="not json"),
    ])

    assert report.diff is None
    assert [e.error_type for e in report.diff_errors] == [ErrorType.VALIDATION_ERROR]
    assert not report.ok


def test_visualize_with_custom_renderer(hypertension_text):
    renderer = RecordingRenderer()
    graph = normalize(hypertension_text).value

    result = asyncio.run(visualize(graph, renderer))

    assert (result.width, result.height) == (1, 2)
    assert len(renderer.graphs[0].nodes) == 4


def test_render_diff_with_custom_renderer(hypertension_text):
    renderer = RecordingRenderer()
    graph = normalize(hypertension_text).value
    diff_result = diff([("a", graph), ("b", graph)]).value

    asyncio.run(render_diff(diff_result, renderer))

    visual = renderer.graphs[0]
    assert all(n.agreement_status == "common" for n in visual.nodes)
    assert all(n.label.endswith("(2/2)") for n in visual.nodes)
