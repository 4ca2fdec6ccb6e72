"""Canonical graph wire form and derived views."""

import pytest
from pydantic import ValidationError

from rulegraph.kernel.canonical import CanonicalGraph, Parameter, Rule


def test_wire_form_omits_absent_description(make_graph):
    graph = make_graph({"a": "number", "b": "boolean"}, {"r": (["a"], ["b"])})

    wire = graph.to_canonical_dict()

    assert wire == {
        "parameters": {
            "a": {"type": "number", "source": "input"},
            "b": {"type": "boolean", "source": "derived"},
        },
        "rules": {"r": {"inputs": ["a"], "outputs": ["b"], "logic": "r()"}},
    }


def test_from_canonical_dict_takes_ids_from_keys(make_graph):
    graph = make_graph({"a": "number", "b": "boolean"}, {"r": (["a"], ["b"])})

    rebuilt = CanonicalGraph.from_canonical_dict(graph.to_canonical_dict())

    assert rebuilt == graph
    assert rebuilt.rules["r"].id == "r"


def test_from_canonical_dict_rejects_unknown_fields():
    with pytest.raises(ValidationError):
        CanonicalGraph.from_canonical_dict({"parameters": {"a": {"type": "number", "unit": "kg"}}})


def test_writers_lists_every_rule_writing_a_parameter():
    graph = CanonicalGraph(
        parameters={"x": Parameter(id="x", type="number", source="derived")},
        rules={
            "r1": Rule(id="r1", outputs=("x",)),
            "r2": Rule(id="r2", outputs=("x",)),
        },
    )

    assert graph.writers() == {"x": ("r1", "r2")}


def test_rederivation_produces_a_new_value():
    param = Parameter(id="x", type="string")

    derived = param.model_copy(update={"source": "derived"})

    assert param.source == "input"
    assert derived.source == "derived"
    with pytest.raises(ValidationError):
        param.source = "derived"


def test_writers_counts_a_repeated_output_once():
    graph = CanonicalGraph(
        parameters={"x": Parameter(id="x", type="number", source="derived")},
        rules={"r": Rule(id="r", outputs=("x", "x"))},
    )

    assert graph.writers() == {"x": ("r",)}
