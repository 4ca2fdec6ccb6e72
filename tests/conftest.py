"""Pytest configuration for tests.

No sys.path hacks - tests should import from the installed rulegraph package.
"""

import json

import pytest
from loguru import logger

from rulegraph.kernel.canonical import CanonicalGraph, Parameter, Rule


@pytest.fixture(autouse=True)
def _reset_logging():
    """Drop sinks added by a test (CLI, setup_logger) and silence the library again."""
    yield
    logger.remove()
    logger.disable("rulegraph")


@pytest.fixture
def hypertension_doc():
    """Format A: one rule deriving hypertension from two pressures."""
    return {
        "parameters": {
            "systolic_pressure": {"type": "number", "description": "Systolic blood pressure (mmHg)"},
            "diastolic_pressure": {"type": "number", "description": "Diastolic blood pressure (mmHg)"},
            "hypertension": {"type": "boolean"},
        },
        "rules": [
            {
                "id": "detect_hypertension",
                "inputs": ["systolic_pressure", "diastolic_pressure"],
                "outputs": ["hypertension"],
                "logic": "hypertension = systolic_pressure >= 140 || diastolic_pressure >= 90;",
            }
        ],
    }


@pytest.fixture
def hypertension_text(hypertension_doc):
    return json.dumps(hypertension_doc)


@pytest.fixture
def bmi_pipeline_doc():
    """Format B: inputs and outputs come from the logic text."""
    return {
        "parameters": {
            "weight": {"type": "number"},
            "height": {"type": "number"},
            "bmi": {"type": "number"},
            "obese": {"type": "boolean"},
        },
        "pipeline": [
            {"rule_id": "calc_bmi", "logic": "bmi = weight / (height * height);"},
            {"rule_id": "flag_obesity", "logic": "obese = bmi >= 30;"},
        ],
    }


@pytest.fixture
def make_graph():
    """Build a CanonicalGraph from compact tuples, bypassing the normalizers.

    ``params`` maps id -> type; ``rules`` maps id -> (inputs, outputs).
    Parameters written by a rule are marked derived.
    """
    def _make(params, rules=None):
        rules = rules or {}
        written = {out for _, outputs in rules.values() for out in outputs}
        parameters = {
            pid: Parameter(id=pid, type=ptype, source="derived" if pid in written else "input")
            for pid, ptype in params.items()
        }
        rule_models = {
            rid: Rule(id=rid, inputs=tuple(inputs), outputs=tuple(outputs), logic=f"{rid}()")
            for rid, (inputs, outputs) in rules.items()
        }
        return CanonicalGraph(parameters=parameters, rules=rule_models)

    return _make
