"""Format B normalizer: linear rule pipeline.

Steps carry only a rule id and logic; inputs and outputs are inferred with
the logic analyzer and must name parameters declared in the registry.
"""

from typing import Any, Dict, List

from pydantic import ValidationError

from rulegraph.contracts import NormalizationError, Result, err
from rulegraph.kernel import errors as E
from rulegraph.kernel.canonical import Rule
from rulegraph.kernel.formats import FormatBDocument
from rulegraph.kernel.ids import normalize_id
from rulegraph.kernel.logic import analyze_logic
from rulegraph.kernel.normalizers._common import (
    collect_parameters,
    entry_mapping,
    finish,
    logic_text,
    mark_derived,
    string_or_empty,
    unique,
)


def normalize_format_b(document: Any) -> Result:
    """Normalize a parsed Format B document into a canonical graph."""
    try:
        doc = FormatBDocument.model_validate(document)
    except ValidationError:
        return err([E.schema_mismatch('Format B requires "parameters" object and "pipeline" array', format="B")])

    errors: List[NormalizationError] = []
    parameters = collect_parameters(doc.parameters, "B", errors)
    rules: Dict[str, Rule] = {}
    writers: Dict[str, str] = {}

    for entry in doc.pipeline:
        step = entry_mapping(entry, "Pipeline step", "B", errors)
        if step is None:
            continue
        rule_id = normalize_id(string_or_empty(step.get("rule_id")))
        if not rule_id:
            errors.append(E.validation_error("Pipeline step must have a rule_id", format="B"))
            continue
        if rule_id in rules:
            errors.append(E.validation_error(f'Duplicate rule id "{rule_id}"', format="B", rule_id=rule_id))
            continue
        logic = logic_text(step.get("logic"), "B", rule_id, errors)
        if logic is None:
            continue

        analysis = analyze_logic(logic)

        # outputs first: a step may read a parameter it also writes
        outputs: List[str] = []
        for pid in unique(normalize_id(name) for name in analysis.outputs):
            if pid not in parameters:
                errors.append(E.undeclared_parameter(pid, rule_id, format="B"))
                continue
            existing = writers.get(pid)
            if existing is not None:
                errors.append(E.duplicate_output(pid, rule_id, existing, format="B"))
                continue
            writers[pid] = rule_id
            mark_derived(parameters, pid)
            outputs.append(pid)

        inputs: List[str] = []
        for pid in unique(normalize_id(name) for name in analysis.inputs):
            if pid not in parameters:
                errors.append(E.undeclared_parameter(pid, rule_id, format="B"))
                continue
            inputs.append(pid)

        if not outputs:
            errors.append(E.rule_no_outputs(rule_id, format="B"))
            continue

        rules[rule_id] = Rule(id=rule_id, inputs=tuple(inputs), outputs=tuple(outputs), logic=logic)

    return finish(parameters, rules, errors, "B")
