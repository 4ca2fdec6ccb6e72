"""Format A normalizer: rule-as-function graph.

Rules are taken directly with their declared inputs and outputs.
"""

from typing import Any, Dict, List

from pydantic import ValidationError

from rulegraph.contracts import NormalizationError, Result, err
from rulegraph.kernel import errors as E
from rulegraph.kernel.canonical import Rule
from rulegraph.kernel.formats import FormatADocument
from rulegraph.kernel.ids import normalize_id
from rulegraph.kernel.normalizers._common import (
    collect_parameters,
    entry_mapping,
    finish,
    id_list,
    logic_text,
    mark_derived,
    string_or_empty,
    unique,
)


def normalize_format_a(document: Any) -> Result:
    """Normalize a parsed Format A document into a canonical graph."""
    try:
        doc = FormatADocument.model_validate(document)
    except ValidationError:
        return err([E.schema_mismatch('Format A requires "parameters" object and "rules" array', format="A")])

    errors: List[NormalizationError] = []
    parameters = collect_parameters(doc.parameters, "A", errors)
    rules: Dict[str, Rule] = {}
    writers: Dict[str, str] = {}  # parameter -> first rule writing it

    for entry in doc.rules:
        rule = entry_mapping(entry, "Rule", "A", errors)
        if rule is None:
            continue
        rule_id = normalize_id(string_or_empty(rule.get("id")))
        if not rule_id:
            errors.append(E.validation_error("Rule must have an id", format="A"))
            continue
        if rule_id in rules:
            errors.append(E.validation_error(f'Duplicate rule id "{rule_id}"', format="A", rule_id=rule_id))
            continue

        inputs: List[str] = []
        for raw in unique(normalize_id(n) for n in id_list(rule.get("inputs"), "inputs", "A", rule_id, errors)):
            if raw not in parameters:
                errors.append(E.undeclared_parameter(raw, rule_id, format="A"))
            else:
                inputs.append(raw)

        outputs: List[str] = []
        for raw in unique(normalize_id(n) for n in id_list(rule.get("outputs"), "outputs", "A", rule_id, errors)):
            if raw not in parameters:
                errors.append(E.undeclared_parameter(raw, rule_id, format="A"))
                continue
            existing = writers.get(raw)
            if existing is not None:
                errors.append(E.duplicate_output(raw, rule_id, existing, format="A"))
            else:
                writers[raw] = rule_id
                mark_derived(parameters, raw)
            outputs.append(raw)

        logic = logic_text(rule.get("logic"), "A", rule_id, errors)
        if not outputs:
            errors.append(E.rule_no_outputs(rule_id, format="A"))
            continue
        if logic is None:
            continue

        rules[rule_id] = Rule(id=rule_id, inputs=tuple(inputs), outputs=tuple(outputs), logic=logic)

    return finish(parameters, rules, errors, "A")
