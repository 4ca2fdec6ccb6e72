"""Format D normalizer: parameter-centric rules.

Each parameter declares how it is computed. Every ``computed_by`` entry of a
parameter becomes one rule whose only output is that parameter. Several
entries for the same parameter are accepted here; the validator reports the
resulting duplicate writers.
"""

from typing import Any, Dict, List, Set

from pydantic import ValidationError

from rulegraph.contracts import NormalizationError, Result, err
from rulegraph.kernel import errors as E
from rulegraph.kernel.canonical import Rule
from rulegraph.kernel.formats import FormatDDocument
from rulegraph.kernel.ids import normalize_id
from rulegraph.kernel.normalizers._common import (
    collect_parameters,
    finish,
    has_valid_type,
    id_list,
    logic_text,
    mark_derived,
    unique,
)


def synthesize_rule_id(parameter_id: str, index: int, count: int) -> str:
    """Rule id for the ``index``-th of ``count`` computations of a parameter."""
    if count == 1:
        return f"compute_{parameter_id}"
    return f"compute_{parameter_id}_{index + 1}"


def normalize_format_d(document: Any) -> Result:
    """Normalize a parsed Format D document into a canonical graph."""
    try:
        doc = FormatDDocument.model_validate(document)
    except ValidationError:
        return err([E.schema_mismatch(
            "Format D must be an object mapping parameter names to definitions", format="D"
        )])

    errors: List[NormalizationError] = []
    parameters = collect_parameters(doc.root, "D", errors)
    computations: Dict[str, List[Any]] = {}
    seen: Set[str] = set()

    # first pass: registry and sources; the first raw name of an id wins
    for raw_id, definition in doc.root.items():
        pid = normalize_id(raw_id)
        if pid not in parameters or pid in seen or not has_valid_type(definition):
            continue
        seen.add(pid)
        computed_by = definition.get("computed_by")
        if computed_by is None:
            continue
        if not isinstance(computed_by, list):
            errors.append(E.schema_mismatch(
                f'Parameter "{pid}": "computed_by" must be an array', format="D", parameter=pid
            ))
            continue
        if computed_by:
            computations[pid] = computed_by
            mark_derived(parameters, pid)

    # second pass: one rule per computation
    rules: Dict[str, Rule] = {}
    for pid, entries in computations.items():
        for index, computation in enumerate(entries):
            rule_id = synthesize_rule_id(pid, index, len(entries))
            if not isinstance(computation, dict):
                errors.append(E.schema_mismatch(
                    f'Parameter "{pid}": "computed_by" entries must be objects',
                    format="D", rule_id=rule_id, parameter=pid,
                ))
                continue
            if rule_id in rules:
                errors.append(E.validation_error(
                    f'Synthesized rule id "{rule_id}" collides with an existing rule',
                    format="D", rule_id=rule_id, parameter=pid,
                ))
                continue

            inputs: List[str] = []
            for ref in unique(normalize_id(n) for n in id_list(computation.get("inputs"), "inputs", "D", rule_id, errors)):
                if ref not in parameters:
                    errors.append(E.undeclared_parameter(ref, rule_id, format="D"))
                    continue
                inputs.append(ref)

            logic = logic_text(computation.get("logic"), "D", rule_id, errors)
            if logic is None:
                continue
            rules[rule_id] = Rule(id=rule_id, inputs=tuple(inputs), outputs=(pid,), logic=logic)

    return finish(parameters, rules, errors, "D")
