"""Tests for the Format A (rule-as-function graph) normalizer."""

from rulegraph.codes import ErrorType
from rulegraph.kernel.normalizers import normalize_format_a


def test_hypertension_example(hypertension_doc):
    result = normalize_format_a(hypertension_doc)

    assert result.ok
    assert result.errors == []
    graph = result.value
    assert graph.parameters["hypertension"].source == "derived"
    assert graph.parameters["systolic_pressure"].source == "input"
    assert graph.parameters["diastolic_pressure"].source == "input"
    assert graph.parameters["systolic_pressure"].description == "Systolic blood pressure (mmHg)"
    rule = graph.rules["detect_hypertension"]
    assert rule.inputs == ("systolic_pressure", "diastolic_pressure")
    assert rule.outputs == ("hypertension",)
    assert rule.logic.startswith("hypertension =")


def test_names_are_normalized():
    doc = {
        "parameters": {"Body Weight": {"type": "number"}, "Is-Heavy": {"type": "boolean"}},
        "rules": [{"id": "Check Weight", "inputs": ["body weight"], "outputs": ["IS HEAVY"], "logic": ""}],
    }
    result = normalize_format_a(doc)

    assert result.ok
    assert list(result.value.parameters) == ["body_weight", "is_heavy"]
    assert result.value.rules["check_weight"].inputs == ("body_weight",)
    assert result.value.rules["check_weight"].outputs == ("is_heavy",)


def test_repeated_references_are_deduplicated():
    doc = {
        "parameters": {"a": {"type": "number"}, "b": {"type": "number"}},
        "rules": [{"id": "r", "inputs": ["a", "A", "a"], "outputs": ["b", "b"]}],
    }
    result = normalize_format_a(doc)

    assert result.ok
    assert result.value.rules["r"].inputs == ("a",)
    assert result.value.rules["r"].outputs == ("b",)
    assert result.value.rules["r"].logic == ""


def test_undeclared_parameter():
    doc = {
        "parameters": {"a": {"type": "number"}, "b": {"type": "number"}},
        "rules": [{"id": "r", "inputs": ["a", "ghost"], "outputs": ["b"], "logic": "b = a + ghost"}],
    }
    result = normalize_format_a(doc)

    assert not result.ok
    assert result.error_types() == [ErrorType.UNDECLARED_PARAMETER]
    location = result.errors[0].location
    assert location.format == "A"
    assert location.rule_id == "r"
    assert location.parameter == "ghost"


def test_missing_and_invalid_types():
    doc = {
        "parameters": {"a": {}, "b": {"type": "integer"}, "c": "number"},
        "rules": [],
    }
    result = normalize_format_a(doc)

    assert not result.ok
    assert result.error_types() == [ErrorType.MISSING_TYPE] * 3
    assert [e.location.parameter for e in result.errors] == ["a", "b", "c"]


def test_conflicting_type_after_normalization():
    doc = {
        "parameters": {"Blood Pressure": {"type": "number"}, "blood-pressure": {"type": "string"}},
        "rules": [],
    }
    result = normalize_format_a(doc)

    assert result.error_types() == [ErrorType.CONFLICTING_TYPE]
    assert result.errors[0].location.parameter == "blood_pressure"


def test_same_type_alias_is_merged():
    doc = {
        "parameters": {"Blood Pressure": {"type": "number", "description": "first"},
                       "blood_pressure": {"type": "number", "description": "second"}},
        "rules": [],
    }
    result = normalize_format_a(doc)

    assert result.ok
    assert result.value.parameters["blood_pressure"].description == "first"


def test_empty_parameter_name():
    doc = {"parameters": {"!!!": {"type": "number"}}, "rules": []}
    result = normalize_format_a(doc)

    assert result.error_types() == [ErrorType.EMPTY_PARAMETER_NAME]


def test_rule_without_outputs():
    doc = {
        "parameters": {"a": {"type": "number"}},
        "rules": [{"id": "r", "inputs": ["a"], "outputs": []}],
    }
    result = normalize_format_a(doc)

    assert result.error_types() == [ErrorType.RULE_NO_OUTPUTS]
    assert result.errors[0].location.rule_id == "r"


def test_duplicate_writer_names_both_rules():
    doc = {
        "parameters": {"a": {"type": "number"}, "x": {"type": "number"}},
        "rules": [
            {"id": "first", "inputs": ["a"], "outputs": ["x"]},
            {"id": "second", "inputs": ["a"], "outputs": ["x"]},
        ],
    }
    result = normalize_format_a(doc)

    assert result.error_types() == [ErrorType.DUPLICATE_OUTPUT]
    assert '"first"' in result.errors[0].message
    assert '"second"' in result.errors[0].message


def test_rule_id_problems():
    doc = {
        "parameters": {"a": {"type": "number"}, "b": {"type": "number"}, "c": {"type": "number"}},
        "rules": [
            {"inputs": ["a"], "outputs": ["b"]},
            {"id": "r", "inputs": ["a"], "outputs": ["b"]},
            {"id": "R", "inputs": ["a"], "outputs": ["c"]},
        ],
    }
    result = normalize_format_a(doc)

    assert result.error_types() == [ErrorType.VALIDATION_ERROR, ErrorType.VALIDATION_ERROR]
    assert result.errors[1].location.rule_id == "r"


def test_malformed_entries_are_reported_and_skipped():
    doc = {
        "parameters": {"a": {"type": "number"}, "b": {"type": "number"}},
        "rules": [
            "not a rule",
            {"id": "r", "inputs": "a", "outputs": ["b", 7], "logic": 42},
        ],
    }
    result = normalize_format_a(doc)

    assert result.error_types() == [ErrorType.SCHEMA_MISMATCH] * 4


def test_wrong_top_level_shape():
    for doc in ([], {"parameters": []}, {"parameters": {}, "rules": {}}, "text"):
        result = normalize_format_a(doc)
        assert result.error_types() == [ErrorType.SCHEMA_MISMATCH]
        assert result.errors[0].location.format == "A"
