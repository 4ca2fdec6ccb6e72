"""Top-level shapes of the four input formats.

These models check only the outer shape of a parsed document. Entries inside
are walked leniently by the normalizers so that every problem can be
reported, instead of failing on the first malformed rule.

- Format A, rule-as-function graph: ``{"parameters": {...}, "rules": [...]}``
- Format B, linear rule pipeline: ``{"parameters": {...}, "pipeline": [...]}``
- Format C, atomic rule blocks: ``[{"rule_id", "input_parameters", "output_parameters", "logic"}, ...]``
- Format D, parameter-centric rules: ``{name: {"type", "description", "computed_by": [...]}}``
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, RootModel, model_validator

from rulegraph.contracts import FormatType


class FormatADocument(BaseModel):
    """Explicit parameter registry plus explicit rule list."""
    parameters: Dict[str, Any]
    rules: List[Any]

    model_config = ConfigDict(extra="allow")


class FormatBDocument(BaseModel):
    """Explicit parameter registry plus ordered pipeline steps."""
    parameters: Dict[str, Any]
    pipeline: List[Any]

    model_config = ConfigDict(extra="allow")


class FormatCDocument(RootModel[List[Any]]):
    """Array of self-contained rule blocks."""


class FormatDDocument(RootModel[Dict[str, Any]]):
    """Parameter name -> definition with optional computations."""

    @model_validator(mode="after")
    def _no_rule_containers(self):
        # a document with rules/pipeline is A or B, not D
        for key in ("rules", "pipeline"):
            if key in self.root:
                raise ValueError(f"unexpected top-level key {key!r}")
        return self


def detect_format(document: Any) -> Optional[FormatType]:
    """Guess the format of a parsed document from its outer shape."""
    if isinstance(document, list):
        return "C"
    if not isinstance(document, dict):
        return None
    if isinstance(document.get("parameters"), dict):
        if isinstance(document.get("rules"), list):
            return "A"
        if isinstance(document.get("pipeline"), list):
            return "B"
    if "rules" in document or "pipeline" in document:
        return None
    return "D"
