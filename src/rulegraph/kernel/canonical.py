"""Canonical knowledge graph model.

A directed bipartite graph of Parameter and Rule nodes. Every input format
is normalized into this model before any other operation. Edges are implied
by the rules:

- Parameter -> Rule for each rule input
- Rule -> Parameter for each rule output

Structural invariants (references resolve, bipartite, acyclic, single
writer) are checked by ``rulegraph.kernel.validate``, not here, so that an
invalid graph can still be represented and reported on.
"""

from typing import Any, Dict, Literal, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

ParameterType = Literal["number", "boolean", "string"]
ParameterSource = Literal["input", "derived"]

PARAMETER_TYPES: Tuple[str, ...] = ("number", "boolean", "string")


class Parameter(BaseModel):
    """A typed named fact."""
    id: str
    type: ParameterType
    description: Optional[str] = None
    source: ParameterSource = "input"

    model_config = ConfigDict(frozen=True, extra="forbid")


class Rule(BaseModel):
    """A named transformation over parameters.

    ``inputs`` and ``outputs`` keep declaration order but have set semantics.
    ``logic`` is opaque text and is never evaluated.
    """
    id: str
    inputs: Tuple[str, ...] = ()
    outputs: Tuple[str, ...] = ()
    logic: str = ""

    model_config = ConfigDict(frozen=True, extra="forbid")


class CanonicalGraph(BaseModel):
    """Parameters and rules keyed by id."""
    parameters: Dict[str, Parameter] = Field(default_factory=dict)
    rules: Dict[str, Rule] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True, extra="forbid")

    def to_canonical_dict(self) -> Dict[str, Any]:
        """Wire form: ids are the map keys, optional fields omitted."""
        parameters: Dict[str, Any] = {}
        for pid, param in self.parameters.items():
            entry: Dict[str, Any] = {"type": param.type}
            if param.description is not None:
                entry["description"] = param.description
            entry["source"] = param.source
            parameters[pid] = entry
        rules = {
            rid: {
                "inputs": list(rule.inputs),
                "outputs": list(rule.outputs),
                "logic": rule.logic,
            }
            for rid, rule in self.rules.items()
        }
        return {"parameters": parameters, "rules": rules}

    @classmethod
    def from_canonical_dict(cls, data: Mapping[str, Any]) -> "CanonicalGraph":
        """Inverse of ``to_canonical_dict`` (raises pydantic.ValidationError)."""
        parameters = {
            pid: Parameter(id=pid, **entry)
            for pid, entry in (data.get("parameters") or {}).items()
        }
        rules = {
            rid: Rule(id=rid, **entry)
            for rid, entry in (data.get("rules") or {}).items()
        }
        return cls(parameters=parameters, rules=rules)

    def writers(self) -> Dict[str, Tuple[str, ...]]:
        """Parameter id -> ids of rules that list it as an output."""
        result: Dict[str, Tuple[str, ...]] = {}
        for rid, rule in self.rules.items():
            for out in dict.fromkeys(rule.outputs):
                result[out] = result.get(out, ()) + (rid,)
        return result
