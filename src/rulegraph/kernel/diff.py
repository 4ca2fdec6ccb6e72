"""Multi-source structural diff of canonical graphs.

Given two or more labeled graphs, builds one unified graph whose
parameters, rules and edges each carry a presence vector (which sources
contain them) and an agreement status:

- common: present in every source
- unique: present in exactly one source
- partial: anything in between

Rule identity is structural: two rules match only when id, input set,
output set and logic text are all equal. Each distinct rule gets a
synthetic id derived from a hash of that key, so ids do not depend on the
order the sources are given in. Distinct keys never share an id.
"""

import re
from typing import Dict, Iterable, List, Literal, Optional, Sequence, Set, Tuple

from loguru import logger
from pydantic import BaseModel, ConfigDict, model_validator

from rulegraph._internal.canonical_json import canonical_sha256
from rulegraph.contracts import Result, err, ok
from rulegraph.kernel import errors as E
from rulegraph.kernel.canonical import CanonicalGraph, Parameter, ParameterSource, ParameterType, Rule

AgreementStatus = Literal["common", "partial", "unique"]
EdgeKind = Literal["consumes", "produces"]

STATUS_COLORS: Dict[str, str] = {
    "common": "black",
    "partial": "orange",
    "unique": "red",
}

STATUS_EDGE_STYLES: Dict[str, str] = {
    "common": "solid",
    "partial": "dashed",
    "unique": "bold",
}

RuleKey = Tuple[str, Tuple[str, ...], Tuple[str, ...], str]

_UNSAFE = re.compile(r"[^a-zA-Z0-9_]")
_RUNS = re.compile(r"_+")
_MAX_SANITIZED = 50


class PresenceVector(BaseModel):
    """Sources (by label, in source order) that contain an entity."""
    present_in: Tuple[str, ...]
    total_sources: int

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def count(self) -> int:
        return len(self.present_in)

    def label(self) -> str:
        """Short ``(k/n)`` form."""
        return f"({self.count}/{self.total_sources})"


class DiffParameter(BaseModel):
    id: str
    type: ParameterType
    description: Optional[str] = None
    source: ParameterSource = "input"
    presence: PresenceVector
    status: AgreementStatus

    model_config = ConfigDict(frozen=True, extra="forbid")


class DiffRule(BaseModel):
    """A rule as matched across sources. ``diff_id`` is its synthetic id."""
    diff_id: str
    id: str
    inputs: Tuple[str, ...]
    outputs: Tuple[str, ...]
    logic: str
    presence: PresenceVector
    status: AgreementStatus

    model_config = ConfigDict(frozen=True, extra="forbid")


class DiffEdge(BaseModel):
    """A Parameter -> Rule (consumes) or Rule -> Parameter (produces) edge.

    The rule endpoint is the rule's synthetic ``diff_id``.
    """
    src: str
    dst: str
    kind: EdgeKind
    presence: PresenceVector
    status: AgreementStatus

    model_config = ConfigDict(frozen=True, extra="forbid")


class CategoryCounts(BaseModel):
    total: int = 0
    common: int = 0
    partial: int = 0
    unique: int = 0

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def _check_total(self):
        if self.total != self.common + self.partial + self.unique:
            raise ValueError("total must equal common + partial + unique")
        return self


class AgreementMetrics(BaseModel):
    parameters: CategoryCounts
    rules: CategoryCounts
    edges: CategoryCounts

    model_config = ConfigDict(frozen=True, extra="forbid")


class DiffGraph(BaseModel):
    """Unified graph: parameters by id, rules by synthetic id, edges in discovery order."""
    parameters: Dict[str, DiffParameter]
    rules: Dict[str, DiffRule]
    edges: List[DiffEdge]
    sources: Tuple[str, ...]

    model_config = ConfigDict(frozen=True, extra="forbid")


class DiffResult(BaseModel):
    graph: DiffGraph
    metrics: AgreementMetrics

    model_config = ConfigDict(frozen=True, extra="forbid")


class LabeledGraph(BaseModel):
    """A canonical graph tagged with the label of the source that produced it."""
    label: str
    graph: CanonicalGraph

    model_config = ConfigDict(frozen=True, extra="forbid")


def compute_status(presence: PresenceVector) -> AgreementStatus:
    if presence.count == presence.total_sources:
        return "common"
    if presence.count == 1:
        return "unique"
    return "partial"


def rule_key(rule: Rule) -> RuleKey:
    """Structural identity of a rule; input/output order is ignored."""
    return (rule.id, tuple(sorted(rule.inputs)), tuple(sorted(rule.outputs)), rule.logic)


def sanitize_id(raw: str) -> str:
    """Restrict to ``[A-Za-z0-9_]``, collapse underscores, cap the length."""
    cleaned = _RUNS.sub("_", _UNSAFE.sub("_", raw)).strip("_")
    return cleaned[:_MAX_SANITIZED]


def diff_rule_id(key: RuleKey) -> str:
    """Synthetic rule id: sanitized rule id plus 8 hex chars of the key hash."""
    rid, inputs, outputs, logic = key
    digest = canonical_sha256([rid, list(inputs), list(outputs), logic])
    return f"rule_{sanitize_id(rid)}_{digest[:8]}"


def assign_diff_ids(keys: Iterable[RuleKey]) -> Dict[RuleKey, str]:
    """Synthetic id for every distinct rule key.

    Keys are visited in sorted order, so the mapping does not depend on the
    order sources were given in. Keys whose hash prefixes clash get a
    ``_2``, ``_3``... suffix.
    """
    assigned: Dict[RuleKey, str] = {}
    taken: Set[str] = set()
    for key in sorted(set(keys)):
        base = diff_rule_id(key)
        candidate, n = base, 1
        while candidate in taken:
            n += 1
            candidate = f"{base}_{n}"
        if n > 1:
            logger.warning(f"Synthetic rule id collision on {base}; rule {key[0]!r} becomes {candidate}")
        taken.add(candidate)
        assigned[key] = candidate
    return assigned


def _count(statuses: List[str]) -> CategoryCounts:
    return CategoryCounts(
        total=len(statuses),
        common=statuses.count("common"),
        partial=statuses.count("partial"),
        unique=statuses.count("unique"),
    )


def compute_metrics(graph: DiffGraph) -> AgreementMetrics:
    """Per-category status counts of a diff graph."""
    return AgreementMetrics(
        parameters=_count([p.status for p in graph.parameters.values()]),
        rules=_count([r.status for r in graph.rules.values()]),
        edges=_count([e.status for e in graph.edges]),
    )


def compute_diff(labeled: Sequence[LabeledGraph]) -> Result:
    """Diff two or more labeled canonical graphs.

    Returns ``Result[DiffResult]``. Fewer than two sources or a repeated
    label is a VALIDATION_ERROR.
    """
    if len(labeled) < 2:
        return err([E.validation_error(f"Diff requires at least 2 graphs, got {len(labeled)}")])
    sources = tuple(item.label for item in labeled)
    repeated = sorted({label for label in sources if sources.count(label) > 1})
    if repeated:
        return err([E.validation_error(
            "Diff source labels must be distinct; repeated: " + ", ".join(repeated)
        )])
    total = len(sources)

    param_defs: Dict[str, Parameter] = {}
    param_presence: Dict[str, List[str]] = {}
    rule_defs: Dict[RuleKey, Rule] = {}
    rule_presence: Dict[RuleKey, List[str]] = {}
    # (parameter id, rule key, kind); the rule endpoint is resolved to a diff id later
    edge_presence: Dict[Tuple[str, RuleKey, str], List[str]] = {}

    def mark(table: Dict, key, label: str) -> None:
        present = table.setdefault(key, [])
        if label not in present:
            present.append(label)

    for item in labeled:
        label, graph = item.label, item.graph
        for pid, param in graph.parameters.items():
            param_defs.setdefault(pid, param)
            mark(param_presence, pid, label)

        for rule in graph.rules.values():
            key = rule_key(rule)
            rule_defs.setdefault(key, rule)
            mark(rule_presence, key, label)

            for pid in rule.inputs:
                mark(edge_presence, (pid, key, "consumes"), label)
            for pid in rule.outputs:
                mark(edge_presence, (pid, key, "produces"), label)

    diff_ids = assign_diff_ids(rule_defs)

    def presence(present: List[str]) -> PresenceVector:
        return PresenceVector(present_in=tuple(present), total_sources=total)

    parameters: Dict[str, DiffParameter] = {}
    for pid, param in param_defs.items():
        vector = presence(param_presence[pid])
        parameters[pid] = DiffParameter(
            id=pid,
            type=param.type,
            description=param.description,
            source=param.source,
            presence=vector,
            status=compute_status(vector),
        )

    rules: Dict[str, DiffRule] = {}
    for key, rule in rule_defs.items():
        diff_id = diff_ids[key]
        vector = presence(rule_presence[key])
        rules[diff_id] = DiffRule(
            diff_id=diff_id,
            id=rule.id,
            inputs=key[1],
            outputs=key[2],
            logic=rule.logic,
            presence=vector,
            status=compute_status(vector),
        )

    edges: List[DiffEdge] = []
    for (pid, key, kind), present in edge_presence.items():
        vector = presence(present)
        src, dst = (pid, diff_ids[key]) if kind == "consumes" else (diff_ids[key], pid)
        edges.append(DiffEdge(src=src, dst=dst, kind=kind, presence=vector, status=compute_status(vector)))

    graph = DiffGraph(parameters=parameters, rules=rules, edges=edges, sources=sources)
    metrics = compute_metrics(graph)
    logger.debug(
        f"Diff over {total} sources: {metrics.parameters.total} parameters, "
        f"{metrics.rules.total} rules, {metrics.edges.total} edges"
    )
    return ok(DiffResult(graph=graph, metrics=metrics))
