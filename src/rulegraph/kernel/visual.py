"""Visual graph model: the only shape in which graphs reach a renderer.

Canonical and diff graphs are projected into ``VisualGraph`` here; rendering
backends (see ``rulegraph.adapters``) consume nothing else, so a backend can
be swapped without touching the kernel.
"""

from typing import Dict, List, Literal, Optional, Protocol, Tuple, Union

from pydantic import BaseModel, ConfigDict

from rulegraph.kernel.canonical import CanonicalGraph, Parameter, ParameterSource, ParameterType, Rule
from rulegraph.kernel.diff import STATUS_COLORS, STATUS_EDGE_STYLES, AgreementStatus, DiffGraph

NodeShape = Literal["ellipse", "box"]
NodeStyle = Literal["solid", "dashed", "rounded", "filled"]
EdgeStyle = Literal["solid", "dashed", "bold"]
Direction = Literal["LR", "TB"]

STATUS_FILLS: Dict[str, str] = {
    "common": "lightgray",
    "partial": "#ffe4b5",
    "unique": "#ffcccb",
}


class ParameterNodeMetadata(BaseModel):
    type: ParameterType
    source: ParameterSource

    model_config = ConfigDict(frozen=True, extra="forbid")


class RuleNodeMetadata(BaseModel):
    inputs: Tuple[str, ...]
    outputs: Tuple[str, ...]
    logic: str

    model_config = ConfigDict(frozen=True, extra="forbid")


class VisualNode(BaseModel):
    """A drawable node. ``label`` lines are separated by a literal newline."""
    id: str
    label: str
    shape: NodeShape
    style: Tuple[NodeStyle, ...]
    color: str = "black"
    fill_color: Optional[str] = None
    metadata: Union[ParameterNodeMetadata, RuleNodeMetadata]
    present_in: Optional[Tuple[str, ...]] = None
    agreement_status: Optional[AgreementStatus] = None

    model_config = ConfigDict(frozen=True, extra="forbid")


class VisualEdge(BaseModel):
    src: str
    dst: str
    style: EdgeStyle = "solid"
    color: str = "black"
    arrowhead: str = "normal"
    present_in: Optional[Tuple[str, ...]] = None
    agreement_status: Optional[AgreementStatus] = None

    model_config = ConfigDict(frozen=True, extra="forbid")


class VisualGraph(BaseModel):
    nodes: List[VisualNode] = []
    edges: List[VisualEdge] = []
    direction: Direction = "LR"

    model_config = ConfigDict(frozen=True, extra="forbid")


class RenderResult(BaseModel):
    svg: str
    width: int
    height: int

    model_config = ConfigDict(frozen=True, extra="forbid")


class GraphRenderer(Protocol):
    """Rendering backend contract."""

    async def render(self, graph: VisualGraph) -> RenderResult:
        ...


def _parameter_style(source: str) -> Tuple[NodeStyle, ...]:
    return ("dashed",) if source == "derived" else ("solid",)


def _parameter_node(param: Parameter) -> VisualNode:
    return VisualNode(
        id=param.id,
        label=param.id,
        shape="ellipse",
        style=_parameter_style(param.source),
        metadata=ParameterNodeMetadata(type=param.type, source=param.source),
    )


def _rule_node(rule_id: str, rule: Rule) -> VisualNode:
    return VisualNode(
        id=rule_id,
        label=rule.id,
        shape="box",
        style=("rounded", "filled"),
        fill_color=STATUS_FILLS["common"],
        metadata=RuleNodeMetadata(inputs=rule.inputs, outputs=rule.outputs, logic=rule.logic),
    )


def canonical_to_visual(graph: CanonicalGraph) -> VisualGraph:
    """Project a canonical graph: parameters first, then rules with their edges."""
    nodes = [_parameter_node(param) for param in graph.parameters.values()]
    edges: List[VisualEdge] = []
    for rid, rule in graph.rules.items():
        nodes.append(_rule_node(rid, rule))
        edges.extend(VisualEdge(src=pid, dst=rid) for pid in rule.inputs)
        edges.extend(VisualEdge(src=rid, dst=pid) for pid in rule.outputs)
    return VisualGraph(nodes=nodes, edges=edges)


def diff_to_visual(graph: DiffGraph) -> VisualGraph:
    """Project a diff graph, coloured by agreement status.

    Labels get a ``(k/n)`` presence line; rule nodes are keyed by their
    synthetic id but labelled with the original rule id.
    """
    nodes: List[VisualNode] = []
    for param in graph.parameters.values():
        nodes.append(VisualNode(
            id=param.id,
            label=f"{param.id}\n{param.presence.label()}",
            shape="ellipse",
            style=_parameter_style(param.source),
            color=STATUS_COLORS[param.status],
            metadata=ParameterNodeMetadata(type=param.type, source=param.source),
            present_in=param.presence.present_in,
            agreement_status=param.status,
        ))
    for diff_id, rule in graph.rules.items():
        nodes.append(VisualNode(
            id=diff_id,
            label=f"{rule.id}\n{rule.presence.label()}",
            shape="box",
            style=("rounded", "filled"),
            color=STATUS_COLORS[rule.status],
            fill_color=STATUS_FILLS[rule.status],
            metadata=RuleNodeMetadata(inputs=rule.inputs, outputs=rule.outputs, logic=rule.logic),
            present_in=rule.presence.present_in,
            agreement_status=rule.status,
        ))
    edges = [
        VisualEdge(
            src=edge.src,
            dst=edge.dst,
            style=STATUS_EDGE_STYLES[edge.status],
            color=STATUS_COLORS[edge.status],
            present_in=edge.presence.present_in,
            agreement_status=edge.status,
        )
        for edge in graph.edges
    ]
    return VisualGraph(nodes=nodes, edges=edges)
