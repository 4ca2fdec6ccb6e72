"""Structural and logical validation of canonical graphs.

Checks, all accumulated rather than short-circuited:

- every rule input/output resolves to a declared parameter
- the graph is bipartite: no rule references a rule, no id is both a
  parameter and a rule
- every rule has at least one output
- at most one rule writes a given parameter
- the induced Parameter -> Rule -> Parameter edge set is acyclic

Validation never corrects a graph. It returns the very same graph object on
success and the full error list otherwise.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Set, Tuple, Union

from loguru import logger

from rulegraph.contracts import NormalizationError, Result, err, ok
from rulegraph.kernel import errors as E
from rulegraph.kernel.canonical import CanonicalGraph


@dataclass(frozen=True)
class ParameterNode:
    """A parameter in the bipartite node space."""
    id: str


@dataclass(frozen=True)
class RuleNode:
    """A rule in the bipartite node space."""
    id: str


GraphNode = Union[ParameterNode, RuleNode]
Adjacency = Mapping[GraphNode, Tuple[GraphNode, ...]]


def build_adjacency(graph: CanonicalGraph) -> Adjacency:
    """Immutable adjacency of the induced bipartite edge set.

    Nodes are declared parameters, then declared rules, then any parameter
    referenced without being declared; neighbours follow rule order.
    """
    adjacency: Dict[GraphNode, List[GraphNode]] = {}
    for pid in graph.parameters:
        adjacency[ParameterNode(pid)] = []
    for rid in graph.rules:
        adjacency[RuleNode(rid)] = []
    for rid, rule in graph.rules.items():
        rule_node = RuleNode(rid)
        for pid in rule.inputs:
            adjacency.setdefault(ParameterNode(pid), []).append(rule_node)
        for pid in rule.outputs:
            adjacency[rule_node].append(ParameterNode(pid))
            adjacency.setdefault(ParameterNode(pid), [])
    return MappingProxyType({node: tuple(targets) for node, targets in adjacency.items()})


def _depth_first(adjacency: Adjacency) -> Tuple[List[GraphNode], Optional[List[GraphNode]]]:
    """Post-order of all nodes, or the first cycle found.

    Returns ``(postorder, cycle)``. ``cycle`` starts and ends at the node the
    back edge re-entered.
    """
    finished: Set[GraphNode] = set()
    postorder: List[GraphNode] = []
    for root in adjacency:
        if root in finished:
            continue
        path: List[GraphNode] = [root]
        on_path: Set[GraphNode] = {root}
        worklist = [iter(adjacency[root])]
        while worklist:
            successor = next(worklist[-1], None)
            if successor is None:
                worklist.pop()
                node = path.pop()
                on_path.discard(node)
                finished.add(node)
                postorder.append(node)
                continue
            if successor in on_path:
                start = path.index(successor)
                return postorder, path[start:] + [successor]
            if successor in finished:
                continue
            path.append(successor)
            on_path.add(successor)
            worklist.append(iter(adjacency.get(successor, ())))
    return postorder, None


def find_cycle(graph: CanonicalGraph) -> Optional[List[str]]:
    """Bare ids along the first cycle found, or None for an acyclic graph."""
    _, cycle = _depth_first(build_adjacency(graph))
    if cycle is None:
        return None
    return [node.id for node in cycle]


def topological_order(graph: CanonicalGraph) -> Tuple[GraphNode, ...]:
    """Nodes in dependency order; empty when the graph has a cycle."""
    postorder, cycle = _depth_first(build_adjacency(graph))
    if cycle is not None:
        return ()
    return tuple(reversed(postorder))


def _check_keys(graph: CanonicalGraph) -> List[NormalizationError]:
    errors = []
    for key, param in graph.parameters.items():
        if key != param.id:
            errors.append(E.validation_error(
                f'Parameter stored under "{key}" has id "{param.id}"', parameter=key
            ))
    for key, rule in graph.rules.items():
        if key != rule.id:
            errors.append(E.validation_error(
                f'Rule stored under "{key}" has id "{rule.id}"', rule_id=key
            ))
    return errors


def _check_references(graph: CanonicalGraph) -> List[NormalizationError]:
    errors = []
    for rid, rule in graph.rules.items():
        for pid in rule.inputs + rule.outputs:
            if pid not in graph.parameters:
                errors.append(E.undeclared_parameter(pid, rid))
    return errors


def _check_bipartite(graph: CanonicalGraph) -> List[NormalizationError]:
    errors = []
    for rid in graph.rules:
        if rid in graph.parameters:
            errors.append(E.bipartite_violation(
                f'Identifier "{rid}" is declared both as a parameter and as a rule',
                rule_id=rid, parameter=rid,
            ))
    for rid, rule in graph.rules.items():
        for ref in rule.inputs:
            if ref in graph.rules and ref not in graph.parameters:
                errors.append(E.bipartite_violation(
                    f'Rule "{rid}" has input "{ref}" which is a rule, not a parameter', rule_id=rid
                ))
        for ref in rule.outputs:
            if ref in graph.rules and ref not in graph.parameters:
                errors.append(E.bipartite_violation(
                    f'Rule "{rid}" has output "{ref}" which is a rule, not a parameter', rule_id=rid
                ))
    return errors


def _check_rule_outputs(graph: CanonicalGraph) -> List[NormalizationError]:
    return [E.rule_no_outputs(rid) for rid, rule in graph.rules.items() if not rule.outputs]


def _check_single_writer(graph: CanonicalGraph) -> List[NormalizationError]:
    return [
        E.duplicate_output(pid, rid, rule_ids[0])
        for pid, rule_ids in graph.writers().items()
        for rid in rule_ids[1:]
    ]


def _check_acyclic(graph: CanonicalGraph) -> List[NormalizationError]:
    cycle = find_cycle(graph)
    if cycle is None:
        return []
    return [E.cycle_detected(cycle)]


def validate_graph(graph: CanonicalGraph) -> Result:
    """Validate all structural and logical constraints of a canonical graph."""
    errors: List[NormalizationError] = []
    errors.extend(_check_keys(graph))
    errors.extend(_check_references(graph))
    errors.extend(_check_bipartite(graph))
    errors.extend(_check_rule_outputs(graph))
    errors.extend(_check_single_writer(graph))
    errors.extend(_check_acyclic(graph))

    if errors:
        logger.debug(f"Graph validation failed with {len(errors)} error(s)")
        return err(errors)
    logger.debug(f"Graph valid: {len(graph.parameters)} parameters, {len(graph.rules)} rules")
    return ok(graph)
