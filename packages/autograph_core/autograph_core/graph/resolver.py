"""autograph_core.graph.resolver
===============================

Dependency resolution for a FlowGraph.

Produces the order nodes are emitted in, the producer variables feeding
each node, and the node whose result the program returns.

Rules
-----
* Every edge ``s -> t`` places ``s`` before ``t`` (Kahn's algorithm).
* Among nodes that are ready at the same time, the one declared first wins.
* A node's inputs are ``<source>_out`` for each incoming edge, in the order
  the edges appear in ``FlowGraph.edges``.  Inputs bind positionally.
* The output node is the first declared node without outgoing edges.
"""

from __future__ import annotations

import heapq
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from autograph_core.errors import (
    CyclicGraphError,
    DanglingEdgeError,
    DuplicateNodeIdError,
)
from autograph_core.graph.emit import out_var
from autograph_core.graph.flow_spec import FlowGraph

logger = logging.getLogger(__name__)


@dataclass
class ResolvedGraph:
    """Result of ``resolve()``.

    Attributes
    ----------
    order : list[str]
        Node ids in emission order.
    inputs : dict[str, list[str]]
        node_id -> producer variable names, in incoming-edge order.
    output_node : str | None
        Node whose ``_out`` variable the program returns.
    """

    order: List[str] = field(default_factory=list)
    inputs: Dict[str, List[str]] = field(default_factory=dict)
    output_node: Optional[str] = None


# ------------------------------------------------------------------
# Validation
# ------------------------------------------------------------------


def validate_structure(graph: FlowGraph) -> None:
    """Reject duplicate node ids and edges that reference missing nodes."""
    seen: Set[str] = set()
    for node in graph.nodes:
        if node.id in seen:
            raise DuplicateNodeIdError(node.id)
        seen.add(node.id)

    for index, edge in enumerate(graph.edges):
        for endpoint in (edge.source, edge.target):
            if endpoint not in seen:
                raise DanglingEdgeError(endpoint, index, edge)


# ------------------------------------------------------------------
# Ordering
# ------------------------------------------------------------------


def topological_order(graph: FlowGraph) -> List[str]:
    """Return node ids in dependency order (Kahn's algorithm).

    Ties are broken by declaration index, so the result does not depend on
    set or dict iteration order.  Assumes ``validate_structure`` passed.

    Raises
    ------
    CyclicGraphError
        If some nodes can never become ready.
    """
    node_ids = graph.node_ids()
    idx_map = {nid: i for i, nid in enumerate(node_ids)}

    adj: Dict[str, List[str]] = {
        nid: [e.target for e in graph.outgoing_edges(nid)] for nid in node_ids
    }
    in_degree: Dict[str, int] = {nid: len(graph.incoming_edges(nid)) for nid in node_ids}

    ready = [idx_map[nid] for nid in node_ids if in_degree[nid] == 0]
    heapq.heapify(ready)

    result: List[str] = []
    while ready:
        node = node_ids[heapq.heappop(ready)]
        result.append(node)
        for neighbour in adj[node]:
            in_degree[neighbour] -= 1
            if in_degree[neighbour] == 0:
                heapq.heappush(ready, idx_map[neighbour])

    if len(result) != len(node_ids):
        remaining = {nid for nid in node_ids if in_degree[nid] > 0}
        cycle = _find_cycle(graph, remaining, node_ids)
        logger.debug(
            f"Topological sort stopped at {len(result)}/{len(node_ids)} nodes"
        )
        raise CyclicGraphError(cycle[0], cycle)

    return result


def _find_cycle(graph: FlowGraph, remaining: Set[str], node_ids: List[str]) -> List[str]:
    """Extract one cycle among the nodes Kahn's algorithm could not place.

    Every remaining node still has a predecessor that is also remaining, so
    walking predecessors from any of them must revisit a node.
    """
    preds: Dict[str, str] = {}
    for edge in graph.edges:
        if edge.source in remaining and edge.target in remaining:
            preds.setdefault(edge.target, edge.source)

    start = next(nid for nid in node_ids if nid in remaining)
    path: List[str] = []
    position: Dict[str, int] = {}
    current = start
    while current not in position:
        position[current] = len(path)
        path.append(current)
        current = preds[current]

    cycle = path[position[current]:]
    cycle.reverse()
    return cycle


# ------------------------------------------------------------------
# Entry point
# ------------------------------------------------------------------


def resolve(graph: FlowGraph) -> ResolvedGraph:
    """Validate ``graph`` and compute its emission plan."""
    validate_structure(graph)
    order = topological_order(graph)

    inputs: Dict[str, List[str]] = {
        nid: [out_var(e.source) for e in graph.incoming_edges(nid)] for nid in order
    }

    sinks = graph.sinks()
    output_node = sinks[0] if sinks else None
    if len(sinks) > 1:
        logger.debug(
            f"Graph has {len(sinks)} sink nodes {sinks}; returning '{output_node}'"
        )

    return ResolvedGraph(order=order, inputs=inputs, output_node=output_node)
