"""Graph-building helpers shared by the test modules."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from autograph_core.graph.flow_spec import FlowEdge, FlowGraph, FlowNode


def make_graph(
    nodes: Sequence[Tuple[str, str]],
    edges: Sequence[Tuple[str, str]] = (),
    configs: Optional[Dict[str, Any]] = None,
) -> FlowGraph:
    """Build a FlowGraph from ``(id, type_name)`` pairs and ``(src, dst)`` pairs."""
    configs = configs or {}
    return FlowGraph(
        nodes=[
            FlowNode(id=nid, type_name=type_name, config=configs.get(nid, {}))
            for nid, type_name in nodes
        ],
        edges=[FlowEdge(source=s, target=t) for s, t in edges],
    )


def block_index(source: str, node_id: str) -> int:
    """Line index of the first statement binding ``<node_id>_out``."""
    lines: List[str] = source.splitlines()
    for i, line in enumerate(lines):
        if f"let {node_id}_out =" in line:
            return i
    raise AssertionError(f"no binding for {node_id}_out in:\n{source}")
