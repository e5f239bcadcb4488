"""test_resolver.py

Dependency resolution: ordering, tie-breaks, inputs, output node and the
structural errors raised before any code is emitted.
"""

from __future__ import annotations

import pytest

from autograph_core.errors import (
    CyclicGraphError,
    DanglingEdgeError,
    DuplicateNodeIdError,
    StructuralGraphError,
)
from autograph_core.graph.flow_spec import FlowGraph
from autograph_core.graph.resolver import resolve, topological_order

from helpers import make_graph


class TestOrdering:
    def test_linear_chain(self, chain_graph) -> None:
        plan = resolve(chain_graph)
        assert plan.order == ["A", "B", "C"]

    def test_dependencies_override_declaration_order(self) -> None:
        graph = make_graph(
            [("C", "print"), ("B", "string_upper"), ("A", "start")],
            [("A", "B"), ("B", "C")],
        )
        assert resolve(graph).order == ["A", "B", "C"]

    def test_ties_follow_declaration_not_alphabet(self) -> None:
        graph = make_graph([("z", "start"), ("m", "start"), ("a", "start")])
        assert topological_order(graph) == ["z", "m", "a"]

    def test_ready_nodes_released_by_declaration_index(self) -> None:
        # r feeds both y and x; y is declared before x.
        graph = make_graph(
            [("r", "start"), ("y", "print"), ("x", "print")],
            [("r", "x"), ("r", "y")],
        )
        assert resolve(graph).order == ["r", "y", "x"]

    def test_diamond(self) -> None:
        graph = make_graph(
            [("d", "array_concat"), ("b", "print"), ("c", "print"), ("a", "start")],
            [("a", "b"), ("a", "c"), ("b", "d"), ("c", "d")],
        )
        order = resolve(graph).order
        assert order == ["a", "b", "c", "d"]

    def test_every_edge_respected(self) -> None:
        edges = [("n4", "n2"), ("n3", "n1"), ("n2", "n1"), ("n5", "n3"), ("n4", "n5")]
        graph = make_graph([(f"n{i}", "print") for i in range(1, 6)], edges)
        order = resolve(graph).order
        for s, t in edges:
            assert order.index(s) < order.index(t)

    def test_disconnected_nodes_included(self) -> None:
        graph = make_graph([("a", "start"), ("lonely", "math_random")], [])
        assert resolve(graph).order == ["a", "lonely"]


class TestInputs:
    def test_multi_input_follows_edge_order(self) -> None:
        graph = make_graph(
            [("Y", "start"), ("X", "start"), ("D", "array_concat")],
            [("X", "D"), ("Y", "D")],
        )
        assert resolve(graph).inputs["D"] == ["X_out", "Y_out"]

    def test_multi_input_not_sorted(self) -> None:
        graph = make_graph(
            [("a", "start"), ("b", "start"), ("D", "array_concat")],
            [("b", "D"), ("a", "D")],
        )
        assert resolve(graph).inputs["D"] == ["b_out", "a_out"]

    def test_sources_have_no_inputs(self, chain_graph) -> None:
        plan = resolve(chain_graph)
        assert plan.inputs["A"] == []
        assert plan.inputs["B"] == ["A_out"]

    def test_duplicate_edges_kept(self) -> None:
        graph = make_graph(
            [("a", "start"), ("b", "string_concat")], [("a", "b"), ("a", "b")]
        )
        plan = resolve(graph)
        assert plan.inputs["b"] == ["a_out", "a_out"]
        assert plan.order == ["a", "b"]


class TestOutputNode:
    def test_chain_returns_last(self, chain_graph) -> None:
        assert resolve(chain_graph).output_node == "C"

    def test_two_sinks_first_declared_wins(self) -> None:
        graph = make_graph(
            [("src", "start"), ("s2", "print"), ("s1", "print")],
            [("src", "s1"), ("src", "s2")],
        )
        assert resolve(graph).output_node == "s2"

    def test_empty_graph(self) -> None:
        plan = resolve(FlowGraph())
        assert plan.order == []
        assert plan.output_node is None


class TestStructuralErrors:
    def test_duplicate_node_id(self) -> None:
        graph = make_graph([("a", "start"), ("a", "print")])
        with pytest.raises(DuplicateNodeIdError, match="Duplicate") as info:
            resolve(graph)
        assert info.value.node_id == "a"

    def test_dangling_target(self) -> None:
        graph = make_graph([("a", "start")], [("a", "ghost")])
        with pytest.raises(DanglingEdgeError, match="ghost") as info:
            resolve(graph)
        assert info.value.missing_id == "ghost"
        assert info.value.edge_index == 0

    def test_dangling_source(self) -> None:
        graph = make_graph([("a", "start"), ("b", "print")], [("a", "b"), ("nope", "b")])
        with pytest.raises(DanglingEdgeError) as info:
            resolve(graph)
        assert info.value.missing_id == "nope"
        assert info.value.edge_index == 1

    def test_self_loop(self) -> None:
        graph = make_graph([("a", "print")], [("a", "a")])
        with pytest.raises(CyclicGraphError, match="cycle") as info:
            resolve(graph)
        assert info.value.node_id == "a"
        assert info.value.cycle == ["a"]

    def test_two_node_cycle(self) -> None:
        graph = make_graph([("a", "print"), ("b", "print")], [("a", "b"), ("b", "a")])
        with pytest.raises(CyclicGraphError) as info:
            resolve(graph)
        assert info.value.node_id in {"a", "b"}
        assert sorted(info.value.cycle) == ["a", "b"]

    def test_cycle_reports_node_on_cycle_not_downstream(self) -> None:
        graph = make_graph(
            [("tail", "print"), ("s", "start"), ("p", "print"), ("q", "print")],
            [("s", "p"), ("p", "q"), ("q", "p"), ("q", "tail")],
        )
        with pytest.raises(CyclicGraphError) as info:
            resolve(graph)
        assert info.value.node_id in {"p", "q"}
        assert "tail" not in info.value.cycle
        assert "s" not in info.value.cycle

    def test_all_structural_errors_share_base(self) -> None:
        graph = make_graph([("a", "print")], [("a", "a")])
        with pytest.raises(StructuralGraphError):
            resolve(graph)


class TestGraphQueries:
    def test_inputs_match_incoming_edges(self) -> None:
        graph = make_graph(
            [("a", "start"), ("b", "start"), ("c", "string_concat"), ("d", "print")],
            [("b", "c"), ("a", "c"), ("c", "d"), ("a", "d")],
        )
        plan = resolve(graph)
        for nid in graph.node_ids():
            assert plan.inputs[nid] == [f"{e.source}_out" for e in graph.incoming_edges(nid)]

    def test_output_node_has_no_outgoing(self, chain_graph) -> None:
        plan = resolve(chain_graph)
        assert not chain_graph.has_outgoing(plan.output_node)
        assert all(chain_graph.has_outgoing(n) for n in plan.order[:-1])
