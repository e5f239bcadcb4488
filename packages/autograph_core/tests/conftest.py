"""Shared pytest fixtures for autograph_core tests."""

from __future__ import annotations

import pytest

from autograph_core.graph.compiler import FlowCompiler
from autograph_core.graph.flow_spec import FlowGraph

from helpers import make_graph


@pytest.fixture
def compiler() -> FlowCompiler:
    return FlowCompiler()


@pytest.fixture
def chain_graph() -> FlowGraph:
    """A -> B -> C linear chain."""
    return make_graph(
        [("A", "start"), ("B", "string_upper"), ("C", "print")],
        [("A", "B"), ("B", "C")],
    )
