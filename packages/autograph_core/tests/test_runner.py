"""Tests for handing compiled programs to an execution backend."""

from __future__ import annotations

from typing import Any, List, Optional

import pytest

from autograph_core.errors import CyclicGraphError, ExecutionError
from autograph_core.graph.compiler import compile_flow
from autograph_core.graph.runner import ExecutionBackend, run_flow, run_source

from helpers import make_graph


class FakeBackend:
    """Records each call; optionally fails at one stage."""

    def __init__(self, fail_at: Optional[str] = None) -> None:
        self.fail_at = fail_at
        self.calls: List[str] = []
        self.source: Optional[str] = None

    def _step(self, stage: str) -> None:
        self.calls.append(stage)
        if stage == self.fail_at:
            raise RuntimeError(f"{stage} exploded")

    def parse(self, text: str) -> Any:
        self._step("parse")
        self.source = text
        return ("ast", text)

    def lower(self, ast: Any) -> Any:
        self._step("lower")
        return ("ir", ast)

    def execute(self, ir: Any, input: Any) -> Any:
        self._step("execute")
        return {"ir": ir, "input": input}


class TestRunSource:
    def test_backend_satisfies_protocol(self) -> None:
        assert isinstance(FakeBackend(), ExecutionBackend)

    def test_pipeline_order_and_result(self) -> None:
        backend = FakeBackend()
        result = run_source("program p {}", 42, backend)
        assert backend.calls == ["parse", "lower", "execute"]
        assert result == {"ir": ("ir", ("ast", "program p {}")), "input": 42}

    @pytest.mark.parametrize("stage", ["parse", "lower", "execute"])
    def test_failure_wrapped_with_stage(self, stage: str) -> None:
        backend = FakeBackend(fail_at=stage)
        with pytest.raises(ExecutionError, match=f"{stage.capitalize()} error") as info:
            run_source("x", None, backend)
        assert info.value.stage == stage
        assert isinstance(info.value.cause, RuntimeError)
        assert backend.calls[-1] == stage


class TestRunFlow:
    def test_runs_compiled_text(self, chain_graph) -> None:
        backend = FakeBackend()
        result = run_flow(chain_graph, "hello", backend)
        assert backend.source == compile_flow(chain_graph)
        assert result["input"] == "hello"

    def test_structural_error_never_reaches_backend(self) -> None:
        backend = FakeBackend()
        graph = make_graph([("a", "print"), ("b", "print")], [("a", "b"), ("b", "a")])
        with pytest.raises(CyclicGraphError):
            run_flow(graph, None, backend)
        assert backend.calls == []

    def test_execution_failure_propagates(self, chain_graph, caplog) -> None:
        with pytest.raises(ExecutionError) as info:
            run_flow(chain_graph, None, FakeBackend(fail_at="execute"))
        assert info.value.stage == "execute"
        assert "Flow execution failed" in caplog.text
