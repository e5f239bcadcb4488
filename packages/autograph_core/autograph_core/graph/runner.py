"""autograph_core.graph.runner
=============================

Hand-off from compiled program text to an external interpreter.

The interpreter is reached only through the ``ExecutionBackend`` protocol:
parse the text, lower the syntax tree, execute with one input value.  This
module never looks inside what those steps return.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol, runtime_checkable

from autograph_core.config import CompilerConfig
from autograph_core.errors import ExecutionError
from autograph_core.graph.compiler import FlowCompiler
from autograph_core.graph.flow_spec import FlowGraph

logger = logging.getLogger(__name__)


@runtime_checkable
class ExecutionBackend(Protocol):
    """Structural interface of the downstream interpreter."""

    def parse(self, text: str) -> Any:
        ...

    def lower(self, ast: Any) -> Any:
        ...

    def execute(self, ir: Any, input: Any) -> Any:
        ...


def run_source(source: str, payload: Any, backend: ExecutionBackend) -> Any:
    """Parse, lower and execute already-compiled program text.

    Raises
    ------
    ExecutionError
        Wrapping whichever collaborator step failed (``stage`` is one of
        ``parse``, ``lower``, ``execute``).
    """
    try:
        ast = backend.parse(source)
    except Exception as exc:
        raise ExecutionError("parse", exc) from exc
    try:
        ir = backend.lower(ast)
    except Exception as exc:
        raise ExecutionError("lower", exc) from exc
    try:
        return backend.execute(ir, payload)
    except Exception as exc:
        raise ExecutionError("execute", exc) from exc


def run_flow(
    graph: FlowGraph,
    payload: Any,
    backend: ExecutionBackend,
    config: Optional[CompilerConfig] = None,
) -> Any:
    """Compile ``graph`` and run it on ``payload``.

    Structural graph errors propagate unchanged; nothing reaches the
    backend for a graph that does not compile.
    """
    program = FlowCompiler(config).compile(graph)
    logger.debug(f"Running compiled flow ({program.sha256[:12]})")
    try:
        return run_source(program.source, payload, backend)
    except ExecutionError as exc:
        logger.error(f"Flow execution failed: {exc}")
        raise
