"""autograph_core.graph.compiler
===============================

FlowCompiler: validate -> resolve -> emit -> finalize.

Compilation pipeline
--------------------
1. **Validate:**  unique node ids, every edge endpoint exists.
2. **Resolve:**   topological order, per-node inputs, output node.
3. **Emit:**      one statement block per node via the operator catalog.
4. **Finalize:**  return statement plus the program header/footer.

Only steps 1-2 can fail, and only with a ``StructuralGraphError``.  Emission
never fails: an unknown operator becomes a diagnostic comment and a null
binding, so any acyclic graph without dangling edges yields a program.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from autograph_core.config import CompilerConfig
from autograph_core.errors import StructuralGraphError
from autograph_core.graph.emit import (
    INPUT_NAME,
    NULL,
    bind_out,
    comment,
    is_identifier,
    out_var,
)
from autograph_core.graph.flow_spec import FlowGraph, FlowNode
from autograph_core.graph.operators import get_operator
from autograph_core.graph.resolver import ResolvedGraph, resolve

logger = logging.getLogger(__name__)


class CompileStage(str, Enum):
    """Stage a compilation is in (or stopped at)."""

    init = "init"
    resolving = "resolving"
    emitting = "emitting"
    finalizing = "finalizing"
    done = "done"
    failed = "failed"


@dataclass
class CompiledProgram:
    """Output of ``FlowCompiler.compile()``.

    Attributes
    ----------
    source : str
        Complete program text.
    order : list[str]
        Node ids in the order their blocks were emitted.
    inputs : dict[str, list[str]]
        Resolved producer variables per node.
    output_node : str | None
        Node whose result the program returns (``None`` returns null).
    warnings : list[str]
        Non-fatal diagnostics: unknown operators and node ids that are not
        valid identifiers.
    """

    source: str
    order: List[str] = field(default_factory=list)
    inputs: Dict[str, List[str]] = field(default_factory=dict)
    output_node: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    n_edges: int = 0

    @property
    def sha256(self) -> str:
        return hashlib.sha256(self.source.encode("utf-8")).hexdigest()

    def explain(self) -> str:
        """Return a deterministic text explanation of the compiled flow."""
        from autograph_core.graph.introspection import explain_program

        return explain_program(self)


class FlowCompiler:
    """Compile a FlowGraph into program text.

    The compiler holds only its configuration; graphs are borrowed for a
    single call and nothing is cached between calls.

    Usage
    -----
    >>> compiler = FlowCompiler()
    >>> program = compiler.compile(graph)
    >>> print(program.source)
    """

    def __init__(self, config: Optional[CompilerConfig] = None) -> None:
        self.config = config or CompilerConfig()

    def compile(self, graph: FlowGraph) -> CompiledProgram:
        """Full compilation pipeline.

        Parameters
        ----------
        graph : FlowGraph
            The flow to compile.  Must not be mutated during the call.

        Returns
        -------
        CompiledProgram
            Program text plus the plan it was emitted from.

        Raises
        ------
        StructuralGraphError
            DuplicateNodeIdError, DanglingEdgeError or CyclicGraphError.
            No partial program is produced.
        """
        logger.debug(f"Stage: {CompileStage.init.value} -> {CompileStage.resolving.value}")
        try:
            plan = resolve(graph)
        except StructuralGraphError as exc:
            logger.debug(f"Stage: {CompileStage.failed.value} ({exc})")
            raise

        logger.debug(f"Stage: {CompileStage.emitting.value}")
        warnings: List[str] = []
        blocks: List[str] = []
        for node_id in plan.order:
            blocks.append(self._emit_node(graph.get_node(node_id), plan.inputs[node_id], warnings))

        logger.debug(f"Stage: {CompileStage.finalizing.value}")
        source = self._finalize(blocks, plan)

        logger.info(
            f"Compiled flow: {len(plan.order)} nodes, {len(graph.edges)} edges, "
            f"output={plan.output_node!r}, {len(warnings)} warnings"
        )
        logger.debug(f"Stage: {CompileStage.done.value}")

        return CompiledProgram(
            source=source,
            order=plan.order,
            inputs=plan.inputs,
            output_node=plan.output_node,
            warnings=warnings,
            n_edges=len(graph.edges),
        )

    # ------------------------------------------------------------------
    # Emission helpers
    # ------------------------------------------------------------------

    def _emit_node(self, node: FlowNode, inputs: List[str], warnings: List[str]) -> str:
        if not is_identifier(node.id):
            message = (
                f"Node id {node.id!r} is not a valid identifier; "
                f"{out_var(node.id)!r} will not parse"
            )
            logger.warning(message)
            warnings.append(message)
        op = get_operator(node.type_name)
        if op is None:
            message = f"Unknown node type: {node.type_name}"
            logger.warning(f"Node '{node.id}': {message}")
            warnings.append(f"{node.id}: {message}")
            text = comment(message) + "\n" + bind_out(node.id, NULL) + "\n"
        else:
            text = op.emit(node.id, node.config, inputs)
        return self._indent(text)

    def _indent(self, text: str) -> str:
        pad = self.config.indent
        lines = text.splitlines()
        return "".join(f"{pad}{line}\n" if line else "\n" for line in lines)

    def _finalize(self, blocks: List[str], plan: ResolvedGraph) -> str:
        cfg = self.config
        result = out_var(plan.output_node) if plan.output_node is not None else NULL

        parts = [
            f"program {cfg.program_name} {{\n\n",
            f"fn {cfg.entry_name}({INPUT_NAME}) {{\n",
        ]
        parts.extend(blocks)
        parts.append(f"{cfg.indent}return {result};\n")
        parts.append("}\n\n")
        parts.append("}\n")
        return "".join(parts)

    # ------------------------------------------------------------------
    # Utility: build from dict (for JSON/YAML payloads)
    # ------------------------------------------------------------------

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> FlowGraph:
        """Parse a dict (e.g. an editor payload) into a FlowGraph.

        Payloads look like::

            nodes:
              - id: http1
                type_name: http_get
                config: {url: "https://api.github.com/users/octocat"}
            edges:
              - source: http1
                target: json1
        """
        return FlowGraph.model_validate(data)


def compile_flow(graph: FlowGraph, config: Optional[CompilerConfig] = None) -> str:
    """Compile ``graph`` and return only the program text."""
    return FlowCompiler(config).compile(graph).source
