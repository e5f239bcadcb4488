"""autograph_core.graph.introspection
====================================

Deterministic text explanation of a compiled flow: emission order, the
inputs bound to every node, the returned node and any diagnostics.

Functions
---------
explain_program   Produce a multi-line text summary of a CompiledProgram.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from autograph_core.graph.compiler import CompiledProgram


def explain_program(program: "CompiledProgram") -> str:
    """Return a deterministic text explanation of a compiled flow.

    Parameters
    ----------
    program : CompiledProgram
        Result of ``FlowCompiler.compile()``.

    Returns
    -------
    str
        Multi-line human-readable explanation.
    """
    lines: list[str] = []
    lines.append("Compiled flow")
    lines.append("=============")
    lines.append("")

    lines.append("Summary")
    lines.append("-------")
    lines.append(f"  Nodes:       {len(program.order)}")
    lines.append(f"  Edges:       {program.n_edges}")
    lines.append(f"  Output:      {program.output_node or '(null)'}")
    lines.append(f"  Warnings:    {len(program.warnings)}")
    lines.append(f"  sha256:      {program.sha256}")
    lines.append("")

    lines.append("Emission order (topological)")
    lines.append("----------------------------")
    for i, node_id in enumerate(program.order):
        inputs = program.inputs.get(node_id, [])
        bound = ", ".join(inputs) if inputs else "-"
        lines.append(f"  {i + 1}. [{node_id}] inputs: {bound}")
    lines.append("")

    if program.warnings:
        lines.append("Warnings")
        lines.append("--------")
        for warning in program.warnings:
            lines.append(f"  {warning}")
        lines.append("")

    return "\n".join(lines)
