"""autograph_core.graph -- flow graph compilation.

Lowers an editor flow graph to program text for the HLX interpreter.

Modules
-------
flow_spec        FlowGraph / FlowNode / FlowEdge Pydantic models
operators        OperatorDef + the operator catalog (OPERATOR_REGISTRY)
emit             Literal, binding and config-reading helpers for generators
resolver         Validation, topological order, per-node inputs, output node
compiler         FlowCompiler: validate -> resolve -> emit -> finalize
introspection    Deterministic explanation of a compiled flow
templates        Pre-built flows from data/flow_templates.yaml
runner           ExecutionBackend protocol + run_flow
"""

from autograph_core.graph.flow_spec import (
    FlowEdge,
    FlowGraph,
    FlowNode,
    Position,
)
from autograph_core.graph.operators import (
    OPERATOR_REGISTRY,
    OperatorDef,
    all_operators,
    default_config,
    get_operator,
    operators_by_category,
)
from autograph_core.graph.resolver import ResolvedGraph, resolve
from autograph_core.graph.compiler import (
    CompiledProgram,
    CompileStage,
    FlowCompiler,
    compile_flow,
)
from autograph_core.graph.introspection import explain_program
from autograph_core.graph.templates import (
    FlowTemplate,
    get_template,
    list_templates,
    load_templates,
)
from autograph_core.graph.runner import ExecutionBackend, run_flow, run_source

__all__ = [
    "FlowEdge",
    "FlowGraph",
    "FlowNode",
    "Position",
    "OPERATOR_REGISTRY",
    "OperatorDef",
    "all_operators",
    "default_config",
    "get_operator",
    "operators_by_category",
    "ResolvedGraph",
    "resolve",
    "CompiledProgram",
    "CompileStage",
    "FlowCompiler",
    "compile_flow",
    "explain_program",
    "FlowTemplate",
    "get_template",
    "list_templates",
    "load_templates",
    "ExecutionBackend",
    "run_flow",
    "run_source",
]
