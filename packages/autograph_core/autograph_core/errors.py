"""autograph_core.errors
=======================

Typed exceptions for graph compilation and execution boundaries.

Structural errors are detected before any code is emitted and always carry
the identifiers of the offending node or edge.  Unknown operators are not
errors at all: they are reported inside the emitted program.
"""

from __future__ import annotations

from typing import Any, List, Optional


class AutographError(Exception):
    """Base autograph error."""


class StructuralGraphError(AutographError):
    """Raised when a flow graph cannot be lowered to a program."""


# Name used by callers that only care that compilation failed.
GraphCompilationError = StructuralGraphError


class DuplicateNodeIdError(StructuralGraphError):
    def __init__(self, node_id: str):
        super().__init__(f"Duplicate node id: '{node_id}'")
        self.node_id = node_id


class DanglingEdgeError(StructuralGraphError):
    def __init__(self, missing_id: str, edge_index: int, edge: Any = None):
        super().__init__(
            f"Edge #{edge_index} references missing node '{missing_id}'"
        )
        self.missing_id = missing_id
        self.edge_index = edge_index
        self.edge = edge


class CyclicGraphError(StructuralGraphError):
    def __init__(self, node_id: str, cycle: Optional[List[str]] = None):
        self.node_id = node_id
        self.cycle = list(cycle or [node_id])
        path = " -> ".join(self.cycle + [self.cycle[0]])
        super().__init__(
            f"Graph contains a cycle through node '{node_id}': {path}"
        )


class TemplateNotFoundError(AutographError, KeyError):
    def __init__(self, name: str, available: Optional[List[str]] = None):
        self.name = name
        self.available = sorted(available or [])
        super().__init__(
            f"Unknown template '{name}'. Available: {self.available}"
        )

    def __str__(self) -> str:
        return self.args[0]


class ConfigError(AutographError):
    pass


class ExecutionError(AutographError):
    """A failure reported by the external parse/lower/execute collaborator."""

    def __init__(self, stage: str, cause: BaseException):
        super().__init__(f"{stage.capitalize()} error: {cause}")
        self.stage = stage
        self.cause = cause
