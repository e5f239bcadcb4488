"""autograph_core.graph.templates
================================

Pre-built workflow templates, stored in ``data/flow_templates.yaml``.

Every call to ``get_template`` returns a new FlowGraph, so callers (the
editor, tests) can modify what they get without affecting later calls.
"""

from __future__ import annotations

import copy
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field

from autograph_core.errors import TemplateNotFoundError
from autograph_core.graph.flow_spec import FlowEdge, FlowGraph, FlowNode

logger = logging.getLogger(__name__)

TEMPLATES_PATH = Path(__file__).resolve().parent / "data" / "flow_templates.yaml"


class FlowTemplate(BaseModel):
    """A named flow plus the metadata shown in the template picker."""

    model_config = ConfigDict(extra="forbid")

    key: str
    name: str
    description: str = ""
    category: str = "General"
    nodes: List[FlowNode] = Field(default_factory=list)
    edges: List[FlowEdge] = Field(default_factory=list)

    def create(self) -> FlowGraph:
        return FlowGraph(
            nodes=copy.deepcopy(self.nodes),
            edges=copy.deepcopy(self.edges),
        )


@lru_cache(maxsize=None)
def _load_raw(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    if data is None:
        return {}
    return data.get("templates", {}) or {}


def load_templates(path: Optional[Union[str, Path]] = None) -> Dict[str, FlowTemplate]:
    """Load and validate every template, keyed by template key.

    Parameters
    ----------
    path : str or Path, optional
        Template YAML file (default: the bundled ``flow_templates.yaml``).
    """
    source = str(Path(path) if path is not None else TEMPLATES_PATH)
    raw = _load_raw(source)
    templates: Dict[str, FlowTemplate] = {}
    for key, body in raw.items():
        templates[key] = FlowTemplate.model_validate({"key": key, **copy.deepcopy(body)})
    logger.debug(f"Loaded {len(templates)} templates from {source}")
    return templates


def list_templates(path: Optional[Union[str, Path]] = None) -> List[FlowTemplate]:
    """Templates in file order."""
    return list(load_templates(path).values())


def get_template(key: str, path: Optional[Union[str, Path]] = None) -> FlowGraph:
    """Return a fresh FlowGraph for template ``key``.

    Raises
    ------
    TemplateNotFoundError
        If no template has that key.
    """
    templates = load_templates(path)
    if key not in templates:
        raise TemplateNotFoundError(key, list(templates))
    return templates[key].create()
