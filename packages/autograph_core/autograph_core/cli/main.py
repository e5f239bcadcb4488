"""autograph_core.cli.main

Entry point for `autograph` CLI.

Commands:
- autograph compile flow.json [--out program.hlxa] [--config compiler.yaml]
- autograph explain flow.json
- autograph operators [--category Math] [--json]
- autograph templates
- autograph template <key>
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import ValidationError

from autograph_core.config import load_config
from autograph_core.errors import (
    ConfigError,
    StructuralGraphError,
    TemplateNotFoundError,
)
from autograph_core.graph.compiler import FlowCompiler
from autograph_core.graph.flow_spec import FlowGraph
from autograph_core.graph.operators import all_operators
from autograph_core.graph.templates import get_template, list_templates

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_STRUCTURAL = 2


def _read_json(p: Path):
    return json.loads(p.read_text(encoding="utf-8"))


def _read_flow(p: Path) -> FlowGraph:
    """Read a flow file: ``.json`` as JSON, anything else as YAML."""
    if p.suffix.lower() == ".json":
        data = _read_json(p)
    else:
        data = yaml.safe_load(p.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{p}: expected a mapping with 'nodes' and 'edges'")
    return FlowGraph.from_dict(data)


def _compiler(args) -> FlowCompiler:
    return FlowCompiler(load_config(getattr(args, "config", None)))


def cmd_compile(args) -> int:
    program = _compiler(args).compile(_read_flow(Path(args.flow)))
    if args.out:
        out = Path(args.out)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(program.source, encoding="utf-8")
        logger.info(f"Program written to {out}")
    else:
        sys.stdout.write(program.source)
    for warning in program.warnings:
        print(f"warning: {warning}", file=sys.stderr)
    return EXIT_OK


def cmd_explain(args) -> int:
    program = _compiler(args).compile(_read_flow(Path(args.flow)))
    print(program.explain())
    return EXIT_OK


def cmd_operators(args) -> int:
    ops = [op for op in all_operators() if args.category in (None, op.category)]
    if args.json:
        print(json.dumps([op.describe() for op in ops], indent=2))
        return EXIT_OK
    for op in ops:
        print(f"{op.name:<16} {op.category:<8} {op.description}")
    return EXIT_OK


def cmd_templates(args) -> int:
    for tpl in list_templates():
        print(f"{tpl.key:<18} {tpl.category:<6} {tpl.name} -- {tpl.description}")
    return EXIT_OK


def cmd_template(args) -> int:
    graph = get_template(args.key)
    payload: Dict[str, Any] = graph.to_dict()
    print(json.dumps(payload, indent=2))
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="autograph", description="Autograph flow compiler.")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    p_compile = sub.add_parser("compile", help="Compile a flow to program text")
    p_compile.add_argument("flow", help="Path to flow file (.json or .yaml)")
    p_compile.add_argument("--out", type=str, default=None, help="Write program here instead of stdout")
    p_compile.add_argument("--config", type=str, default=None, help="Compiler config YAML")
    p_compile.set_defaults(func=cmd_compile)

    p_explain = sub.add_parser("explain", help="Summarize how a flow compiles")
    p_explain.add_argument("flow", help="Path to flow file (.json or .yaml)")
    p_explain.add_argument("--config", type=str, default=None, help="Compiler config YAML")
    p_explain.set_defaults(func=cmd_explain)

    p_ops = sub.add_parser("operators", help="List the operator catalog")
    p_ops.add_argument("--category", type=str, default=None, help="Only this category")
    p_ops.add_argument("--json", action="store_true", help="JSON output with default configs")
    p_ops.set_defaults(func=cmd_operators)

    p_tpls = sub.add_parser("templates", help="List built-in flow templates")
    p_tpls.set_defaults(func=cmd_templates)

    p_tpl = sub.add_parser("template", help="Print a template's flow as JSON")
    p_tpl.add_argument("key", help="Template key (see `autograph templates`)")
    p_tpl.set_defaults(func=cmd_template)

    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(message)s",
    )
    try:
        return args.func(args)
    except StructuralGraphError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_STRUCTURAL
    except (ConfigError, TemplateNotFoundError, ValidationError, ValueError,
            OSError, yaml.YAMLError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
