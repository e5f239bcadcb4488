"""autograph_core.graph.emit
===========================

Small text helpers shared by operator code generators.

Generators return unindented statement lines; the compiler owns indentation
and the surrounding program construct.  Configuration readers never raise:
a missing or mistyped field yields the caller's default.
"""

from __future__ import annotations

import json
import math
import re
from decimal import Decimal
from typing import Any, List, Optional, Sequence

NULL = "null"

# Parameter name of the entry function; the start operator binds it.
INPUT_NAME = "input"

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def is_identifier(name: str) -> bool:
    """True if ``name`` can prefix a variable in the target language."""
    return bool(_IDENTIFIER.fullmatch(name))


def out_var(node_id: str) -> str:
    """Name of the variable a node publishes its result under."""
    return f"{node_id}_out"


def let(name: str, expr: str) -> str:
    return f"let {name} = {expr};"


def bind_out(node_id: str, expr: str) -> str:
    return let(out_var(node_id), expr)


def comment(text: str) -> str:
    # Comments are single-line in the target language.
    return "// " + " ".join(str(text).splitlines())


def call(fn: str, *args: str) -> str:
    return f"{fn}({', '.join(args)})"


def quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def _float_text(value: float) -> str:
    # Positional notation only; the target language has no exponent literals.
    text = repr(value)
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
    return text if "." in text else text + ".0"


def literal(value: Any) -> str:
    """Render a JSON-like value as a target-language literal."""
    if value is None:
        return NULL
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return NULL
        return _float_text(value)
    if isinstance(value, str):
        return quote(value)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(literal(v) for v in value) + "]"
    if isinstance(value, dict):
        items = ", ".join(
            f"{quote(str(k))}: {literal(v)}" for k, v in value.items()
        )
        return "{" + items + "}"
    return quote(str(value))


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


def input_at(inputs: Sequence[str], index: int, default: str) -> str:
    if 0 <= index < len(inputs):
        return inputs[index]
    return default


def first_input(inputs: Sequence[str], default: str = NULL) -> str:
    return input_at(inputs, 0, default)


# ---------------------------------------------------------------------------
# Configuration readers
# ---------------------------------------------------------------------------


def _field(config: Any, key: str) -> Any:
    if isinstance(config, dict):
        return config.get(key)
    return None


def cfg_str(config: Any, key: str, default: str) -> str:
    value = _field(config, key)
    return value if isinstance(value, str) else default


def cfg_int(config: Any, key: str, default: int) -> int:
    value = _field(config, key)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return default


def cfg_uint(config: Any, key: str, default: int) -> int:
    value = cfg_int(config, key, default)
    return value if value >= 0 else default


def cfg_float(config: Any, key: str, default: float) -> float:
    value = _field(config, key)
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)) and math.isfinite(value):
        return float(value)
    return default


def cfg_list(config: Any, key: str) -> Optional[List[Any]]:
    value = _field(config, key)
    return list(value) if isinstance(value, list) else None
