"""autograph_core.graph.operators
================================

Operator catalog: every node type the editor can place, its metadata,
default configuration and code generator.

Each operator is an immutable ``OperatorDef``.  Operators are registered by
``name`` in OPERATOR_REGISTRY and looked up by the FlowCompiler for every
node it lowers.

Design rules
------------
* Generators are pure: ``(node_id, config, inputs) -> text``.  No I/O, no
  global state, same text for the same arguments.
* Generators are total.  Every configuration field read falls back to the
  documented default when missing or mistyped; a non-mapping configuration
  behaves like ``{}``.
* The result is always bound to ``<node_id>_out``.  Scratch variables share
  the ``<node_id>_`` prefix.
* ``inputs`` holds producer variables in incoming-edge order.  Single-input
  operators read ``inputs[0]``; binary operators also read ``inputs[1]``.
* Operations the runtime has no builtin for emit a comment and a neutral
  binding so downstream nodes still compile.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from autograph_core.graph.emit import (
    INPUT_NAME,
    NULL,
    bind_out,
    call,
    cfg_float,
    cfg_int,
    cfg_list,
    cfg_str,
    cfg_uint,
    comment,
    first_input,
    input_at,
    let,
    literal,
    quote,
)

Generator = Callable[[str, Any, Sequence[str]], str]

DEFAULT_URL = "https://example.com"


# ---------------------------------------------------------------------------
# OperatorDef
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OperatorDef:
    """A registered node type.

    Attributes
    ----------
    name : str
        Catalog key, matched against ``FlowNode.type_name``.
    category : str
        Palette grouping (presentation only).
    description : str
        One-line help text (presentation only).
    default_config : callable
        Zero-argument factory returning a fresh default configuration.
    generate : callable
        ``(node_id, config, inputs) -> str`` emitting the node's statements.
    """

    name: str
    category: str
    description: str
    default_config: Callable[[], Any]
    generate: Generator

    def emit(self, node_id: str, config: Any, inputs: Sequence[str]) -> str:
        return self.generate(node_id, config, list(inputs))

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "default_config": self.default_config(),
        }


def _lines(*statements: str) -> str:
    return "\n".join(statements) + "\n"


def _empty() -> Dict[str, Any]:
    return {}


def _defaults(**fields: Any) -> Callable[[], Dict[str, Any]]:
    def factory() -> Dict[str, Any]:
        # Deep enough for the list-valued defaults used here.
        return {k: list(v) if isinstance(v, list) else v for k, v in fields.items()}

    return factory


def _unsupported(node_id: str, what: str, fallback: str) -> str:
    return _lines(
        comment(f"{what} is not supported by the runtime yet"),
        bind_out(node_id, fallback),
    )


# =========================================================================
# Control
# =========================================================================


def _gen_start(node_id, config, inputs):
    return _lines(bind_out(node_id, INPUT_NAME))


def _gen_print(node_id, config, inputs):
    value = first_input(inputs, NULL)
    return _lines(call("print", value) + ";", bind_out(node_id, value))


START = OperatorDef("start", "Control", "Entry point for workflow", _empty, _gen_start)
PRINT = OperatorDef("print", "Debug", "Print value to console", _empty, _gen_print)


# =========================================================================
# HTTP
# =========================================================================


def _http(method: Optional[str], with_body: bool) -> Generator:
    """Build a generator for an HTTP node.

    ``method=None`` reads the method from the node configuration.
    """

    def generate(node_id, config, inputs):
        url = cfg_str(config, "url", DEFAULT_URL)
        verb = method or cfg_str(config, "method", "GET").upper()
        body = first_input(inputs, NULL) if with_body else NULL
        expr = call("http_request", quote(verb), quote(url), body, "{}")
        return _lines(bind_out(node_id, expr))

    return generate


HTTP_GET = OperatorDef(
    "http_get", "HTTP", "HTTP GET request",
    _defaults(url=DEFAULT_URL), _http("GET", with_body=False),
)
HTTP_POST = OperatorDef(
    "http_post", "HTTP", "HTTP POST request",
    _defaults(url=DEFAULT_URL), _http("POST", with_body=True),
)
HTTP_PUT = OperatorDef(
    "http_put", "HTTP", "HTTP PUT request",
    _defaults(url=DEFAULT_URL), _http("PUT", with_body=True),
)
HTTP_DELETE = OperatorDef(
    "http_delete", "HTTP", "HTTP DELETE request",
    _defaults(url=DEFAULT_URL), _http("DELETE", with_body=False),
)
HTTP_REQUEST = OperatorDef(
    "http_request", "HTTP", "Custom HTTP request",
    _defaults(method="GET", url=DEFAULT_URL), _http(None, with_body=True),
)


# =========================================================================
# Data: shared shapes
# =========================================================================


def _unary(builtin: str, fallback: str) -> Generator:
    """``let id_out = builtin(in0);`` with ``fallback`` when unconnected."""

    def generate(node_id, config, inputs):
        return _lines(bind_out(node_id, call(builtin, first_input(inputs, fallback))))

    return generate


def _keyed(builtin: str, fallback: str) -> Generator:
    """``let id_out = builtin(in0, "key");``"""

    def generate(node_id, config, inputs):
        key = cfg_str(config, "key", "field")
        return _lines(
            bind_out(node_id, call(builtin, first_input(inputs, fallback), quote(key)))
        )

    return generate


def _gen_set(node_id, config, inputs):
    key = cfg_str(config, "key", "field")
    value = cfg_str(config, "value", "")
    target = first_input(inputs, "{}")
    return _lines(bind_out(node_id, call("set", target, quote(key), quote(value))))


# =========================================================================
# Data: JSON
# =========================================================================


JSON_PARSE = OperatorDef(
    "json_parse", "Data", "Parse JSON string", _empty, _unary("json_parse", NULL),
)
JSON_STRINGIFY = OperatorDef(
    "json_stringify", "Data", "Convert value to JSON string",
    _empty, _unary("json_stringify", NULL),
)
JSON_GET = OperatorDef(
    "json_get", "Data", "Get value from JSON object",
    _defaults(key="field"), _keyed("get", NULL),
)
JSON_SET = OperatorDef(
    "json_set", "Data", "Set value in JSON object",
    _defaults(key="field", value=""), _gen_set,
)


# =========================================================================
# Data: strings
# =========================================================================


def _gen_string_concat(node_id, config, inputs):
    sep = quote(cfg_str(config, "separator", ""))
    if len(inputs) < 2:
        return _lines(bind_out(node_id, call("concat", first_input(inputs, '""'), sep)))
    # Folded left to right: concat(concat(in0, sep), in1), then in2 ...
    expr = inputs[0]
    for extra in inputs[1:]:
        expr = call("concat", call("concat", expr, sep), extra)
    return _lines(bind_out(node_id, expr))


def _gen_string_split(node_id, config, inputs):
    delimiter = cfg_str(config, "delimiter", ",")
    return _unsupported(node_id, f"string_split on {quote(delimiter)}", "[]")


def _gen_string_replace(node_id, config, inputs):
    return _unsupported(node_id, "string_replace", first_input(inputs, '""'))


STRING_CONCAT = OperatorDef(
    "string_concat", "Data", "Concatenate strings",
    _defaults(separator=""), _gen_string_concat,
)
STRING_UPPER = OperatorDef(
    "string_upper", "Data", "Convert to uppercase", _empty, _unary("to_upper", '""'),
)
STRING_LOWER = OperatorDef(
    "string_lower", "Data", "Convert to lowercase", _empty, _unary("to_lower", '""'),
)
STRING_TRIM = OperatorDef(
    "string_trim", "Data", "Trim whitespace", _empty, _unary("trim", '""'),
)
STRING_SPLIT = OperatorDef(
    "string_split", "Data", "Split string into array",
    _defaults(delimiter=","), _gen_string_split,
)
STRING_REPLACE = OperatorDef(
    "string_replace", "Data", "Replace substring",
    _defaults(find="", replace=""), _gen_string_replace,
)
STRING_LENGTH = OperatorDef(
    "string_length", "Data", "Get string length", _empty, _unary("strlen", '""'),
)


# =========================================================================
# Data: arrays
# =========================================================================


def _gen_array_map(node_id, config, inputs):
    return _unsupported(node_id, "array_map (needs lambdas)", "[]")


def _gen_array_filter(node_id, config, inputs):
    return _unsupported(node_id, "array_filter (needs lambdas)", "[]")


def _gen_array_reduce(node_id, config, inputs):
    initial = config.get("initial", 0) if isinstance(config, dict) else 0
    return _unsupported(node_id, "array_reduce (needs lambdas)", literal(initial))


def _gen_array_slice(node_id, config, inputs):
    start = cfg_int(config, "start", 0)
    end = cfg_int(config, "end", 10)
    expr = call("arr_slice", first_input(inputs, "[]"), str(start), str(end))
    return _lines(bind_out(node_id, expr))


def _gen_array_concat(node_id, config, inputs):
    expr = call("arr_concat", input_at(inputs, 0, "[]"), input_at(inputs, 1, "[]"))
    return _lines(bind_out(node_id, expr))


def _gen_array_sort(node_id, config, inputs):
    order = cfg_str(config, "order", "asc")
    if order not in ("asc", "desc"):
        order = "asc"
    return _unsupported(node_id, f"array_sort ({order})", first_input(inputs, "[]"))


ARRAY_MAP = OperatorDef(
    "array_map", "Data", "Map function over array",
    _defaults(function=""), _gen_array_map,
)
ARRAY_FILTER = OperatorDef(
    "array_filter", "Data", "Filter array elements",
    _defaults(condition=""), _gen_array_filter,
)
ARRAY_REDUCE = OperatorDef(
    "array_reduce", "Data", "Reduce array to single value",
    _defaults(initial=0), _gen_array_reduce,
)
ARRAY_SLICE = OperatorDef(
    "array_slice", "Data", "Slice array",
    _defaults(start=0, end=10), _gen_array_slice,
)
ARRAY_CONCAT = OperatorDef(
    "array_concat", "Data", "Concatenate arrays", _empty, _gen_array_concat,
)
ARRAY_SORT = OperatorDef(
    "array_sort", "Data", "Sort array", _defaults(order="asc"), _gen_array_sort,
)
ARRAY_LENGTH = OperatorDef(
    "array_length", "Data", "Get array length", _empty, _unary("len", "[]"),
)


# =========================================================================
# Data: objects
# =========================================================================


OBJECT_GET = OperatorDef(
    "object_get", "Data", "Get object property",
    _defaults(key="field"), _keyed("get", "{}"),
)
OBJECT_SET = OperatorDef(
    "object_set", "Data", "Set object property",
    _defaults(key="field", value=""), _gen_set,
)
OBJECT_KEYS = OperatorDef(
    "object_keys", "Data", "Get object keys", _empty, _unary("keys", "{}"),
)
OBJECT_VALUES = OperatorDef(
    "object_values", "Data", "Get object values", _empty, _unary("values", "{}"),
)
OBJECT_HAS_KEY = OperatorDef(
    "object_has_key", "Data", "Check if object has key",
    _defaults(key="field"), _keyed("has_key", "{}"),
)


# =========================================================================
# Files
# =========================================================================


def _path_op(builtin: str, default_path: str, content_fallback: Optional[str] = None) -> Generator:
    """File operator on ``config.path``; writers also pass ``in0``."""

    def generate(node_id, config, inputs):
        args = [quote(cfg_str(config, "path", default_path))]
        if content_fallback is not None:
            args.append(first_input(inputs, content_fallback))
        return _lines(bind_out(node_id, call(builtin, *args)))

    return generate


def _file_op(name: str, description: str, builtin: str, default_path: str,
             content_fallback: Optional[str] = None) -> OperatorDef:
    return OperatorDef(
        name, "Files", description,
        _defaults(path=default_path),
        _path_op(builtin, default_path, content_fallback),
    )


FILE_READ = _file_op("file_read", "Read file contents", "read_file", "file.txt")
FILE_WRITE = _file_op("file_write", "Write file contents", "write_file", "file.txt", '""')
FILE_EXISTS = _file_op("file_exists", "Check if file exists", "file_exists", "file.txt")
FILE_DELETE = _file_op("file_delete", "Delete file", "delete_file", "file.txt")
FILE_LIST = _file_op("file_list", "List files in directory", "list_files", ".")
DIR_CREATE = _file_op("dir_create", "Create directory", "create_dir", "new_dir")
JSON_READ = _file_op("json_read", "Read JSON file", "read_json", "data.json")
JSON_WRITE = _file_op("json_write", "Write JSON file", "write_json", "data.json", NULL)


# =========================================================================
# Math
# =========================================================================


def _number(config: Any, key: str, default: int) -> str:
    value = config.get(key) if isinstance(config, dict) else None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return str(default)
    if isinstance(value, float) and not math.isfinite(value):
        return str(default)
    text = literal(value)
    return f"({text})" if value < 0 else text


def _binary(symbol: str, identity: int) -> Generator:
    """``in0 <symbol> operand``; the operand is ``in1`` when connected,
    otherwise ``config.value``."""

    def generate(node_id, config, inputs):
        left = first_input(inputs, str(identity))
        right = input_at(inputs, 1, _number(config, "value", identity))
        return _lines(bind_out(node_id, f"{left} {symbol} {right}"))

    return generate


MATH_ADD = OperatorDef(
    "math_add", "Math", "Add two numbers", _defaults(value=0), _binary("+", 0),
)
MATH_SUBTRACT = OperatorDef(
    "math_subtract", "Math", "Subtract two numbers", _defaults(value=0), _binary("-", 0),
)
MATH_MULTIPLY = OperatorDef(
    "math_multiply", "Math", "Multiply two numbers", _defaults(value=1), _binary("*", 1),
)
MATH_DIVIDE = OperatorDef(
    "math_divide", "Math", "Divide two numbers", _defaults(value=1), _binary("/", 1),
)
MATH_FLOOR = OperatorDef("math_floor", "Math", "Floor of number", _empty, _unary("floor", "0"))
MATH_CEIL = OperatorDef("math_ceil", "Math", "Ceiling of number", _empty, _unary("ceil", "0"))
MATH_ROUND = OperatorDef("math_round", "Math", "Round number", _empty, _unary("round", "0"))
MATH_SQRT = OperatorDef("math_sqrt", "Math", "Square root", _empty, _unary("sqrt", "0"))


def _gen_random(node_id, config, inputs):
    return _lines(bind_out(node_id, call("random")))


MATH_RANDOM = OperatorDef("math_random", "Math", "Random number (0-1)", _empty, _gen_random)


# =========================================================================
# Type conversion
# =========================================================================


TO_STRING = OperatorDef(
    "to_string", "Convert", "Convert to string", _empty, _unary("to_string", NULL),
)
TO_INT = OperatorDef("to_int", "Convert", "Convert to integer", _empty, _unary("to_int", "0"))
TO_FLOAT = OperatorDef("to_float", "Convert", "Convert to float", _empty, _unary("to_float", "0"))


# =========================================================================
# ML / GPU
# =========================================================================


def _gen_tensor_create(node_id, config, inputs):
    rows = cfg_uint(config, "rows", 2)
    cols = cfg_uint(config, "cols", 2)
    values = cfg_list(config, "values") or []
    tensor = f"{node_id}_t"
    data = f"{node_id}_data"

    statements = [let(tensor, call("tensor_new_2d", str(rows), str(cols)))]
    for i, v in enumerate(values):
        value = cfg_float({"v": v}, "v", 0.0)
        # Slot 2 of a tensor value holds its flat data buffer.
        statements.append(let(data, f"{tensor}[2]"))
        statements.append(f"{data}[{i}] = {literal(value)};")
    statements.append(bind_out(node_id, tensor))
    return _lines(*statements)


def _tensor_binary(builtin: str) -> Generator:
    def generate(node_id, config, inputs):
        if len(inputs) < 2:
            return _lines(
                comment(f"{builtin} needs two tensor inputs, got {len(inputs)}"),
                bind_out(node_id, NULL),
            )
        return _lines(bind_out(node_id, call(builtin, inputs[0], inputs[1])))

    return generate


TENSOR_CREATE = OperatorDef(
    "tensor_create", "ML/GPU", "Create 2D tensor",
    _defaults(rows=2, cols=2, values=[1.0, 0.0, 0.0, 1.0]), _gen_tensor_create,
)
TENSOR_MATMUL = OperatorDef(
    "tensor_matmul", "ML/GPU", "Matrix multiplication", _empty, _tensor_binary("tensor_matmul"),
)
TENSOR_ADD = OperatorDef(
    "tensor_add", "ML/GPU", "Element-wise tensor addition", _empty, _tensor_binary("tensor_add"),
)


# =========================================================================
# System
# =========================================================================


def _gen_sleep(node_id, config, inputs):
    ms = cfg_uint(config, "ms", 1000)
    value = first_input(inputs, NULL)
    return _lines(call("sleep", str(ms)) + ";", bind_out(node_id, value))


def _gen_capture_screen(node_id, config, inputs):
    return _lines(bind_out(node_id, call("capture_screen")))


SLEEP = OperatorDef("sleep", "System", "Sleep for milliseconds", _defaults(ms=1000), _gen_sleep)
CAPTURE_SCREEN = OperatorDef(
    "capture_screen", "System", "Capture screenshot", _empty, _gen_capture_screen,
)


# =========================================================================
# Registry
# =========================================================================

_ALL_OPERATORS: List[OperatorDef] = [
    # Control
    START,
    PRINT,
    # HTTP
    HTTP_GET,
    HTTP_POST,
    HTTP_PUT,
    HTTP_DELETE,
    HTTP_REQUEST,
    # Data - JSON
    JSON_PARSE,
    JSON_STRINGIFY,
    JSON_GET,
    JSON_SET,
    # Data - String
    STRING_CONCAT,
    STRING_UPPER,
    STRING_LOWER,
    STRING_TRIM,
    STRING_SPLIT,
    STRING_REPLACE,
    STRING_LENGTH,
    # Data - Array
    ARRAY_MAP,
    ARRAY_FILTER,
    ARRAY_REDUCE,
    ARRAY_SLICE,
    ARRAY_CONCAT,
    ARRAY_SORT,
    ARRAY_LENGTH,
    # Data - Object
    OBJECT_GET,
    OBJECT_SET,
    OBJECT_KEYS,
    OBJECT_VALUES,
    OBJECT_HAS_KEY,
    # Files
    FILE_READ,
    FILE_WRITE,
    FILE_EXISTS,
    FILE_DELETE,
    FILE_LIST,
    DIR_CREATE,
    JSON_READ,
    JSON_WRITE,
    # Math
    MATH_ADD,
    MATH_SUBTRACT,
    MATH_MULTIPLY,
    MATH_DIVIDE,
    MATH_FLOOR,
    MATH_CEIL,
    MATH_ROUND,
    MATH_SQRT,
    MATH_RANDOM,
    # Type conversion
    TO_STRING,
    TO_INT,
    TO_FLOAT,
    # ML / GPU
    TENSOR_CREATE,
    TENSOR_MATMUL,
    TENSOR_ADD,
    # System
    SLEEP,
    CAPTURE_SCREEN,
]


def _build_registry(operators: List[OperatorDef]) -> Dict[str, OperatorDef]:
    registry: Dict[str, OperatorDef] = {}
    for op in operators:
        if op.name in registry:
            raise ValueError(f"Operator '{op.name}' registered twice")
        registry[op.name] = op
    return registry


OPERATOR_REGISTRY: Dict[str, OperatorDef] = _build_registry(_ALL_OPERATORS)


def get_operator(name: str) -> Optional[OperatorDef]:
    """Look up an operator by name; ``None`` if it is not registered."""
    return OPERATOR_REGISTRY.get(name)


def all_operators() -> List[OperatorDef]:
    """All operators in registration order."""
    return list(_ALL_OPERATORS)


def operators_by_category() -> Dict[str, List[OperatorDef]]:
    grouped: Dict[str, List[OperatorDef]] = {}
    for op in _ALL_OPERATORS:
        grouped.setdefault(op.category, []).append(op)
    return grouped


def default_config(name: str) -> Any:
    """Fresh default configuration for ``name``.

    Raises KeyError if the operator is not registered.
    """
    op = get_operator(name)
    if op is None:
        raise KeyError(
            f"Unknown operator '{name}'. "
            f"Available: {sorted(OPERATOR_REGISTRY.keys())}"
        )
    return op.default_config()
