"""autograph_core.config
=======================

Compiler configuration.

``CompilerConfig`` controls only the program frame around the node blocks;
it never changes how nodes are ordered or generated.  ``load_config`` reads
an optional YAML file and then applies environment overrides:

    AUTOGRAPH_PROGRAM_NAME   program construct name   (default ``workflow``)
    AUTOGRAPH_ENTRY_NAME     entry function name      (default ``main``)
    AUTOGRAPH_INDENT         statement indent width   (default ``4``)
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from autograph_core.errors import ConfigError

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

ENV_KEYS = {
    "AUTOGRAPH_PROGRAM_NAME": "program_name",
    "AUTOGRAPH_ENTRY_NAME": "entry_name",
    "AUTOGRAPH_INDENT": "indent",
}


@dataclass(frozen=True)
class CompilerConfig:
    """Configuration for FlowCompiler.compile()."""

    program_name: str = "workflow"
    entry_name: str = "main"
    indent: str = "    "

    def __post_init__(self) -> None:
        for name in ("program_name", "entry_name"):
            value = getattr(self, name)
            if not isinstance(value, str) or not _IDENTIFIER.match(value):
                raise ConfigError(f"{name} must be an identifier, got {value!r}")
        if not isinstance(self.indent, str) or self.indent.strip(" \t"):
            raise ConfigError(f"indent must be whitespace, got {self.indent!r}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CompilerConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {unknown}")
        values = dict(data)
        if "indent" in values:
            values["indent"] = _indent_value(values["indent"])
        return cls(**values)


def _indent_value(raw: Any) -> str:
    """Accept an indent as a width (``4``, ``"4"``) or a literal string."""
    if isinstance(raw, bool):
        raise ConfigError(f"indent must be a width or whitespace, got {raw!r}")
    if isinstance(raw, int):
        if raw < 0:
            raise ConfigError(f"indent width must be >= 0, got {raw}")
        return " " * raw
    if isinstance(raw, str) and raw.strip().isdigit():
        return " " * int(raw.strip())
    if isinstance(raw, str):
        return raw
    raise ConfigError(f"indent must be a width or whitespace, got {raw!r}")


def _read_yaml(path: Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping, got {type(data).__name__}")
    # Allow either a bare mapping or one nested under ``compiler:``.
    section = data.get("compiler", data)
    if not isinstance(section, dict):
        raise ConfigError(f"{path}: 'compiler' must be a mapping")
    return section


def load_config(
    path: Optional[Union[str, Path]] = None,
    env: Optional[Mapping[str, str]] = None,
) -> CompilerConfig:
    """Build a CompilerConfig from an optional YAML file and the environment.

    Parameters
    ----------
    path : str or Path, optional
        YAML file with the config keys (optionally under ``compiler:``).
    env : mapping, optional
        Environment to read overrides from (default: ``os.environ``).

    Raises
    ------
    ConfigError
        Unreadable file, unknown keys or invalid values.
    """
    values: Dict[str, Any] = {}
    if path is not None:
        try:
            values.update(_read_yaml(Path(path)))
        except OSError as exc:
            raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
        logger.debug(f"Loaded compiler config from {path}: {sorted(values)}")

    environ = os.environ if env is None else env
    for env_key, field_name in ENV_KEYS.items():
        if env_key in environ:
            values[field_name] = environ[env_key]
            logger.debug(f"{field_name} overridden by {env_key}")

    return CompilerConfig.from_mapping(values)
