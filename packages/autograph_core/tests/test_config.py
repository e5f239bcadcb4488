"""Tests for compiler configuration loading."""

from __future__ import annotations

import pytest

from autograph_core.config import CompilerConfig, load_config
from autograph_core.errors import ConfigError


class TestCompilerConfig:
    def test_defaults(self) -> None:
        cfg = CompilerConfig()
        assert (cfg.program_name, cfg.entry_name, cfg.indent) == ("workflow", "main", "    ")

    @pytest.mark.parametrize("name", ["", "1abc", "has space", "dash-ed"])
    def test_rejects_non_identifier(self, name: str) -> None:
        with pytest.raises(ConfigError, match="identifier"):
            CompilerConfig(program_name=name)

    def test_rejects_non_whitespace_indent(self) -> None:
        with pytest.raises(ConfigError, match="indent"):
            CompilerConfig(indent="--")

    def test_from_mapping_width(self) -> None:
        assert CompilerConfig.from_mapping({"indent": 2}).indent == "  "
        assert CompilerConfig.from_mapping({"indent": "3"}).indent == "   "

    def test_from_mapping_unknown_key(self) -> None:
        with pytest.raises(ConfigError, match="Unknown config keys"):
            CompilerConfig.from_mapping({"input_name": "x"})

    @pytest.mark.parametrize("bad", [True, -1, 1.5])
    def test_from_mapping_bad_indent(self, bad) -> None:
        with pytest.raises(ConfigError):
            CompilerConfig.from_mapping({"indent": bad})


class TestLoadConfig:
    def test_no_file_no_env(self) -> None:
        assert load_config(env={}) == CompilerConfig()

    def test_yaml_file(self, tmp_path) -> None:
        path = tmp_path / "compiler.yaml"
        path.write_text("program_name: etl\nindent: 2\n", encoding="utf-8")
        cfg = load_config(path, env={})
        assert cfg.program_name == "etl"
        assert cfg.indent == "  "

    def test_nested_compiler_section(self, tmp_path) -> None:
        path = tmp_path / "compiler.yaml"
        path.write_text("compiler:\n  entry_name: run\n", encoding="utf-8")
        assert load_config(path, env={}).entry_name == "run"

    def test_empty_file(self, tmp_path) -> None:
        path = tmp_path / "compiler.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path, env={}) == CompilerConfig()

    def test_env_overrides_file(self, tmp_path) -> None:
        path = tmp_path / "compiler.yaml"
        path.write_text("program_name: etl\n", encoding="utf-8")
        cfg = load_config(path, env={"AUTOGRAPH_PROGRAM_NAME": "nightly", "AUTOGRAPH_INDENT": "1"})
        assert cfg.program_name == "nightly"
        assert cfg.indent == " "

    def test_reads_process_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("AUTOGRAPH_ENTRY_NAME", "entry")
        assert load_config().entry_name == "entry"

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(ConfigError, match="Cannot read"):
            load_config(tmp_path / "nope.yaml", env={})

    def test_invalid_yaml(self, tmp_path) -> None:
        path = tmp_path / "compiler.yaml"
        path.write_text("program_name: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path, env={})

    def test_not_a_mapping(self, tmp_path) -> None:
        path = tmp_path / "compiler.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="expected a mapping"):
            load_config(path, env={})
