"""Unit tests for configuration loading."""

from pathlib import Path
from textwrap import dedent

import pytest

from protorebuild.config import (
    CONFIG_FILENAME,
    DEFAULT_REVISIONS,
    ConfigError,
    RebuildConfig,
    find_config,
    load_config,
)


@pytest.fixture
def temp_config(tmp_path: Path) -> Path:
    """Create a temporary config file."""
    config_content = dedent("""
        default_revisions:
          - origin/main
          - main

        patterns:
          proto: "protos/.*\\\\.proto$"

        generated_subtree: gen/python

        bazel:
          binary: bazelisk
          proto_suffixes: [_py_proto]

        protoc:
          command: [protoc]
          include: protos
    """).strip()

    config_path = tmp_path / CONFIG_FILENAME
    config_path.write_text(config_content)
    return config_path


@pytest.mark.unit
class TestDefaults:
    """Tests for the built-in defaults."""

    def test_defaults(self) -> None:
        config = RebuildConfig()

        assert config.default_revisions == ["upstream/master", "origin/master", "master"]
        assert config.patterns.proto == r"google/api/.*\.proto$"
        assert config.patterns.build == r"google/api/.*BUILD$"
        assert config.generated_subtree == "cirq/google"
        assert config.bazel.binary == "bazel"
        assert config.bazel.proto_suffixes == ["_proto", "_py_proto", "_cc_proto"]
        assert config.protoc.command is None

    def test_default_lists_are_not_shared(self) -> None:
        config = RebuildConfig()
        config.default_revisions.append("main")

        assert DEFAULT_REVISIONS == ["upstream/master", "origin/master", "master"]
        assert RebuildConfig().default_revisions == DEFAULT_REVISIONS


@pytest.mark.unit
class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_valid_config(self, temp_config: Path) -> None:
        config = load_config(temp_config)

        assert config.default_revisions == ["origin/main", "main"]
        assert config.patterns.proto == r"protos/.*\.proto$"
        assert config.generated_subtree == "gen/python"
        assert config.bazel.binary == "bazelisk"
        assert config.bazel.proto_suffixes == ["_py_proto"]
        assert config.protoc.command == ["protoc"]
        assert config.protoc.include == "protos"

    def test_unset_keys_keep_defaults(self, temp_config: Path) -> None:
        config = load_config(temp_config)

        assert config.patterns.build == r"google/api/.*BUILD$"
        assert config.protoc.python_out == "."
        assert config.protoc.mypy_out == "."

    def test_empty_file_is_all_defaults(self, tmp_path: Path) -> None:
        config_path = tmp_path / CONFIG_FILENAME
        config_path.write_text("")

        assert load_config(config_path) == RebuildConfig()

    def test_load_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nonexistent.yaml")

    def test_load_invalid_yaml(self, tmp_path: Path) -> None:
        config_path = tmp_path / CONFIG_FILENAME
        config_path.write_text("invalid: yaml: content:")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(config_path)

    def test_load_non_mapping(self, tmp_path: Path) -> None:
        config_path = tmp_path / CONFIG_FILENAME
        config_path.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="mapping"):
            load_config(config_path)

    def test_wrong_type(self, tmp_path: Path) -> None:
        config_path = tmp_path / CONFIG_FILENAME
        config_path.write_text("default_revisions: master\n")

        with pytest.raises(ConfigError, match="default_revisions"):
            load_config(config_path)

    def test_section_must_be_mapping(self, tmp_path: Path) -> None:
        config_path = tmp_path / CONFIG_FILENAME
        config_path.write_text("bazel: bazelisk\n")

        with pytest.raises(ConfigError, match="'bazel' must be a mapping"):
            load_config(config_path)

    @pytest.mark.parametrize(
        ("content", "key"),
        [("patterns: []\n", "patterns"), ("bazel: \"\"\n", "bazel"), ("protoc: 0\n", "protoc")],
    )
    def test_empty_non_mapping_section_rejected(
        self, tmp_path: Path, content: str, key: str
    ) -> None:
        """An empty list or string is not taken to mean an unset section."""
        config_path = tmp_path / CONFIG_FILENAME
        config_path.write_text(content)

        with pytest.raises(ConfigError, match=f"'{key}' must be a mapping"):
            load_config(config_path)

    def test_null_section_keeps_defaults(self, tmp_path: Path) -> None:
        config_path = tmp_path / CONFIG_FILENAME
        config_path.write_text("patterns:\nbazel:\n")

        config = load_config(config_path)

        assert config.patterns == RebuildConfig().patterns
        assert config.bazel == RebuildConfig().bazel

    def test_invalid_pattern(self, tmp_path: Path) -> None:
        config_path = tmp_path / CONFIG_FILENAME
        config_path.write_text("patterns:\n  build: '(unclosed'\n")

        with pytest.raises(ConfigError, match="Invalid build pattern"):
            load_config(config_path)

    def test_empty_protoc_command(self, tmp_path: Path) -> None:
        config_path = tmp_path / CONFIG_FILENAME
        config_path.write_text("protoc:\n  command: []\n")

        with pytest.raises(ConfigError, match="must not be empty"):
            load_config(config_path)


@pytest.mark.unit
class TestFindConfig:
    """Tests for find_config function."""

    def test_find_at_root(self, temp_config: Path) -> None:
        assert find_config(temp_config.parent) == temp_config

    def test_absent(self, tmp_path: Path) -> None:
        assert find_config(tmp_path) is None

    def test_parent_directories_not_searched(self, temp_config: Path) -> None:
        """Only the workspace root is consulted."""
        nested = temp_config.parent / "sub"
        nested.mkdir()

        assert find_config(nested) is None
