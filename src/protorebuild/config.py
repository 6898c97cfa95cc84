"""Configuration loading for protorebuild.

Every setting has a default, so a repository without a
``.protorebuild.yaml`` gets the stock behaviour.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

CONFIG_FILENAME = ".protorebuild.yaml"

DEFAULT_REVISIONS = ["upstream/master", "origin/master", "master"]


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


@dataclass
class PatternConfig:
    """Path patterns that select changed files.

    Both are regular expressions searched against repository-relative
    paths, the way ``grep`` filters a list of file names.
    """

    proto: str = r"google/api/.*\.proto$"
    build: str = r"google/api/.*BUILD$"


@dataclass
class BazelConfig:
    """Build tool settings."""

    binary: str = "bazel"
    proto_suffixes: list[str] = field(default_factory=lambda: ["_proto", "_py_proto", "_cc_proto"])


@dataclass
class ProtocConfig:
    """Protobuf compiler settings.

    ``command`` of None means ``<current python> -m grpc_tools.protoc``.
    """

    command: list[str] | None = None
    include: str = "."
    python_out: str = "."
    mypy_out: str = "."


@dataclass
class RebuildConfig:
    """protorebuild configuration."""

    default_revisions: list[str] = field(default_factory=lambda: list(DEFAULT_REVISIONS))
    patterns: PatternConfig = field(default_factory=PatternConfig)
    generated_subtree: str = "cirq/google"
    bazel: BazelConfig = field(default_factory=BazelConfig)
    protoc: ProtocConfig = field(default_factory=ProtocConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RebuildConfig:
        """Create config from dictionary.

        Args:
            data: Configuration dictionary from YAML.

        Returns:
            Parsed configuration object.

        Raises:
            ConfigError: If a value has the wrong type or a pattern is invalid.
        """
        patterns_data = _section(data, "patterns")
        patterns = PatternConfig(
            proto=_str(patterns_data, "proto", PatternConfig.proto),
            build=_str(patterns_data, "build", PatternConfig.build),
        )
        for name, pattern in (("proto", patterns.proto), ("build", patterns.build)):
            try:
                re.compile(pattern)
            except re.error as e:
                raise ConfigError(f"Invalid {name} pattern {pattern!r}: {e}") from e

        bazel_data = _section(data, "bazel")
        bazel = BazelConfig(
            binary=_str(bazel_data, "binary", "bazel"),
            proto_suffixes=_str_list(
                bazel_data, "proto_suffixes", BazelConfig().proto_suffixes
            ),
        )

        protoc_data = _section(data, "protoc")
        command = protoc_data.get("command")
        if command is not None:
            command = _str_list(protoc_data, "command", [])
            if not command:
                raise ConfigError("protoc.command must not be empty")
        protoc = ProtocConfig(
            command=command,
            include=_str(protoc_data, "include", "."),
            python_out=_str(protoc_data, "python_out", "."),
            mypy_out=_str(protoc_data, "mypy_out", "."),
        )

        return cls(
            default_revisions=_str_list(data, "default_revisions", DEFAULT_REVISIONS),
            patterns=patterns,
            generated_subtree=_str(data, "generated_subtree", "cirq/google"),
            bazel=bazel,
            protoc=protoc,
        )


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must be a mapping, got {type(value).__name__}")
    return value


def _str(data: dict[str, Any], key: str, default: str) -> str:
    value = data.get(key, default)
    if not isinstance(value, str):
        raise ConfigError(f"'{key}' must be a string, got {type(value).__name__}")
    return value


def _str_list(data: dict[str, Any], key: str, default: list[str]) -> list[str]:
    value = data.get(key, default)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"'{key}' must be a list of strings")
    return list(value)


def load_config(config_path: Path | str) -> RebuildConfig:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML file.

    Returns:
        Parsed configuration object.

    Raises:
        ConfigError: If file doesn't exist or is invalid.
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    # An empty file means all defaults
    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration must be a YAML mapping, got {type(data).__name__}")

    return RebuildConfig.from_dict(data)


def find_config(root: Path | str) -> Path | None:
    """Return the config file at the workspace root, if there is one."""
    config_path = Path(root) / CONFIG_FILENAME
    if config_path.is_file():
        return config_path
    return None
