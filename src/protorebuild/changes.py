"""Change detection - which protos and BUILD files differ from the base."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from protorebuild.config import PatternConfig
from protorebuild.git import GitRepository
from protorebuild.logging import get_logger

logger = get_logger("changes")

PROTO_SUFFIX = ".proto"
BUILD_SUFFIX = "BUILD"


@dataclass
class ChangeSet:
    """Targets affected by the diff against the base revision."""

    # Changed proto files with the .proto suffix removed
    protos: list[str] = field(default_factory=list)
    # Directory prefixes of changed BUILD files, trailing slash kept
    build_dirs: list[str] = field(default_factory=list)
    # Every proto in the tree matching the proto pattern
    all_protos: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.protos and not self.build_dirs


def filter_paths(paths: list[str], pattern: str) -> list[str]:
    """Keep the paths ``pattern`` matches anywhere, in their original order."""
    regex = re.compile(pattern)
    return [p for p in paths if regex.search(p)]


def strip_suffix(path: str, suffix: str) -> str:
    if suffix and path.endswith(suffix):
        return path[: -len(suffix)]
    return path


def find_proto_files(root: str | Path, pattern: str = PatternConfig.proto) -> list[str]:
    """List proto files under ``root`` whose relative path matches ``pattern``.

    Returns:
        Sorted POSIX paths relative to ``root``.
    """
    root = Path(root)
    regex = re.compile(pattern)
    found = sorted(
        rel
        for rel in (p.relative_to(root).as_posix() for p in root.rglob(f"*{PROTO_SUFFIX}"))
        if not rel.startswith(".git/") and regex.search(rel)
    )
    for path in found:
        logger.debug("Found proto %s", path)
    return found


def detect_proto_changes(
    repo: GitRepository, rev: str, pattern: str = PatternConfig.proto
) -> list[str]:
    """Return base names of protos changed since ``rev``."""
    changed = [strip_suffix(p, PROTO_SUFFIX) for p in filter_paths(repo.diff_names(rev), pattern)]
    for proto in changed:
        logger.info("Proto changed: %s", proto)
    return changed


def detect_build_changes(
    repo: GitRepository, rev: str, pattern: str = PatternConfig.build
) -> list[str]:
    """Return directory prefixes of BUILD files changed since ``rev``."""
    changed = [strip_suffix(p, BUILD_SUFFIX) for p in filter_paths(repo.diff_names(rev), pattern)]
    if not changed:
        logger.info("No BUILD files changed.")
    for prefix in changed:
        logger.info("BUILD changed: %s", prefix)
    return changed


def detect_changes(
    repo: GitRepository,
    rev: str,
    patterns: PatternConfig | None = None,
) -> ChangeSet:
    """Run all change queries against ``rev``.

    Args:
        repo: Repository to query.
        rev: Effective base revision.
        patterns: Path patterns; defaults to the stock google/api ones.

    Returns:
        The detected ChangeSet.
    """
    patterns = patterns or PatternConfig()
    logger.info("Building protos in %s", repo.repo_path)
    return ChangeSet(
        all_protos=find_proto_files(repo.repo_path, patterns.proto),
        protos=detect_proto_changes(repo, rev, patterns.proto),
        build_dirs=detect_build_changes(repo, rev, patterns.build),
    )
