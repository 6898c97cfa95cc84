"""Generated-file auditor."""

from __future__ import annotations

import logging

from protorebuild.git import GitRepository

logger = logging.getLogger("protorebuild.audit")


def find_untracked_generated(repo: GitRepository, subtree: str = "cirq/google") -> list[str]:
    """Return untracked paths under ``subtree``.

    Anything untracked there after a rebuild is taken to be a generated file
    that should have been committed.
    """
    untracked = [e.path for e in repo.status() if e.untracked and subtree in e.path]
    for path in untracked:
        logger.debug("Untracked generated file: %r", path)
    return untracked
