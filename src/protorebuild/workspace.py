"""Workspace locator - run from the top of the enclosing working tree."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from protorebuild.git import GitRepository, WorkspaceError

logger = logging.getLogger("protorebuild.workspace")


def locate_workspace(start: str | Path = ".") -> GitRepository:
    """Change into the top-level directory of the working tree around ``start``.

    Args:
        start: Any directory inside the working tree.

    Returns:
        A GitRepository rooted at the top-level directory.

    Raises:
        WorkspaceError: If ``start`` is not inside a working tree.
    """
    top = GitRepository(start).toplevel()
    try:
        os.chdir(top)
    except OSError as e:
        raise WorkspaceError(f"Cannot enter working tree {top}: {e}") from e
    logger.debug("Working from %s", top)
    return GitRepository(top)
