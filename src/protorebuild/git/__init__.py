"""Git access - thin wrapper over the git command line."""

from protorebuild.git.exceptions import GitError, RevisionError, WorkspaceError
from protorebuild.git.models import ResolvedRevision, StatusEntry
from protorebuild.git.repository import GitRepository

__all__ = [
    "GitError",
    "GitRepository",
    "ResolvedRevision",
    "RevisionError",
    "StatusEntry",
    "WorkspaceError",
]
