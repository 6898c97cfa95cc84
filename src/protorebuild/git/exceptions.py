"""Custom exceptions for git access."""


class GitError(Exception):
    """Base exception for git errors."""


class WorkspaceError(GitError):
    """Not inside a git working tree, or the tree root cannot be entered."""


class RevisionError(GitError):
    """A revision cannot be resolved to a commit."""
