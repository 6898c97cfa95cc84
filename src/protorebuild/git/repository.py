"""GitRepository - the git queries a rebuild run needs."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from protorebuild.git.exceptions import GitError, RevisionError, WorkspaceError
from protorebuild.git.models import StatusEntry
from protorebuild.logging import truncate_output

logger = logging.getLogger("protorebuild.git")


def _stderr(error: subprocess.CalledProcessError) -> str:
    return truncate_output((error.stderr or "").strip(), max_length=500)


class GitRepository:
    """Runs git commands against a working tree.

    Every query is a blocking ``git`` subprocess; output is parsed as text,
    one result per line.
    """

    def __init__(self, repo_path: str | Path = ".") -> None:
        """Initialize the repository wrapper.

        Args:
            repo_path: Any directory inside the working tree.
        """
        self.repo_path = Path(repo_path)

    def _run_git(self, *args: str, strip: bool = True) -> str:
        """Run a git command in the repo directory.

        Args:
            *args: Git command arguments
            strip: Strip surrounding whitespace from stdout

        Returns:
            Command stdout

        Raises:
            subprocess.CalledProcessError: If command fails
            FileNotFoundError: If git is not installed
        """
        logger.debug("git %s", " ".join(args))
        result = subprocess.run(
            ["git", *args],
            cwd=self.repo_path,
            capture_output=True,
            text=True,
            errors="surrogateescape",
            check=True,
        )
        return result.stdout.strip() if strip else result.stdout

    def toplevel(self) -> Path:
        """Return the top-level directory of the working tree.

        Raises:
            WorkspaceError: If repo_path is not inside a git working tree
        """
        try:
            out = self._run_git("rev-parse", "--show-toplevel")
        except subprocess.CalledProcessError as e:
            raise WorkspaceError(
                f"Not inside a git working tree: {self.repo_path}: {_stderr(e)}"
            ) from e
        except FileNotFoundError as e:
            raise WorkspaceError("git is not installed or not available in PATH") from e
        return Path(out)

    def object_type(self, ref: str) -> str | None:
        """Return the object type ``ref`` names, or None if it names nothing."""
        try:
            return self._run_git("cat-file", "-t", ref)
        except subprocess.CalledProcessError:
            return None

    def is_commit(self, ref: str) -> bool:
        return self.object_type(ref) == "commit"

    def rev_parse(self, ref: str) -> str:
        """Resolve ``ref`` to a full object name.

        Raises:
            RevisionError: If the ref cannot be parsed
        """
        try:
            return self._run_git("rev-parse", ref)
        except subprocess.CalledProcessError as e:
            raise RevisionError(f"Cannot parse revision '{ref}': {_stderr(e)}") from e

    def merge_base(self, ref: str, other: str = "HEAD") -> str:
        """Return the nearest common ancestor of ``ref`` and ``other``.

        Raises:
            RevisionError: If the two commits share no history
        """
        try:
            return self._run_git("merge-base", ref, other)
        except subprocess.CalledProcessError as e:
            raise RevisionError(
                f"No merge base between '{ref}' and '{other}': {_stderr(e)}"
            ) from e

    def diff_names(self, rev: str) -> list[str]:
        """List paths that differ between ``rev`` and the working tree.

        Raises:
            GitError: If the diff cannot be computed
        """
        try:
            out = self._run_git("diff", "--name-only", rev, "--")
        except subprocess.CalledProcessError as e:
            raise GitError(f"Failed to diff against '{rev}': {_stderr(e)}") from e
        return [line for line in out.splitlines() if line]

    def status(self) -> list[StatusEntry]:
        """Return the working-tree status.

        Uses the NUL-separated porcelain format so paths containing spaces
        come back whole. Every untracked file is listed, not just its top
        untracked directory. Paths that are not valid UTF-8 keep their raw
        bytes as surrogate escapes, as os.fsdecode does.

        Raises:
            GitError: If git status fails
        """
        try:
            out = self._run_git(
                "status", "--porcelain", "-z", "--untracked-files=all", strip=False
            )
        except subprocess.CalledProcessError as e:
            raise GitError(f"git status failed: {_stderr(e)}") from e

        entries: list[StatusEntry] = []
        fields = iter(out.split("\0"))
        for field in fields:
            if len(field) < 4:
                continue
            code = field[:2]
            entries.append(StatusEntry(code=code, path=field[3:]))
            # Renames and copies carry the original path as an extra field
            if code[0] in "RC":
                next(fields, None)
        return entries
