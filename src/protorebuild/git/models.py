"""Data models for git access."""

from dataclasses import dataclass


@dataclass
class ResolvedRevision:
    """The revision a run compares against.

    ``requested`` is the commit-ish that was picked (explicitly or from the
    default candidates), ``effective`` is what the diff is taken against.
    They differ when ``requested`` is not an ancestor of HEAD, in which case
    ``effective`` is the merge-base.
    """

    requested: str
    merge_base: str
    effective: str

    @property
    def used_merge_base(self) -> bool:
        return self.effective != self.requested


@dataclass
class StatusEntry:
    """One line of ``git status --porcelain``."""

    code: str
    path: str

    @property
    def untracked(self) -> bool:
        return self.code == "??"
