"""Base revision resolver."""

from __future__ import annotations

from collections.abc import Sequence

from protorebuild.config import DEFAULT_REVISIONS
from protorebuild.git import GitRepository, ResolvedRevision, RevisionError
from protorebuild.logging import get_logger

logger = get_logger("revision")


def pick_candidate(
    repo: GitRepository,
    requested: str | None = None,
    candidates: Sequence[str] = DEFAULT_REVISIONS,
) -> str:
    """Choose the commit-ish to compare against.

    An explicit ``requested`` revision wins unless it looks like a flag.
    Otherwise the first of ``candidates`` that names a commit is used.

    Raises:
        RevisionError: If ``requested`` is not a commit, or no candidate is.
    """
    if requested and not requested.startswith("-"):
        if not repo.is_commit(requested):
            raise RevisionError(f"No revision '{requested}'.")
        return requested

    for candidate in candidates:
        if repo.is_commit(candidate):
            return candidate

    raise RevisionError(
        "No default revision found to compare against. "
        "Argument #1 must be what to diff against (e.g. 'origin/master' or 'HEAD~1')."
    )


def resolve_base_revision(
    repo: GitRepository,
    requested: str | None = None,
    candidates: Sequence[str] = DEFAULT_REVISIONS,
) -> ResolvedRevision:
    """Resolve the revision the working tree is diffed against.

    If the chosen candidate is an ancestor of HEAD it is used as is;
    otherwise its merge-base with HEAD is used instead.

    Args:
        repo: Repository to query.
        requested: Revision given on the command line, if any.
        candidates: Fallback refs, tried in order.

    Returns:
        The resolved revision.

    Raises:
        RevisionError: If no usable revision exists.
    """
    rev = pick_candidate(repo, requested, candidates)
    base = repo.merge_base(rev, "HEAD")

    if repo.rev_parse(rev) == base:
        logger.info("Comparing against revision '%s'.", rev)
        return ResolvedRevision(requested=rev, merge_base=base, effective=rev)

    logger.info("Comparing against revision '%s' (merge base %s).", rev, base)
    return ResolvedRevision(requested=rev, merge_base=base, effective=base)
