"""CLI entry point for protorebuild.

Rebuilds protos that changed relative to a base revision, then fails if
the rebuild left generated files that are not committed.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from protorebuild.audit import find_untracked_generated
from protorebuild.changes import detect_changes
from protorebuild.config import ConfigError, RebuildConfig, find_config, load_config
from protorebuild.dispatcher import RebuildDispatcher
from protorebuild.git import GitError
from protorebuild.logging import get_logger, setup_logging
from protorebuild.revision import resolve_base_revision
from protorebuild.workspace import locate_workspace

logger = get_logger("cli")


def _load(config_path: Path | None, root: Path) -> RebuildConfig:
    if config_path is None:
        config_path = find_config(root)
    if config_path is None:
        return RebuildConfig()
    logger.debug("Loading configuration from %s", config_path)
    return load_config(config_path)


@click.command(context_settings={"ignore_unknown_options": True})
@click.version_option(package_name="protorebuild")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, resolve_path=True, path_type=Path),
    help="Path to .protorebuild.yaml (default: the one at the workspace root, if any)",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable debug logging",
)
@click.option(
    "--log-dir",
    "log_dir",
    type=click.Path(file_okay=False, resolve_path=True, path_type=Path),
    help="Also write a rotating log file to this directory",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Show the build commands without running them",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Exit non-zero when any build or protoc invocation fails",
)
@click.argument("args", nargs=-1, type=click.UNPROCESSED, metavar="[BASE_REVISION]")
def main(
    config_path: Path | None,
    verbose: bool,
    log_dir: Path | None,
    dry_run: bool,
    strict: bool,
    args: tuple[str, ...],
) -> None:
    """Rebuild protos changed since BASE_REVISION.

    BASE_REVISION defaults to the first of upstream/master, origin/master
    and master that exists. If it is not an ancestor of HEAD, the merge
    base with HEAD is used instead.
    """
    if len(args) > 1:
        raise click.UsageError(
            f"Expected at most one BASE_REVISION, got {len(args)}: {' '.join(args)}"
        )

    setup_logging(log_dir=log_dir, level="DEBUG" if verbose else None)
    requested = args[0] if args else None

    try:
        repo = locate_workspace()
        config = _load(config_path, repo.repo_path)
        revision = resolve_base_revision(repo, requested, config.default_revisions)
        changes = detect_changes(repo, revision.effective, config.patterns)
        dispatcher = RebuildDispatcher(
            root=repo.repo_path,
            bazel=config.bazel,
            protoc=config.protoc,
            dry_run=dry_run,
        )
        report = dispatcher.dispatch(changes)
        untracked = find_untracked_generated(repo, config.generated_subtree)
    except ConfigError as e:
        click.secho(f"Configuration error: {e}", fg="red", err=True)
        sys.exit(1)
    except GitError as e:
        click.secho(str(e), fg="red", err=True)
        sys.exit(1)

    if untracked:
        click.secho(
            "ERROR: Uncommitted generated files found! "
            "Please generate and commit these files:",
            fg="red",
        )
        for path in untracked:
            click.secho(f"   {click.format_filename(path)}", fg="red")
        sys.exit(1)

    if strict and report.failed:
        click.secho(f"{len(report.failed)} build invocation(s) failed:", fg="red", err=True)
        for result in report.failed:
            command = " ".join(result.argv)
            click.secho(f"   {command} (exit {result.returncode})", fg="red", err=True)
        sys.exit(1)
