"""Shared pytest fixtures and configuration."""

import logging
import shutil
import subprocess
from pathlib import Path

import pytest


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: tests against real git repositories")


@pytest.fixture(autouse=True)
def reset_protorebuild_logger():
    """Undo setup_logging so handlers never outlive the test that added them."""
    yield
    logger = logging.getLogger("protorebuild")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


def git(cwd: Path, *args: str) -> str:
    """Run git in ``cwd`` and return its stripped stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout.strip()


def commit_files(repo: Path, message: str, files: dict[str, str]) -> str:
    """Write ``files`` (path -> content), commit them, return the new sha."""
    for rel, content in files.items():
        path = repo / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        git(repo, "add", rel)
    git(repo, "commit", "-q", "-m", message)
    return git(repo, "rev-parse", "HEAD")


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """A fresh repository on branch master with one commit."""
    if shutil.which("git") is None:
        pytest.skip("git not available")

    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "-q")
    git(repo, "symbolic-ref", "HEAD", "refs/heads/master")
    git(repo, "config", "user.email", "test@example.com")
    git(repo, "config", "user.name", "Test User")
    git(repo, "config", "commit.gpgsign", "false")
    commit_files(repo, "Initial commit", {"README.md": "test repo\n"})
    return repo


@pytest.fixture
def run_git():
    """The ``git`` helper, for tests that need to inspect or change a repo."""
    return git


@pytest.fixture
def commit():
    """The ``commit_files`` helper."""
    return commit_files
