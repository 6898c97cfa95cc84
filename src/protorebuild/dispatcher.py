"""Rebuild dispatcher - bazel and protoc invocations for changed targets."""

from __future__ import annotations

import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path

from protorebuild.changes import ChangeSet
from protorebuild.config import BazelConfig, ProtocConfig
from protorebuild.logging import get_logger

logger = get_logger("dispatcher")

# Exit status a shell reports for a command it cannot find
COMMAND_NOT_FOUND = 127
# Exit status a shell reports for a command it finds but cannot execute
COMMAND_NOT_EXECUTABLE = 126


@dataclass
class InvocationResult:
    """Outcome of one external tool call.

    Attributes:
        argv: The command line that was (or would have been) run.
        returncode: Process exit status; None when skipped by a dry run.
    """

    argv: list[str]
    returncode: int | None = None

    @property
    def skipped(self) -> bool:
        return self.returncode is None

    @property
    def ok(self) -> bool:
        return self.returncode in (0, None)


@dataclass
class RebuildReport:
    """Every invocation a dispatch made, in order."""

    results: list[InvocationResult] = field(default_factory=list)

    @property
    def failed(self) -> list[InvocationResult]:
        return [r for r in self.results if not r.ok]

    @property
    def succeeded(self) -> list[InvocationResult]:
        return [r for r in self.results if r.ok and not r.skipped]


class RebuildDispatcher:
    """Rebuilds the bazel targets and generated bindings of a ChangeSet.

    Failures are logged and recorded, never raised: bazel is expected to be
    idempotent and cache-aware, so a target built twice costs little and a
    failed target is simply reported.
    """

    def __init__(
        self,
        root: str | Path = ".",
        bazel: BazelConfig | None = None,
        protoc: ProtocConfig | None = None,
        dry_run: bool = False,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            root: Workspace root the tools run in.
            bazel: Build tool settings.
            protoc: Protobuf compiler settings.
            dry_run: Log the commands instead of running them.
        """
        self.root = Path(root)
        self.bazel = bazel or BazelConfig()
        self.protoc = protoc or ProtocConfig()
        self.dry_run = dry_run

    def build_dir_command(self, prefix: str) -> list[str]:
        """Command that builds every target under a BUILD directory prefix."""
        return [self.bazel.binary, "build", f"{prefix}...:*"]

    def proto_target_commands(self, proto: str) -> list[list[str]]:
        """Commands that build the bazel targets generated for one proto."""
        return [
            [self.bazel.binary, "build", f"{proto}{suffix}"]
            for suffix in self.bazel.proto_suffixes
        ]

    def protoc_command(self, proto: str) -> list[str]:
        """Command that regenerates Python bindings and type stubs in place."""
        command = self.protoc.command or [sys.executable, "-m", "grpc_tools.protoc"]
        return [
            *command,
            f"-I={self.protoc.include}",
            f"--python_out={self.protoc.python_out}",
            f"--mypy_out={self.protoc.mypy_out}",
            f"{proto}.proto",
        ]

    def run(self, argv: list[str]) -> InvocationResult:
        """Run one command to completion.

        Output is not captured; the tool writes straight to the terminal.
        """
        if self.dry_run:
            logger.info("[dry run] %s", " ".join(argv))
            return InvocationResult(argv=argv)

        logger.info("Running: %s", " ".join(argv))
        try:
            completed = subprocess.run(argv, cwd=self.root, check=False)
        except FileNotFoundError:
            logger.error("Command not found: %s", argv[0])
            return InvocationResult(argv=argv, returncode=COMMAND_NOT_FOUND)
        except OSError as e:
            logger.error("Cannot execute %s: %s", argv[0], e)
            return InvocationResult(argv=argv, returncode=COMMAND_NOT_EXECUTABLE)

        result = InvocationResult(argv=argv, returncode=completed.returncode)
        if not result.ok:
            logger.warning(
                "Command exited with status %d: %s", completed.returncode, " ".join(argv)
            )
        return result

    def dispatch(self, changes: ChangeSet) -> RebuildReport:
        """Rebuild everything a ChangeSet touches.

        BUILD directories are rebuilt first, then each changed proto gets its
        bazel targets built and its bindings regenerated with protoc.

        Args:
            changes: Output of change detection.

        Returns:
            Report of every invocation.
        """
        report = RebuildReport()

        for prefix in changes.build_dirs:
            report.results.append(self.run(self.build_dir_command(prefix)))

        for proto in changes.protos:
            for argv in self.proto_target_commands(proto):
                report.results.append(self.run(argv))
            report.results.append(self.run(self.protoc_command(proto)))

        if report.failed:
            logger.warning("%d of %d invocation(s) failed", len(report.failed), len(report.results))
        else:
            logger.debug("All %d invocation(s) succeeded", len(report.results))
        return report
