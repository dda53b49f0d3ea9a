"""Custom error hierarchy for git-smart-clone."""

from __future__ import annotations


class CloneError(RuntimeError):
    """Base error for the CLI."""

    returncode = 1


class SetupError(CloneError):
    """Raised for problems that stop the run before any line is processed."""


class MissingToolError(SetupError):
    """Raised when a required binary is not on PATH."""


class MissingInputError(SetupError):
    """Raised when the repo-list file cannot be read."""


class RepoDetectionError(SetupError):
    """Raised when the enclosing repository cannot be resolved."""


class NoRemoteConfiguredError(SetupError):
    """Raised when the enclosing repository has no git remote."""


class ConfigError(SetupError):
    """Raised when an environment variable or option holds an invalid value."""


class LineParseError(CloneError):
    """Raised when a single repo-list line cannot be parsed."""


class MultipleTargetDirsError(LineParseError):
    """Raised when a line names more than one target directory."""


class MissingFallbackError(LineParseError):
    """Raised when an @branch line has no repository to resolve against."""


class InvalidSpecError(LineParseError):
    """Raised when a repository spec has an unrecognized shape."""


class PreconditionError(CloneError):
    """Raised when a worktree line references a remote that was never cloned."""


class GitCommandError(CloneError):
    """Raised when an underlying git command fails or times out."""

    def __init__(
        self,
        command: list[str],
        returncode: int,
        *,
        stdout: str | None = None,
        stderr: str | None = None,
        timed_out: bool = False,
    ):
        self.command = command
        self.returncode = returncode
        self.stdout = stdout or ""
        self.stderr = stderr or ""
        self.timed_out = timed_out
        if timed_out:
            message = f"git command timed out: {' '.join(command)}"
        else:
            message = f"git command failed (exit {returncode}): {' '.join(command)}"
        details = "\n".join(
            section
            for section in (self.stdout.strip(), self.stderr.strip())
            if section
        )
        if details:
            message = f"{message}\n{details}"
        super().__init__(message)


__all__ = [
    "CloneError",
    "SetupError",
    "MissingToolError",
    "MissingInputError",
    "RepoDetectionError",
    "NoRemoteConfiguredError",
    "ConfigError",
    "LineParseError",
    "MultipleTargetDirsError",
    "MissingFallbackError",
    "InvalidSpecError",
    "PreconditionError",
    "GitCommandError",
]
