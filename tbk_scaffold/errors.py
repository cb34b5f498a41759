"""Exception hierarchy for the scaffolder.

Every failure the tool can report to a user derives from ``ScaffoldError`` so
the CLI can translate them into a printed message and a non-zero exit code.
Plain ``OSError`` from file operations is deliberately left unwrapped.
"""

from __future__ import annotations

from pathlib import Path


class ScaffoldError(Exception):
    """Base class for all scaffolding failures."""


class ConfigurationError(ScaffoldError):
    """Raised when a project configuration is malformed or contradictory."""


class TargetDirectoryError(ScaffoldError):
    """Raised when the target directory already exists and is not empty."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(
            f'Directory "{self.path}" already exists and is not empty. '
            "Use --force to overwrite or choose a different name."
        )


class TemplateRenderError(ScaffoldError):
    """Raised when a single template fails to render.

    Attributes:
        source_path: The template file that failed.
        cause: The underlying renderer exception.
    """

    def __init__(self, source_path: str | Path, cause: BaseException) -> None:
        self.source_path = Path(source_path)
        self.cause = cause
        super().__init__(f"Failed to render template {self.source_path}: {cause}")


class CommandError(ScaffoldError):
    """Raised when an external command (package install, git) fails."""

    def __init__(self, command: list[str], returncode: int, stderr: str = "") -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        message = f"{' '.join(command)} failed with code {returncode}"
        if stderr:
            message = f"{message}: {stderr}"
        super().__init__(message)


class UserCancelled(ScaffoldError):
    """Raised when the user aborts an interactive session."""

    def __init__(self) -> None:
        super().__init__("Setup cancelled.")
