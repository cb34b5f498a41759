"""Shared utility functions for the scaffolder.

Provides async command execution, project-name validation and casing
helpers, file-system helpers, and Rich-based console reporting.
"""

from __future__ import annotations

import asyncio
import os
import re
import shutil
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: list[str],
    cwd: str | Path | None = None,
    timeout: int = 600,
    capture: bool = True,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run a command asynchronously.

    Args:
        cmd: Program and arguments.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the process is killed.
        capture: Whether to capture stdout/stderr (if ``False`` they inherit
            the parent's streams so package-manager output stays visible).
        env: Optional extra environment variables merged on top of ``os.environ``.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.  If *capture* is ``False``
        the stdout/stderr strings will be empty.
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    stdout_pipe = asyncio.subprocess.PIPE if capture else None
    stderr_pipe = asyncio.subprocess.PIPE if capture else None

    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=stdout_pipe,
        stderr=stderr_pipe,
        cwd=str(cwd) if cwd else None,
        env=merged_env,
    )

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return (-1, "", f"Command timed out after {timeout}s: {' '.join(cmd)}")

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


# ---------------------------------------------------------------------------
# String / name helpers
# ---------------------------------------------------------------------------

_SAFE_NAME_RE = re.compile(r"^[a-z0-9-_]+$")
_NPM_RESERVED_NAMES = frozenset({"node_modules", "favicon.ico"})
_NPM_MAX_NAME_LENGTH = 214


def to_kebab_case(text: str) -> str:
    """Lower-case *text* and join its alphanumeric runs with hyphens.

    Examples::

        to_kebab_case("My Cool App!!") -> "my-cool-app"
        to_kebab_case("--api_v2--") -> "api-v2"
    """
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower(), flags=re.ASCII)
    return slug.strip("-")


def to_pascal_case(text: str) -> str:
    """Convert ``some-thing`` or ``some_thing`` to ``SomeThing``.

    Each segment keeps only its first character upper-cased; the rest is
    lower-cased (``"API-server"`` -> ``"ApiServer"``).
    """
    parts = re.split(r"[-_\s]+", text)
    return "".join(part[:1].upper() + part[1:].lower() for part in parts if part)


def to_camel_case(text: str) -> str:
    """Convert ``some-thing`` or ``some_thing`` to ``someThing``."""
    pascal = to_pascal_case(text)
    return pascal[:1].lower() + pascal[1:]


def to_snake_case(text: str) -> str:
    """Convert ``SomeThing`` or ``some-thing`` to ``some_thing``."""
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", text)
    s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
    return re.sub(r"[-\s]+", "_", s2).lower()


def validate_project_name(name: str) -> str | None:
    """Check that *name* is usable both as an npm package and a directory.

    Returns:
        ``None`` when the name is valid, otherwise a human-readable reason.
    """
    if not name or not name.strip():
        return "name cannot be empty"
    if name != name.strip():
        return "name cannot contain leading or trailing spaces"
    if len(name) > _NPM_MAX_NAME_LENGTH:
        return f"name can no longer contain more than {_NPM_MAX_NAME_LENGTH} characters"
    if name.startswith((".", "_")):
        return "name cannot start with a period or an underscore"
    if name.lower() in _NPM_RESERVED_NAMES:
        return f"{name} is a reserved name"
    if name != name.lower():
        return "name can no longer contain capital letters"
    if not _SAFE_NAME_RE.match(name):
        return "use lowercase letters, numbers, hyphens, or underscores only"
    return None


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def ensure_dir(path: str | Path) -> Path:
    """Create a directory (and parents) if it does not exist.

    Returns:
        The resolved ``Path`` object.
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path.resolve()


def directory_has_content(path: str | Path) -> bool:
    """Return ``True`` if *path* is an existing directory with any entries."""
    dir_path = Path(path)
    if not dir_path.is_dir():
        return False
    return any(dir_path.iterdir())


def empty_directory(path: str | Path) -> None:
    """Remove everything inside *path*, keeping the directory itself."""
    dir_path = Path(path)
    for entry in dir_path.iterdir():
        if entry.is_dir() and not entry.is_symlink():
            shutil.rmtree(entry)
        else:
            entry.unlink()


def write_text_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_banner(title: str, subtitle: str = "") -> None:
    """Print the tool banner as a Rich panel."""
    body = f"[bold cyan]{title}[/bold cyan]"
    if subtitle:
        body = f"{body}\n[dim]{subtitle}[/dim]"
    console.print(Panel(body, expand=False, border_style="cyan"))


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")


def print_info(message: str) -> None:
    """Print a dimmed informational message."""
    console.print(f"[dim]{message}[/dim]")
