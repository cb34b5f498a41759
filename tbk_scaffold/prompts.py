"""Interactive collection of a project configuration.

Every question is skipped when the caller already supplied its answer (from
command-line flags or a config file), so the prompts only fill the gaps.
Ctrl-C or end of input at any prompt raises ``UserCancelled``.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from rich.prompt import Confirm, Prompt

from tbk_scaffold.errors import ConfigurationError, UserCancelled
from tbk_scaffold.models import (
    FEATURE_FIELDS,
    AuthType,
    ModuleId,
    PresetType,
    ProjectConfig,
    StorageProvider,
)
from tbk_scaffold.presets import PRESETS, build_config, get_preset_choices
from tbk_scaffold.utils import console, directory_has_content, print_error, validate_project_name

DEFAULT_PROJECT_NAME = "my-backend"

AUTH_CHOICES = [
    ("none", "No authentication"),
    ("jwt", "Token-based auth"),
    ("jwt-sessions", "Token + session management"),
]
SESSION_DRIVER_CHOICES = [
    ("mongo", "Store sessions in MongoDB"),
    ("redis", "Store sessions in Redis (faster)"),
]
CACHE_CHOICES = [
    ("none", "No caching"),
    ("memory", "In-memory cache (dev/testing)"),
    ("redis", "Redis cache (production)"),
]
STORAGE_CHOICES = [
    ("none", "No file uploads"),
    ("local", "Store files on disk"),
    ("s3", "Amazon S3"),
    ("r2", "Cloudflare R2 (S3-compatible)"),
]
EMAIL_CHOICES = [
    ("none", "No email sending"),
    ("resend", "Resend - modern email API"),
    ("mailgun", "Mailgun - transactional email"),
    ("smtp", "Traditional SMTP"),
]
OBSERVABILITY_CHOICES = [
    ("basic", "Logging only"),
    ("full", "Logging + metrics + health checks"),
]
PACKAGE_MANAGER_CHOICES = [
    ("pnpm", "pnpm (recommended)"),
    ("npm", "npm"),
    ("yarn", "yarn"),
]


# ---------------------------------------------------------------------------
# Prompt primitives
# ---------------------------------------------------------------------------

@contextmanager
def cancellable() -> Iterator[None]:
    """Turn Ctrl-C / EOF inside the block into ``UserCancelled``."""
    try:
        yield
    except (KeyboardInterrupt, EOFError) as exc:
        raise UserCancelled() from exc


def choose(message: str, options: list[tuple[str, str]], default: str | None = None) -> str:
    """Show *options* as ``value  label`` lines and ask for one value."""
    console.print(f"\n[bold]{message}[/bold]")
    for value, label in options:
        console.print(f"  [cyan]{value:<14}[/cyan] {label}")
    with cancellable():
        return Prompt.ask(
            "Choice",
            choices=[value for value, _label in options],
            default=default or options[0][0],
            console=console,
        )


def confirm(message: str, default: bool = False) -> bool:
    with cancellable():
        return Confirm.ask(message, default=default, console=console)


def ask_project_name(default: str = DEFAULT_PROJECT_NAME) -> str:
    """Ask until the user enters a valid project name."""
    while True:
        with cancellable():
            name = Prompt.ask("What is your project named?", default=default, console=console)
        name = name.strip()
        error = validate_project_name(name)
        if error is None:
            return name
        print_error(f"Invalid project name: {error}")


# ---------------------------------------------------------------------------
# Configuration flow
# ---------------------------------------------------------------------------

def collect_project_config(
    project_name: str | None = None,
    supplied: Mapping[str, Any] | None = None,
) -> ProjectConfig:
    """Prompt for everything not already in *supplied* and build the config.

    Args:
        project_name: Name given on the command line, if any.
        supplied: Already-known selections keyed by ``ProjectConfig`` field
            name (``None`` values count as missing).

    Raises:
        UserCancelled: The user aborted a prompt.
        ConfigurationError: The combined answers are invalid.
    """
    known = {k: v for k, v in (supplied or {}).items() if v is not None}

    name = project_name or ask_project_name()

    preset = known.pop("preset", None)
    if preset is None:
        preset = choose("Which preset would you like to use?", get_preset_choices())
    try:
        preset = PresetType(preset)
    except ValueError as exc:
        raise ConfigurationError(f"Unknown preset: {preset}") from exc

    features = {k: known.pop(k) for k in FEATURE_FIELDS if k in known}
    if preset == PresetType.CUSTOM:
        console.print("\n[bold cyan]Let's customize your backend...[/bold cyan]")
        try:
            features = _collect_custom_features(features)
            storage = StorageProvider(features.get("storage", StorageProvider.NONE))
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
    else:
        storage = PRESETS[preset].config.storage

    modules = known.pop("modules", None)
    if modules is None:
        modules = _collect_modules(storage)

    agents = known.pop("agents", None)

    package_manager = known.pop("package_manager", None)
    if package_manager is None:
        package_manager = choose("Package manager:", PACKAGE_MANAGER_CHOICES, "pnpm")

    skip_git = known.pop("skip_git", None)
    if skip_git is None:
        skip_git = not confirm("Initialize git repository?", default=True)

    skip_install = known.pop("skip_install", None)
    if skip_install is None:
        skip_install = not confirm("Install dependencies now?", default=True)

    return build_config(
        name,
        preset,
        {**features, **known},
        modules=modules,
        agents=agents,
        package_manager=package_manager,
        skip_git=skip_git,
        skip_install=skip_install,
    )


def _collect_custom_features(features: dict[str, Any]) -> dict[str, Any]:
    answers = dict(features)

    if "auth" not in answers:
        answers["auth"] = choose("Authentication system:", AUTH_CHOICES)
    auth = AuthType(answers["auth"])

    if auth == AuthType.JWT_SESSIONS and "session_driver" not in answers:
        answers["session_driver"] = choose("Session storage:", SESSION_DRIVER_CHOICES)
    if auth != AuthType.NONE and "google_oauth" not in answers:
        answers["google_oauth"] = confirm("Enable Google OAuth login?")

    if "cache" not in answers:
        answers["cache"] = choose("Caching strategy:", CACHE_CHOICES)

    if "queues" not in answers:
        answers["queues"] = confirm("Enable background jobs? (BullMQ + Redis)")
    if answers["queues"] and "queue_dashboard" not in answers:
        answers["queue_dashboard"] = confirm("Include queue monitoring dashboard?", default=True)

    if "storage" not in answers:
        answers["storage"] = choose("File storage:", STORAGE_CHOICES)
    if "email" not in answers:
        answers["email"] = choose("Email service:", EMAIL_CHOICES)
    if "realtime" not in answers:
        answers["realtime"] = confirm("Enable real-time features? (Socket.IO)")
    if "admin" not in answers:
        answers["admin"] = confirm("Include admin panel?")
    if "observability" not in answers:
        answers["observability"] = choose("Observability level:", OBSERVABILITY_CHOICES)

    return answers


def _collect_modules(storage: StorageProvider) -> list[ModuleId]:
    modules: list[ModuleId] = []
    if storage != StorageProvider.NONE and confirm("Include the file upload module?"):
        modules.append(ModuleId.UPLOAD)
    if confirm("Include the healthcheck module?"):
        modules.append(ModuleId.HEALTHCHECK)
    return modules


# ---------------------------------------------------------------------------
# Target directory and final confirmation
# ---------------------------------------------------------------------------

def resolve_existing_directory(project_name: str, parent: Path) -> tuple[str, bool]:
    """Ask what to do while ``parent/project_name`` is a non-empty directory.

    Returns:
        ``(project_name, overwrite)``: the (possibly new) name to generate
        into and whether its directory must be emptied first.

    Raises:
        UserCancelled: The user chose to cancel.
    """
    name = project_name
    while directory_has_content(parent / name):
        action = choose(
            f'Directory "{name}" already exists and is not empty.',
            [
                ("overwrite", "Overwrite existing directory"),
                ("rename", "Choose a different project name"),
                ("cancel", "Cancel setup"),
            ],
            default="rename",
        )
        if action == "overwrite":
            return name, True
        if action == "cancel":
            raise UserCancelled()
        name = ask_project_name(default=f"{name}-1")
    return name, False


def confirm_generation() -> None:
    """Final go/no-go after the summary table; raises ``UserCancelled`` on no."""
    if not confirm("Create project with these settings?", default=True):
        raise UserCancelled()
