"""Command-line entry point: ``create-tbk-app [project-name] [options]``.

Collects a ``ProjectConfig`` from flags, an optional YAML/JSON config file
and (when information is missing) interactive prompts, then runs the
``ProjectGenerator``.  This is the only place errors are turned into console
output and exit codes.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any

from tbk_scaffold import __version__
from tbk_scaffold import prompts
from tbk_scaffold.config import Settings
from tbk_scaffold.errors import (
    ConfigurationError,
    ScaffoldError,
    TargetDirectoryError,
    UserCancelled,
)
from tbk_scaffold.models import (
    FEATURE_FIELDS,
    AgentId,
    AuthType,
    CacheProvider,
    EmailProvider,
    ModuleId,
    ObservabilityLevel,
    PackageManager,
    PresetType,
    ProjectConfig,
    SessionDriver,
    StorageProvider,
)
from tbk_scaffold.presets import RUN_FIELDS, build_config, load_config_file, normalise_keys
from tbk_scaffold.scaffolder.dependencies import find_version_conflicts, run_script_command
from tbk_scaffold.scaffolder.generator import ProjectGenerator
from tbk_scaffold.utils import (
    console,
    directory_has_content,
    empty_directory,
    print_banner,
    print_error,
    print_info,
    print_success,
    print_summary_table,
    print_warning,
)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CANCELLED = 130

# Options that must be known before a named preset can skip the prompts.
BASIC_FIELDS = ("package_manager", "skip_git", "skip_install")
# Feature choices a custom selection cannot default silently.
CUSTOM_CHOICE_FIELDS = ("auth", "cache", "storage", "email", "observability")
CUSTOM_TOGGLE_FIELDS = ("queues", "realtime", "admin")


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def _values(enum_cls: Any) -> list[str]:
    return [member.value for member in enum_cls]


def _parse_list(value: str, enum_cls: Any, label: str) -> list[Any]:
    selections = [item.strip().lower() for item in value.split(",") if item.strip()]
    allowed = _values(enum_cls)
    invalid = [item for item in selections if item not in allowed]
    if invalid:
        raise argparse.ArgumentTypeError(
            f'invalid {label}(s) "{", ".join(invalid)}" (choose from {", ".join(allowed)})'
        )
    return [enum_cls(item) for item in dict.fromkeys(selections)]


def parse_modules(value: str) -> list[ModuleId]:
    """argparse type for ``--modules upload,healthcheck``."""
    return _parse_list(value, ModuleId, "module")


def parse_agents(value: str) -> list[AgentId]:
    """argparse type for ``--agents claude,cursor,other``."""
    return _parse_list(value, AgentId, "agent")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="create-tbk-app",
        description="Scaffold a TypeScript Backend Toolkit project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  create-tbk-app my-api\n"
            "  create-tbk-app my-api --preset standard --pm npm -y\n"
            "  create-tbk-app my-api --preset custom --auth jwt --cache redis --queues -y\n"
            "  create-tbk-app --config tbk.yaml --skip-install\n"
        ),
    )
    parser.add_argument("project_name", nargs="?", default=None, help="Name of the project")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    parser.add_argument(
        "--preset", type=str.lower, choices=_values(PresetType),
        help="Preset configuration",
    )
    parser.add_argument(
        "--auth", type=str.lower, choices=_values(AuthType), help="Authentication type"
    )
    parser.add_argument(
        "--session-driver", type=str.lower, choices=_values(SessionDriver),
        help="Session storage driver (jwt-sessions only)",
    )
    parser.add_argument(
        "--cache", type=str.lower, choices=_values(CacheProvider), help="Cache provider"
    )
    parser.add_argument(
        "--storage", type=str.lower, choices=_values(StorageProvider), help="Storage provider"
    )
    parser.add_argument(
        "--email", type=str.lower, choices=_values(EmailProvider), help="Email provider"
    )
    parser.add_argument(
        "--queues", action=argparse.BooleanOptionalAction, default=None,
        help="Enable background jobs",
    )
    parser.add_argument(
        "--queue-dashboard", action=argparse.BooleanOptionalAction, default=None,
        help="Include queue monitoring dashboard",
    )
    parser.add_argument(
        "--realtime", action=argparse.BooleanOptionalAction, default=None,
        help="Enable real-time features",
    )
    parser.add_argument(
        "--admin", action=argparse.BooleanOptionalAction, default=None,
        help="Include admin panel",
    )
    parser.add_argument(
        "--google-oauth", action="store_const", const=True, default=None,
        help="Enable Google OAuth login",
    )
    parser.add_argument(
        "--observability", type=str.lower, choices=_values(ObservabilityLevel),
        help="Observability level",
    )
    parser.add_argument(
        "--modules", type=parse_modules, default=None,
        help="Comma-separated modules (upload,healthcheck)",
    )
    parser.add_argument(
        "--agents", type=parse_agents, default=None,
        help="Comma-separated AI agents/IDEs (claude,cursor,other)",
    )
    parser.add_argument(
        "--pm", dest="package_manager", type=str.lower, choices=_values(PackageManager),
        help="Package manager",
    )
    parser.add_argument(
        "--skip-git", action="store_const", const=True, default=None,
        help="Skip git initialization",
    )
    parser.add_argument(
        "--skip-install", action="store_const", const=True, default=None,
        help="Skip dependency installation",
    )
    parser.add_argument(
        "--config", dest="config_file", type=Path, default=None,
        help="YAML or JSON file with project options (flags take precedence)",
    )
    parser.add_argument("-y", "--yes", action="store_true", help="Skip prompts and accept defaults")
    parser.add_argument(
        "--force", action="store_true", help="Overwrite target directory without prompting"
    )
    parser.add_argument("--verbose", action="store_true", help="Report every file written")
    return parser


# ---------------------------------------------------------------------------
# Selection handling
# ---------------------------------------------------------------------------

def collect_selections(args: argparse.Namespace) -> dict[str, Any]:
    """Merge config-file values with flags; flags win, ``None`` means unset."""
    selections: dict[str, Any] = {}
    if args.config_file is not None:
        selections.update(normalise_keys(load_config_file(args.config_file)))

    flags = {name: getattr(args, name, None) for name in (*FEATURE_FIELDS, *RUN_FIELDS)}
    selections.update({k: v for k, v in flags.items() if v is not None})
    return {k: v for k, v in selections.items() if v is not None}


def has_full_config(selections: dict[str, Any]) -> bool:
    """True when *selections* answer every question the prompts would ask."""
    if not selections.get("project_name") or not selections.get("preset"):
        return False
    if any(selections.get(name) is None for name in BASIC_FIELDS):
        return False
    if selections["preset"] != PresetType.CUSTOM.value:
        return True

    if any(selections.get(name) is None for name in CUSTOM_CHOICE_FIELDS):
        return False
    if selections["auth"] == AuthType.JWT_SESSIONS.value and not selections.get("session_driver"):
        return False
    if any(not isinstance(selections.get(name), bool) for name in CUSTOM_TOGGLE_FIELDS):
        return False
    if selections["queues"] and not isinstance(selections.get("queue_dashboard"), bool):
        return False
    return True


def config_from_selections(selections: dict[str, Any]) -> ProjectConfig:
    """Build a config without prompting; missing values take their defaults."""
    values = dict(selections)
    project_name = values.pop("project_name", None)
    if not project_name:
        raise ConfigurationError("Project name is required when skipping prompts.")

    preset = values.pop("preset", None)
    run_options = {name: values.pop(name) for name in RUN_FIELDS if name in values}
    if (
        preset in (None, PresetType.CUSTOM.value)
        and values.get("queues")
        and "queue_dashboard" not in values
    ):
        values["queue_dashboard"] = True
    return build_config(str(project_name), preset, values, **run_options)


def config_summary(config: ProjectConfig) -> dict[str, str]:
    """Label/value rows for the pre-generation summary table."""
    auth = config.auth.value
    if config.auth == AuthType.JWT_SESSIONS:
        auth = f"{auth} ({(config.session_driver or SessionDriver.MONGO).value})"
    if config.google_oauth and config.auth != AuthType.NONE:
        auth = f"{auth} + Google OAuth"
    return {
        "Project": config.project_name,
        "Preset": config.preset.value,
        "Auth": auth,
        "Cache": config.cache.value,
        "Queues": _on_off(config.queues)
        + (" + dashboard" if config.queues and config.queue_dashboard else ""),
        "Storage": config.storage.value,
        "Email": config.email.value,
        "Realtime": _on_off(config.realtime),
        "Admin": _on_off(config.admin),
        "Observability": config.observability.value,
        "Modules": ", ".join(module.value for module in config.modules) or "none",
        "Agents": ", ".join(agent.value for agent in config.agents) or "none",
        "Package manager": config.package_manager.value,
        "Git": "skip" if config.skip_git else "init",
        "Install": "skip" if config.skip_install else "yes",
    }


def _on_off(flag: bool) -> str:
    return "on" if flag else "off"


def prepare_target(
    config: ProjectConfig, cwd: Path, *, interactive: bool, force: bool
) -> tuple[ProjectConfig, Path]:
    """Resolve the target directory, emptying or renaming as requested.

    Raises:
        TargetDirectoryError: Non-interactive run, target not empty, no ``--force``.
    """
    name = config.project_name
    overwrite = force
    if directory_has_content(cwd / name) and not force:
        if not interactive:
            raise TargetDirectoryError(name)
        name, overwrite = prompts.resolve_existing_directory(name, cwd)

    target = cwd / name
    if overwrite and directory_has_content(target):
        empty_directory(target)
    if name != config.project_name:
        config = config.model_copy(update={"project_name": name})
    return config, target


def print_next_steps(config: ProjectConfig) -> None:
    pm = config.package_manager
    steps = [f"cd {config.project_name}"]
    if config.skip_install:
        steps.append(f"{pm.value} install")
    steps.append("cp .env.example .env.development")
    steps.append(run_script_command(pm, "dev"))

    console.print("\n[bold]Next steps:[/bold]")
    for step in steps:
        console.print(f"  [cyan]{step}[/cyan]")
    console.print()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def run(argv: list[str] | None = None, cwd: Path | None = None) -> int:
    """Parse *argv*, scaffold the project, and return the exit code."""
    args = build_parser().parse_args(argv)
    workdir = cwd or Path.cwd()

    try:
        settings = Settings.from_env()
        if args.verbose:
            settings = settings.model_copy(update={"verbose": True})

        print_banner("create-tbk-app", "TypeScript Backend Toolkit project generator")

        selections = collect_selections(args)
        interactive = not args.yes and not has_full_config(selections)
        if interactive:
            config = prompts.collect_project_config(
                selections.pop("project_name", None), selections
            )
        else:
            config = config_from_selections(selections)

        config, target = prepare_target(
            config, workdir, interactive=interactive, force=args.force
        )

        print_summary_table(config_summary(config), title="Project configuration")
        for conflict in find_version_conflicts(config):
            print_warning(
                f"{conflict.package}: {conflict.previous} replaced by "
                f"{conflict.replacement} ({conflict.block})"
            )
        if interactive:
            prompts.confirm_generation()

        print_info("Scaffolding project files...")
        generator = ProjectGenerator(config, settings, cwd=workdir)
        asyncio.run(generator.generate(target))
    except (UserCancelled, KeyboardInterrupt):
        print_warning("Setup cancelled.")
        return EXIT_CANCELLED
    except ScaffoldError as exc:
        print_error(f"Error: {exc}")
        return EXIT_ERROR
    except (OSError, ValueError) as exc:
        # filesystem failures and anything a validator rejected late
        print_error(f"Error: {exc}")
        return EXIT_ERROR

    print_success(f"Project {config.project_name} created at {target}")
    print_next_steps(config)
    return EXIT_OK


def main() -> None:
    """CLI entry point for ``create-tbk-app`` and ``python -m tbk_scaffold``."""
    sys.exit(run())


if __name__ == "__main__":
    main()
