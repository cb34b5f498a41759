"""Preset bundles and construction of a ``ProjectConfig``.

``build_config`` turns a sparse selection (preset name plus any overrides
coming from CLI flags, a config file, or prompts) into a validated
``ProjectConfig``.  Named presets fix every feature field; only the
project identity and run-level options may vary.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from tbk_scaffold.errors import ConfigurationError
from tbk_scaffold.models import (
    FEATURE_FIELDS,
    AuthType,
    CacheProvider,
    EmailProvider,
    ObservabilityLevel,
    PresetConfig,
    PresetFeatures,
    PresetType,
    ProjectConfig,
    SessionDriver,
    StorageProvider,
)
from tbk_scaffold.utils import to_snake_case


# ---------------------------------------------------------------------------
# Preset bundles
# ---------------------------------------------------------------------------

PRESETS: dict[PresetType, PresetConfig] = {
    PresetType.MINIMAL: PresetConfig(
        name="Minimal",
        description="Bare-bones API with core features only (Express, MongoDB, MagicRouter)",
        config=PresetFeatures(
            auth=AuthType.NONE,
            cache=CacheProvider.NONE,
            queues=False,
            storage=StorageProvider.NONE,
            email=EmailProvider.NONE,
            realtime=False,
            admin=False,
            queue_dashboard=False,
            observability=ObservabilityLevel.BASIC,
        ),
    ),
    PresetType.STANDARD: PresetConfig(
        name="Standard",
        description="Production-ready REST API with auth, security, and full observability",
        config=PresetFeatures(
            auth=AuthType.JWT,
            cache=CacheProvider.MEMORY,
            queues=False,
            storage=StorageProvider.NONE,
            email=EmailProvider.NONE,
            realtime=False,
            admin=False,
            queue_dashboard=False,
            observability=ObservabilityLevel.FULL,
        ),
    ),
    PresetType.FULL: PresetConfig(
        name="Full-Featured",
        description=(
            "Complete backend with all features "
            "(auth, cache, queues, storage, email, realtime, admin)"
        ),
        config=PresetFeatures(
            auth=AuthType.JWT_SESSIONS,
            session_driver=SessionDriver.REDIS,
            cache=CacheProvider.REDIS,
            queues=True,
            storage=StorageProvider.S3,
            email=EmailProvider.RESEND,
            realtime=True,
            admin=True,
            queue_dashboard=True,
            observability=ObservabilityLevel.FULL,
        ),
    ),
}

RUN_FIELDS: tuple[str, ...] = (
    "project_name",
    "preset",
    "modules",
    "agents",
    "package_manager",
    "skip_git",
    "skip_install",
)

# Config-file keys that camelCase -> snake_case conversion gets wrong.
_KEY_ALIASES: dict[str, str] = {
    "googleOAuth": "google_oauth",
    "googleOauth": "google_oauth",
    "pm": "package_manager",
    "name": "project_name",
}


def get_preset_choices() -> list[tuple[str, str]]:
    """Return ``(value, label)`` pairs for every preset including ``custom``."""
    choices = [
        (preset.value, f"{bundle.name} - {bundle.description}")
        for preset, bundle in PRESETS.items()
    ]
    choices.append((PresetType.CUSTOM.value, "Custom - Choose your own features"))
    return choices


# ---------------------------------------------------------------------------
# Config construction
# ---------------------------------------------------------------------------

def build_config(
    project_name: str,
    preset: PresetType | str | None = None,
    overrides: Mapping[str, Any] | None = None,
    **run_options: Any,
) -> ProjectConfig:
    """Build and validate a ``ProjectConfig``.

    Args:
        project_name: Name of the project (npm package + directory name).
        preset: Preset name.  ``None`` means ``custom``.
        overrides: Feature selections keyed by ``PresetFeatures`` field
            name.  ``None`` values are treated as "not supplied".  For a
            named preset every supplied value must agree with the bundle.
        **run_options: ``modules``, ``agents``, ``package_manager``, ``skip_git``,
            ``skip_install``; ``None`` values are dropped.

    Returns:
        A validated ``ProjectConfig``.

    Raises:
        ConfigurationError: On unknown fields, values that contradict a named
            preset, or anything pydantic rejects.
    """
    supplied = {k: v for k, v in (overrides or {}).items() if v is not None}
    unknown = sorted(set(supplied) - set(FEATURE_FIELDS))
    if unknown:
        raise ConfigurationError(f"Unknown feature option(s): {', '.join(unknown)}")

    bad_run = sorted(set(run_options) - set(RUN_FIELDS))
    if bad_run:
        raise ConfigurationError(f"Unknown option(s): {', '.join(bad_run)}")
    run = {k: v for k, v in run_options.items() if v is not None}

    try:
        preset_type = PresetType(preset) if preset is not None else PresetType.CUSTOM
        if preset_type == PresetType.CUSTOM:
            features = PresetFeatures(**supplied)
        else:
            features = PRESETS[preset_type].config
            merged = PresetFeatures(**{**features.model_dump(), **supplied})
            _check_against_preset(preset_type, features, merged, supplied)
        return ProjectConfig(
            project_name=project_name,
            preset=preset_type,
            **features.model_dump(),
            **run,
        )
    except ValidationError as exc:
        raise ConfigurationError(_format_validation_error(exc)) from exc
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc


def config_from_mapping(data: Mapping[str, Any]) -> ProjectConfig:
    """Build a ``ProjectConfig`` from a loosely-keyed mapping.

    Accepts snake_case or camelCase keys (``projectName``, ``sessionDriver``,
    ``packageManager``, ...), as found in hand-written config files.
    """
    normalised = normalise_keys(data)
    project_name = normalised.pop("project_name", None)
    if not project_name:
        raise ConfigurationError("Project name is required.")
    preset = normalised.pop("preset", None)
    run_options = {k: normalised.pop(k) for k in RUN_FIELDS if k in normalised}
    return build_config(str(project_name), preset, normalised, **run_options)


def normalise_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    """Map camelCase and kebab-case keys onto ``ProjectConfig`` field names."""
    normalised: dict[str, Any] = {}
    for key, value in data.items():
        name = _KEY_ALIASES.get(key, to_snake_case(key))
        normalised[name] = value
    return normalised


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML or JSON project config file into a dict.

    Raises:
        ConfigurationError: If the file is missing, unparsable, or not a mapping.
    """
    file_path = Path(path)
    try:
        raw = file_path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Config file not found: {file_path}") from exc

    try:
        if file_path.suffix.lower() == ".json":
            data = json.loads(raw)
        else:
            data = yaml.safe_load(raw)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Could not parse {file_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"{file_path} must contain a mapping at the top level")
    return data


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _check_against_preset(
    preset: PresetType,
    bundle: PresetFeatures,
    merged: PresetFeatures,
    supplied: Mapping[str, Any],
) -> None:
    """Reject supplied feature values that differ from the preset bundle."""
    conflicts = [
        name for name in supplied
        if getattr(merged, name) != getattr(bundle, name)
    ]
    if conflicts:
        raise ConfigurationError(
            f'Preset "{preset.value}" fixes {", ".join(sorted(conflicts))}; '
            'use --preset custom to choose features individually.'
        )


def _format_validation_error(exc: ValidationError) -> str:
    """Flatten a pydantic ``ValidationError`` into one readable line."""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        message = error.get("msg", "invalid value")
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages)
