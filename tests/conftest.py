"""Shared pytest fixtures for the tbk-scaffold test suite.

Provides reusable fixtures for:
- Building validated ``ProjectConfig`` objects (presets and custom)
- Derived ``TemplateContext`` objects
- Temporary template trees for materializer tests
- Settings pointing at the shipped template tree
- A mocked ``run_command`` so no package manager or git ever runs
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, patch

import pytest

from tbk_scaffold.config import DEFAULT_TEMPLATES_DIR, Settings
from tbk_scaffold.models import ProjectConfig, TemplateContext
from tbk_scaffold.presets import build_config
from tbk_scaffold.scaffolder.context import create_context


# ---------------------------------------------------------------------------
# Configs & contexts
# ---------------------------------------------------------------------------

@pytest.fixture
def make_config() -> Callable[..., ProjectConfig]:
    """Factory: ``make_config(preset=None, name="demo", **features)``.

    Feature keyword arguments go to ``build_config`` as overrides; the run
    skips install and git unless told otherwise.
    """

    def _make(
        preset: str | None = None,
        name: str = "demo",
        *,
        modules: list[str] | None = None,
        agents: list[str] | None = None,
        package_manager: str | None = None,
        skip_git: bool = True,
        skip_install: bool = True,
        **features: Any,
    ) -> ProjectConfig:
        return build_config(
            name,
            preset,
            features,
            modules=modules,
            agents=agents,
            package_manager=package_manager,
            skip_git=skip_git,
            skip_install=skip_install,
        )

    return _make


@pytest.fixture
def minimal_config(make_config) -> ProjectConfig:
    return make_config("minimal", "demo1")


@pytest.fixture
def standard_config(make_config) -> ProjectConfig:
    return make_config("standard", "std-api")


@pytest.fixture
def full_config(make_config) -> ProjectConfig:
    return make_config("full", "full-api")


@pytest.fixture
def make_context(make_config) -> Callable[..., TemplateContext]:
    """Factory with the same signature as ``make_config`` returning a context."""

    def _make(*args: Any, **kwargs: Any) -> TemplateContext:
        return create_context(make_config(*args, **kwargs))

    return _make


# ---------------------------------------------------------------------------
# Template trees
# ---------------------------------------------------------------------------

@pytest.fixture
def shipped_templates() -> Path:
    """The template tree packaged with tbk_scaffold."""
    assert DEFAULT_TEMPLATES_DIR.is_dir(), f"templates missing at {DEFAULT_TEMPLATES_DIR}"
    return DEFAULT_TEMPLATES_DIR


@pytest.fixture
def write_tree(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    """Factory: write ``{relative_path: content}`` under ``tmp_path/templates``."""

    def _write(files: dict[str, str]) -> Path:
        root = tmp_path / "templates"
        for relative, content in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        root.mkdir(exist_ok=True)
        return root

    return _write


@pytest.fixture
def settings() -> Settings:
    return Settings()


# ---------------------------------------------------------------------------
# Subprocesses
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_run_command():
    """Patch the generator's ``run_command`` to succeed without running anything."""
    with patch(
        "tbk_scaffold.scaffolder.generator.run_command",
        new_callable=AsyncMock,
        return_value=(0, "", ""),
    ) as mocked:
        yield mocked
