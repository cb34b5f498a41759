"""End-to-end generation tests.

These run the real generator (and, once, the real CLI entry point) against
the packaged template tree and verify the produced project directory.
No package manager or git ever runs: every scenario skips both steps.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from tbk_scaffold.cli import EXIT_OK, run
from tbk_scaffold.config import Settings
from tbk_scaffold.errors import TemplateRenderError
from tbk_scaffold.scaffolder.context import create_context
from tbk_scaffold.scaffolder.dependencies import (
    CORE_DEPENDENCIES,
    CORE_DEV_DEPENDENCIES,
    FEATURE_DEPENDENCIES,
)
from tbk_scaffold.scaffolder.generator import ProjectGenerator


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _package(root: Path) -> dict:
    return json.loads((root / "package.json").read_text(encoding="utf-8"))


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------

@pytest.mark.integration
class TestScaffoldEndToEnd:
    async def test_minimal_project(self, tmp_path: Path, minimal_config):
        root = await ProjectGenerator(minimal_config).generate(tmp_path / "demo1")
        package = _package(root)

        assert package["name"] == "demo1"
        assert package["dependencies"] == CORE_DEPENDENCIES
        assert package["devDependencies"] == CORE_DEV_DEPENDENCIES
        assert "seed" not in package["scripts"]
        assert "email:dev" not in package["scripts"]
        assert not (root / "src" / "modules" / "auth").exists()
        assert not (root / ".git").exists()
        assert not (root / "node_modules").exists()

    async def test_full_project(self, tmp_path: Path, full_config):
        root = await ProjectGenerator(full_config).generate(tmp_path / "full-api")
        package = _package(root)

        for block in (
            "auth",
            "security",
            "observability_full",
            "cache_redis",
            "queues",
            "queue_dashboard",
            "storage",
            "email_templates",
            "email_resend",
            "realtime",
        ):
            for name in FEATURE_DEPENDENCIES[block].dependencies:
                assert name in package["dependencies"], (block, name)
            for name in FEATURE_DEPENDENCIES[block].dev_dependencies:
                assert name in package["devDependencies"], (block, name)
        assert "seed" in package["scripts"]
        assert "email:dev" in package["scripts"]

        src = root / "src"
        for relative in (
            "modules/auth/auth.router.ts",
            "modules/auth/session/session.manager.ts",
            "plugins/security/index.ts",
            "plugins/observability/index.ts",
            "plugins/cache/index.ts",
            "queues/index.ts",
            "plugins/bullboard/index.ts",
            "storage/storage.service.ts",
            "email/email.service.ts",
            "plugins/realtime/index.ts",
            "plugins/admin/index.ts",
        ):
            assert (src / relative).is_file(), relative

        env = (root / ".env.example").read_text(encoding="utf-8")
        assert "SESSION_DRIVER=redis" in env
        assert "# Queue Dashboard" in env

    async def test_sessions_without_cache(self, tmp_path: Path, make_config):
        config = make_config("custom", "sessions-api", auth="jwt-sessions", cache="none")
        assert config.session_driver is None
        assert create_context(config).session_driver == "mongo"

        root = await ProjectGenerator(config).generate(tmp_path / "sessions-api")
        dependencies = _package(root)["dependencies"]
        env = (root / ".env.example").read_text(encoding="utf-8")

        assert "SESSION_DRIVER=mongo" in env
        assert "REDIS_URL=" in env
        assert "ioredis" in dependencies
        assert "bullmq" in dependencies
        assert "jsonwebtoken" in dependencies
        assert (root / "src" / "modules" / "auth" / "session" / "session.model.ts").is_file()
        assert not (root / "src" / "plugins" / "cache").exists()

    async def test_render_failure_aborts(self, tmp_path: Path, write_tree, minimal_config):
        templates = write_tree(
            {
                "base/a.ts": "ok",
                "base/b.ts.j2": "{{ undefined_thing }}",
                "base/c.ts": "later",
            }
        )
        generator = ProjectGenerator(minimal_config, Settings(templates_dir=templates))
        target = tmp_path / "demo1"

        with pytest.raises(TemplateRenderError) as excinfo:
            await generator.generate(target)

        assert str(templates / "base" / "b.ts.j2") in str(excinfo.value)
        assert (target / "package.json").exists()
        assert (target / "a.ts").exists()
        assert not (target / "b.ts").exists()
        assert not (target / "c.ts").exists()


@pytest.mark.integration
class TestCommandLine:
    def test_non_interactive_run(self, tmp_path: Path):
        code = run(
            ["cli-api", "--preset", "standard", "--pm", "npm", "--skip-git", "--skip-install", "-y"],
            cwd=tmp_path,
        )

        assert code == EXIT_OK
        package = _package(tmp_path / "cli-api")
        assert package["packageManager"].startswith("npm@")
        assert package["scripts"]["seed"].endswith("scripts/seed.ts")
        assert (tmp_path / "cli-api" / "src" / "modules" / "auth" / "auth.router.ts").is_file()
