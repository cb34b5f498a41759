"""Main scaffolding orchestrator.

Takes a ``ProjectConfig`` and produces a complete project directory:
synthesized root files, the materialized template tree, and optionally
installed dependencies and an initial git commit.  Steps run strictly in
order; any failure ends the run.
"""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path

from tbk_scaffold.config import Settings
from tbk_scaffold.errors import CommandError, TargetDirectoryError
from tbk_scaffold.models import ProjectConfig, TemplateContext
from tbk_scaffold.utils import (
    directory_has_content,
    empty_directory,
    ensure_dir,
    print_success,
    print_warning,
    run_command,
)

from .config_gen import ConfigFileGenerator
from .context import create_context
from .inclusion import MODULE_AREAS, TemplateArea, enabled_areas
from .materializer import materialize
from .renderer import TemplateRenderer

INITIAL_COMMIT_MESSAGE = "Initial commit from create-tbk-app"

AGENT_COMMANDS_DIR = Path(".claude") / "commands"


class ProjectGenerator:
    """Generates one project from a ``ProjectConfig``.

    The run is:

    1. refuse a non-empty target directory,
    2. write ``package.json``, ``.env.example``, ``.gitignore``, ``README.md``,
    3. materialize the base area, then enabled feature areas, then the
       Claude command files when that agent is selected, then enabled module
       areas (later areas may overwrite earlier files),
    4. install dependencies unless ``skip_install``,
    5. ``git init`` and commit unless ``skip_git``.
    """

    def __init__(
        self,
        config: ProjectConfig,
        settings: Settings | None = None,
        cwd: str | Path | None = None,
    ) -> None:
        self.config = config
        self.settings = settings or Settings()
        self.cwd = Path(cwd) if cwd is not None else Path.cwd()
        self.context: TemplateContext = create_context(config)
        self.renderer = TemplateRenderer()

    # -- Public API --------------------------------------------------------

    async def generate(self, target_dir: str | Path) -> Path:
        """Generate the project into *target_dir*.

        Args:
            target_dir: Directory to create.  It may exist but must be empty.

        Returns:
            The resolved project root.

        Raises:
            TargetDirectoryError: *target_dir* exists and is not empty.
            TemplateRenderError: A template failed to render.
            CommandError: Dependency installation or git failed.
        """
        target = Path(target_dir)
        if await asyncio.to_thread(directory_has_content, target):
            raise TargetDirectoryError(target)

        project_root = await asyncio.to_thread(ensure_dir, target)

        await ConfigFileGenerator(self.config, self.context, self.settings).generate_all(
            project_root
        )
        print_success("Configuration files generated")

        await self.copy_template_files(project_root)
        print_success("Template files copied")

        if not self.config.skip_install:
            await self.install_dependencies(project_root)
            print_success(f"Dependencies installed with {self.config.package_manager.value}")

        if not self.config.skip_git:
            await self.init_git_repository(project_root)
            print_success("Git repository initialized")

        return project_root

    async def copy_template_files(self, project_root: Path) -> list[Path]:
        """Materialize every enabled template area into *project_root*.

        Returns:
            All rendered or copied template paths in write order (a path
            overwritten by a later area appears once per write).  Agent
            command files are not included.
        """
        templates_dir = self.settings.templates_dir
        if not templates_dir.is_dir():
            raise FileNotFoundError(f"Template directory not found: {templates_dir}")

        areas = enabled_areas(self.context)
        written: list[Path] = []
        for area in areas:
            if area not in MODULE_AREAS:
                written.extend(await self._materialize_area(area, project_root))

        if self.context.agent_claude:
            await self.copy_agent_commands(project_root)

        for area in areas:
            if area in MODULE_AREAS:
                written.extend(await self._materialize_area(area, project_root))
        return written

    def agent_command_sources(self) -> list[Path]:
        """Candidate ``.claude/commands`` directories, in lookup order.

        The checkout the template tree lives in comes first, then the
        directory the tool was started from.
        """
        checkout = self.settings.templates_dir.resolve().parent.parent.parent
        return [checkout / AGENT_COMMANDS_DIR, self.cwd / AGENT_COMMANDS_DIR]

    async def copy_agent_commands(self, project_root: Path) -> Path | None:
        """Copy the first existing agent commands directory into the project.

        The target ``.claude/commands`` is emptied first, so it mirrors the
        source exactly.

        Returns:
            The source directory used, or ``None`` when no candidate exists.
        """
        for source in self.agent_command_sources():
            if not source.is_dir():
                continue
            await asyncio.to_thread(_replace_tree, source, project_root / AGENT_COMMANDS_DIR)
            return source
        return None

    async def install_dependencies(self, project_root: Path) -> None:
        """Run ``<package manager> install`` in *project_root*."""
        cmd = [self.config.package_manager.value, "install"]
        await self._run(cmd, project_root, capture=False)

    async def init_git_repository(self, project_root: Path) -> None:
        """Initialise a git repository and create the initial commit."""
        for cmd in (
            ["git", "init"],
            ["git", "add", "."],
            ["git", "commit", "-m", INITIAL_COMMIT_MESSAGE],
        ):
            await self._run(cmd, project_root)

    # -- Internals ---------------------------------------------------------

    async def _run(self, cmd: list[str], cwd: Path, capture: bool = True) -> None:
        returncode, _stdout, stderr = await run_command(
            cmd, cwd=cwd, timeout=self.settings.command_timeout, capture=capture
        )
        if returncode != 0:
            raise CommandError(cmd, returncode, stderr)

    async def _materialize_area(self, area: TemplateArea, project_root: Path) -> list[Path]:
        templates_dir = self.settings.templates_dir
        area_dir = templates_dir / area.directory
        if not area_dir.is_dir():
            print_warning(f"Template area '{area.directory}' not found, skipping")
            return []
        return await materialize(
            area_dir,
            project_root,
            self.context,
            renderer=self.renderer,
            templates_root=templates_dir,
            verbose=self.settings.verbose,
        )


def _replace_tree(source: Path, target: Path) -> None:
    if target.exists():
        empty_directory(target)
    shutil.copytree(source, target, dirs_exist_ok=True)
