"""tbk-scaffold scaffolder -- resolves features and materializes projects.

This package takes a ``ProjectConfig`` and produces a ready-to-run
TypeScript/Express backend: a ``package.json`` with the dependencies the
selected features need, ``.env.example``, ``.gitignore``, ``README.md`` and
the source tree rendered from ``templates/``.

Quick usage::

    from tbk_scaffold.presets import build_config
    from tbk_scaffold.scaffolder import ProjectGenerator

    config = build_config("my-api", "standard", skip_install=True)
    generator = ProjectGenerator(config)
    project_path = await generator.generate("./my-api")
"""

from tbk_scaffold.scaffolder.context import create_context
from tbk_scaffold.scaffolder.dependencies import generate_scripts, resolve_dependencies
from tbk_scaffold.scaffolder.generator import ProjectGenerator
from tbk_scaffold.scaffolder.inclusion import should_include
from tbk_scaffold.scaffolder.materializer import materialize
from tbk_scaffold.scaffolder.renderer import TemplateRenderer, render_template

__all__ = [
    "ProjectGenerator",
    "TemplateRenderer",
    "create_context",
    "generate_scripts",
    "materialize",
    "render_template",
    "resolve_dependencies",
    "should_include",
]
