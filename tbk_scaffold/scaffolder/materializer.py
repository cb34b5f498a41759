"""Directory materialization.

Walks one area of the template tree and reproduces it under the target
directory: files rejected by the inclusion filter are skipped, ``*.j2``
templates are rendered and written without their suffix, and everything else
is copied byte-for-byte.

The walk is strictly sequential and in sorted name order.  The first template
that fails to render aborts the whole call with ``TemplateRenderError``;
files written before the failure stay on disk and nothing after it is
written.
"""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path

from tbk_scaffold.errors import TemplateRenderError
from tbk_scaffold.models import TemplateContext
from tbk_scaffold.utils import print_info, write_text_file

from .inclusion import excluding_rule
from .renderer import TemplateRenderer, is_template, output_name


async def materialize(
    source_root: str | Path,
    target_root: str | Path,
    context: TemplateContext,
    *,
    renderer: TemplateRenderer | None = None,
    templates_root: str | Path | None = None,
    verbose: bool = False,
) -> list[Path]:
    """Materialize the tree at *source_root* into *target_root*.

    Args:
        source_root: Template area to walk (e.g. ``templates/auth``).
        target_root: Project directory to write into.  Created lazily.
        context: Template context for inclusion and rendering.
        renderer: Renderer to use; a fresh ``TemplateRenderer`` by default.
        templates_root: Directory the inclusion filter sees paths relative
            to.  Defaults to the parent of *source_root*, so the area name is
            the first path segment.
        verbose: Report every skipped and written file on the console.

    Returns:
        Written paths, in write order.

    Raises:
        TemplateRenderError: A template failed to render.
        OSError: Writing or copying a file failed.
    """
    source = Path(source_root)
    root = Path(templates_root) if templates_root is not None else source.parent
    written: list[Path] = []
    await _materialize_directory(
        source,
        Path(target_root),
        context,
        renderer or TemplateRenderer(),
        root,
        written,
        verbose,
    )
    return written


async def _materialize_directory(
    source_dir: Path,
    target_dir: Path,
    context: TemplateContext,
    renderer: TemplateRenderer,
    templates_root: Path,
    written: list[Path],
    verbose: bool,
) -> None:
    entries = await asyncio.to_thread(_sorted_entries, source_dir)

    for entry in entries:
        if entry.is_dir():
            await _materialize_directory(
                entry,
                target_dir / entry.name,
                context,
                renderer,
                templates_root,
                written,
                verbose,
            )
            continue

        rule = excluding_rule(_filter_path(entry, templates_root), context)
        if rule is not None:
            if verbose:
                print_info(f"skip {entry} ({rule.name} disabled)")
            continue

        if is_template(entry.name):
            destination = target_dir / output_name(entry.name)
            try:
                text = await asyncio.to_thread(entry.read_text, encoding="utf-8")
                rendered = renderer.render_string(text, context)
            except Exception as exc:
                raise TemplateRenderError(entry, exc) from exc
            await asyncio.to_thread(write_text_file, destination, rendered)
        else:
            destination = target_dir / entry.name
            await asyncio.to_thread(_copy_file, entry, destination)

        written.append(destination)
        if verbose:
            print_info(f"write {destination}")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _sorted_entries(directory: Path) -> list[Path]:
    return sorted(directory.iterdir(), key=lambda p: p.name)


def _filter_path(path: Path, templates_root: Path) -> Path:
    """Path handed to the inclusion filter: relative to the template root."""
    try:
        return path.relative_to(templates_root)
    except ValueError:
        return path


def _copy_file(source: Path, destination: Path) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy(source, destination)
