"""Jinja2 template rendering for project scaffolding.

Provides the ``TemplateRenderer`` used by the materializer.  Templates see
only the fields of a ``TemplateContext`` plus a handful of predicate helpers
and casing filters, so every templating decision is a pure function of the
resolved configuration.  Undefined names are errors, not empty strings.
"""

from __future__ import annotations

from typing import Any

from jinja2 import Environment, StrictUndefined

from tbk_scaffold.models import TemplateContext
from tbk_scaffold.utils import to_camel_case, to_kebab_case, to_pascal_case, to_snake_case

# Files ending in this suffix are rendered; everything else is copied verbatim.
TEMPLATE_SUFFIX = ".j2"


# ---------------------------------------------------------------------------
# Predicate helpers
# ---------------------------------------------------------------------------

def eq(a: Any, b: Any) -> bool:
    """``{% if eq(session_driver, "redis") %}``"""
    return a == b


def or_(*values: Any) -> bool:
    """True if at least one argument is truthy."""
    return any(bool(value) for value in values)


def and_(*values: Any) -> bool:
    """True if every argument is truthy."""
    return all(bool(value) for value in values)


def not_(value: Any) -> bool:
    return not value


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders template text against a ``TemplateContext``.

    The underlying environment uses ``StrictUndefined`` so a template that
    references a field the context does not define fails loudly instead of
    rendering an empty string.
    """

    def __init__(self) -> None:
        self.env = Environment(
            undefined=StrictUndefined,
            autoescape=False,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.globals.update(eq=eq, or_=or_, and_=and_, not_=not_)
        self.env.filters["kebab_case"] = to_kebab_case
        self.env.filters["pascal_case"] = to_pascal_case
        self.env.filters["camel_case"] = to_camel_case
        self.env.filters["snake_case"] = to_snake_case

    def render_string(
        self, template_string: str, context: TemplateContext | dict[str, Any]
    ) -> str:
        """Render *template_string* with the fields of *context*.

        Raises:
            jinja2.TemplateSyntaxError: If the text is not a valid template.
            jinja2.UndefinedError: If the template uses an unknown name.
        """
        variables = (
            context.as_template_vars()
            if isinstance(context, TemplateContext)
            else dict(context)
        )
        template = self.env.from_string(template_string)
        return template.render(**variables)


_default_renderer: TemplateRenderer | None = None


def render_template(template_string: str, context: TemplateContext) -> str:
    """Render with a shared module-level ``TemplateRenderer``."""
    global _default_renderer
    if _default_renderer is None:
        _default_renderer = TemplateRenderer()
    return _default_renderer.render_string(template_string, context)


def is_template(name: str) -> bool:
    """Return whether a file name carries the reserved template suffix."""
    return name.endswith(TEMPLATE_SUFFIX)


def output_name(name: str) -> str:
    """Strip the template suffix from *name*, if present."""
    return name[: -len(TEMPLATE_SUFFIX)] if is_template(name) else name
