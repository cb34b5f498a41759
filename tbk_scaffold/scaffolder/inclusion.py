"""Per-file inclusion rules and the template-area manifest.

``should_include`` decides whether one file of the template tree belongs in
the generated project.  It is a denylist: a file is included unless one of
the rules in ``EXCLUSION_RULES`` matches it and the feature that rule guards
is disabled.  Files under a ``lib`` directory always ship because library
modules carry their own disabled-feature stubs.

The area manifest (``FEATURE_AREAS``, ``MODULE_AREAS``) fixes the order in
which template areas are materialized.  Later areas may overwrite files an
earlier area wrote, so that order is part of the template-tree contract.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import PurePath

from tbk_scaffold.models import TemplateContext

LIB_SEGMENT = "lib"
QUEUE_DASHBOARD_MARKER = "bullboard"


# ---------------------------------------------------------------------------
# Path normalisation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TemplatePath:
    """Lower-cased, ``/``-separated view of a template path."""

    text: str
    directories: tuple[str, ...]

    @classmethod
    def parse(cls, path: str | PurePath) -> "TemplatePath":
        text = str(path).replace("\\", "/").lower()
        segments = [segment for segment in text.split("/") if segment]
        return cls(text=text, directories=tuple(segments[:-1]))

    def under(self, segment: str) -> bool:
        """True if some directory on the path is named *segment*."""
        return segment in self.directories

    def contains(self, marker: str) -> bool:
        """True if *marker* occurs anywhere in the path, file name included."""
        return marker in self.text


# ---------------------------------------------------------------------------
# Exclusion rules
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ExclusionRule:
    """Exclude matching paths unless context flag *requires* is true."""

    name: str
    matches: Callable[[TemplatePath], bool]
    requires: str


def _under(segment: str) -> Callable[[TemplatePath], bool]:
    return lambda path: path.under(segment)


def _contains(marker: str) -> Callable[[TemplatePath], bool]:
    return lambda path: path.contains(marker)


EXCLUSION_RULES: tuple[ExclusionRule, ...] = (
    ExclusionRule("auth", _under("auth"), "auth"),
    ExclusionRule("session", _under("session"), "auth_sessions"),
    ExclusionRule("user", _under("user"), "auth"),
    ExclusionRule("cache", _under("cache"), "cache"),
    ExclusionRule(
        "queues",
        lambda path: path.under("queues") and not path.contains(QUEUE_DASHBOARD_MARKER),
        "queues",
    ),
    ExclusionRule("queue-dashboard", _contains(QUEUE_DASHBOARD_MARKER), "queue_dashboard"),
    ExclusionRule("storage", _under("storage"), "storage"),
    ExclusionRule("email", _under("email"), "email"),
    ExclusionRule("realtime", _contains("realtime"), "realtime"),
    ExclusionRule("admin", _contains("admin"), "admin"),
    ExclusionRule("security", _under("security"), "security"),
)


def should_include(path: str | PurePath, context: TemplateContext) -> bool:
    """Return whether the template file at *path* belongs in the output.

    Args:
        path: Template path, ideally relative to the template root (area
            name first).  Either separator style is accepted; matching is
            case-insensitive.
        context: The run's template context.
    """
    return excluding_rule(path, context) is None


def excluding_rule(path: str | PurePath, context: TemplateContext) -> ExclusionRule | None:
    """Return the first rule that excludes *path*, or ``None`` if it is included."""
    parsed = TemplatePath.parse(path)
    if parsed.under(LIB_SEGMENT):
        return None
    for rule in EXCLUSION_RULES:
        if rule.matches(parsed) and not getattr(context, rule.requires):
            return rule
    return None


# ---------------------------------------------------------------------------
# Area manifest
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TemplateArea:
    """A top-level subtree of the template root and the flag that enables it."""

    directory: str
    enabled_by: str | None = None

    def enabled(self, context: TemplateContext) -> bool:
        return self.enabled_by is None or bool(getattr(context, self.enabled_by))


BASE_AREA = TemplateArea("base")

FEATURE_AREAS: tuple[TemplateArea, ...] = (
    TemplateArea("auth", "auth"),
    TemplateArea("security", "security"),
    TemplateArea("observability", "observability_full"),
    TemplateArea("cache", "cache"),
    TemplateArea("queues", "queues"),
    TemplateArea("bullboard", "queue_dashboard"),
    TemplateArea("storage", "storage"),
    TemplateArea("email", "email"),
    TemplateArea("realtime", "realtime"),
    TemplateArea("admin", "admin"),
)

MODULE_AREAS: tuple[TemplateArea, ...] = (
    TemplateArea("modules/upload", "module_upload"),
    TemplateArea("modules/healthcheck", "module_healthcheck"),
)


def enabled_areas(context: TemplateContext) -> list[TemplateArea]:
    """Return the areas to materialize for *context*, in processing order.

    The base area always comes first, then enabled feature areas, then
    enabled modules, each group in manifest order.
    """
    areas = [BASE_AREA]
    areas.extend(area for area in FEATURE_AREAS if area.enabled(context))
    areas.extend(area for area in MODULE_AREAS if area.enabled(context))
    return areas
