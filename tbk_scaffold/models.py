"""Pydantic v2 models describing a generation request.

``ProjectConfig`` is the single source of truth for one scaffolding run.
``PresetConfig`` holds the fixed feature bundles users can pick instead of
configuring every field, and ``TemplateContext`` is the flat projection that
drives file inclusion and template rendering.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from tbk_scaffold.utils import validate_project_name


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class PresetType(str, Enum):
    """Named feature bundle, or ``custom`` for a field-by-field selection."""
    MINIMAL = "minimal"
    STANDARD = "standard"
    FULL = "full"
    CUSTOM = "custom"


class AuthType(str, Enum):
    """Authentication mode. ``jwt-sessions`` adds server-side session tracking."""
    NONE = "none"
    JWT = "jwt"
    JWT_SESSIONS = "jwt-sessions"


class SessionDriver(str, Enum):
    """Where sessions are stored when auth is ``jwt-sessions``."""
    MONGO = "mongo"
    REDIS = "redis"


class CacheProvider(str, Enum):
    NONE = "none"
    MEMORY = "memory"
    REDIS = "redis"


class StorageProvider(str, Enum):
    NONE = "none"
    LOCAL = "local"
    S3 = "s3"
    R2 = "r2"


class EmailProvider(str, Enum):
    NONE = "none"
    RESEND = "resend"
    MAILGUN = "mailgun"
    SMTP = "smtp"


class ObservabilityLevel(str, Enum):
    BASIC = "basic"
    FULL = "full"


class PackageManager(str, Enum):
    PNPM = "pnpm"
    NPM = "npm"
    YARN = "yarn"


class ModuleId(str, Enum):
    """Optional business modules copied from ``templates/modules/<id>``."""
    UPLOAD = "upload"
    HEALTHCHECK = "healthcheck"


class AgentId(str, Enum):
    """AI coding agents / IDEs the generated project is prepared for."""
    CLAUDE = "claude"
    CURSOR = "cursor"
    OTHER = "other"


# ---------------------------------------------------------------------------
# Configuration models
# ---------------------------------------------------------------------------

class PresetFeatures(BaseModel):
    """Every feature selection of a project, without identity or run flags."""

    model_config = ConfigDict(frozen=True)

    auth: AuthType = Field(default=AuthType.NONE)
    session_driver: Optional[SessionDriver] = Field(
        default=None, description="Only meaningful when auth is jwt-sessions"
    )
    google_oauth: bool = Field(default=False)
    cache: CacheProvider = Field(default=CacheProvider.NONE)
    queues: bool = Field(default=False, description="Background jobs (BullMQ)")
    queue_dashboard: bool = Field(
        default=False, description="Only effective when queues is enabled"
    )
    storage: StorageProvider = Field(default=StorageProvider.NONE)
    email: EmailProvider = Field(default=EmailProvider.NONE)
    realtime: bool = Field(default=False)
    admin: bool = Field(default=False)
    observability: ObservabilityLevel = Field(default=ObservabilityLevel.BASIC)


FEATURE_FIELDS: tuple[str, ...] = tuple(PresetFeatures.model_fields)


class PresetConfig(BaseModel):
    """Immutable named bundle of feature selections."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Display name")
    description: str = Field(..., description="One-line summary shown in prompts")
    config: PresetFeatures


class ProjectConfig(PresetFeatures):
    """A fully-populated generation request.

    Feature fields are inherited from :class:`PresetFeatures`; the fields
    declared here identify the project and control the run itself.
    """

    model_config = ConfigDict(frozen=False)

    project_name: str = Field(..., description="npm package name and target directory")
    preset: PresetType = Field(default=PresetType.CUSTOM)
    modules: list[ModuleId] = Field(default_factory=list)
    agents: list[AgentId] = Field(
        default_factory=list, description="Agents whose command files are copied in"
    )
    package_manager: PackageManager = Field(default=PackageManager.PNPM)
    skip_git: bool = Field(default=False)
    skip_install: bool = Field(default=False)

    @field_validator("project_name")
    @classmethod
    def _check_project_name(cls, value: str) -> str:
        error = validate_project_name(value)
        if error:
            raise ValueError(f"Invalid project name: {error}")
        return value

    @field_validator("modules", "agents", mode="before")
    @classmethod
    def _split_comma_list(cls, value: Any) -> Any:
        # config files may say ``agents: claude,cursor``
        if isinstance(value, str):
            return [item.strip().lower() for item in value.split(",") if item.strip()]
        return value

    @field_validator("modules", "agents")
    @classmethod
    def _dedupe(cls, value: list[Any]) -> list[Any]:
        return list(dict.fromkeys(value))

    @model_validator(mode="after")
    def _check_module_requirements(self) -> "ProjectConfig":
        if ModuleId.UPLOAD in self.modules and self.storage == StorageProvider.NONE:
            raise ValueError(
                "The upload module requires a storage provider "
                "(local, s3, or r2)."
            )
        return self

    def features(self) -> PresetFeatures:
        """Return just the feature selections of this config."""
        return PresetFeatures(**{name: getattr(self, name) for name in FEATURE_FIELDS})


class TemplateContext(BaseModel):
    """Flat, derived projection of a ``ProjectConfig``.

    Built once per run by :func:`tbk_scaffold.scaffolder.context.create_context`
    and never mutated.  Consumed by the inclusion filter and the renderer.
    """

    model_config = ConfigDict(frozen=True)

    project_name: str
    project_name_kebab: str
    project_name_pascal: str
    project_name_camel: str

    auth: bool
    auth_jwt: bool
    auth_sessions: bool
    auth_google_oauth: bool
    session_driver: Optional[str]

    cache: bool
    cache_memory: bool
    cache_redis: bool

    queues: bool
    queue_dashboard: bool

    storage: bool
    storage_local: bool
    storage_s3: bool
    storage_r2: bool
    storage_provider: Optional[str]

    email: bool
    email_resend: bool
    email_mailgun: bool
    email_smtp: bool
    email_provider: Optional[str]

    realtime: bool
    admin: bool

    observability_basic: bool
    observability_full: bool

    security: bool

    module_upload: bool
    module_healthcheck: bool

    agent_claude: bool
    agent_cursor: bool
    agent_other: bool

    preset: str
    package_manager: str

    def as_template_vars(self) -> dict[str, Any]:
        """Return the context as a plain dict for template rendering."""
        return self.model_dump(mode="json")
